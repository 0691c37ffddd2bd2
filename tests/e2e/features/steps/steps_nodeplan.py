from behave import given, when, then
import json
import os
import subprocess
import sys
import tempfile
import uuid
from pathlib import Path

def find_project_root(start: Path) -> Path:
    cur = start
    for _ in range(10):
        if (cur / "pyproject.toml").exists() or (cur / "src").exists():
            return cur
        cur = cur.parent
    return start.parents[4]

PROJECT_ROOT = find_project_root(Path(__file__).resolve())
SRC_ENTRY = PROJECT_ROOT / "src" / "nodeplan.py"
ARTIFACTS = PROJECT_ROOT / "tests" / "e2e" / "artifacts"

def _ensure_artifacts():
    ARTIFACTS.mkdir(parents=True, exist_ok=True)
    return ARTIFACTS

def _unique_name(prefix, ext):
    return f"{prefix}-{uuid.uuid4().hex[:8]}.{ext}"

def _resolve_placeholder(val, context):
    # Map placeholders to generated paths (idempotent within a scenario)
    if val == "<json_path>":
        if getattr(context, "json_path", None):
            return context.json_path
        context.json_path = str(_ensure_artifacts() / _unique_name("plan", "json"))
        return context.json_path
    if val == "<tmp_dir>":
        return getattr(context, "tmp_dir")
    return val

def _load_plan(context, path_key):
    path = _resolve_placeholder(path_key, context)
    return json.loads(Path(path).read_text(encoding="utf-8"))

@given("a temp directory with package.json:")
def step_temp_pkgjson(context):
    tmp_dir = Path(tempfile.mkdtemp(prefix="nodeplan-"))
    (tmp_dir / "package.json").write_text(context.text, encoding="utf-8")
    context.tmp_dir = str(tmp_dir)

@given("an empty temp directory")
def step_empty_temp_dir(context):
    context.tmp_dir = tempfile.mkdtemp(prefix="nodeplan-")

@given('the temp directory contains file "{name}":')
def step_temp_file(context, name):
    path = Path(context.tmp_dir) / name
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(context.text, encoding="utf-8")

@when("I run nodeplan with arguments:")
def step_run_nodeplan(context):
    args = []
    for row in context.table:
        arg = row["arg"].strip()
        val = row["value"].strip()
        # Interpret boolean flags passed as "true"
        if val.lower() == "true":
            args.append(arg)
        else:
            args.extend([arg, _resolve_placeholder(val, context)])

    env = os.environ.copy()
    env["PYTHONPATH"] = f"{PROJECT_ROOT / 'src'}:" + env.get("PYTHONPATH", "")

    context.proc = subprocess.run(
        [sys.executable, str(SRC_ENTRY)] + args,
        cwd=str(PROJECT_ROOT),
        text=True,
        capture_output=True,
        env=env,
    )

@then("the process exits with code {code:d}")
def step_exit_code(context, code):
    assert context.proc.returncode == code, f"Expected {code}, got {context.proc.returncode}\nSTDOUT:\n{context.proc.stdout}\nSTDERR:\n{context.proc.stderr}"

@then('stdout is empty or whitespace only')
def step_stdout_quiet(context):
    assert context.proc.stdout.strip() == "", f"Expected empty stdout, got:\n{context.proc.stdout}"

@then('the plan at "{path_key}" has phase "{phase}" with:')
def step_plan_phase_fields(context, path_key, phase):
    plan = _load_plan(context, path_key)
    record = next((p for p in plan["phases"] if p.get("name") == phase), None)
    assert record is not None, f"No phase {phase} in {plan}"
    for row in context.table:
        field = row["field"].strip()
        expected = [v.strip() for v in row["expected"].split(",") if v.strip()]
        assert record.get(field) == expected, f"Field {field} expected {expected}, got {record.get(field)}"

@then('the plan at "{path_key}" has start command "{cmd}"')
def step_plan_start(context, path_key, cmd):
    plan = _load_plan(context, path_key)
    assert plan["start"] == {"cmd": cmd}, f"Expected start {cmd}, got {plan['start']}"

@then('the plan at "{path_key}" has no start command')
def step_plan_no_start(context, path_key):
    plan = _load_plan(context, path_key)
    assert plan["start"] is None, f"Expected no start command, got {plan['start']}"
