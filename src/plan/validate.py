"""JSON Schema validation for manifests read from disk and plans handed out.

Wraps jsonschema Draft7 validation and raises SchemaError on the first
problem, with the JSON path of the offending value in the message.
"""

from __future__ import annotations

from typing import Any, Dict

from jsonschema import Draft7Validator


class SchemaError(ValueError):
    """Raised when data fails to validate against a provided schema."""


_STRING_MAP = {
    "type": ["object", "null"],
    "additionalProperties": {"type": "string"},
}

_OPTIONAL_STRING = {"type": ["string", "null"]}

MANIFEST_SCHEMA: Dict[str, Any] = {
    "$schema": "http://json-schema.org/draft-07/schema#",
    "type": "object",
    "properties": {
        "name": _OPTIONAL_STRING,
        "main": _OPTIONAL_STRING,
        "type": _OPTIONAL_STRING,
        "scripts": _STRING_MAP,
        "engines": _STRING_MAP,
        "dependencies": _STRING_MAP,
        "devDependencies": _STRING_MAP,
    },
}

_STRING_LIST = {"type": "array", "items": {"type": "string"}}

PLAN_SCHEMA: Dict[str, Any] = {
    "$schema": "http://json-schema.org/draft-07/schema#",
    "type": "object",
    "required": ["providers", "variables", "phases", "start"],
    "properties": {
        "providers": _STRING_LIST,
        "variables": {"type": "object", "additionalProperties": {"type": "string"}},
        "phases": {
            "type": "array",
            "items": {
                "type": "object",
                "required": ["name", "cmds"],
                "properties": {
                    "name": {"type": "string"},
                    "dependsOn": _STRING_LIST,
                    "cmds": _STRING_LIST,
                    "nixPkgs": _STRING_LIST,
                    "nixLibs": _STRING_LIST,
                    "aptPkgs": _STRING_LIST,
                    "nixOverlays": _STRING_LIST,
                    "cacheDirectories": _STRING_LIST,
                    "paths": _STRING_LIST,
                },
            },
        },
        "start": {
            "oneOf": [
                {"type": "null"},
                {
                    "type": "object",
                    "required": ["cmd"],
                    "properties": {"cmd": {"type": "string"}},
                },
            ]
        },
    },
}


def _validate(schema: Dict[str, Any], data: Any, what: str) -> None:
    validator = Draft7Validator(schema)
    errs = sorted(validator.iter_errors(data), key=lambda e: [str(p) for p in e.path])
    if errs:
        first = errs[0]
        path = "/".join([str(p) for p in first.path])
        raise SchemaError(f"Invalid {what} at '{path}': {first.message}")


def validate_manifest(data: Any, source: str = "package.json") -> None:
    """Strictly validate a decoded package.json; raise SchemaError on the first problem."""
    _validate(MANIFEST_SCHEMA, data, source)


def validate_plan(data: Dict[str, Any]) -> None:
    """Strictly validate a serialized plan; raise SchemaError on the first problem."""
    _validate(PLAN_SCHEMA, data, "plan")
