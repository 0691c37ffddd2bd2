"""Language providers, in detection order."""

from .base import Provider
from .node import NodeProvider

PROVIDERS = (NodeProvider(),)

__all__ = [
    "Provider",
    "NodeProvider",
    "PROVIDERS",
]
