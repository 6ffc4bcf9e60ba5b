"""
Harness export: translate an agent specification into runtime-specific files.
"""

from agentstories.harness.base import (
    HarnessAdapter,
    HarnessAdapterInfo,
    HarnessCompatibility,
    HarnessOutput,
    TryItApiConfig,
    TryItCliConfig,
    TryItConfig,
    TryItUrlConfig,
)
from agentstories.harness.registry import (
    HarnessExportResult,
    HarnessRegistry,
    create_default_registry,
)

__all__ = [
    "HarnessAdapter",
    "HarnessAdapterInfo",
    "HarnessCompatibility",
    "HarnessExportResult",
    "HarnessOutput",
    "HarnessRegistry",
    "TryItApiConfig",
    "TryItCliConfig",
    "TryItConfig",
    "TryItUrlConfig",
    "create_default_registry",
]
