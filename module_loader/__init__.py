# Derive the package version from installed distribution metadata when
# available. A bare source checkout falls back to a local dev version string.
try:
    from importlib.metadata import version, PackageNotFoundError
    try:
        __version__ = version("module-loader")
    except PackageNotFoundError:
        __version__ = "0.0.0+local"
except Exception:
    __version__ = "0.0.0+local"

from module_loader.core.config import LoaderConfig, settings
from module_loader.runtime.errors import (
    InstallerMissing,
    InterpreterPathUnavailable,
    ModuleLoaderError,
    UsageError,
)
from module_loader.runtime.loader import LoadReport, ModuleLoader, use
from module_loader.runtime.requests import FailureKind, LoadFailure, ModuleRequest

__all__ = [
    "__version__",
    "FailureKind",
    "InstallerMissing",
    "InterpreterPathUnavailable",
    "LoadFailure",
    "LoadReport",
    "LoaderConfig",
    "ModuleLoader",
    "ModuleLoaderError",
    "ModuleRequest",
    "UsageError",
    "settings",
    "use",
]
