from __future__ import annotations


class ModuleLoaderError(Exception):
    """Base class for fatal loader errors."""


class UsageError(ModuleLoaderError):
    """Raised when a bulk load is handed a single non-scalar argument."""


class InstallerMissing(ModuleLoaderError):
    """Raised when auto-install is on but the installer executable is absent."""

    def __init__(self, installer: str, path: str | None = None) -> None:
        self.installer = installer
        self.path = path
        super().__init__(
            f"Cannot fetch modules if {installer} is not installed"
            + (f" (looked for {path})" if path else "")
            + f". Please install {installer} next to your Python interpreter then re-run"
        )


class InterpreterPathUnavailable(ModuleLoaderError):
    """Raised when the running interpreter's path cannot be determined."""

    def __init__(self) -> None:
        super().__init__("Could not get Python binary path")
