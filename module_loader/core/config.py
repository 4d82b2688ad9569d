"""Central configuration.

Loader behaviour is driven by a `LoaderConfig` handed to each `ModuleLoader`.
The process-wide `settings` instance is built from the environment so scripts
can switch triggers on without touching code. A `config.env` file in the
working directory (or the file named by MODULE_LOADER_CONFIG_FILE) is loaded
first; real environment variables win over the file.

Env vars:
  MODULE_LOADER_INSTALL_MISSING - hand missing modules to the installer
  MODULE_LOADER_COMPLAIN        - short diagnostic per failed module
  MODULE_LOADER_MOAN            - complain + full traceback
  MODULE_LOADER_INSTALLER       - installer executable name (default pip)
  MODULE_LOADER_DETACH          - run the installer in a detached process
  MODULE_LOADER_LOG_LEVEL       - logging level for configure_logging()
"""
from __future__ import annotations
from pathlib import Path
import os
from typing import Dict, List
from dotenv import load_dotenv
from pydantic import BaseModel, Field

_diagnostics: list[str] = []


def _load_env_file() -> None:
    candidates = []
    cfg_override = os.getenv('MODULE_LOADER_CONFIG_FILE')
    if cfg_override:
        candidates.append(Path(cfg_override))
    candidates.append(Path.cwd() / 'config.env')
    for p in candidates:
        try:
            if p.exists():
                load_dotenv(str(p), override=False)
                _diagnostics.append(f"loaded_env_file={p}")
                break
        except OSError as e:  # pragma: no cover
            _diagnostics.append(f"env_file_failed path={p} err={e}")


_load_env_file()


def _env_flag(name: str, default: bool = False) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in {"1", "true", "yes", "on"}


class LoaderConfig(BaseModel):
    # Triggers, all off by default. Inline option tokens flip them per loader.
    install_missing: bool = False
    complain: bool = False
    moan: bool = False

    installer_name: str = 'pip'
    installer_args: List[str] = Field(default_factory=lambda: ['install'])
    # Env var naming the running interpreter; sys.executable when unset
    interpreter_env_var: str = '_'
    detach_installer: bool = True
    # Modules that resolved but blew up during import still go to the installer
    install_broken_modules: bool = True
    # import name -> distribution name, e.g. {"yaml": "PyYAML"}
    package_aliases: Dict[str, str] = Field(default_factory=dict)

    log_level: str = 'WARNING'

    @classmethod
    def from_env(cls) -> "LoaderConfig":
        """Build a config from MODULE_LOADER_* environment variables."""
        values: dict = {
            'install_missing': _env_flag('MODULE_LOADER_INSTALL_MISSING'),
            'complain': _env_flag('MODULE_LOADER_COMPLAIN'),
            'moan': _env_flag('MODULE_LOADER_MOAN'),
            'detach_installer': _env_flag('MODULE_LOADER_DETACH', True),
            'log_level': os.getenv('MODULE_LOADER_LOG_LEVEL', 'WARNING'),
        }
        if values['moan']:
            values['complain'] = True
        installer = os.getenv('MODULE_LOADER_INSTALLER')
        if installer:
            values['installer_name'] = installer.strip()
        return cls(**values)


settings = LoaderConfig.from_env()
diagnostics = _diagnostics
