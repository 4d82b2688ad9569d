"""Installer discovery and invocation.

The installer is an executable living next to the running interpreter
(`<bin dir>/pip` by default). It is invoked once per bulk load with every
eligible failed module name. Exit status is never inspected: installation is
best effort and the caller carries on either way.
"""
from __future__ import annotations
import logging
import os
import signal
import subprocess
import sys
from pathlib import Path
from typing import Dict, Iterable, List, Optional, Sequence

from packaging.utils import canonicalize_name

from module_loader.core.config import LoaderConfig
from module_loader.runtime.errors import InstallerMissing, InterpreterPathUnavailable

_log = logging.getLogger(__name__)


def interpreter_path(env_var: str = '_') -> str:
    """Path of the running interpreter, preferring the value of *env_var*."""
    path = os.environ.get(env_var) if env_var else None
    if not path or not path.strip():
        path = sys.executable
    if not path:
        raise InterpreterPathUnavailable()
    return path


def locate_installer(config: LoaderConfig) -> Path:
    bin_dir = Path(interpreter_path(config.interpreter_env_var)).parent
    candidate = bin_dir / config.installer_name
    if not candidate.is_file():
        raise InstallerMissing(config.installer_name, str(candidate))
    return candidate


def distribution_names(modules: Iterable[str], aliases: Optional[Dict[str, str]] = None) -> List[str]:
    """Map import names to installable distribution names.

    Dotted names install their top-level package. Duplicates (after PEP 503
    normalisation) are dropped while preserving first-seen order.
    """
    aliases = aliases or {}
    seen: set[str] = set()
    out: List[str] = []
    for mod in modules:
        top = mod.split('.')[0]
        dist = aliases.get(mod) or aliases.get(top) or top
        key = canonicalize_name(dist)
        if key in seen:
            continue
        seen.add(key)
        out.append(dist)
    return out


def _reaper_for(holder: Dict[str, int]):
    """SIGCHLD handler that only collects the intermediate child recorded in *holder*."""

    def _reap(signum, frame) -> None:  # pragma: no cover - signal hook
        pid = holder.get('pid')
        if not pid:
            return
        try:
            done, _ = os.waitpid(pid, os.WNOHANG)
        except ChildProcessError:
            return
        if done == pid:
            holder['pid'] = 0

    return _reap


def _spawn_detached(argv: Sequence[str]) -> None:
    """Double fork so the installer is reparented away from this process tree."""
    holder: Dict[str, int] = {}
    previous = None
    try:
        previous = signal.signal(signal.SIGCHLD, _reaper_for(holder))
    except ValueError:
        # signal handlers can only be set from the main thread
        _log.debug("running outside main thread; not installing SIGCHLD reaper")

    pid = os.fork()
    if pid == 0:  # pragma: no cover - runs in the forked child
        try:
            if os.fork() == 0:
                try:
                    os.execv(argv[0], list(argv))
                finally:
                    os._exit(127)
        finally:
            os._exit(0)

    holder['pid'] = pid
    try:
        os.waitpid(pid, 0)
    except ChildProcessError:
        # already collected by the SIGCHLD reaper
        pass
    finally:
        if previous is not None:
            signal.signal(signal.SIGCHLD, previous)


def run_installer(installer: Path, installer_args: Sequence[str], names: Sequence[str], detach: bool = True) -> None:
    argv = [str(installer), *installer_args, *names]
    _log.info("running installer: %s", " ".join(argv))
    if detach and hasattr(os, 'fork'):
        _spawn_detached(argv)
        return
    if detach:
        subprocess.Popen(argv, start_new_session=True)
        return
    result = subprocess.run(argv, check=False)
    _log.debug("installer exited with status %s", result.returncode)
