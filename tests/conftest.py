import importlib
import stat
import sys
import pathlib

import pytest

# Ensure the project root (containing the 'module_loader' package) is on sys.path
PROJECT_ROOT = pathlib.Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from module_loader.core.config import LoaderConfig

MISSING_NAME = "_ml_definitely_not_a_real_module"
INTERPRETER_ENV = "ML_TEST_INTERPRETER"


@pytest.fixture
def scratch_modules(tmp_path, monkeypatch):
    """Importable throwaway modules: a good one, a broken one, one with a missing dependency."""
    pkg_dir = tmp_path / "mods"
    pkg_dir.mkdir()
    (pkg_dir / "_ml_good_mod.py").write_text(
        "__all__ = ['alpha', 'gamma']\n"
        "alpha = 1\n"
        "beta = 2\n"
        "gamma = 3\n"
        "_hidden = 4\n"
    )
    (pkg_dir / "_ml_plain_mod.py").write_text("one = 1\ntwo = 2\n_private = 3\n")
    (pkg_dir / "_ml_broken_mod.py").write_text("raise RuntimeError('boom at import')\n")
    (pkg_dir / "_ml_needs_dep.py").write_text("import _ml_absent_dependency\n")
    (pkg_dir / "_ml_pkg").mkdir()
    (pkg_dir / "_ml_pkg" / "__init__.py").write_text("")
    (pkg_dir / "_ml_pkg" / "child.py").write_text("value = 'child'\n")
    monkeypatch.syspath_prepend(str(pkg_dir))
    importlib.invalidate_caches()
    yield pkg_dir
    for name in list(sys.modules):
        if name.startswith("_ml_"):
            sys.modules.pop(name, None)


@pytest.fixture
def fake_bin(tmp_path, monkeypatch):
    """A bin dir holding a fake interpreter path; the interpreter env var points into it."""
    bin_dir = tmp_path / "bin"
    bin_dir.mkdir()
    monkeypatch.setenv(INTERPRETER_ENV, str(bin_dir / "python"))
    return bin_dir


@pytest.fixture
def fake_installer(fake_bin, tmp_path):
    """An executable 'pip' that records its arguments, one per line."""
    out = tmp_path / "installer_args.txt"
    script = fake_bin / "pip"
    script.write_text(
        "#!/bin/sh\n"
        f"printf '%s\\n' \"$@\" > '{out}.tmp'\n"
        f"mv '{out}.tmp' '{out}'\n"
    )
    script.chmod(script.stat().st_mode | stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH)
    return out


@pytest.fixture
def install_config():
    return LoaderConfig(
        install_missing=True,
        interpreter_env_var=INTERPRETER_ENV,
        detach_installer=False,
    )
