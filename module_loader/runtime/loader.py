"""Dynamic module loader.

Loads a list of named modules in order, optionally binding what they export
into a target namespace, and deals with the ones that fail: either reporting
them on stderr or handing them to the installer.

    loader = ModuleLoader(namespace=globals())
    loader.process_requests(':Complain', 'yaml', ('json', ['dumps', 'loads']))
    if not loader.is_module_loaded('yaml'):
        ...
"""
from __future__ import annotations
import importlib
import logging
import sys
import traceback
from dataclasses import dataclass, field
from typing import Any, List, MutableMapping, Optional, Set

from module_loader.core.config import LoaderConfig, settings
from module_loader.runtime import installer as _installer
from module_loader.runtime.errors import UsageError
from module_loader.runtime.requests import (
    OPTION_TOKENS,
    FailureKind,
    LoadFailure,
    ModuleRequest,
    coerce_request,
    flatten_entries,
    is_option,
    is_request_form,
)

_log = logging.getLogger(__name__)

_PREFIX = 'module_loader'


@dataclass
class LoadReport:
    loaded: List[str] = field(default_factory=list)
    failures: List[LoadFailure] = field(default_factory=list)
    installed: List[str] = field(default_factory=list)

    @property
    def failed_names(self) -> List[str]:
        return [f.name for f in self.failures]

    @property
    def ok(self) -> bool:
        return not self.failures


def _stderr(line: str = '') -> None:
    print(line, file=sys.stderr, flush=True)


class ModuleLoader:
    """Loads modules by name and keeps a registry of what loaded.

    Each loader owns a copy of its config; option tokens seen by
    `process_requests` only change that copy.
    """

    def __init__(self, config: LoaderConfig | None = None, namespace: MutableMapping[str, Any] | None = None) -> None:
        self.config = (config or settings).model_copy(deep=True)
        self.namespace = namespace
        self._loaded: Set[str] = set()

    # -- options -----------------------------------------------------------------
    def apply_option(self, token: str) -> bool:
        """Switch on the triggers named by *token*. Returns False for unknown tokens."""
        fields = OPTION_TOKENS.get(token)
        if fields is None:
            _log.debug("ignoring unknown option token %s", token)
            return False
        for name in fields:
            setattr(self.config, name, True)
        return True

    # -- primitives --------------------------------------------------------------
    def _bind(self, request: ModuleRequest, module) -> None:
        if self.namespace is None:
            return
        if not request.args:
            top = request.name.split('.')[0]
            self.namespace[top] = sys.modules.get(top, module)
            return
        for arg in request.args:
            if arg == '*':
                public = getattr(module, '__all__', None)
                if public is None:
                    public = [n for n in vars(module) if not n.startswith('_')]
                for n in public:
                    self.namespace[n] = getattr(module, n)
                continue
            try:
                self.namespace[arg] = getattr(module, arg)
            except AttributeError:
                raise ImportError(
                    f"cannot import name {arg!r} from {request.name!r}", name=request.name
                ) from None

    def attempt(self, name: str, *args: str) -> Optional[LoadFailure]:
        """Import one module. Returns None on success or the classified failure."""
        label = str(name).strip()
        try:
            request = ModuleRequest(name, tuple(args))
            module = importlib.import_module(request.name)
            self._bind(request, module)
        except ModuleNotFoundError as e:
            _log.debug("module %s not found: %s", label, e)
            return LoadFailure(label, FailureKind.NOT_FOUND, e)
        except Exception as e:  # noqa: BLE001 - bad names and anything the module raises at import time
            _log.debug("module %s failed to load: %s", label, e)
            return LoadFailure(label, FailureKind.LOAD_ERROR, e)
        self._loaded.add(request.name)
        return None

    def load_module(self, name: str, *args: str) -> bool:
        """Load a single module, forwarding *args* as the names to import from it."""
        return self.attempt(name, *args) is None

    def is_module_loaded(self, name: str) -> bool:
        return name in self._loaded

    @property
    def loaded_modules(self) -> List[str]:
        return sorted(self._loaded)

    # -- bulk --------------------------------------------------------------------
    def _complain(self, failure: LoadFailure) -> None:
        if not self.config.complain:
            return
        if failure.kind is FailureKind.NOT_FOUND:
            _stderr(f"{_PREFIX} - Couldn't load {failure.name}. Not found.")
        else:
            _stderr(f"{_PREFIX} - Couldn't load {failure.name} because of an unknown error")
        if self.config.moan:
            err = failure.error
            sys.stderr.write(''.join(traceback.format_exception(type(err), err, err.__traceback__)))
            sys.stderr.flush()

    def _check_usage(self, items: List[Any]) -> None:
        if len(items) == 1 and not is_request_form(items[0]):
            raise UsageError("Not expecting a reference")

    def process_requests(self, *entries: Any) -> LoadReport:
        """Apply inline options, load every module entry and handle the failures."""
        items = flatten_entries(entries)
        try:
            self._check_usage(items)
        except UsageError as e:
            _stderr(f"{_PREFIX}: {e}")
            sys.exit(2)

        report = LoadReport()
        for entry in items:
            if is_option(entry):
                self.apply_option(entry)
                continue
            request = coerce_request(entry)
            if request is None:
                continue
            failure = self.attempt(request.name, *request.args)
            if failure is None:
                report.loaded.append(request.name)
                continue
            self._complain(failure)
            report.failures.append(failure)

        if report.failures:
            if self.config.install_missing:
                report.installed = self._install(report.failures)
            else:
                self._report_missing(report.failures)
        return report

    def _report_missing(self, failures: List[LoadFailure]) -> None:
        _stderr("The following modules were missing, but will not be installed")
        for f in failures:
            _stderr(f"    {f.name}")
        _stderr()

    def _install(self, failures: List[LoadFailure]) -> List[str]:
        eligible: List[str] = []
        excluded: List[LoadFailure] = []
        for f in failures:
            if f.kind is FailureKind.NOT_FOUND or self.config.install_broken_modules:
                eligible.append(f.missing_name or f.name)
            else:
                excluded.append(f)
        if excluded:
            # found but broken: reported, not installed
            self._report_missing(excluded)
        if not eligible:
            return []
        path = _installer.locate_installer(self.config)
        names = _installer.distribution_names(eligible, self.config.package_aliases)
        print(f"Installing missing modules using {self.config.installer_name}...", flush=True)
        _installer.run_installer(path, self.config.installer_args, names, detach=self.config.detach_installer)
        print("Finished", flush=True)
        return names


def use(*entries: Any, namespace: MutableMapping[str, Any] | None = None, config: LoaderConfig | None = None) -> ModuleLoader:
    """Build a loader, run a bulk load with *entries* and return the loader."""
    loader = ModuleLoader(config=config, namespace=namespace)
    loader.process_requests(*entries)
    return loader
