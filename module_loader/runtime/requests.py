"""Request parsing for bulk loads.

A bulk load is a flat sequence of entries. Each entry is either an option
token (a string starting with ':'), a bare module name, a `ModuleRequest`, or
a `(name, [args...])` pair carrying import arguments for that one module.
"""
from __future__ import annotations
import enum
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Optional, Tuple

OPTION_PREFIX = ':'

# option token -> config fields switched on
OPTION_TOKENS: Dict[str, Tuple[str, ...]] = {
    ':InstallMissing': ('install_missing',),
    ':Complain': ('complain',),
    ':Moan': ('complain', 'moan'),
}


@dataclass(frozen=True)
class ModuleRequest:
    name: str
    args: Tuple[str, ...] = field(default_factory=tuple)

    def __post_init__(self) -> None:
        if not self.name or not self.name.strip():
            raise ValueError("module name is required")
        if self.name.startswith(OPTION_PREFIX):
            raise ValueError(f"{self.name!r} is an option token, not a module name")
        object.__setattr__(self, 'name', self.name.strip())
        object.__setattr__(self, 'args', tuple(str(a) for a in self.args))


class FailureKind(str, enum.Enum):
    NOT_FOUND = 'not_found'
    LOAD_ERROR = 'load_error'


@dataclass(frozen=True)
class LoadFailure:
    name: str
    kind: FailureKind
    error: BaseException

    @property
    def missing_name(self) -> Optional[str]:
        """Name of the module Python could not find, which may be a dependency of `name`."""
        if self.kind is FailureKind.NOT_FOUND:
            return getattr(self.error, 'name', None) or self.name
        return None


def is_option(entry: Any) -> bool:
    return isinstance(entry, str) and entry.startswith(OPTION_PREFIX)


def _is_request_pair(value: Any) -> bool:
    if not isinstance(value, (tuple, list)) or len(value) != 2:
        return False
    name, args = value
    if not isinstance(name, str) or not isinstance(args, (tuple, list)):
        return False
    return all(isinstance(a, str) for a in args)


# non-string scalars are loaded by their string form
_SCALARS = (int, float)


def is_request_form(entry: Any) -> bool:
    """True for every entry shape a bulk load accepts."""
    return isinstance(entry, (str, ModuleRequest, *_SCALARS)) or _is_request_pair(entry)


def coerce_request(entry: Any) -> ModuleRequest | None:
    """Turn a non-option entry into a ModuleRequest; blank names yield None."""
    if isinstance(entry, ModuleRequest):
        return entry
    if isinstance(entry, str):
        text = entry.strip()
        return ModuleRequest(text) if text else None
    if isinstance(entry, _SCALARS):
        return ModuleRequest(str(entry))
    if _is_request_pair(entry):
        name, args = entry
        if not name.strip():
            return None
        return ModuleRequest(name, tuple(args))
    raise TypeError(f"cannot load {type(entry).__name__} entry {entry!r}; expected a module name")


def flatten_entries(entries: Iterable[Any]) -> List[Any]:
    """Expand a single list/tuple of names passed where varargs were expected."""
    items = list(entries)
    if len(items) == 1 and isinstance(items[0], (list, tuple)) and not _is_request_pair(items[0]):
        inner = list(items[0])
        if all(is_request_form(i) for i in inner):
            return inner
    return items
