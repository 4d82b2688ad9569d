from __future__ import annotations
import argparse
import sys
from typing import List, Optional

from module_loader.core.config import LoaderConfig, diagnostics, settings
from module_loader.core.logging_config import configure_logging
from module_loader.runtime.errors import ModuleLoaderError
from module_loader.runtime.loader import ModuleLoader


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog='module-loader',
        description="Load Python modules by name, reporting or installing the ones that are missing.",
    )
    parser.add_argument(
        'entries',
        nargs='*',
        help="module names and option tokens (:InstallMissing, :Complain, :Moan)",
    )
    parser.add_argument('--strict', action='store_true', help="exit 1 if any module failed and was not installed")
    parser.add_argument('--verbose', '-v', action='store_true', help="print the modules that loaded")
    parser.add_argument('--log-level', default=None, help="logging level (default from MODULE_LOADER_LOG_LEVEL)")
    parser.add_argument('--blocking', action='store_true', help="wait for the installer instead of detaching it")
    return parser


def main(argv: Optional[List[str]] = None, config: LoaderConfig | None = None) -> int:
    args = _build_parser().parse_args(argv)
    cfg = (config or settings).model_copy(deep=True)
    if args.blocking:
        cfg.detach_installer = False
    configure_logging(args.log_level or cfg.log_level)
    if args.verbose:
        for line in diagnostics:
            print(f"[module-loader][config] {line}", flush=True)

    # argv tokens are always scalars, so an empty command line is just a no-op
    loader = ModuleLoader(config=cfg)
    if not args.entries:
        return 0
    try:
        report = loader.process_requests(*args.entries)
    except ModuleLoaderError as e:
        print(f"[module-loader] {e}", file=sys.stderr, flush=True)
        return 1
    if args.verbose:
        for name in report.loaded:
            print(f"loaded {name}", flush=True)
    if args.strict and report.failures and not report.installed:
        return 1
    return 0


if __name__ == '__main__':  # pragma: no cover
    raise SystemExit(main())
