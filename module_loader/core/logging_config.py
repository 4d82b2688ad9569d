from __future__ import annotations

import logging

_NOISY_LOGGERS: tuple[str, ...] = (
    "urllib3",
    "urllib3.connectionpool",
)


def _ensure_stream_handler(logger: logging.Logger) -> None:
    handler_exists = any(isinstance(h, logging.StreamHandler) for h in logger.handlers)
    if handler_exists:
        return
    handler = logging.StreamHandler()
    handler.setFormatter(logging.Formatter('[%(levelname)s] %(name)s: %(message)s'))
    logger.addHandler(handler)


def _resolve_level(level_name: str | None) -> int:
    lvl = getattr(logging, (level_name or 'WARNING').strip().upper(), None)
    if not isinstance(lvl, int):
        return logging.WARNING
    return lvl


def configure_logging(level_name: str | None = None) -> None:
    """Configure the root logger and keep third-party chatter at INFO or above."""

    lvl = _resolve_level(level_name)
    root_logger = logging.getLogger()
    root_logger.setLevel(lvl)
    _ensure_stream_handler(root_logger)

    for noisy_name in _NOISY_LOGGERS:
        logger = logging.getLogger(noisy_name)
        if logger.level < logging.INFO:
            logger.setLevel(logging.INFO)

    logging.getLogger("module_loader").setLevel(lvl)
