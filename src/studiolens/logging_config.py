"""
Log output for studiolens.

Everything logs under the ``studiolens`` logger. Nothing is attached to it
until set_verbosity or configure_logging runs, so an application embedding
the library keeps full control of its own handlers.

How much a shoot run reports:
- 0: one line per generation (operation, model, reference count, timing)
- 1: the above plus the full composed prompt sent to Gemini
- 2: DEBUG; request URLs, truncated payloads, key store lookups

API keys never appear at any level; use redact_secret when a key has to be
mentioned. The CLI reads STUDIOLENS_VERBOSITY first and lets -v/-q win.
"""

import logging
import os

LOG_FORMAT = "%(levelname)s [%(name)s] %(message)s"
ROOT_LOGGER_NAME = "studiolens"
VERBOSITY_ENV_VAR = "STUDIOLENS_VERBOSITY"

# verbosity -> (logger level, include prompt text)
_LEVELS: dict[int, tuple[int, bool]] = {
    0: (logging.INFO, False),
    1: (logging.INFO, True),
    2: (logging.DEBUG, True),
}

_log_prompts: bool = False


def _root() -> logging.Logger:
    """The studiolens logger, with a single stderr handler attached on first use."""
    root = logging.getLogger(ROOT_LOGGER_NAME)
    if not root.handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        root.addHandler(handler)
    return root


def _apply(level: int, prompts: bool) -> None:
    global _log_prompts
    _root().setLevel(level)
    _log_prompts = prompts


def set_verbosity(level: int) -> None:
    """Switch to verbosity 0, 1 or 2. Values below 0 act as 0, above 2 as 2."""
    _apply(*_LEVELS[min(max(level, 0), 2)])


def log_prompts() -> bool:
    """Whether composed prompts should be written to the log."""
    return _log_prompts


def configure_logging(verbose_level: int = 0, quiet: bool = False) -> None:
    """Entry point for the CLI: ``quiet`` keeps only warnings and errors."""
    if quiet:
        _apply(logging.WARNING, False)
    else:
        set_verbosity(verbose_level)


def get_verbosity_from_env() -> int:
    """STUDIOLENS_VERBOSITY as 0, 1 or 2; anything else counts as 0."""
    raw = os.environ.get(VERBOSITY_ENV_VAR, "").strip()
    return int(raw) if raw in ("1", "2") else 0


def redact_secret(value: str | None, visible: int = 4) -> str:
    """
    Mask an API key for log lines and CLI output.

    Keeps the last ``visible`` characters; short values are masked entirely.
    """
    if not value:
        return "<unset>"
    if len(value) <= visible * 2:
        return "*" * len(value)
    return "*" * (len(value) - visible) + value[-visible:]


def get_logger(name: str) -> logging.Logger:
    """Logger for a studiolens module; bare names are placed under ``studiolens.``."""
    if name == ROOT_LOGGER_NAME or name.startswith(ROOT_LOGGER_NAME + "."):
        return logging.getLogger(name)
    return logging.getLogger(f"{ROOT_LOGGER_NAME}.{name}")


__all__ = [
    "configure_logging",
    "get_logger",
    "get_verbosity_from_env",
    "log_prompts",
    "redact_secret",
    "set_verbosity",
]
