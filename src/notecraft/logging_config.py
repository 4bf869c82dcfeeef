"""structlog setup shared by the CLI, the API server and the vault watcher."""

import logging
import re
import sys

import structlog

REDACTED = "REDACTED"

# Event keys whose values are masked whatever they contain
SECRET_KEYS = frozenset({"api_key", "token", "authorization"})

# Provider keys and bearer tokens that leak into error messages
_SECRET_PATTERNS = (
    re.compile(r"(sk-ant-[\w-]{6})[\w-]+"),
    re.compile(r"(sk-[\w-]{6})[\w-]{20,}"),
    re.compile(r"(Bearer\s+)[\w.~+/-]{16,}=*"),
)

# Libraries that log each HTTP request or filesystem event below WARNING
NOISY_LOGGERS = ("httpx", "httpcore", "openai", "anthropic", "watchdog")


def redact(value: str) -> str:
    """Mask provider API keys and bearer tokens inside free text."""
    for pattern in _SECRET_PATTERNS:
        value = pattern.sub(r"\g<1>" + REDACTED, value)
    return value


def _mask_secrets(_, __, event_dict: dict) -> dict:
    for key, value in event_dict.items():
        if key in SECRET_KEYS and value:
            event_dict[key] = REDACTED
        elif isinstance(value, str):
            event_dict[key] = redact(value)
    return event_dict


def setup_logging(json_mode: bool = False, level: str = "INFO") -> None:
    """Route structlog and stdlib logging through one stderr handler.

    stdout stays free for command output (``--json`` payloads, diffs,
    stitched documents), so every log line goes to stderr.

    Args:
        json_mode: One JSON object per line, for ``serve`` and ``watch``
                   under a supervisor. False renders for a terminal.
        level: Log level name; unknown names fall back to INFO.
    """
    log_level = getattr(logging, level.upper(), None)
    if not isinstance(log_level, int):
        log_level = logging.INFO

    processors: list[structlog.types.Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
        _mask_secrets,
    ]

    if json_mode:
        renderer: structlog.types.Processor = structlog.processors.JSONRenderer()
        processors.append(structlog.processors.format_exc_info)
    else:
        renderer = structlog.dev.ConsoleRenderer(colors=sys.stderr.isatty())

    structlog.configure(
        processors=[*processors, structlog.stdlib.ProcessorFormatter.wrap_for_formatter],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(
        structlog.stdlib.ProcessorFormatter(
            foreign_pre_chain=processors,
            processors=[structlog.stdlib.ProcessorFormatter.remove_processors_meta, renderer],
        )
    )

    root = logging.getLogger()
    root.handlers.clear()
    root.addHandler(handler)
    root.setLevel(log_level)

    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(max(log_level, logging.WARNING))
