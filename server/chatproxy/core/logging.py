from __future__ import annotations
import logging
import re


REDACT_PATTERNS = [
    (re.compile(r"(sk-[A-Za-z0-9_-]{20,})"), "***"),  # OpenAI / OpenRouter / Anthropic style keys
    (re.compile(r"(?i)(bearer\s+)[A-Za-z0-9._~+/=-]+"), r"\1***"),
    (re.compile(r"(?i)([?&]key=)[^&\s\"']+"), r"\1***"),  # Google key in query string
    (re.compile(r"(?i)((?:x-api-key|apikey)[\"']?\s*[:=]\s*[\"']?)[A-Za-z0-9_-]+"), r"\1***"),
]


def redact(value: str) -> str:
    redacted = value
    for pat, repl in REDACT_PATTERNS:
        redacted = pat.sub(repl, redacted)
    return redacted


class RedactingFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        # Redact the fully rendered line so %-style args and tracebacks are covered too
        return redact(super().format(record))


def setup_logging(level: int | str = logging.INFO) -> None:
    if isinstance(level, str):
        level = logging.getLevelName(level.upper())
    logger = logging.getLogger()
    logger.setLevel(level)
    # Clear existing handlers in reload scenarios
    logger.handlers.clear()

    handler = logging.StreamHandler()
    formatter = RedactingFormatter(
        fmt="%(asctime)s %(levelname)s [%(name)s] %(message)s",
        datefmt="%Y-%m-%dT%H:%M:%SZ",
    )
    handler.setFormatter(formatter)
    logger.addHandler(handler)

    logging.getLogger("uvicorn.error").setLevel(level)
    logging.getLogger("uvicorn.access").setLevel(level)
    # httpx logs full request URLs at INFO, which include Google's ?key=
    logging.getLogger("httpx").setLevel(logging.WARNING)
