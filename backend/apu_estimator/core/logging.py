import logging
import sys
import structlog


_LEVELS = {"DEBUG": logging.DEBUG, "INFO": logging.INFO, "WARNING": logging.WARNING, "ERROR": logging.ERROR}


def _level(level: str | None) -> int:
    if not level:
        return logging.INFO
    return _LEVELS.get(level.upper(), logging.INFO)


def configure_logging(env: str = "dev", level: str | None = None) -> None:
    """structlog on top of stdlib logging; ``level`` defaults to INFO."""
    processors = [
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.add_log_level,
        structlog.processors.format_exc_info,
    ]
    if env == "prod":
        processors.append(structlog.processors.JSONRenderer())
    else:
        processors.append(structlog.dev.ConsoleRenderer(colors=sys.stdout.isatty()))

    structlog.configure(
        processors=processors,
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    lvl = _level(level)
    logging.basicConfig(format="%(message)s", stream=sys.stdout, level=lvl)
    logging.getLogger("apu_estimator").setLevel(lvl)
    # access lines only at DEBUG
    if lvl > logging.DEBUG:
        logging.getLogger("uvicorn.access").setLevel(logging.WARNING)


logger = structlog.get_logger("apu_estimator")
