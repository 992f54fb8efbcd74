import logging
import sys
from pathlib import Path

from loguru import logger

_INTERCEPTED = ("playwright", "httpx", "httpcore", "asyncio")


class InterceptHandler(logging.Handler):
    """Intercept standard logging and redirect to loguru."""

    def emit(self, record: logging.LogRecord) -> None:
        try:
            level = logger.level(record.levelname).name
        except ValueError:
            level = record.levelno

        # Find caller from where originated the logged message
        frame, depth = logging.currentframe(), 2
        while frame and frame.f_code.co_filename == logging.__file__:
            frame = frame.f_back
            depth += 1

        logger.opt(depth=depth, exception=record.exc_info).log(level, record.getMessage())


def configure_logger(
    log_file: str = "leadverify.log",
    level: str = "INFO",
    *,
    debug_file: str | None = None,
    json_logs: bool = False,
) -> None:
    """
    Configure loguru for the whole project: console, rotating file, and
    stdlib loggers from third-party clients.

    ``debug_file`` adds a DEBUG sink at that path; ``json_logs`` adds
    serialized JSON lines (lookup fields bound via ``logger.bind`` included)
    under ``logs/``.
    """
    log_dir = Path("logs")
    log_dir.mkdir(exist_ok=True)

    # Remove default handler to avoid duplicate logs
    logger.remove()

    logger.add(
        sys.stderr,
        format="<green>{time:YYYY-MM-DD HH:mm:ss}</green> | <level>{level: <8}</level> | <cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> - <level>{message}</level>",
        level=level,
    )

    logger.add(
        log_dir / log_file,
        rotation="10 MB",
        retention="10 days",
        level=level,
        format="{time:YYYY-MM-DD HH:mm:ss} | {level: <8} | {name}:{function}:{line} | {extra} - {message}",
        backtrace=True,
        diagnose=True,
    )

    if debug_file:
        logger.add(debug_file, level="DEBUG", backtrace=True, diagnose=True)
    if json_logs:
        logger.add(log_dir / "leadverify_{time}.jsonl", level="DEBUG", serialize=True)

    logging.basicConfig(handlers=[InterceptHandler()], level=logging.INFO, force=True)
    for logger_name in _INTERCEPTED:
        logging.getLogger(logger_name).handlers = [InterceptHandler()]
        logging.getLogger(logger_name).propagate = False
