import logging
import sys

from loguru import logger


def setup_logging(level: str = "INFO") -> None:
    """
    Configure loguru as the main logger and route stdlib logging
    (streamlit, urllib3, ...) through it.
    """
    logger.remove()
    logger.add(
        sys.stdout,
        format="<green>{time:YYYY-MM-DD HH:mm:ss.SSS}</green> | "
        "<level>{level: <8}</level> | "
        "<cyan>{name}</cyan>:<cyan>{function}</cyan> - "
        "<level>{message}</level>",
        level=level.upper(),
        colorize=True,
        backtrace=False,
        diagnose=False,
    )

    class InterceptHandler(logging.Handler):
        def emit(self, record):
            try:
                lvl = logger.level(record.levelname).name
            except ValueError:
                lvl = record.levelno

            frame, depth = logging.currentframe(), 2
            while frame and frame.f_code.co_filename == logging.__file__:
                frame = frame.f_back
                depth += 1

            logger.opt(depth=depth, exception=record.exc_info).log(lvl, record.getMessage())

    logging.basicConfig(handlers=[InterceptHandler()], level=logging.INFO, force=True)
    logging.getLogger("streamlit").handlers = [InterceptHandler()]
    # urllib3 is chatty at INFO
    logging.getLogger("urllib3").setLevel(logging.WARNING)
