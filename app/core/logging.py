import logging

from app.core.config import settings


def configure_logging() -> logging.Logger:
    logger = logging.getLogger("chainraffle")
    if not logger.handlers:
        logging.basicConfig(
            level=settings.log_level.upper(),
            format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        )
    return logger
