import logging
from typing import Optional

from backline.core.config import settings


def configure_logging(level: Optional[str] = None) -> None:
    """Configure root logging for scripts. Library modules never call this."""
    logging.basicConfig(
        level=(level or settings.LOG_LEVEL).upper(),
        format=settings.LOG_FORMAT,
    )
