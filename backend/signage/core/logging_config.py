import logging

from signage.config import settings

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


def configure_logging() -> None:
    """Configure root logging once from LOG_LEVEL."""
    root = logging.getLogger()
    if root.handlers:
        root.setLevel(settings.LOG_LEVEL.upper())
        return
    logging.basicConfig(level=settings.LOG_LEVEL.upper(), format=LOG_FORMAT)
    # SQL echo is handled by the slow-query listener
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
