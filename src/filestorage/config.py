import logging
import sys
from functools import lru_cache
from typing import Optional

from .interfaces import IStorage
from .storage_settings import StorageSettings

logger = logging.getLogger(__name__)

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def configure_logging(level: str = "INFO") -> None:
    """Basic logging configuration for applications using the file storage."""
    logging.basicConfig(
        level=level.upper(),
        format=LOG_FORMAT,
        handlers=[logging.StreamHandler(sys.stdout)],
    )


@lru_cache()
def get_settings(env_file: Optional[str] = ".env") -> StorageSettings:
    logger.info(f"Attempting to load StorageSettings with env_file: {env_file}")
    try:
        settings = StorageSettings(_env_file=env_file)
        logger.info(f"Successfully loaded StorageSettings for backend: {settings.backend}")
        return settings
    except Exception as e:
        logger.error(f"Error loading StorageSettings with env_file {env_file}: {e}", exc_info=True)
        raise


def get_file_storage(env_file: Optional[str] = ".env") -> IStorage:
    """
    Create and return the file storage configured by the current settings.

    Returns:
        Configured file storage instance
    """
    from .backend_factory import create_file_storage

    settings = get_settings(env_file)
    configure_logging(settings.log_level)
    return create_file_storage(settings)
