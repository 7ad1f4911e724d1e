"""
Configuration factory for creating file storages based on settings.
"""

import logging

from .backends.azure_blob_storage import AzureBlobStorage
from .backends.local_file_storage import LocalFileStorage
from .interfaces import IStorage
from .storage_settings import StorageSettings

logger = logging.getLogger(__name__)


def create_file_storage(storage_settings: StorageSettings) -> IStorage:
    """
    Create the appropriate file storage based on configuration.

    Args:
        storage_settings: Settings describing the storage backend and its buckets

    Returns:
        Configured file storage instance

    Raises:
        ValueError: If configuration is invalid or unsupported
    """
    common = {
        "base_url": storage_settings.base_url,
        "buckets": storage_settings.buckets,
    }

    if storage_settings.is_local_storage():
        logger.info(f"Creating LocalFileStorage with base path: {storage_settings.base_path}")
        return LocalFileStorage(
            base_path=storage_settings.base_path,
            file_permission=storage_settings.file_permission,
            dir_permission=storage_settings.dir_permission,
            **common,
        )

    elif storage_settings.is_azure_storage():
        if storage_settings.azure_use_managed_identity and storage_settings.azure_account_name:
            logger.info(
                f"Creating AzureBlobStorage with managed identity for account: {storage_settings.azure_account_name}"
            )
            return AzureBlobStorage(
                account_name=storage_settings.azure_account_name,
                use_managed_identity=True,
                **common,
            )
        logger.info("Creating AzureBlobStorage with connection string")
        return AzureBlobStorage(
            connection_string=storage_settings.azure_connection_string.get_secret_value(),
            **common,
        )

    else:
        raise ValueError(
            "Unsupported storage configuration: neither local nor Azure storage is properly configured"
        )
