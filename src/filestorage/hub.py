"""
Storage hub: a file storage, which aggregates several other file storages.

The hub exposes the same registry contract as a single storage. Bucket
lookups scan the member storages in registration order, so bucket names
should be unique across all of them. Bucket registration goes to the
default storage, which is the first registered one.
"""

import logging
import threading
from dataclasses import dataclass
from typing import Any, Dict, Iterable, Mapping, Optional, Union

from .base_storage import iter_named_entries, validate_entry_name
from .exceptions import BucketNotFoundError, FileStorageError, InvalidArgumentError, StorageNotFoundError
from .factory import create_storage
from .interfaces import BaseUrl, IBucket, IStorage
from .storage_settings import StorageEntryConfig


@dataclass
class PendingStorage:
    """Registry slot of a file storage, which has not been instantiated yet."""

    config: StorageEntryConfig


class StorageHub(IStorage):
    def __init__(
        self,
        storages: Union[Mapping[str, Any], Iterable[Any], None] = None,
        logger: Optional[logging.Logger] = None,
    ):
        self.logger = logger or logging.getLogger(f"{__name__}.{type(self).__name__}")
        self._lock = threading.RLock()
        self._storages: Dict[str, Union[PendingStorage, IStorage]] = {}
        if storages:
            self.set_storages(storages)

    def __repr__(self) -> str:
        return f"{type(self).__name__}(storages={list(self._storages)})"

    # --- Storage registry ---

    def set_storages(self, storages) -> bool:
        """Replaces the list of file storages with the given instances or configurations."""
        with self._lock:
            self._storages = {}
            for storage_name, storage_data in iter_named_entries(storages):
                self.add_storage(storage_name, storage_data)
        return True

    def get_storages(self) -> Dict[str, IStorage]:
        with self._lock:
            storage_names = list(self._storages)
        return {storage_name: self.get_storage(storage_name) for storage_name in storage_names}

    def get_storage(self, storage_name: str) -> IStorage:
        slot = self._storages.get(storage_name)
        if isinstance(slot, IStorage):
            return slot

        with self._lock:
            if storage_name not in self._storages:
                raise StorageNotFoundError(
                    f"Storage named '{storage_name}' does not exist in the file storage hub '{type(self).__name__}'"
                )
            slot = self._storages[storage_name]
            if isinstance(slot, PendingStorage):
                slot = create_storage(slot.config)
                self._storages[storage_name] = slot
                self.logger.debug(f"Storage '{storage_name}' has been instantiated as {type(slot).__name__}")
            return slot

    def add_storage(self, storage_name: str, storage_data: Any) -> bool:
        validate_entry_name(storage_name, "storage")
        if isinstance(storage_data, IStorage):
            slot = storage_data
        elif isinstance(storage_data, StorageEntryConfig):
            slot = PendingStorage(storage_data)
        elif isinstance(storage_data, Mapping) and storage_data:
            if "class" not in storage_data:
                raise InvalidArgumentError(
                    f"Configuration of the storage '{storage_name}' should specify its 'class'"
                )
            slot = PendingStorage(StorageEntryConfig.model_validate(dict(storage_data)))
        else:
            raise InvalidArgumentError(
                f"Data of the storage '{storage_name}' should be a file storage object or configuration mapping, "
                f"got: {storage_data!r}"
            )
        with self._lock:
            self._storages[storage_name] = slot
        return True

    def has_storage(self, storage_name: str) -> bool:
        return storage_name in self._storages

    def get_default_storage(self) -> IStorage:
        with self._lock:
            storage_names = list(self._storages)
        if not storage_names:
            raise FileStorageError("Unable to determine default storage in the hub: no storages registered")
        return self.get_storage(storage_names[0])

    # --- Bucket registry ---

    def set_buckets(self, buckets) -> bool:
        return self.get_default_storage().set_buckets(buckets)

    def get_buckets(self) -> Dict[str, IBucket]:
        # Later storages override earlier ones here, while get_bucket() prefers
        # the first match. Kept as is for compatibility.
        buckets: Dict[str, IBucket] = {}
        for storage in self.get_storages().values():
            buckets.update(storage.get_buckets())
        return buckets

    def get_bucket(self, bucket_name: str) -> IBucket:
        for storage in self.get_storages().values():
            if storage.has_bucket(bucket_name):
                return storage.get_bucket(bucket_name)
        raise BucketNotFoundError(
            f"Bucket named '{bucket_name}' does not exist in any file storage of the hub '{type(self).__name__}'"
        )

    def add_bucket(self, bucket_name: str, bucket_data: Any = None) -> bool:
        return self.get_default_storage().add_bucket(bucket_name, bucket_data)

    def has_bucket(self, bucket_name: str) -> bool:
        return any(storage.has_bucket(bucket_name) for storage in self.get_storages().values())

    # --- URLs ---

    @property
    def base_url(self) -> BaseUrl:
        for storage in self.get_storages().values():
            return storage.base_url
        return None

    @base_url.setter
    def base_url(self, value: BaseUrl) -> None:
        for storage in self.get_storages().values():
            storage.base_url = value
