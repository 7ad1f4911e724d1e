import logging
import threading
from dataclasses import dataclass
from typing import Any, Dict, Iterable, Iterator, Mapping, Optional, Tuple, Union

from .exceptions import BucketNotFoundError, InvalidArgumentError
from .factory import create_bucket
from .interfaces import BaseUrl, IBucket, IStorage
from .storage_settings import BucketConfig


@dataclass
class PendingBucket:
    """Registry slot of a bucket, which has not been instantiated yet."""

    config: BucketConfig


def iter_named_entries(entries: Union[Mapping[str, Any], Iterable[Any]]) -> Iterator[Tuple[Any, Any]]:
    """
    Normalizes declarative registry input into (name, data) pairs.
    A mapping gives 'name => data'; in a list, a plain string is a name with
    default configuration and a 2-element pair is '(name, data)'.
    """
    if isinstance(entries, Mapping):
        yield from entries.items()
        return
    if isinstance(entries, (str, bytes)):
        raise InvalidArgumentError(f"Expected a mapping or a list of entries, got: {entries!r}")
    for entry in entries:
        if isinstance(entry, str):
            yield entry, None
        elif isinstance(entry, (tuple, list)) and len(entry) == 2:
            yield entry[0], entry[1]
        else:
            raise InvalidArgumentError(f"Invalid registry entry: {entry!r}")


def validate_entry_name(name: Any, kind: str) -> None:
    if not isinstance(name, str) or not name:
        raise InvalidArgumentError(f"Name of the {kind} should be a non-empty string, got: {name!r}")


class BaseStorage(IStorage):
    """
    Base class for the file storages.

    Stores the bucket instances and creates them lazily from their
    configuration the first time they are requested. Each particular file
    storage uses its own class for the buckets, set through ``bucket_class``
    (a class or a key registered at BucketTypeRegistry).
    """

    bucket_class: Any = None

    def __init__(
        self,
        buckets: Union[Mapping[str, Any], Iterable[Any], None] = None,
        base_url: BaseUrl = None,
        bucket_class: Any = None,
        logger: Optional[logging.Logger] = None,
    ):
        if bucket_class is not None:
            self.bucket_class = bucket_class
        self.logger = logger or logging.getLogger(f"{type(self).__module__}.{type(self).__name__}")
        self._lock = threading.RLock()
        self._buckets: Dict[str, Union[PendingBucket, IBucket]] = {}
        self._base_url = base_url
        if buckets:
            self.set_buckets(buckets)

    def __repr__(self) -> str:
        return f"{type(self).__name__}(buckets={list(self._buckets)})"

    # --- Bucket registry ---

    def set_buckets(self, buckets) -> bool:
        for bucket_name, bucket_data in iter_named_entries(buckets):
            self.add_bucket(bucket_name, bucket_data)
        return True

    def get_buckets(self) -> Dict[str, IBucket]:
        with self._lock:
            bucket_names = list(self._buckets)
        return {bucket_name: self.get_bucket(bucket_name) for bucket_name in bucket_names}

    def get_bucket(self, bucket_name: str) -> IBucket:
        slot = self._buckets.get(bucket_name)
        if isinstance(slot, IBucket):
            return slot

        with self._lock:
            if bucket_name not in self._buckets:
                raise BucketNotFoundError(
                    f"Bucket named '{bucket_name}' does not exist in the file storage '{type(self).__name__}'"
                )
            slot = self._buckets[bucket_name]
            if isinstance(slot, PendingBucket):
                slot = create_bucket(slot.config, self, bucket_name, self.bucket_class)
                self._buckets[bucket_name] = slot
                self.logger.debug(f"Bucket '{bucket_name}' has been instantiated as {type(slot).__name__}")
            return slot

    def add_bucket(self, bucket_name: str, bucket_data: Any = None) -> bool:
        validate_entry_name(bucket_name, "bucket")
        if bucket_data is None:
            slot = PendingBucket(BucketConfig())
        elif isinstance(bucket_data, IBucket):
            bucket_data.name = bucket_name
            bucket_data.storage = self
            slot = bucket_data
        elif isinstance(bucket_data, BucketConfig):
            slot = PendingBucket(bucket_data)
        elif isinstance(bucket_data, Mapping):
            slot = PendingBucket(BucketConfig.model_validate(dict(bucket_data)))
        else:
            raise InvalidArgumentError(
                f"Data of the bucket '{bucket_name}' should be a bucket object or configuration mapping, "
                f"got: {bucket_data!r}"
            )
        with self._lock:
            self._buckets[bucket_name] = slot
        return True

    def has_bucket(self, bucket_name: str) -> bool:
        return bucket_name in self._buckets

    # --- URLs ---

    @property
    def base_url(self) -> BaseUrl:
        return self._base_url

    @base_url.setter
    def base_url(self, value: BaseUrl) -> None:
        self._base_url = value
