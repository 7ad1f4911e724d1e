import logging
from typing import Any, Dict, Type

from .exceptions import InvalidArgumentError
from .interfaces import IBucket, IStorage
from .storage_settings import BucketConfig, StorageEntryConfig

logger = logging.getLogger(__name__)


class _TypeRegistry:
    """Registry mapping type keys to classes, so that configs may refer to a class by name."""

    _registry: Dict[str, type] = {}
    _kind = "type"

    @classmethod
    def register(cls, type_key: str, type_class: type):
        """Register a class for the given type key"""
        cls._registry[type_key] = type_class

    @classmethod
    def get_class(cls, type_key: str) -> type:
        """Get the class registered for the given type key"""
        if type_key not in cls._registry:
            raise InvalidArgumentError(f"No {cls._kind} class registered for type: {type_key}")
        return cls._registry[type_key]

    @classmethod
    def resolve(cls, class_or_key: Any) -> type:
        """Accepts either a registered type key or a class"""
        if isinstance(class_or_key, str):
            return cls.get_class(class_or_key)
        if isinstance(class_or_key, type):
            return class_or_key
        raise InvalidArgumentError(f"Invalid {cls._kind} class specification: {class_or_key!r}")

    @classmethod
    def registered_types(cls) -> Dict[str, type]:
        return dict(cls._registry)


class BucketTypeRegistry(_TypeRegistry):
    _registry: Dict[str, Type[IBucket]] = {}
    _kind = "bucket"


class StorageTypeRegistry(_TypeRegistry):
    _registry: Dict[str, Type[IStorage]] = {}
    _kind = "storage"


def create_bucket(config: BucketConfig, storage: IStorage, bucket_name: str, default_class: Any) -> IBucket:
    """
    Creates a bucket instance from its configuration.
    Name and owning storage are passed to the constructor, so the bucket is
    never observed without them.
    """
    bucket_class = BucketTypeRegistry.resolve(config.bucket_class or default_class)
    if not issubclass(bucket_class, IBucket):
        raise InvalidArgumentError(f"Bucket class should implement IBucket, got: {bucket_class!r}")
    logger.debug(f"Creating bucket '{bucket_name}' of class {bucket_class.__name__}")
    return bucket_class(name=bucket_name, storage=storage, **config.get_options())


def create_storage(config: StorageEntryConfig) -> IStorage:
    """Creates a file storage instance from its configuration."""
    storage_class = StorageTypeRegistry.resolve(config.storage_class)
    if not issubclass(storage_class, IStorage):
        raise InvalidArgumentError(f"Storage class should implement IStorage, got: {storage_class!r}")
    logger.debug(f"Creating file storage of class {storage_class.__name__}")
    return storage_class(**config.get_options())
