import abc
from typing import Any, Dict, Mapping, Optional, Union

BaseUrl = Union[str, Mapping[str, Any], None]


class IBucket(abc.ABC):
    """
    Interface for a named container of files.
    All buckets are controlled by an instance of IStorage, which owns them.
    File names are opaque strings and may contain '/' separators.
    """

    @property
    @abc.abstractmethod
    def name(self) -> str:
        pass

    @property
    @abc.abstractmethod
    def storage(self) -> "IStorage":
        pass

    @abc.abstractmethod
    async def create(self) -> bool:
        """Creates the bucket, if it does not exist yet."""
        pass

    @abc.abstractmethod
    async def destroy(self) -> bool:
        """Destroys the bucket with all its files."""
        pass

    @abc.abstractmethod
    async def exists(self) -> bool:
        """Checks if the bucket exists."""
        pass

    @abc.abstractmethod
    async def save_file_content(self, file_name: str, content: Union[bytes, str]) -> bool:
        """Saves content as a file, overwriting existing one."""
        pass

    @abc.abstractmethod
    async def get_file_content(self, file_name: str) -> bytes:
        """Returns content of an existing file."""
        pass

    @abc.abstractmethod
    async def delete_file(self, file_name: str) -> bool:
        """Deletes a file. Deleting a missing file is a success."""
        pass

    @abc.abstractmethod
    async def file_exists(self, file_name: str) -> bool:
        pass

    @abc.abstractmethod
    async def copy_file_in(self, src_file_name: str, file_name: str) -> bool:
        """Copies a file from the OS file system into the bucket."""
        pass

    @abc.abstractmethod
    async def copy_file_out(self, file_name: str, dest_file_name: str) -> bool:
        """Copies a file from the bucket into the OS file system."""
        pass

    @abc.abstractmethod
    async def copy_file_internal(self, src_file: Any, dest_file: Any) -> bool:
        """
        Copies a file inside this bucket or between this bucket and another
        bucket of the same storage.
        Each file is either a file name of this bucket or a
        (bucket name, file name) pair.
        """
        pass

    @abc.abstractmethod
    async def move_file_in(self, src_file_name: str, file_name: str) -> bool:
        pass

    @abc.abstractmethod
    async def move_file_out(self, file_name: str, dest_file_name: str) -> bool:
        pass

    @abc.abstractmethod
    async def move_file_internal(self, src_file: Any, dest_file: Any) -> bool:
        pass

    @abc.abstractmethod
    def get_file_url(self, file_name: str) -> str:
        """Returns the web URL of the file."""
        pass

    @abc.abstractmethod
    def open_file(self, file_name: str, mode: str = "r", context: Optional[Dict[str, Any]] = None):
        """
        Opens a file as an async stream, the same way ``aiofiles.open()`` does:
        the result is used either as ``async with`` context manager or awaited
        for a handle, which the caller is responsible for closing.
        Prefer simple modes like 'r' and 'w', as combined ones may not be
        supported by every storage.
        """
        pass


class IStorage(abc.ABC):
    """
    Interface for a registry of buckets.
    """

    @abc.abstractmethod
    def set_buckets(self, buckets) -> bool:
        """Sets up buckets from a mapping or a list of bucket names."""
        pass

    @abc.abstractmethod
    def get_buckets(self) -> Dict[str, IBucket]:
        pass

    @abc.abstractmethod
    def get_bucket(self, bucket_name: str) -> IBucket:
        """Returns the bucket instance, raising BucketNotFoundError if it is unknown."""
        pass

    @abc.abstractmethod
    def add_bucket(self, bucket_name: str, bucket_data: Any = None) -> bool:
        """Adds a bucket instance or configuration."""
        pass

    @abc.abstractmethod
    def has_bucket(self, bucket_name: str) -> bool:
        pass

    @property
    @abc.abstractmethod
    def base_url(self) -> BaseUrl:
        """Web URL, which is basic for all buckets at IBucket.get_file_url()."""
        pass

    @base_url.setter
    @abc.abstractmethod
    def base_url(self, value: BaseUrl) -> None:
        pass
