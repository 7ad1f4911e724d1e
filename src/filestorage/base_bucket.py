import asyncio
import logging
import weakref
from typing import Any, Dict, Mapping, Optional, Tuple, Union
from urllib.parse import quote, urlencode

import aiofiles.os

from .exceptions import FileNotFoundInBucketError, FileStorageError, InvalidArgumentError
from .file_reference import BucketFile, FileReference
from .interfaces import BaseUrl, IBucket, IStorage
from .subdir_template import file_name_with_sub_dir, resolve_sub_dir


def render_route(route: Mapping[str, Any]) -> str:
    """
    Renders a route descriptor into a URL.
    The 'route' entry is the URL path, all other entries become query parameters.
    """
    if "route" not in route:
        raise InvalidArgumentError(f"Route descriptor should contain a 'route' entry: {route!r}")
    params = {key: value for key, value in route.items() if key != "route"}
    url = str(route["route"])
    if params:
        url += ("&" if "?" in url else "?") + urlencode(params)
    return url


class BaseBucket(IBucket):
    """
    Base class for the file storage buckets.

    Holds the bucket name, a weak reference to the owning storage, the sub
    directory template and the URL composition rules. File references of the
    internal copy/move operations are resolved here, as well as the generic
    move and batch operations, which are built on top of the copy and save
    primitives each backend implements.
    """

    def __init__(
        self,
        name: str = "",
        storage: Optional[IStorage] = None,
        file_sub_dir_template: str = "",
        base_url: BaseUrl = None,
        logger: Optional[logging.Logger] = None,
    ):
        self._name = name
        self._storage_ref = None
        if storage is not None:
            self.storage = storage
        self.file_sub_dir_template = file_sub_dir_template
        self._base_url = base_url
        self._logger = logger
        self._internal_cache: Dict[str, Any] = {}

    def __repr__(self) -> str:
        return f"{type(self).__name__}(name={self._name!r})"

    @property
    def name(self) -> str:
        return self._name

    @name.setter
    def name(self, value: str) -> None:
        self._name = value

    @property
    def storage(self) -> IStorage:
        storage = self._storage_ref() if self._storage_ref is not None else None
        if storage is None:
            raise FileStorageError(f"Bucket '{self._name}' is not attached to any file storage")
        return storage

    @storage.setter
    def storage(self, value: IStorage) -> None:
        self._storage_ref = weakref.ref(value)

    @property
    def logger(self) -> logging.Logger:
        if self._logger is not None:
            return self._logger
        cls = type(self)
        return logging.getLogger(f"{cls.__module__}.{cls.__name__}({self._name})")

    @property
    def base_url(self) -> BaseUrl:
        return self._base_url

    @base_url.setter
    def base_url(self, value: BaseUrl) -> None:
        self._base_url = value

    def clear_internal_cache(self) -> bool:
        self._internal_cache = {}
        return True

    # --- File names ---

    def get_file_sub_dir(self, file_name: str) -> str:
        return resolve_sub_dir(self.file_sub_dir_template, file_name)

    def get_file_name_with_sub_dir(self, file_name: str) -> str:
        """Returns the file name including the path resolved from file_sub_dir_template."""
        return file_name_with_sub_dir(self.file_sub_dir_template, file_name)

    def resolve_file_reference(self, file_reference: Any) -> Tuple["BaseBucket", str]:
        """
        Resolves a file reference into the bucket owning the file and the file name.
        References to other buckets are looked up through the owning storage.
        """
        reference = FileReference.of(file_reference)
        if isinstance(reference, BucketFile):
            return self.storage.get_bucket(reference.bucket_name), reference.file_name
        return self, reference.file_name

    # --- URLs ---

    def get_file_url(self, file_name: str) -> str:
        base_url = self.base_url
        include_bucket_name = False
        if not base_url:
            base_url = self.storage.base_url
            include_bucket_name = True

        if isinstance(base_url, Mapping):
            route = dict(base_url)
            route["bucket"] = self.name
            route["filename"] = file_name
            return render_route(route)

        return self.compose_file_url(base_url, file_name, include_bucket_name)

    def get_url_name_segment(self) -> str:
        """Path segment, which represents the bucket inside the storage base URL."""
        return quote(self.name, safe="")

    def compose_file_url(self, base_url: Optional[str], file_name: str, include_bucket_name: bool = True) -> str:
        """
        Composes file URL from the base URL and file name.
        Invoked from get_file_url() in case the base URL is not a route descriptor.
        """
        url = (base_url or "").rstrip("/")
        if include_bucket_name:
            url += "/" + self.get_url_name_segment()
        file_sub_dir = self.get_file_sub_dir(file_name)
        if file_sub_dir:
            url += "/" + file_sub_dir
        return url + "/" + file_name

    # --- Generic operations ---

    @staticmethod
    def encode_content(content: Union[bytes, str]) -> bytes:
        if isinstance(content, str):
            return content.encode("utf-8")
        return bytes(content)

    async def copy_file_internal(self, src_file: Any, dest_file: Any) -> bool:
        """
        Copies a file between buckets of the owning storage through their content.
        Backends override this with a native copy where the medium offers one.
        """
        src_bucket, src_file_name = self.resolve_file_reference(src_file)
        dest_bucket, dest_file_name = self.resolve_file_reference(dest_file)
        try:
            content = await src_bucket.get_file_content(src_file_name)
        except FileNotFoundInBucketError as e:
            self.logger.error(f"Unable to copy file: {e}")
            return False
        result = await dest_bucket.save_file_content(dest_file_name, content)
        if result:
            self.logger.info(
                f"file '{src_bucket.name}/{src_file_name}' has been copied to '{dest_bucket.name}/{dest_file_name}'"
            )
        return result

    async def move_file_in(self, src_file_name: str, file_name: str) -> bool:
        if not await self.copy_file_in(src_file_name, file_name):
            return False
        try:
            await aiofiles.os.remove(src_file_name)
        except OSError as e:
            self.logger.error(f"Unable to delete source file '{src_file_name}' after copying it in: {e}")
            return False
        return True

    async def move_file_out(self, file_name: str, dest_file_name: str) -> bool:
        if not await self.copy_file_out(file_name, dest_file_name):
            return False
        return await self.delete_file(file_name)

    async def move_file_internal(self, src_file: Any, dest_file: Any) -> bool:
        src_bucket, src_file_name = self.resolve_file_reference(src_file)
        dest_bucket, dest_file_name = self.resolve_file_reference(dest_file)
        if src_bucket is dest_bucket and src_file_name == dest_file_name:
            return await src_bucket.file_exists(src_file_name)
        if not await self.copy_file_internal(src_file, dest_file):
            return False
        return await src_bucket.delete_file(src_file_name)

    async def save_file_content_batch(self, file_contents: Mapping[str, Union[bytes, str]]) -> bool:
        """Saves the given files in parallel; format: ``file_name => content``."""
        results = await asyncio.gather(
            *(self.save_file_content(file_name, content) for file_name, content in file_contents.items())
        )
        return all(results)

    async def copy_file_in_batch(self, files_map: Mapping[str, str]) -> bool:
        """Copies the given files into the bucket in parallel; format: ``src_file_name => file_name``."""
        results = await asyncio.gather(
            *(self.copy_file_in(src_file_name, file_name) for src_file_name, file_name in files_map.items())
        )
        return all(results)
