import os
import shutil
import logging
from pathlib import Path
from typing import Any, Dict, Optional

import aiofiles
import aiofiles.os

from ..base_bucket import BaseBucket
from ..base_storage import BaseStorage
from ..exceptions import FileNotFoundInBucketError, FileStorageError
from ..factory import BucketTypeRegistry, StorageTypeRegistry

logger = logging.getLogger(__name__)

COPY_CHUNK_SIZE = 64 * 1024


async def copy_local_file(src_path: Path, dest_path: Path) -> int:
    """Copies a file chunk by chunk, returning the number of bytes written."""
    written = 0
    async with aiofiles.open(src_path, mode="rb") as src:
        async with aiofiles.open(dest_path, mode="wb") as dest:
            while True:
                chunk = await src.read(COPY_CHUNK_SIZE)
                if not chunk:
                    break
                written += await dest.write(chunk)
    return written


class LocalFileBucket(BaseBucket):
    """
    Bucket, which stores its files in a directory of the local file system.
    The directory is located at the storage base path; its name is the bucket
    name unless ``base_sub_path`` is given.
    """

    def __init__(self, base_sub_path: str = "", **kwargs):
        super().__init__(**kwargs)
        self._base_sub_path = base_sub_path

    @property
    def base_sub_path(self) -> str:
        return self._base_sub_path or self.name

    @base_sub_path.setter
    def base_sub_path(self, value: str) -> None:
        self._base_sub_path = value
        self.clear_internal_cache()

    def get_full_base_path(self) -> Path:
        return Path(self.storage.base_path) / self.base_sub_path

    def get_full_file_name(self, file_name: str) -> Path:
        """Resolves a file name to an absolute path, ensuring it's within the bucket directory."""
        base_path = self.get_full_base_path().resolve()
        full_path = (base_path / self.get_file_name_with_sub_dir(file_name)).resolve()
        if base_path not in full_path.parents:
            raise FileStorageError(f"Path traversal attempt detected: {file_name}")
        return full_path

    async def _resolve_path(self, path: Path) -> None:
        """Ensures the directory exists and is writable."""
        if not await aiofiles.os.path.exists(path):
            self.logger.debug(f"creating file path '{path}'")
            await aiofiles.os.makedirs(path, mode=self.storage.dir_permission, exist_ok=True)
        if not await aiofiles.os.path.isdir(path):
            raise FileStorageError(f"Path '{path}' is not a directory")
        if not os.access(path, os.W_OK):
            raise FileStorageError(f"Path '{path}' should be writable")

    async def _resolve_full_base_path(self) -> Path:
        cached = self._internal_cache.get("resolved_full_base_path")
        if cached is not None:
            return cached
        full_base_path = self.get_full_base_path()
        await self._resolve_path(full_base_path)
        self._internal_cache["resolved_full_base_path"] = full_base_path
        return full_base_path

    async def _resolve_full_file_name(self, file_name: str) -> Path:
        """Returns the full file name, creating its directory if needed."""
        await self._resolve_full_base_path()
        full_file_name = self.get_full_file_name(file_name)
        await self._resolve_path(full_file_name.parent)
        return full_file_name

    def _apply_file_permission(self, path: Path) -> None:
        os.chmod(path, self.storage.file_permission)

    # --- Bucket ---

    async def create(self) -> bool:
        await self._resolve_full_base_path()
        return True

    async def destroy(self) -> bool:
        full_base_path = self.get_full_base_path()
        try:
            if await aiofiles.os.path.isdir(full_base_path):
                # aiofiles.os doesn't have rmtree
                shutil.rmtree(full_base_path)
        except OSError as e:
            self.logger.error(f"Unable to destroy bucket at base path '{full_base_path}': {e}")
            return False
        self.logger.info(f"bucket has been destroyed at base path '{full_base_path}'")
        self.clear_internal_cache()
        return True

    async def exists(self) -> bool:
        return await aiofiles.os.path.isdir(self.get_full_base_path())

    # --- Files ---

    async def save_file_content(self, file_name, content) -> bool:
        data = self.encode_content(content)
        try:
            full_file_name = await self._resolve_full_file_name(file_name)
            async with aiofiles.open(full_file_name, mode="wb") as f:
                written = await f.write(data)
            result = written > 0
            if result:
                self._apply_file_permission(full_file_name)
        except OSError as e:
            self.logger.error(f"Unable to save file '{file_name}': {e}")
            return False
        if result:
            self.logger.info(f"file '{full_file_name}' has been saved")
        else:
            self.logger.error(f"Unable to save file '{full_file_name}': no content has been written")
        return result

    async def get_file_content(self, file_name: str) -> bytes:
        full_file_name = self.get_full_file_name(file_name)
        try:
            async with aiofiles.open(full_file_name, mode="rb") as f:
                data = await f.read()
        except FileNotFoundError as e:
            raise FileNotFoundInBucketError(self.name, file_name) from e
        self.logger.debug(f"content of file '{full_file_name}' has been returned")
        return data

    async def delete_file(self, file_name: str) -> bool:
        full_file_name = self.get_full_file_name(file_name)
        if not await aiofiles.os.path.exists(full_file_name):
            self.logger.warning(f"unable to delete file '{full_file_name}': file does not exist")
            return True
        try:
            await aiofiles.os.remove(full_file_name)
        except OSError as e:
            self.logger.error(f"unable to delete file '{full_file_name}': {e}")
            return False
        self.logger.info(f"file '{full_file_name}' has been deleted")
        return True

    async def file_exists(self, file_name: str) -> bool:
        return await aiofiles.os.path.isfile(self.get_full_file_name(file_name))

    async def copy_file_in(self, src_file_name: str, file_name: str) -> bool:
        try:
            full_file_name = await self._resolve_full_file_name(file_name)
            await copy_local_file(Path(src_file_name), full_file_name)
            self._apply_file_permission(full_file_name)
        except OSError as e:
            self.logger.error(f"unable to copy file from '{src_file_name}' to '{file_name}': {e}")
            return False
        self.logger.info(f"file '{src_file_name}' has been copied to '{full_file_name}'")
        return True

    async def copy_file_out(self, file_name: str, dest_file_name: str) -> bool:
        full_file_name = self.get_full_file_name(file_name)
        try:
            await copy_local_file(full_file_name, Path(dest_file_name))
        except OSError as e:
            self.logger.error(f"unable to copy file from '{full_file_name}' to '{dest_file_name}': {e}")
            return False
        self.logger.info(f"file '{full_file_name}' has been copied to '{dest_file_name}'")
        return True

    async def copy_file_internal(self, src_file: Any, dest_file: Any) -> bool:
        src_bucket, src_file_name = self.resolve_file_reference(src_file)
        dest_bucket, dest_file_name = self.resolve_file_reference(dest_file)
        if not isinstance(src_bucket, LocalFileBucket) or not isinstance(dest_bucket, LocalFileBucket):
            return await super().copy_file_internal(src_file, dest_file)

        src_full_file_name = src_bucket.get_full_file_name(src_file_name)
        if src_full_file_name == dest_bucket.get_full_file_name(dest_file_name):
            return await src_bucket.file_exists(src_file_name)
        try:
            dest_full_file_name = await dest_bucket._resolve_full_file_name(dest_file_name)
            await copy_local_file(src_full_file_name, dest_full_file_name)
            dest_bucket._apply_file_permission(dest_full_file_name)
        except OSError as e:
            self.logger.error(f"unable to copy file from '{src_full_file_name}' to '{dest_bucket.name}/{dest_file_name}': {e}")
            return False
        self.logger.info(f"file '{src_full_file_name}' has been copied to '{dest_full_file_name}'")
        return True

    def get_url_name_segment(self) -> str:
        return self.base_sub_path

    def open_file(self, file_name: str, mode: str = "r", context: Optional[Dict[str, Any]] = None):
        full_file_name = self.get_full_file_name(file_name)
        if any(flag in mode for flag in "wax+"):
            os.makedirs(full_file_name.parent, mode=self.storage.dir_permission, exist_ok=True)
        return aiofiles.open(full_file_name, mode=mode, **(context or {}))


class LocalFileStorage(BaseStorage):
    """
    File storage based on the local file system.
    Each bucket is a sub directory of ``base_path``.
    """

    bucket_class = LocalFileBucket

    def __init__(
        self,
        base_path: str = "",
        file_permission: int = 0o755,
        dir_permission: Optional[int] = None,
        **kwargs,
    ):
        self.base_path = base_path
        self.file_permission = file_permission
        self.dir_permission = dir_permission if dir_permission is not None else file_permission
        super().__init__(**kwargs)
        logger.info(f"Initialized LocalFileStorage with base path: {self.base_path}")

    @property
    def base_path(self) -> str:
        return self._base_path

    @base_path.setter
    def base_path(self, value: str) -> None:
        self._base_path = str(Path(value).expanduser()) if value else ""


BucketTypeRegistry.register("local", LocalFileBucket)
StorageTypeRegistry.register("local", LocalFileStorage)
