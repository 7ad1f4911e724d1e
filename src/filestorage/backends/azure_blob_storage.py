import io
import re
import logging
from typing import Any, Dict, Optional

import aiofiles
from azure.core.exceptions import AzureError, ResourceExistsError, ResourceNotFoundError
from azure.storage.blob.aio import BlobClient, BlobServiceClient, ContainerClient

from ..base_bucket import BaseBucket
from ..base_storage import BaseStorage
from ..exceptions import FileNotFoundInBucketError, FileStorageError, InvalidArgumentError
from ..factory import BucketTypeRegistry, StorageTypeRegistry

try:
    from azure.identity.aio import DefaultAzureCredential

    AZURE_IDENTITY_AVAILABLE = True
except ImportError:
    AZURE_IDENTITY_AVAILABLE = False

logger = logging.getLogger(__name__)

BLOB_STREAM_MODES = ("r", "rb", "w", "wb", "a", "ab")


class BlobFileStream:
    """
    File-like async handle for a blob, buffered in memory.
    Read modes download the blob on open; write and append modes upload the
    buffer on close. Usable both awaited and as an async context manager.
    """

    def __init__(self, bucket: "AzureBlobBucket", file_name: str, mode: str, encoding: str = "utf-8"):
        if mode not in BLOB_STREAM_MODES:
            raise InvalidArgumentError(f"Unsupported blob stream mode '{mode}', supported: {BLOB_STREAM_MODES}")
        self.bucket = bucket
        self.file_name = file_name
        self.mode = mode
        self.encoding = encoding
        self.closed = False
        self._opened = False
        self._buffer = io.BytesIO()
        self._reader = None

    @property
    def binary(self) -> bool:
        return "b" in self.mode

    @property
    def writable(self) -> bool:
        return self.mode[0] in ("w", "a")

    async def _open(self) -> "BlobFileStream":
        if self._opened:
            return self
        self._opened = True
        if self.mode[0] == "r":
            content = await self.bucket.get_file_content(self.file_name)
            raw = io.BytesIO(content)
            self._reader = raw if self.binary else io.TextIOWrapper(raw, encoding=self.encoding)
        elif self.mode[0] == "a":
            try:
                self._buffer.write(await self.bucket.get_file_content(self.file_name))
            except FileNotFoundInBucketError:
                pass
        return self

    def __await__(self):
        return self._open().__await__()

    async def __aenter__(self) -> "BlobFileStream":
        return await self._open()

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.close()

    async def read(self, size: int = -1):
        if self._reader is None:
            raise io.UnsupportedOperation(f"Blob stream opened in mode '{self.mode}' is not readable")
        return self._reader.read(size)

    async def write(self, data) -> int:
        if not self.writable:
            raise io.UnsupportedOperation(f"Blob stream opened in mode '{self.mode}' is not writable")
        if isinstance(data, str):
            data = data.encode(self.encoding)
        return self._buffer.write(data)

    async def close(self) -> None:
        if self.closed:
            return
        self.closed = True
        if self.writable and not await self.bucket.upload_blob_content(self.file_name, self._buffer.getvalue()):
            raise FileStorageError(
                f"Unable to write file '{self.file_name}' to bucket '{self.bucket.name}': upload has failed"
            )


class AzureBlobBucket(BaseBucket):
    """
    Bucket, which stores its files as blobs of an Azure Blob Storage container.
    The container name is derived from the bucket name unless ``container_name`` is given.
    """

    def __init__(self, container_name: str = "", **kwargs):
        super().__init__(**kwargs)
        self._container_name = container_name

    @property
    def container_name(self) -> str:
        if not self._container_name:
            self._container_name = self.default_container_name()
        return self._container_name

    @container_name.setter
    def container_name(self, value: str) -> None:
        self._container_name = value
        self.clear_internal_cache()

    def default_container_name(self) -> str:
        """Container names allow lowercase letters, digits and dashes only."""
        return re.sub(r"[^a-z0-9-]", "-", self.name.lower())

    def get_container_client(self) -> ContainerClient:
        container_client = self._internal_cache.get("container_client")
        if container_client is None:
            container_client = self.storage.get_service_client().get_container_client(self.container_name)
            self._internal_cache["container_client"] = container_client
        return container_client

    def get_blob_client(self, file_name: str) -> BlobClient:
        return self.get_container_client().get_blob_client(self.get_file_name_with_sub_dir(file_name))

    # --- Bucket ---

    async def create(self) -> bool:
        if await self.exists():
            return True
        try:
            await self.get_container_client().create_container()
        except ResourceExistsError:
            pass
        except AzureError as e:
            self.logger.error(f"Unable to create container '{self.container_name}': {e}")
            return False
        self._internal_cache["exists"] = True
        self.logger.info(f"bucket has been created with container name '{self.container_name}'")
        return True

    async def destroy(self) -> bool:
        try:
            await self.get_container_client().delete_container()
        except ResourceNotFoundError:
            self.logger.warning(f"Attempted to destroy non-existent container '{self.container_name}'")
        except AzureError as e:
            self.logger.error(f"Unable to destroy container '{self.container_name}': {e}")
            return False
        self.logger.info(f"bucket has been destroyed with container name '{self.container_name}'")
        self.clear_internal_cache()
        return True

    async def exists(self) -> bool:
        if self._internal_cache.get("exists"):
            return True
        result = await self.get_container_client().exists()
        if result:
            self._internal_cache["exists"] = True
        return result

    # --- Files ---

    async def upload_blob_content(self, file_name: str, data: bytes) -> bool:
        """Uploads raw bytes as the given file, creating the container if needed."""
        blob_client = self.get_blob_client(file_name)
        try:
            if not await self.exists():
                await self.create()
            await blob_client.upload_blob(data, overwrite=True)
        except AzureError as e:
            self.logger.error(f"Unable to save file '{blob_client.blob_name}': {e}")
            return False
        self.logger.debug(f"Saved {len(data)} bytes to Azure blob: {self.container_name}/{blob_client.blob_name}")
        return True

    async def save_file_content(self, file_name, content) -> bool:
        data = self.encode_content(content)
        if not await self.upload_blob_content(file_name, data):
            return False
        if not data:
            self.logger.error(f"Unable to save file '{file_name}': no content has been written")
            return False
        self.logger.info(f"file '{file_name}' has been saved")
        return True

    async def get_file_content(self, file_name: str) -> bytes:
        blob_client = self.get_blob_client(file_name)
        try:
            downloader = await blob_client.download_blob()
            data = await downloader.readall()
        except ResourceNotFoundError as e:
            raise FileNotFoundInBucketError(self.name, file_name) from e
        self.logger.debug(f"content of file '{file_name}' has been returned")
        return data

    async def delete_file(self, file_name: str) -> bool:
        blob_client = self.get_blob_client(file_name)
        try:
            await blob_client.delete_blob(delete_snapshots="include")
        except ResourceNotFoundError:
            self.logger.warning(f"unable to delete file '{file_name}': file does not exist")
            return True
        except AzureError as e:
            self.logger.error(f"unable to delete file '{file_name}': {e}")
            return False
        self.logger.info(f"file '{file_name}' has been deleted")
        return True

    async def file_exists(self, file_name: str) -> bool:
        return await self.get_blob_client(file_name).exists()

    async def copy_file_in(self, src_file_name: str, file_name: str) -> bool:
        try:
            async with aiofiles.open(src_file_name, mode="rb") as f:
                data = await f.read()
        except OSError as e:
            self.logger.error(f"unable to read file '{src_file_name}': {e}")
            return False
        return await self.save_file_content(file_name, data)

    async def copy_file_out(self, file_name: str, dest_file_name: str) -> bool:
        try:
            data = await self.get_file_content(file_name)
            async with aiofiles.open(dest_file_name, mode="wb") as f:
                written = await f.write(data)
        except (FileNotFoundInBucketError, OSError) as e:
            self.logger.error(f"unable to copy file '{file_name}' to '{dest_file_name}': {e}")
            return False
        if not written:
            self.logger.error(f"unable to copy file '{file_name}' to '{dest_file_name}': no content has been written")
            return False
        self.logger.info(f"file '{file_name}' has been copied to '{dest_file_name}'")
        return True

    def get_url_name_segment(self) -> str:
        return self.container_name

    def compose_file_url(self, base_url: Optional[str], file_name: str, include_bucket_name: bool = True) -> str:
        if base_url is None:
            return self.get_blob_client(file_name).url
        return super().compose_file_url(base_url, file_name, include_bucket_name)

    def open_file(self, file_name: str, mode: str = "r", context: Optional[Dict[str, Any]] = None):
        return BlobFileStream(self, file_name, mode, **(context or {}))


class AzureBlobStorage(BaseStorage):
    """
    File storage based on Azure Blob Storage.
    Authenticates either with a connection string or with managed identity.
    """

    bucket_class = AzureBlobBucket

    def __init__(
        self,
        connection_string: Optional[str] = None,
        account_name: Optional[str] = None,
        use_managed_identity: bool = False,
        **kwargs,
    ):
        if use_managed_identity or (not connection_string and account_name):
            if not AZURE_IDENTITY_AVAILABLE:
                raise InvalidArgumentError(
                    "azure-identity package is required for managed identity authentication. "
                    "Install with: pip install azure-identity"
                )
            if not account_name:
                raise InvalidArgumentError("account_name is required when using managed identity authentication.")
            self.auth_mode = "managed_identity"
        elif connection_string:
            self.auth_mode = "connection_string"
        else:
            raise InvalidArgumentError(
                "Either connection_string or (account_name + use_managed_identity=True) must be provided."
            )
        self.connection_string = connection_string
        self.account_name = account_name
        self._service_client: Optional[BlobServiceClient] = None
        self._credential = None
        super().__init__(**kwargs)
        logger.info(f"Initialized AzureBlobStorage using {self.auth_mode} authentication")

    def get_service_client(self) -> BlobServiceClient:
        if self._service_client is None:
            if self.auth_mode == "managed_identity":
                self._credential = DefaultAzureCredential()
                account_url = f"https://{self.account_name}.blob.core.windows.net"
                self._service_client = BlobServiceClient(account_url=account_url, credential=self._credential)
                logger.info(f"Using managed identity for Azure authentication: {account_url}")
            else:
                self._service_client = BlobServiceClient.from_connection_string(self.connection_string)
                logger.info("Using connection string for Azure authentication")
        return self._service_client

    async def close(self) -> None:
        """Closes the underlying BlobServiceClient and credential."""
        if self._service_client is not None:
            try:
                await self._service_client.close()
            finally:
                self._service_client = None
                for bucket in self._materialized_buckets():
                    bucket.clear_internal_cache()
        if self._credential is not None:
            try:
                await self._credential.close()
            finally:
                self._credential = None

    def _materialized_buckets(self):
        return [slot for slot in list(self._buckets.values()) if isinstance(slot, BaseBucket)]

    async def __aenter__(self):
        self.get_service_client()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.close()


BucketTypeRegistry.register("azure_blob", AzureBlobBucket)
StorageTypeRegistry.register("azure_blob", AzureBlobStorage)
