"""
Download of bucket files for web layers.

DownloadAction checks the requested bucket against allow and deny lists,
verifies the file exists and opens it for reading. Sending the response is
left to the web framework: the result carries the open stream, the MIME type
and the inline/attachment choice.
"""

import logging
import mimetypes
import posixpath
from dataclasses import dataclass
from typing import Any, AsyncIterator, Callable, Iterable, Optional, Union

from .exceptions import BucketNotFoundError, FileNotFoundInBucketError
from .interfaces import IBucket, IStorage

logger = logging.getLogger(__name__)

DEFAULT_MIME_TYPE = "application/octet-stream"
DEFAULT_CHUNK_SIZE = 64 * 1024


@dataclass
class FileDownload:
    file_name: str
    mime_type: str
    inline: bool
    handle: Any

    @property
    def content_disposition(self) -> str:
        disposition = "inline" if self.inline else "attachment"
        return f'{disposition}; filename="{self.file_name}"'

    async def iter_chunks(self, chunk_size: int = DEFAULT_CHUNK_SIZE) -> AsyncIterator[bytes]:
        """Yields the file content, closing the handle once done."""
        try:
            while True:
                chunk = await self.handle.read(chunk_size)
                if not chunk:
                    break
                yield chunk
        finally:
            await self.handle.close()


class DownloadAction:
    def __init__(
        self,
        file_storage: IStorage,
        only_buckets: Optional[Iterable[str]] = None,
        except_buckets: Optional[Iterable[str]] = None,
        check_file_existence: bool = True,
        inline: Union[bool, Callable[[IBucket, str], bool]] = False,
    ):
        self.file_storage = file_storage
        self.only_buckets = list(only_buckets) if only_buckets else None
        self.except_buckets = list(except_buckets or [])
        self.check_file_existence = check_file_existence
        self.inline = inline

    def is_bucket_allowed(self, bucket_name: str) -> bool:
        if bucket_name in self.except_buckets:
            return False
        return not self.only_buckets or bucket_name in self.only_buckets

    async def run(self, bucket_name: str, file_name: str) -> FileDownload:
        if not self.is_bucket_allowed(bucket_name) or not self.file_storage.has_bucket(bucket_name):
            raise BucketNotFoundError(f"Bucket '{bucket_name}' does not exist.")

        bucket = self.file_storage.get_bucket(bucket_name)

        if self.check_file_existence and not await bucket.file_exists(file_name):
            raise FileNotFoundInBucketError(bucket_name, file_name)

        mime_type = mimetypes.guess_type(file_name)[0] or DEFAULT_MIME_TYPE
        inline = self.inline(bucket, file_name) if callable(self.inline) else self.inline

        handle = await bucket.open_file(file_name, "rb")
        logger.debug(f"Serving file '{file_name}' from bucket '{bucket_name}' as {mime_type}")
        return FileDownload(
            file_name=posixpath.basename(file_name),
            mime_type=mime_type,
            inline=bool(inline),
            handle=handle,
        )
