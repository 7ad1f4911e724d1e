"""
References to files inside a storage.

Internal copy and move operations accept either a file of the bucket the
operation is invoked on, or a file of another bucket of the same storage.
Callers may pass a plain file name or a ``(bucket_name, file_name)`` pair;
:meth:`FileReference.of` turns both into an explicit reference object.
"""

from dataclasses import dataclass
from typing import Any, Union

from .exceptions import InvalidArgumentError


@dataclass(frozen=True)
class LocalFile:
    """A file of the bucket the operation is invoked on."""

    file_name: str


@dataclass(frozen=True)
class BucketFile:
    """A file of a named bucket of the owning storage."""

    bucket_name: str
    file_name: str


FileReferenceType = Union[LocalFile, BucketFile]


class FileReference:
    @staticmethod
    def of(value: Any) -> FileReferenceType:
        if isinstance(value, (LocalFile, BucketFile)):
            return value
        if isinstance(value, str):
            return LocalFile(value)
        if isinstance(value, (tuple, list)):
            if len(value) != 2 or not all(isinstance(item, str) for item in value):
                raise InvalidArgumentError(
                    f"File reference should be a pair of (bucket name, file name), got: {value!r}"
                )
            bucket_name, file_name = value
            return BucketFile(bucket_name, file_name)
        raise InvalidArgumentError(
            f"File reference should be a file name or a (bucket name, file name) pair, got: {value!r}"
        )
