import pytest

from filestorage.exceptions import InvalidArgumentError
from filestorage.file_reference import BucketFile, FileReference, LocalFile

pytestmark = pytest.mark.unit


def test_plain_name_is_local_file() -> None:
    assert FileReference.of("file.txt") == LocalFile("file.txt")


@pytest.mark.parametrize("value", [("bucket", "file.txt"), ["bucket", "file.txt"]])
def test_pair_is_bucket_file(value) -> None:
    assert FileReference.of(value) == BucketFile("bucket", "file.txt")


def test_reference_objects_pass_through() -> None:
    reference = BucketFile("bucket", "file.txt")
    assert FileReference.of(reference) is reference


@pytest.mark.parametrize("value", [None, 42, ("only_bucket",), ("a", "b", "c"), ("bucket", 1)])
def test_invalid_reference_raises(value) -> None:
    with pytest.raises(InvalidArgumentError):
        FileReference.of(value)
