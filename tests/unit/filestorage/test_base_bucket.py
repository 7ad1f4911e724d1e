import logging

import pytest

from filestorage.backends.local_file_storage import LocalFileBucket, LocalFileStorage
from filestorage.base_bucket import render_route
from filestorage.exceptions import BucketNotFoundError, InvalidArgumentError
from filestorage.file_reference import BucketFile

pytestmark = pytest.mark.unit


@pytest.fixture
def storage(tmp_path) -> LocalFileStorage:
    return LocalFileStorage(
        base_path=str(tmp_path),
        base_url="http://files.test",
        buckets={
            "plain": {},
            "sharded": {"file_sub_dir_template": "{^name}/{^^name}"},
            "own_url": {"base_url": "http://own.test/files"},
        },
    )


def test_file_url_appends_bucket_name(storage: LocalFileStorage) -> None:
    assert storage.get_bucket("plain").get_file_url("file.txt") == "http://files.test/plain/file.txt"


def test_file_url_includes_sub_dir(storage: LocalFileStorage) -> None:
    assert storage.get_bucket("sharded").get_file_url("54321.tmp") == "http://files.test/sharded/5/4/54321.tmp"


def test_file_url_with_bucket_base_url_skips_bucket_name(storage: LocalFileStorage) -> None:
    assert storage.get_bucket("own_url").get_file_url("file.txt") == "http://own.test/files/file.txt"


def test_file_url_with_route_descriptor(storage: LocalFileStorage) -> None:
    storage.base_url = {"route": "/download"}
    url = storage.get_bucket("plain").get_file_url("dir/file.txt")
    assert url == "/download?bucket=plain&filename=dir%2Ffile.txt"


def test_render_route_keeps_existing_query() -> None:
    assert render_route({"route": "/download?v=1", "bucket": "b"}) == "/download?v=1&bucket=b"


def test_render_route_requires_route() -> None:
    with pytest.raises(InvalidArgumentError):
        render_route({"bucket": "b"})


def test_resolve_local_reference(storage: LocalFileStorage) -> None:
    bucket = storage.get_bucket("plain")
    assert bucket.resolve_file_reference("file.txt") == (bucket, "file.txt")


def test_resolve_reference_to_other_bucket(storage: LocalFileStorage) -> None:
    bucket = storage.get_bucket("plain")
    other, file_name = bucket.resolve_file_reference(("sharded", "file.txt"))
    assert other is storage.get_bucket("sharded")
    assert file_name == "file.txt"


def test_self_reference_by_name_equals_omission(storage: LocalFileStorage) -> None:
    bucket = storage.get_bucket("plain")
    assert bucket.resolve_file_reference(BucketFile("plain", "f")) == bucket.resolve_file_reference("f")


def test_resolve_reference_to_unknown_bucket_raises(storage: LocalFileStorage) -> None:
    with pytest.raises(BucketNotFoundError):
        storage.get_bucket("plain").resolve_file_reference(("unknown", "file.txt"))


def test_name_with_sub_dir(storage: LocalFileStorage) -> None:
    assert storage.get_bucket("sharded").get_file_name_with_sub_dir("54321.tmp") == "5/4/54321.tmp"


def test_default_logger_is_named_after_bucket(storage: LocalFileStorage) -> None:
    bucket = storage.get_bucket("plain")
    assert bucket.logger.name.endswith("LocalFileBucket(plain)")


def test_injected_logger_is_used(storage: LocalFileStorage) -> None:
    custom = logging.getLogger("custom.bucket.logger")
    storage.add_bucket("logged", {"logger": custom})
    assert storage.get_bucket("logged").logger is custom


def test_encode_content() -> None:
    assert LocalFileBucket.encode_content("text") == b"text"
    assert LocalFileBucket.encode_content(b"raw") == b"raw"
