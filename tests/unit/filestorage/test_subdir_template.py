import pytest

from filestorage.exceptions import UnknownPlaceholderError
from filestorage.subdir_template import (
    file_name_with_sub_dir,
    get_file_extension,
    resolve_sub_dir,
)

pytestmark = pytest.mark.unit


def test_empty_template_gives_no_sub_dir() -> None:
    assert resolve_sub_dir("", "54321.tmp") == ""
    assert file_name_with_sub_dir("", "54321.tmp") == "54321.tmp"


@pytest.mark.parametrize(
    "template, file_name, expected",
    [
        ("{^name}/{^^name}", "54321.tmp", "5/4"),
        ("{ext}/{^name}/{^^name}", "test_file_self_name.tmp", "tmp/t/e"),
        ("{name}", "54321.tmp", "54321.tmp"),
        ("{ext}", "54321.tmp", "tmp"),
        ("{extension}", "archive.tar.gz", "gz"),
        ("{^ext}{^^ext}", "file.tmp", "tm"),
        ("static/{^name}", "abc", "static/a"),
    ],
)
def test_resolve_sub_dir(template, file_name, expected) -> None:
    assert resolve_sub_dir(template, file_name) == expected


def test_full_file_name_includes_sub_dir() -> None:
    assert file_name_with_sub_dir("{^name}/{^^name}", "54321.tmp") == "5/4/54321.tmp"


@pytest.mark.parametrize("file_name", ["a", "ab.c", "12345"])
def test_caret_count_beyond_value_length_gives_default(file_name) -> None:
    carets = "^" * (len(file_name) + 1)
    assert resolve_sub_dir("{" + carets + "name}", file_name) == "0"


def test_dot_and_empty_values_give_default() -> None:
    # second character of '1.tmp' is a dot
    assert resolve_sub_dir("{^^name}", "1.tmp") == "0"
    assert resolve_sub_dir("{ext}", "no_extension") == "0"


def test_literal_text_is_preserved() -> None:
    assert resolve_sub_dir("files-{^name}/{not a placeholder}", "xyz") == "files-x/{not a placeholder}"


def test_unknown_placeholder_raises() -> None:
    with pytest.raises(UnknownPlaceholderError, match="unknown placeholder 'size'"):
        resolve_sub_dir("{^size}", "54321.tmp")


def test_unknown_placeholder_is_a_value_error() -> None:
    with pytest.raises(ValueError):
        resolve_sub_dir("{date}", "54321.tmp")


@pytest.mark.parametrize(
    "file_name, expected",
    [
        ("file.tmp", "tmp"),
        ("file", ""),
        ("dir.d/file", ""),
        ("dir/file.txt", "txt"),
        (".htaccess", "htaccess"),
    ],
)
def test_get_file_extension(file_name, expected) -> None:
    assert get_file_extension(file_name) == expected
