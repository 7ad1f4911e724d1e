"""
Resolution of dynamic file sub directories.

A bucket may store its files under sub directories derived from the file
name, so that thousands of files do not end up in a single directory.
The template places attribute names in curly brackets, e.g. ``{name}``:

    {name}               - name of the file
    {ext}, {extension}   - extension of the file

Symbols ``^`` placed before the attribute name select a single character of
the value, the number of ``^`` being its 1-based position. For the file name
``54321.tmp`` the placeholder ``{^name}`` resolves to ``5``, ``{^^name}`` to
``4`` and so on, so ``'{^name}/{^^name}'`` yields ``'5/4'``.
"""

import posixpath
import re

from .exceptions import UnknownPlaceholderError

PLACEHOLDER_PATTERN = re.compile(r"\{(\^*)(\w+)\}")

# Used for out of range positions and for values that cannot form a path segment.
DEFAULT_PLACEHOLDER_VALUE = "0"


def get_file_extension(file_name: str) -> str:
    """Returns the part of the base name after the last dot, or '' if there is none."""
    base_name = posixpath.basename(file_name)
    if "." not in base_name:
        return ""
    return base_name.rsplit(".", 1)[1]


def _placeholder_base_value(placeholder_name: str, file_name: str) -> str:
    if placeholder_name == "name":
        return file_name
    if placeholder_name in ("ext", "extension"):
        return get_file_extension(file_name)
    raise UnknownPlaceholderError(placeholder_name)


def resolve_placeholder(carets: str, placeholder_name: str, file_name: str) -> str:
    """Resolves a single ``{<carets><placeholder_name>}`` placeholder."""
    value = _placeholder_base_value(placeholder_name, file_name)

    position = len(carets) - 1
    if position >= 0:
        if position < len(value):
            value = value[position]
        else:
            value = DEFAULT_PLACEHOLDER_VALUE

    if not value or value == ".":
        value = DEFAULT_PLACEHOLDER_VALUE
    return value


def resolve_sub_dir(template: str, file_name: str) -> str:
    """
    Resolves the sub directory template for the given file name.

    Args:
        template: Sub directory template, e.g. '{ext}/{^name}/{^^name}'.
        file_name: Name of the file the sub directory is computed for.

    Returns:
        Resolved sub directory path, '' if the template is empty.

    Raises:
        UnknownPlaceholderError: If the template uses an unknown placeholder.
    """
    if not template:
        return ""
    return PLACEHOLDER_PATTERN.sub(
        lambda match: resolve_placeholder(match.group(1), match.group(2), file_name),
        template,
    )


def file_name_with_sub_dir(template: str, file_name: str) -> str:
    """Returns the file name prefixed with its resolved sub directory."""
    sub_dir = resolve_sub_dir(template, file_name)
    if sub_dir:
        return f"{sub_dir}/{file_name}"
    return file_name
