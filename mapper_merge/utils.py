"""
Utility functions for resolving where generated files are written.
"""

import re

# Runs of path separators, collapsed to a single "/"
_SEPARATOR_PATTERN = re.compile(r"/+")


def _split_segments(text: str) -> list[str]:
    """Split a path-like string on "/" and drop empty segments."""
    return [segment for segment in _SEPARATOR_PATTERN.split(text) if segment]


def namespace_to_path(namespace: str) -> str:
    """Convert a dot- or slash-delimited namespace to a relative path.

    Examples:
        "com.example.dao" -> "com/example/dao"
        "com/example/dao" -> "com/example/dao"
        "" -> ""

    Args:
        namespace: Package or namespace as emitted by the generator

    Returns:
        The namespace with every "." replaced by "/"
    """
    if not namespace:
        return ""
    return "/".join(_split_segments(namespace.replace(".", "/")))


def concat_path(*parts: str) -> str:
    """Join path parts with "/", collapsing duplicated separators.

    A leading "/" on the first non-empty part is kept so absolute roots stay
    absolute.

    Examples:
        ("src/main/java", "com/example", "Foo.java") -> "src/main/java/com/example/Foo.java"
        ("/project/", "", "a.xml") -> "/project/a.xml"
    """
    segments: list[str] = []
    absolute = False
    for part in parts:
        if not part:
            continue
        if not segments and not absolute and part.startswith("/"):
            absolute = True
        segments.extend(_split_segments(part))
    joined = "/".join(segments)
    return "/" + joined if absolute else joined


def artifact_path(target_root: str, target_package: str, file_name: str) -> str:
    """Path a generated file is written to: root / package-as-path / file name."""
    return concat_path(target_root, namespace_to_path(target_package), file_name)
