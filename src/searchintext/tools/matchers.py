"""
Keyword matching primitives.

Matching is plain, case-sensitive substring containment: no regular
expressions, no normalization and no binary-content heuristics.
"""

from pathlib import Path
from typing import Union


def name_contains(name: str, keyword: str) -> bool:
    """Check whether an entry's base name contains the keyword."""
    return keyword in name


def content_contains(content: bytes, keyword: Union[str, bytes]) -> bool:
    """
    Check whether raw file content contains the keyword.

    Args:
        content: File content as read from disk
        keyword: Keyword as text (encoded as UTF-8) or pre-encoded bytes

    Returns:
        True if the keyword bytes occur anywhere in the content
    """
    if isinstance(keyword, str):
        keyword = keyword.encode('utf-8')
    return keyword in content


def read_file(path: Union[str, Path]) -> bytes:
    """
    Read a whole file into memory.

    The caller is responsible for only passing files below the size
    ceiling.

    Raises:
        OSError: If the file cannot be opened or read
    """
    with open(path, 'rb') as f:
        return f.read()
