"""Creation of temporary files with given content."""

from __future__ import annotations

import os
import tempfile


def create_temp_file_with_content(pattern: str, content: str) -> str:
    """Create a file in the system temporary directory holding ``content``.

    The last ``*`` in ``pattern`` is replaced by a random string; without a
    ``*`` the random string is appended. The caller removes the file.
    """
    if os.sep in pattern or (os.altsep and os.altsep in pattern):
        raise ValueError(f"pattern contains path separator: {pattern!r}")
    if "*" in pattern:
        prefix, suffix = pattern.rsplit("*", 1)
    else:
        prefix, suffix = pattern, ""

    fd, path = tempfile.mkstemp(suffix=suffix, prefix=prefix)
    with os.fdopen(fd, "wb") as handle:
        handle.write(content.encode("utf-8"))
    return path