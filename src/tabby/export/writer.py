"""Output writer — persists rendered artifacts under the output root.

Writes go through a temporary sibling file and ``os.replace`` so readers of
the output tree never observe a half-written page.
"""

from __future__ import annotations

import os
from pathlib import Path, PurePosixPath

from tabby._errors import WriteError
from tabby.banner import error


def output_path_for(route: str, output_root: Path) -> Path:
    """Convert a route to its output file path.

    Conventions:
        ``/``               -> ``output/index.html``
        ``/about``          -> ``output/about.html``
        ``/docs/``          -> ``output/docs/index.html``
        ``/feed.xml``       -> ``output/feed.xml``
        ``/notes/v1.2``     -> ``output/notes/v1.2`` (has an extension)

    Raises:
        WriteError: If the route would escape the output root.

    """
    if route == "/" or not route.strip("/"):
        return output_root / "index.html"

    posix = PurePosixPath(route.lstrip("/"))
    if ".." in posix.parts:
        msg = f"Route {route!r} escapes the output root"
        raise WriteError(msg)

    if route.endswith("/"):
        return output_root.joinpath(*posix.parts, "index.html")
    if not posix.suffix:
        posix = posix.with_name(posix.name + ".html")
    return output_root.joinpath(*posix.parts)


class FileWriter:
    """Writes and deletes files under an output root.

    Args:
        root: Absolute output directory. Created on first write.

    """

    __slots__ = ("_root",)

    def __init__(self, root: Path) -> None:
        self._root = root

    @property
    def root(self) -> Path:
        return self._root

    def write(self, path: Path, data: bytes) -> int:
        """Write *data* to *path*, creating parent directories as needed.

        Returns the number of bytes written.

        Raises:
            WriteError: If the file cannot be written.

        """
        tmp = path.with_name(f".{path.name}.tmp")
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            msg = f"Failed to write {path}: {exc}"
            raise WriteError(msg) from exc
        try:
            tmp.write_bytes(data)
            os.replace(tmp, path)
        except OSError as exc:
            tmp.unlink(missing_ok=True)
            msg = f"Failed to write {path}: {exc}"
            raise WriteError(msg) from exc
        return len(data)

    def delete(self, path: Path) -> bool:
        """Delete *path* if it exists.

        Best-effort: a missing file is not an error and other failures are
        reported on stderr, never raised.

        Returns:
            True if a file was removed.

        """
        try:
            path.unlink()
        except FileNotFoundError:
            return False
        except OSError as exc:
            error(f"Delete failed: {path}: {exc}")
            return False
        return True
