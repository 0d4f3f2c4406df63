"""
Filesystem boundary for the wiki: one flat directory of markdown files.
"""

import logging
import os
from pathlib import Path
from typing import Set

from mdwiki.core.errors import DocumentExists, InvalidName, StoreError, StoreUnavailable
from mdwiki.core.names import is_document_name

logger = logging.getLogger(__name__)


class DocumentStore:
    """Reads, writes, deletes and lists documents in the pages directory."""

    def __init__(self, root: Path):
        self.root = Path(root)
        self._resolved_root = self.root.resolve()

    def __repr__(self) -> str:
        return f"<{self.__class__.__name__} root={self.root}>"

    def _path(self, name: str) -> Path:
        path = self.root / name
        # Security check: ensure we haven't traversed out of the pages directory
        try:
            path.resolve().relative_to(self._resolved_root)
        except ValueError:
            logger.warning(f"Attempted path traversal: {name}")
            raise InvalidName(f"path escapes pages directory: {name!r}")
        return path

    def list_names(self) -> Set[str]:
        """
        Names of all regular files in the directory with the document suffix.
        Other entries are ignored.
        """
        try:
            with os.scandir(self.root) as entries:
                names = {
                    entry.name
                    for entry in entries
                    if is_document_name(entry.name) and entry.is_file()
                }
        except OSError as e:
            raise StoreUnavailable(f"cannot list {self.root}: {e}") from e
        logger.debug(f"Scanned {self.root}: {len(names)} documents")
        return names

    def read(self, name: str) -> bytes:
        path = self._path(name)
        try:
            with open(path, "rb") as f:
                content = f.read()
        except OSError as e:
            raise StoreError(f"failed to read {path}: {e}") from e
        logger.debug(f"Read document: {name}, size: {len(content)} bytes")
        return content

    def write(self, name: str, content: str, overwrite: bool = False) -> int:
        """
        Write content under name and return the number of bytes written.
        Without overwrite an existing file raises DocumentExists.
        """
        path = self._path(name)
        data = content.encode("utf-8")
        mode = "wb" if overwrite else "xb"
        try:
            with open(path, mode) as f:
                f.write(data)
        except FileExistsError as e:
            raise DocumentExists(f"{path} already exists") from e
        except OSError as e:
            raise StoreError(f"failed to write {path}: {e}") from e
        logger.info(f"Document saved: {name}, size: {len(data)} bytes")
        return len(data)

    def delete(self, name: str) -> None:
        path = self._path(name)
        try:
            path.unlink()
        except OSError as e:
            raise StoreError(f"failed to delete {path}: {e}") from e
        logger.info(f"Document deleted: {name}")
