"""
FileStore — raw persistence of envelope tokens, one file per key.

Writes go to a temporary file in the destination directory and are moved
into place with ``os.replace``, so readers see either the previous envelope
or the new one, never a partial file. There is no cross-process locking:
concurrent writers to the same key race and the last replace wins.
"""
import os
import logging
import tempfile
from pathlib import Path
from typing import Union

from ..exceptions import SecretNotFound, StorageIOError
from .paths import make_private_dirs

logger = logging.getLogger("navigator.keyring")

PRIVATE_FILE_MODE = 0o600

PathLike = Union[str, Path]


class FileStore:
    """Reads, writes and removes secret files."""

    def read(self, path: PathLike) -> bytes:
        """Return the full content of ``path``.

        Raises:
            SecretNotFound: If the file does not exist.
            StorageIOError: For any other I/O failure.
        """
        try:
            with open(path, "rb") as fp:
                return fp.read()
        except FileNotFoundError as err:
            raise SecretNotFound(f"No secret stored at {path}") from err
        except OSError as err:
            raise StorageIOError(f"Unable to read {path}: {err}") from err

    def write(self, path: PathLike, data: bytes) -> None:
        """Atomically replace the content of ``path`` with ``data`` (mode 0600).

        Raises:
            StorageIOError: If the file cannot be written.
        """
        path = Path(path)
        try:
            make_private_dirs(path.parent)
            fd, tmp_name = tempfile.mkstemp(
                dir=path.parent, prefix=".keyring-", suffix=".tmp"
            )
        except OSError as err:
            raise StorageIOError(f"Unable to write {path}: {err}") from err
        try:
            with os.fdopen(fd, "wb") as fp:
                fp.write(data)
                fp.flush()
                os.fsync(fp.fileno())
            os.chmod(tmp_name, PRIVATE_FILE_MODE)
            os.replace(tmp_name, path)
            self._sync_directory(path.parent)
        except OSError as err:
            self._discard(tmp_name)
            raise StorageIOError(f"Unable to write {path}: {err}") from err

    def remove(self, path: PathLike) -> None:
        """Delete ``path``.

        Raises:
            SecretNotFound: If the file does not exist.
            StorageIOError: For any other I/O failure.
        """
        try:
            os.remove(path)
        except FileNotFoundError as err:
            raise SecretNotFound(f"No secret stored at {path}") from err
        except OSError as err:
            raise StorageIOError(f"Unable to remove {path}: {err}") from err

    @staticmethod
    def _sync_directory(directory: Path) -> None:
        """Flush the directory entry so the rename survives a power loss."""
        if os.name != "posix":
            return
        fd = os.open(directory, os.O_RDONLY)
        try:
            os.fsync(fd)
        finally:
            os.close(fd)

    @staticmethod
    def _discard(tmp_name: str) -> None:
        try:
            os.unlink(tmp_name)
        except FileNotFoundError:
            pass
        except OSError as err:
            logger.warning("Unable to remove temporary file %s: %s", tmp_name, err)
