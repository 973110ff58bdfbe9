"""
Keyring paths: storage root resolution and key to filename escaping.

Keys map to files below the storage root after percent-encoding. The ``/``
separator passes through unescaped, so ``"svc/token"`` is stored as
``<root>/svc/token``. Everything else outside the RFC 3986 unreserved set,
``%`` included, is encoded, which keeps the mapping injective.
"""
import os
import logging
from pathlib import Path
from urllib.parse import quote

from ..exceptions import DirectoryError

logger = logging.getLogger("navigator.keyring")

PRIVATE_DIR_MODE = 0o700
KEY_SEPARATOR = "/"

_TILDE_PREFIX = "~" + os.sep
_FORBIDDEN_SEGMENTS = frozenset({"", ".", ".."})


def expand_tilde(directory: str) -> str:
    """Expand a leading ``~`` to the current user's home directory.

    Args:
        directory: Path that may start with ``~`` followed by a separator.

    Returns:
        The expanded path; other paths are returned unchanged.

    Raises:
        DirectoryError: If the home directory cannot be determined.
    """
    if directory != "~" and not directory.startswith(_TILDE_PREFIX):
        return directory
    home = os.path.expanduser("~")
    if not home or home.startswith("~"):
        raise DirectoryError(
            f"file keyring: cannot determine home directory to expand {directory!r}"
        )
    return home + directory[1:]


def escape_key(key: str) -> str:
    """Percent-encode a key into a filesystem-safe relative path.

    Undecodable bytes carried as ``surrogateescape`` surrogates (keys from
    argv or the environment) are encoded as the original octets.

    Raises:
        DirectoryError: If the key holds surrogates that are not escaped bytes.
    """
    try:
        raw = key.encode("utf-8", "surrogateescape")
    except UnicodeEncodeError as err:
        raise DirectoryError(
            f"file keyring: key {key!r} cannot be encoded as a filename: {err.reason}"
        ) from err
    return quote(raw, safe=KEY_SEPARATOR)


def make_private_dirs(path: Path) -> None:
    """Create ``path`` and any missing parents, each with mode 0700."""
    missing = []
    current = path
    while not current.exists():
        missing.append(current)
        if current.parent == current:
            break
        current = current.parent
    for directory in reversed(missing):
        try:
            directory.mkdir(mode=PRIVATE_DIR_MODE)
        except FileExistsError:
            if not directory.is_dir():
                raise
            continue
        # mkdir mode is filtered through the umask
        os.chmod(directory, PRIVATE_DIR_MODE)


class PathResolver:
    """Resolves the keyring storage root and per-key file paths."""

    def __init__(self, directory: str):
        self.directory = directory

    def resolve_root(self) -> Path:
        """Return the storage root, creating it when missing.

        Raises:
            DirectoryError: If no directory is configured, the home directory
                cannot be determined, the path exists but is not a directory,
                or it cannot be created.
        """
        if not self.directory:
            raise DirectoryError("file keyring: directory not set for file keyring")
        root = Path(expand_tilde(self.directory))
        try:
            if not root.exists():
                make_private_dirs(root)
                logger.debug("Created keyring directory %s", root)
            elif not root.is_dir():
                raise DirectoryError(
                    f"file keyring: {root} is a file, not a directory"
                )
        except OSError as err:
            raise DirectoryError(
                f"file keyring: unable to create directory {root}: {err}"
            ) from err
        return root

    def resolve_file(self, key: str) -> Path:
        """Return the absolute file path storing ``key``.

        Raises:
            DirectoryError: If the root cannot be resolved, or the key is
                empty, absolute, or has empty, ``.`` or ``..`` segments.
        """
        segments = key.split(KEY_SEPARATOR)
        if any(segment in _FORBIDDEN_SEGMENTS for segment in segments):
            raise DirectoryError(
                f"file keyring: key {key!r} does not name a file below the keyring root"
            )
        return self.resolve_root().joinpath(escape_key(key)).absolute()
