"""
Tests for keyring path resolution.

Tests cover:
- Home directory expansion
- Storage root creation, permissions and conflicts
- Key escaping and its injectivity
- Rejection of keys escaping the storage root
"""
import os
import stat

import pytest

from navigator_keyring.exceptions import DirectoryError
from navigator_keyring.encrypted.paths import (
    PathResolver,
    escape_key,
    expand_tilde,
)


# --- Test Fixtures ---

@pytest.fixture
def home(tmp_path, monkeypatch):
    """Point the home directory at a temporary path."""
    home_dir = tmp_path / "home"
    home_dir.mkdir()
    monkeypatch.setenv("HOME", str(home_dir))
    return home_dir


@pytest.fixture
def resolver(tmp_path):
    """Resolver for a not-yet-existing storage root."""
    return PathResolver(str(tmp_path / "keyring"))


# --- Test Home Expansion ---

class TestExpandTilde:
    """Tests for expand_tilde()."""

    def test_expands_tilde_prefix(self, home):
        """Test '~/' is replaced by the home directory."""
        assert expand_tilde("~/.navigator-keyring") == f"{home}/.navigator-keyring"

    def test_expands_bare_tilde(self, home):
        """Test a bare '~' expands to the home directory."""
        assert expand_tilde("~") == str(home)

    def test_leaves_other_paths_unchanged(self, home):
        """Test absolute, relative and '~user' paths are not touched."""
        assert expand_tilde("/var/lib/keyring") == "/var/lib/keyring"
        assert expand_tilde("relative/dir") == "relative/dir"
        assert expand_tilde("~other/dir") == "~other/dir"

    def test_unknown_home_fails(self, monkeypatch):
        """Test DirectoryError when the home directory cannot be found."""
        monkeypatch.setattr(os.path, "expanduser", lambda path: path)
        with pytest.raises(DirectoryError):
            expand_tilde("~/.navigator-keyring")


# --- Test Storage Root ---

class TestResolveRoot:
    """Tests for PathResolver.resolve_root()."""

    def test_creates_missing_root(self, resolver, tmp_path):
        """Test the root is created on first resolution."""
        root = resolver.resolve_root()
        assert root == tmp_path / "keyring"
        assert root.is_dir()

    def test_root_is_owner_only(self, resolver):
        """Test the created root has mode 0700."""
        root = resolver.resolve_root()
        assert stat.S_IMODE(root.stat().st_mode) == 0o700

    def test_creates_missing_parents_owner_only(self, tmp_path):
        """Test missing parents are created with mode 0700 as well."""
        root = PathResolver(str(tmp_path / "a" / "b" / "keyring")).resolve_root()
        for directory in (tmp_path / "a", tmp_path / "a" / "b", root):
            assert stat.S_IMODE(directory.stat().st_mode) == 0o700

    def test_existing_root_is_reused(self, resolver):
        """Test resolving twice returns the same directory."""
        assert resolver.resolve_root() == resolver.resolve_root()

    def test_file_at_root_fails(self, tmp_path):
        """Test DirectoryError naming the path when the root is a file."""
        conflict = tmp_path / "keyring"
        conflict.write_text("not a directory")
        with pytest.raises(DirectoryError, match="is a file, not a directory") as exc:
            PathResolver(str(conflict)).resolve_root()
        assert str(conflict) in str(exc.value)

    def test_empty_directory_fails(self):
        """Test DirectoryError when no directory is configured."""
        with pytest.raises(DirectoryError):
            PathResolver("").resolve_root()

    def test_tilde_root(self, home):
        """Test a '~' root lands below the home directory."""
        root = PathResolver("~/.navigator-keyring").resolve_root()
        assert root == home / ".navigator-keyring"
        assert root.is_dir()


# --- Test Key Escaping ---

class TestEscapeKey:
    """Tests for escape_key() and PathResolver.resolve_file()."""

    def test_plain_key_unchanged(self):
        """Test unreserved characters pass through."""
        assert escape_key("user-name_1.~") == "user-name_1.~"

    def test_separator_passes_through(self):
        """Test '/' is kept so keys can address sub-paths."""
        assert escape_key("svc/token") == "svc/token"

    def test_unsafe_characters_encoded(self):
        """Test spaces, percent and backslash are percent-encoded."""
        assert escape_key("a b") == "a%20b"
        assert escape_key("100%") == "100%25"
        assert escape_key("a\\b") == "a%5Cb"
        assert escape_key("c:d") == "c%3Ad"

    def test_unicode_encoded(self):
        """Test non-ASCII characters are encoded as UTF-8 octets."""
        assert escape_key("üser") == "%C3%BCser"

    def test_escaping_is_injective(self, resolver):
        """Test distinct keys never resolve to the same file."""
        keys = [
            "user", "User", "user ", "us/er", "us%2Fer", "us%2fer",
            "a b", "a%20b", "a+b", "a%2Bb", "üser", "%C3%BCser", "user\\x",
            "user%5Cx", "svc/user", "svc%2Fuser", "svc/sub/user", "日本語",
            "emoji-🔑", "tab\tkey", "new\nline", "~user", "%", "%25", ".hidden",
        ]
        paths = [resolver.resolve_file(key) for key in keys]
        assert len(set(paths)) == len(keys)

    def test_resolved_file_below_root(self, resolver):
        """Test the file path joins the root and the escaped key."""
        path = resolver.resolve_file("svc/my user")
        assert path == resolver.resolve_root() / "svc" / "my%20user"
        assert path.is_absolute()

    @pytest.mark.parametrize(
        "key", ["", "/etc/passwd", "../outside", "svc/../../outside", "a//b", "a/./b", "svc/"]
    )
    def test_keys_leaving_root_rejected(self, resolver, key):
        """Test keys with empty, '.' or '..' segments are rejected."""
        with pytest.raises(DirectoryError):
            resolver.resolve_file(key)

    def test_escaped_bytes_key(self):
        """Test undecodable key bytes are encoded as their raw octets."""
        key = b"us\xe9r".decode("utf-8", "surrogateescape")
        assert escape_key(key) == "us%E9r"
        assert escape_key(key) != escape_key("usér")

    def test_unencodable_key(self, resolver):
        """Test a lone surrogate key raises DirectoryError."""
        with pytest.raises(DirectoryError):
            escape_key("\ud800")
        with pytest.raises(DirectoryError):
            resolver.resolve_file("\ud800")
