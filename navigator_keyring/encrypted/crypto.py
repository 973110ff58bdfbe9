"""
Envelope Crypto Core — Passphrase key wrapping, encryption and serialization.

Every secret is sealed into a JWE compact token (RFC 7516) using:
- Key wrapping: PBKDF2-HMAC-SHA256(passphrase, p2s, p2c) → A128KW of a random CEK
- Content encryption: AES-256-GCM with the protected header as AAD

Token format: ``header.encrypted_key.iv.ciphertext.tag`` (base64url, no padding).

Security Note:
    Never log plaintext, passphrases or tokens.
    A wrong passphrase and a corrupted token are reported as the same
    ``CryptoError``; plaintext is returned only after the GCM tag verifies.
"""
import os
import re
import base64
import binascii
import logging
from datetime import datetime, timezone
from typing import Any, Union

import orjson
from cryptography.exceptions import InvalidTag
from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.kdf.pbkdf2 import PBKDF2HMAC
from cryptography.hazmat.primitives.keywrap import (
    InvalidUnwrap,
    aes_key_unwrap,
    aes_key_wrap,
)
from cryptography.hazmat.primitives.ciphers.aead import AESGCM

from ..exceptions import CryptoError, PassphraseError

logger = logging.getLogger("navigator.keyring")

KEY_ALGORITHM = "PBES2-HS256+A128KW"
CONTENT_ALGORITHM = "A256GCM"

SALT_SIZE = 16  # p2s, RFC 7518 requires at least 8
MIN_SALT_SIZE = 8
KEK_LENGTH = 16  # A128KW
CEK_LENGTH = 32  # AES-256
WRAPPED_KEY_LENGTH = CEK_LENGTH + 8
NONCE_SIZE = 12  # 96-bit IV
TAG_SIZE = 16

DEFAULT_ITERATIONS = 100_000
MIN_ITERATIONS = 1000
MAX_ITERATIONS = 10_000_000

_DECRYPT_FAILED = "unable to decrypt secret: wrong passphrase or corrupted data"

_B64URL_SEGMENT = re.compile(r"[A-Za-z0-9_-]*")


# ---------------------------------------------------------------------------
# Encoding helpers
# ---------------------------------------------------------------------------

def b64url_encode(data: bytes) -> str:
    """Base64url encode without padding."""
    return base64.urlsafe_b64encode(data).rstrip(b"=").decode("ascii")


def b64url_decode(segment: str) -> bytes:
    """Decode an unpadded base64url segment.

    Raises:
        CryptoError: If the segment is not valid base64url.
    """
    if not _B64URL_SEGMENT.fullmatch(segment):
        raise CryptoError("malformed token segment: not unpadded base64url")
    padding = "=" * (-len(segment) % 4)
    try:
        return base64.b64decode(segment + padding, altchars=b"-_", validate=True)
    except (binascii.Error, ValueError) as err:
        raise CryptoError(f"malformed token segment: {err}") from err


# ---------------------------------------------------------------------------
# Value serialization
# ---------------------------------------------------------------------------

def serialize_value(value: str) -> bytes:
    """Serialize a secret string to JSON bytes for encryption.

    JSON string encoding keeps newlines, quotes and non-ASCII text exact.

    Raises:
        TypeError: If ``value`` is not a str.
        CryptoError: If ``value`` holds lone surrogates (e.g. undecodable
            bytes smuggled in through ``surrogateescape``).
    """
    if not isinstance(value, str):
        raise TypeError(f"secret must be a str, got {type(value).__name__}")
    try:
        return orjson.dumps(value)
    except orjson.JSONEncodeError as err:
        raise CryptoError(
            f"secret cannot be encoded as UTF-8 JSON: {err}"
        ) from err


def deserialize_value(data: bytes) -> str:
    """Deserialize bytes produced by :func:`serialize_value`.

    Raises:
        CryptoError: If the payload is not a JSON string.
    """
    try:
        value = orjson.loads(data)
    except orjson.JSONDecodeError as err:
        raise CryptoError(f"decrypted payload is not valid JSON: {err}") from err
    if not isinstance(value, str):
        raise CryptoError("decrypted payload is not a string secret")
    return value


# ---------------------------------------------------------------------------
# Key derivation
# ---------------------------------------------------------------------------

def derive_kek(passphrase: str, salt: bytes, iterations: int) -> bytes:
    """Derive the 128-bit key-encryption key from a passphrase.

    The PBKDF2 salt is ``alg || 0x00 || p2s`` as defined for PBES2.

    Args:
        passphrase: User passphrase (may be empty).
        salt: Random p2s salt from the token header.
        iterations: p2c iteration count from the token header.

    Returns:
        16-byte key-encryption key.

    Raises:
        PassphraseError: If the passphrase holds surrogates that do not
            stand for raw bytes.
    """
    try:
        # undecodable bytes from the environment come back as their raw octets
        secret = passphrase.encode("utf-8", "surrogateescape")
    except UnicodeEncodeError as err:
        raise PassphraseError(
            f"passphrase cannot be encoded as bytes: {err.reason}"
        ) from err
    kdf = PBKDF2HMAC(
        algorithm=hashes.SHA256(),
        length=KEK_LENGTH,
        salt=KEY_ALGORITHM.encode("ascii") + b"\x00" + salt,
        iterations=iterations,
    )
    return kdf.derive(secret)


# ---------------------------------------------------------------------------
# Envelope codec
# ---------------------------------------------------------------------------

class EnvelopeCodec:
    """Seals secrets into, and opens them from, JWE compact tokens.

    ``seal`` is randomized (fresh salt, CEK and IV per call); ``open`` is a
    pure function of ``(token, passphrase)``.
    """

    def __init__(self, iterations: int = DEFAULT_ITERATIONS):
        if not MIN_ITERATIONS <= iterations <= MAX_ITERATIONS:
            raise ValueError(
                f"iterations must be between {MIN_ITERATIONS} and "
                f"{MAX_ITERATIONS}, got {iterations}"
            )
        self.iterations = iterations

    def seal(self, plaintext: str, passphrase: str) -> str:
        """Encrypt a secret string into a compact token.

        Args:
            plaintext: Secret to protect.
            passphrase: Passphrase wrapping the content key.

        Returns:
            ASCII token safe to write as a file's entire content.
        """
        payload = serialize_value(plaintext)
        salt = os.urandom(SALT_SIZE)
        header = {
            "alg": KEY_ALGORITHM,
            "enc": CONTENT_ALGORITHM,
            "p2s": b64url_encode(salt),
            "p2c": self.iterations,
            "created": datetime.now(timezone.utc).isoformat(),
        }
        protected = b64url_encode(orjson.dumps(header))
        kek = derive_kek(passphrase, salt, self.iterations)
        cek = AESGCM.generate_key(bit_length=CEK_LENGTH * 8)
        encrypted_key = aes_key_wrap(kek, cek)
        nonce = os.urandom(NONCE_SIZE)
        sealed = AESGCM(cek).encrypt(nonce, payload, protected.encode("ascii"))
        ciphertext, tag = sealed[:-TAG_SIZE], sealed[-TAG_SIZE:]
        return ".".join((
            protected,
            b64url_encode(encrypted_key),
            b64url_encode(nonce),
            b64url_encode(ciphertext),
            b64url_encode(tag),
        ))

    def open(self, token: Union[str, bytes], passphrase: str) -> str:
        """Decrypt and verify a token, returning the original secret.

        Raises:
            CryptoError: If the token is malformed, uses unsupported
                algorithms, the passphrase is wrong, or data was tampered.
        """
        segments = _split_token(token)
        protected = segments[0]
        header = _parse_header(protected)
        encrypted_key, nonce, ciphertext, tag = (
            b64url_decode(segment) for segment in segments[1:]
        )
        if len(encrypted_key) != WRAPPED_KEY_LENGTH:
            raise CryptoError(
                f"encrypted key must be {WRAPPED_KEY_LENGTH} bytes, "
                f"got {len(encrypted_key)}"
            )
        if len(nonce) != NONCE_SIZE:
            raise CryptoError(f"iv must be {NONCE_SIZE} bytes, got {len(nonce)}")
        if len(tag) != TAG_SIZE:
            raise CryptoError(f"tag must be {TAG_SIZE} bytes, got {len(tag)}")

        kek = derive_kek(passphrase, b64url_decode(header["p2s"]), header["p2c"])
        try:
            cek = aes_key_unwrap(kek, encrypted_key)
            payload = AESGCM(cek).decrypt(
                nonce, ciphertext + tag, protected.encode("ascii")
            )
        except (InvalidUnwrap, InvalidTag, ValueError) as err:
            raise CryptoError(_DECRYPT_FAILED) from err
        return deserialize_value(payload)

    def header(self, token: Union[str, bytes]) -> dict[str, Any]:
        """Return the protected header of a token without decrypting it."""
        return _parse_header(_split_token(token)[0])


def _split_token(token: Union[str, bytes]) -> list[str]:
    if isinstance(token, bytes):
        try:
            token = token.decode("ascii")
        except UnicodeDecodeError as err:
            raise CryptoError("token is not ASCII text") from err
    segments = token.strip().split(".")
    if len(segments) != 5:
        raise CryptoError(
            f"token must have 5 segments, got {len(segments)}"
        )
    return segments


def _parse_header(protected: str) -> dict[str, Any]:
    try:
        header = orjson.loads(b64url_decode(protected))
    except orjson.JSONDecodeError as err:
        raise CryptoError(f"token header is not valid JSON: {err}") from err
    if not isinstance(header, dict):
        raise CryptoError("token header is not a JSON object")
    if header.get("alg") != KEY_ALGORITHM:
        raise CryptoError(f"unsupported key algorithm: {header.get('alg')!r}")
    if header.get("enc") != CONTENT_ALGORITHM:
        raise CryptoError(f"unsupported content algorithm: {header.get('enc')!r}")
    iterations = header.get("p2c")
    if (
        not isinstance(iterations, int)
        or isinstance(iterations, bool)
        or not 1 <= iterations <= MAX_ITERATIONS
    ):
        raise CryptoError(f"invalid p2c iteration count: {iterations!r}")
    salt = header.get("p2s")
    if not isinstance(salt, str) or len(b64url_decode(salt)) < MIN_SALT_SIZE:
        raise CryptoError("invalid p2s salt")
    return header
