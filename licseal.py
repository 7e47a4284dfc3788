"""
Licseal Licence Envelope Engine
================================

RSA (PKCS#1 v1.5) sealing of arbitrary-length licence text:
- Single-block envelopes for payloads that fit one RSA operation
- ``CHUNK:`` envelopes carrying up to 100 independently encrypted blocks
- Key material parsed once from configuration and shared read-only

Uses the ``cryptography`` library exclusively.

Wire format
-----------
::

    envelope     := single_block | chunked
    single_block := B64                          (decoded length == key bytes)
    chunked      := "CHUNK:" COUNT ":" block ("|" block)*
    COUNT        := decimal integer, 1 <= COUNT <= 100
    block        := B64                          (decoded length == key bytes)

    Plaintext of at most ``key bytes - 11`` bytes is sent as a bare base64
    block (no prefix) so readers of the original one-block format keep
    working.  Longer plaintext is split on byte boundaries; a multi-byte
    character may straddle two blocks and is only re-joined after all
    blocks have been decrypted.

The issuer holds the public key and encrypts; licence holders carry the
private key and decrypt.
"""

from __future__ import annotations

import base64
import logging
import math
import os
import platform
import re
import threading
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Any, Callable, Dict, List, Mapping, Optional, Sequence, Tuple, TypeVar, Union

from cryptography.exceptions import UnsupportedAlgorithm
from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric import padding as asym_padding
from cryptography.hazmat.primitives.asymmetric.rsa import (
    RSAPrivateKey,
    RSAPublicKey,
)

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------

CHUNK_TAG: str = "CHUNK"
FIELD_SEPARATOR: str = ":"
BLOCK_SEPARATOR: str = "|"
CHUNK_PREFIX: str = CHUNK_TAG + FIELD_SEPARATOR

MIN_CHUNKS: int = 1
MAX_CHUNKS: int = 100
PKCS1V15_OVERHEAD: int = 11  # bytes of padding per RSA block
SINGLE_BLOCK_MARGIN: int = 56  # base64 chars allowed beyond one block (400 for RSA-2048)

ENV_PRIVATE_KEY: str = "LICSEAL_PRIVATE_KEY"
ENV_PUBLIC_KEY: str = "LICSEAL_PUBLIC_KEY"
ENV_PRIVATE_KEY_FILE: str = "LICSEAL_PRIVATE_KEY_FILE"
ENV_PUBLIC_KEY_FILE: str = "LICSEAL_PUBLIC_KEY_FILE"
ENV_KEY_PASSPHRASE: str = "LICSEAL_KEY_PASSPHRASE"
ENV_CONFIG_DIR: str = "LICSEAL_CONFIG_DIR"

PRIVATE_KEY_FILENAME: str = "private_key.pem"
PUBLIC_KEY_FILENAME: str = "public_key.pem"

_COUNT_RE = re.compile(r"[0-9]+")
_MAX_COUNT_DIGITS = len(str(MAX_CHUNKS))

# ---------------------------------------------------------------------------
# Exceptions
# ---------------------------------------------------------------------------


class ErrorKind(str, Enum):
    """Closed set of failure kinds reported by :func:`encrypt` / :func:`decrypt`."""

    EMPTY_INPUT = "empty_input"
    INPUT_TOO_LONG = "input_too_long"
    INVALID_ENCODING = "invalid_encoding"
    INVALID_CIPHERTEXT_SIZE = "invalid_ciphertext_size"
    DECRYPTION_FAILURE = "decryption_failure"
    INVALID_TEXT = "invalid_text"
    DECRYPTED_TEXT_TOO_LONG = "decrypted_text_too_long"
    INVALID_CHUNK_FORMAT = "invalid_chunk_format"
    INVALID_CHUNK_PREFIX = "invalid_chunk_prefix"
    INVALID_CHUNK_COUNT = "invalid_chunk_count"
    CHUNK_COUNT_MISMATCH = "chunk_count_mismatch"
    MESSAGE_TOO_LONG = "message_too_long"
    ENCRYPTION_FAILURE = "encryption_failure"
    INVALID_PLAINTEXT = "invalid_plaintext"


_DEFAULT_MESSAGES: Dict[ErrorKind, str] = {
    ErrorKind.EMPTY_INPUT: "Input cannot be empty.",
    ErrorKind.INPUT_TOO_LONG: "Input too long for a single-block envelope.",
    ErrorKind.INVALID_ENCODING: "Invalid base64 encoding.",
    ErrorKind.INVALID_CIPHERTEXT_SIZE: "Invalid encrypted data size.",
    ErrorKind.DECRYPTION_FAILURE: "Decryption failed: wrong key or corrupted data.",
    ErrorKind.INVALID_TEXT: "Decrypted data is not valid UTF-8 text.",
    ErrorKind.DECRYPTED_TEXT_TOO_LONG: "Decrypted text too long for a single block.",
    ErrorKind.INVALID_CHUNK_FORMAT: "Invalid chunk envelope: expected CHUNK:<count>:<blocks>.",
    ErrorKind.INVALID_CHUNK_PREFIX: "Invalid chunk envelope prefix.",
    ErrorKind.INVALID_CHUNK_COUNT: (
        f"Invalid chunk count: must be an integer between {MIN_CHUNKS} and {MAX_CHUNKS}."
    ),
    ErrorKind.CHUNK_COUNT_MISMATCH: "Declared chunk count does not match the number of blocks.",
    ErrorKind.MESSAGE_TOO_LONG: f"Message too long: it would need more than {MAX_CHUNKS} chunks.",
    ErrorKind.ENCRYPTION_FAILURE: "Encryption failed.",
    ErrorKind.INVALID_PLAINTEXT: "Plaintext cannot be encoded as UTF-8.",
}


class LicsealError(Exception):
    """
    Base exception for all Licseal errors.

    Attributes
    ----------
    kind : ErrorKind or None
        Machine-readable failure kind (``None`` for configuration errors).
    details : dict
        Structured context such as ``expected`` / ``actual`` sizes or the
        failing ``chunk`` index.
    """

    def __init__(
        self,
        kind: Optional[ErrorKind],
        message: Optional[str] = None,
        **details: Any,
    ) -> None:
        self.kind = kind
        self.details: Dict[str, Any] = details
        if message is None:
            message = _DEFAULT_MESSAGES[kind] if kind is not None else "Licseal error."
            if details:
                extra = ", ".join(f"{k}={v}" for k, v in details.items())
                message = f"{message} ({extra})"
        super().__init__(message)


class EncryptError(LicsealError):
    """Plaintext could not be sealed."""


class DecryptError(LicsealError):
    """Envelope could not be opened: malformed, wrong key, or corrupted."""


class EnvelopeFormatError(DecryptError):
    """A ``CHUNK:`` envelope violates the wire grammar."""


class KeyConfigError(LicsealError):
    """Key material is missing or malformed; the process cannot serve requests."""

    def __init__(self, message: str) -> None:
        super().__init__(None, message)


# ---------------------------------------------------------------------------
# Size arithmetic
# ---------------------------------------------------------------------------


def block_size(key: Union[RSAPrivateKey, RSAPublicKey]) -> int:
    """Return the RSA block (modulus) size of *key* in bytes."""
    return (key.key_size + 7) // 8


def chunk_limit(key: Union[RSAPrivateKey, RSAPublicKey]) -> int:
    """Maximum plaintext bytes per PKCS#1 v1.5 block for *key*."""
    return block_size(key) - PKCS1V15_OVERHEAD


def max_single_block_chars(size: int) -> int:
    """Upper bound on the text length of a single-block envelope."""
    return 4 * math.ceil(size / 3) + SINGLE_BLOCK_MARGIN


def chunk_count(length: int, limit: int) -> int:
    """Number of blocks needed for *length* plaintext bytes (at least one)."""
    return max(1, math.ceil(length / limit))


# ---------------------------------------------------------------------------
# Envelope codec (syntax only, no cryptography)
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class SingleBlock:
    """One base64 ciphertext block, sent without a prefix."""

    block: str


@dataclass(frozen=True)
class Chunked:
    """Ordered base64 ciphertext blocks sent as ``CHUNK:<count>:...``."""

    blocks: Tuple[str, ...]

    @property
    def count(self) -> int:
        return len(self.blocks)


Envelope = Union[SingleBlock, Chunked]


def is_chunked(text: str) -> bool:
    """True if *text* uses the ``CHUNK:`` form."""
    return text.startswith(CHUNK_PREFIX)


def parse_envelope(text: str, size: int) -> Envelope:
    """
    Parse an envelope string into :class:`SingleBlock` or :class:`Chunked`.

    Parameters
    ----------
    text : str
        Envelope as received from transport or storage.
    size : int
        Key block size in bytes; bounds the single-block text length.

    Raises
    ------
    DecryptError
        ``EMPTY_INPUT`` or ``INPUT_TOO_LONG`` on the single-block path.
    EnvelopeFormatError
        If a ``CHUNK:`` envelope is malformed.
    """
    if not isinstance(text, str):
        raise TypeError("Envelope must be str.")
    if is_chunked(text):
        return _parse_chunked(text)
    return _parse_single(text, size)


def _parse_single(text: str, size: int) -> SingleBlock:
    if len(text) == 0:
        raise DecryptError(ErrorKind.EMPTY_INPUT)
    limit = max_single_block_chars(size)
    if len(text) > limit:
        raise DecryptError(ErrorKind.INPUT_TOO_LONG, length=len(text), max_length=limit)
    return SingleBlock(text)


def _parse_chunked(text: str) -> Chunked:
    parts = text.split(FIELD_SEPARATOR)
    if len(parts) != 3:
        raise EnvelopeFormatError(ErrorKind.INVALID_CHUNK_FORMAT, parts=len(parts))
    tag, count_text, body = parts
    if tag != CHUNK_TAG:
        raise EnvelopeFormatError(ErrorKind.INVALID_CHUNK_PREFIX)
    if not _COUNT_RE.fullmatch(count_text):
        raise EnvelopeFormatError(ErrorKind.INVALID_CHUNK_COUNT)
    # Leading zeros are allowed; bound the significant digits before int().
    digits = count_text.lstrip("0") or "0"
    if len(digits) > _MAX_COUNT_DIGITS:
        raise EnvelopeFormatError(ErrorKind.INVALID_CHUNK_COUNT)
    count = int(digits)
    if not MIN_CHUNKS <= count <= MAX_CHUNKS:
        raise EnvelopeFormatError(ErrorKind.INVALID_CHUNK_COUNT, count=count)
    blocks = tuple(body.split(BLOCK_SEPARATOR))
    if len(blocks) != count:
        raise EnvelopeFormatError(
            ErrorKind.CHUNK_COUNT_MISMATCH, expected=count, actual=len(blocks)
        )
    return Chunked(blocks)


def serialize_envelope(envelope: Envelope) -> str:
    """Render an envelope as its wire string."""
    if isinstance(envelope, SingleBlock):
        return envelope.block
    if isinstance(envelope, Chunked):
        if not MIN_CHUNKS <= envelope.count <= MAX_CHUNKS:
            raise ValueError(
                f"Chunked envelope must hold {MIN_CHUNKS}-{MAX_CHUNKS} blocks "
                f"(got {envelope.count})."
            )
        return (
            f"{CHUNK_PREFIX}{envelope.count}{FIELD_SEPARATOR}"
            + BLOCK_SEPARATOR.join(envelope.blocks)
        )
    raise TypeError(f"Unknown envelope type: {type(envelope).__name__}")


def encode_block(data: bytes) -> str:
    """Encode one ciphertext block as standard Base64."""
    return base64.b64encode(data).decode("ascii")


def decode_block(text: str, size: int, index: Optional[int] = None) -> bytes:
    """
    Decode one Base64 block and check it is exactly *size* bytes.

    *index* is attached to errors raised for blocks of a chunked envelope.
    """
    try:
        data = base64.b64decode(text, validate=True)
    except ValueError as exc:
        raise DecryptError(ErrorKind.INVALID_ENCODING, **_where(index)) from exc
    if len(data) != size:
        raise DecryptError(
            ErrorKind.INVALID_CIPHERTEXT_SIZE,
            expected=size,
            actual=len(data),
            **_where(index),
        )
    return data


def _where(index: Optional[int]) -> Dict[str, int]:
    return {} if index is None else {"chunk": index}


# ---------------------------------------------------------------------------
# Ordered map over chunks
# ---------------------------------------------------------------------------

T = TypeVar("T")
R = TypeVar("R")


def _map_ordered(fn: Callable[[T], R], items: Sequence[T], workers: Optional[int]) -> List[R]:
    """
    Apply *fn* to every item and return results in input order.

    With ``workers > 1`` the calls run on a bounded thread pool; results are
    still collected by index, never by completion order.
    """
    if workers is not None and workers < 1:
        raise ValueError("workers must be a positive integer.")
    if workers is None or workers == 1 or len(items) <= 1:
        return [fn(item) for item in items]
    with ThreadPoolExecutor(max_workers=min(workers, len(items))) as pool:
        return list(pool.map(fn, items))


# ---------------------------------------------------------------------------
# Encryptor
# ---------------------------------------------------------------------------


def split_chunks(data: bytes, limit: int) -> List[bytes]:
    """Split *data* into consecutive slices of at most *limit* bytes."""
    return [data[i : i + limit] for i in range(0, len(data), limit)]


def _encrypt_block(public_key: RSAPublicKey, chunk: bytes, index: int) -> bytes:
    try:
        return public_key.encrypt(chunk, asym_padding.PKCS1v15())
    except ValueError as exc:
        raise EncryptError(ErrorKind.ENCRYPTION_FAILURE, chunk=index) from exc


def encrypt_with_key(
    plaintext: str,
    public_key: RSAPublicKey,
    *,
    workers: Optional[int] = None,
) -> str:
    """
    Seal *plaintext* for the holder of the matching private key.

    Parameters
    ----------
    plaintext : str
        Licence text; measured and split as UTF-8 bytes.
    public_key : RSAPublicKey
    workers : int, optional
        Encrypt the blocks of a chunked envelope on up to this many threads.

    Returns
    -------
    str
        A bare Base64 block when the UTF-8 bytes fit one block, otherwise
        ``CHUNK:<count>:<b64>|<b64>|...``.

    Raises
    ------
    EncryptError
        ``MESSAGE_TOO_LONG`` beyond 100 blocks, ``ENCRYPTION_FAILURE`` if the
        RSA engine rejects a block, ``INVALID_PLAINTEXT`` for text that has no
        UTF-8 form (lone surrogates).  No partial envelope is returned.
    """
    if not isinstance(plaintext, str):
        raise TypeError("Plaintext must be str.")
    try:
        data = plaintext.encode("utf-8")
    except UnicodeEncodeError as exc:
        raise EncryptError(ErrorKind.INVALID_PLAINTEXT, position=exc.start) from exc
    limit = chunk_limit(public_key)

    if len(data) <= limit:
        block = _encrypt_block(public_key, data, 0)
        logger.debug("Sealed %d bytes as a single block.", len(data))
        return serialize_envelope(SingleBlock(encode_block(block)))

    count = chunk_count(len(data), limit)
    if count > MAX_CHUNKS:
        raise EncryptError(
            ErrorKind.MESSAGE_TOO_LONG,
            length=len(data),
            max_length=MAX_CHUNKS * limit,
            chunks=count,
        )

    chunks = list(enumerate(split_chunks(data, limit)))
    blocks = _map_ordered(
        lambda item: encode_block(_encrypt_block(public_key, item[1], item[0])),
        chunks,
        workers,
    )
    logger.debug("Sealed %d bytes as %d chunks.", len(data), count)
    return serialize_envelope(Chunked(tuple(blocks)))


# ---------------------------------------------------------------------------
# Decryptor
# ---------------------------------------------------------------------------


def _decrypt_block(private_key: RSAPrivateKey, ciphertext: bytes, index: Optional[int]) -> bytes:
    try:
        return private_key.decrypt(ciphertext, asym_padding.PKCS1v15())
    except ValueError as exc:
        raise DecryptError(ErrorKind.DECRYPTION_FAILURE, **_where(index)) from exc


def _to_text(data: bytes) -> str:
    try:
        return data.decode("utf-8")
    except UnicodeDecodeError as exc:
        raise DecryptError(ErrorKind.INVALID_TEXT, position=exc.start) from exc


def _open_single(envelope: SingleBlock, private_key: RSAPrivateKey, size: int) -> str:
    ciphertext = decode_block(envelope.block, size)
    data = _decrypt_block(private_key, ciphertext, None)
    text = _to_text(data)
    limit = size - PKCS1V15_OVERHEAD
    if len(data) > limit:
        raise DecryptError(
            ErrorKind.DECRYPTED_TEXT_TOO_LONG, length=len(data), max_length=limit
        )
    return text


def _open_chunked(
    envelope: Chunked,
    private_key: RSAPrivateKey,
    size: int,
    workers: Optional[int],
) -> str:
    def _open(item: Tuple[int, str]) -> bytes:
        index, block = item
        return _decrypt_block(private_key, decode_block(block, size, index), index)

    parts = _map_ordered(_open, list(enumerate(envelope.blocks)), workers)
    # Text is validated only after reassembly; blocks may split a character.
    return _to_text(b"".join(parts))


def decrypt_with_key(
    envelope: str,
    private_key: RSAPrivateKey,
    *,
    workers: Optional[int] = None,
) -> str:
    """
    Open an envelope produced by :func:`encrypt_with_key`.

    Accepts both the bare single-block form and ``CHUNK:`` envelopes.  The
    first failing block aborts the call.

    Raises
    ------
    DecryptError
        With :attr:`~LicsealError.kind` set to one of the decryption kinds.

    Notes
    -----
    OpenSSL backends with implicit rejection return pseudo-random bytes for
    a PKCS#1 v1.5 block that fails to unpad.  A wrong key therefore usually
    surfaces as ``INVALID_TEXT`` (or a garbled but valid string), not
    ``DECRYPTION_FAILURE``; do not rely on that kind to detect a wrong key.
    """
    if not isinstance(envelope, str):
        raise TypeError("Envelope must be str.")
    size = block_size(private_key)
    try:
        parsed = parse_envelope(envelope, size)
        if isinstance(parsed, SingleBlock):
            return _open_single(parsed, private_key, size)
        logger.debug("Opening chunked envelope with %d blocks.", parsed.count)
        return _open_chunked(parsed, private_key, size, workers)
    except DecryptError as exc:
        logger.warning("Rejected licence envelope: %s", exc.kind.value)
        raise


# ---------------------------------------------------------------------------
# Key configuration
# ---------------------------------------------------------------------------


def _config_dir(environ: Mapping[str, str]) -> Path:
    """Return the OS-appropriate config directory for Licseal."""
    override = environ.get(ENV_CONFIG_DIR)
    if override:
        return Path(override)
    if platform.system() == "Windows":
        base = Path(environ.get("APPDATA", Path.home() / "AppData" / "Roaming"))
        return base / "Licseal"
    if platform.system() == "Darwin":
        return Path.home() / "Library" / "Application Support" / "Licseal"
    base = Path(environ.get("XDG_CONFIG_HOME", Path.home() / ".config"))
    return base / "licseal"


def _as_bytes(pem: Union[str, bytes]) -> bytes:
    return pem.encode("utf-8") if isinstance(pem, str) else bytes(pem)


def _read_pem(path: Union[str, Path]) -> bytes:
    try:
        return Path(path).read_bytes()
    except OSError as exc:
        raise KeyConfigError(f"Cannot read key file {path}: {exc.strerror}") from exc


def _resolve_material(
    environ: Mapping[str, str],
    inline_var: str,
    file_var: str,
    default_path: Path,
) -> Tuple[Optional[bytes], Optional[str]]:
    """Find PEM material for one key half; returns ``(pem, source)``."""
    inline = environ.get(inline_var)
    if inline:
        return inline.encode("utf-8"), f"env:{inline_var}"
    file_path = environ.get(file_var)
    if file_path:
        return _read_pem(file_path), f"file:{file_path}"
    if default_path.is_file():
        return _read_pem(default_path), f"file:{default_path}"
    return None, None


def _load_private_key(pem: bytes, passphrase: Optional[str]) -> RSAPrivateKey:
    pwd = passphrase.encode("utf-8") if passphrase else None
    try:
        key = serialization.load_pem_private_key(pem, password=pwd)
    except (ValueError, TypeError, UnsupportedAlgorithm) as exc:
        raise KeyConfigError("Could not parse the private key PEM.") from exc
    if not isinstance(key, RSAPrivateKey):
        raise KeyConfigError("PEM does not contain an RSA private key.")
    return key


def _load_public_key(pem: bytes) -> RSAPublicKey:
    try:
        key = serialization.load_pem_public_key(pem)
    except (ValueError, UnsupportedAlgorithm) as exc:
        raise KeyConfigError("Could not parse the public key PEM.") from exc
    if not isinstance(key, RSAPublicKey):
        raise KeyConfigError("PEM does not contain an RSA public key.")
    return key


class KeyProvider:
    """
    Immutable holder of the licence RSA keys.

    PEM material is parsed once, at construction; malformed material raises
    :class:`KeyConfigError` there rather than on each call.  Either half may
    be omitted: issuers typically configure only the public key, holders
    only the private key (the public half is then derived from it).

    Parameters
    ----------
    private_pem : str or bytes, optional
        PKCS#8 (or traditional) PEM private key.
    public_pem : str or bytes, optional
        SubjectPublicKeyInfo PEM public key.
    passphrase : str, optional
        Password for an encrypted private key.
    source : str
        Free-form description of where the material came from.
    """

    def __init__(
        self,
        private_pem: Optional[Union[str, bytes]] = None,
        public_pem: Optional[Union[str, bytes]] = None,
        passphrase: Optional[str] = None,
        *,
        source: str = "inline",
    ) -> None:
        if private_pem is None and public_pem is None:
            raise KeyConfigError("No RSA key material supplied.")

        self._private_key: Optional[RSAPrivateKey] = None
        if private_pem is not None:
            self._private_key = _load_private_key(_as_bytes(private_pem), passphrase)

        if public_pem is not None:
            public_key = _load_public_key(_as_bytes(public_pem))
            if self._private_key is not None and (
                public_key.public_numbers() != self._private_key.public_key().public_numbers()
            ):
                raise KeyConfigError("Public key does not match the private key.")
        else:
            public_key = self._private_key.public_key()  # type: ignore[union-attr]
        self._public_key: RSAPublicKey = public_key
        self.source = source
        logger.debug("Parsed %d-bit RSA key material (%s).", self.key_size, source)

    # ----- constructors -----

    @classmethod
    def from_files(
        cls,
        private_path: Optional[Union[str, Path]] = None,
        public_path: Optional[Union[str, Path]] = None,
        passphrase: Optional[str] = None,
    ) -> "KeyProvider":
        """Load key material from PEM files."""
        private_pem = _read_pem(private_path) if private_path is not None else None
        public_pem = _read_pem(public_path) if public_path is not None else None
        sources = []
        if private_path is not None:
            sources.append(f"private=file:{private_path}")
        if public_path is not None:
            sources.append(f"public=file:{public_path}")
        return cls(private_pem, public_pem, passphrase, source=", ".join(sources) or "files")

    @classmethod
    def from_environment(cls, environ: Optional[Mapping[str, str]] = None) -> "KeyProvider":
        """
        Resolve key material from the environment and config directory.

        Lookup order per key half: inline PEM variable, ``*_FILE`` path
        variable, then ``private_key.pem`` / ``public_key.pem`` in the config
        directory.
        """
        env = os.environ if environ is None else environ
        config_dir = _config_dir(env)
        private_pem, private_src = _resolve_material(
            env, ENV_PRIVATE_KEY, ENV_PRIVATE_KEY_FILE, config_dir / PRIVATE_KEY_FILENAME
        )
        public_pem, public_src = _resolve_material(
            env, ENV_PUBLIC_KEY, ENV_PUBLIC_KEY_FILE, config_dir / PUBLIC_KEY_FILENAME
        )
        if private_pem is None and public_pem is None:
            raise KeyConfigError(
                f"No RSA key material found: set {ENV_PRIVATE_KEY} or {ENV_PUBLIC_KEY} "
                f"(or the *_FILE variants), or place PEM files in {config_dir}."
            )
        sources = []
        if private_src:
            sources.append(f"private={private_src}")
        if public_src:
            sources.append(f"public={public_src}")
        return cls(
            private_pem,
            public_pem,
            env.get(ENV_KEY_PASSPHRASE) or None,
            source=", ".join(sources),
        )

    # ----- accessors -----

    def get_private_key(self) -> RSAPrivateKey:
        """Return the private key used for decryption."""
        if self._private_key is None:
            raise KeyConfigError("No private key configured; this process can only encrypt.")
        return self._private_key

    def get_public_key(self) -> RSAPublicKey:
        """Return the public key used for encryption."""
        return self._public_key

    @property
    def has_private_key(self) -> bool:
        return self._private_key is not None

    @property
    def key_size(self) -> int:
        """Modulus size in bits."""
        return self._public_key.key_size

    @property
    def block_size(self) -> int:
        return block_size(self._public_key)

    @property
    def chunk_limit(self) -> int:
        return chunk_limit(self._public_key)

    @property
    def max_message_bytes(self) -> int:
        """Largest plaintext (UTF-8 bytes) one envelope can carry."""
        return MAX_CHUNKS * self.chunk_limit

    def __repr__(self) -> str:
        return f"KeyProvider(key_size={self.key_size}, private={self.has_private_key}, source={self.source!r})"


# ---------------------------------------------------------------------------
# Process-wide provider
# ---------------------------------------------------------------------------

_default_provider: Optional[KeyProvider] = None
_default_lock = threading.Lock()


def default_provider() -> KeyProvider:
    """
    Return the process-wide :class:`KeyProvider`, loading it on first use.

    Raises
    ------
    KeyConfigError
        If no usable key material is configured.  Callers should treat this
        as fatal at startup.
    """
    global _default_provider
    if _default_provider is None:
        with _default_lock:
            if _default_provider is None:
                provider = KeyProvider.from_environment()
                logger.info("Loaded %d-bit licence key (%s).", provider.key_size, provider.source)
                _default_provider = provider
    return _default_provider


def configure(provider: KeyProvider) -> None:
    """Install *provider* as the process-wide key source."""
    global _default_provider
    if not isinstance(provider, KeyProvider):
        raise TypeError("provider must be a KeyProvider.")
    with _default_lock:
        _default_provider = provider


def reset_default_provider() -> None:
    """Forget the process-wide provider; the next call reloads it."""
    global _default_provider
    with _default_lock:
        _default_provider = None


# ---------------------------------------------------------------------------
# Module-level convenience functions
# ---------------------------------------------------------------------------


def encrypt(plaintext: str, *, workers: Optional[int] = None) -> str:
    """Seal *plaintext* with the configured public key."""
    return encrypt_with_key(plaintext, default_provider().get_public_key(), workers=workers)


def decrypt(envelope: str, *, workers: Optional[int] = None) -> str:
    """Open *envelope* with the configured private key."""
    return decrypt_with_key(envelope, default_provider().get_private_key(), workers=workers)


# ---------------------------------------------------------------------------
# Demonstration (run with: python licseal.py)
# ---------------------------------------------------------------------------

if __name__ == "__main__":
    from cryptography.hazmat.primitives.asymmetric import rsa

    logging.basicConfig(level=logging.INFO, format="%(levelname)s %(name)s: %(message)s")

    demo_key = rsa.generate_private_key(public_exponent=65537, key_size=2048)
    provider = KeyProvider(
        demo_key.private_bytes(
            encoding=serialization.Encoding.PEM,
            format=serialization.PrivateFormat.PKCS8,
            encryption_algorithm=serialization.NoEncryption(),
        ),
        source="demo",
    )
    pub = provider.get_public_key()
    priv = provider.get_private_key()

    print("=" * 60)
    print("Licseal envelope demo")
    print(f"Key: {provider.key_size}-bit, block {provider.block_size} B, "
          f"chunk limit {provider.chunk_limit} B")
    print("=" * 60)

    licence = "\n".join(
        [
            "Software Licence",
            "=" * 50,
            "Product: Professional Edition",
            "Licensee: Example Technology Ltd.",
            "Issued: 2025-08-08",
            "Expires: 2026-08-08",
            "Modules: core, reporting, api, export, batch, audit",
            "Terms: no reverse engineering; no resale; up to 100 seats",
            "=" * 50,
        ]
    )
    for label, message in [
        ("short", "Hello World!"),
        ("boundary", "A" * provider.chunk_limit),
        ("boundary + 1", "A" * (provider.chunk_limit + 1)),
        ("500 bytes", "A" * 500),
        ("licence x4", licence * 4),
    ]:
        sealed = encrypt_with_key(message, pub)
        form = sealed.split(FIELD_SEPARATOR, 2)[1] + " chunks" if is_chunked(sealed) else "single block"
        assert decrypt_with_key(sealed, priv) == message
        print(f"  {label:<14} {len(message.encode('utf-8')):>6} B -> {form:<14} {len(sealed):>6} chars")

    for bad in ["", "CHUNK:0:", "CHUNK:2:onlyoneblock", base64.b64encode(bytes(255)).decode()]:
        try:
            decrypt_with_key(bad, priv)
        except DecryptError as exc:
            print(f"  rejected {bad[:24]!r:<28} -> {exc.kind.value}")
