"""
Licseal Console: Utility Helpers
=================================

Presentation helpers shared by the console tabs: human-readable error
text, envelope summaries and size formatting.  Nothing here touches
Streamlit, so the helpers can be exercised without a running app.
"""

from __future__ import annotations

import sys
from pathlib import Path

# -- make project root importable so we can ``import licseal`` -------------
_project_root = str(Path(__file__).resolve().parent.parent)
if _project_root not in sys.path:
    sys.path.insert(0, _project_root)

import licseal  # noqa: E402
from licseal import ErrorKind  # noqa: E402


# ---------------------------------------------------------------------------
# Error rendering
# ---------------------------------------------------------------------------

def _block_label(details: dict) -> str:
    if "chunk" in details:
        return f"Block {details['chunk'] + 1}"
    return "The ciphertext"


def describe_error(exc: Exception) -> str:
    """
    Turn a Licseal error into one sentence for the operator.

    Unknown exceptions fall back to their ``str()``.
    """
    if isinstance(exc, licseal.KeyConfigError):
        return f"Key configuration problem: {exc}"
    if not isinstance(exc, licseal.LicsealError) or exc.kind is None:
        return f"Unexpected error: {exc}"

    d = exc.details
    kind = exc.kind

    if kind is ErrorKind.EMPTY_INPUT:
        return "Nothing to decrypt: the envelope is empty."
    if kind is ErrorKind.INPUT_TOO_LONG:
        return (
            f"The envelope is {d.get('length', '?')} characters, too long for a "
            f"single block (limit {d.get('max_length', '?')}). Chunked envelopes "
            "start with CHUNK:."
        )
    if kind is ErrorKind.INVALID_ENCODING:
        return f"{_block_label(d)} is not valid Base64."
    if kind is ErrorKind.INVALID_CIPHERTEXT_SIZE:
        return (
            f"{_block_label(d)} decodes to {d.get('actual', '?')} bytes; "
            f"this key expects exactly {d.get('expected', '?')}."
        )
    if kind is ErrorKind.DECRYPTION_FAILURE:
        return f"{_block_label(d)} could not be decrypted: wrong key or corrupted data."
    if kind is ErrorKind.INVALID_TEXT:
        return "Decryption produced bytes that are not UTF-8 text: wrong key or corrupted data."
    if kind is ErrorKind.DECRYPTED_TEXT_TOO_LONG:
        return (
            f"The decrypted text is {d.get('length', '?')} bytes, more than one "
            f"block can hold ({d.get('max_length', '?')})."
        )
    if kind is ErrorKind.INVALID_CHUNK_FORMAT:
        return "Malformed chunked envelope: expected CHUNK:<count>:<block>|<block>..."
    if kind is ErrorKind.INVALID_CHUNK_PREFIX:
        return "Malformed chunked envelope: it must start with CHUNK."
    if kind is ErrorKind.INVALID_CHUNK_COUNT:
        return (
            f"The chunk count must be a whole number from {licseal.MIN_CHUNKS} "
            f"to {licseal.MAX_CHUNKS}."
        )
    if kind is ErrorKind.CHUNK_COUNT_MISMATCH:
        return (
            f"The envelope declares {d.get('expected', '?')} blocks but "
            f"contains {d.get('actual', '?')}."
        )
    if kind is ErrorKind.MESSAGE_TOO_LONG:
        return (
            f"The licence is {human_size(d.get('length', 0))}; one envelope holds "
            f"at most {human_size(d.get('max_length', 0))} ({licseal.MAX_CHUNKS} blocks)."
        )
    if kind is ErrorKind.ENCRYPTION_FAILURE:
        return f"{_block_label(d)} could not be encrypted."
    if kind is ErrorKind.INVALID_PLAINTEXT:
        return (
            "The licence text cannot be encoded as UTF-8 "
            f"(bad character at position {d.get('position', '?')})."
        )
    return str(exc)


# ---------------------------------------------------------------------------
# Envelope summaries
# ---------------------------------------------------------------------------

def planned_form(byte_length: int, limit: int) -> str:
    """Describe the envelope form *byte_length* plaintext bytes will use."""
    if byte_length <= limit:
        return "single block"
    count = licseal.chunk_count(byte_length, limit)
    if count > licseal.MAX_CHUNKS:
        return f"too long ({count} blocks, max {licseal.MAX_CHUNKS})"
    return f"{count} chunks"


def envelope_summary(envelope: str) -> tuple[str, int, int]:
    """
    Summarise an envelope string without decrypting it.

    Returns
    -------
    (form, blocks, chars) : tuple[str, int, int]
        form   : "single block" or "chunked"
        blocks : number of ciphertext blocks
        chars  : envelope length in characters
    """
    if licseal.is_chunked(envelope):
        body = envelope.split(licseal.FIELD_SEPARATOR, 2)[-1]
        return "chunked", len(body.split(licseal.BLOCK_SEPARATOR)), len(envelope)
    return "single block", 1 if envelope else 0, len(envelope)


# ---------------------------------------------------------------------------
# Human-readable size
# ---------------------------------------------------------------------------

def human_size(size_bytes: int) -> str:
    """Convert a byte count to a human-readable string (e.g. '23.9 KB')."""
    if size_bytes < 0:
        return "0 B"
    for unit in ("B", "KB", "MB"):
        if abs(size_bytes) < 1024.0:
            if unit == "B":
                return f"{size_bytes} {unit}"
            return f"{size_bytes:.1f} {unit}"
        size_bytes /= 1024.0  # type: ignore[assignment]
    return f"{size_bytes:.1f} GB"
