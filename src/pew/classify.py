"""
Text/binary sniffing based on a file's leading bytes.
"""

from __future__ import annotations

from pathlib import Path
from typing import Iterable, Tuple

SNIFF_BYTES = 512
NON_ASCII_RATIO = 0.3

BINARY_SIGNATURES: Tuple[bytes, ...] = (
    b"\x7fELF",             # ELF
    b"MZ",                  # Windows PE
    b"PK\x03\x04",          # ZIP
    b"\xff\xd8\xff",        # JPEG
    b"\x89PNG",             # PNG
    b"%PDF",                # PDF
    b"\x1f\x8b",            # GZIP
)


def is_binary_content(
    data: bytes,
    signatures: Iterable[bytes] = BINARY_SIGNATURES,
) -> bool:
    """
    Guess whether *data* (the head of a file) is binary.

    A known magic number wins outright. Otherwise more than one NUL byte,
    or more than 30% of bytes above 0x7f, marks the data as binary.
    """
    if any(data.startswith(sig) for sig in signatures):
        return True

    if data.count(0) > 1:
        return True

    if data:
        high = sum(1 for b in data if b > 127)
        return high / len(data) > NON_ASCII_RATIO
    return False


def is_text_eligible(
    path: Path,
    signatures: Iterable[bytes] = BINARY_SIGNATURES,
    sniff_bytes: int = SNIFF_BYTES,
) -> bool:
    """Return ``True`` if *path* looks like text. ``OSError`` propagates."""
    with Path(path).open("rb") as fh:
        head = fh.read(sniff_bytes)
    return not is_binary_content(head, signatures)
