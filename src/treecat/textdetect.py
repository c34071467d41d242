"""Text/binary classification from a file's leading bytes."""

from __future__ import annotations

import codecs
from enum import Enum
from typing import Final

SAMPLE_SIZE: Final[int] = 512

UTF8_BOM: Final[bytes] = codecs.BOM_UTF8
UTF16LE_BOM: Final[bytes] = codecs.BOM_UTF16_LE
UTF16BE_BOM: Final[bytes] = codecs.BOM_UTF16_BE

_ASCII_CONTROLS: Final[frozenset[int]] = frozenset(b"\n\r\t")
_SURROGATE_LO: Final[int] = 0xD8
_SURROGATE_HI: Final[int] = 0xDF


class Encoding(Enum):
    """Encoding family detected for a byte sample."""

    ASCII = "ASCII"
    UTF8 = "UTF-8"
    UTF16LE = "UTF-16LE"
    UTF16BE = "UTF-16BE"
    UNKNOWN = "Unknown"

    def __str__(self) -> str:
        return self.value


class Utf8Policy(Enum):
    """How UTF-8 validation treats a sample cut from a larger file.

    ``PERMISSIVE`` ignores an incomplete multi-byte sequence at the very
    end of a truncated sample. ``STRICT`` rejects it. A sample that is the
    whole file is always validated strictly.
    """

    PERMISSIVE = "permissive"
    STRICT = "strict"


def _is_text_byte(b: int) -> bool:
    return 32 <= b <= 126 or b in _ASCII_CONTROLS


def is_ascii(sample: bytes) -> bool:
    """Return whether every byte is printable ASCII, ``\\n``, ``\\r`` or ``\\t``."""
    return all(_is_text_byte(b) for b in sample)


def is_utf8(
    sample: bytes,
    sample_is_full_file: bool = True,
    utf8_policy: Utf8Policy = Utf8Policy.PERMISSIVE,
) -> bool:
    """Return whether ``sample`` carries a UTF-8 BOM or is well-formed UTF-8 text.

    Without a BOM, control bytes other than tab, newline and carriage
    return reject the sample even though they are valid UTF-8.
    """
    if sample.startswith(UTF8_BOM):
        return True
    if any(b < 0x80 and not _is_text_byte(b) for b in sample):
        return False
    final = sample_is_full_file or utf8_policy is Utf8Policy.STRICT
    decoder = codecs.getincrementaldecoder("utf-8")(errors="strict")
    try:
        decoder.decode(sample, final=final)
    except UnicodeDecodeError:
        return False
    return True


def _all_surrogate_bytes(sample: bytes, offset: int) -> bool:
    if len(sample) % 2:
        return False
    return all(_SURROGATE_LO <= b <= _SURROGATE_HI for b in sample[offset::2])


def is_utf16le(sample: bytes) -> bool:
    """Return whether ``sample`` looks like UTF-16LE.

    True for a ``FF FE`` BOM, or an even-length sample where the second
    byte of every pair lies in ``0xD8..0xDF``. The second rule only
    recognises surrogate code units, not general UTF-16 text.
    """
    return sample.startswith(UTF16LE_BOM) or _all_surrogate_bytes(sample, 1)


def is_utf16be(sample: bytes) -> bool:
    """Mirror of :func:`is_utf16le` for ``FE FF`` and the first byte of each pair."""
    return sample.startswith(UTF16BE_BOM) or _all_surrogate_bytes(sample, 0)


def classify(
    sample: bytes,
    sample_is_full_file: bool = True,
    utf8_policy: Utf8Policy = Utf8Policy.PERMISSIVE,
) -> Encoding:
    """Classify a byte sample taken from the start of a file.

    Checks run in order ASCII, UTF-8, UTF-16LE, UTF-16BE; the first one
    that succeeds decides the label.

    Args:
        sample: Leading bytes of the file, normally at most
            :data:`SAMPLE_SIZE` bytes.
        sample_is_full_file: Whether ``sample`` holds the entire file.
        utf8_policy: Treatment of a truncated trailing UTF-8 sequence.

    Returns:
        Encoding: Detected family, or ``Encoding.UNKNOWN`` for binary data.
    """
    if is_ascii(sample):
        return Encoding.ASCII
    if is_utf8(sample, sample_is_full_file, utf8_policy):
        return Encoding.UTF8
    if is_utf16le(sample):
        return Encoding.UTF16LE
    if is_utf16be(sample):
        return Encoding.UTF16BE
    return Encoding.UNKNOWN


def is_text(encoding: Encoding) -> bool:
    return encoding is not Encoding.UNKNOWN
