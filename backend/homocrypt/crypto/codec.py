"""
Boundary between caller-facing values and the Paillier plaintext ring.

The native plaintext domain is [0, n).  Signed integers in (-n/2, n/2) are
range-checked by shifting them by n//2 into [0, n), and are stored as their
residue modulo n so that homomorphic additions simply wrap.  Decoding shifts
by n//2, reduces modulo n and shifts back, which recovers any signed sum whose
magnitude stayed below n/2.  Past that bound the result is silently wrong.
"""

import re

from homocrypt.crypto.errors import OutOfRange, SerializationError
from homocrypt.crypto.keys import PublicKey

_SIGNED_DECIMAL = re.compile(r"-?[0-9]+")
# stays below CPython's int/str conversion limit (4300 digits by default)
_CHUNK_DIGITS = 4000


def parse_decimal(text: str) -> int:
    """int(text) for decimal strings of any length."""
    if text.startswith("-"):
        return -parse_decimal(text[1:])
    if len(text) <= _CHUNK_DIGITS:
        return int(text)
    split = len(text) // 2
    low_digits = len(text) - split
    return parse_decimal(text[:split]) * 10**low_digits + parse_decimal(text[split:])


def format_decimal(value: int) -> str:
    """str(value) for integers of any size."""
    if value < 0:
        return "-" + format_decimal(-value)
    if value.bit_length() <= _CHUNK_DIGITS * 3:
        return str(value)
    low_digits = (value.bit_length() * 3 // 10) // 2
    high, low = divmod(value, 10**low_digits)
    return format_decimal(high) + format_decimal(low).zfill(low_digits)


def coerce_int(value) -> int:
    """Accept an int or a decimal string; everything else is rejected."""
    if isinstance(value, bool):
        raise SerializationError("booleans are not integers here")
    if isinstance(value, int):
        return value
    if isinstance(value, str):
        text = value.strip()
        if not _SIGNED_DECIMAL.fullmatch(text):
            raise SerializationError(f"not a decimal integer: {value!r}")
        return parse_decimal(text)
    raise SerializationError(f"expected int or decimal string, got {type(value).__name__}")


def encode_signed(pub: PublicKey, x) -> int:
    x = coerce_int(x)
    shifted = x + pub.half
    if not 0 <= shifted < pub.n:
        raise OutOfRange("signed value must lie in [-n//2, n - n//2)")
    return (shifted - pub.half) % pub.n


def decode_signed(pub: PublicKey, plaintext: int) -> int:
    return (plaintext + pub.half) % pub.n - pub.half
