"""Short public identifiers derived from upstream concept ids."""

from __future__ import annotations

from typing import Any, Iterator

FNV_OFFSET_BASIS = 0x811C9DC5
FNV_PRIME = 16777619
ID_LENGTH = 6

_BASE36_DIGITS = "0123456789abcdefghijklmnopqrstuvwxyz"


def _code_units(text: str) -> Iterator[int]:
    data = text.encode("utf-16-le", "surrogatepass")
    for idx in range(0, len(data), 2):
        yield data[idx] | (data[idx + 1] << 8)


def fnv1a32(text: str) -> int:
    """32-bit FNV-1a over the UTF-16 code units of ``text``."""
    value = FNV_OFFSET_BASIS
    for unit in _code_units(text):
        value ^= unit
        value = (value * FNV_PRIME) & 0xFFFFFFFF
    return value


def to_base36(value: int) -> str:
    if value == 0:
        return "0"
    digits = []
    while value:
        value, rem = divmod(value, 36)
        digits.append(_BASE36_DIGITS[rem])
    return "".join(reversed(digits))


def derive_id(source_id: Any) -> str:
    encoded = to_base36(fnv1a32(str(source_id)))
    return encoded.rjust(ID_LENGTH, "0")[-ID_LENGTH:]
