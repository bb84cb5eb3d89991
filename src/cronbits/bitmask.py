"""Fixed-width 64-bit field masks.

Bit ``i`` of a mask set means "value ``i`` is allowed". Masks are plain
Python integers kept within ``[0, 2**64)`` so shifts never sign-extend.
"""

from __future__ import annotations

WIDTH = 64

# Wildcard sentinel: every bit set.
ALL_BITS = (1 << WIDTH) - 1

_DE_BRUIJN_MULTIPLIER = 0x022FDD63CC95386D

_DE_BRUIJN_POSITIONS = (
    0, 1, 2, 53, 3, 7, 54, 27,
    4, 38, 41, 8, 34, 55, 48, 28,
    62, 5, 39, 46, 44, 42, 22, 9,
    24, 35, 59, 56, 49, 18, 29, 11,
    63, 52, 6, 26, 37, 40, 33, 47,
    61, 45, 43, 21, 23, 58, 17, 10,
    51, 25, 36, 32, 60, 20, 57, 16,
    50, 31, 19, 15, 30, 14, 13, 12,
)


def get_bit(mask: int, index: int) -> bool:
    return (mask >> index) & 1 == 1


def set_bit(mask: int, index: int) -> int:
    return (mask | (1 << index)) & ALL_BITS


def set_all() -> int:
    """Return the wildcard mask."""
    return ALL_BITS


def set_range(mask: int, first: int, last: int, step: int = 1) -> int:
    """Set every ``step``-th bit from ``first`` to ``last`` inclusive."""
    if step == 1 and first <= last:
        mask |= (1 << (last + 1)) - (1 << first)
    else:
        for index in range(first, last + 1, step):
            mask |= 1 << index
    return mask & ALL_BITS


def rotate_right(mask: int, shift: int, period: int) -> int:
    """Rotate the low ``period`` bits of ``mask`` right by ``shift``."""
    return ((mask >> shift) | (mask << (period - shift))) & ALL_BITS


def lowest_set_position(value: int) -> int:
    """Return the index of the lowest set bit of a non-zero mask."""
    isolated = value & -value
    return _DE_BRUIJN_POSITIONS[((isolated * _DE_BRUIJN_MULTIPLIER) & ALL_BITS) >> 58]


def find_first_set(mask: int, start: int, last: int) -> int | None:
    """Return the smallest set bit index in ``[start, last]``, or None."""
    if start <= last and get_bit(mask, start):
        return start

    value = mask >> start
    if value == 0:
        return None

    result = lowest_set_position(value) + start
    return result if result <= last else None


def iter_bits(mask: int, first: int, last: int):
    """Yield the set bit indexes of ``mask`` within ``[first, last]``."""
    index = find_first_set(mask, first, last)
    while index is not None:
        yield index
        index = find_first_set(mask, index + 1, last)
