"""
Limb encoding for field-constrained circuits.

The P-256 circuits take every 256-bit value (private keys, coordinates,
message hashes, r and s) as 6 limbs of 43 bits, least significant first.
That gives 258 bits of capacity.
"""

from typing import List

LIMB_BITS = 43
LIMB_COUNT = 6


class LimbCapacityError(ValueError):
    """Value does not fit the requested limb or byte geometry."""


# ─── Limbs ───────────────────────────────────────────────────────────────────

def to_limbs(value: int, n: int = LIMB_COUNT, bits: int = LIMB_BITS) -> List[int]:
    """Split value into exactly n limbs of the given width, LSB first."""
    if value < 0 or value >> (n * bits):
        raise LimbCapacityError(f"{value} does not fit {n} x {bits}-bit limbs")
    mask = (1 << bits) - 1
    ret = []
    for _ in range(n):
        ret.append(value & mask)
        value >>= bits
    return ret


def from_limbs(limbs: List[int], bits: int = LIMB_BITS) -> int:
    """Inverse of to_limbs."""
    ret = 0
    for i, limb in enumerate(limbs):
        if not 0 <= limb < (1 << bits):
            raise LimbCapacityError(f"limb[{i}] = {limb} is not a {bits}-bit value")
        ret |= limb << (bits * i)
    return ret


# ─── Bytes ───────────────────────────────────────────────────────────────────

def bytes_to_int(data: bytes) -> int:
    """Big-endian bytes to integer."""
    return int.from_bytes(data, 'big')


def int_to_bytes(value: int, length: int = 32) -> bytes:
    """Integer to big-endian bytes. Raises instead of dropping high bits."""
    try:
        return value.to_bytes(length, 'big')
    except OverflowError as e:
        raise LimbCapacityError(f"{value} does not fit {length} bytes") from e


# ─── Strides ─────────────────────────────────────────────────────────────────

def remap_stride(source_stride: int, target_stride: int, value: int) -> int:
    """Re-space the base 2^source_stride digits of value at 2^target_stride.

    remap_stride(1, 10, 0b101) == 1 + (1 << 20): each bit of the input moves
    to a position ten bits further up than the previous one.
    """
    mask = (1 << source_stride) - 1
    ret = 0
    exp = 0
    while value > 0:
        ret += (value & mask) << (target_stride * exp)
        value >>= source_stride
        exp += 1
    return ret


def strided_keys(count: int = 16, stride: int = 10, small_stride: int = 1) -> List[int]:
    """Sparse private keys built from the counters 1 .. count-1."""
    return [remap_stride(small_stride, stride, cnt) for cnt in range(1, count)]
