"""Compact (r || s) ECDSA signature handling."""

from typing import NamedTuple

from .limbs import bytes_to_int, int_to_bytes


class Signature(NamedTuple):
    r: int
    s: int


def split_signature(raw: bytes) -> Signature:
    """Split a compact signature at its midpoint into (r, s).

    No range check against the curve order is done here; out-of-range
    components are left for the verifier (or the circuit) to reject.
    """
    if len(raw) % 2:
        raise ValueError(f"compact signature has odd length {len(raw)}")
    half = len(raw) // 2
    return Signature(bytes_to_int(raw[:half]), bytes_to_int(raw[half:]))


def join_signature(sig: Signature, size: int = 32) -> bytes:
    return int_to_bytes(sig.r, size) + int_to_bytes(sig.s, size)
