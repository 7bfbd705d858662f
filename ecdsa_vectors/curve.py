"""
P-256 primitives backed by ecpy.

Scalar multiplication, signing and verification are delegated entirely to
ecpy; ecpy errors propagate to the caller unchanged.
"""

import hashlib
from typing import Tuple

from ecpy.curves import Curve, Point
from ecpy.ecdsa import ECDSA
from ecpy.keys import ECPrivateKey, ECPublicKey

from .limbs import int_to_bytes
from .signature import Signature, join_signature

CURVE = Curve.get_curve("secp256r1")
ORDER = CURVE.order
SIZE = 32

# ITUPLE keeps r and s as integers; compact bytes are built by join_signature
_signer = ECDSA(fmt="ITUPLE")


def public_key(privkey: int) -> Tuple[int, int]:
    """Return (x, y) of privkey * G."""
    pt = CURVE.mul_point(privkey, CURVE.generator)
    return pt.x, pt.y


def sign_digest(msghash: int, privkey: int) -> bytes:
    """Deterministic (RFC 6979) signature of a 32-byte digest, compact r || s."""
    pv_key = ECPrivateKey(privkey, CURVE)
    r, s = _signer.sign_rfc6979(int_to_bytes(msghash, SIZE), pv_key, hashlib.sha256)
    return join_signature(Signature(r, s), SIZE)


def verify_digest(msghash: int, sig: Signature, pub: Tuple[int, int]) -> bool:
    pu_key = ECPublicKey(Point(pub[0], pub[1], CURVE))
    return bool(_signer.verify(int_to_bytes(msghash, SIZE), (sig.r, sig.s), pu_key))


def on_curve(pub: Tuple[int, int]) -> bool:
    return CURVE.is_on_curve(Point(pub[0], pub[1], CURVE, check=False))
