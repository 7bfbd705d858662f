"""
Signature extraction from a 2D-Doc style identity-document payload.

The payload is the signed message, a unit separator (U+001F), then the
signature in unpadded base32. The message may itself carry group separators
(U+001D) between fields; they are signed bytes and are kept as-is.
"""

import base64
import binascii
import hashlib
import re
import textwrap
from typing import NamedTuple, Tuple

from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric import ec

from .signature import Signature, split_signature

UNIT_SEPARATOR = "\u001f"

_PEM_RE = re.compile(r"\s*-----BEGIN PUBLIC KEY-----(.*?)-----END PUBLIC KEY-----\s*", re.S)


class MalformedPayload(ValueError):
    """Document payload or key blob does not have the expected structure."""


class Extraction(NamedTuple):
    message: str
    signature: Signature
    msghash: int
    pub_x: int
    pub_y: int


def split_payload(payload: str) -> Tuple[str, str]:
    """Split into (message, encoded signature)."""
    parts = payload.split(UNIT_SEPARATOR)
    if len(parts) != 2:
        raise MalformedPayload(f"expected 2 segments separated by U+001F, got {len(parts)}")
    return parts[0], parts[1]


def decode_signature(encoded: str) -> Signature:
    """Base32 decode a signature segment, restoring the padding it omits."""
    padded = encoded + "=" * (-len(encoded) % 8)
    try:
        raw = base64.b32decode(padded)
    except binascii.Error as e:
        raise MalformedPayload(f"signature segment is not base32: {e}") from e
    if len(raw) % 2:
        raise MalformedPayload(f"decoded signature has odd length {len(raw)}")
    return split_signature(raw)


def message_digest(message: str) -> int:
    return int(hashlib.sha256(message.encode("utf-8")).hexdigest(), 16)


def load_public_key(pem: str) -> Tuple[int, int]:
    """Return the (x, y) coordinates of a PEM encoded EC public key.

    Keys copied out of documents and web pages often lose their line breaks,
    so the base64 body is re-wrapped to 64 columns before loading.
    """
    m = _PEM_RE.fullmatch(pem)
    if m is None:
        raise MalformedPayload("no PUBLIC KEY armor found")
    body = "".join(m.group(1).split())
    armored = "\n".join(["-----BEGIN PUBLIC KEY-----"] + textwrap.wrap(body, 64)
                        + ["-----END PUBLIC KEY-----", ""])
    key = serialization.load_pem_public_key(armored.encode("ascii"))
    if not isinstance(key, ec.EllipticCurvePublicKey):
        raise MalformedPayload(f"expected an EC public key, got {type(key).__name__}")
    numbers = key.public_numbers()
    return numbers.x, numbers.y


def extract(payload: str, pem: str) -> Extraction:
    message, encoded = split_payload(payload)
    sig = decode_signature(encoded)
    pub_x, pub_y = load_public_key(pem)
    return Extraction(message, sig, message_digest(message), pub_x, pub_y)
