"""Limb encoding and test-vector generation for P-256 ECDSA circuits."""

from .limbs import (LIMB_BITS, LIMB_COUNT, LimbCapacityError, bytes_to_int,
                    from_limbs, int_to_bytes, remap_stride, to_limbs)
from .signature import Signature, split_signature

__version__ = "0.1.0"
