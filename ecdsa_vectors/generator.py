"""
Test cases for the P-256 circuits.

Two circuits are exercised:
  - priv_to_pub: privkey[6] -> pubkey[2][6]
  - verify:      r[6], s[6], msghash[6], pubkey[2][6] -> result (1 or 0)

Cases are plain values; encode_inputs() / expected_outputs() turn them into
what the circuit consumes and produces, check_case() compares the two.
"""

from typing import Iterable, List, NamedTuple, Optional, Sequence, Union

from . import curve, document
from .evaluator import Evaluator, Inputs, to_circom_json
from .limbs import to_limbs
from .signature import split_signature

ACCEPT = 1
REJECT = 0


class KeyDerivationCase(NamedTuple):
    label: str
    privkey: int
    pub_x: int
    pub_y: int


class SignatureCase(NamedTuple):
    label: str
    r: int
    s: int
    msghash: int
    pub_x: int
    pub_y: int
    expected: int


VectorCase = Union[KeyDerivationCase, SignatureCase]


class VectorMismatch(AssertionError):
    def __init__(self, label: str, slot: int, expected: int, actual):
        super().__init__(f"{label}: witness[{slot}] expected {expected}, got {actual}")
        self.label = label
        self.slot = slot
        self.expected = expected
        self.actual = actual


# ─── Case builders ───────────────────────────────────────────────────────────

def key_derivation_cases(seed_keys: Sequence[int], extra_keys: Iterable[int] = ()) -> List[KeyDerivationCase]:
    cases = []
    for privkey in list(seed_keys) + list(extra_keys):
        x, y = curve.public_key(privkey)
        cases.append(KeyDerivationCase(f"privkey={privkey}", privkey, x, y))
    return cases


def signature_cases(seed_keys: Sequence[int], msghash: int) -> List[SignatureCase]:
    """A genuine signature per key, then the same one with r + 1."""
    cases = []
    for privkey in seed_keys:
        x, y = curve.public_key(privkey)
        sig = split_signature(curve.sign_digest(msghash, privkey))
        cases.append(SignatureCase(f"correct sig: privkey={privkey} msghash={msghash}",
                                   sig.r, sig.s, msghash, x, y, ACCEPT))
        cases.append(SignatureCase(f"incorrect sig: privkey={privkey} msghash={msghash}",
                                   sig.r + 1, sig.s, msghash, x, y, REJECT))
    return cases


def document_case(payload: str, pem: str) -> SignatureCase:
    ext = document.extract(payload, pem)
    return SignatureCase("document signature", ext.signature.r, ext.signature.s,
                         ext.msghash, ext.pub_x, ext.pub_y, ACCEPT)


# ─── Encoding ────────────────────────────────────────────────────────────────

def encode_inputs(case: VectorCase) -> Inputs:
    if isinstance(case, KeyDerivationCase):
        return {"privkey": to_limbs(case.privkey)}
    return {
        "r": to_limbs(case.r),
        "s": to_limbs(case.s),
        "msghash": to_limbs(case.msghash),
        "pubkey": [to_limbs(case.pub_x), to_limbs(case.pub_y)],
    }


def expected_outputs(case: VectorCase) -> List[int]:
    if isinstance(case, KeyDerivationCase):
        return to_limbs(case.pub_x) + to_limbs(case.pub_y)
    return [case.expected]


def case_to_json(case: VectorCase) -> dict:
    """Circuit input file contents plus the expected outputs, as decimal strings."""
    return {
        "label": case.label,
        "input": to_circom_json(encode_inputs(case)),
        "output": [str(v) for v in expected_outputs(case)],
    }


# ─── Checking ────────────────────────────────────────────────────────────────

def check_case(evaluator: Evaluator, case: VectorCase, check_constraints: Optional[bool] = None):
    """Evaluate one case and raise VectorMismatch on the first bad slot.

    Signature cases are constraint checked by default: the witness must be
    valid for rejecting cases too, so that a 0 comes from the verifier and
    not from an unsatisfiable input.
    """
    if check_constraints is None:
        check_constraints = isinstance(case, SignatureCase)
    expected = expected_outputs(case)
    result = evaluator.evaluate(encode_inputs(case), check=check_constraints)
    for i, want in enumerate(expected, start=1):
        got = result.witness[i] if i < len(result.witness) else None
        if got != want:
            raise VectorMismatch(case.label, i, want, got)
    if check_constraints and not result.satisfied:
        raise AssertionError(f"{case.label}: witness does not satisfy the constraints")
