import pytest

from ecdsa_vectors import curve
from ecdsa_vectors.evaluator import Evaluation, Evaluator, ReferencePrivToPub, ReferenceVerify
from ecdsa_vectors.generator import (ACCEPT, REJECT, KeyDerivationCase, SignatureCase,
                                     VectorMismatch, case_to_json, check_case,
                                     document_case, encode_inputs, expected_outputs,
                                     key_derivation_cases, signature_cases)
from ecdsa_vectors.limbs import from_limbs, strided_keys, to_limbs

MSGHASH = 1234


class FixedWitness(Evaluator):
    """Returns a canned witness, whatever the inputs."""

    def __init__(self, witness, satisfied=True):
        self.witness = witness
        self.satisfied = satisfied
        self.calls = []

    def evaluate(self, inputs, check=False):
        self.calls.append((inputs, check))
        return Evaluation(list(self.witness), self.satisfied if check else None)


# =============================================================================
# Key derivation
# =============================================================================

class TestKeyDerivation:
    def test_seed_and_strided_keys(self, seed_keys):
        cases = key_derivation_cases(seed_keys, strided_keys())
        assert len(cases) == 4 + 15
        assert [c.privkey for c in cases[:4]] == seed_keys
        assert (cases[4].pub_x, cases[4].pub_y) == curve.public_key(1)

    def test_inputs_and_outputs(self, seed_keys):
        case = key_derivation_cases(seed_keys[:1])[0]
        assert encode_inputs(case) == {"privkey": to_limbs(seed_keys[0])}
        out = expected_outputs(case)
        assert len(out) == 12
        assert from_limbs(out[:6]) == case.pub_x
        assert from_limbs(out[6:]) == case.pub_y

    def test_seed_keys_against_reference(self, seed_keys):
        evaluator = ReferencePrivToPub()
        evaluator.load()
        for case in key_derivation_cases(seed_keys):
            check_case(evaluator, case)

    def test_strided_keys_against_reference(self):
        evaluator = ReferencePrivToPub()
        for case in key_derivation_cases([], strided_keys()[:4]):
            check_case(evaluator, case, check_constraints=True)

    def test_not_constraint_checked_by_default(self, seed_keys):
        case = key_derivation_cases(seed_keys[:1])[0]
        stub = FixedWitness([1] + expected_outputs(case))
        check_case(stub, case)
        assert stub.calls[0][1] is False

    def test_mismatch_names_slot(self, seed_keys):
        case = key_derivation_cases(seed_keys[:1])[0]
        witness = [1] + expected_outputs(case)
        witness[7] += 1
        with pytest.raises(VectorMismatch) as info:
            check_case(FixedWitness(witness), case)
        assert info.value.slot == 7
        assert info.value.expected == to_limbs(case.pub_y)[0]
        assert info.value.actual == to_limbs(case.pub_y)[0] + 1
        assert "witness[7]" in str(info.value)

    def test_short_witness(self, seed_keys):
        case = key_derivation_cases(seed_keys[:1])[0]
        with pytest.raises(VectorMismatch) as info:
            check_case(FixedWitness([1, 2, 3]), case)
        assert info.value.actual != info.value.expected


# =============================================================================
# Signature verification
# =============================================================================

class TestSignatureCases:
    def test_pairs(self, seed_keys):
        cases = signature_cases(seed_keys, MSGHASH)
        assert len(cases) == 8
        assert [c.expected for c in cases] == [ACCEPT, REJECT] * 4
        for good, bad in zip(cases[::2], cases[1::2]):
            assert bad.r == good.r + 1
            assert (bad.s, bad.msghash, bad.pub_x, bad.pub_y) == (good.s, good.msghash, good.pub_x, good.pub_y)

    def test_inputs(self, seed_keys):
        case = signature_cases(seed_keys[:1], MSGHASH)[0]
        inputs = encode_inputs(case)
        assert sorted(inputs) == ["msghash", "pubkey", "r", "s"]
        assert inputs["msghash"] == [1234, 0, 0, 0, 0, 0]
        assert inputs["pubkey"] == [to_limbs(case.pub_x), to_limbs(case.pub_y)]
        assert expected_outputs(case) == [ACCEPT]

    def test_against_reference(self, seed_keys):
        evaluator = ReferenceVerify()
        for case in signature_cases(seed_keys, MSGHASH):
            check_case(evaluator, case)

    def test_wrong_verdict(self, seed_keys):
        good = signature_cases(seed_keys[:1], MSGHASH)[0]
        flipped = good._replace(expected=REJECT)
        with pytest.raises(VectorMismatch):
            check_case(ReferenceVerify(), flipped)

    def test_constraint_failure_reported(self, seed_keys):
        case = signature_cases(seed_keys[:1], MSGHASH)[1]
        with pytest.raises(AssertionError, match="constraints"):
            check_case(FixedWitness([1, REJECT], satisfied=False), case)

    def test_reject_requires_satisfied_witness(self, seed_keys):
        case = signature_cases(seed_keys[:1], MSGHASH)[1]
        stub = FixedWitness([1, REJECT], satisfied=True)
        check_case(stub, case)
        assert stub.calls[0][1] is True


def test_document_case(sample_document):
    case = document_case(*sample_document)
    assert isinstance(case, SignatureCase)
    assert case.expected == ACCEPT
    check_case(ReferenceVerify(), case)


def test_case_to_json(seed_keys):
    case = KeyDerivationCase("k", 2**43 + 1, 3, 4)
    out = case_to_json(case)
    assert out["label"] == "k"
    assert out["input"] == {"privkey": ["1", "1", "0", "0", "0", "0"]}
    assert out["output"] == ["3", "0", "0", "0", "0", "0", "4", "0", "0", "0", "0", "0"]
