#!/usr/bin/env python3
"""
Run the P-256 ECDSA test vectors against the circuits.

Suites:
  - priv_to_pub: fixed seed keys plus sparse strided keys, checks all 12
    output limbs of the public key
  - verify: a genuine and an r + 1 signature per seed key, plus the real
    signature extracted from the sample identity document

All test data is loaded from the JSON fixture file.

Usage:
    p256-ecdsa-vectors test_vectors/p256_ecdsa_fixtures.json [circuits_dir [timeout_seconds]]

Without circuits_dir the ecpy reference models stand in for the circuits.
With it, test_ecdsa.circom and test_ecdsa_verify.circom in that directory
are compiled with circom and evaluated with node / snarkjs; each toolchain
call is bounded by timeout_seconds when given.

Exit code 0 = all tests passed, 1 = failures found, 2 = usage error.
"""

import json
import os
import sys
from typing import List, Optional, Sequence

from . import curve
from .document import MalformedPayload
from .evaluator import (CircomEvaluator, Evaluator, EvaluatorError,
                        ReferencePrivToPub, ReferenceVerify)
from .generator import (check_case, document_case, key_derivation_cases,
                        signature_cases)
from .limbs import LIMB_BITS, LIMB_COUNT, strided_keys

PRIV_TO_PUB_CIRCUIT = "test_ecdsa.circom"
VERIFY_CIRCUIT = "test_ecdsa_verify.circom"


# ─── Test runner ─────────────────────────────────────────────────────────────

class TestRunner:
    __test__ = False

    def __init__(self):
        self.passed = 0
        self.failed = 0
        self.skipped = 0

    def ok(self, label: str):
        self.passed += 1
        print(f"  PASS: {label}")

    def fail(self, label: str, msg: str):
        self.failed += 1
        print(f"  FAIL: {label}")
        print(f"    {msg}")

    def skip(self, label: str, reason: str):
        self.skipped += 1
        print(f"  SKIP: {label} ({reason})")

    def begin_section(self, name: str):
        print(f"\n=== {name} ===")

    def summary(self) -> int:
        print(f"\n{'='*60}")
        total = self.passed + self.failed + self.skipped
        print(f"Total: {total}  Passed: {self.passed}  Failed: {self.failed}  Skipped: {self.skipped}")
        if self.failed == 0:
            print("ALL TESTS PASSED")
        else:
            print(f"*** {self.failed} FAILURE(S) ***")
        return 0 if self.failed == 0 else 1


# ─── Fixtures ────────────────────────────────────────────────────────────────

def load_fixtures(path: str) -> dict:
    with open(path) as f:
        data = json.load(f)
    limbs = data.get("limbs", {})
    if limbs and (limbs["n"], limbs["k"]) != (LIMB_BITS, LIMB_COUNT):
        raise ValueError(f"fixtures use {limbs['k']} x {limbs['n']}-bit limbs, "
                         f"this build uses {LIMB_COUNT} x {LIMB_BITS}")
    return data


def seed_keys(data: dict) -> List[int]:
    return [int(k) for k in data["seed_privkeys"]]


def extra_keys(data: dict) -> List[int]:
    cfg = data.get("strided_privkeys")
    if not cfg:
        return []
    return strided_keys(cfg["count"], cfg["stride"], cfg["small_stride"])


# ─── Suites ──────────────────────────────────────────────────────────────────

def run_suite(t: TestRunner, evaluator: Evaluator, cases: Sequence,
              check_constraints: Optional[bool] = None):
    try:
        evaluator.load()
    except EvaluatorError as e:
        t.fail(f"{evaluator.name}/load", str(e))
        for case in cases:
            t.skip(case.label, "circuit failed to load")
        return

    for case in cases:
        try:
            check_case(evaluator, case, check_constraints)
        except (AssertionError, EvaluatorError) as e:
            t.fail(case.label, str(e))
        else:
            t.ok(case.label)


def run_priv_to_pub(t: TestRunner, evaluator: Evaluator, data: dict):
    t.begin_section("ECDSAPrivToPub")
    run_suite(t, evaluator, key_derivation_cases(seed_keys(data), extra_keys(data)))


def run_verify(t: TestRunner, evaluator: Evaluator, data: dict):
    t.begin_section("ECDSAVerifyNoPubkeyCheck")
    run_suite(t, evaluator, signature_cases(seed_keys(data), int(data["msghash"])))

    doc = data.get("document")
    t.begin_section("ECDSAVerifyNoPubkeyCheck (document)")
    if doc is None:
        t.skip("document", "no document in fixtures")
        return
    try:
        case = document_case(doc["payload"], doc["public_key_pem"])
    except MalformedPayload as e:
        t.fail(f"document/{doc.get('label', 'extract')}", str(e))
        return
    run_suite(t, evaluator, [case._replace(label=doc.get("label", case.label))])


# ─── Main ────────────────────────────────────────────────────────────────────

def circom_evaluators(circuits: str, timeout: Optional[float] = None):
    """(priv_to_pub, verify) evaluators for the circuits in a directory."""
    return (CircomEvaluator(os.path.join(circuits, PRIV_TO_PUB_CIRCUIT), include=[circuits], timeout=timeout),
            CircomEvaluator(os.path.join(circuits, VERIFY_CIRCUIT), include=[circuits], timeout=timeout))


def main(argv: Optional[List[str]] = None) -> int:
    argv = sys.argv if argv is None else argv
    if len(argv) not in (2, 3, 4):
        print(f"Usage: {argv[0]} <fixtures.json> [circuits_dir [timeout_seconds]]")
        return 2

    data = load_fixtures(argv[1])

    print(f"Curve: {data.get('curve', 'secp256r1')}  order n = 0x{curve.ORDER:064x}")
    print(f"Limbs: {LIMB_COUNT} x {LIMB_BITS} bits")

    if len(argv) >= 3:
        circuits = argv[2]
        timeout = float(argv[3]) if len(argv) == 4 else None
        print(f"Circuits: {circuits} (circom, timeout {timeout or 'none'})")
        priv_to_pub, verify = circom_evaluators(circuits, timeout)
    else:
        print("Circuits: ecpy reference models")
        priv_to_pub = ReferencePrivToPub()
        verify = ReferenceVerify()

    t = TestRunner()
    try:
        run_priv_to_pub(t, priv_to_pub, data)
        run_verify(t, verify, data)
    finally:
        priv_to_pub.close()
        verify.close()
    return t.summary()


if __name__ == "__main__":
    sys.exit(main())
