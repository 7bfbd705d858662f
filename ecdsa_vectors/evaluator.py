"""
Circuit evaluators.

An evaluator takes a mapping of named limb-vector inputs and returns the
witness: witness[0] is the constant 1, declared outputs follow in
declaration order. Two kinds are provided:

  - CircomEvaluator: compiles a .circom file and computes witnesses with
    the circom / node / snarkjs toolchain.
  - ReferencePrivToPub, ReferenceVerify: software models of the two P-256
    circuits built on ecpy, used when no toolchain is around.
"""

import json
import os
import shutil
import subprocess
import tempfile
from typing import Dict, List, NamedTuple, Optional, Sequence

from . import curve
from .limbs import LIMB_COUNT, LimbCapacityError, from_limbs, to_limbs
from .signature import Signature

Inputs = Dict[str, object]


class EvaluatorError(RuntimeError):
    """External circuit toolchain failed."""


class Evaluation(NamedTuple):
    witness: List[int]
    satisfied: Optional[bool]


class Evaluator:
    """Base class. load() once, then evaluate() per case."""

    name = "evaluator"

    def load(self):
        pass

    def close(self):
        pass

    def evaluate(self, inputs: Inputs, check: bool = False) -> Evaluation:
        raise NotImplementedError


# ─── circom toolchain ────────────────────────────────────────────────────────

def _flatten(value) -> List[str]:
    if isinstance(value, (list, tuple)):
        return [s for v in value for s in _flatten(v)]
    return [str(value)]


def to_circom_json(inputs: Inputs) -> dict:
    """circom input files take big integers as decimal strings."""
    def conv(v):
        if isinstance(v, (list, tuple)):
            return [conv(x) for x in v]
        return str(v)
    return {k: conv(v) for k, v in inputs.items()}


class CircomEvaluator(Evaluator):
    def __init__(self, circuit: str, build_dir: Optional[str] = None,
                 include: Sequence[str] = (), timeout: Optional[float] = None,
                 circom: str = "circom", node: str = "node", snarkjs: str = "snarkjs"):
        self.circuit = circuit
        self.name = os.path.splitext(os.path.basename(circuit))[0]
        self.build_dir = build_dir
        self.include = list(include)
        self.timeout = timeout
        self.circom = circom
        self.node = node
        self.snarkjs = snarkjs
        self._loaded = False
        self._own_build_dir = False

    def _run(self, cmd: List[str]) -> subprocess.CompletedProcess:
        try:
            proc = subprocess.run(cmd, capture_output=True, text=True, timeout=self.timeout)
        except subprocess.TimeoutExpired as e:
            raise EvaluatorError(f"{cmd[0]} timed out after {self.timeout}s") from e
        except FileNotFoundError as e:
            raise EvaluatorError(f"{cmd[0]} not found") from e
        return proc

    def _run_checked(self, cmd: List[str]):
        proc = self._run(cmd)
        if proc.returncode != 0:
            raise EvaluatorError(f"{' '.join(cmd)} exited {proc.returncode}: {proc.stderr.strip()}")
        return proc

    @property
    def r1cs(self) -> str:
        return os.path.join(self.build_dir, f"{self.name}.r1cs")

    @property
    def js_dir(self) -> str:
        return os.path.join(self.build_dir, f"{self.name}_js")

    def load(self):
        if self._loaded:
            return
        if self.build_dir is None:
            self.build_dir = tempfile.mkdtemp(prefix=f"{self.name}_")
            self._own_build_dir = True
        os.makedirs(self.build_dir, exist_ok=True)
        cmd = [self.circom, self.circuit, "--r1cs", "--wasm", "-o", self.build_dir]
        for inc in self.include:
            cmd += ["-l", inc]
        self._run_checked(cmd)
        self._loaded = True

    def evaluate(self, inputs: Inputs, check: bool = False) -> Evaluation:
        self.load()
        with tempfile.TemporaryDirectory(dir=self.build_dir) as tmp:
            input_path = os.path.join(tmp, "input.json")
            wtns_path = os.path.join(tmp, "witness.wtns")
            json_path = os.path.join(tmp, "witness.json")
            with open(input_path, "w") as f:
                json.dump(to_circom_json(inputs), f)

            self._run_checked([self.node, os.path.join(self.js_dir, "generate_witness.js"),
                               os.path.join(self.js_dir, f"{self.name}.wasm"),
                               input_path, wtns_path])
            self._run_checked([self.snarkjs, "wtns", "export", "json", wtns_path, json_path])
            with open(json_path) as f:
                witness = [int(x) for x in json.load(f)]

            satisfied = None
            if check:
                satisfied = self._run([self.snarkjs, "wtns", "check", self.r1cs, wtns_path]).returncode == 0
        return Evaluation(witness, satisfied)

    def close(self):
        """Remove the build directory if load() created it."""
        if self._own_build_dir:
            shutil.rmtree(self.build_dir)
            self.build_dir = None
            self._own_build_dir = False
        self._loaded = False


# ─── Reference models ────────────────────────────────────────────────────────

class _Reference(Evaluator):
    """Witness layout: [1, outputs..., inputs...].

    `signals` maps each input name to the number of limb vectors it holds,
    in declaration order. A single vector is passed flat, more as a list.
    """

    signals: Dict[str, int] = {}

    def outputs(self, inputs: Inputs) -> List[int]:
        raise NotImplementedError

    def evaluate(self, inputs: Inputs, check: bool = False) -> Evaluation:
        out = self.outputs(inputs)
        tail = [int(v) for name in self.signals for v in _flatten(inputs[name])]
        witness = [1] + out + tail
        satisfied = self.check(witness, len(out)) if check else None
        return Evaluation(witness, satisfied)

    def check(self, witness: List[int], n_out: int) -> bool:
        """Recompute the outputs from the input part of the witness."""
        tail = witness[1 + n_out:]
        if witness[0] != 1 or len(tail) != LIMB_COUNT * sum(self.signals.values()):
            return False
        rebuilt = {}
        pos = 0
        for name, count in self.signals.items():
            vectors = [tail[pos + i * LIMB_COUNT:pos + (i + 1) * LIMB_COUNT] for i in range(count)]
            rebuilt[name] = vectors[0] if count == 1 else vectors
            pos += count * LIMB_COUNT
        try:
            return self.outputs(rebuilt) == witness[1:1 + n_out]
        except LimbCapacityError:
            # a limb out of range violates the circuit's range checks
            return False


class ReferencePrivToPub(_Reference):
    """privkey[6] -> pubkey[2][6]."""

    name = "priv_to_pub"
    signals = {"privkey": 1}

    def outputs(self, inputs: Inputs) -> List[int]:
        x, y = curve.public_key(from_limbs(inputs["privkey"]))
        return to_limbs(x) + to_limbs(y)


class ReferenceVerify(_Reference):
    """r[6], s[6], msghash[6], pubkey[2][6] -> result."""

    name = "verify"
    signals = {"r": 1, "s": 1, "msghash": 1, "pubkey": 2}

    def outputs(self, inputs: Inputs) -> List[int]:
        sig = Signature(from_limbs(inputs["r"]), from_limbs(inputs["s"]))
        pub = tuple(from_limbs(c) for c in inputs["pubkey"])
        if not curve.on_curve(pub):
            # no pubkey check in the circuit: an off-curve key just fails to verify
            return [0]
        return [int(curve.verify_digest(from_limbs(inputs["msghash"]), sig, pub))]
