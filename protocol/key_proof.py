"""Circuit-level proving and verification of a flattened program.

generate_key_proof() turns every gate of main into a GateProof; the
verifier side checks the proofs against the gate kinds of the public
program, then recombines the opened half keys into the expected public key.
"""

from concurrent.futures import ProcessPoolExecutor
from dataclasses import dataclass, field
from typing import Optional

from circuit.flat import FlatProgram
from circuit.witness import Witness
from primitives.errors import GateKindMismatchError, MalformedInputError, SelfCheckError
from protocol.gates import GateKind, GateTask, expected_gate_kinds, gate_tasks
from protocol.proof import GateProof, gate_kind_name, is_add_gate
from protocol.prover import generate_proof, new_add_prover, new_mul_prover, verify_prover
from protocol.verifier import opening_public_keys, verify_proof, verify_public_key


@dataclass
class KeyProofConfig:
    """Circuit driver configuration.

    Attributes:
        max_workers: Process pool size; 1 or less proves gates inline
    """
    max_workers: int = 1


@dataclass
class KeyProofResult:
    proofs_valid: bool
    public_key_matches: bool
    gates: int
    failed_gates: list[int] = field(default_factory=list)

    @property
    def valid(self) -> bool:
        return self.proofs_valid and self.public_key_matches


# Worker payload: (index, kind, value_l, value_r, value_o, opening_indices, label, self_check)
_Job = tuple[int, str, int, int, int, Optional[tuple[int, ...]], str, bool]


def _job(index: int, task: GateTask, self_check: bool = True) -> _Job:
    # Plain ints cross the process boundary, not field elements.
    return (
        index, task.kind.value, int(task.value_l), int(task.value_r), int(task.value_o),
        task.opening_indices, task.label, self_check,
    )


def _prove_gate(job: _Job) -> GateProof:
    index, kind, value_l, value_r, value_o, opening_indices, label, self_check = job
    new_prover = new_add_prover if kind == GateKind.ADD.value else new_mul_prover

    with new_prover(value_l, value_r, value_o, opening_indices) as prover:
        if self_check and not verify_prover(prover):
            raise SelfCheckError(f"gate {index} ({label}): witness does not satisfy the {kind} relation")
        return generate_proof(prover)


# --- Prover Side ---

def generate_key_proof(
    program: FlatProgram,
    witness: Witness,
    config: Optional[KeyProofConfig] = None,
) -> list[GateProof]:
    """Prove every gate of program, in statement order."""
    config = config or KeyProofConfig()
    tasks = gate_tasks(program, witness)
    jobs = [_job(i, task) for i, task in enumerate(tasks)]
    print(f"Generating proofs for {len(jobs)} gates")

    if config.max_workers <= 1 or len(jobs) <= 1:
        return [_prove_gate(job) for job in jobs]

    with ProcessPoolExecutor(max_workers=config.max_workers) as executor:
        return list(executor.map(_prove_gate, jobs))


def public_inputs(program: FlatProgram, witness: Witness) -> list[str]:
    """Decimal witness values of main's public arguments."""
    return [str(int(witness.get(v))) for v in program.public_arguments()]


# --- Verifier Side ---

def check_gate_kinds(program: FlatProgram, proofs: list[GateProof]) -> None:
    expected = expected_gate_kinds(program)
    if len(proofs) != len(expected):
        raise MalformedInputError(
            f"program has {len(expected)} gates but {len(proofs)} proofs were supplied"
        )
    for i, (kind, proof) in enumerate(zip(expected, proofs)):
        actual = GateKind.ADD if is_add_gate(proof) else GateKind.MUL
        if actual != kind:
            raise GateKindMismatchError(
                f"gate {i}: expected a {kind.value} gate proof, got {gate_kind_name(proof)}"
            )


def failed_gates(proofs: list[GateProof], config: Optional[KeyProofConfig] = None) -> list[int]:
    """Indices of proofs that do not verify; every proof is checked."""
    config = config or KeyProofConfig()
    if config.max_workers <= 1 or len(proofs) <= 1:
        results = [verify_proof(p) for p in proofs]
    else:
        with ProcessPoolExecutor(max_workers=config.max_workers) as executor:
            results = list(executor.map(verify_proof, proofs))
    return [i for i, ok in enumerate(results) if not ok]


def verify_proofs(
    program: FlatProgram,
    proofs: list[GateProof],
    config: Optional[KeyProofConfig] = None,
) -> bool:
    check_gate_kinds(program, proofs)
    failed = failed_gates(proofs, config)
    for i in failed:
        print(f"ERROR: proof for gate {i} does not verify")
    return not failed


def _opened_keys(proofs: list[GateProof]) -> list[Optional[str]]:
    keys = []
    for proof in proofs:
        keys.extend(opening_public_keys(proof))
    return keys


def collect_opening_public_keys(program: FlatProgram, proofs: list[GateProof]) -> list[Optional[str]]:
    """Public keys opened by the proofs, in gate order; None for an opened zero."""
    check_gate_kinds(program, proofs)
    return _opened_keys(proofs)


def verify_key_proof(
    program: FlatProgram,
    proofs: list[GateProof],
    expected_pubkey_hex: str,
    config: Optional[KeyProofConfig] = None,
) -> KeyProofResult:
    """Verify all gate proofs and compare the recombined opened key to expected_pubkey_hex."""
    check_gate_kinds(program, proofs)
    failed = failed_gates(proofs, config)
    for i in failed:
        print(f"ERROR: proof for gate {i} does not verify")

    half_keys = _opened_keys(proofs)
    print(f"total gates: {len(proofs)}, opened keys: {len(half_keys)}")
    matches = verify_public_key(expected_pubkey_hex, half_keys)

    return KeyProofResult(
        proofs_valid=not failed,
        public_key_matches=matches,
        gates=len(proofs),
        failed_gates=failed,
    )
