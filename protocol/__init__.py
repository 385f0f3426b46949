"""Protocol - Pedersen gate proofs and circuit-level key proofs."""

from protocol.proof import (
    AddGateProof,
    GateProof,
    KeyProof,
    MulGateProof,
    OpeningKey,
    has_opening_key,
    is_add_gate,
    is_mul_gate,
    load_key_proof,
    load_proofs,
    proof_from_json,
    proof_to_json,
    save_key_proof,
    save_proofs,
)

from protocol.prover import (
    AddProver,
    MulProver,
    generate_proof,
    new_add_prover,
    new_mul_prover,
    prove_add_gate,
    prove_mul_gate,
    verify_prover,
)

from protocol.verifier import (
    PedersenWitness,
    opening_public_keys,
    verify_add,
    verify_mul,
    verify_proof,
    verify_public_key,
)

from protocol.gates import GateKind, GateTask, expected_gate_kinds, gate_tasks

from protocol.key_proof import (
    KeyProofConfig,
    KeyProofResult,
    collect_opening_public_keys,
    generate_key_proof,
    public_inputs,
    verify_key_proof,
    verify_proofs,
)

__all__ = [
    # Proof data
    "OpeningKey",
    "AddGateProof",
    "MulGateProof",
    "GateProof",
    "KeyProof",
    "is_add_gate",
    "is_mul_gate",
    "has_opening_key",
    "proof_to_json",
    "proof_from_json",
    "save_proofs",
    "load_proofs",
    "save_key_proof",
    "load_key_proof",
    # Prover
    "AddProver",
    "MulProver",
    "new_add_prover",
    "new_mul_prover",
    "prove_add_gate",
    "prove_mul_gate",
    "generate_proof",
    "verify_prover",
    # Verifier
    "PedersenWitness",
    "verify_add",
    "verify_mul",
    "verify_proof",
    "opening_public_keys",
    "verify_public_key",
    # Gates
    "GateKind",
    "GateTask",
    "gate_tasks",
    "expected_gate_kinds",
    # Circuit drivers
    "KeyProofConfig",
    "KeyProofResult",
    "generate_key_proof",
    "verify_proofs",
    "collect_opening_public_keys",
    "verify_key_proof",
    "public_inputs",
]
