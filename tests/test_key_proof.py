"""End-to-end tests for proving and verifying whole flattened programs."""

from dataclasses import replace

import pytest

from circuit.flat import FlatParameter, FlatProgram, FlatVariable
from circuit.witness import Witness
from primitives.errors import GateKindMismatchError, MalformedInputError, SelfCheckError
from primitives.group import public_key_for, public_key_to_hex
from protocol.gates import gate_tasks
from protocol.key_proof import (
    KeyProofConfig,
    _job,
    _prove_gate,
    collect_opening_public_keys,
    generate_key_proof,
    public_inputs,
    verify_key_proof,
    verify_proofs,
)
from protocol.proof import AddGateProof, MulGateProof, has_opening_key
from tests.conftest import SECRET, SECRET_LOW


class TestGenerateKeyProof:
    """Tests for circuit-level proof generation."""

    def test_square_program(self, square_program, square_witness) -> None:
        """(x + 3) * x with x = 5 proves and verifies."""
        proofs = generate_key_proof(square_program, square_witness)
        assert [type(p) for p in proofs] == [AddGateProof, MulGateProof, MulGateProof]
        assert [has_opening_key(p) for p in proofs] == [True, True, False]
        assert verify_proofs(square_program, proofs)

    def test_parallel_matches_inline_order(self, square_program, square_witness) -> None:
        """A worker pool returns proofs in statement order."""
        inline = generate_key_proof(square_program, square_witness, KeyProofConfig(max_workers=1))
        pooled = generate_key_proof(square_program, square_witness, KeyProofConfig(max_workers=2))
        assert [type(p) for p in pooled] == [type(p) for p in inline]
        assert [has_opening_key(p) for p in pooled] == [has_opening_key(p) for p in inline]
        assert verify_proofs(square_program, pooled, KeyProofConfig(max_workers=2))

    def test_bad_witness_fails_self_check(self, square_program, square_witness) -> None:
        """A witness that breaks a gate aborts proving."""
        square_witness.set(FlatVariable(3), 41)
        with pytest.raises(SelfCheckError):
            generate_key_proof(square_program, square_witness)

    def test_bad_witness_without_self_check(self, square_program, square_witness) -> None:
        """A bad gate proven past the self-check does not verify."""
        square_witness.set(FlatVariable(3), 41)
        tasks = gate_tasks(square_program, square_witness)
        proofs = [_prove_gate(_job(i, task, self_check=False)) for i, task in enumerate(tasks)]
        assert not verify_proofs(square_program, proofs)

    def test_public_inputs(self) -> None:
        """Public arguments of main are recorded as decimal strings."""
        program = FlatProgram(arguments=[
            FlatParameter(FlatVariable(1), False),
            FlatParameter(FlatVariable(2), True),
            FlatParameter(FlatVariable(3), False),
        ])
        witness = Witness({FlatVariable(1): 11, FlatVariable(2): 22, FlatVariable(3): 33})
        assert public_inputs(program, witness) == ["11", "33"]


class TestVerifyProofs:
    """Tests for checking a proof list against the public program."""

    @pytest.fixture
    def proofs(self, square_program, square_witness):
        return generate_key_proof(square_program, square_witness)

    def test_mutated_output_commitment(self, square_program, proofs) -> None:
        """Replacing W_O of a gate makes verification fail."""
        mutated = replace(proofs[1], commits=(proofs[1].commits[0], proofs[1].commits[1], proofs[0].commits[2]))
        assert not verify_proofs(square_program, [proofs[0], mutated, proofs[2]])

    def test_length_mismatch(self, square_program, proofs) -> None:
        """Too few proofs is malformed input."""
        with pytest.raises(MalformedInputError):
            verify_proofs(square_program, proofs[:2])

    def test_kind_mismatch(self, square_program, proofs) -> None:
        """A mul proof where an add gate is expected is rejected."""
        with pytest.raises(GateKindMismatchError):
            verify_proofs(square_program, [proofs[1], proofs[0], proofs[2]])

    def test_kind_mismatch_is_malformed_input(self) -> None:
        """Kind mismatches are a kind of malformed input."""
        assert issubclass(GateKindMismatchError, MalformedInputError)


class TestVerifyKeyProof:
    """Tests for reconstructing the public key from a circuit proof."""

    def test_matching_key(self, half_key_program, half_key_witness) -> None:
        """The opened halves reconstruct secret*H."""
        proofs = generate_key_proof(half_key_program, half_key_witness)
        expected = public_key_to_hex(public_key_for(SECRET))
        result = verify_key_proof(half_key_program, proofs, expected)
        assert result.proofs_valid
        assert result.public_key_matches
        assert result.valid
        assert result.gates == 3

    def test_wrong_key(self, half_key_program, half_key_witness) -> None:
        """A different secret's key does not match."""
        proofs = generate_key_proof(half_key_program, half_key_witness)
        expected = public_key_to_hex(public_key_for(SECRET + 1))
        result = verify_key_proof(half_key_program, proofs, expected)
        assert result.proofs_valid
        assert not result.public_key_matches
        assert not result.valid

    def test_collected_keys_in_gate_order(self, half_key_program, half_key_witness) -> None:
        """Opened keys come out high half first."""
        proofs = generate_key_proof(half_key_program, half_key_witness)
        keys = collect_opening_public_keys(half_key_program, proofs)
        assert len(keys) == 2
        assert keys[0] == public_key_to_hex(public_key_for(int(half_key_witness.get(FlatVariable(1)))))

    def test_repeated_half_does_not_match(self, square_program, square_witness) -> None:
        """Opening the same input twice does not yield that input's key."""
        proofs = generate_key_proof(square_program, square_witness)
        expected = public_key_to_hex(public_key_for(5))
        result = verify_key_proof(square_program, proofs, expected)
        assert result.proofs_valid
        assert not result.public_key_matches

    def test_invalid_proof_reported(self, half_key_program, half_key_witness) -> None:
        """Failing gates are listed by index."""
        proofs = generate_key_proof(half_key_program, half_key_witness)
        bad = replace(proofs[2], z=proofs[0].responses[0])
        result = verify_key_proof(
            half_key_program, [proofs[0], proofs[1], bad], public_key_to_hex(public_key_for(SECRET))
        )
        assert not result.proofs_valid
        assert result.failed_gates == [2]


class TestOpenedZero:
    """Tests for private inputs whose value is zero."""

    def test_zero_private_input(self, square_program) -> None:
        """x = 0 in (x + 3) * x verifies; the key check is a separate False."""
        witness = Witness({
            FlatVariable.one(): 1,
            FlatVariable(1): 0,
            FlatVariable(2): 3,
            FlatVariable(3): 0,
            FlatVariable.public(0): 0,
        })
        proofs = generate_key_proof(square_program, witness)
        assert verify_proofs(square_program, proofs)

        assert collect_opening_public_keys(square_program, proofs) == [None, None]
        result = verify_key_proof(square_program, proofs, public_key_to_hex(public_key_for(5)))
        assert result.proofs_valid
        assert not result.public_key_matches

    def test_zero_high_half(self, half_key_program) -> None:
        """A secret below 2^128 has a zero high half and still reconstructs."""
        witness = Witness({
            FlatVariable.one(): 1,
            FlatVariable(1): 0,
            FlatVariable(2): SECRET_LOW,
            FlatVariable(3): 0,
            FlatVariable(4): SECRET_LOW,
            FlatVariable.public(0): SECRET_LOW,
        })
        proofs = generate_key_proof(half_key_program, witness)
        result = verify_key_proof(half_key_program, proofs, public_key_to_hex(public_key_for(SECRET_LOW)))
        assert result.proofs_valid
        assert result.public_key_matches
        assert result.valid
