"""Tests for the add/mul gate provers and verifiers."""

from dataclasses import replace

import pytest

from primitives.errors import MalformedInputError
from primitives.field import SECP256K1_ORDER, to_field
from primitives.scalar import scalar_from_hex, scalar_to_hex
from protocol.proof import AddGateProof, MulGateProof
from protocol.prover import (
    AddProver,
    MulProver,
    generate_proof,
    new_add_prover,
    new_mul_prover,
    prove_add_gate,
    verify_prover,
)
from protocol.verifier import verify_add, verify_proof


class TestAddGate:
    """Tests for W_O = W_L + W_R."""

    @pytest.mark.parametrize("a,b,c", [(2, 3, 5), (0, 0, 0), (-3, 5, 2), (-4, -6, -10)])
    def test_valid_witness(self, a: int, b: int, c: int) -> None:
        """A satisfied addition self-checks and its proof verifies."""
        with new_add_prover(to_field(a), to_field(b), to_field(c)) as prover:
            assert isinstance(prover, AddProver)
            assert verify_prover(prover)
            proof = generate_proof(prover)
        assert isinstance(proof, AddGateProof)
        assert verify_proof(proof)

    def test_invalid_witness(self) -> None:
        """2 + 3 != 6 fails both the self-check and verification."""
        with new_add_prover(2, 3, 6) as prover:
            assert not verify_prover(prover)
            proof = generate_proof(prover)
        assert not verify_proof(proof)

    def test_wrong_challenge_fails(self) -> None:
        """A response for one challenge does not satisfy another."""
        with new_add_prover(2, 3, 5) as prover:
            z = prove_add_gate(11, prover)
            assert verify_add(11, prover.witness, prover.commit_add.b_commit, z)
            assert not verify_add(12, prover.witness, prover.commit_add.b_commit, z)

    def test_tampered_response(self) -> None:
        """Changing z breaks the proof."""
        with new_add_prover(2, 3, 5) as prover:
            proof = generate_proof(prover)
        z = (scalar_from_hex(proof.z) + 1) % SECP256K1_ORDER
        assert not verify_proof(replace(proof, z=scalar_to_hex(z)))


class TestMulGate:
    """Tests for W_O = W_L * W_R."""

    @pytest.mark.parametrize("a,b,c", [(4, 5, 20), (1, 40, 40), (0, 9, 0), (-3, 4, -12)])
    def test_valid_witness(self, a: int, b: int, c: int) -> None:
        """A satisfied product self-checks and its proof verifies."""
        with new_mul_prover(to_field(a), to_field(b), to_field(c)) as prover:
            assert isinstance(prover, MulProver)
            assert verify_prover(prover)
            proof = generate_proof(prover)
        assert isinstance(proof, MulGateProof)
        assert verify_proof(proof)

    def test_negative_one_squared(self) -> None:
        """(-1) * (-1) = 1 with field-encoded negatives."""
        minus_one = to_field(-1)
        with new_mul_prover(minus_one, minus_one, to_field(1)) as prover:
            assert verify_prover(prover)
            proof = generate_proof(prover)
        assert verify_proof(proof)

    def test_invalid_witness(self) -> None:
        """4 * 5 != 21 fails both the self-check and verification."""
        with new_mul_prover(4, 5, 21) as prover:
            assert not verify_prover(prover)
            proof = generate_proof(prover)
        assert not verify_proof(proof)

    @pytest.mark.parametrize("position", range(5))
    def test_tampered_response(self, position: int) -> None:
        """Changing any of (e1, e2, z1, z2, z3) breaks the proof."""
        with new_mul_prover(6, 7, 42) as prover:
            proof = generate_proof(prover)
        responses = list(proof.responses)
        responses[position] = scalar_to_hex((scalar_from_hex(responses[position]) + 1) % SECP256K1_ORDER)
        assert not verify_proof(replace(proof, responses=tuple(responses)))

    def test_swapped_commitment(self) -> None:
        """Replacing W_O with another valid commitment breaks the proof."""
        with new_mul_prover(6, 7, 42) as prover:
            proof = generate_proof(prover)
        with new_mul_prover(6, 7, 42) as other:
            other_proof = generate_proof(other)
        commits = (proof.commits[0], proof.commits[1], other_proof.commits[2])
        assert not verify_proof(replace(proof, commits=commits))


class TestHiding:
    """Tests that commitments reveal nothing about repeated values."""

    def test_fresh_blinding_per_prover(self) -> None:
        """Two proofs of the same gate share no commitment or response."""
        with new_mul_prover(3, 3, 9) as p1:
            first = generate_proof(p1)
        with new_mul_prover(3, 3, 9) as p2:
            second = generate_proof(p2)
        assert set(first.commits).isdisjoint(second.commits)
        assert first.commits[0] != first.commits[1]
        assert set(first.c_commits).isdisjoint(second.c_commits)
        assert set(first.responses).isdisjoint(second.responses)

    def test_fresh_add_response(self) -> None:
        """Two addition proofs of the same gate have different z and B."""
        with new_add_prover(2, 3, 5) as p1:
            first = generate_proof(p1)
        with new_add_prover(2, 3, 5) as p2:
            second = generate_proof(p2)
        assert first.z != second.z
        assert first.b_commit != second.b_commit

    def test_no_opening_keys_by_default(self) -> None:
        """Blinding factors are only revealed when asked for."""
        with new_add_prover(1, 2, 3) as prover:
            assert generate_proof(prover).opening_keys is None


class TestProverLifecycle:
    """Tests for wiping prover secrets."""

    def test_wipe_on_exit(self) -> None:
        """Leaving the with block zeroes secrets and drops auxiliary state."""
        with new_mul_prover(4, 5, 20, [0]) as prover:
            pass
        assert prover.wiped
        assert prover.value_l == prover.r_l == prover.r_r == prover.r_o == 0
        assert prover.commit_mul is None

    def test_wiped_prover_unusable(self) -> None:
        """A wiped prover can neither prove nor self-check."""
        prover = new_add_prover(1, 1, 2)
        prover.wipe()
        assert prover.commit_add is None
        with pytest.raises(RuntimeError):
            generate_proof(prover)
        with pytest.raises(RuntimeError):
            verify_prover(prover)

    def test_wipe_on_exception(self) -> None:
        """Secrets are wiped even when the block raises."""
        with pytest.raises(KeyError):
            with new_add_prover(1, 1, 2) as prover:
                raise KeyError("boom")
        assert prover.wiped

    @pytest.mark.parametrize("indices", [[2], [-1], [0, 0], [True]])
    def test_bad_opening_indices(self, indices: list) -> None:
        """Opening indices must be distinct members of {0, 1}."""
        with pytest.raises(MalformedInputError):
            new_mul_prover(1, 2, 2, indices)

    def test_empty_opening_indices(self) -> None:
        """An empty index list means no opening keys."""
        with new_mul_prover(1, 2, 2, []) as prover:
            assert prover.opening_key_indices is None
