"""Gate proof verification.

The verifier only ever sees public commitments and responses. For each gate
it re-derives the Fiat-Shamir challenge x from the commitments in the proof
and checks the sigma-protocol equations:

    add:  Com(0, z)        == x*(W_L + W_R - W_O) + B
    mul:  Com(e1, z1)      == x*W_L + C1
          Com(e2, z2)      == x*W_R + C2
          e1*W_R + z3*F    == x*W_O + C3

where Com(v, r) = v*H + r*G and F = Com(0, 1).

Opening keys reveal the blinding factor r of one wire commitment, so
W - r*F = v*H is a public key for the committed value v. Two such half keys
(high and low 128 bits of a secret) recombine into the full public key.
"""

from dataclasses import dataclass
from typing import Optional

from primitives.errors import MalformedInputError
from primitives.group import (
    IDENTITY,
    Commitment,
    Point,
    add_commitments,
    commit,
    commit_blind,
    commitment_from_hex,
    commitment_to_hex,
    generator_f,
    is_identity,
    public_key_from_hex,
    public_key_to_hex,
    scalar_mul_commitment,
    to_public_key,
)
from primitives.scalar import scalar_from_hex
from primitives.transcript import fiat_shamir_challenge
from protocol.proof import AddGateProof, GateProof, MulGateProof

# --- Constants ---

HALF_KEY_BITS = 128
N_HALF_KEYS = 2

# --- Type Aliases ---

MulResponses = tuple[int, int, int, int, int]  # (e1, e2, z1, z2, z3)
MulCommits = tuple[Commitment, Commitment, Commitment]  # (C1, C2, C3)


@dataclass(frozen=True)
class PedersenWitness:
    """Commitments W_L, W_R, W_O to a gate's left, right and output wires."""
    w_l: Commitment
    w_r: Commitment
    w_o: Commitment

    def as_tuple(self) -> tuple[Commitment, Commitment, Commitment]:
        return (self.w_l, self.w_r, self.w_o)

    def to_hex(self) -> tuple[str, str, str]:
        return tuple(commitment_to_hex(c) for c in self.as_tuple())

    @classmethod
    def from_hex(cls, commits) -> "PedersenWitness":
        w_l, w_r, w_o = (commitment_from_hex(c) for c in commits)
        return cls(w_l, w_r, w_o)


# --- Sigma Protocol Checks ---

def verify_add(challenge: int, witness: PedersenWitness, b_commit: Commitment, z: int) -> bool:
    """Check Com(0, z) == x*(W_L + W_R - W_O) + B."""
    w_sum = add_commitments([witness.w_l, witness.w_r], [witness.w_o])
    rhs = add_commitments([scalar_mul_commitment(w_sum, challenge), b_commit])
    lhs = commit(0, z)
    if lhs != rhs:
        print("ERROR: add gate equation Com(0,z) = x(W_L+W_R-W_O)+B does not hold")
        return False
    return True


def verify_mul(challenge: int, witness: PedersenWitness, c_commits: MulCommits, responses: MulResponses) -> bool:
    """Check the three product-relation equations; all are evaluated."""
    e1, e2, z1, z2, z3 = responses
    c1, c2, c3 = c_commits

    def rhs(w: Commitment, c: Commitment) -> Commitment:
        return add_commitments([scalar_mul_commitment(w, challenge), c])

    left_ok = commit_blind(e1, z1) == rhs(witness.w_l, c1)
    right_ok = commit_blind(e2, z2) == rhs(witness.w_r, c2)

    product_lhs = add_commitments([
        scalar_mul_commitment(witness.w_r, e1),
        scalar_mul_commitment(generator_f(), z3),
    ])
    product_ok = product_lhs == rhs(witness.w_o, c3)

    if not left_ok:
        print("ERROR: mul gate equation Com(e1,z1) = xW_L+C1 does not hold")
    if not right_ok:
        print("ERROR: mul gate equation Com(e2,z2) = xW_R+C2 does not hold")
    if not product_ok:
        print("ERROR: mul gate equation e1W_R+z3F = xW_O+C3 does not hold")
    return left_ok and right_ok and product_ok


# --- Serialized Proof Verification ---

def verify_add_proof(proof: AddGateProof) -> bool:
    witness = PedersenWitness.from_hex(proof.commits)
    b_commit = commitment_from_hex(proof.b_commit)
    challenge = fiat_shamir_challenge([*witness.as_tuple(), b_commit])
    return verify_add(challenge, witness, b_commit, scalar_from_hex(proof.z))


def verify_mul_proof(proof: MulGateProof) -> bool:
    witness = PedersenWitness.from_hex(proof.commits)
    c_commits = tuple(commitment_from_hex(c) for c in proof.c_commits)
    challenge = fiat_shamir_challenge([*witness.as_tuple(), *c_commits])
    responses = tuple(scalar_from_hex(s) for s in proof.responses)
    return verify_mul(challenge, witness, c_commits, responses)


def verify_proof(proof: GateProof) -> bool:
    match proof:
        case AddGateProof():
            return verify_add_proof(proof)
        case MulGateProof():
            return verify_mul_proof(proof)
        case _:
            raise MalformedInputError(f"not a gate proof: {type(proof).__name__}")


# --- Opening Keys ---

def opening_public_keys(proof: GateProof) -> list[Optional[str]]:
    """Public keys W[index] - r*F for each opening key, SEC1-compressed hex.

    An opened value of 0 leaves the point at infinity, which has no SEC1
    encoding; it is returned as None and still counts as a half key.
    """
    if not proof.opening_keys:
        return []
    f = generator_f()
    keys = []
    for opening in proof.opening_keys:
        w = commitment_from_hex(proof.commits[opening.index])
        r = scalar_from_hex(opening.r)
        opened = add_commitments([w], [scalar_mul_commitment(f, r)])
        keys.append(None if is_identity(opened) else public_key_to_hex(to_public_key(opened)))
    return keys


def combine_half_keys(high: Point, low: Point) -> Point:
    """high*2^128 + low; either half may be the identity."""
    return add_commitments([scalar_mul_commitment(high, 1 << HALF_KEY_BITS), low])


def _half_key_point(key: Optional[str]) -> Point:
    return IDENTITY if key is None else public_key_from_hex(key)


def verify_public_key(expected_pubkey_hex: str, revealed_half_keys: list[Optional[str]]) -> bool:
    """Check that two opened half keys recombine into the expected public key."""
    expected = public_key_from_hex(expected_pubkey_hex)

    if len(revealed_half_keys) != N_HALF_KEYS:
        print(f"ERROR: expected {N_HALF_KEYS} opened half keys, got {len(revealed_half_keys)}")
        return False

    high, low = (_half_key_point(k) for k in revealed_half_keys)
    full = combine_half_keys(high, low)
    if is_identity(full):
        print("ERROR: opened half keys combine to the point at infinity")
        return False

    if full != expected:
        print("ERROR: reconstructed public key does not match the expected key")
        return False
    return True
