"""Gate provers for the Pedersen sigma protocols.

A prover is created for exactly one gate, holds that gate's secret wire
values and blinding factors, and is consumed by generate_proof(). AddProver
and MulProver are separate types, so a prover carries either the addition
auxiliary state (r_B, B) or the multiplication auxiliary state (t1..t5,
C1..C3), never both.

Provers are context managers; leaving the block wipes every secret field:

    with new_mul_prover(a, b, c) as prover:
        if not verify_prover(prover):
            ...
        proof = generate_proof(prover)
"""

from dataclasses import dataclass
from typing import Iterable, Optional, Union

from primitives.errors import MalformedInputError
from primitives.field import SECP256K1_ORDER
from primitives.group import (
    Commitment,
    add_commitments,
    commit,
    commit_blind,
    commitment_to_hex,
    generator_f,
    scalar_mul_commitment,
)
from primitives.scalar import DEFAULT_ENCODER, ScalarEncoder, random_scalar, scalar_to_hex
from primitives.transcript import fiat_shamir_challenge
from protocol.proof import OPENING_INDICES, AddGateProof, GateProof, MulGateProof, OpeningKey
from protocol.verifier import MulResponses, PedersenWitness, verify_add, verify_mul

N = SECP256K1_ORDER


# --- Auxiliary State ---

@dataclass
class CommitAdd:
    """Addition auxiliary: B = Com(0, r_B)."""
    r_b: int
    b_commit: Commitment


@dataclass
class CommitMul:
    """Multiplication auxiliary: C1 = Com(t1, t3), C2 = Com(t2, t5), C3 = t1*W_R + t4*F."""
    t1: int
    t2: int
    t3: int
    t4: int
    t5: int
    c1_commit: Commitment
    c2_commit: Commitment
    c3_commit: Commitment

    def public_commits(self) -> tuple[Commitment, Commitment, Commitment]:
        return (self.c1_commit, self.c2_commit, self.c3_commit)


# --- Provers ---

def _normalize_opening_indices(indices: Optional[Iterable[int]]) -> Optional[tuple[int, ...]]:
    if indices is None:
        return None
    normalized = tuple(indices)
    for i in normalized:
        if isinstance(i, bool) or i not in OPENING_INDICES:
            raise MalformedInputError(f"opening key index must be 0 or 1, got {i!r}")
    if len(set(normalized)) != len(normalized):
        raise MalformedInputError(f"duplicate opening key indices {normalized}")
    return normalized or None


class _Prover:
    """Secret state shared by both gate kinds."""

    def __init__(
        self,
        value_l,
        value_r,
        value_o,
        opening_key_indices: Optional[Iterable[int]],
        encoder: ScalarEncoder,
    ):
        self.opening_key_indices = _normalize_opening_indices(opening_key_indices)

        self.value_l = encoder.encode(value_l)
        self.value_r = encoder.encode(value_r)
        self.value_o = encoder.encode(value_o)

        self.r_l = random_scalar()
        self.r_r = random_scalar()
        self.r_o = random_scalar()

        self.witness = PedersenWitness(
            w_l=commit(self.value_l, self.r_l),
            w_r=commit(self.value_r, self.r_r),
            w_o=commit(self.value_o, self.r_o),
        )
        self.wiped = False

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        self.wipe()
        return False

    def wipe(self) -> None:
        """Overwrite every secret scalar and drop the auxiliary state."""
        self.value_l = self.value_r = self.value_o = 0
        self.r_l = self.r_r = self.r_o = 0
        self.wiped = True

    def check_live(self) -> None:
        if self.wiped:
            raise RuntimeError("prover secrets have been wiped; create a new prover")

    def operand_blind(self, index: int) -> int:
        return (self.r_l, self.r_r)[index]


class AddProver(_Prover):
    """Prover for W_O = W_L + W_R."""

    def __init__(self, value_l, value_r, value_o, opening_key_indices=None, encoder=DEFAULT_ENCODER):
        super().__init__(value_l, value_r, value_o, opening_key_indices, encoder)
        r_b = random_scalar()
        self.commit_add: Optional[CommitAdd] = CommitAdd(r_b=r_b, b_commit=commit(0, r_b))

    def public_commits(self) -> list[Commitment]:
        return [*self.witness.as_tuple(), self.commit_add.b_commit]

    def wipe(self) -> None:
        if self.commit_add is not None:
            self.commit_add.r_b = 0
        self.commit_add = None
        super().wipe()


class MulProver(_Prover):
    """Prover for W_O = W_L * W_R."""

    def __init__(self, value_l, value_r, value_o, opening_key_indices=None, encoder=DEFAULT_ENCODER):
        super().__init__(value_l, value_r, value_o, opening_key_indices, encoder)
        t1, t2, t3, t4, t5 = (random_scalar() for _ in range(5))
        c3_commit = add_commitments([
            scalar_mul_commitment(self.witness.w_r, t1),
            scalar_mul_commitment(generator_f(), t4),
        ])
        self.commit_mul: Optional[CommitMul] = CommitMul(
            t1=t1, t2=t2, t3=t3, t4=t4, t5=t5,
            c1_commit=commit_blind(t1, t3),
            c2_commit=commit_blind(t2, t5),
            c3_commit=c3_commit,
        )

    def public_commits(self) -> list[Commitment]:
        return [*self.witness.as_tuple(), *self.commit_mul.public_commits()]

    def wipe(self) -> None:
        if self.commit_mul is not None:
            cm = self.commit_mul
            cm.t1 = cm.t2 = cm.t3 = cm.t4 = cm.t5 = 0
        self.commit_mul = None
        super().wipe()


Prover = Union[AddProver, MulProver]


def new_add_prover(value_l, value_r, value_o, opening_indices: Optional[Iterable[int]] = None) -> AddProver:
    """Commit to the three wires of an addition gate with fresh blinding factors."""
    return AddProver(value_l, value_r, value_o, opening_indices)


def new_mul_prover(value_l, value_r, value_o, opening_indices: Optional[Iterable[int]] = None) -> MulProver:
    """Commit to the three wires of a multiplication gate with fresh blinding factors."""
    return MulProver(value_l, value_r, value_o, opening_indices)


# --- Responses ---

def prove_add_gate(challenge: int, prover: AddProver) -> int:
    """z = x*(r_L + r_R - r_O) + r_B."""
    prover.check_live()
    return (challenge * (prover.r_l + prover.r_r - prover.r_o) + prover.commit_add.r_b) % N


def prove_mul_gate(challenge: int, prover: MulProver) -> MulResponses:
    """(e1, e2, z1, z2, z3) for the product-relation sigma protocol."""
    prover.check_live()
    cm = prover.commit_mul
    x = challenge
    e1 = (prover.value_l * x + cm.t1) % N
    e2 = (prover.value_r * x + cm.t2) % N
    z1 = (prover.r_l * x + cm.t3) % N
    z2 = (prover.r_r * x + cm.t5) % N
    z3 = ((prover.r_o - prover.value_l * prover.r_r) * x + cm.t4) % N
    return (e1, e2, z1, z2, z3)


# --- Proof Generation ---

def _opening_keys(prover: Prover) -> Optional[tuple[OpeningKey, ...]]:
    if prover.opening_key_indices is None:
        return None
    return tuple(
        OpeningKey(r=scalar_to_hex(prover.operand_blind(i)), index=i)
        for i in prover.opening_key_indices
    )


def generate_proof(prover: Prover) -> GateProof:
    """Non-interactive proof with the challenge hashed from the public commitments.

    The returned proof contains the blinding factors requested through
    opening_key_indices and must be handled as sensitive when it does.
    """
    prover.check_live()
    challenge = fiat_shamir_challenge(prover.public_commits())
    commits = prover.witness.to_hex()

    match prover:
        case AddProver():
            z = prove_add_gate(challenge, prover)
            return AddGateProof(
                z=scalar_to_hex(z),
                b_commit=commitment_to_hex(prover.commit_add.b_commit),
                commits=commits,
                opening_keys=_opening_keys(prover),
            )
        case MulProver():
            responses = prove_mul_gate(challenge, prover)
            return MulGateProof(
                responses=tuple(scalar_to_hex(s) for s in responses),
                c_commits=tuple(commitment_to_hex(c) for c in prover.commit_mul.public_commits()),
                commits=commits,
                opening_keys=_opening_keys(prover),
            )
        case _:
            raise TypeError(f"not a gate prover: {type(prover).__name__}")


def verify_prover(prover: Prover) -> bool:
    """Self-check the prover's witness against its gate relation with a random challenge."""
    prover.check_live()
    challenge = random_scalar()

    match prover:
        case AddProver():
            z = prove_add_gate(challenge, prover)
            return verify_add(challenge, prover.witness, prover.commit_add.b_commit, z)
        case MulProver():
            responses = prove_mul_gate(challenge, prover)
            return verify_mul(challenge, prover.witness, prover.commit_mul.public_commits(), responses)
        case _:
            raise TypeError(f"not a gate prover: {type(prover).__name__}")
