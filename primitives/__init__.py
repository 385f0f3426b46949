"""Primitives - Field, group and hashing building blocks for gate proofs."""

from primitives.errors import (
    GateKindMismatchError,
    MalformedInputError,
    SelfCheckError,
    UnsupportedStatementError,
)
from primitives.field import (
    CIRCUIT_FIELD_PRIME,
    FF,
    SECP256K1_FIELD_PRIME,
    SECP256K1_ORDER,
    to_field,
)
from primitives.group import (
    Commitment,
    Point,
    add_commitments,
    commit,
    commit_blind,
    commitment_from_hex,
    commitment_to_hex,
    generator_f,
    generator_h,
    public_key_for,
    public_key_from_hex,
    public_key_to_hex,
    scalar_mul_commitment,
    to_public_key,
)
from primitives.scalar import (
    ScalarEncoder,
    encode_scalar,
    random_scalar,
    scalar_from_hex,
    scalar_to_hex,
)
from primitives.transcript import Transcript, fiat_shamir_challenge

__all__ = [
    # Errors
    "MalformedInputError",
    "UnsupportedStatementError",
    "GateKindMismatchError",
    "SelfCheckError",
    # Field
    "FF",
    "CIRCUIT_FIELD_PRIME",
    "SECP256K1_FIELD_PRIME",
    "SECP256K1_ORDER",
    "to_field",
    # Group
    "Point",
    "Commitment",
    "commit",
    "commit_blind",
    "add_commitments",
    "scalar_mul_commitment",
    "to_public_key",
    "public_key_for",
    "generator_f",
    "generator_h",
    "commitment_to_hex",
    "commitment_from_hex",
    "public_key_to_hex",
    "public_key_from_hex",
    # Scalars
    "ScalarEncoder",
    "encode_scalar",
    "random_scalar",
    "scalar_to_hex",
    "scalar_from_hex",
    # Transcript
    "Transcript",
    "fiat_shamir_challenge",
]
