"""Mapping circuit-field elements into secp256k1 group scalars.

The flattened program's wires live in GF(p) while commitments take scalars
mod n (the group order). For the secp256k1 pair p > n, and field elements in
[n, p) are the negatives -(p - v); they are re-expressed as n - (p - v).
All three operands of a gate go through the same rule, so a relation that
holds between small signed values in GF(p) also holds mod n.
"""

import secrets

from primitives.errors import MalformedInputError
from primitives.field import CIRCUIT_FIELD_PRIME, SECP256K1_ORDER

SCALAR_SIZE = 32


class ScalarEncoder:
    """Re-bases circuit-field values into the scalar field of the commitment group.

    Attributes:
        field_modulus: Modulus P of the circuit field
        group_order: Order N of the commitment group
        negative_threshold: Field values at or above this are treated as negatives
    """

    def __init__(self, field_modulus: int = CIRCUIT_FIELD_PRIME, group_order: int = SECP256K1_ORDER):
        self.field_modulus = field_modulus
        self.group_order = group_order
        if field_modulus >= group_order:
            # Residues in [N, P) cannot be scalars; they are the field's negatives.
            self.negative_threshold = group_order
        else:
            # Every residue fits below N, so the upper half of GF(P) is read as negative.
            self.negative_threshold = (field_modulus + 1) // 2

    def wrap(self, v: int) -> int:
        if v >= self.negative_threshold:
            if v >= self.field_modulus:
                raise MalformedInputError(f"value {v} is not a canonical field element")
            return v - self.field_modulus + self.group_order
        if v < 0:
            if v <= -self.group_order:
                raise MalformedInputError(f"value {v} is out of the signed scalar range")
            return v + self.group_order
        return v

    def encode(self, value) -> int:
        """Map an int or circuit-field element to a scalar in [0, N)."""
        v = int(value)
        if v == 0:
            return 0
        return self.wrap(v)


DEFAULT_ENCODER = ScalarEncoder()


def encode_scalar(value) -> int:
    return DEFAULT_ENCODER.encode(value)


# --- Randomness ---

def random_scalar() -> int:
    """Fresh uniform nonzero scalar from the OS CSPRNG."""
    return secrets.randbelow(SECP256K1_ORDER - 1) + 1


# --- Fixed-Width Encoding ---

def scalar_to_bytes(scalar: int) -> bytes:
    if not 0 <= scalar < SECP256K1_ORDER:
        raise MalformedInputError("scalar out of range [0, n)")
    return scalar.to_bytes(SCALAR_SIZE, "big")


def scalar_from_bytes(data: bytes) -> int:
    if len(data) != SCALAR_SIZE:
        raise MalformedInputError(f"scalar must be {SCALAR_SIZE} bytes, got {len(data)}")
    scalar = int.from_bytes(data, "big")
    if scalar >= SECP256K1_ORDER:
        raise MalformedInputError("scalar is not reduced modulo the group order")
    return scalar


def scalar_to_hex(scalar: int) -> str:
    return scalar_to_bytes(scalar).hex()


def scalar_from_hex(data: str) -> int:
    if not isinstance(data, str):
        raise MalformedInputError(f"scalar must be a hex string, got {type(data).__name__}")
    try:
        raw = bytes.fromhex(data.removeprefix("0x"))
    except ValueError as e:
        raise MalformedInputError(f"invalid scalar hex: {e}") from e
    return scalar_from_bytes(raw)
