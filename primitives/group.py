"""Pedersen commitments over the secp256k1 group.

Commit(v, r) = v*H + r*G, where G is the secp256k1 base point and H is the
nothing-up-my-sleeve value generator whose x coordinate is the SHA-256 of
the uncompressed encoding of G (the secp256k1-zkp / BIP-341 NUMS point).

Group arithmetic is delegated to py_ecc. Points are affine (x, y) integer
tuples; the identity is (0, 0), matching py_ecc's convention.
"""

import hashlib
from functools import lru_cache
from typing import Iterable, Tuple

from py_ecc.secp256k1.secp256k1 import G, add, multiply

from primitives.errors import MalformedInputError
from primitives.field import SECP256K1_FIELD_PRIME, SECP256K1_ORDER

# --- Type Aliases ---

Point = Tuple[int, int]
Commitment = Point

# --- Constants ---

IDENTITY: Point = (0, 0)
COORD_SIZE = 32
COMMITMENT_SIZE = 33

# secp256k1-zkp commitment prefixes: 0x08 if y is a quadratic residue, else 0x09
COMMIT_PREFIX_QUAD = 0x08
COMMIT_PREFIX_NONQUAD = 0x09

_P = SECP256K1_FIELD_PRIME
_CURVE_B = 7


# --- Curve Helpers ---

def is_identity(point: Point) -> bool:
    return point[0] == 0 and point[1] == 0


def is_on_curve(point: Point) -> bool:
    x, y = point
    if not (0 <= x < _P and 0 <= y < _P):
        return False
    return (y * y - x * x * x - _CURVE_B) % _P == 0


def _is_quad(y: int) -> bool:
    """Euler's criterion: y is a nonzero square mod p."""
    return pow(y, (_P - 1) // 2, _P) == 1


def _lift_x(x: int) -> int | None:
    """Return a square root y of x^3 + 7, or None if x is not on the curve."""
    if not 0 <= x < _P:
        return None
    rhs = (pow(x, 3, _P) + _CURVE_B) % _P
    y = pow(rhs, (_P + 1) // 4, _P)
    if y * y % _P != rhs:
        return None
    return y


def negate(point: Point) -> Point:
    if is_identity(point):
        return point
    return (point[0], (-point[1]) % _P)


def _encode_uncompressed(point: Point) -> bytes:
    return b"\x04" + point[0].to_bytes(COORD_SIZE, "big") + point[1].to_bytes(COORD_SIZE, "big")


# --- Generators ---

@lru_cache(maxsize=None)
def generator_h() -> Point:
    """Value generator H, derived by hashing G onto the curve (even y)."""
    x = int.from_bytes(hashlib.sha256(_encode_uncompressed(G)).digest(), "big")
    y = _lift_x(x)
    while y is None:
        x = int.from_bytes(hashlib.sha256(x.to_bytes(COORD_SIZE, "big")).digest(), "big")
        y = _lift_x(x)
    if y & 1:
        y = _P - y
    return (x, y)


@lru_cache(maxsize=None)
def generator_f() -> Commitment:
    """F = Commit(0, 1), the fixed public commitment to zero with unit blinding."""
    return commit(0, 1)


# --- Commitment Operations ---

def commit(value: int, blind: int) -> Commitment:
    """Pedersen commitment value*H + blind*G."""
    return add(multiply(generator_h(), value % SECP256K1_ORDER), multiply(G, blind % SECP256K1_ORDER))


def commit_blind(blind: int, value: int) -> Commitment:
    """Same as commit() with the blinding factor first.

    Used where the scalar multiplying H is itself a blinding-derived value
    (e.g. C1 = t1*H + t3*G in the multiplication gate).
    """
    return commit(blind, value)


def add_commitments(positive: Iterable[Commitment], negative: Iterable[Commitment] = ()) -> Commitment:
    """Signed commitment sum: sum(positive) - sum(negative)."""
    acc = IDENTITY
    for c in positive:
        acc = add(acc, c)
    for c in negative:
        acc = add(acc, negate(c))
    return acc


def scalar_mul_commitment(point: Commitment, scalar: int) -> Commitment:
    return multiply(point, scalar % SECP256K1_ORDER)


def to_public_key(commitment: Commitment) -> Point:
    """View a commitment as a public key point (valid once its blinding is removed)."""
    if is_identity(commitment):
        raise MalformedInputError("commitment is the point at infinity and has no public key")
    if not is_on_curve(commitment):
        raise MalformedInputError("commitment is not a secp256k1 point")
    return commitment


def public_key_for(secret: int) -> Point:
    """Public key secret*H, the key reconstructed from opened commitments."""
    return to_public_key(multiply(generator_h(), secret % SECP256K1_ORDER))


# --- Encodings ---

def commitment_to_bytes(commitment: Commitment) -> bytes:
    """33-byte secp256k1-zkp commitment encoding."""
    if is_identity(commitment):
        raise MalformedInputError("cannot serialize a commitment at infinity")
    x, y = commitment
    prefix = COMMIT_PREFIX_QUAD if _is_quad(y) else COMMIT_PREFIX_NONQUAD
    return bytes([prefix]) + x.to_bytes(COORD_SIZE, "big")


def commitment_from_bytes(data: bytes) -> Commitment:
    if len(data) != COMMITMENT_SIZE:
        raise MalformedInputError(f"commitment must be {COMMITMENT_SIZE} bytes, got {len(data)}")
    prefix = data[0]
    if prefix not in (COMMIT_PREFIX_QUAD, COMMIT_PREFIX_NONQUAD):
        raise MalformedInputError(f"invalid commitment prefix 0x{prefix:02x}")
    x = int.from_bytes(data[1:], "big")
    y = _lift_x(x)
    if y is None:
        raise MalformedInputError("commitment x coordinate is not on the curve")
    if _is_quad(y) != (prefix == COMMIT_PREFIX_QUAD):
        y = _P - y
    return (x, y)


def commitment_to_hex(commitment: Commitment) -> str:
    return commitment_to_bytes(commitment).hex()


def commitment_from_hex(data: str) -> Commitment:
    return commitment_from_bytes(_unhex(data, "commitment"))


def public_key_to_bytes(point: Point) -> bytes:
    """SEC1 compressed encoding."""
    x, y = to_public_key(point)
    return bytes([0x02 | (y & 1)]) + x.to_bytes(COORD_SIZE, "big")


def public_key_from_bytes(data: bytes) -> Point:
    """Decode a SEC1 compressed (33 bytes) or uncompressed (65 bytes) public key."""
    if len(data) == 1 + COORD_SIZE and data[0] in (0x02, 0x03):
        x = int.from_bytes(data[1:], "big")
        y = _lift_x(x)
        if y is None:
            raise MalformedInputError("public key x coordinate is not on the curve")
        if (y & 1) != (data[0] & 1):
            y = _P - y
        return (x, y)
    if len(data) == 1 + 2 * COORD_SIZE and data[0] == 0x04:
        point = (int.from_bytes(data[1:1 + COORD_SIZE], "big"), int.from_bytes(data[1 + COORD_SIZE:], "big"))
        if not is_on_curve(point):
            raise MalformedInputError("public key is not a secp256k1 point")
        return point
    raise MalformedInputError(f"invalid public key encoding ({len(data)} bytes)")


def public_key_to_hex(point: Point) -> str:
    return public_key_to_bytes(point).hex()


def public_key_from_hex(data: str) -> Point:
    return public_key_from_bytes(_unhex(data, "public key"))


def _unhex(data: str, what: str) -> bytes:
    if not isinstance(data, str):
        raise MalformedInputError(f"{what} must be a hex string, got {type(data).__name__}")
    try:
        return bytes.fromhex(data.removeprefix("0x"))
    except ValueError as e:
        raise MalformedInputError(f"invalid {what} hex: {e}") from e
