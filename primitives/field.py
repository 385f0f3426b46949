"""Circuit prime field GF(p) and the secp256k1 group constants.

Uses galois for circuit-field arithmetic. FF is the field of the flattened
program's wire values; the commitment group works over integers mod
SECP256K1_ORDER (see primitives.scalar for the mapping between the two).
"""

import galois

# --- Moduli ---

SECP256K1_FIELD_PRIME = 0xFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFEFFFFFC2F
SECP256K1_ORDER = 0xFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFEBAAEDCE6AF48A03BBFD25E8CD0364141

# The flattened programs consumed here are compiled over the secp256k1 base field.
CIRCUIT_FIELD_PRIME = SECP256K1_FIELD_PRIME

# --- Field Construction ---

FF = galois.GF(CIRCUIT_FIELD_PRIME)
"""Circuit field GF(p), p = secp256k1 base-field prime."""


def to_field(value) -> FF:
    """Lift an int (possibly negative), decimal string or 0x-prefixed hex string into FF."""
    if isinstance(value, str):
        value = value.strip()
        value = int(value, 16) if value.lower().startswith(("0x", "-0x")) else int(value)
    return FF(int(value) % CIRCUIT_FIELD_PRIME)


def field_from_digest(digest: bytes) -> FF:
    """Reduce a big-endian hash digest into FF."""
    return FF(int.from_bytes(digest, "big") % CIRCUIT_FIELD_PRIME)
