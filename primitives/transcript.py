"""Fiat-Shamir challenge derivation for gate proofs.

The challenge is a hash of every public commitment the prover sends, in
protocol order. The digest is reduced into the circuit field and then mapped
into a group scalar with the same ScalarEncoder used for wire values, so the
prover and the verifier derive it identically from the serialized proof.
"""

import hashlib
from typing import Sequence

from primitives.field import field_from_digest
from primitives.group import Commitment, commitment_to_bytes
from primitives.scalar import DEFAULT_ENCODER, ScalarEncoder


class Transcript:
    """SHA-256 transcript over 33-byte commitment encodings."""

    def __init__(self, encoder: ScalarEncoder = DEFAULT_ENCODER):
        self.encoder = encoder
        self.hash = hashlib.sha256()

    def put(self, commitments: Sequence[Commitment]) -> None:
        for c in commitments:
            self.hash.update(commitment_to_bytes(c))

    def get_challenge(self) -> int:
        """Challenge scalar for the commitments absorbed so far."""
        return self.encoder.encode(field_from_digest(self.hash.digest()))


def fiat_shamir_challenge(commitments: Sequence[Commitment]) -> int:
    transcript = Transcript()
    transcript.put(commitments)
    return transcript.get_challenge()
