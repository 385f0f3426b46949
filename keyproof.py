#!/usr/bin/env python3
"""
Prove and verify knowledge of a private key inside a flattened program.

Every Definition/Condition statement of the program's main function is
proven as a Pedersen add or mul gate. Gates whose operand is a private
input of main reveal that operand's blinding factor, so the verifier can
reconstruct the public key of the private key's two 128-bit halves.

Usage:
    python keyproof.py generate-key-proof -i out -w witness -o proof.json
    python keyproof.py verify-proofs -i out -j proof.json
    python keyproof.py verify-key-proof -i out -j proof.json -p <pubkey hex>
    python keyproof.py public-key --secret <int>
"""

import argparse
import sys
from pathlib import Path

from circuit.flat import load_flat_program
from circuit.witness import load_witness
from primitives.errors import MalformedInputError, SelfCheckError
from primitives.group import public_key_for, public_key_to_hex
from protocol.key_proof import (
    KeyProofConfig,
    generate_key_proof,
    public_inputs,
    verify_key_proof,
    verify_proofs,
)
from protocol.proof import KeyProof, load_key_proof, save_key_proof, save_proofs

FLATTENED_CODE_DEFAULT_PATH = "out"
WITNESS_DEFAULT_PATH = "witness"
PROOF_DEFAULT_PATH = "proof.json"

EXIT_OK = 0
EXIT_INVALID = 1
EXIT_ERROR = 2


def _require(path: Path, what: str) -> None:
    if not path.exists():
        raise MalformedInputError(f"{what} not found: {path}")


def cmd_generate_key_proof(args) -> int:
    _require(args.input, "Flattened program")
    _require(args.witness, "Witness file")

    program = load_flat_program(args.input)
    witness = load_witness(args.witness)
    config = KeyProofConfig(max_workers=args.workers)

    print(f"Generating gate proofs for {args.input}...")
    proofs = generate_key_proof(program, witness, config)

    args.output.parent.mkdir(parents=True, exist_ok=True)
    if args.key_proof:
        save_key_proof(args.output, KeyProof(proof=proofs, inputs=public_inputs(program, witness)))
    else:
        save_proofs(args.output, proofs)
    print(f"Written {len(proofs)} gate proofs to {args.output}")
    return EXIT_OK


def cmd_verify_proofs(args) -> int:
    _require(args.input, "Flattened program")
    _require(args.proof, "Proof file")

    program = load_flat_program(args.input)
    proofs = load_key_proof(args.proof).proof
    config = KeyProofConfig(max_workers=args.workers)

    if verify_proofs(program, proofs, config):
        print(f"All {len(proofs)} gate proofs verified")
        return EXIT_OK
    print("Gate proof verification failed")
    return EXIT_INVALID


def cmd_verify_key_proof(args) -> int:
    _require(args.input, "Flattened program")
    _require(args.proof, "Proof file")

    program = load_flat_program(args.input)
    proofs = load_key_proof(args.proof).proof
    config = KeyProofConfig(max_workers=args.workers)

    result = verify_key_proof(program, proofs, args.public_key, config)
    if not result.proofs_valid:
        print(f"Gate proof verification failed for gates {result.failed_gates}")
    if result.public_key_matches:
        print(f"Private key corresponding to public key {args.public_key} matches the opened commitments")
    else:
        print(f"Private key corresponding to public key {args.public_key} does not match the opened commitments")
    return EXIT_OK if result.valid else EXIT_INVALID


def cmd_public_key(args) -> int:
    try:
        secret = int(args.secret, 0)
    except ValueError:
        raise MalformedInputError(f"secret must be an integer, got '{args.secret}'") from None
    print(public_key_to_hex(public_key_for(secret)))
    return EXIT_OK


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description='Pedersen gate proofs of knowledge of a private key'
    )
    sub = parser.add_subparsers(dest='command', required=True)

    gen = sub.add_parser('generate-key-proof', help='Prove every gate of a flattened program')
    gen.add_argument('-i', '--input', type=Path, default=Path(FLATTENED_CODE_DEFAULT_PATH),
                     help='Path of the flattened program')
    gen.add_argument('-w', '--witness', type=Path, default=Path(WITNESS_DEFAULT_PATH),
                     help='Path of the witness file')
    gen.add_argument('-o', '--output', type=Path, default=Path(PROOF_DEFAULT_PATH),
                     help='Output path for the gate proofs')
    gen.add_argument('--workers', type=int, default=1,
                     help='Number of worker processes (1 = inline)')
    gen.add_argument('--key-proof', action='store_true',
                     help='Write a {proof, inputs} wrapper instead of a bare proof array')
    gen.set_defaults(func=cmd_generate_key_proof)

    ver = sub.add_parser('verify-proofs', help='Verify every gate proof against a flattened program')
    ver.add_argument('-i', '--input', type=Path, default=Path(FLATTENED_CODE_DEFAULT_PATH),
                     help='Path of the flattened program')
    ver.add_argument('-j', '--proof', type=Path, default=Path(PROOF_DEFAULT_PATH),
                     help='Path of the gate proofs')
    ver.add_argument('--workers', type=int, default=1,
                     help='Number of worker processes (1 = inline)')
    ver.set_defaults(func=cmd_verify_proofs)

    key = sub.add_parser('verify-key-proof', help='Verify gate proofs and the opened public key')
    key.add_argument('-i', '--input', type=Path, default=Path(FLATTENED_CODE_DEFAULT_PATH),
                     help='Path of the flattened program')
    key.add_argument('-j', '--proof', type=Path, default=Path(PROOF_DEFAULT_PATH),
                     help='Path of the gate proofs')
    key.add_argument('-p', '--public-key', required=True,
                     help='Expected public key (SEC1 hex)')
    key.add_argument('--workers', type=int, default=1,
                     help='Number of worker processes (1 = inline)')
    key.set_defaults(func=cmd_verify_key_proof)

    pk = sub.add_parser('public-key', help='Print secret*H, the key an opening proof reconstructs')
    pk.add_argument('--secret', required=True, help='Secret as a decimal or 0x-prefixed integer')
    pk.set_defaults(func=cmd_public_key)

    return parser


def main(argv=None) -> int:
    args = build_parser().parse_args(argv)
    try:
        return args.func(args)
    except (MalformedInputError, SelfCheckError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return EXIT_ERROR


if __name__ == '__main__':
    sys.exit(main())
