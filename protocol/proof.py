"""Gate proof data structures and JSON serialization.

A GateProof is the tagged union AddGateProof | MulGateProof. Every field is
a fixed-width big-endian hex string (33-byte commitments, 32-byte scalars),
so a decoded proof is exactly what crossed the trust boundary.

On-disk format (one entry per Definition/Condition statement):

    [
      {"AddGate": {"z": .., "b_commit": .., "commits": [W_L, W_R, W_O],
                   "opening_keys": [{"r": .., "index": 0}]}},
      {"MulGate": {"tuple": [e1, e2, z1, z2, z3], "c_commits": [C1, C2, C3],
                   "commits": [W_L, W_R, W_O]}}
    ]

"opening_keys" is omitted when no operand of the gate is opened.
"""

import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Optional, Union

from primitives.errors import MalformedInputError
from primitives.group import commitment_from_hex
from primitives.scalar import scalar_from_hex

# --- Constants ---

ADD_GATE_TAG = "AddGate"
MUL_GATE_TAG = "MulGate"
N_WITNESS_COMMITS = 3
N_MUL_COMMITS = 3
N_MUL_RESPONSES = 5
OPENING_INDICES = (0, 1)


# --- Proof Data Structures ---

@dataclass(frozen=True)
class OpeningKey:
    """Revealed blinding factor r of commits[index] (0 = left operand, 1 = right)."""
    r: str
    index: int


@dataclass(frozen=True)
class AddGateProof:
    """Proof that W_L + W_R - W_O commits to zero: Com(0, z) = x*(W_L + W_R - W_O) + B."""
    z: str
    b_commit: str
    commits: tuple[str, str, str]
    opening_keys: Optional[tuple[OpeningKey, ...]] = None


@dataclass(frozen=True)
class MulGateProof:
    """Proof that W_O commits to the product of the values in W_L and W_R.

    Attributes:
        responses: (e1, e2, z1, z2, z3), serialized under the key "tuple"
        c_commits: (C1, C2, C3) auxiliary commitments
        commits: (W_L, W_R, W_O) wire commitments
        opening_keys: Revealed operand blindings, or None
    """
    responses: tuple[str, str, str, str, str]
    c_commits: tuple[str, str, str]
    commits: tuple[str, str, str]
    opening_keys: Optional[tuple[OpeningKey, ...]] = None


GateProof = Union[AddGateProof, MulGateProof]


@dataclass
class KeyProof:
    """Gate proofs of a circuit together with its public inputs."""
    proof: list[GateProof] = field(default_factory=list)
    inputs: list[str] = field(default_factory=list)


# --- Queries ---

def is_add_gate(proof: GateProof) -> bool:
    return isinstance(proof, AddGateProof)


def is_mul_gate(proof: GateProof) -> bool:
    return isinstance(proof, MulGateProof)


def has_opening_key(proof: GateProof) -> bool:
    return bool(proof.opening_keys)


def gate_kind_name(proof: GateProof) -> str:
    match proof:
        case AddGateProof():
            return ADD_GATE_TAG
        case MulGateProof():
            return MUL_GATE_TAG
        case _:
            raise MalformedInputError(f"not a gate proof: {type(proof).__name__}")


# --- JSON Serialization ---

def _opening_keys_to_json(keys: tuple[OpeningKey, ...]) -> list[dict[str, Any]]:
    return [{"r": k.r, "index": k.index} for k in keys]


def proof_to_json(proof: GateProof) -> dict[str, Any]:
    """Convert a gate proof to its externally tagged JSON object."""
    match proof:
        case AddGateProof(z=z, b_commit=b_commit, commits=commits, opening_keys=keys):
            body: dict[str, Any] = {"z": z, "b_commit": b_commit, "commits": list(commits)}
            tag = ADD_GATE_TAG
        case MulGateProof(responses=responses, c_commits=c_commits, commits=commits, opening_keys=keys):
            body = {"tuple": list(responses), "c_commits": list(c_commits), "commits": list(commits)}
            tag = MUL_GATE_TAG
        case _:
            raise MalformedInputError(f"not a gate proof: {type(proof).__name__}")

    if keys:
        body["opening_keys"] = _opening_keys_to_json(keys)
    return {tag: body}


def proofs_to_json(proofs: list[GateProof]) -> list[dict[str, Any]]:
    return [proof_to_json(p) for p in proofs]


# --- JSON Deserialization ---

def _field(body: dict[str, Any], name: str, tag: str) -> Any:
    if name not in body:
        raise MalformedInputError(f"{tag} proof is missing '{name}'")
    return body[name]


def _commit_list(values: Any, expected: int, what: str) -> tuple[str, ...]:
    if not isinstance(values, list) or len(values) != expected:
        raise MalformedInputError(f"'{what}' must be a list of {expected} commitments")
    for v in values:
        commitment_from_hex(v)
    return tuple(values)


def _scalar_list(values: Any, expected: int, what: str) -> tuple[str, ...]:
    if not isinstance(values, list) or len(values) != expected:
        raise MalformedInputError(f"'{what}' must be a list of {expected} scalars")
    for v in values:
        scalar_from_hex(v)
    return tuple(values)


def _opening_keys_from_json(body: dict[str, Any]) -> Optional[tuple[OpeningKey, ...]]:
    if "opening_keys" not in body or body["opening_keys"] is None:
        return None
    raw = body["opening_keys"]
    if not isinstance(raw, list) or not raw:
        raise MalformedInputError("'opening_keys' must be omitted or a non-empty list")

    keys = []
    for entry in raw:
        if not isinstance(entry, dict) or "r" not in entry or "index" not in entry:
            raise MalformedInputError(f"invalid opening key entry: {entry!r}")
        index = entry["index"]
        if isinstance(index, bool) or index not in OPENING_INDICES:
            raise MalformedInputError(f"opening key index must be 0 or 1, got {index!r}")
        if any(k.index == index for k in keys):
            raise MalformedInputError(f"duplicate opening key index {index}")
        scalar_from_hex(entry["r"])
        keys.append(OpeningKey(r=entry["r"], index=index))
    return tuple(keys)


def proof_from_json(obj: Any) -> GateProof:
    """Decode and validate one externally tagged gate proof."""
    if not isinstance(obj, dict) or len(obj) != 1:
        raise MalformedInputError(f"gate proof must be an object with a single tag, got {obj!r}")
    (tag, body), = obj.items()
    if not isinstance(body, dict):
        raise MalformedInputError(f"{tag} proof body must be an object")

    if tag == ADD_GATE_TAG:
        z = _field(body, "z", tag)
        scalar_from_hex(z)
        b_commit = _field(body, "b_commit", tag)
        commitment_from_hex(b_commit)
        return AddGateProof(
            z=z,
            b_commit=b_commit,
            commits=_commit_list(_field(body, "commits", tag), N_WITNESS_COMMITS, "commits"),
            opening_keys=_opening_keys_from_json(body),
        )
    if tag == MUL_GATE_TAG:
        return MulGateProof(
            responses=_scalar_list(_field(body, "tuple", tag), N_MUL_RESPONSES, "tuple"),
            c_commits=_commit_list(_field(body, "c_commits", tag), N_MUL_COMMITS, "c_commits"),
            commits=_commit_list(_field(body, "commits", tag), N_WITNESS_COMMITS, "commits"),
            opening_keys=_opening_keys_from_json(body),
        )
    raise MalformedInputError(f"unknown gate proof tag '{tag}'")


def proofs_from_json(data: Any) -> list[GateProof]:
    if not isinstance(data, list):
        raise MalformedInputError("gate proofs must be a JSON array")
    return [proof_from_json(p) for p in data]


# --- Key Proof Wrapper ---

def key_proof_to_json(key_proof: KeyProof) -> dict[str, Any]:
    return {"proof": proofs_to_json(key_proof.proof), "inputs": list(key_proof.inputs)}


def key_proof_from_json(data: Any) -> KeyProof:
    if not isinstance(data, dict) or "proof" not in data:
        raise MalformedInputError("key proof must be an object with a 'proof' array")
    inputs = data.get("inputs", [])
    if not isinstance(inputs, list) or not all(isinstance(i, str) for i in inputs):
        raise MalformedInputError("'inputs' must be a list of strings")
    return KeyProof(proof=proofs_from_json(data["proof"]), inputs=list(inputs))


# --- Files ---

def save_proofs(path: Union[str, Path], proofs: list[GateProof]) -> None:
    with open(path, "w") as f:
        json.dump(proofs_to_json(proofs), f, indent=2)


def save_key_proof(path: Union[str, Path], key_proof: KeyProof) -> None:
    with open(path, "w") as f:
        json.dump(key_proof_to_json(key_proof), f, indent=2)


def _read_json(path: Union[str, Path]) -> Any:
    with open(path) as f:
        try:
            return json.load(f)
        except json.JSONDecodeError as e:
            raise MalformedInputError(f"{path} is not valid JSON: {e}") from e


def load_proofs(path: Union[str, Path]) -> list[GateProof]:
    return proofs_from_json(_read_json(path))


def load_key_proof(path: Union[str, Path]) -> KeyProof:
    """Load either a key-proof wrapper or a bare gate proof array."""
    data = _read_json(path)
    if isinstance(data, list):
        return KeyProof(proof=proofs_from_json(data))
    return key_proof_from_json(data)
