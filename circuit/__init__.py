"""Circuit - Flattened program model and witness files."""

from circuit.flat import (
    Add,
    Condition,
    Definition,
    Directive,
    FlatExpression,
    FlatParameter,
    FlatProgram,
    FlatStatement,
    FlatVariable,
    Identifier,
    Mult,
    Number,
    Return,
    Sub,
    flat_program_from_json,
    flat_program_to_json,
    load_flat_program,
    save_flat_program,
)
from circuit.witness import Witness, load_witness, save_witness, witness_from_lines

__all__ = [
    # Variables
    "FlatVariable",
    "FlatParameter",
    # Expressions
    "FlatExpression",
    "Number",
    "Identifier",
    "Add",
    "Sub",
    "Mult",
    # Statements
    "FlatStatement",
    "Definition",
    "Condition",
    "Return",
    "Directive",
    "FlatProgram",
    # Files
    "flat_program_from_json",
    "flat_program_to_json",
    "load_flat_program",
    "save_flat_program",
    "Witness",
    "witness_from_lines",
    "load_witness",
    "save_witness",
]
