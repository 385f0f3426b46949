"""
Pytest configuration and shared circuits for the gate proof tests.
"""

import sys
from pathlib import Path

import pytest

# Add the project root to the path so absolute imports work
# (tests/ is inside the project root, so parent is the root)
root_dir = Path(__file__).parent.parent
if str(root_dir) not in sys.path:
    sys.path.insert(0, str(root_dir))

from circuit.flat import (  # noqa: E402
    Add,
    Definition,
    FlatParameter,
    FlatProgram,
    FlatVariable,
    Identifier,
    Mult,
    Number,
    Return,
)
from circuit.witness import Witness  # noqa: E402
from primitives.field import FF  # noqa: E402

HALF = 1 << 128
SECRET_HIGH = 0x1F2E3D4C5B6A79880123456789ABCDEF
SECRET_LOW = 0x0FEDCBA9876543210011223344556677
SECRET = SECRET_HIGH * HALF + SECRET_LOW


def var(i: int) -> Identifier:
    return Identifier(FlatVariable(i))


@pytest.fixture
def square_program() -> FlatProgram:
    """def main(private x): return (x + 3) * x"""
    x = FlatVariable(1)
    out = FlatVariable.public(0)
    return FlatProgram(
        arguments=[FlatParameter(x, private=True)],
        statements=[
            Definition(FlatVariable(2), Add(var(1), Number(FF(3)))),
            Definition(FlatVariable(3), Mult(var(2), var(1))),
            Definition(out, Identifier(FlatVariable(3))),
            Return((Identifier(out),)),
        ],
    )


@pytest.fixture
def square_witness() -> Witness:
    """x = 5: (5 + 3) * 5 = 40."""
    return Witness({
        FlatVariable.one(): 1,
        FlatVariable(1): 5,
        FlatVariable(2): 8,
        FlatVariable(3): 40,
        FlatVariable.public(0): 40,
    })


@pytest.fixture
def half_key_program() -> FlatProgram:
    """def main(private high, private low): each half is opened by a copy gate, then summed."""
    out = FlatVariable.public(0)
    return FlatProgram(
        arguments=[FlatParameter(FlatVariable(1), True), FlatParameter(FlatVariable(2), True)],
        statements=[
            Definition(FlatVariable(3), Mult(var(1), Number(FF(1)))),
            Definition(FlatVariable(4), Mult(var(2), Number(FF(1)))),
            Definition(out, Add(var(3), var(4))),
            Return((Identifier(out),)),
        ],
    )


@pytest.fixture
def half_key_witness() -> Witness:
    return Witness({
        FlatVariable.one(): 1,
        FlatVariable(1): SECRET_HIGH,
        FlatVariable(2): SECRET_LOW,
        FlatVariable(3): SECRET_HIGH,
        FlatVariable(4): SECRET_LOW,
        FlatVariable.public(0): SECRET_HIGH + SECRET_LOW,
    })
