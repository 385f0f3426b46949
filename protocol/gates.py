"""Mapping flattened statements onto add/mul gate tasks.

Every Definition and Condition statement of main becomes exactly one gate,
in statement order; Return and Directive statements are skipped. The
verifier derives the same gate-kind sequence from the public program, so a
proof list can be checked position by position without the witness.

    _3 = _1 + 7          -> add gate (w[_1], 7, w[_3])
    _4 = _3 * _1         -> mul gate (w[_3], w[_1], w[_4])
    _5 = _2              -> mul gate (1, w[_2], w[_5])
    ~out_0 == _4 * _5    -> mul gate (w[_4], w[_5], w[~out_0])
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional

from circuit.flat import (
    Add,
    Condition,
    Definition,
    FlatExpression,
    FlatProgram,
    FlatStatement,
    Identifier,
    Mult,
    Number,
    Sub,
)
from circuit.witness import Witness
from primitives.errors import UnsupportedStatementError
from primitives.field import FF


class GateKind(Enum):
    ADD = "add"
    MUL = "mul"


@dataclass(frozen=True)
class GateTask:
    """Everything needed to build one gate prover.

    Attributes:
        kind: Gate relation to prove
        value_l: Left operand wire value
        value_r: Right operand wire value
        value_o: Output wire value
        opening_indices: Operand positions whose blinding factors are revealed
        label: Source statement, for progress and error messages
    """
    kind: GateKind
    value_l: FF
    value_r: FF
    value_o: FF
    opening_indices: Optional[tuple[int, ...]]
    label: str


# --- Classification ---

def _is_leaf(expr: FlatExpression) -> bool:
    return isinstance(expr, (Number, Identifier))


def _gate_expression(statement: FlatStatement) -> Optional[FlatExpression]:
    """The expression a statement asks to prove, or None for statements without a gate."""
    match statement:
        case Definition(expression=expr):
            return expr
        case Condition(lhs=lhs, rhs=rhs):
            if not _is_leaf(lhs):
                raise UnsupportedStatementError(
                    f"condition '{statement}': left side must be a number or a variable"
                )
            return rhs
        case _:
            return None


def gate_kind_of(expr: FlatExpression) -> GateKind:
    match expr:
        case Number() | Identifier() | Mult():
            return GateKind.MUL
        case Add():
            return GateKind.ADD
        case Sub():
            raise UnsupportedStatementError(f"subtraction is not supported: {expr}")
        case _:
            raise UnsupportedStatementError(f"unsupported expression: {expr!r}")


def _operands(expr: FlatExpression) -> tuple[FlatExpression, FlatExpression]:
    left, right = expr.left, expr.right
    for operand in (left, right):
        if not _is_leaf(operand):
            raise UnsupportedStatementError(
                f"operand '{operand}' of '{expr}' must be a number or a variable"
            )
    return left, right


def expected_gate_kinds(program: FlatProgram) -> list[GateKind]:
    """Gate kinds, in order, that a proof of program must consist of."""
    kinds = []
    for statement in program.statements:
        expr = _gate_expression(statement)
        if expr is None:
            continue
        kind = gate_kind_of(expr)
        if isinstance(expr, (Add, Mult)):
            _operands(expr)
        kinds.append(kind)
    return kinds


# --- Task Construction ---

def _leaf_value(expr: FlatExpression, witness: Witness) -> FF:
    match expr:
        case Number(value=value):
            return value
        case Identifier(variable=variable):
            return witness.get(variable)
    raise UnsupportedStatementError(f"'{expr}' is not a number or a variable")


def _opening_indices(left: FlatExpression, right: FlatExpression, private_ids: set[int]) -> Optional[tuple[int, ...]]:
    indices = tuple(
        i for i, operand in enumerate((left, right))
        if isinstance(operand, Identifier) and operand.variable.id in private_ids
    )
    return indices or None


def gate_task(statement: FlatStatement, witness: Witness, private_ids: set[int]) -> Optional[GateTask]:
    """Build the gate task for one statement, or None if it carries no gate."""
    expr = _gate_expression(statement)
    if expr is None:
        return None

    match statement:
        case Definition(variable=variable):
            value_o = witness.get(variable)
        case Condition(lhs=lhs):
            value_o = _leaf_value(lhs, witness)

    kind = gate_kind_of(expr)
    label = str(statement)

    if _is_leaf(expr):
        # copy/constant: 1 * value = output
        return GateTask(GateKind.MUL, FF(1), _leaf_value(expr, witness), value_o, None, label)

    left, right = _operands(expr)
    return GateTask(
        kind=kind,
        value_l=_leaf_value(left, witness),
        value_r=_leaf_value(right, witness),
        value_o=value_o,
        opening_indices=_opening_indices(left, right, private_ids),
        label=label,
    )


def gate_tasks(program: FlatProgram, witness: Witness) -> list[GateTask]:
    private_ids = program.private_input_ids()
    tasks = []
    for statement in program.statements:
        task = gate_task(statement, witness, private_ids)
        if task is not None:
            tasks.append(task)
    return tasks
