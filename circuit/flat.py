"""Flattened program model consumed by the gate prover and verifier.

The compiler emits the program's main function as a list of statements over
numbered variables. Only Definition and Condition statements become gates;
Return and Directive statements carry no relation that is proven here.

JSON follows serde's externally tagged layout:

    {"main": {
        "arguments": [{"id": {"id": 1}, "private": true}, ...],
        "statements": [
            {"Definition": [{"id": 3}, {"Add": [{"Identifier": {"id": 1}}, {"Number": "3"}]}]},
            {"Condition": [{"Identifier": {"id": 4}}, {"Mult": [..., ...]}, "Source"]},
            {"Return": {"expressions": [...]}},
            {"Directive": {"inputs": [...], "outputs": [...], "solver": ...}}
        ]}}
"""

import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Union

from primitives.errors import MalformedInputError
from primitives.field import FF, to_field

# --- Variables ---

ONE_ID = 0


@dataclass(frozen=True, order=True)
class FlatVariable:
    """Wire identifier. 0 is ~one, negative ids are public outputs (~out_i = -(i+1))."""
    id: int

    @classmethod
    def one(cls) -> "FlatVariable":
        return cls(ONE_ID)

    @classmethod
    def public(cls, index: int) -> "FlatVariable":
        return cls(-(index + 1))

    @classmethod
    def parse(cls, name: str) -> "FlatVariable":
        """Inverse of str(): '~one', '~out_<i>' or '_<id>'."""
        name = name.strip()
        try:
            if name == "~one":
                return cls.one()
            if name.startswith("~out_"):
                return cls.public(int(name[len("~out_"):]))
            if name.startswith("_"):
                return cls(int(name[1:]))
        except ValueError:
            pass
        raise MalformedInputError(f"invalid variable name '{name}'")

    def __str__(self) -> str:
        if self.id == ONE_ID:
            return "~one"
        if self.id < 0:
            return f"~out_{-self.id - 1}"
        return f"_{self.id}"


@dataclass(frozen=True)
class FlatParameter:
    variable: FlatVariable
    private: bool


# --- Expressions ---

@dataclass(frozen=True)
class Number:
    value: FF

    def __str__(self) -> str:
        return str(int(self.value))


@dataclass(frozen=True)
class Identifier:
    variable: FlatVariable

    def __str__(self) -> str:
        return str(self.variable)


@dataclass(frozen=True)
class Add:
    left: "FlatExpression"
    right: "FlatExpression"

    def __str__(self) -> str:
        return f"({self.left} + {self.right})"


@dataclass(frozen=True)
class Sub:
    left: "FlatExpression"
    right: "FlatExpression"

    def __str__(self) -> str:
        return f"({self.left} - {self.right})"


@dataclass(frozen=True)
class Mult:
    left: "FlatExpression"
    right: "FlatExpression"

    def __str__(self) -> str:
        return f"({self.left} * {self.right})"


FlatExpression = Union[Number, Identifier, Add, Sub, Mult]


# --- Statements ---

@dataclass(frozen=True)
class Definition:
    variable: FlatVariable
    expression: FlatExpression

    def __str__(self) -> str:
        return f"{self.variable} = {self.expression}"


@dataclass(frozen=True)
class Condition:
    lhs: FlatExpression
    rhs: FlatExpression
    error: str = "Source"

    def __str__(self) -> str:
        return f"{self.lhs} == {self.rhs} // {self.error}"


@dataclass(frozen=True)
class Return:
    expressions: tuple = ()

    def __str__(self) -> str:
        return "return " + ", ".join(str(e) for e in self.expressions)


@dataclass(frozen=True)
class Directive:
    inputs: tuple = ()
    outputs: tuple = ()
    solver: Any = None

    def __str__(self) -> str:
        outputs = ", ".join(str(o) for o in self.outputs)
        inputs = ", ".join(str(i) for i in self.inputs)
        return f"# {outputs} = {self.solver}({inputs})"


FlatStatement = Union[Definition, Condition, Return, Directive]


@dataclass
class FlatProgram:
    """The flattened main function: its parameters and statements in order."""
    arguments: list[FlatParameter] = field(default_factory=list)
    statements: list[FlatStatement] = field(default_factory=list)

    def private_input_ids(self) -> set[int]:
        return {p.variable.id for p in self.arguments if p.private}

    def public_arguments(self) -> list[FlatVariable]:
        return [p.variable for p in self.arguments if not p.private]

    def __str__(self) -> str:
        args = ",".join(f"{'private ' if p.private else ''}{p.variable}" for p in self.arguments)
        body = "\n".join(f"\t{s}" for s in self.statements)
        return f"def main({args}):\n{body}"


# --- JSON Loading ---

def _field_from_json(value: Any) -> FF:
    """Field elements appear as decimal/hex strings, ints, or little-endian u32 digit lists."""
    if isinstance(value, bool):
        raise MalformedInputError(f"invalid field element {value!r}")
    if isinstance(value, int):
        return to_field(value)
    if isinstance(value, str):
        try:
            return to_field(value)
        except ValueError as e:
            raise MalformedInputError(f"invalid field element '{value}'") from e
    if isinstance(value, list) and all(isinstance(d, int) and not isinstance(d, bool) for d in value):
        return to_field(sum(d << (32 * i) for i, d in enumerate(value)))
    raise MalformedInputError(f"invalid field element {value!r}")


def _variable_from_json(value: Any) -> FlatVariable:
    if isinstance(value, dict) and "id" in value:
        value = value["id"]
    if isinstance(value, int) and not isinstance(value, bool):
        return FlatVariable(value)
    if isinstance(value, str):
        return FlatVariable.parse(value)
    raise MalformedInputError(f"invalid variable {value!r}")


def _tagged(obj: Any, what: str) -> tuple[str, Any]:
    if not isinstance(obj, dict) or len(obj) != 1:
        raise MalformedInputError(f"{what} must be an object with a single tag, got {obj!r}")
    (tag, body), = obj.items()
    return tag, body


def _pair(body: Any, tag: str) -> tuple[Any, Any]:
    if not isinstance(body, list) or len(body) != 2:
        raise MalformedInputError(f"{tag} expects two operands")
    return body[0], body[1]


def expression_from_json(obj: Any) -> FlatExpression:
    tag, body = _tagged(obj, "expression")
    if tag == "Number":
        return Number(_field_from_json(body))
    if tag == "Identifier":
        return Identifier(_variable_from_json(body))
    if tag in ("Add", "Sub", "Mult"):
        left, right = _pair(body, tag)
        cls = {"Add": Add, "Sub": Sub, "Mult": Mult}[tag]
        return cls(expression_from_json(left), expression_from_json(right))
    raise MalformedInputError(f"unknown expression tag '{tag}'")


def statement_from_json(obj: Any) -> FlatStatement:
    tag, body = _tagged(obj, "statement")
    if tag == "Definition":
        variable, expression = _pair(body, tag)
        return Definition(_variable_from_json(variable), expression_from_json(expression))
    if tag == "Condition":
        if not isinstance(body, list) or len(body) not in (2, 3):
            raise MalformedInputError("Condition expects [lhs, rhs, error]")
        error = body[2] if len(body) == 3 else "Source"
        return Condition(expression_from_json(body[0]), expression_from_json(body[1]), str(error))
    if tag == "Return":
        expressions = body.get("expressions", []) if isinstance(body, dict) else body
        return Return(tuple(expression_from_json(e) for e in expressions))
    if tag == "Directive":
        if not isinstance(body, dict):
            raise MalformedInputError("Directive body must be an object")
        return Directive(
            inputs=tuple(expression_from_json(e) for e in body.get("inputs", [])),
            outputs=tuple(_variable_from_json(v) for v in body.get("outputs", [])),
            solver=json.dumps(body.get("solver"), sort_keys=True),
        )
    raise MalformedInputError(f"unknown statement tag '{tag}'")


def parameter_from_json(obj: Any) -> FlatParameter:
    if not isinstance(obj, dict) or "id" not in obj:
        raise MalformedInputError(f"invalid parameter {obj!r}")
    return FlatParameter(_variable_from_json(obj["id"]), bool(obj.get("private", False)))


def flat_program_from_json(data: Any) -> FlatProgram:
    main = data.get("main", data) if isinstance(data, dict) else None
    if not isinstance(main, dict) or "statements" not in main:
        raise MalformedInputError("flattened program must contain main.statements")
    return FlatProgram(
        arguments=[parameter_from_json(p) for p in main.get("arguments", [])],
        statements=[statement_from_json(s) for s in main["statements"]],
    )


def load_flat_program(path: Union[str, Path]) -> FlatProgram:
    with open(path) as f:
        try:
            data = json.load(f)
        except json.JSONDecodeError as e:
            raise MalformedInputError(f"{path} is not valid JSON: {e}") from e
    return flat_program_from_json(data)


# --- JSON Writing ---

def _variable_to_json(v: FlatVariable) -> dict[str, int]:
    return {"id": v.id}


def expression_to_json(expr: FlatExpression) -> dict[str, Any]:
    match expr:
        case Number(value=value):
            return {"Number": str(int(value))}
        case Identifier(variable=variable):
            return {"Identifier": _variable_to_json(variable)}
        case Add(left=l, right=r):
            return {"Add": [expression_to_json(l), expression_to_json(r)]}
        case Sub(left=l, right=r):
            return {"Sub": [expression_to_json(l), expression_to_json(r)]}
        case Mult(left=l, right=r):
            return {"Mult": [expression_to_json(l), expression_to_json(r)]}
    raise MalformedInputError(f"not an expression: {expr!r}")


def statement_to_json(stmt: FlatStatement) -> dict[str, Any]:
    match stmt:
        case Definition(variable=v, expression=e):
            return {"Definition": [_variable_to_json(v), expression_to_json(e)]}
        case Condition(lhs=lhs, rhs=rhs, error=error):
            return {"Condition": [expression_to_json(lhs), expression_to_json(rhs), error]}
        case Return(expressions=exprs):
            return {"Return": {"expressions": [expression_to_json(e) for e in exprs]}}
        case Directive(inputs=inputs, outputs=outputs, solver=solver):
            return {"Directive": {
                "inputs": [expression_to_json(e) for e in inputs],
                "outputs": [_variable_to_json(v) for v in outputs],
                "solver": json.loads(solver) if isinstance(solver, str) else solver,
            }}
    raise MalformedInputError(f"not a statement: {stmt!r}")


def flat_program_to_json(program: FlatProgram) -> dict[str, Any]:
    return {"main": {
        "arguments": [{"id": _variable_to_json(p.variable), "private": p.private} for p in program.arguments],
        "statements": [statement_to_json(s) for s in program.statements],
    }}


def save_flat_program(path: Union[str, Path], program: FlatProgram) -> None:
    with open(path, "w") as f:
        json.dump(flat_program_to_json(program), f, indent=2)
