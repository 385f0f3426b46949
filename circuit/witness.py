"""Witness: the value of every wire of a flattened program.

File format, one assignment per line:

    ~one,1
    _1,5
    _3,8
    ~out_0,40
"""

import csv
from pathlib import Path
from typing import Iterable, Mapping, Optional, Union

from circuit.flat import FlatVariable
from primitives.errors import MalformedInputError
from primitives.field import FF, to_field


class Witness:
    """Assignment of circuit-field values to variables, keyed by variable id."""

    def __init__(self, values: Optional[Mapping[FlatVariable, object]] = None):
        self._values: dict[int, FF] = {}
        for variable, value in (values or {}).items():
            self.set(variable, value)

    def set(self, variable: FlatVariable, value) -> None:
        self._values[variable.id] = to_field(value)

    def get(self, variable: FlatVariable) -> FF:
        try:
            return self._values[variable.id]
        except KeyError:
            raise MalformedInputError(f"witness has no value for variable {variable}") from None

    def __contains__(self, variable: FlatVariable) -> bool:
        return variable.id in self._values

    def __len__(self) -> int:
        return len(self._values)

    def variables(self) -> list[FlatVariable]:
        return [FlatVariable(i) for i in sorted(self._values)]

    def outputs(self) -> list[FF]:
        """Public output values ~out_0, ~out_1, ... in order."""
        ids = sorted((i for i in self._values if i < 0), reverse=True)
        return [self._values[i] for i in ids]

    def format(self) -> str:
        return "\n".join(f"{v},{int(self.get(v))}" for v in self.variables())


def witness_from_lines(lines: Iterable[str]) -> Witness:
    witness = Witness()
    for lineno, row in enumerate(csv.reader(lines), start=1):
        if not row or all(not cell.strip() for cell in row):
            continue
        if len(row) != 2:
            raise MalformedInputError(f"witness line {lineno}: expected 'variable,value', got {row!r}")
        name, value = (cell.strip() for cell in row)
        try:
            number = int(value)
        except ValueError:
            raise MalformedInputError(f"witness line {lineno}: invalid value '{value}'") from None
        witness.set(FlatVariable.parse(name), number)
    return witness


def load_witness(path: Union[str, Path]) -> Witness:
    with open(path, newline="") as f:
        return witness_from_lines(f)


def save_witness(path: Union[str, Path], witness: Witness) -> None:
    with open(path, "w") as f:
        f.write(witness.format())
        f.write("\n")
