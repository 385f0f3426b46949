"""Exceptions raised by the commitment primitives and the gate protocol."""


class MalformedInputError(ValueError):
    """Corrupted or structurally invalid input (hex, lengths, tags, encodings)."""


class UnsupportedStatementError(MalformedInputError):
    """A flattened statement the gate classifier cannot map onto an add/mul gate."""


class GateKindMismatchError(MalformedInputError):
    """A proof variant does not match the gate kind required at its position."""


class SelfCheckError(RuntimeError):
    """The prover's own witness does not satisfy the relation of its gate."""
