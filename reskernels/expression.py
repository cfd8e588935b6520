"""Unsigned integer arithmetic expressions over named size variables.

Expressions combine decimal literals, ``{NAME}`` variable references,
parenthesised sub-expressions and the binary operators ``+ - / * %``.
There is no operator precedence: an operator takes everything to its
right as its right-hand operand, so ``2*3+4`` is ``2*(3+4)``.  Results
wrap modulo 2**64 like an unsigned machine word.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass
from typing import Mapping, Optional

_SIZE_MASK = (1 << 64) - 1
_DIGITS = "0123456789"


class ExpressionSyntaxError(ValueError):
    """Raised when an expression has an unterminated group or variable."""

    def __init__(self, message: str, text: str, position: int) -> None:
        super().__init__(f"{message}: {text!r}, at {position}")
        self.text = text
        self.position = position


class Operation(enum.IntEnum):
    """Binary operators understood by the expression evaluator."""

    INVALID = 0
    ADD = 1
    SUB = 2
    DIV = 3
    MUL = 4
    MOD = 5


_SYMBOLS = {
    "+": Operation.ADD,
    "-": Operation.SUB,
    "/": Operation.DIV,
    "*": Operation.MUL,
    "%": Operation.MOD,
}


def _apply(operation: Operation, left: int, right: int) -> int:
    if operation is Operation.ADD:
        return (left + right) & _SIZE_MASK
    if operation is Operation.SUB:
        return (left - right) & _SIZE_MASK
    if operation is Operation.DIV:
        return left // right
    if operation is Operation.MUL:
        return (left * right) & _SIZE_MASK
    if operation is Operation.MOD:
        return left % right
    return 0


@dataclass
class OperationPrimitive:
    """A node of an expression tree.

    A node with an ``operation`` is a binary operation; otherwise a node
    with a ``value`` is a literal; a node with neither evaluates to 0.
    """

    value: Optional[int] = None
    operation: Optional[Operation] = None
    left: Optional[OperationPrimitive] = None
    right: Optional[OperationPrimitive] = None

    def evaluate(self) -> int:
        """Evaluate the tree rooted at this node."""
        if self.operation is not None:
            lhs = self.left.evaluate() if self.left is not None else 0
            rhs = self.right.evaluate() if self.right is not None else 0
            return _apply(self.operation, lhs, rhs)
        if self.value is not None:
            return self.value & _SIZE_MASK
        return 0

    @staticmethod
    def parse_operator(symbol: str, left: Optional[OperationPrimitive]) -> OperationPrimitive:
        """Build an operation node for ``symbol``; unknown symbols give INVALID."""
        return OperationPrimitive(
            operation=_SYMBOLS.get(symbol, Operation.INVALID), left=left
        )


def find_ending_parens(text: str, start: int) -> int:
    """Return the index of the ``)`` closing a group opened just before ``start``.

    Returns -1 when no matching parenthesis exists.
    """
    pos = start
    end = text.find(")", pos)
    depth = 1
    while 0 < end < len(text) and depth > 0:
        depth = text.count("(", pos, end)
        for i in range(depth):
            if not 0 < end < len(text):
                break
            if i == depth - 1:
                pos = end + 1
            end = text.find(")", end + 1)
    return end


def resolve_variable(name: str, variables: Mapping[str, int]) -> OperationPrimitive:
    """Return a literal node holding the variable's value, 0 if it is unknown."""
    return OperationPrimitive(value=variables.get(name, 0))


def resolve_arithmetic(
    text: str, variables: Mapping[str, int]
) -> Optional[OperationPrimitive]:
    """Parse ``text`` into an expression tree; ``None`` for an empty expression."""
    lhs: Optional[OperationPrimitive] = None
    n = 0
    length = len(text)
    while n < length:
        c = text[n]
        if c in _DIGITS:
            end = n
            while end < length and text[end] in _DIGITS:
                end += 1
            lhs = OperationPrimitive(value=int(text[n:end]))
            n = end
        elif c == "(":
            end = find_ending_parens(text, n + 1)
            if not 0 <= end < length:
                raise ExpressionSyntaxError("syntax error in arithmetic", text, n)
            lhs = resolve_arithmetic(text[n + 1:end], variables)
            n = end + 1
        elif c == "{":
            end = text.find("}", n)
            if end < 0:
                raise ExpressionSyntaxError("syntax error in variable name", text, n)
            lhs = resolve_variable(text[n + 1:end], variables)
            n = end + 1
        else:
            op = OperationPrimitive.parse_operator(c, lhs)
            op.right = resolve_arithmetic(text[n + 1:], variables)
            return op
    return lhs