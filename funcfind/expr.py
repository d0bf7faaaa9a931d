"""Expression tree model over the single free variable ``x``."""

from __future__ import annotations

from typing import Self

import numpy as np

from funcfind.kernels import (
    OP_ADD,
    OP_CONST,
    OP_COS,
    OP_EXP,
    OP_MUL,
    OP_POW,
    OP_SCALE,
    OP_SIN,
    OP_X,
    safe_cos,
    safe_exp,
    safe_pow,
    safe_sin,
)


class Node:
    """Base class for nodes in an expression tree.

    Trees are never modified after construction; the genetic operators always
    build new ones. Each compound node owns its children exclusively.
    """

    __slots__ = ()

    def evaluate(self, x: float) -> float:
        """Evaluate the subtree at ``x``. Never raises for finite input."""
        raise NotImplementedError

    def clone(self) -> Self:
        """Return a deep copy of the node."""
        raise NotImplementedError

    def children(self) -> tuple[Node, ...]:
        return ()

    def size(self) -> int:
        """Return the number of nodes in the subtree."""
        return 1 + sum(child.size() for child in self.children())

    def depth(self) -> int:
        children = self.children()
        if not children:
            return 0
        return 1 + max(child.depth() for child in children)

    def to_string(self) -> str:
        raise NotImplementedError

    def __str__(self) -> str:
        return self.to_string()

    def __repr__(self) -> str:
        return f"<{type(self).__name__} {self.to_string()}>"


class Const(Node):
    __slots__ = ("value",)

    def __init__(self, value: float) -> None:
        self.value = float(value)

    def evaluate(self, x: float) -> float:
        return self.value

    def clone(self) -> Self:
        return Const(self.value)

    def to_string(self) -> str:
        return f"{self.value:.3f}"


class Var(Node):
    __slots__ = ()

    def evaluate(self, x: float) -> float:
        return float(x)

    def clone(self) -> Self:
        return Var()

    def to_string(self) -> str:
        return "x"


class BinaryNode(Node):
    __slots__ = ("left", "right")

    def __init__(self, left: Node, right: Node) -> None:
        self.left = left
        self.right = right

    def clone(self) -> Self:
        return type(self)(self.left.clone(), self.right.clone())

    def children(self) -> tuple[Node, ...]:
        return (self.left, self.right)


class Add(BinaryNode):
    __slots__ = ()

    def evaluate(self, x: float) -> float:
        return self.left.evaluate(x) + self.right.evaluate(x)

    def to_string(self) -> str:
        return f"({self.left.to_string()}+{self.right.to_string()})"


class Mul(BinaryNode):
    __slots__ = ()

    def evaluate(self, x: float) -> float:
        return self.left.evaluate(x) * self.right.evaluate(x)

    def to_string(self) -> str:
        return f"({self.left.to_string()}*{self.right.to_string()})"


class UnaryNode(Node):
    __slots__ = ("child",)
    NAME = ""

    def __init__(self, child: Node) -> None:
        self.child = child

    def clone(self) -> Self:
        return type(self)(self.child.clone())

    def children(self) -> tuple[Node, ...]:
        return (self.child,)

    def to_string(self) -> str:
        return f"{self.NAME}({self.child.to_string()})"


class Sin(UnaryNode):
    __slots__ = ()
    NAME = "sin"

    def evaluate(self, x: float) -> float:
        return safe_sin(self.child.evaluate(x))


class Cos(UnaryNode):
    __slots__ = ()
    NAME = "cos"

    def evaluate(self, x: float) -> float:
        return safe_cos(self.child.evaluate(x))


class Exp(UnaryNode):
    __slots__ = ()
    NAME = "exp"

    def evaluate(self, x: float) -> float:
        return safe_exp(self.child.evaluate(x))


class Pow(Node):
    """Child raised to a fixed real exponent; negative bases use ``abs`` for
    fractional exponents."""

    __slots__ = ("child", "exponent")

    def __init__(self, child: Node, exponent: float) -> None:
        self.child = child
        self.exponent = float(exponent)

    def evaluate(self, x: float) -> float:
        return safe_pow(self.child.evaluate(x), self.exponent)

    def clone(self) -> Self:
        return Pow(self.child.clone(), self.exponent)

    def children(self) -> tuple[Node, ...]:
        return (self.child,)

    def to_string(self) -> str:
        return f"pow({self.child.to_string()}, {self.exponent:.3f})"


class Scale(Node):
    __slots__ = ("child", "factor")

    def __init__(self, child: Node, factor: float) -> None:
        self.child = child
        self.factor = float(factor)

    def evaluate(self, x: float) -> float:
        return self.child.evaluate(x) * self.factor

    def clone(self) -> Self:
        return Scale(self.child.clone(), self.factor)

    def children(self) -> tuple[Node, ...]:
        return (self.child,)

    def to_string(self) -> str:
        return f"({self.factor:.3f}*{self.child.to_string()})"


def compile_postfix(expr: Node) -> tuple[np.ndarray, np.ndarray]:
    """Flatten a tree into postfix ``(opcodes, operands)`` for the scoring kernel."""
    opcodes: list[int] = []
    operands: list[float] = []

    def emit(node: Node) -> None:
        match node:
            case Const(value=value):
                opcodes.append(int(OP_CONST))
                operands.append(value)
            case Var():
                opcodes.append(int(OP_X))
                operands.append(0.0)
            case Add(left=left, right=right):
                emit(left)
                emit(right)
                opcodes.append(int(OP_ADD))
                operands.append(0.0)
            case Mul(left=left, right=right):
                emit(left)
                emit(right)
                opcodes.append(int(OP_MUL))
                operands.append(0.0)
            case Sin(child=child):
                emit(child)
                opcodes.append(int(OP_SIN))
                operands.append(0.0)
            case Cos(child=child):
                emit(child)
                opcodes.append(int(OP_COS))
                operands.append(0.0)
            case Exp(child=child):
                emit(child)
                opcodes.append(int(OP_EXP))
                operands.append(0.0)
            case Pow(child=child, exponent=exponent):
                emit(child)
                opcodes.append(int(OP_POW))
                operands.append(exponent)
            case Scale(child=child, factor=factor):
                emit(child)
                opcodes.append(int(OP_SCALE))
                operands.append(factor)
            case _:
                raise TypeError(f"Unsupported node type: {type(node).__name__}")

    emit(expr)

    return (
        np.asarray(opcodes, dtype=np.int64),
        np.asarray(operands, dtype=np.float64),
    )
