from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum


@dataclass(frozen=True, slots=True)
class Span:
    line: int
    col: int


class MathOp(str, Enum):
    ADD = "add"
    SUB = "sub"
    MUL = "mul"
    DIV = "div"
    REM = "rem"


class CmpOp(str, Enum):
    GT = "gt"
    LT = "lt"
    EQ = "eq"


class Cmd:
    span: Span | None


@dataclass(frozen=True, slots=True)
class IntLit(Cmd):
    value: int
    span: Span | None = field(default=None, compare=False, repr=False)


@dataclass(frozen=True, slots=True)
class Pop(Cmd):
    span: Span | None = field(default=None, compare=False, repr=False)


@dataclass(frozen=True, slots=True)
class Swap(Cmd):
    span: Span | None = field(default=None, compare=False, repr=False)


@dataclass(frozen=True, slots=True)
class Math(Cmd):
    op: MathOp
    span: Span | None = field(default=None, compare=False, repr=False)


@dataclass(frozen=True, slots=True)
class Cmp(Cmd):
    op: CmpOp
    span: Span | None = field(default=None, compare=False, repr=False)


@dataclass(frozen=True, slots=True)
class Exec(Cmd):
    span: Span | None = field(default=None, compare=False, repr=False)


@dataclass(frozen=True, slots=True)
class Nget(Cmd):
    span: Span | None = field(default=None, compare=False, repr=False)


@dataclass(frozen=True, slots=True)
class Sel(Cmd):
    span: Span | None = field(default=None, compare=False, repr=False)


@dataclass(frozen=True, slots=True)
class Skip(Cmd):
    span: Span | None = field(default=None, compare=False, repr=False)


@dataclass(frozen=True, slots=True)
class Seq(Cmd):
    cmds: tuple[Cmd, ...]
    span: Span | None = field(default=None, compare=False, repr=False)


class Arg:
    pass


@dataclass(frozen=True, slots=True)
class Lit(Arg):
    value: int


@dataclass(frozen=True, slots=True)
class Quote(Arg):
    """A quotation: an unexecuted command sequence living on the stack."""

    cmds: tuple[Cmd, ...]


@dataclass(frozen=True, slots=True)
class Program:
    declared_arity: int
    initial_stack: tuple[Lit, ...]
    body: tuple[Cmd, ...]
