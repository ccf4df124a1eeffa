from __future__ import annotations

from collections.abc import Sequence
from typing import Literal

from pydantic import BaseModel, Field

from postfix import ast
from postfix.unparse import format_arg, to_source


class StackValue(BaseModel):
    kind: Literal["lit", "quote"]
    value: int | None = None
    source: str

    @classmethod
    def from_arg(cls, arg: ast.Arg) -> StackValue:
        if isinstance(arg, ast.Lit):
            return cls(kind="lit", value=arg.value, source=format_arg(arg))
        return cls(kind="quote", source=format_arg(arg))


class RunReport(BaseModel):
    program: str
    arity: int = Field(ge=0)
    stack: list[StackValue] = Field(default_factory=list)
    top: StackValue | None = None

    @classmethod
    def from_run(cls, program: ast.Program, stack: Sequence[ast.Arg]) -> RunReport:
        values = [StackValue.from_arg(arg) for arg in stack]
        return cls(
            program=to_source(program),
            arity=program.declared_arity,
            stack=values,
            top=values[-1] if values else None,
        )

    def render(self) -> str:
        return " ".join(v.source for v in self.stack)
