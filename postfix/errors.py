from __future__ import annotations

from enum import Enum


class PostfixError(Exception):
    def __init__(self, message: str, *, line: int | None = None, col: int | None = None) -> None:
        self.line = line
        self.col = col
        self.message = str(message)
        prefix = ""
        if line is not None and col is not None:
            prefix = f"line {line} col {col}: "
        super().__init__(prefix + self.message)


class PostfixSyntaxError(PostfixError):
    pass


class FaultKind(str, Enum):
    STACK_UNDERFLOW = "stack_underflow"
    TYPE_MISMATCH = "type_mismatch"
    DIVISION_BY_ZERO = "division_by_zero"
    INDEX_OUT_OF_RANGE = "index_out_of_range"
    DEPTH_EXCEEDED = "depth_exceeded"
    STEP_LIMIT = "step_limit"


class RuntimeFault(PostfixError):
    def __init__(
        self,
        kind: FaultKind,
        message: str,
        *,
        line: int | None = None,
        col: int | None = None,
    ) -> None:
        self.kind = kind
        super().__init__(f"{kind.value}: {message}", line=line, col=col)


class SourceError(PostfixError):
    pass


class CodegenError(PostfixError):
    pass
