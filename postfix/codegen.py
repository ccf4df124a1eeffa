from __future__ import annotations

import logging
from collections import deque
from collections.abc import Iterable

from postfix import ast
from postfix.config import PostfixSettings
from postfix.errors import CodegenError

LOGGER = logging.getLogger("postfix.codegen")

RET_STACK_CAPACITY = 64 * 1024
ENTRY_SYMBOL = "_start"

_INT_MIN = -(1 << 63)
_INT_MAX = (1 << 64) - 1

_MATH_OPS = {
    ast.MathOp.ADD: "add",
    ast.MathOp.SUB: "sub",
    ast.MathOp.MUL: "imul",
}

_CMOV = {
    ast.CmpOp.GT: "cmovg",
    ast.CmpOp.LT: "cmovl",
    ast.CmpOp.EQ: "cmove",
}


class CodeGenerator:
    """Lowers a parsed program to x86-64 NASM assembly for Linux.

    Every quotation becomes its own routine (`quot_N`). A quotation on the
    data stack is the address of that routine, and `exec` calls it. Return
    addresses live on a separate stack in `.bss` so the data stack stays
    free of them: `rsp` is swapped with `ret_stack_rsp` around each
    call and return.
    """

    def __init__(self, settings: PostfixSettings | None = None) -> None:
        self.settings = settings or PostfixSettings()
        self._out: list[str] = []
        self._pending: deque[tuple[str, tuple[ast.Cmd, ...]]] = deque()
        self._quote_count = 0

    def generate(self, program: ast.Program) -> str:
        self._out = []
        self._pending = deque()
        self._quote_count = 0

        self._prologue()
        if program.initial_stack:
            self._emit("    ;; -- program arguments --")
            for arg in program.initial_stack:
                self._push_imm(arg.value)
        self._lower_all(program.body)
        self._epilogue()

        while self._pending:
            label, cmds = self._pending.popleft()
            self._routine(label, cmds)

        self._bss()
        return "\n".join(self._out) + "\n"

    def _emit(self, *lines: str) -> None:
        self._out.extend(lines)

    def _prologue(self) -> None:
        self._emit(
            "BITS 64",
            "segment .text",
            f"global {ENTRY_SYMBOL}",
            f"{ENTRY_SYMBOL}:",
            "    mov rax, ret_stack_end",
            "    mov [ret_stack_rsp], rax",
        )

    def _epilogue(self) -> None:
        self._emit(
            "    ;; -- exit --",
            "    mov rax, 60",
            "    mov rdi, 0",
            "    syscall",
        )

    def _bss(self) -> None:
        self._emit(
            "segment .bss",
            "ret_stack_rsp: resq 1",
            f"ret_stack: resb {RET_STACK_CAPACITY}",
            "ret_stack_end:",
        )

    def _routine(self, label: str, cmds: tuple[ast.Cmd, ...]) -> None:
        self._emit(
            f"{label}:",
            "    mov [ret_stack_rsp], rsp",
            "    mov rsp, rax",
        )
        self._lower_all(cmds)
        self._emit(
            "    mov rax, rsp",
            "    mov rsp, [ret_stack_rsp]",
            "    ret",
        )

    def _lower_all(self, cmds: Iterable[ast.Cmd]) -> None:
        for cmd in cmds:
            self.lower(cmd)

    def _push_imm(self, value: int) -> None:
        if value < _INT_MIN or value > _INT_MAX:
            raise CodegenError(f"integer literal {value} does not fit in 64 bits")
        self._emit(
            f"    ;; -- push int {value} --",
            f"    mov rax, {value}",
            "    push rax",
        )

    def lower(self, cmd: ast.Cmd) -> None:
        if isinstance(cmd, ast.IntLit):
            try:
                self._push_imm(cmd.value)
            except CodegenError as e:
                span = cmd.span
                if span is None:
                    raise
                raise CodegenError(e.message, line=span.line, col=span.col) from None
        elif isinstance(cmd, ast.Seq):
            label = f"quot_{self._quote_count}"
            self._quote_count += 1
            self._pending.append((label, cmd.cmds))
            self._emit(
                f"    ;; -- push quotation {label} --",
                f"    mov rax, {label}",
                "    push rax",
            )
        elif isinstance(cmd, ast.Swap):
            self._emit(
                "    ;; -- swap --",
                "    mov rax, [rsp]",
                "    xchg rax, [rsp+8]",
                "    mov [rsp], rax",
            )
        elif isinstance(cmd, ast.Pop):
            self._emit(
                "    ;; -- pop --",
                "    add rsp, 8",
            )
        elif isinstance(cmd, ast.Skip):
            self._emit(
                "    ;; -- skip --",
                "    nop",
            )
        elif isinstance(cmd, ast.Math):
            self._lower_math(cmd.op)
        elif isinstance(cmd, ast.Cmp):
            self._emit(
                f"    ;; -- {cmd.op.value} --",
                "    mov rcx, 0",
                "    mov rdx, 1",
                "    pop rbx",
                "    pop rax",
                "    cmp rax, rbx",
                f"    {_CMOV[cmd.op]} rcx, rdx",
                "    push rcx",
            )
        elif isinstance(cmd, ast.Exec):
            self._emit(
                "    ;; -- exec --",
                "    pop rbx",
                "    mov rax, rsp",
                "    mov rsp, [ret_stack_rsp]",
                "    call rbx",
                "    mov [ret_stack_rsp], rsp",
                "    mov rsp, rax",
            )
        elif isinstance(cmd, (ast.Nget, ast.Sel)):
            self._placeholder(cmd)
        else:
            raise CodegenError(f"cannot lower {type(cmd).__name__}")

    def _lower_math(self, op: ast.MathOp) -> None:
        if op in (ast.MathOp.DIV, ast.MathOp.REM):
            self._emit(
                f"    ;; -- {op.value} --",
                "    xor rdx, rdx",
                "    pop rbx",
                "    pop rax",
                "    div rbx",
                "    push rax" if op == ast.MathOp.DIV else "    push rdx",
            )
            return
        self._emit(
            f"    ;; -- {op.value} --",
            "    pop rax",
            "    pop rbx",
            f"    {_MATH_OPS[op]} rbx, rax",
            "    push rbx",
        )

    def _placeholder(self, cmd: ast.Cmd) -> None:
        name = "nget" if isinstance(cmd, ast.Nget) else "sel"
        span = cmd.span
        where = f" at line {span.line} col {span.col}" if span is not None else ""
        if self.settings.strict_codegen:
            if span is None:
                raise CodegenError(f"{name} has no native lowering")
            raise CodegenError(f"{name} has no native lowering", line=span.line, col=span.col)
        LOGGER.warning("%s%s has no native lowering; emitting a placeholder", name, where)
        self._emit(
            f"    ;; -- {name} (unimplemented) --",
            "    nop",
        )


def generate_nasm(program: ast.Program, settings: PostfixSettings | None = None) -> str:
    return CodeGenerator(settings).generate(program)
