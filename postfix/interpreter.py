from __future__ import annotations

import logging
from collections.abc import Iterable
from dataclasses import dataclass

from postfix import ast
from postfix.config import PostfixSettings
from postfix.errors import FaultKind, RuntimeFault
from postfix.unparse import format_cmd

LOGGER = logging.getLogger("postfix.interpreter")

Stack = list[ast.Arg]


@dataclass(slots=True)
class _Frame:
    cmds: tuple[ast.Cmd, ...]
    pc: int = 0

    @property
    def done(self) -> bool:
        return self.pc >= len(self.cmds)


def _trunc_div(a: int, b: int) -> int:
    q = abs(a) // abs(b)
    return q if (a < 0) == (b < 0) else -q


def _trunc_rem(a: int, b: int) -> int:
    return a - b * _trunc_div(a, b)


_MATH = {
    ast.MathOp.ADD: lambda a, b: a + b,
    ast.MathOp.SUB: lambda a, b: a - b,
    ast.MathOp.MUL: lambda a, b: a * b,
    ast.MathOp.DIV: _trunc_div,
    ast.MathOp.REM: _trunc_rem,
}

_CMP = {
    ast.CmpOp.GT: lambda a, b: a > b,
    ast.CmpOp.LT: lambda a, b: a < b,
    ast.CmpOp.EQ: lambda a, b: a == b,
}


class Interpreter:
    """Executes command sequences against a single shared value stack.

    `exec` inlines the popped quotation against the same stack. Frames are
    kept on an explicit list, so deep quotation recursion ends in a
    `depth_exceeded` fault instead of exhausting the Python stack. An `exec`
    in tail position reuses depth; `max_steps` bounds such loops.
    Every fault aborts the run.
    """

    def __init__(self, settings: PostfixSettings | None = None) -> None:
        self.settings = settings or PostfixSettings()

    def run(self, program: ast.Program) -> tuple[ast.Arg, ...]:
        stack: Stack = list(program.initial_stack)
        self.execute(program.body, stack)
        return tuple(stack)

    def execute(self, cmds: Iterable[ast.Cmd], stack: Stack) -> None:
        frames = [_Frame(tuple(cmds))]
        steps = 0
        max_steps = self.settings.max_steps
        while frames:
            frame = frames[-1]
            if frame.done:
                frames.pop()
                continue
            cmd = frame.cmds[frame.pc]
            frame.pc += 1
            steps += 1
            if max_steps is not None and steps > max_steps:
                raise self._fault(FaultKind.STEP_LIMIT, f"step limit {max_steps} exceeded", cmd)
            if LOGGER.isEnabledFor(logging.DEBUG):
                LOGGER.debug("depth=%d %s stack=%d", len(frames), format_cmd(cmd), len(stack))

            body = self.step(cmd, stack)
            if body is not None:
                # A finished frame has nothing left to return to; dropping it
                # keeps tail-position `exec` loops at constant depth.
                while frames and frames[-1].done:
                    frames.pop()
                if len(frames) >= self.settings.max_depth:
                    raise self._fault(
                        FaultKind.DEPTH_EXCEEDED,
                        f"exec nesting deeper than {self.settings.max_depth}",
                        cmd,
                    )
                frames.append(_Frame(body))

    def step(self, cmd: ast.Cmd, stack: Stack) -> tuple[ast.Cmd, ...] | None:
        """Apply one command; returns a quotation body when `cmd` is `exec`."""
        if isinstance(cmd, ast.IntLit):
            stack.append(ast.Lit(cmd.value))
        elif isinstance(cmd, ast.Seq):
            stack.append(ast.Quote(cmd.cmds))
        elif isinstance(cmd, ast.Math):
            self._need(stack, 2, cmd)
            a1 = self._pop_lit(stack, cmd)
            a2 = self._pop_lit(stack, cmd)
            if cmd.op in (ast.MathOp.DIV, ast.MathOp.REM) and a1 == 0:
                raise self._fault(FaultKind.DIVISION_BY_ZERO, f"{cmd.op.value} by zero", cmd)
            stack.append(ast.Lit(_MATH[cmd.op](a2, a1)))
        elif isinstance(cmd, ast.Cmp):
            self._need(stack, 2, cmd)
            a1 = self._pop_lit(stack, cmd)
            a2 = self._pop_lit(stack, cmd)
            stack.append(ast.Lit(1 if _CMP[cmd.op](a2, a1) else 0))
        elif isinstance(cmd, ast.Swap):
            self._need(stack, 2, cmd)
            stack[-1], stack[-2] = stack[-2], stack[-1]
        elif isinstance(cmd, ast.Pop):
            self._need(stack, 1, cmd)
            stack.pop()
        elif isinstance(cmd, ast.Skip):
            pass
        elif isinstance(cmd, ast.Exec):
            self._need(stack, 1, cmd)
            top = stack.pop()
            if not isinstance(top, ast.Quote):
                raise self._fault(FaultKind.TYPE_MISMATCH, "exec expects a quotation, found Lit", cmd)
            return top.cmds
        elif isinstance(cmd, ast.Nget):
            index = self._pop_lit(stack, cmd)
            if index < 1 or index > len(stack):
                raise self._fault(
                    FaultKind.INDEX_OUT_OF_RANGE,
                    f"nget index {index} outside 1..{len(stack)}",
                    cmd,
                )
            stack.append(stack[-index])
        elif isinstance(cmd, ast.Sel):
            self._need(stack, 3, cmd)
            if not isinstance(stack[-3], ast.Lit):
                raise self._fault(FaultKind.TYPE_MISMATCH, "sel selector must be Lit, found Seq", cmd)
            a1 = stack.pop()
            a2 = stack.pop()
            selector = stack.pop()
            stack.append(a1 if selector.value == 0 else a2)
        else:
            raise TypeError(f"unknown cmd: {type(cmd).__name__}")
        return None

    def _need(self, stack: Stack, n: int, cmd: ast.Cmd) -> None:
        if len(stack) < n:
            raise self._fault(
                FaultKind.STACK_UNDERFLOW,
                f"{format_cmd(cmd)} needs {n} value(s), stack has {len(stack)}",
                cmd,
            )

    def _pop_lit(self, stack: Stack, cmd: ast.Cmd) -> int:
        self._need(stack, 1, cmd)
        top = stack.pop()
        if not isinstance(top, ast.Lit):
            raise self._fault(
                FaultKind.TYPE_MISMATCH, f"{format_cmd(cmd)} expects Lit, found Seq", cmd
            )
        return top.value

    def _fault(self, kind: FaultKind, message: str, cmd: ast.Cmd) -> RuntimeFault:
        span = cmd.span
        LOGGER.debug("runtime fault (%s): %s", kind.value, message)
        if span is None:
            return RuntimeFault(kind, message)
        return RuntimeFault(kind, message, line=span.line, col=span.col)


def interpret(program: ast.Program, settings: PostfixSettings | None = None) -> tuple[ast.Arg, ...]:
    return Interpreter(settings).run(program)
