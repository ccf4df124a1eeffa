from __future__ import annotations

from collections.abc import Iterable, Iterator

from postfix import ast
from postfix.parser import HEADER

_WORDS: dict[type, str] = {
    ast.Pop: "pop",
    ast.Swap: "swap",
    ast.Exec: "exec",
    ast.Nget: "nget",
    ast.Sel: "sel",
    ast.Skip: "skip",
}


def to_source(program: ast.Program) -> str:
    parts = ["(", HEADER, " ", str(program.declared_arity)]
    body = format_cmds(program.body)
    if body:
        parts.append(" " + body)
    parts.append(")")
    for arg in program.initial_stack:
        parts.append(" " + str(arg.value))
    return "".join(parts)


def _words(cmds: Iterable[ast.Cmd]) -> Iterator[str]:
    # Explicit iterator stack; nesting depth is not bounded by Python recursion.
    frames = [iter(cmds)]
    while frames:
        cmd = next(frames[-1], None)
        if cmd is None:
            frames.pop()
            if frames:
                yield ")"
            continue
        if isinstance(cmd, ast.Seq):
            yield "("
            frames.append(iter(cmd.cmds))
            continue
        yield _word(cmd)


def _word(cmd: ast.Cmd) -> str:
    if isinstance(cmd, ast.IntLit):
        return str(cmd.value)
    if isinstance(cmd, (ast.Math, ast.Cmp)):
        return cmd.op.value
    word = _WORDS.get(type(cmd))
    if word is None:
        raise TypeError(f"unknown cmd: {type(cmd).__name__}")
    return word


def format_cmds(cmds: Iterable[ast.Cmd]) -> str:
    parts: list[str] = []
    prev = "("
    for word in _words(cmds):
        if prev != "(" and word != ")":
            parts.append(" ")
        parts.append(word)
        prev = word
    return "".join(parts)


def format_cmd(cmd: ast.Cmd) -> str:
    return format_cmds((cmd,))


def format_arg(arg: ast.Arg) -> str:
    if isinstance(arg, ast.Lit):
        return str(arg.value)
    if isinstance(arg, ast.Quote):
        return f"({format_cmds(arg.cmds)})"
    raise TypeError(f"unknown arg: {type(arg).__name__}")
