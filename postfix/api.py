from __future__ import annotations

from pathlib import Path

from postfix.ast import Arg, Program
from postfix.codegen import generate_nasm
from postfix.config import PostfixSettings
from postfix.errors import SourceError
from postfix.interpreter import interpret
from postfix.parser import parse_program
from postfix.schemas import RunReport


def load_source(path: Path) -> str:
    try:
        return Path(path).read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        raise SourceError(f"cannot read {path}: {e}") from e


def parse_source(src: str) -> Program:
    return parse_program(src)


def run_source(*, src: str, settings: PostfixSettings | None = None) -> tuple[Arg, ...]:
    program = parse_program(src)
    return interpret(program, settings)


def compile_source(*, src: str, settings: PostfixSettings | None = None) -> str:
    program = parse_program(src)
    return generate_nasm(program, settings)


def report_source(*, src: str, settings: PostfixSettings | None = None) -> RunReport:
    program = parse_program(src)
    return RunReport.from_run(program, interpret(program, settings))


def report_file(path: Path, *, settings: PostfixSettings | None = None) -> RunReport:
    return report_source(src=load_source(path), settings=settings)


def run_file(path: Path, *, settings: PostfixSettings | None = None) -> tuple[Arg, ...]:
    return run_source(src=load_source(path), settings=settings)


def compile_file(
    path: Path,
    *,
    out: Path | None = None,
    settings: PostfixSettings | None = None,
) -> Path:
    asm = compile_source(src=load_source(path), settings=settings)
    out_path = Path(out) if out is not None else Path(path).with_suffix(".asm")
    try:
        out_path.write_text(asm, encoding="utf-8")
    except OSError as e:
        raise SourceError(f"cannot write {out_path}: {e}") from e
    return out_path
