from __future__ import annotations

from pathlib import Path

import pytest

from postfix import ast
from postfix.api import compile_file, load_source, report_source, run_file
from postfix.errors import PostfixSyntaxError, SourceError
from postfix.parser import parse_program
from postfix.schemas import RunReport


def test_run_file(tmp_path: Path) -> None:
    p = tmp_path / "prog.pf"
    p.write_text("(postfix 1 ; doubles its argument\n  2 mul) 21\n", encoding="utf-8")
    assert run_file(p) == (ast.Lit(42),)


def test_missing_file_is_source_error(tmp_path: Path) -> None:
    with pytest.raises(SourceError, match="cannot read"):
        load_source(tmp_path / "nope.pf")


def test_undecodable_file_is_source_error(tmp_path: Path) -> None:
    p = tmp_path / "bad.pf"
    p.write_bytes(b"\xff\xfe(postfix 0)")
    with pytest.raises(SourceError):
        load_source(p)


def test_compile_file_writes_asm_next_to_source(tmp_path: Path) -> None:
    p = tmp_path / "prog.pf"
    p.write_text("(postfix 0 1 2 add)", encoding="utf-8")
    out = compile_file(p)
    assert out == tmp_path / "prog.asm"
    assert "global _start" in out.read_text(encoding="utf-8")


def test_compile_file_stops_on_syntax_error(tmp_path: Path) -> None:
    p = tmp_path / "prog.pf"
    p.write_text("(postfix 0 frob)", encoding="utf-8")
    with pytest.raises(PostfixSyntaxError):
        compile_file(p)
    assert not (tmp_path / "prog.asm").exists()


def test_run_report() -> None:
    program = parse_program("(postfix 1 (1 add)) 4")
    stack = (ast.Lit(4), ast.Quote(program.body[0].cmds))
    report = RunReport.from_run(program, stack)
    assert report.program == "(postfix 1 (1 add)) 4"
    assert report.arity == 1
    assert [v.kind for v in report.stack] == ["lit", "quote"]
    assert report.top is not None and report.top.source == "(1 add)"
    assert report.render() == "4 (1 add)"
    assert RunReport.model_validate_json(report.model_dump_json()) == report


def test_run_report_empty_stack() -> None:
    report = RunReport.from_run(parse_program("(postfix 0)"), ())
    assert report.top is None
    assert report.render() == ""


@pytest.mark.parametrize("name, top", [("arith.pf", 15), ("conditional.pf", 1)])
def test_bundled_example_programs(name: str, top: int) -> None:
    path = Path(__file__).resolve().parents[1] / "examples" / name
    assert run_file(path)[-1] == ast.Lit(top)


def test_report_source_exposes_final_stack() -> None:
    report = report_source(src="(postfix 1 (2 mul) exec (3)) 5")
    assert report.program == "(postfix 1 (2 mul) exec (3)) 5"
    assert report.arity == 1
    assert [(v.kind, v.value) for v in report.stack] == [("lit", 10), ("quote", None)]
    assert report.top is not None and report.top.source == "(3)"
    assert '"kind":"lit"' in report.model_dump_json()
