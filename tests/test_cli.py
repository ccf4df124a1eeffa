from __future__ import annotations

import os
import subprocess
import sys
from pathlib import Path

import pytest

from postfix import cli

PROJECT_ROOT = Path(__file__).resolve().parents[1]


def _run(args: list[str], *, cwd: Path) -> subprocess.CompletedProcess[str]:
    env = dict(os.environ)
    env["PYTHONPATH"] = str(PROJECT_ROOT) + os.pathsep + env.get("PYTHONPATH", "")
    return subprocess.run(
        [sys.executable, "-m", "postfix", *args],
        cwd=cwd,
        env=env,
        text=True,
        capture_output=True,
        check=False,
    )


def test_cli_run(tmp_path: Path) -> None:
    p = tmp_path / "prog.pf"
    p.write_text("(postfix 0 2 (1 add) exec)\n", encoding="utf-8")
    proc = _run([str(p)], cwd=tmp_path)
    assert proc.returncode == 0, proc.stderr
    assert proc.stdout.strip() == "3"


def test_cli_runtime_fault_exits_nonzero(tmp_path: Path) -> None:
    p = tmp_path / "prog.pf"
    p.write_text("(postfix 0 add)\n", encoding="utf-8")
    proc = _run([str(p)], cwd=tmp_path)
    assert proc.returncode == 1
    lines = proc.stderr.strip().splitlines()
    assert len(lines) == 1
    assert lines[0].startswith("postfix: line 1 col 12: stack_underflow")


def test_cli_deeply_nested_program(tmp_path: Path) -> None:
    depth = 4000
    p = tmp_path / "deep.pf"
    p.write_text("(postfix 0 " + "(" * depth + "1" + ")" * depth + " exec)\n", encoding="utf-8")
    proc = _run([str(p)], cwd=tmp_path)
    assert proc.returncode == 0, proc.stderr
    assert proc.stdout.strip() == "(" * (depth - 1) + "1" + ")" * (depth - 1)


def test_main_prints_final_stack(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    p = tmp_path / "prog.pf"
    p.write_text("(postfix 2 (swap)) 1 2", encoding="utf-8")
    assert cli.main([str(p)]) == 0
    assert capsys.readouterr().out.strip() == "1 2 (swap)"


def test_main_syntax_error(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    p = tmp_path / "prog.pf"
    p.write_text("(postfix 1 add)", encoding="utf-8")
    assert cli.main([str(p)]) == 1
    err = capsys.readouterr().err
    assert err.startswith("postfix: ")
    assert "missing program arguments" in err


def test_main_missing_file(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    assert cli.main([str(tmp_path / "absent.pf")]) == 1
    assert "cannot read" in capsys.readouterr().err


def test_main_requires_path() -> None:
    with pytest.raises(SystemExit) as exc:
        cli.main([])
    assert exc.value.code == 2


def test_compile_main_writes_assembly(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    p = tmp_path / "prog.pf"
    p.write_text("(postfix 0 1 2 add)", encoding="utf-8")
    assert cli.compile_main([str(p)]) == 0
    out = Path(capsys.readouterr().out.strip())
    assert out == tmp_path / "prog.asm"
    assert out.read_text(encoding="utf-8").startswith("BITS 64\n")


def test_compile_main_bad_settings(
    tmp_path: Path, capsys: pytest.CaptureFixture[str], monkeypatch: pytest.MonkeyPatch
) -> None:
    monkeypatch.setenv("POSTFIX_MAX_DEPTH", "nope")
    p = tmp_path / "prog.pf"
    p.write_text("(postfix 0)", encoding="utf-8")
    assert cli.compile_main([str(p)]) == 1
    assert "postfixc: POSTFIX_MAX_DEPTH" in capsys.readouterr().err
