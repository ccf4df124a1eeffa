from __future__ import annotations

from postfix.api import (
    compile_file,
    compile_source,
    load_source,
    parse_source,
    report_file,
    report_source,
    run_file,
    run_source,
)
from postfix.codegen import CodeGenerator, generate_nasm
from postfix.config import PostfixSettings, load_settings
from postfix.errors import (
    CodegenError,
    FaultKind,
    PostfixError,
    PostfixSyntaxError,
    RuntimeFault,
    SourceError,
)
from postfix.interpreter import Interpreter, interpret
from postfix.parser import parse_program
from postfix.schemas import RunReport, StackValue
from postfix.unparse import to_source

__all__ = [
    "CodeGenerator",
    "CodegenError",
    "FaultKind",
    "Interpreter",
    "PostfixError",
    "PostfixSettings",
    "PostfixSyntaxError",
    "RunReport",
    "RuntimeFault",
    "SourceError",
    "StackValue",
    "compile_file",
    "compile_source",
    "generate_nasm",
    "interpret",
    "load_settings",
    "load_source",
    "parse_program",
    "parse_source",
    "report_file",
    "report_source",
    "run_file",
    "run_source",
    "to_source",
]
