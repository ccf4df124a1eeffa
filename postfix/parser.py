from __future__ import annotations

import re
from collections.abc import Callable, Sequence

from postfix import ast
from postfix.errors import PostfixSyntaxError
from postfix.lexer import EOF, LPAREN, RPAREN, WORD, Token, tokenize

HEADER = "postfix"

_INT_RE = re.compile(r"[+-]?[0-9]+")
_UINT_RE = re.compile(r"\+?[0-9]+")

WORDS: dict[str, Callable[[ast.Span], ast.Cmd]] = {
    "pop": lambda span: ast.Pop(span=span),
    "swap": lambda span: ast.Swap(span=span),
    "sel": lambda span: ast.Sel(span=span),
    "gt": lambda span: ast.Cmp(ast.CmpOp.GT, span=span),
    ">": lambda span: ast.Cmp(ast.CmpOp.GT, span=span),
    "lt": lambda span: ast.Cmp(ast.CmpOp.LT, span=span),
    "<": lambda span: ast.Cmp(ast.CmpOp.LT, span=span),
    "eq": lambda span: ast.Cmp(ast.CmpOp.EQ, span=span),
    "==": lambda span: ast.Cmp(ast.CmpOp.EQ, span=span),
    "add": lambda span: ast.Math(ast.MathOp.ADD, span=span),
    "+": lambda span: ast.Math(ast.MathOp.ADD, span=span),
    "sub": lambda span: ast.Math(ast.MathOp.SUB, span=span),
    "-": lambda span: ast.Math(ast.MathOp.SUB, span=span),
    "mul": lambda span: ast.Math(ast.MathOp.MUL, span=span),
    "*": lambda span: ast.Math(ast.MathOp.MUL, span=span),
    "div": lambda span: ast.Math(ast.MathOp.DIV, span=span),
    "/": lambda span: ast.Math(ast.MathOp.DIV, span=span),
    "rem": lambda span: ast.Math(ast.MathOp.REM, span=span),
    "%": lambda span: ast.Math(ast.MathOp.REM, span=span),
    "exec": lambda span: ast.Exec(span=span),
    "nget": lambda span: ast.Nget(span=span),
    "skip": lambda span: ast.Skip(span=span),
}


def parse_int(text: str) -> int | None:
    if _INT_RE.fullmatch(text) is None:
        return None
    return int(text)


class Parser:
    """Parser over an immutable token list.

    The cursor is a plain index into ``tokens``; nested sequences share the
    same cursor rather than re-slicing the input.
    """

    def __init__(self, tokens: Sequence[Token]) -> None:
        if not tokens or tokens[-1].kind != EOF:
            tokens = [*tokens, Token(EOF, "", 0, 0)]
        self.tokens = tuple(tokens)
        self.pos = 0

    def peek(self) -> Token:
        return self.tokens[self.pos]

    def advance(self) -> Token:
        tok = self.tokens[self.pos]
        if tok.kind != EOF:
            self.pos += 1
        return tok

    def error(self, message: str, tok: Token | None = None) -> PostfixSyntaxError:
        tok = tok or self.peek()
        if tok.line <= 0:
            return PostfixSyntaxError(message)
        return PostfixSyntaxError(message, line=tok.line, col=tok.col)

    def expect(self, kind: str, message: str) -> Token:
        tok = self.peek()
        if tok.kind != kind:
            raise self.error(message, tok)
        return self.advance()

    def parse_program(self) -> ast.Program:
        self.expect(LPAREN, "invalid postfix program: expected '('")
        header = self.peek()
        if header.kind != WORD or header.text != HEADER:
            raise self.error(f"invalid postfix program: expected '{HEADER}' header", header)
        self.advance()

        arity = self.parse_arity()
        body = self.parse_seq()
        self.expect(RPAREN, "invalid command sequence: missing ')'")
        stack = self.parse_arguments(arity)

        tok = self.peek()
        if tok.kind != EOF:
            raise self.error(f"unexpected trailing token {tok.text!r}", tok)
        return ast.Program(declared_arity=arity, initial_stack=stack, body=body)

    def parse_arity(self) -> int:
        tok = self.peek()
        if tok.kind != WORD or _UINT_RE.fullmatch(tok.text) is None:
            raise self.error("number of program arguments not specified", tok)
        self.advance()
        return int(tok.text)

    def parse_seq(self) -> tuple[ast.Cmd, ...]:
        """Parse commands up to (not including) the `)` closing this sequence.

        Nested sequences are tracked as `(opening token, commands)` frames,
        so nesting depth is limited only by memory.
        """
        frames: list[tuple[Token | None, list[ast.Cmd]]] = [(None, [])]
        while True:
            tok = self.peek()
            if tok.kind == EOF:
                raise self.error("invalid command sequence: missing ')'", tok)
            if tok.kind == RPAREN:
                opener, cmds = frames[-1]
                if opener is None:
                    return tuple(cmds)
                self.advance()
                frames.pop()
                frames[-1][1].append(ast.Seq(tuple(cmds), span=ast.Span(opener.line, opener.col)))
                continue
            if tok.kind == LPAREN:
                frames.append((self.advance(), []))
                continue
            frames[-1][1].append(self.parse_cmd(self.advance()))

    def parse_cmd(self, tok: Token) -> ast.Cmd:
        span = ast.Span(tok.line, tok.col)
        make = WORDS.get(tok.text)
        if make is not None:
            return make(span)
        value = parse_int(tok.text)
        if value is None:
            raise self.error(f"invalid command {tok.text!r}", tok)
        return ast.IntLit(value, span=span)

    def parse_arguments(self, arity: int) -> tuple[ast.Lit, ...]:
        stack: list[ast.Lit] = []
        for _ in range(arity):
            tok = self.peek()
            if tok.kind == EOF:
                raise self.error(
                    f"missing program arguments: expected {arity}, found {len(stack)}", tok
                )
            value = parse_int(tok.text) if tok.kind == WORD else None
            if value is None:
                raise self.error(f"invalid program argument {tok.text!r}", tok)
            self.advance()
            stack.append(ast.Lit(value))
        return tuple(stack)


def parse_tokens(tokens: Sequence[Token]) -> ast.Program:
    return Parser(tokens).parse_program()


def parse_program(src: str) -> ast.Program:
    return parse_tokens(tokenize(src))
