from __future__ import annotations

from dataclasses import dataclass

LPAREN = "LPAREN"
RPAREN = "RPAREN"
WORD = "WORD"
EOF = "EOF"

_WHITESPACE = " \t\r\n\f\v"


@dataclass(frozen=True, slots=True)
class Token:
    kind: str
    text: str
    line: int
    col: int


def tokenize(src: str) -> list[Token]:
    """Split source on whitespace, always isolating `(` and `)`.

    A `;` starts a comment that runs to the end of the line.
    """
    tokens: list[Token] = []
    i = 0
    n = len(src)
    line = 1
    line_start = 0

    while i < n:
        ch = src[i]
        if ch == "\n":
            i += 1
            line += 1
            line_start = i
            continue
        if ch in _WHITESPACE:
            i += 1
            continue
        if ch == ";":
            while i < n and src[i] != "\n":
                i += 1
            continue

        col = i - line_start + 1
        if ch == "(":
            tokens.append(Token(LPAREN, ch, line, col))
            i += 1
            continue
        if ch == ")":
            tokens.append(Token(RPAREN, ch, line, col))
            i += 1
            continue

        j = i
        while j < n and src[j] not in _WHITESPACE and src[j] not in "();":
            j += 1
        tokens.append(Token(WORD, src[i:j], line, col))
        i = j

    tokens.append(Token(EOF, "", line, n - line_start + 1))
    return tokens
