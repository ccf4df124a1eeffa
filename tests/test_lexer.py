from __future__ import annotations

from postfix.lexer import EOF, LPAREN, RPAREN, WORD, tokenize


def _texts(src: str) -> list[str]:
    return [t.text for t in tokenize(src) if t.kind != EOF]


def test_parens_are_isolated_tokens() -> None:
    assert _texts("(add)") == ["(", "add", ")"]
    assert _texts("(postfix 0 (1 add)exec)") == [
        "(",
        "postfix",
        "0",
        "(",
        "1",
        "add",
        ")",
        "exec",
        ")",
    ]


def test_kinds_and_trailing_eof() -> None:
    toks = tokenize("( swap )")
    assert [t.kind for t in toks] == [LPAREN, WORD, RPAREN, EOF]


def test_whitespace_variants_split_words() -> None:
    assert _texts("1\t2\r\n  3\n") == ["1", "2", "3"]


def test_locations_are_one_based() -> None:
    toks = tokenize("(postfix 0\n  swap)")
    swap = next(t for t in toks if t.text == "swap")
    assert (swap.line, swap.col) == (2, 3)


def test_comments_run_to_end_of_line() -> None:
    src = "(postfix 0 ; header\n 1 2 add) ; trailing\n"
    assert _texts(src) == ["(", "postfix", "0", "1", "2", "add", ")"]


def test_empty_source_is_only_eof() -> None:
    toks = tokenize("   \n ")
    assert len(toks) == 1
    assert toks[0].kind == EOF
