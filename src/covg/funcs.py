"""
Function extents of Go source files.

Provides:
- FuncExtent: name and span of one top-level `func` declaration.
- find_funcs: read a Go file and list its function extents in source order.
- scan_funcs: same, on source text.

Positions follow the Go toolchain: lines and columns are 1-based and columns
count bytes. A function starts at its `func` keyword and ends one column past
the closing brace of its body. Function literals belong to the declaration
that contains them.
"""

from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass
from pathlib import Path
from typing import Final

from .errors import SourceParseError

_OPENERS: Final[dict[str, str]] = {"(": ")", "[": "]", "{": "}"}
_CLOSERS: Final[frozenset[str]] = frozenset(_OPENERS.values())
_SPACES: Final[frozenset[str]] = frozenset(" \t\r\ufeff")


@dataclass(frozen=True, slots=True)
class FuncExtent:
    name: str
    start_line: int
    start_col: int
    end_line: int
    end_col: int


@dataclass(frozen=True, slots=True)
class _Token:
    kind: str  # ident, lit, punct, newline
    text: str
    line: int
    col: int
    end_line: int
    end_col: int


def _width(s: str) -> int:
    return len(s.encode("utf-8"))


def _tokenize(src: str, source: str) -> Iterator[_Token]:
    i = 0
    n = len(src)
    line = col = 1

    def fail(msg: str) -> SourceParseError:
        return SourceParseError(f"{source}:{line}:{col}: {msg}")

    while i < n:
        ch = src[i]

        if ch == "\n":
            yield _Token("newline", ch, line, col, line, col + 1)
            i += 1
            line += 1
            col = 1
            continue

        if ch in _SPACES:
            i += 1
            col += _width(ch)
            continue

        if src.startswith("//", i):
            end = src.find("\n", i)
            end = n if end == -1 else end
            col += _width(src[i:end])
            i = end
            continue

        if src.startswith("/*", i):
            end = src.find("*/", i + 2)
            if end == -1:
                raise fail("comment not terminated")
            text = src[i : end + 2]
            start_line, start_col = line, col
            nl = text.count("\n")
            if nl:
                line += nl
                col = 1 + _width(text[text.rfind("\n") + 1 :])
                # A comment spanning lines acts like a newline.
                yield _Token("newline", "\n", start_line, start_col, line, col)
            else:
                col += _width(text)
            i = end + 2
            continue

        if ch == "`":
            end = src.find("`", i + 1)
            if end == -1:
                raise fail("raw string literal not terminated")
            text = src[i : end + 1]
            start_line, start_col = line, col
            nl = text.count("\n")
            if nl:
                line += nl
                col = 1 + _width(text[text.rfind("\n") + 1 :])
            else:
                col += _width(text)
            yield _Token("lit", text, start_line, start_col, line, col)
            i = end + 1
            continue

        if ch in {'"', "'"}:
            j = i + 1
            while j < n and src[j] != ch:
                if src[j] == "\n":
                    raise fail("string literal not terminated")
                j += 2 if src[j] == "\\" else 1
            if j >= n:
                raise fail("string literal not terminated")
            text = src[i : j + 1]
            w = _width(text)
            yield _Token("lit", text, line, col, line, col + w)
            col += w
            i = j + 1
            continue

        if ch.isalpha() or ch == "_":
            j = i + 1
            while j < n and (src[j].isalnum() or src[j] == "_"):
                j += 1
            text = src[i:j]
            w = _width(text)
            yield _Token("ident", text, line, col, line, col + w)
            col += w
            i = j
            continue

        if ch.isdigit() or (ch == "." and i + 1 < n and src[i + 1].isdigit()):
            j = i + 1
            while j < n and (src[j].isalnum() or src[j] in "_."):
                j += 1
            text = src[i:j]
            w = _width(text)
            yield _Token("lit", text, line, col, line, col + w)
            col += w
            i = j
            continue

        w = _width(ch)
        yield _Token("punct", ch, line, col, line, col + w)
        col += w
        i += 1


class _Scanner:
    def __init__(self, tokens: list[_Token], source: str) -> None:
        self._tokens = tokens
        self._source = source
        self._pos = 0

    def _error(self, msg: str, tok: _Token | None = None) -> SourceParseError:
        if tok is None:
            return SourceParseError(f"{self._source}: {msg}")
        return SourceParseError(f"{self._source}:{tok.line}:{tok.col}: {msg}")

    def _peek(self) -> _Token | None:
        pos = self._pos
        while pos < len(self._tokens):
            if self._tokens[pos].kind != "newline":
                return self._tokens[pos]
            pos += 1
        return None

    def _next(self, *, skip_newlines: bool = True) -> _Token | None:
        while self._pos < len(self._tokens):
            tok = self._tokens[self._pos]
            self._pos += 1
            if not (skip_newlines and tok.kind == "newline"):
                return tok
        return None

    def _skip_balanced(self, opener: _Token) -> _Token:
        """Consume tokens up to the bracket matching `opener`; return the closing token."""
        stack = [_OPENERS[opener.text]]
        while True:
            tok = self._next()
            if tok is None:
                raise self._error(f"unbalanced {opener.text!r}", opener)
            if tok.kind != "punct":
                continue
            if tok.text in _OPENERS:
                stack.append(_OPENERS[tok.text])
            elif tok.text in _CLOSERS:
                if tok.text != stack[-1]:
                    raise self._error(f"unexpected {tok.text!r}", tok)
                stack.pop()
                if not stack:
                    return tok

    def funcs(self) -> list[FuncExtent]:
        out: list[FuncExtent] = []
        line_start = True
        while True:
            tok = self._next(skip_newlines=False)
            if tok is None:
                return out
            if tok.kind == "newline" or tok.text == ";":
                line_start = True
                continue
            if line_start and tok.kind == "ident" and tok.text == "func":
                out.append(self._func_decl(tok))
                line_start = False
                continue
            line_start = False
            if tok.kind == "punct":
                if tok.text in _OPENERS:
                    self._skip_balanced(tok)
                elif tok.text in _CLOSERS:
                    raise self._error(f"unexpected {tok.text!r}", tok)

    def _func_decl(self, func_tok: _Token) -> FuncExtent:
        tok = self._next()
        if tok is not None and tok.text == "(":
            # Method receiver.
            self._skip_balanced(tok)
            tok = self._next()
        if tok is None or tok.kind != "ident":
            raise self._error("expected function name", tok or func_tok)
        name = tok.text

        nxt = self._peek()
        if nxt is not None and nxt.text == "[":
            # Type parameters.
            self._next()
            self._skip_balanced(nxt)

        params = self._next()
        if params is None or params.text != "(":
            raise self._error(f"expected parameters of {name}", params or tok)
        last = self._skip_balanced(params)

        # Results, then either the body or the end of a body-less declaration.
        while True:
            tok = self._next(skip_newlines=False)
            if tok is None or tok.kind == "newline" or tok.text == ";":
                if tok is not None:
                    self._pos -= 1
                return FuncExtent(name, func_tok.line, func_tok.col, last.end_line, last.end_col)
            if tok.text == "{" and not (
                last.kind == "ident" and last.text in {"interface", "struct"}
            ):
                close = self._skip_balanced(tok)
                return FuncExtent(name, func_tok.line, func_tok.col, close.end_line, close.end_col)
            if tok.kind == "punct" and tok.text in _CLOSERS:
                raise self._error(f"unexpected {tok.text!r}", tok)
            last = self._skip_balanced(tok) if tok.text in _OPENERS else tok


def scan_funcs(src: str, *, source: str = "<source>") -> list[FuncExtent]:
    """List the top-level functions of Go source text, in source order."""
    tokens = list(_tokenize(src, source))
    return _Scanner(tokens, source).funcs()


def find_funcs(path: Path) -> list[FuncExtent]:
    """List the top-level functions of a Go file, in source order."""
    try:
        src = path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        raise SourceParseError(f"cannot read {path}: {e}") from e
    return scan_funcs(src, source=str(path))
