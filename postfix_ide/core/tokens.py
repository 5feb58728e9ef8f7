"""Token model and the PostFix tokenizer adapter used by analysis and debugging."""

from __future__ import annotations

import re
from dataclasses import dataclass
from enum import Enum
from typing import Iterable, Iterator

from postfix_ide.core.positions import Position


class TokenKind(str, Enum):
    REFERENCE = "REFERENCE"
    SYMBOL = "SYMBOL"
    NUMBER = "NUMBER"
    FLOAT = "FLOAT"
    STRING = "STRING"
    BOOLEAN = "BOOLEAN"
    NIL = "NIL"
    DEFINITION = "DEFINITION"
    PARAM_LIST_START = "PARAM_LIST_START"
    PARAM_LIST_END = "PARAM_LIST_END"
    RIGHT_ARROW = "RIGHT_ARROW"
    ARR_START = "ARR_START"
    ARR_END = "ARR_END"
    EXEARR_START = "EXEARR_START"
    EXEARR_END = "EXEARR_END"
    SEPARATOR = "SEPARATOR"
    INVALID = "INVALID"


OPENING_BRACKETS = {
    TokenKind.PARAM_LIST_START: TokenKind.PARAM_LIST_END,
    TokenKind.ARR_START: TokenKind.ARR_END,
    TokenKind.EXEARR_START: TokenKind.EXEARR_END,
}
CLOSING_BRACKETS = {closer: opener for opener, closer in OPENING_BRACKETS.items()}

_SINGLE_CHAR_KINDS = {
    "(": TokenKind.PARAM_LIST_START,
    ")": TokenKind.PARAM_LIST_END,
    "[": TokenKind.ARR_START,
    "]": TokenKind.ARR_END,
    "{": TokenKind.EXEARR_START,
    "}": TokenKind.EXEARR_END,
    ",": TokenKind.SEPARATOR,
}

_WHITESPACE_RE = re.compile(r"[ \t\r\n]+")
_WORD_RE = re.compile(r'[^\s"(),\[\]{}]+')
_FLOAT_RE = re.compile(r"-?\d+\.\d+(?:e[+-]?\d+)?|-?\d+e-\d+")
_INT_RE = re.compile(r"-?\d+(?:e\+?\d+)?")
_STRING_ESCAPES = {'"', "\\", "n", "r", "t"}


@dataclass(frozen=True, slots=True)
class Token:
    kind: TokenKind
    text: str
    line: int
    col: int
    end_col: int
    end_line: int = -1

    def __post_init__(self) -> None:
        if self.end_line < 0:
            object.__setattr__(self, "end_line", self.line)

    @property
    def start(self) -> Position:
        return Position(self.line, self.col)

    @property
    def end(self) -> Position:
        return Position(self.end_line, self.end_col)

    def covers(self, position: Position) -> bool:
        """True if ``position`` is on the token's first line, at or after its start and before its end."""
        if position.line != self.line:
            return False
        return self.col <= position.col < self._first_line_end()

    def touches_end(self, position: Position) -> bool:
        return position.line == self.line and position.col == self._first_line_end()

    def _first_line_end(self) -> int:
        return self.end_col if self.end_line == self.line else self.col + len(self.text)


class _Scanner:
    def __init__(self, source: str):
        self.text = source
        self.offset = 0
        self.line = 0
        self.line_start = 0

    @property
    def col(self) -> int:
        return self.offset - self.line_start

    def advance(self, count: int) -> None:
        end = min(len(self.text), self.offset + count)
        newline = self.text.rfind("\n", self.offset, end)
        if newline >= 0:
            self.line += self.text.count("\n", self.offset, end)
            self.line_start = newline + 1
        self.offset = end

    def startswith(self, prefix: str) -> bool:
        return self.text.startswith(prefix, self.offset)


@dataclass(frozen=True, slots=True)
class BlockComment:
    text: str  # between the outermost "#<" and ">#"
    start: Position
    end: Position


def tokenize(source: str) -> Iterator[Token]:
    """Lazily tokenize ``source``. Malformed input never raises."""
    for item in _scan(source):
        if isinstance(item, Token):
            yield item


def block_comments(source: str) -> Iterator[BlockComment]:
    for item in _scan(source):
        if isinstance(item, BlockComment):
            yield item


def _scan(source: str) -> Iterator[Token | BlockComment]:
    scanner = _Scanner(str(source or ""))
    text = scanner.text
    while scanner.offset < len(text):
        match = _WHITESPACE_RE.match(text, scanner.offset)
        if match:
            scanner.advance(match.end() - scanner.offset)
            continue

        if scanner.startswith("#<"):
            yield _read_block_comment(scanner)
            continue
        if scanner.startswith("#"):
            newline = text.find("\n", scanner.offset)
            scanner.advance((len(text) if newline < 0 else newline) - scanner.offset)
            continue

        char = text[scanner.offset]
        if char == '"':
            yield _read_string(scanner)
            continue

        kind = _SINGLE_CHAR_KINDS.get(char)
        if kind is not None:
            yield Token(kind, char, scanner.line, scanner.col, scanner.col + 1)
            scanner.advance(1)
            continue

        match = _WORD_RE.match(text, scanner.offset)
        if match is None:  # pragma: no cover - every other character starts a word
            scanner.advance(1)
            continue
        word = match.group(0)
        yield from _word_tokens(word, scanner.line, scanner.col)
        scanner.advance(len(word))


def _read_block_comment(scanner: _Scanner) -> BlockComment:
    text = scanner.text
    start = scanner.offset
    start_pos = Position(scanner.line, scanner.col)
    depth = 0
    closed_at = -1
    while scanner.offset < len(text):
        if scanner.startswith("#<"):
            depth += 1
            scanner.advance(2)
        elif scanner.startswith(">#"):
            depth -= 1
            scanner.advance(2)
            if depth <= 0:
                closed_at = scanner.offset - 2
                break
        else:
            scanner.advance(1)
    body = text[start + 2 : closed_at] if closed_at >= 0 else text[start + 2 :]
    return BlockComment(body, start_pos, Position(scanner.line, scanner.col))


def _read_string(scanner: _Scanner) -> Token:
    text = scanner.text
    line, col = scanner.line, scanner.col
    start = scanner.offset
    idx = start + 1
    value: list[str] = []
    terminated = False
    while idx < len(text):
        char = text[idx]
        if char == "\\" and idx + 1 < len(text):
            escaped = text[idx + 1]
            if escaped in _STRING_ESCAPES:
                value.append({"n": "\n", "r": "\r", "t": "\t"}.get(escaped, escaped))
            else:
                value.append(escaped)
            idx += 2
            continue
        if char == '"':
            idx += 1
            terminated = True
            break
        value.append(char)
        idx += 1

    scanner.advance(idx - start)
    return Token(
        TokenKind.STRING if terminated else TokenKind.INVALID,
        "".join(value) if terminated else text[start:idx],
        line,
        col,
        scanner.col,
        scanner.line,
    )


def _word_tokens(word: str, line: int, col: int) -> Iterator[Token]:
    if word == "->":
        yield Token(TokenKind.RIGHT_ARROW, word, line, col, col + 2)
        return
    if word == "!":
        yield Token(TokenKind.DEFINITION, word, line, col, col + 1)
        return
    if word.endswith("!") and not word.startswith(":") and not word.endswith(":!"):
        name = word[:-1]
        yield from _word_tokens(name, line, col)
        yield Token(TokenKind.DEFINITION, "!", line, col + len(name), col + len(word))
        return
    yield Token(_classify_word(word), word, line, col, col + len(word))


def _classify_word(word: str) -> TokenKind:
    if len(word) > 1 and (word.startswith(":") or word.endswith(":")):
        return TokenKind.SYMBOL
    if _FLOAT_RE.fullmatch(word):
        return TokenKind.FLOAT
    if _INT_RE.fullmatch(word):
        return TokenKind.NUMBER
    if word in {"true", "false"}:
        return TokenKind.BOOLEAN
    if word == "nil":
        return TokenKind.NIL
    return TokenKind.REFERENCE


class TokenStream:
    """Restartable token sequence: every iteration re-lexes the source."""

    def __init__(self, source: str):
        self.source = str(source or "")

    def __iter__(self) -> Iterator[Token]:
        return tokenize(self.source)

    def list(self) -> list[Token]:
        return list(tokenize(self.source))


def token_at(tokens: Iterable[Token], position: Position) -> Token | None:
    """Token under ``position``; a token ending right at ``position`` is used only when none starts there."""
    touching = None
    for token in tokens:
        if token.covers(position):
            return token
        if token.line > position.line:
            break
        if token.touches_end(position):
            touching = token
    return touching


def is_type_symbol(text: str) -> bool:
    value = str(text or "")
    return len(value) > 1 and value.startswith(":") and value[1].isupper()


def symbol_name(token: Token) -> str:
    """Bare name of a ``name:`` or ``:name`` symbol token."""
    text = token.text
    if text.endswith(":"):
        return text[:-1]
    if text.startswith(":"):
        return text[1:]
    return text
