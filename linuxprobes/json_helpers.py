"""A flat JSON tokenizer and a few helpers built on top of it."""

from __future__ import annotations

import dataclasses
import re
from dataclasses import dataclass
from enum import Enum

_WHITESPACE = " \t\r\n"
_PRIMITIVE_END = _WHITESPACE + ",]}:"
_NUMBER = re.compile(r"-?(?:0|[1-9]\d*)(?:\.\d+)?(?:[eE][+-]?\d+)?\Z")
_LITERALS = ("true", "false", "null")


class TokenType(Enum):
    """The kind of JSON item a token stands for."""

    UNDEFINED = 0
    OBJECT = 1
    ARRAY = 2
    STRING = 3
    PRIMITIVE = 4


@dataclass(frozen=True)
class Token:
    """A span of the JSON text.

    ``size`` is the number of keys of an object, the number of items of an
    array, 1 for a string used as an object key and 0 otherwise.  String
    spans exclude the quotes.
    """

    type: TokenType
    start: int
    end: int
    size: int = 0


class _Tokeniser:
    def __init__(self, text: str) -> None:
        self.text = text
        self.tokens: list[Token] = []

    def run(self) -> list[Token]:
        pos = self._skip(0)
        while pos < len(self.text):
            pos = self._value(pos)
            pos = self._skip(pos)
        return self.tokens

    def _skip(self, pos: int) -> int:
        while pos < len(self.text) and self.text[pos] in _WHITESPACE:
            pos += 1
        return pos

    def _char(self, pos: int) -> str:
        if pos >= len(self.text):
            raise ValueError("unexpected end of JSON data")
        return self.text[pos]

    def _value(self, pos: int) -> int:
        char = self._char(pos)
        if char == "{":
            return self._object(pos)
        if char == "[":
            return self._array(pos)
        if char == '"':
            return self._string(pos, is_key=False)
        return self._primitive(pos)

    def _string(self, pos: int, is_key: bool) -> int:
        i = pos + 1
        while True:
            char = self._char(i)
            if char == '"':
                break
            if char == "\\":
                self._char(i + 1)
                i += 2
                continue
            i += 1
        self.tokens.append(Token(TokenType.STRING, pos + 1, i, 1 if is_key else 0))
        return i + 1

    def _primitive(self, pos: int) -> int:
        i = pos
        while i < len(self.text) and self.text[i] not in _PRIMITIVE_END:
            i += 1
        literal = self.text[pos:i]
        if literal not in _LITERALS and not _NUMBER.match(literal):
            raise ValueError(f"invalid JSON primitive at position {pos}: {literal!r}")
        self.tokens.append(Token(TokenType.PRIMITIVE, pos, i, 0))
        return i

    def _object(self, pos: int) -> int:
        index = len(self.tokens)
        self.tokens.append(Token(TokenType.OBJECT, pos, -1))
        count = 0
        i = self._skip(pos + 1)
        if self._char(i) != "}":
            while True:
                if self._char(i) != '"':
                    raise ValueError(f"expected an object key at position {i}")
                i = self._skip(self._string(i, is_key=True))
                if self._char(i) != ":":
                    raise ValueError(f"expected ':' at position {i}")
                i = self._skip(self._value(self._skip(i + 1)))
                count += 1
                char = self._char(i)
                if char == ",":
                    i = self._skip(i + 1)
                elif char == "}":
                    break
                else:
                    raise ValueError(f"unexpected {char!r} at position {i}")
        self.tokens[index] = dataclasses.replace(
            self.tokens[index], end=i + 1, size=count
        )
        return i + 1

    def _array(self, pos: int) -> int:
        index = len(self.tokens)
        self.tokens.append(Token(TokenType.ARRAY, pos, -1))
        count = 0
        i = self._skip(pos + 1)
        if self._char(i) != "]":
            while True:
                i = self._skip(self._value(i))
                count += 1
                char = self._char(i)
                if char == ",":
                    i = self._skip(i + 1)
                elif char == "]":
                    break
                else:
                    raise ValueError(f"unexpected {char!r} at position {i}")
        self.tokens[index] = dataclasses.replace(
            self.tokens[index], end=i + 1, size=count
        )
        return i + 1


def tokenise(text: str) -> list[Token]:
    """Split ``text`` into a flat, document-ordered list of tokens.

    Raises ValueError if the text is not valid JSON.
    """
    return _Tokeniser(text).run()


def token_streq(text: str, token: Token, s: str) -> bool:
    """Tell whether ``token`` is a string token whose content equals ``s``."""
    return token.type is TokenType.STRING and text[token.start:token.end] == s


def token_tostr(text: str, token: Token) -> str:
    """Return the text covered by ``token``."""
    return text[token.start:token.end]


def _dump(text: str, tokens: list[Token], index: int, indent: int, out: list[str]) -> int:
    token = tokens[index]
    if token.type in (TokenType.PRIMITIVE, TokenType.STRING):
        out.append(token_tostr(text, token))
        if token.size == 0:
            out.append("\n")
        return 1
    if token.type is TokenType.OBJECT:
        consumed = 0
        out.append("\n")
        for _ in range(token.size):
            out.append("  " * indent)
            key = tokens[index + 1 + consumed]
            consumed += _dump(text, tokens, index + 1 + consumed, indent + 1, out)
            if key.size > 0:
                out.append(": ")
                consumed += _dump(text, tokens, index + 1 + consumed, indent + 1, out)
        return consumed + 1
    if token.type is TokenType.ARRAY:
        consumed = 0
        out.append("\n")
        for _ in range(token.size):
            out.append("  " * (indent - 1))
            out.append("  - ")
            consumed += _dump(text, tokens, index + 1 + consumed, indent + 1, out)
        return consumed + 1
    return 0


def dump_pretty(text: str, indent: int = 1) -> str:
    """Render the first JSON value of ``text`` as an indented outline."""
    tokens = tokenise(text)
    if not tokens:
        raise ValueError("no JSON data to dump")
    out: list[str] = []
    _dump(text, tokens, 0, indent, out)
    return "".join(out)


def search(text: str, path: str) -> str | None:
    """Find ``.object.label`` in ``text`` and return the raw text of its value.

    The label is looked for anywhere after the first occurrence of the
    object name.  Returns None when nothing matches; raises ValueError if
    ``path`` does not name both an object and a label.
    """
    parts = [part for part in path.split(".") if part]
    if len(parts) < 2:
        raise ValueError(f"invalid JSON search path: {path!r}")
    obj, label = parts[0], parts[1]

    tokens = tokenise(text)
    found_object = False
    for index, token in enumerate(tokens):
        if token_streq(text, token, obj):
            found_object = True
        elif found_object and token_streq(text, token, label):
            if index + 1 < len(tokens):
                return token_tostr(text, tokens[index + 1])
            return None
    return None