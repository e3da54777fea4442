"""
Reading and writing ``module.exports = { ... };`` configuration files.

The files are hand-written JavaScript modules whose only statement assigns an
object literal. Nothing here evaluates code: the object literal is located by
brace matching and then read by a small parser that only understands data
literals (objects, arrays, strings, numbers, booleans, null).
"""
import json
import math
import re
from typing import Any, List, Optional, Tuple

MODULE_EXPORTS_MARKER = "module.exports = {"

_NAME = re.compile(r"(?:[^\W\d]|\$)[\w$]*")
_SIGNED_NAME = re.compile(r"[+-]?(?:[^\W\d]|\$)[\w$]*")
_HEX = set("0123456789abcdefABCDEF")
_IDENTIFIER = re.compile(r"[A-Za-z_$][A-Za-z0-9_$]*\Z")
_NUMBER = re.compile(
    r"""
    [+-]?
    (?:
        0[xX][0-9a-fA-F]+
      | 0[oO][0-7]+
      | 0[bB][01]+
      | (?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?
    )
    """,
    re.VERBOSE,
)
_KEYWORDS = {
    "true": True,
    "false": False,
    "null": None,
    "undefined": None,
    "Infinity": math.inf,
    "NaN": math.nan,
}
_ESCAPES = {
    "n": "\n",
    "t": "\t",
    "r": "\r",
    "b": "\b",
    "f": "\f",
    "v": "\v",
    "0": "\0",
}


class ObjectLiteralError(ValueError):
    """Raised when text is not a data-only object literal."""

    def __init__(self, message: str, text: str = "", pos: int = 0):
        line, col = _line_col(text, pos)
        super().__init__(f"{message} (line {line}, column {col})")
        self.pos = pos
        self.line = line
        self.col = col


def _line_col(text: str, pos: int) -> Tuple[int, int]:
    line = text.count("\n", 0, pos) + 1
    col = pos - (text.rfind("\n", 0, pos) + 1) + 1
    return line, col


def _number_key(value) -> str:
    """Property name a numeric key stands for, e.g. ``0x10`` -> ``"16"``."""
    if isinstance(value, float) and value.is_integer() and abs(value) < 1e21:
        value = int(value)
    return str(value) if isinstance(value, int) else repr(value)


def _skip_string(text: str, i: int) -> int:
    """Return the index just past the string literal that starts at ``i``."""
    quote = text[i]
    i += 1
    while i < len(text):
        ch = text[i]
        if ch == "\\":
            i += 2
            continue
        if ch == quote:
            return i + 1
        i += 1
    return len(text)


def _skip_comment(text: str, i: int) -> int:
    """Return the index just past the comment at ``i``, or ``i`` if there is none."""
    if text.startswith("//", i):
        end = text.find("\n", i)
        return len(text) if end == -1 else end + 1
    if text.startswith("/*", i):
        end = text.find("*/", i + 2)
        return len(text) if end == -1 else end + 2
    return i


def find_matching_brace(text: str, start: int) -> int:
    """
    Index of the ``}`` closing the ``{`` at ``start``.

    Nesting depth goes up on ``{`` and down on ``}``; braces inside string
    literals and comments are ignored. If the braces never balance the last
    index of ``text`` is returned, so the span simply runs to the end.
    """
    depth = 0
    i = start
    n = len(text)
    while i < n:
        ch = text[i]
        if ch in "\"'`":
            i = _skip_string(text, i)
            continue
        if ch == "/":
            after = _skip_comment(text, i)
            if after != i:
                i = after
                continue
        if ch == "{":
            depth += 1
        elif ch == "}":
            depth -= 1
            if depth == 0:
                return i
        i += 1
    return n - 1


def extract_object_literal(text: str, marker: str = MODULE_EXPORTS_MARKER) -> str:
    """Cut the object literal assigned after ``marker`` out of ``text``."""
    at = text.find(marker)
    if at == -1:
        raise ObjectLiteralError(f"'{marker}' not found", text, 0)
    brace = at + len(marker) - 1
    end = find_matching_brace(text, brace)
    return text[brace:end + 1]


class _Parser:
    def __init__(self, text: str):
        self.text = text
        self.pos = 0

    def error(self, message: str, pos: Optional[int] = None):
        return ObjectLiteralError(message, self.text, self.pos if pos is None else pos)

    def skip_ws(self):
        text = self.text
        while self.pos < len(text):
            ch = text[self.pos]
            if ch.isspace() or ch == "\ufeff":
                self.pos += 1
                continue
            after = _skip_comment(text, self.pos)
            if after == self.pos:
                return
            if text.startswith("/*", self.pos) and text.find("*/", self.pos + 2) == -1:
                raise self.error("unterminated comment")
            self.pos = after

    def peek(self) -> str:
        return self.text[self.pos] if self.pos < len(self.text) else ""

    def parse(self) -> Any:
        self.skip_ws()
        value = self.value()
        self.skip_ws()
        if self.pos != len(self.text):
            raise self.error(f"unexpected {self.peek()!r} after value")
        return value

    def value(self) -> Any:
        ch = self.peek()
        if ch == "":
            raise self.error("unexpected end of input")
        if ch == "{":
            return self.object()
        if ch == "[":
            return self.array()
        if ch in "\"'":
            return self.string()
        m = _NUMBER.match(self.text, self.pos)
        if m:
            return self.number(m)
        word = self.word()
        if word is not None:
            sign = ""
            if word in ("+Infinity", "-Infinity"):
                sign, word = word[0], word[1:]
            if word in _KEYWORDS:
                value = _KEYWORDS[word]
                return -value if sign == "-" else value
            raise self.error(f"unsupported expression {word!r}", self.pos - len(sign) - len(word))
        raise self.error(f"unexpected {ch!r}")

    def word(self):
        m = _SIGNED_NAME.match(self.text, self.pos)
        if not m:
            return None
        self.pos = m.end()
        return m.group(0)

    def number(self, m):
        raw = m.group(0)
        self.pos = m.end()
        sign = -1 if raw.startswith("-") else 1
        body = raw.lstrip("+-")
        prefix = body[:2].lower()
        if prefix in ("0x", "0o", "0b"):
            return sign * int(body, 0)
        if any(c in body for c in ".eE"):
            return sign * float(body)
        return sign * int(body)

    def string(self) -> str:
        text = self.text
        quote = text[self.pos]
        start = self.pos
        self.pos += 1
        out: List[str] = []
        while True:
            if self.pos >= len(text):
                raise self.error("unterminated string", start)
            ch = text[self.pos]
            if ch == quote:
                self.pos += 1
                return "".join(out)
            if ch == "\n":
                raise self.error("newline in string", start)
            if ch == "\\":
                out.append(self.escape())
                continue
            out.append(ch)
            self.pos += 1

    def escape(self) -> str:
        text = self.text
        self.pos += 1
        if self.pos >= len(text):
            raise self.error("unterminated string")
        ch = text[self.pos]
        self.pos += 1
        if ch in _ESCAPES:
            return _ESCAPES[ch]
        if ch == "\r" and text.startswith("\n", self.pos):
            self.pos += 1
            return ""
        if ch in "\n\r\u2028\u2029":
            return ""
        if ch == "x":
            return chr(self.hex_digits(2))
        if ch == "u":
            return self.unicode_escape()
        return ch

    def unicode_escape(self) -> str:
        text = self.text
        start = self.pos - 2
        if text.startswith("{", self.pos):
            end = text.find("}", self.pos)
            digits = text[self.pos + 1:end] if end != -1 else ""
            if not digits or not all(c in _HEX for c in digits):
                raise self.error("bad unicode escape", start)
            code = int(digits, 16)
            if code > 0x10FFFF:
                raise self.error("unicode escape out of range", start)
            self.pos = end + 1
        else:
            code = self.hex_digits(4)
        # surrogates must come as a \uD8xx\uDCxx pair
        if 0xD800 <= code <= 0xDBFF:
            if text.startswith("\\u", self.pos):
                self.pos += 2
                low = self.hex_digits(4)
                if 0xDC00 <= low <= 0xDFFF:
                    return chr(0x10000 + ((code - 0xD800) << 10) + (low - 0xDC00))
            raise self.error("unpaired surrogate in unicode escape", start)
        if 0xDC00 <= code <= 0xDFFF:
            raise self.error("unpaired surrogate in unicode escape", start)
        return chr(code)

    def hex_digits(self, count: int) -> int:
        digits = self.text[self.pos:self.pos + count]
        if len(digits) != count or not all(c in _HEX for c in digits):
            raise self.error("bad hex escape")
        self.pos += count
        return int(digits, 16)

    def key(self) -> str:
        ch = self.peek()
        if ch and ch in "\"'":
            return self.string()
        m = _NUMBER.match(self.text, self.pos)
        if m and not m.group(0).startswith(("+", "-")):
            return _number_key(self.number(m))
        m = _NAME.match(self.text, self.pos)
        if not m:
            raise self.error(f"expected property name, got {ch!r}" if ch else "unexpected end of input")
        self.pos = m.end()
        return m.group(0)

    def object(self) -> dict:
        start = self.pos
        self.pos += 1
        result = {}
        while True:
            self.skip_ws()
            if self.peek() == "}":
                self.pos += 1
                return result
            if self.peek() == "":
                raise self.error("unterminated object", start)
            k = self.key()
            self.skip_ws()
            if self.peek() != ":":
                raise self.error(f"expected ':' after property {k!r}")
            self.pos += 1
            self.skip_ws()
            result[k] = self.value()
            self.skip_ws()
            ch = self.peek()
            if ch == ",":
                self.pos += 1
            elif ch == "}":
                self.pos += 1
                return result
            elif ch == "":
                raise self.error("unterminated object", start)
            else:
                raise self.error(f"expected ',' or '}}', got {ch!r}")

    def array(self) -> list:
        start = self.pos
        self.pos += 1
        result = []
        while True:
            self.skip_ws()
            if self.peek() == "]":
                self.pos += 1
                return result
            if self.peek() == "":
                raise self.error("unterminated array", start)
            result.append(self.value())
            self.skip_ws()
            ch = self.peek()
            if ch == ",":
                self.pos += 1
            elif ch == "]":
                self.pos += 1
                return result
            elif ch == "":
                raise self.error("unterminated array", start)
            else:
                raise self.error(f"expected ',' or ']', got {ch!r}")


def loads(text: str) -> Any:
    """Parse a data-only JavaScript literal into Python values."""
    return _Parser(text).parse()


def _dump_key(key) -> str:
    if isinstance(key, bool) or not isinstance(key, (str, int, float)):
        raise TypeError(f"keys must be str, int or float, not {type(key).__name__}")
    key = str(key)
    if _IDENTIFIER.match(key):
        return key
    return json.dumps(key, ensure_ascii=False)


def dumps(value: Any, indent: int = 4, _level: int = 0) -> str:
    """
    Render ``value`` as a JavaScript literal.

    Layout follows ``JSON.stringify(value, null, indent)``; object keys that
    are valid identifiers are written without quotes.
    """
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (int, float, str)):
        return json.dumps(value, ensure_ascii=False)

    pad = " " * (indent * (_level + 1))
    closing_pad = " " * (indent * _level)
    if isinstance(value, dict):
        if not value:
            return "{}"
        items = [f"{pad}{_dump_key(k)}: {dumps(v, indent, _level + 1)}" for k, v in value.items()]
        return "{\n" + ",\n".join(items) + "\n" + closing_pad + "}"
    if isinstance(value, (list, tuple)):
        if not value:
            return "[]"
        items = [pad + dumps(v, indent, _level + 1) for v in value]
        return "[\n" + ",\n".join(items) + "\n" + closing_pad + "]"
    raise TypeError(f"Object of type {type(value).__name__} is not literal-serializable")


def render_module(config: Any, indent: int = 4) -> str:
    return f"module.exports = {dumps(config, indent)};\n"


def load_module(text: str) -> Any:
    """Extract and parse the exported object literal from module text."""
    return loads(extract_object_literal(text))
