"""Column templates: the format language behind snapshot files.

A template such as ``"%p %S %P"`` names the columns of a snapshot. It is
compiled once into a :class:`ColumnSpec`, an ordered tuple of tokens that
both the writer and the reader interpret:

- ``FIELD``: a known ``%x`` code bound to a FileRecord attribute
- ``ECHO``: ``%%`` or an unrecognized code, emitted as its own character
- ``TEXT``: literal template text, emitted as a column of its own

Every token, literal text included, is followed by the field delimiter.

Spaces in a template are cosmetic and stripped.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum

logger = logging.getLogger(__name__)

DEFAULT_TEMPLATE = "%p %m %c"
DEFAULT_FIELD_DELIMITER = "%t"
DEFAULT_RECORD_DELIMITER = "%n"

# Label written in the header line for each field code. The reader maps
# header tokens back to codes with the inverse table.
COLUMN_LABELS: dict[str, str] = {
    "p": "Path",
    "a": "Last Accessed",
    "A": "atime",
    "m": "Last Modified",
    "M": "mtime",
    "c": "Last Mode Change",
    "C": "ctime",
    "s": "Size",
    "S": "Size (raw)",
    "i": "inode",
    "o": "Owner",
    "g": "Group",
    "t": "Type",
    "T": "Type (raw)",
    "P": "Mode",
    "e": "Selected",
}

LABEL_CODES: dict[str, str] = {label: code for code, label in COLUMN_LABELS.items()}

PATH_CODE = "p"

_DELIMITER_ESCAPES = {"t": "\t", "r": "\r", "n": "\n"}


class TokenKind(Enum):
    FIELD = "field"
    ECHO = "echo"
    TEXT = "text"


@dataclass(frozen=True)
class Token:
    kind: TokenKind
    value: str

    @property
    def label(self) -> str:
        if self.kind is TokenKind.FIELD:
            return COLUMN_LABELS[self.value]
        return self.value


@dataclass(frozen=True)
class ColumnSpec:
    """Compiled column template."""

    template: str
    tokens: tuple[Token, ...]

    @property
    def codes(self) -> tuple[str, ...]:
        """Field codes in column order."""
        return tuple(t.value for t in self.tokens if t.kind is TokenKind.FIELD)

    @property
    def labels(self) -> tuple[str, ...]:
        return tuple(t.label for t in self.tokens)

    @classmethod
    def compile(cls, template: str) -> "ColumnSpec":
        tokens: list[Token] = []
        text: list[str] = []

        def flush_text() -> None:
            if text:
                tokens.append(Token(TokenKind.TEXT, "".join(text)))
                text.clear()

        i = 0
        while i < len(template):
            ch = template[i]
            if ch != "%":
                if ch != " ":
                    text.append(ch)
                i += 1
                continue

            flush_text()
            code = template[i + 1] if i + 1 < len(template) else ""
            if code in COLUMN_LABELS:
                tokens.append(Token(TokenKind.FIELD, code))
            elif code in ("%", ""):
                tokens.append(Token(TokenKind.ECHO, "%"))
            else:
                logger.warning(f"Found %{code} in column template {template!r}; writing it literally")
                tokens.append(Token(TokenKind.ECHO, code))
            i += 2

        flush_text()
        return cls(template=template, tokens=tuple(tokens))

    @classmethod
    def from_codes(cls, codes: list[str] | tuple[str, ...]) -> "ColumnSpec":
        return cls.compile("".join(f"%{code}" for code in codes))


def compile_delimiter(spec: str) -> str:
    """Expand an escape-coded delimiter string.

    Both ``%t``/``%r``/``%n`` and ``\\t``/``\\r``/``\\n`` are understood.
    A doubled escape character yields itself, any other escaped character
    is copied as is, and a trailing lone escape character is kept.
    """
    out: list[str] = []
    i = 0
    while i < len(spec):
        ch = spec[i]
        if ch not in ("%", "\\"):
            out.append(ch)
            i += 1
            continue
        if i + 1 >= len(spec):
            out.append(ch)
            break
        nxt = spec[i + 1]
        out.append(_DELIMITER_ESCAPES.get(nxt, nxt))
        i += 2
    return "".join(out)
