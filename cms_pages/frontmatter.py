r"""Split CMS markdown documents into a typed header and a verbatim body.

Collections authored through the site CMS are markdown files that open with a
small YAML-like header delimited by ``---`` lines. Only the subset the CMS
actually writes is understood: ``key: value`` scalars (booleans, numbers,
quoted and bare strings), quoted strings that continue over several lines, and
the folded (``>``/``>-``) and literal (``|``/``|-``) block styles. Anything the
parser cannot read is logged and skipped; parsing never raises.

Example
-------
>>> from cms_pages.frontmatter import parse_frontmatter
>>> parsed = parse_frontmatter('---\ntitle: "Hi"\norder: 2\n---\nBody')
>>> dict(parsed.header), parsed.body
({'title': 'Hi', 'order': 2}, 'Body')
"""

from __future__ import annotations

import dataclasses as dc
import enum
import re
import textwrap
import typing as typ

import structlog

if typ.TYPE_CHECKING:
    import collections.abc as cabc

log = structlog.get_logger(__name__)

Scalar: typ.TypeAlias = str | int | float | bool

_OPENING_DELIMITER = re.compile(r"\A---[ \t]*\r?\n")
_CLOSING_DELIMITER = re.compile(r"^---[ \t]*(?:\r?\n|\Z)", re.MULTILINE)
_INTEGER_PATTERN = re.compile(r"[+-]?\d+")
_NUMBER_PATTERN = re.compile(r"[+-]?(?:\d+(?:\.\d*)?|\.\d+)(?:[eE][+-]?\d+)?")
_QUOTES = ('"', "'")


class ParseMode(enum.Enum):
    """How the header line currently being read relates to the previous key."""

    SCANNING_HEADER = "scanning_header"
    IN_FOLDED_BLOCK = "in_folded_block"
    IN_LITERAL_BLOCK = "in_literal_block"
    IN_QUOTED_CONTINUATION = "in_quoted_continuation"


BLOCK_INDICATORS: dict[str, ParseMode] = {
    ">-": ParseMode.IN_FOLDED_BLOCK,
    ">": ParseMode.IN_FOLDED_BLOCK,
    "|-": ParseMode.IN_LITERAL_BLOCK,
    "|": ParseMode.IN_LITERAL_BLOCK,
}


@dc.dataclass(frozen=True, slots=True)
class ParsedDocument:
    """Header fields and remaining body text of one document.

    Attributes
    ----------
    header : Mapping[str, Scalar]
        Coerced header values in declaration order.
    body : str
        Text following the closing delimiter, untouched.
    """

    header: cabc.Mapping[str, Scalar]
    body: str


@dc.dataclass(slots=True)
class _PendingValue:
    """A multi-line value still accumulating lines under ``key``."""

    key: str
    mode: ParseMode
    indent: int
    lines: list[str] = dc.field(default_factory=list)
    quote: str = ""

    def accepts(self, raw_line: str) -> bool:
        """Return True when ``raw_line`` continues this value."""
        return ":" not in raw_line or _indent_of(raw_line) > self.indent

    def append(self, raw_line: str) -> None:
        if self.mode is ParseMode.IN_LITERAL_BLOCK:
            self.lines.append(raw_line.rstrip())
        else:
            self.lines.append(raw_line.strip())

    def closes_on(self, line: str) -> bool:
        return self.mode is ParseMode.IN_QUOTED_CONTINUATION and line.endswith(
            self.quote
        )

    def finish(self) -> str:
        match self.mode:
            case ParseMode.IN_FOLDED_BLOCK:
                return _fold(self.lines)
            case ParseMode.IN_LITERAL_BLOCK:
                return _literal(self.lines)
            case ParseMode.IN_QUOTED_CONTINUATION:
                return _strip_quote("\n".join(self.lines), self.quote)
            case _:  # pragma: no cover - pending values are never scanning
                msg = f"Unexpected parse mode {self.mode!r}"
                raise AssertionError(msg)


class FrontmatterParser:
    """Line-oriented parser for the CMS frontmatter subset."""

    def parse(self, document: str) -> ParsedDocument:
        """Split ``document`` into header fields and body text.

        Parameters
        ----------
        document : str
            Complete markdown document as retrieved from a source.

        Returns
        -------
        ParsedDocument
            The parsed header and body. A document without a header yields an
            empty header and the whole text as body. A document whose header is
            never closed is read as a bare header with an empty body, unless no
            field can be recovered from it, in which case it is treated as a
            document without a header.
        """
        text = document.removeprefix("\ufeff")
        opening = _OPENING_DELIMITER.match(text)
        if opening is None:
            return ParsedDocument(header={}, body=document)

        closing = _CLOSING_DELIMITER.search(text, opening.end())
        if closing is not None:
            header_block = text[opening.end() : closing.start()]
            return ParsedDocument(
                header=self.parse_header(header_block),
                body=text[closing.end() :],
            )

        log.warning("missing_closing_delimiter", preview=text[:150])
        header = self.parse_header(text[opening.end() :])
        if header:
            return ParsedDocument(header=header, body="")
        return ParsedDocument(header={}, body=document)

    def parse_header(self, block: str) -> dict[str, Scalar]:
        """Parse the text between the delimiters into coerced fields."""
        result: dict[str, Scalar] = {}
        pending: _PendingValue | None = None

        for lineno, raw_line in enumerate(block.splitlines(), start=1):
            line = raw_line.strip()
            if pending is not None:
                if pending.accepts(raw_line):
                    pending.append(raw_line)
                    if pending.closes_on(line):
                        result[pending.key] = pending.finish()
                        pending = None
                    continue
                result[pending.key] = pending.finish()
                pending = None

            if not line or line.startswith("#"):
                continue
            key, sep, raw_value = line.partition(":")
            key = key.strip()
            if not sep or not key:
                log.warning("malformed_header_line", lineno=lineno, line=raw_line)
                continue

            value = raw_value.strip()
            mode = _multiline_mode(value)
            match mode:
                case ParseMode.SCANNING_HEADER:
                    result[key] = coerce_scalar(value)
                case ParseMode.IN_QUOTED_CONTINUATION:
                    pending = _PendingValue(
                        key=key,
                        mode=mode,
                        indent=_indent_of(raw_line),
                        lines=[value] if len(value) > 1 else [],
                        quote=value[0],
                    )
                case _:
                    pending = _PendingValue(
                        key=key, mode=mode, indent=_indent_of(raw_line)
                    )

        if pending is not None:
            result[pending.key] = pending.finish()
        return result


def coerce_scalar(value: str) -> Scalar:
    """Convert a single-line header value into a bool, number, or string.

    Examples
    --------
    >>> coerce_scalar("true"), coerce_scalar("3"), coerce_scalar("'true'")
    (True, 3, 'true')
    """
    if value == "true":
        return True
    if value == "false":
        return False
    if _INTEGER_PATTERN.fullmatch(value):
        return int(value)
    if _NUMBER_PATTERN.fullmatch(value):
        return float(value)
    if _is_quoted(value):
        quote = value[0]
        return value[1:-1].replace(f"\\{quote}", quote)
    return value


_default_parser = FrontmatterParser()


def parse_frontmatter(document: str) -> ParsedDocument:
    """Parse ``document`` with a shared :class:`FrontmatterParser`."""
    return _default_parser.parse(document)


def _multiline_mode(value: str) -> ParseMode:
    """Return the mode a key's initial ``value`` opens."""
    if value in BLOCK_INDICATORS:
        return BLOCK_INDICATORS[value]
    if value[:1] in _QUOTES and (len(value) == 1 or not value.endswith(value[0])):
        return ParseMode.IN_QUOTED_CONTINUATION
    return ParseMode.SCANNING_HEADER


def _is_quoted(value: str) -> bool:
    """Return True for ``"..."``/``'...'`` with no unescaped inner quote."""
    if len(value) < 2 or value[0] not in _QUOTES or value[-1] != value[0]:
        return False
    quote = value[0]
    inner = value[1:-1]
    return not any(
        char == quote and (idx == 0 or inner[idx - 1] != "\\")
        for idx, char in enumerate(inner)
    )


def _indent_of(raw_line: str) -> int:
    return len(raw_line) - len(raw_line.lstrip(" \t"))


def _fold(lines: list[str]) -> str:
    """Join lines with spaces, keeping blank-line paragraph breaks."""
    paragraphs: list[list[str]] = [[]]
    for line in lines:
        if line:
            paragraphs[-1].append(line)
        elif paragraphs[-1]:
            paragraphs.append([])
    return "\n\n".join(" ".join(group) for group in paragraphs if group).strip()


def _literal(lines: list[str]) -> str:
    """Keep line breaks and relative indentation, dropping the block indent."""
    return textwrap.dedent("\n".join(lines)).strip()


def _strip_quote(value: str, quote: str) -> str:
    value = value.removeprefix(quote)
    return value.removesuffix(quote)


__all__ = [
    "BLOCK_INDICATORS",
    "FrontmatterParser",
    "ParseMode",
    "ParsedDocument",
    "Scalar",
    "coerce_scalar",
    "parse_frontmatter",
]
