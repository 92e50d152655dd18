"""Errors raised while parsing CSS selectors."""

from __future__ import annotations

import enum

_ESCAPES = {
    "\\": "\\\\",
    '"': '\\"',
    "\n": "\\n",
    "\r": "\\r",
    "\t": "\\t",
    "\0": "\\0",
}


def _quote(text: str) -> str:
    """Render text as a double-quoted, escaped string."""
    parts = []
    for ch in text:
        if ch in _ESCAPES:
            parts.append(_ESCAPES[ch])
        elif ch.isprintable():
            parts.append(ch)
        else:
            parts.append(f"\\u{{{ord(ch):x}}}")
    return '"' + "".join(parts) + '"'


class SelectorErrorKind(enum.Enum):
    """The kind of failure met while parsing a selector; the value is its description."""

    UNEXPECTED_TOKEN = "Token was not expected"
    END_OF_LINE = "Unexpected EOL"
    INVALID_AT_RULE = "Invalid @-rule"
    INVALID_AT_RULE_BODY = "The body of an @-rule was invalid"
    QUAL_RULE_INVALID = "The qualified name was invalid"
    EXPECTED_COLON_ON_PSEUDO_ELEMENT = "Missing colon character on pseudoelement"
    EXPECTED_IDENTITY_ON_PSEUDO_ELEMENT = "Missing pseudoelement identity"
    UNEXPECTED_SELECTOR_PARSE_ERROR = "Unexpected error"


class SelectorError(ValueError):
    """Raised when a CSS selector cannot be parsed."""

    def __init__(self, kind: SelectorErrorKind, detail: str | None = None) -> None:
        self.kind = kind
        self.detail = detail
        super().__init__(self._message())

    def description(self) -> str:
        """Return a short description of the error kind."""
        return self.kind.value

    def _message(self) -> str:
        detail = self.detail or ""
        match self.kind:
            case SelectorErrorKind.UNEXPECTED_TOKEN:
                return f"Token {_quote(detail)} was not expected"
            case SelectorErrorKind.END_OF_LINE:
                return "Unexpected EOL"
            case SelectorErrorKind.INVALID_AT_RULE:
                return f"Invalid @-rule {_quote(detail)}"
            case SelectorErrorKind.INVALID_AT_RULE_BODY:
                return "The body of an @-rule was invalid"
            case SelectorErrorKind.QUAL_RULE_INVALID:
                return "The qualified name was invalid"
            case SelectorErrorKind.EXPECTED_COLON_ON_PSEUDO_ELEMENT:
                return (
                    "Expected a ':' token for pseudoelement, "
                    f"got {_quote(detail)} instead"
                )
            case SelectorErrorKind.EXPECTED_IDENTITY_ON_PSEUDO_ELEMENT:
                return (
                    "Expected identity for pseudoelement, "
                    f"got {_quote(detail)} instead"
                )
            case _:
                return (
                    "Unexpected error occurred. Please report this to the developer\n"
                    f"{detail}"
                )