"""Delimited-token scanner shared by ``${...}`` and ``#{...}`` processing."""
from __future__ import annotations

from collections.abc import Callable


class GenericTokenParser:
    """Scans text left to right and replaces ``open ... close`` tokens.

    ``handler`` receives the token body and returns its replacement.  A
    backslash before the open token escapes it (the backslash is dropped and the
    token is emitted literally); a backslash before a close token inside a body
    makes it part of the body.  An unterminated token is emitted unchanged.

    Args:
        open_token: Opening delimiter, e.g. ``"#{"``.
        close_token: Closing delimiter, e.g. ``"}"``.
        handler: Replacement callback.
        keep_escapes: Re-emit escaped open tokens with their backslash so a
            later pass still sees them as escaped.
    """

    def __init__(
        self,
        open_token: str,
        close_token: str,
        handler: Callable[[str], str],
        keep_escapes: bool = False,
    ) -> None:
        self.open_token = open_token
        self.close_token = close_token
        self.handler = handler
        self.keep_escapes = keep_escapes

    def parse(self, text: str) -> str:
        if not text:
            return ""
        start = text.find(self.open_token)
        if start == -1:
            return text

        out: list[str] = []
        offset = 0
        while start > -1:
            if start > 0 and text[start - 1] == "\\":
                keep = start if self.keep_escapes else start - 1
                out.append(text[offset:keep])
                out.append(self.open_token)
                offset = start + len(self.open_token)
            else:
                out.append(text[offset:start])
                offset = start + len(self.open_token)
                body: list[str] = []
                end = text.find(self.close_token, offset)
                while end > -1:
                    if end > offset and text[end - 1] == "\\":
                        body.append(text[offset : end - 1])
                        body.append(self.close_token)
                        offset = end + len(self.close_token)
                        end = text.find(self.close_token, offset)
                    else:
                        body.append(text[offset:end])
                        break
                if end == -1:
                    out.append(text[start:])
                    offset = len(text)
                else:
                    out.append(self.handler("".join(body)))
                    offset = end + len(self.close_token)
            start = text.find(self.open_token, offset)

        if offset < len(text):
            out.append(text[offset:])
        return "".join(out)


def contains_token(text: str, open_token: str, close_token: str) -> bool:
    """True if ``text`` holds at least one unescaped, terminated token."""
    found = False

    def _mark(body: str) -> str:
        nonlocal found
        found = True
        return body

    GenericTokenParser(open_token, close_token, _mark).parse(text)
    return found
