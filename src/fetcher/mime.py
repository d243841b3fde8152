"""MIME helpers for turning Gmail payloads into analysis input."""

import base64
import re
from email.utils import parseaddr
from html.parser import HTMLParser
from typing import Iterator

_BLOCK_TAGS = {"p", "div", "br", "tr", "li", "h1", "h2", "h3", "h4", "h5", "h6"}
_HIDDEN_TAGS = {"script", "style", "head", "title"}


def decode_base64url(data: str) -> str:
    """Decode Gmail's unpadded URL-safe base64 into text."""
    padded = data + "=" * (-len(data) % 4)
    return base64.urlsafe_b64decode(padded).decode("utf-8", errors="replace")


def _walk_parts(payload: dict) -> Iterator[dict]:
    """Yield the payload and every nested part, depth first."""
    yield payload
    for part in payload.get("parts", []) or []:
        yield from _walk_parts(part)


def extract_plain_text(payload: dict) -> str:
    """Return the first text/plain body, else the first text/html as text."""
    html = None
    for part in _walk_parts(payload):
        data = part.get("body", {}).get("data")
        if not data:
            continue
        mime_type = part.get("mimeType", "text/plain")
        if mime_type == "text/plain":
            return decode_base64url(data)
        if mime_type == "text/html" and html is None:
            html = decode_base64url(data)
    return html_to_text(html) if html else ""


class _TextCollector(HTMLParser):
    def __init__(self) -> None:
        super().__init__()
        self.chunks: list[str] = []
        self._hidden_depth = 0

    def handle_starttag(self, tag: str, attrs: list) -> None:
        if tag in _HIDDEN_TAGS:
            self._hidden_depth += 1
        elif tag in _BLOCK_TAGS:
            self.chunks.append("\n")

    def handle_endtag(self, tag: str) -> None:
        if tag in _HIDDEN_TAGS and self._hidden_depth:
            self._hidden_depth -= 1

    def handle_data(self, data: str) -> None:
        if not self._hidden_depth:
            self.chunks.append(data)


def html_to_text(html: str) -> str:
    """Strip markup, dropping script/style content."""
    collector = _TextCollector()
    collector.feed(html)
    collector.close()
    text = "".join(collector.chunks)
    text = re.sub(r"[ \t]+", " ", text)
    return re.sub(r"\n\s*\n+", "\n\n", text).strip()


def split_sender(header_value: str) -> tuple[str, str]:
    """Split a From header into (display name, address).

    The display name falls back to the address when absent.
    """
    name, address = parseaddr(header_value)
    return (name or address, address)
