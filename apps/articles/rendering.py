"""
Rendering of article bodies for display.

The display pipeline is a collaborator of the conversion service so that it
can be replaced in tests or by a site with its own markup rules.
"""

import re
from typing import Protocol

from bs4 import BeautifulSoup

_BLANK_LINES = re.compile(r'\n\s*\n')


class ContentRenderer(Protocol):
    def render(self, body: str) -> str:
        ...


def is_html(text: str) -> bool:
    """True when the text already contains at least one element."""
    return BeautifulSoup(text, 'html.parser').find() is not None


def strip_tags(text: str) -> str:
    return BeautifulSoup(text, 'html.parser').get_text(' ')


def autop(text: str) -> str:
    """
    Wrap plain text in paragraph markup.

    Blank lines separate paragraphs; single newlines inside a paragraph
    become ``<br />``.
    """
    text = text.replace('\r\n', '\n').replace('\r', '\n').strip()
    if not text:
        return ''

    paragraphs = []
    for chunk in _BLANK_LINES.split(text):
        chunk = chunk.strip()
        if chunk:
            paragraphs.append('<p>' + chunk.replace('\n', '<br />\n') + '</p>')
    return '\n'.join(paragraphs) + '\n'


def ensure_html(text: str) -> str:
    """Return HTML as-is, paragraph-wrap anything else."""
    text = text.strip()
    if is_html(text):
        return text
    return autop(text)


class DefaultContentRenderer:
    """
    Render a stored body the way the article page displays it.

    HTML bodies pass through untouched; plain-text bodies get paragraphs.
    """

    def render(self, body: str) -> str:
        return ensure_html(body)
