"""
HTML to plain-text conversion for job descriptions.

Job boards return descriptions as HTML fragments. We keep the original HTML
for rich rendering (``description_html``) and derive a plain-text version that
preserves the paragraph and list structure as newlines and bullets.

Key Concepts:
- Markup is parsed with BeautifulSoup, so attribute values and comments never
  leak into the text
- Block tags become line breaks: <br> -> "\\n", </p> -> "\\n\\n", </div> -> "\\n"
- List items become bullets: <li> -> "• ", </li> -> "\\n"
- Entities are decoded once by the parser (so "&amp;lt;" becomes "&lt;", not "<")
- Whitespace collapses per line; newlines survive, at most one blank line
"""

import re
from typing import Optional

from bs4 import BeautifulSoup, Comment

BULLET = "•"

_INLINE_SPACE_RE = re.compile(r"[^\S\n]+")
_SPACE_AROUND_NEWLINE_RE = re.compile(r" *\n *")
_EXTRA_BLANK_LINES_RE = re.compile(r"\n{3,}")


def _parse(html: str) -> BeautifulSoup:
    soup = BeautifulSoup(html, "html.parser")
    for comment in soup.find_all(string=lambda text: isinstance(text, Comment)):
        comment.extract()
    return soup


def collapse_whitespace(text: str) -> str:
    """
    Collapse repeated whitespace while keeping line structure.

    Examples:
        >>> collapse_whitespace("  Data   Engineer \\n\\n\\n\\n  Remote ")
        'Data Engineer\\n\\nRemote'
    """
    if not text:
        return ""

    text = text.replace("\r\n", "\n").replace("\r", "\n")
    text = _INLINE_SPACE_RE.sub(" ", text)
    text = _SPACE_AROUND_NEWLINE_RE.sub("\n", text)
    text = _EXTRA_BLANK_LINES_RE.sub("\n\n", text)
    return text.strip()


def html_to_text(html: Optional[str]) -> str:
    """
    Convert an HTML fragment into readable plain text.

    Examples:
        >>> html_to_text("<p>Hello</p><br>World")
        'Hello\\n\\nWorld'
        >>> html_to_text("<ul><li>Python</li><li>SQL &amp; dbt</li></ul>")
        '• Python\\n• SQL & dbt'

    Args:
        html: HTML fragment (None and "" give "")

    Returns:
        Plain text with newlines and bullets standing in for block structure
    """
    if not html:
        return ""

    soup = _parse(html)

    for br in soup.find_all("br"):
        br.replace_with("\n")

    for li in soup.find_all("li"):
        li.insert(0, f"{BULLET} ")
        li.append("\n")

    for p in soup.find_all("p"):
        p.append("\n\n")

    for div in soup.find_all("div"):
        div.append("\n")

    for container in soup.find_all(["ul", "ol"]):
        container.insert(0, "\n")
        container.append("\n")

    return collapse_whitespace(soup.get_text())


def strip_tags(html: Optional[str]) -> str:
    """Remove all tags and decode entities without adding any structure."""
    if not html:
        return ""
    return _parse(html).get_text().strip()
