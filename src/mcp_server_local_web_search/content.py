"""Article extraction and HTML to markdown conversion.

Both are thin wrappers over third-party capabilities (readability-lxml and
markdownify) so the pipeline can swap them out.
"""

import logging
import re
from dataclasses import dataclass

import markdownify
from bs4 import BeautifulSoup
from readability import Document

logger = logging.getLogger(__name__)

# readability-lxml's placeholder when a document has no <title>
_NO_TITLE = "[no-title]"

_EXCESS_NEWLINES = re.compile(r"\n{3,}")
_TRAILING_SPACE = re.compile(r"[ \t]+\n")
_TAG = re.compile(r"<[^>]+>")


@dataclass(frozen=True)
class Article:
    """Main content of a page as an HTML fragment."""

    title: str
    html: str


def extract_article(html: str, fallback_title: str = "") -> Article:
    """Isolate the main article of a cleaned document.

    Falls back to ``fallback_title`` (the raw document title) when readability
    finds no title. May raise whatever the underlying parser raises.
    """
    doc = Document(html)
    content = doc.summary(html_partial=True)
    title = doc.short_title() or ""
    if not title or title == _NO_TITLE:
        title = fallback_title
    return Article(title=title.strip(), html=content)


def has_text(html: str) -> bool:
    """True if the fragment contains any visible text."""
    if not html:
        return False
    try:
        return bool(BeautifulSoup(html, "html.parser").get_text().strip())
    except Exception:
        return bool(_TAG.sub("", html).strip())


def _normalize(text: str) -> str:
    text = text.replace("\r\n", "\n")
    text = _TRAILING_SPACE.sub("\n", text)
    return _EXCESS_NEWLINES.sub("\n\n", text).strip()


def to_markdown(html: str) -> str:
    """Convert an HTML fragment to normalized markdown.

    Never raises: malformed input degrades to plain text.
    """
    if not html:
        return ""
    try:
        # Markdown-shaped input must not pick up escaped * and _ on a second pass
        text = markdownify.markdownify(
            html,
            heading_style="ATX",
            bullets="-",
            escape_asterisks=False,
            escape_underscores=False,
            escape_misc=False,
        )
        return _normalize(text)
    except Exception as e:
        logger.debug(f"markdownify failed, falling back to plain text: {e}")

    try:
        return _normalize(BeautifulSoup(html, "html.parser").get_text("\n"))
    except Exception:
        return _normalize(_TAG.sub("", html))
