"""Text cleanup utilities for embedding preparation."""

import logging
import re

from bs4 import BeautifulSoup

logger = logging.getLogger(__name__)

# Three or more newlines, including whitespace-only lines between them
MULTIPLE_NEWLINES = re.compile(r"\n\s*\n\s*\n")

REPLY_PREFIX = re.compile(r"^(?:re|fwd):\s*", re.IGNORECASE)

TRUNCATION_MARKER = "\n\n[Content truncated for indexing]"

BLOCK_TAGS = [
    "p", "div", "section", "article", "table", "tr",
    "ul", "ol", "pre", "blockquote", "h1", "h2", "h3", "h4", "h5", "h6",
]


def looks_like_html(content: str) -> bool:
    """Cheap check for markup before paying for a parse."""
    return "<" in content and ">" in content


def html_to_text(html_content: str) -> str:
    """Convert HTML to readable markdown-like text.

    Scripts and styles are removed, block elements become paragraphs,
    links become ``text (href)``, list items get a leading dash and
    blockquotes are marked with ``>`` like a quoted reply.

    Args:
        html_content: Raw HTML string

    Returns:
        Text with whitespace stripped from every line
    """
    soup = BeautifulSoup(html_content, "html.parser")

    for tag in soup(["script", "style"]):
        tag.decompose()
    if soup.head is not None:
        soup.head.decompose()

    for link in soup.find_all("a"):
        href = link.get("href")
        text = link.get_text(strip=True)
        if href and text and href != text:
            link.replace_with(f"{text} ({href})")

    for br in soup.find_all("br"):
        br.replace_with("\n")

    for quote in soup.find_all("blockquote"):
        quote.insert_before("\n")
        quote.insert(0, "> ")

    for li in soup.find_all("li"):
        li.insert(0, "- ")
        li.insert_after("\n")

    for block in soup.find_all(BLOCK_TAGS):
        block.insert_after("\n\n")

    text = soup.get_text()
    lines = (line.strip() for line in text.splitlines())
    return "\n".join(lines)


def strip_quoted_text(content: str) -> str:
    """Drop everything from the first quoted-reply line onward."""
    result = []
    for line in content.split("\n"):
        trimmed = line.strip()
        if trimmed.startswith(">"):
            break
        if trimmed.startswith("On ") and " wrote:" in trimmed:
            break
        result.append(line)
    return "\n".join(result)


def collapse_whitespace(content: str) -> str:
    """Reduce runs of three or more newlines to exactly two."""
    return MULTIPLE_NEWLINES.sub("\n\n", content)


def prepare_email_body(content: str) -> str:
    """Convert HTML (if any), strip quoted replies and tidy blank lines."""
    if looks_like_html(content):
        try:
            content = html_to_text(content)
        except Exception as e:
            # Malformed markup: keep the raw body
            logger.debug("HTML conversion failed, using raw body: %s", e)

    content = strip_quoted_text(content)
    content = collapse_whitespace(content)
    return content.strip()


def clean_subject(title: str) -> str:
    """Strip any number of leading Re:/Fwd: prefixes, in any case."""
    subject = title.strip()
    while True:
        stripped = REPLY_PREFIX.sub("", subject, count=1)
        if stripped == subject:
            return subject.strip()
        subject = stripped.strip()


def truncate_content(content: str, max_length: int) -> str:
    """Cut content to max_length characters and append a visible marker.

    A max_length of 0 or less disables truncation.
    """
    if max_length <= 0 or len(content) <= max_length:
        return content
    return content[:max_length] + TRUNCATION_MARKER
