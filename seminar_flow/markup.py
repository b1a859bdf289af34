"""Helpers for the constrained HTML subset the AI is asked to produce."""

from __future__ import annotations

import re
from html import escape
from typing import Dict, List, Tuple

from bs4 import BeautifulSoup
from bs4.dammit import EntitySubstitution
from bs4.element import CData, Comment, Declaration, Doctype, ProcessingInstruction, Tag
from bs4.formatter import HTMLFormatter

from .errors import GenerationError

ALLOWED_TAGS = {
    "p", "br", "strong", "b", "em", "i", "u",
    "ul", "ol", "li",
    "table", "thead", "tbody", "tr", "th", "td",
    "h1", "h2", "h3", "h4",
    "div", "span", "a", "blockquote",
}
# Elements whose whole content is discarded, not just the tags.
DROPPED_CONTENT_TAGS = {"script", "style", "iframe", "object", "embed", "noscript", "template", "head", "title"}
ALLOWED_ATTRIBUTES: Dict[str, set[str]] = {
    "a": {"href"},
    "div": {"id", "class"},
    "span": {"class"},
    "h3": {"class"},
    "td": {"style", "colspan", "rowspan"},
    "th": {"style", "colspan", "rowspan"},
}
SAFE_STYLE = re.compile(r"^\s*background-color\s*:\s*(#[0-9a-fA-F]{3,8}|[a-zA-Z]+)\s*;?\s*$")
SAFE_HREF = re.compile(r"^(https?://|mailto:)", re.IGNORECASE)
BLOCK_TAGS = {"h1", "h2", "h3", "h4", "li", "tr", "ul", "ol", "table", "div", "blockquote"}
NON_TEXT_NODES = (Comment, CData, Declaration, Doctype, ProcessingInstruction)
# Whitespace-only text inside these survives parsing untouched.
PRESERVED_WHITESPACE_TAGS = ALLOWED_TAGS | {"pre", "textarea"}
# Minimal entity escaping; void elements render as <br>.
OUTPUT_FORMATTER = HTMLFormatter(entity_substitution=EntitySubstitution.substitute_xml, void_element_close_prefix=None)

BIBLIOGRAPHY_PATTERN = re.compile(r'<div id="bibliografia"[\s\S]*?>[\s\S]*?</div>', re.IGNORECASE)
MARKDOWN_BOLD = re.compile(r"\*\*(.*?)\*\*")
LEADING_NUMBER = re.compile(r"^\d+\.\s*")


def parse_fragment(html: str) -> BeautifulSoup:
    """Parse *html* with hidden content (scripts, styles, comments) removed."""

    soup = BeautifulSoup(
        html or "",
        "html.parser",
        multi_valued_attributes=None,
        preserve_whitespace_tags=PRESERVED_WHITESPACE_TAGS,
    )
    names = sorted(DROPPED_CONTENT_TAGS)
    for element in [el for el in soup.find_all(names) if el.find_parent(names) is None]:
        element.decompose()
    for node in [node for node in soup.descendants if isinstance(node, NON_TEXT_NODES)]:
        node.extract()
    return soup


def _allowed_attributes(tag: Tag) -> Dict[str, str]:
    allowed = ALLOWED_ATTRIBUTES.get(tag.name, set())
    kept: Dict[str, str] = {}
    for name, value in tag.attrs.items():
        if name not in allowed or not isinstance(value, str):
            continue
        if name == "style" and not SAFE_STYLE.match(value):
            continue
        if name == "href" and not SAFE_HREF.match(value.strip()):
            continue
        kept[name] = value
    return kept


def sanitize_html(html: str) -> str:
    """Keep only the allow-listed tags and attributes; text is re-escaped."""

    if not html:
        return ""
    soup = parse_fragment(html)
    for tag in soup.find_all(True):
        if tag.name not in ALLOWED_TAGS:
            tag.unwrap()
        else:
            tag.attrs = _allowed_attributes(tag)
    return soup.decode(formatter=OUTPUT_FORMATTER)


def strip_html(html: str) -> str:
    """Return the text content of *html*.

    ``strip_html(plain_to_html(text)) == text`` for any plain text.
    """

    if not html:
        return ""
    parts: List[str] = []
    paragraphs = 0

    def ensure_newline() -> None:
        if parts and not parts[-1].endswith("\n"):
            parts.append("\n")

    def walk(node: Tag) -> None:
        nonlocal paragraphs
        for child in node.children:
            if not isinstance(child, Tag):
                parts.append(str(child))
                continue
            if child.name == "br":
                parts.append("\n")
                continue
            if child.name == "p":
                if paragraphs:
                    parts.append("\n\n")
                else:
                    ensure_newline()
                paragraphs += 1
            elif child.name in BLOCK_TAGS:
                ensure_newline()
            walk(child)
            if child.name in ("td", "th"):
                parts.append(" ")

    walk(parse_fragment(html))
    return "".join(parts)


def plain_to_html(text: str) -> str:
    """Wrap edited plain text: blank lines split paragraphs, single newlines become ``<br>``."""

    body = escape(text, quote=False).replace("\n\n", "</p><p>").replace("\n", "<br>")
    return f"<p>{body}</p>"


def newlines_to_breaks(text: str) -> str:
    return escape(text, quote=False).replace("\n", "<br />")


def markdown_bold_to_html(text: str) -> str:
    return MARKDOWN_BOLD.sub(r"<strong>\1</strong>", text)


def extract_bibliography(html: str) -> Tuple[str, str]:
    """Split the ``<div id="bibliografia">`` block off the main text."""

    match = BIBLIOGRAPHY_PATTERN.search(html)
    main_text = BIBLIOGRAPHY_PATTERN.sub("", html).strip()
    return main_text, match.group(0) if match else ""


def split_variants(text: str, delimiter: str, *, minimum: int = 2) -> List[str]:
    """Split an AI response on an exact delimiter; too few segments is a failure."""

    variants = [segment.strip() for segment in text.split(delimiter)]
    variants = [segment for segment in variants if segment]
    if len(variants) < minimum:
        raise GenerationError("La IA no generó las variantes esperadas.")
    return variants


def strip_numbering(line: str) -> str:
    return LEADING_NUMBER.sub("", line.strip()).strip()


def numbered_lines(text: str) -> List[str]:
    """Split text into lines, dropping ``1.``-style prefixes and blank lines."""

    lines = [strip_numbering(line) for line in text.split("\n")]
    return [line for line in lines if line]
