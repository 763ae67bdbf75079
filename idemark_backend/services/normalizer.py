# Idemark v1.0.0 - Result Normalizer
"""
Cleans strategy output into the ImportResult returned to the form.

Data API fields may hold raw markup and are run through ``clean_html``.
Scraped fields are already plain text (the HTML parser strips tags and
decodes entities), so they only get their whitespace collapsed.
"""
from __future__ import annotations

import re
from typing import Callable, List

from idemark_backend.core.errors import NoExtractableContentError
from idemark_backend.core.logging import get_logger
from idemark_backend.models import ExtractedIdea, ImportResult

logger = get_logger(__name__)

TAG_PATTERN = re.compile(r"<[^>]*>")
WHITESPACE_PATTERN = re.compile(r"\s+")

# &amp; last so "&amp;lt;" decodes to "&lt;", not "<".
HTML_ENTITIES = (
    ("&lt;", "<"),
    ("&gt;", ">"),
    ("&quot;", '"'),
    ("&#39;", "'"),
    ("&amp;", "&"),
)


def collapse_whitespace(text: str) -> str:
    if not text:
        return ""
    return WHITESPACE_PATTERN.sub(" ", text).strip()


def clean_html(text: str) -> str:
    """
    Strip markup, decode common entities and collapse whitespace.

    >>> clean_html("<b>A &amp; B</b>  \\n  C")
    'A & B C'
    """
    if not text:
        return ""
    text = TAG_PATTERN.sub("", text)
    for entity, char in HTML_ENTITIES:
        text = text.replace(entity, char)
    return collapse_whitespace(text)


def normalize_tags(tags: List[str], plain_text: bool = False) -> List[str]:
    """Clean each tag and drop the ones left empty. Order and duplicates are kept."""
    clean = collapse_whitespace if plain_text else clean_html
    cleaned = (clean(tag) for tag in tags)
    return [tag for tag in cleaned if tag]


def normalize(extracted: ExtractedIdea) -> ImportResult:
    """
    Build the final ImportResult from strategy output.

    Raises:
        NoExtractableContentError: Title, description and image are all empty.
    """
    clean: Callable[[str], str] = (
        collapse_whitespace if extracted.plain_text else clean_html
    )
    result = ImportResult(
        title=clean(extracted.title),
        description=clean(extracted.description),
        image=extracted.image.strip(),
        tags=normalize_tags(extracted.tags, plain_text=extracted.plain_text),
    )

    if not (result.title or result.description or result.image):
        raise NoExtractableContentError(
            f"{extracted.source.value} strategy produced no title, description or image"
        )

    logger.debug(
        f"Normalized {extracted.source.value} result: title={result.title[:60]!r}, "
        f"tags={len(result.tags)}"
    )
    return result
