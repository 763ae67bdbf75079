# Idemark v1.0.0 - Metadata Scraper
"""
Extracts idea fields from a post's HTML when no structured API is available.

Lookup order per field:
- title: og:title, twitter:title, then the first h1, h2, h3
- description: og:description, twitter:description, description, then a
  paragraph with a "description" class, then the first paragraph
- image: og:image, twitter:image, then the first platform storage URL in the page
- tags: short text inside elements whose class or id mentions category/tag/topic
"""
from __future__ import annotations

import re
from typing import List, Optional

from bs4 import BeautifulSoup, NavigableString, Tag

from idemark_backend.core.config import get_settings
from idemark_backend.core.errors import NoExtractableContentError
from idemark_backend.core.logging import get_logger
from idemark_backend.models import ExtractedIdea, ImportStrategy
from idemark_backend.services.normalizer import collapse_whitespace
from idemark_backend.services.page_fetcher import PageFetcher

logger = get_logger(__name__)

META_KEYS = {
    "title": ("og:title", "twitter:title"),
    "description": ("og:description", "twitter:description", "description"),
    "image": ("og:image", "twitter:image"),
}

HEADING_TAGS = ("h1", "h2", "h3")
TAG_MARKER_PATTERN = re.compile(r"category|tag|topic", re.IGNORECASE)
TAG_MARKER_ATTRS = ("class", "id")
SKIPPED_ELEMENTS = {"html", "head", "body", "meta", "link", "script", "style", "noscript"}
MAX_TAG_LENGTH = 50


class MetadataScraper:
    """
    Strategy B: Open Graph / Twitter Card scraping with markup fallbacks.

    Example:
        scraper = MetadataScraper(fetcher)
        idea = await scraper.scrape("https://idestrim.site/idea/...")
    """

    def __init__(
        self,
        fetcher: PageFetcher,
        media_bucket: str | None = None,
        max_html_chars: int | None = None,
    ) -> None:
        settings = get_settings()
        self._fetcher = fetcher
        self.max_html_chars = max_html_chars or settings.max_html_chars
        bucket = media_bucket or settings.idestrim_media_bucket
        self._storage_url_pattern = re.compile(
            r"https://[a-z0-9]+\.supabase\.co/storage/v1/object/public/"
            + re.escape(bucket)
            + r"/[^\"'\s<>)]+",
            re.IGNORECASE,
        )

    async def scrape(self, url: str) -> ExtractedIdea:
        """
        Fetch a page and extract idea fields from it.

        Raises:
            FetchError: The page could not be fetched.
            NoExtractableContentError: Nothing usable was found.
        """
        page = await self._fetcher.fetch(url)
        idea = self.extract(page.text)
        logger.info(f"Scraped {url}: title={bool(idea.title)}, image={bool(idea.image)}")
        return idea

    def extract(self, html: str) -> ExtractedIdea:
        """Extract idea fields from raw HTML."""
        html = html[: self.max_html_chars]
        soup = BeautifulSoup(html, "html.parser")

        title = self.extract_meta(soup, "title") or self.extract_heading(soup)
        description = self.extract_meta(soup, "description") or self.extract_paragraph(soup)
        image = self.extract_meta(soup, "image") or self.extract_storage_image(html)

        idea = ExtractedIdea(
            title=collapse_whitespace(title or ""),
            description=collapse_whitespace(description or ""),
            image=(image or "").strip(),
            tags=self.extract_tags(soup),
            source=ImportStrategy.SCRAPE,
            plain_text=True,
        )

        if idea.is_empty:
            raise NoExtractableContentError("No metadata, headings, paragraphs or media found")
        return idea

    @staticmethod
    def _find_meta_content(soup: BeautifulSoup, key: str) -> Optional[str]:
        key_pattern = re.compile(rf"^{re.escape(key)}$", re.IGNORECASE)
        for attr in ("property", "name"):
            tag = soup.find("meta", attrs={attr: key_pattern})
            if isinstance(tag, Tag):
                content = tag.get("content")
                if isinstance(content, str) and content.strip():
                    return content.strip()
        return None

    def extract_meta(self, soup: BeautifulSoup, field: str) -> Optional[str]:
        """Return the first non-empty meta value for ``field`` in preference order."""
        for key in META_KEYS[field]:
            content = self._find_meta_content(soup, key)
            if content:
                return content
        return None

    @staticmethod
    def extract_heading(soup: BeautifulSoup) -> Optional[str]:
        """First non-empty h1, else h2, else h3."""
        for name in HEADING_TAGS:
            for heading in soup.find_all(name):
                text = heading.get_text(" ", strip=True)
                if text:
                    return text
        return None

    @staticmethod
    def extract_paragraph(soup: BeautifulSoup) -> Optional[str]:
        """Paragraph with a "description" class, else the first non-empty paragraph."""
        described = soup.find(
            "p", class_=lambda c: bool(c) and "description" in c.lower()
        )
        if isinstance(described, Tag):
            text = described.get_text(" ", strip=True)
            if text:
                return text

        for paragraph in soup.find_all("p"):
            text = paragraph.get_text(" ", strip=True)
            if text:
                return text
        return None

    def extract_storage_image(self, html: str) -> Optional[str]:
        match = self._storage_url_pattern.search(html)
        return match.group(0) if match else None

    @staticmethod
    def _mentions_tag_marker(element: Tag) -> bool:
        for attr in TAG_MARKER_ATTRS:
            value = element.get(attr)
            if isinstance(value, list):
                value = " ".join(value)
            if value and TAG_MARKER_PATTERN.search(value):
                return True
        return False

    def extract_tags(self, soup: BeautifulSoup) -> List[str]:
        """
        Collect short texts held directly by category/tag/topic elements.

        Duplicates are kept.
        """
        tags: List[str] = []
        for element in soup.find_all(True):
            if element.name in SKIPPED_ELEMENTS or not self._mentions_tag_marker(element):
                continue
            text = " ".join(
                str(child).strip()
                for child in element.children
                if type(child) is NavigableString and str(child).strip()
            )
            text = collapse_whitespace(text)
            if text and len(text) < MAX_TAG_LENGTH:
                tags.append(text)
        return tags
