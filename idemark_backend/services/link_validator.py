# Idemark v1.0.0 - Link Validator
"""
Checks that a submitted URL points at the Idestrim platform and, when the
direct data API will be used, that it embeds a record id.
"""
from __future__ import annotations

import re
from typing import List

from idemark_backend.core.config import get_settings
from idemark_backend.core.errors import InvalidLinkError, MalformedLinkError
from idemark_backend.core.logging import get_logger
from idemark_backend.models import ValidatedLink

logger = get_logger(__name__)

RECORD_ID_PATTERN = re.compile(
    r"/idea/([0-9a-f]{8}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{12})",
    re.IGNORECASE,
)


class LinkValidator:
    """
    Validates Idestrim links without touching the network.

    Example:
        validator = LinkValidator()
        link = validator.validate(url, require_record_id=True)
        link.record_id  # "3fa85f64-..."
    """

    def __init__(self, domains: List[str] | None = None) -> None:
        settings = get_settings()
        self._domains = [d.lower() for d in (domains or settings.idestrim_domains)]

    def has_platform_marker(self, url: str) -> bool:
        url_lower = url.lower()
        return any(domain in url_lower for domain in self._domains)

    @staticmethod
    def extract_record_id(url: str) -> str | None:
        """Return the UUID following ``/idea/`` in the URL, if any."""
        match = RECORD_ID_PATTERN.search(url)
        return match.group(1) if match else None

    def validate(self, url: str, require_record_id: bool = True) -> ValidatedLink:
        """
        Validate a raw URL string.

        Args:
            url: Link submitted by the user.
            require_record_id: Reject links without an ``/idea/<uuid>`` segment.

        Returns:
            ValidatedLink with the extracted record id (if present).

        Raises:
            InvalidLinkError: URL is empty or not an Idestrim link.
            MalformedLinkError: Idestrim link without a record id while one is required.
        """
        url = (url or "").strip()
        if not url or not self.has_platform_marker(url):
            raise InvalidLinkError(f"Not an Idestrim link: {url[:200]!r}")

        record_id = self.extract_record_id(url)
        if record_id is None and require_record_id:
            raise MalformedLinkError(f"No /idea/<uuid> segment in {url[:200]!r}")

        logger.debug(f"Link validated: {url} (record_id={record_id})")
        return ValidatedLink(url=url, record_id=record_id)
