# Idemark v1.0.0 - Direct Data API Resolver
"""
Resolves an Idestrim record id by querying the platform's backend directly.

The backend URL and public key are not documented; they are discovered by
loading the platform's root page, following its main script bundle and
pattern-matching the bundle source. Discovered configs are cached for the
process lifetime and dropped whenever a query made with them fails.
"""
from __future__ import annotations

import re
from typing import Any, Dict, List
from urllib.parse import urljoin

from pydantic import ValidationError

from idemark_backend.core.config import get_settings
from idemark_backend.core.errors import (
    ConfigDiscoveryError,
    FetchError,
    RecordNotFoundError,
    UpstreamQueryError,
)
from idemark_backend.core.logging import get_logger, truncate
from idemark_backend.models import (
    ExternalRecord,
    ExtractedIdea,
    ImportStrategy,
    PlatformConfig,
)
from idemark_backend.services.config_cache import PlatformConfigCache
from idemark_backend.services.page_fetcher import PageFetcher

logger = get_logger(__name__)

BUNDLE_SRC_PATTERN = re.compile(r'src="(/assets/[^"]+\.js)"', re.IGNORECASE)
API_URL_PATTERN = re.compile(r"https://[a-z]+\.supabase\.co")
API_KEY_PATTERN = re.compile(
    r"eyJ[A-Za-z0-9_-]{20,}\.eyJ[A-Za-z0-9_-]{20,}\.[A-Za-z0-9_-]{20,}"
)


class DataApiResolver:
    """
    Strategy A: direct record lookup against the platform data API.

    Example:
        resolver = DataApiResolver(fetcher, cache)
        idea = await resolver.resolve("3fa85f64-5717-4562-b3fc-2c963f66afa6")
    """

    def __init__(
        self,
        fetcher: PageFetcher,
        cache: PlatformConfigCache,
        base_url: str | None = None,
        table: str | None = None,
    ) -> None:
        settings = get_settings()
        self._fetcher = fetcher
        self._cache = cache
        self.base_url = (base_url or settings.idestrim_base_url).rstrip("/")
        self.table = table or settings.idestrim_records_table

    async def resolve(self, record_id: str) -> ExtractedIdea:
        """
        Look up a record and map it to idea fields.

        Raises:
            ConfigDiscoveryError: Backend config could not be discovered.
            FetchError: The query could not be sent (config is invalidated).
            UpstreamQueryError: The API rejected the query (config is invalidated).
            RecordNotFoundError: The API returned no matching record.
        """
        config = await self.get_config()
        rows = await self.query(config, record_id)

        if not rows:
            raise RecordNotFoundError(f"No {self.table} row with id={record_id}")

        try:
            record = ExternalRecord.model_validate(rows[0])
        except ValidationError as e:
            self._cache.invalidate(self.base_url)
            raise UpstreamQueryError(f"Unexpected record shape for id={record_id}: {e}") from e

        logger.info(f"Resolved record {record_id} via data API")
        return self.map_record(record)

    async def get_config(self) -> PlatformConfig:
        """Return the cached config, discovering it on a miss."""
        config = self._cache.get(self.base_url)
        if config is not None:
            return config

        config = await self.discover_config()
        self._cache.set(self.base_url, config)
        return config

    async def discover_config(self) -> PlatformConfig:
        """
        Find the backend URL and key in the platform's main script bundle.

        Nothing is cached here; the caller stores the result.

        Raises:
            ConfigDiscoveryError: A page could not be fetched or a pattern did not match.
        """
        root_url = f"{self.base_url}/"
        try:
            page = await self._fetcher.fetch(root_url)
        except FetchError as e:
            raise ConfigDiscoveryError(f"Root page unavailable: {e}") from e

        script_match = BUNDLE_SRC_PATTERN.search(page.text)
        if not script_match:
            raise ConfigDiscoveryError(f"No /assets/*.js bundle referenced by {root_url}")

        bundle_url = urljoin(root_url, script_match.group(1))
        try:
            bundle = await self._fetcher.fetch(bundle_url, accept="*/*")
        except FetchError as e:
            raise ConfigDiscoveryError(f"Bundle unavailable: {e}") from e

        url_match = API_URL_PATTERN.search(bundle.text)
        key_match = API_KEY_PATTERN.search(bundle.text)
        if not url_match or not key_match:
            raise ConfigDiscoveryError(
                f"Bundle {bundle_url} missing "
                f"{'API URL' if not url_match else 'API key'}"
            )

        logger.info(f"Discovered data API {url_match.group(0)} from {bundle_url}")
        return PlatformConfig(api_base_url=url_match.group(0), api_key=key_match.group(0))

    async def query(self, config: PlatformConfig, record_id: str) -> List[Dict[str, Any]]:
        """
        Read the rows matching ``record_id`` from the record-listing endpoint.

        Any failure drops the cached config, since it may be stale.
        """
        api_url = (
            f"{config.api_base_url}/rest/v1/{self.table}"
            f"?id=eq.{record_id}&select=*"
        )
        headers = {
            "apikey": config.api_key,
            "Authorization": f"Bearer {config.api_key}",
            "Accept": "application/json",
        }

        try:
            response = await self._fetcher.get(api_url, headers=headers)
        except FetchError:
            self._cache.invalidate(self.base_url)
            raise

        if not response.is_success:
            logger.error(
                f"Data API error {response.status_code}: {truncate(response.text)}"
            )
            self._cache.invalidate(self.base_url)
            raise UpstreamQueryError(
                f"Data API returned HTTP {response.status_code} for id={record_id}"
            )

        try:
            rows = response.json()
        except ValueError as e:
            self._cache.invalidate(self.base_url)
            raise UpstreamQueryError(f"Data API returned invalid JSON: {e}") from e

        if not isinstance(rows, list):
            self._cache.invalidate(self.base_url)
            raise UpstreamQueryError(
                f"Data API returned {type(rows).__name__}, expected a list"
            )

        return rows

    @staticmethod
    def map_record(record: ExternalRecord) -> ExtractedIdea:
        """Map a raw row to idea fields, preferring primary column names."""
        return ExtractedIdea(
            title=record.title or "",
            description=record.description or record.pitch_summary or "",
            image=record.media_url or record.thumbnail_url or "",
            tags=[record.category] if record.category else [],
            source=ImportStrategy.API,
        )
