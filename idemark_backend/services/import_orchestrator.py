# Idemark v1.0.0 - Import Orchestrator
"""
Entry point of the import pipeline.

Validates the link, runs the configured strategy (direct data API, HTML
scraping, or the API with scraping as fallback), normalizes the result and
maps every failure to a structured response. Nothing is persisted.
"""
from __future__ import annotations

from typing import Tuple

from idemark_backend.core.config import get_settings
from idemark_backend.core.errors import (
    STRATEGY_A_RECOVERABLE,
    ImportFailure,
    UpstreamQueryError,
)
from idemark_backend.core.logging import get_logger
from idemark_backend.models import (
    ExtractedIdea,
    ImportRequest,
    ImportResponse,
    ImportResult,
    ImportStage,
    ImportStrategy,
    ValidatedLink,
)
from idemark_backend.services.data_api_resolver import DataApiResolver
from idemark_backend.services.link_validator import LinkValidator
from idemark_backend.services.metadata_scraper import MetadataScraper
from idemark_backend.services.normalizer import normalize

logger = get_logger(__name__)

GENERIC_FAILURE = "Failed to import."


class ImportOrchestrator:
    """
    Runs one import per call: Idle -> Validating -> Resolving -> Normalizing -> Done.

    Example:
        orchestrator = ImportOrchestrator(validator, resolver, scraper)
        status_code, response = await orchestrator.handle(ImportRequest(url=url))
    """

    def __init__(
        self,
        validator: LinkValidator,
        api_resolver: DataApiResolver,
        scraper: MetadataScraper,
        strategy: ImportStrategy | str | None = None,
        upstream_retry_attempts: int | None = None,
    ) -> None:
        settings = get_settings()
        self.validator = validator
        self.api_resolver = api_resolver
        self.scraper = scraper
        self.strategy = ImportStrategy(strategy or settings.import_strategy)
        self.upstream_retry_attempts = (
            settings.upstream_retry_attempts
            if upstream_retry_attempts is None
            else upstream_retry_attempts
        )

    def _enter(self, stage: ImportStage, url: str) -> None:
        logger.debug(
            f"Import stage -> {stage.value}",
            extra={"stage": stage.value, "import_url": url, "strategy": self.strategy.value},
        )

    async def run(self, request: ImportRequest) -> ImportResult:
        """
        Resolve a link into an ImportResult.

        Raises:
            ImportFailure: Any taxonomy error from validation or resolution.
        """
        self._enter(ImportStage.VALIDATING, request.url)
        link = self.validator.validate(
            request.url,
            require_record_id=self.strategy is not ImportStrategy.SCRAPE,
        )

        self._enter(ImportStage.RESOLVING, link.url)
        extracted = await self.resolve(link)

        self._enter(ImportStage.NORMALIZING, link.url)
        result = normalize(extracted)

        self._enter(ImportStage.DONE, link.url)
        return result

    async def resolve(self, link: ValidatedLink) -> ExtractedIdea:
        if self.strategy is ImportStrategy.SCRAPE:
            return await self.scraper.scrape(link.url)

        try:
            return await self._resolve_via_api(link.record_id)
        except STRATEGY_A_RECOVERABLE as e:
            if self.strategy is not ImportStrategy.AUTO:
                raise
            logger.warning(
                f"Data API strategy failed ({type(e).__name__}: {e}); "
                f"falling back to scraping {link.url}"
            )
            return await self.scraper.scrape(link.url)

    async def _resolve_via_api(self, record_id: str | None) -> ExtractedIdea:
        """Query the data API, rediscovering config after each upstream rejection."""
        attempt = 0
        while True:
            try:
                return await self.api_resolver.resolve(record_id)
            except UpstreamQueryError as e:
                if attempt >= self.upstream_retry_attempts:
                    raise
                attempt += 1
                logger.warning(
                    f"Upstream rejected query: {e}; retrying with fresh discovery "
                    f"({attempt}/{self.upstream_retry_attempts})"
                )

    async def handle(self, request: ImportRequest) -> Tuple[int, ImportResponse]:
        """
        Run an import and map the outcome to an HTTP status and response body.

        No exception escapes this method.
        """
        try:
            result = await self.run(request)
        except ImportFailure as e:
            self._enter(ImportStage.FAILED, request.url)
            logger.warning(
                f"Import failed for {request.url}: {type(e).__name__}: {e}",
                extra={
                    "import_url": request.url,
                    "strategy": self.strategy.value,
                    "stage": ImportStage.FAILED.value,
                    "error_code": e.code,
                },
            )
            return e.status_code, ImportResponse(
                success=False, error=e.user_message, code=e.code
            )
        except Exception as e:
            self._enter(ImportStage.FAILED, request.url)
            logger.error(f"Unexpected import error for {request.url}: {e}", exc_info=True)
            return 500, ImportResponse(
                success=False, error=GENERIC_FAILURE, code=ImportFailure.code
            )

        logger.info(f"Import succeeded for {request.url} ({len(result.tags)} tags)")
        return 200, ImportResponse(success=True, data=result)
