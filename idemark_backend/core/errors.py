# Idemark v1.0.0 - Import Error Taxonomy
"""
Exceptions raised while resolving an Idestrim link.

Every error carries the HTTP status and user-facing message it maps to;
``str(exc)`` holds the underlying detail, which is logged but never sent
to the client.
"""
from __future__ import annotations

INVALID_LINK = "INVALID_LINK"
IMPORT_FAILED = "IMPORT_FAILED"


class ImportFailure(Exception):
    """Base class for every error the import pipeline maps to a response."""

    status_code: int = 500
    code: str = IMPORT_FAILED
    user_message: str = "Failed to import."

    def __init__(self, detail: str | None = None) -> None:
        super().__init__(detail or self.user_message)


class InvalidLinkError(ImportFailure):
    """The URL does not belong to the Idestrim platform."""

    status_code = 400
    code = INVALID_LINK
    user_message = "Please provide a valid Idestrim link."


class MalformedLinkError(ImportFailure):
    """The URL is an Idestrim link but carries no record id."""

    status_code = 400
    code = INVALID_LINK
    user_message = "Invalid link format. Expected: idestrim.site/idea/[id]"


class FetchError(ImportFailure):
    """Transport failure, timeout, or non-2xx status on an outbound call."""

    user_message = "Could not reach Idestrim. Please try again later."

    def __init__(self, detail: str | None = None, status_code: int | None = None) -> None:
        super().__init__(detail)
        # Upstream status; the response status stays 500.
        self.upstream_status = status_code


class ConfigDiscoveryError(ImportFailure):
    """The backend endpoint or key could not be found in the public bundle."""

    user_message = "Could not connect to Idestrim. Please try again later."


class UpstreamQueryError(ImportFailure):
    """The data API rejected a query made with the cached configuration."""

    user_message = "Could not fetch post from Idestrim."


class RecordNotFoundError(ImportFailure):
    """The data API answered but returned no matching record."""

    status_code = 404
    user_message = "Post not found. Make sure the link is correct and the post is public."


class NoExtractableContentError(ImportFailure):
    """Neither metadata nor page markup yielded a title, description or image."""

    status_code = 404
    user_message = "Could not extract post data. Please check the link."


STRATEGY_A_RECOVERABLE = (FetchError, ConfigDiscoveryError, UpstreamQueryError)
