# Idemark v1.0.0 - Pydantic Models
"""
Data models for the Idestrim import service.
Defines request/response schemas and the transient objects passed between
the link validator, the two resolution strategies and the normalizer.
"""
from __future__ import annotations

from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


class ImportStrategy(str, Enum):
    """Resolution path used to turn a link into idea data."""
    API = "api"
    SCRAPE = "scrape"
    AUTO = "auto"


class ImportStage(str, Enum):
    """Orchestrator states, in the order a successful import visits them."""
    IDLE = "idle"
    VALIDATING = "validating"
    RESOLVING = "resolving"
    NORMALIZING = "normalizing"
    DONE = "done"
    FAILED = "failed"


class ImportRequest(BaseModel):
    """
    Input request for importing an idea from an Idestrim post.

    Attributes:
        url: Link to the post. Must be non-empty; domain checks are left
            to the link validator so they map to the import error taxonomy.
    """
    url: str

    @field_validator("url")
    @classmethod
    def validate_url(cls, v: str) -> str:
        """Strip whitespace and reject empty links."""
        v = v.strip()
        if not v:
            raise ValueError("url must not be empty")
        return v


class ValidatedLink(BaseModel):
    """Link that passed validation, with the record id when one is embedded."""
    url: str
    record_id: Optional[str] = None


class PlatformConfig(BaseModel):
    """Backend endpoint and key discovered from the platform's client bundle."""
    api_base_url: str
    api_key: str


class ExternalRecord(BaseModel):
    """
    Raw row returned by the platform's data API.

    Only a handful of columns are consumed; the rest are kept so the row
    can be logged or inspected as-is.
    """
    model_config = ConfigDict(extra="allow")

    id: Optional[str] = None
    title: Optional[str] = None
    description: Optional[str] = None
    pitch_summary: Optional[str] = None
    media_url: Optional[str] = None
    thumbnail_url: Optional[str] = None
    category: Optional[str] = None

    @field_validator(
        "id", "title", "description", "pitch_summary",
        "media_url", "thumbnail_url", "category",
        mode="before",
    )
    @classmethod
    def stringify_scalars(cls, v):
        """Pass numeric and boolean columns through as text."""
        if isinstance(v, (int, float, bool)):
            return str(v)
        return v


class ExtractedIdea(BaseModel):
    """Fields produced by a strategy, before normalization."""
    title: str = ""
    description: str = ""
    image: str = ""
    tags: List[str] = Field(default_factory=list)
    source: ImportStrategy = ImportStrategy.SCRAPE
    # True when fields were decoded by the HTML parser and hold no markup.
    plain_text: bool = False

    @property
    def is_empty(self) -> bool:
        return not (self.title or self.description or self.image)


class ImportResult(BaseModel):
    """Structured idea data used to pre-fill the submission form."""
    title: str = ""
    description: str = ""
    image: str = ""
    tags: List[str] = Field(default_factory=list)


class ImportResponse(BaseModel):
    """
    Response envelope for the import endpoint.

    Attributes:
        success: Whether usable idea data was found.
        data: The imported fields (success only).
        error: Human-readable failure message (failure only).
        code: Machine-readable failure code (failure only).
    """
    success: bool
    data: Optional[ImportResult] = None
    error: Optional[str] = None
    code: Optional[str] = None


class FetchResult(BaseModel):
    """Body and status of a successful outbound GET."""
    url: str
    status_code: int
    text: str
