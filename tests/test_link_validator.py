# Idemark v1.0.0 - Link Validator Tests
"""
Unit tests for LinkValidator.
"""
import pytest

from idemark_backend.core.errors import InvalidLinkError, MalformedLinkError
from idemark_backend.services.link_validator import LinkValidator

RECORD_ID = "3fa85f64-5717-4562-b3fc-2c963f66afa6"


@pytest.fixture
def validator():
    return LinkValidator(domains=["idestrim.site", "idestrim.com"])


class TestLinkValidator:
    """Tests for LinkValidator."""

    @pytest.mark.parametrize("url", [
        f"https://idestrim.site/idea/{RECORD_ID}",
        f"https://www.idestrim.site/idea/{RECORD_ID}?ref=share",
        f"https://idestrim.com/idea/{RECORD_ID}",
        f"https://IDESTRIM.SITE/idea/{RECORD_ID.upper()}",
    ])
    def test_valid_links(self, validator, url):
        """Test platform links with a record id are accepted."""
        link = validator.validate(url)
        assert link.record_id is not None
        assert link.record_id.lower() == RECORD_ID

    def test_extracts_exact_record_id(self, validator):
        """Test the record id is returned exactly as it appears in the URL."""
        link = validator.validate(f"https://idestrim.site/idea/{RECORD_ID}/details")
        assert link.record_id == RECORD_ID

    @pytest.mark.parametrize("url", [
        "https://example.com/random",
        f"https://example.com/idea/{RECORD_ID}",
        "not a url",
        "",
        "   ",
    ])
    def test_rejects_foreign_links(self, validator, url):
        """Test links without a platform domain marker are rejected."""
        with pytest.raises(InvalidLinkError):
            validator.validate(url)

    @pytest.mark.parametrize("url", [
        "https://idestrim.site/",
        "https://idestrim.site/post/123",
        "https://idestrim.site/idea/not-a-uuid",
        f"https://idestrim.site/ideas/{RECORD_ID}",
    ])
    def test_rejects_links_without_record_id(self, validator, url):
        """Test platform links without /idea/<uuid> fail with MalformedLinkError."""
        with pytest.raises(MalformedLinkError) as exc_info:
            validator.validate(url)
        assert "idestrim.site/idea/[id]" in exc_info.value.user_message

    def test_record_id_optional_for_scraping(self, validator):
        """Test record id is not required when only scraping will be used."""
        link = validator.validate("https://idestrim.site/post/123", require_record_id=False)
        assert link.url == "https://idestrim.site/post/123"
        assert link.record_id is None

    def test_malformed_is_distinct_from_invalid(self):
        """Test both errors map to 400 with different messages."""
        assert MalformedLinkError.status_code == InvalidLinkError.status_code == 400
        assert MalformedLinkError.user_message != InvalidLinkError.user_message
        assert not issubclass(MalformedLinkError, InvalidLinkError)
