# Idemark v1.0.0 - Shared Test Fixtures
"""
Fake Idestrim platform served through httpx.MockTransport.
"""
import json
from typing import Any, List, Optional

import httpx
import pytest

from idemark_backend.services.config_cache import PlatformConfigCache
from idemark_backend.services.data_api_resolver import DataApiResolver
from idemark_backend.services.import_orchestrator import ImportOrchestrator
from idemark_backend.services.link_validator import LinkValidator
from idemark_backend.services.metadata_scraper import MetadataScraper
from idemark_backend.services.page_fetcher import PageFetcher

RECORD_ID = "3fa85f64-5717-4562-b3fc-2c963f66afa6"
POST_URL = f"https://idestrim.site/idea/{RECORD_ID}"
BASE_URL = "https://www.idestrim.site"
API_URL = "https://abcdefghijkl.supabase.co"
API_KEY = "eyJ" + "a" * 24 + ".eyJ" + "b" * 24 + "." + "c" * 24

ROOT_HTML = (
    '<!doctype html><html><head>'
    '<script type="module" crossorigin src="/assets/index-Dk3f9a.js"></script>'
    '</head><body><div id="root"></div></body></html>'
)
BUNDLE_JS = (
    'const a="https://cdn.example.net/x";'
    f'const Ue="{API_URL}",Ve="{API_KEY}";'
    "export{Ue as u};"
)
POST_HTML = """
<html><head>
<meta property="og:title" content="Solar Kiosk">
<meta property="og:description" content="Off-grid charging &amp; Wi-Fi">
<meta property="og:image" content="https://img.example.com/kiosk.png">
</head><body>
<span class="category-badge">Energy</span>
</body></html>
"""


class FakeIdestrim:
    """Routes outbound requests to canned platform responses and records them."""

    def __init__(self) -> None:
        self.requests: List[httpx.Request] = []
        self.root_html = ROOT_HTML
        self.bundle_js = BUNDLE_JS
        self.post_html = POST_HTML
        self.post_status = 200
        self.rows: Any = [
            {
                "id": RECORD_ID,
                "title": "X",
                "description": "Y",
                "media_url": "https://img/z.png",
                "category": "AI",
            }
        ]
        # Status codes served by successive data API queries; 200 once exhausted.
        self.query_statuses: List[int] = []

    def count(self, path_prefix: str, host: Optional[str] = None) -> int:
        return sum(
            1 for r in self.requests
            if r.url.path.startswith(path_prefix) and (host is None or r.url.host == host)
        )

    @property
    def discoveries(self) -> int:
        """Root page fetches, one per discovery."""
        return sum(
            1 for r in self.requests if r.url.host == "www.idestrim.site" and r.url.path == "/"
        )

    @property
    def queries(self) -> int:
        return self.count("/rest/v1/")

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        host, path = request.url.host, request.url.path

        if host == "www.idestrim.site" and path == "/":
            return httpx.Response(200, text=self.root_html, headers={"content-type": "text/html"})
        if host == "www.idestrim.site" and path.startswith("/assets/"):
            return httpx.Response(200, text=self.bundle_js)
        if host.endswith(".supabase.co") and path.startswith("/rest/v1/"):
            status = self.query_statuses.pop(0) if self.query_statuses else 200
            if status != 200:
                return httpx.Response(status, json={"message": "Invalid API key"})
            return httpx.Response(200, content=json.dumps(self.rows).encode())
        if "idestrim" in host and path.startswith("/idea/"):
            return httpx.Response(
                self.post_status, text=self.post_html, headers={"content-type": "text/html"}
            )
        return httpx.Response(404, text="not found")


@pytest.fixture
def fake_platform() -> FakeIdestrim:
    return FakeIdestrim()


@pytest.fixture
def fetcher(fake_platform) -> PageFetcher:
    client = httpx.AsyncClient(transport=httpx.MockTransport(fake_platform.handler))
    return PageFetcher(client=client)


@pytest.fixture
def config_cache() -> PlatformConfigCache:
    return PlatformConfigCache()


@pytest.fixture
def api_resolver(fetcher, config_cache) -> DataApiResolver:
    return DataApiResolver(fetcher, config_cache, base_url=BASE_URL)


@pytest.fixture
def scraper(fetcher) -> MetadataScraper:
    return MetadataScraper(fetcher, media_bucket="media")


@pytest.fixture
def make_orchestrator(api_resolver, scraper):
    """Build an orchestrator around the fake platform for a given strategy."""
    def _make(strategy: str = "auto", upstream_retry_attempts: int = 1) -> ImportOrchestrator:
        return ImportOrchestrator(
            validator=LinkValidator(domains=["idestrim.site", "idestrim.com"]),
            api_resolver=api_resolver,
            scraper=scraper,
            strategy=strategy,
            upstream_retry_attempts=upstream_retry_attempts,
        )
    return _make
