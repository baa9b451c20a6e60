"""
Pytest fixtures for FeedWise tests.

No test touches the network: a StubFeedParser stands in for FeedParser and
serves canned ParsedFeed documents (or raises canned errors) per URL.
"""

import os
import tempfile
from datetime import timedelta
from pathlib import Path

import pytest
from fastapi.testclient import TestClient

from feedwise.config import state
from feedwise.database import Database
from feedwise.dates import utc_now
from feedwise.exceptions import FeedUnreachable
from feedwise.feeds import PLACEHOLDER_FAVICON, ParsedFeed, RawFeedItem
from feedwise.ingestion import IngestionEngine
from feedwise.normalizer import normalize_item
from feedwise.rate_limit import limiter
from feedwise.server import app
from feedwise.summarizer import Summarizer

FEED_URL = "https://example.com/feed.xml"
OWNER = 1


class StubFeedParser:
    """In-memory replacement for FeedParser."""

    def __init__(self):
        self.documents: dict[str, ParsedFeed | Exception] = {}
        self.not_modified: set[str] = set()
        self.discovered: dict[str, str] = {}
        self.calls: list[tuple[str, object]] = []

    def serve(self, url: str, items: list[RawFeedItem], title: str = "Example Feed"):
        self.documents[url] = ParsedFeed(url=url, title=title, description=None, items=items)

    def fail(self, url: str, error: Exception):
        self.documents[url] = error

    async def fetch(self, url, modified_since=None):
        self.calls.append((url, modified_since))
        if modified_since is not None and url in self.not_modified:
            return None
        document = self.documents.get(url)
        if isinstance(document, Exception):
            raise document
        if document is None:
            raise FeedUnreachable("HTTP 404 fetching feed", url=url)
        return document

    async def discover_feed(self, url):
        return self.discovered.get(url)

    async def resolve_favicon(self, url):
        return PLACEHOLDER_FAVICON


def make_item(n: int, hours_ago: float = 1, **overrides) -> RawFeedItem:
    """Raw item number n, published hours_ago before now."""
    fields = {
        "title": f"Article {n}",
        "snippet": f"Snippet for article {n}",
        "link": f"https://example.com/articles/{n}",
        "author": "Jane Writer",
        "published_raw": utc_now() - timedelta(hours=hours_ago),
    }
    fields.update(overrides)
    return RawFeedItem(**fields)


@pytest.fixture
def temp_db_path():
    """Create a temporary database file path."""
    with tempfile.NamedTemporaryFile(suffix=".db", delete=False) as f:
        yield Path(f.name)
    # Cleanup
    if os.path.exists(f.name):
        os.unlink(f.name)


@pytest.fixture
def test_db(temp_db_path):
    """Create a test database instance."""
    db = Database(temp_db_path)
    yield db


@pytest.fixture
def stub_parser():
    return StubFeedParser()


@pytest.fixture
def engine(test_db, stub_parser):
    """Ingestion engine over the temp database and the stub parser."""
    return IngestionEngine(test_db, stub_parser)


@pytest.fixture
def feed_id(test_db):
    """A feed with one tag and no articles yet."""
    return test_db.add_feed(OWNER, FEED_URL, "Example Feed", category="News", tags=["python"])


@pytest.fixture
def client(test_db, stub_parser):
    """Create a test client with isolated database and stub parser."""
    # Store original state
    original_db = state.db
    original_feed_parser = state.feed_parser
    original_ingestion = state.ingestion
    original_summarizer = state.summarizer

    state.db = test_db
    state.feed_parser = stub_parser
    state.ingestion = IngestionEngine(test_db, stub_parser)
    state.summarizer = Summarizer()
    limiter.enabled = False

    with TestClient(app, raise_server_exceptions=False) as test_client:
        yield test_client

    # Restore original state
    limiter.enabled = True
    state.db = original_db
    state.feed_parser = original_feed_parser
    state.ingestion = original_ingestion
    state.summarizer = original_summarizer


@pytest.fixture
async def ingested(engine, stub_parser, feed_id):
    """Feed with three ingested articles (1h, 2d and 10d old)."""
    stub_parser.serve(FEED_URL, [
        make_item(1, hours_ago=1),
        make_item(2, hours_ago=48),
        make_item(3, hours_ago=240),
    ])
    await engine.ingest(OWNER, feed_id)
    return feed_id


@pytest.fixture
def seeded(test_db, feed_id):
    """Feed with three articles inserted directly through the repository."""
    now = utc_now()
    drafts = [normalize_item(make_item(n, hours_ago=h), ["python"], now) for n, h in ((1, 1), (2, 48), (3, 240))]
    test_db.insert_articles(OWNER, feed_id, drafts)
    test_db.update_feed_sync(feed_id, now, len(drafts))
    return feed_id


@pytest.fixture
def client_with_data(client, test_db, stub_parser, feed_id):
    """Test client with a feed whose articles were ingested through the API."""
    stub_parser.serve(FEED_URL, [
        make_item(1, hours_ago=1, title="Python packaging news"),
        make_item(2, hours_ago=30),
        make_item(3, hours_ago=200),
    ])
    response = client.post(f"/feeds/{feed_id}/refresh")
    assert response.status_code == 200

    articles = test_db.get_articles(OWNER, limit=None)
    by_url = {a.url: a.id for a in articles}
    return client, {
        "feed_id": feed_id,
        "article_ids": [by_url[f"https://example.com/articles/{n}"] for n in (1, 2, 3)],
    }
