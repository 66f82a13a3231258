"""Tests for agents.crawler_agent."""

import pytest

from agents.crawler_agent import SiteCrawler
from app.errors import FetchError
from conftest import FakeFetcher, link_list, make_html


SEED = "https://example.com/"


def test_crawl_is_breadth_first_and_skips_failures(fake_fetcher, settings):
    result = SiteCrawler(fake_fetcher, settings).crawl(SEED)

    assert result.urls == [
        "https://example.com/",
        "https://example.com/about",
        "https://example.com/products",
        "https://example.com/team",
    ]
    assert [f.url for f in result.failures] == [
        "https://example.com/nav-only",
        "https://example.com/missing",
    ]
    assert result.partial is True


def test_crawl_never_leaves_seed_origin(fake_fetcher, settings):
    result = SiteCrawler(fake_fetcher, settings).crawl(SEED)

    assert all(url.startswith("https://example.com/") for url in fake_fetcher.calls)
    for page in result.pages:
        assert all(link.startswith("https://example.com/") for link in page.links)


def test_crawl_respects_max_pages(fake_fetcher, settings):
    result = SiteCrawler(fake_fetcher, settings).crawl(SEED, max_pages=2)
    assert len(result.pages) == 2


def test_each_url_fetched_at_most_once(settings):
    # Every page links to every other page, including itself.
    urls = [f"https://example.com/p{i}" for i in range(4)]
    hrefs = [u.replace("https://example.com", "") for u in urls]
    pages = {u: make_html(body=link_list(*hrefs, *hrefs)) for u in urls}
    fetcher = FakeFetcher(pages)

    result = SiteCrawler(fetcher, settings).crawl(urls[0], max_pages=10)

    assert len(result.pages) == 4
    assert len(set(result.urls)) == len(result.urls)
    assert len(fetcher.calls) == len(set(fetcher.calls))
    assert result.partial is False


def test_crawl_stops_when_frontier_is_exhausted(settings):
    fetcher = FakeFetcher({SEED: make_html(body="<p>No links.</p>")})
    result = SiteCrawler(fetcher, settings).crawl(SEED, max_pages=5)
    assert result.urls == [SEED]
    assert fetcher.calls == [SEED]


def test_seed_failure_propagates(settings):
    fetcher = FakeFetcher({})
    with pytest.raises(FetchError):
        SiteCrawler(fetcher, settings).crawl(SEED)


def test_deadline_stops_crawl(settings, fake_fetcher, monkeypatch):
    settings.crawl_deadline = 5.0
    ticks = [0.0]

    def fake_monotonic():
        # The first call marks the start; every later call is past the deadline.
        value = ticks[-1]
        ticks.append(100.0)
        return value

    monkeypatch.setattr("agents.crawler_agent.time.monotonic", fake_monotonic)

    result = SiteCrawler(fake_fetcher, settings).crawl(SEED)

    assert result.urls == [SEED]
    assert result.deadline_exceeded is True
    assert result.partial is True


def test_bare_origin_seed_is_crawled_once(settings):
    home = make_html(body=link_list("/", "/about", "https://EXAMPLE.com:443/about#team"))
    fetcher = FakeFetcher({
        "https://example.com/": home,
        "https://example.com/about": make_html(body=link_list("/")),
    })

    result = SiteCrawler(fetcher, settings).crawl("https://example.com")

    assert result.seed_url == "https://example.com/"
    assert result.urls == ["https://example.com/", "https://example.com/about"]
    assert fetcher.calls == ["https://example.com/", "https://example.com/about"]
