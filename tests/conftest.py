"""
Shared fixtures for the SEO Site Analyzer test suite.

Provides HTML builders, a fake fetcher, fake collaborators, and isolated
settings so that all tests run WITHOUT any network access.
"""

from typing import Dict, List, Optional, Union

import pytest

from app.config import Settings
from app.errors import CollaboratorError, FetchError
from app.graph.lg_state import WorkflowDeps
from models.insights_models import AiInsights, Faq, PageSpeedResult, SemanticClarity


# ---------------------------------------------------------------------------
# HTML builder
# ---------------------------------------------------------------------------

def make_html(
    title: str = "Example page",
    description: Optional[str] = "An example description for tests.",
    body: str = "<h1>Welcome</h1><p>Hello world.</p>",
    head_extra: str = "",
) -> str:
    desc = f'<meta name="description" content="{description}">' if description is not None else ""
    return (
        "<html><head>"
        f"<title>{title}</title>{desc}{head_extra}"
        "</head><body>"
        f"{body}"
        "</body></html>"
    )


def link_list(*hrefs: str) -> str:
    return "".join(f'<a href="{h}">link</a>' for h in hrefs)


# ---------------------------------------------------------------------------
# Fakes
# ---------------------------------------------------------------------------

class FakeFetcher:
    """Serves canned HTML per URL; unknown URLs raise FetchError."""

    def __init__(self, pages: Dict[str, Union[str, Exception]]):
        self.pages = pages
        self.calls: List[str] = []

    def fetch(self, url: str) -> str:
        self.calls.append(url)
        result = self.pages.get(url)
        if result is None:
            raise FetchError(url, "HTTP 404")
        if isinstance(result, Exception):
            raise result
        return result


class FakeInsightsGenerator:
    def __init__(self, fail: bool = False, fail_rewrite: bool = False):
        self.fail = fail
        self.fail_rewrite = fail_rewrite
        self.texts: List[str] = []
        self.paragraphs: List[str] = []

    def generate_insights(self, text: str) -> AiInsights:
        self.texts.append(text)
        if self.fail:
            raise CollaboratorError("openai", "Failed to generate AI insights", "boom")
        return AiInsights(
            ai_visibility_score=80,
            semantic_clarity=SemanticClarity(score=90, justification="Clear."),
            ai_summary="A site about widgets.",
            optimized_title="Widgets | Example",
            optimized_description="Buy the best widgets.",
            suggested_faqs=[Faq(question="What is a widget?", answer="A small gadget.")],
            content_suggestions=["Add pricing details."],
        )

    def rewrite_paragraph(self, paragraph: str) -> str:
        self.paragraphs.append(paragraph)
        if self.fail_rewrite:
            raise CollaboratorError("openai", "Failed to rewrite paragraph")
        return "Rewritten: " + paragraph


class FakePageSpeed:
    def __init__(self, fail: bool = False, score: Optional[int] = 91):
        self.fail = fail
        self.score = score
        self.urls: List[str] = []

    def fetch_score(self, url: str) -> PageSpeedResult:
        self.urls.append(url)
        if self.fail:
            raise CollaboratorError("pagespeed", "Failed to fetch PageSpeed score", "timeout")
        return PageSpeedResult(score=self.score, issues=[])


class FakeStore:
    def __init__(self, fail: bool = False):
        self.fail = fail
        self.saved = []

    def save(self, report) -> str:
        if self.fail:
            raise CollaboratorError("report_store", "Failed to save report", "disk full")
        self.saved.append(report)
        return f"report-{len(self.saved)}"

    def get(self, report_id: str):
        return None


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------

@pytest.fixture
def settings(tmp_path):
    """Settings isolated from .env and the real environment."""
    return Settings(
        _env_file=None,
        openai_api_key=None,
        google_pagespeed_api_key=None,
        database_path=str(tmp_path / "reports.db"),
        report_output_dir=str(tmp_path / "out"),
        persist_reports=False,
        crawl_deadline=None,
        max_pages=5,
    )


@pytest.fixture
def site_pages():
    """A small same-origin site with an external link and a broken link."""
    home = make_html(
        title="Widgets Home",
        body=(
            "<nav><a href='/nav-only'>menu</a></nav>"
            "<main><h1>Widgets</h1><h2>Why widgets</h2>"
            "<p>Widgets are great. We sell widgets of every size.</p>"
            "<img src='/logo.png' alt='Logo'>"
            + link_list("/about", "/products", "https://other.example.org/x", "/missing")
            + "</main>"
        ),
    )
    about = make_html(
        title="About",
        body="<h2>About us</h2><p>We are a small team.</p>" + link_list("/", "/team"),
    )
    products = make_html(
        title="Products",
        body="<h1>Products</h1><h1>More products</h1><p>Widgets and gadgets.</p><img src='/p.png'>",
    )
    team = make_html(title="Team", body="<h1>Team</h1><p>Meet the team.</p>")
    return {
        "https://example.com/": home,
        "https://example.com/about": about,
        "https://example.com/products": products,
        "https://example.com/team": team,
    }


@pytest.fixture
def fake_fetcher(site_pages):
    return FakeFetcher(site_pages)


@pytest.fixture
def deps(settings, fake_fetcher):
    return WorkflowDeps(
        settings=settings,
        fetcher=fake_fetcher,
        insights_generator=FakeInsightsGenerator(),
        pagespeed=FakePageSpeed(),
        store=None,
    )
