import httpx
import pytest

from presales_research.errors import ScrapeError
from presales_research.scrape import http_scraper
from presales_research.scrape.extractor import DirectScraper, basic_html_to_text, truncate_content
from presales_research.scrape.http_scraper import fetch_html

PAGE = """
<html><head>
<title>Acme &amp; Co | Rockets</title>
<meta name="description" content="Small satellite launch provider">
</head><body>
<nav>Home Pricing Contact</nav>
<article>
<h1>About Acme</h1>
<p>Acme builds reusable rockets that carry small satellites to low earth orbit for research teams and startups.</p>
<p>Founded in 2015, the company has flown forty missions and serves customers across Europe and North America.</p>
<p>Its engineering team focuses on lowering launch costs through reusable boosters and rapid turnaround.</p>
</article>
<script>trackVisitor()</script>
</body></html>
"""


@pytest.fixture
def transport(monkeypatch):
    responses = []
    real_client = httpx.AsyncClient

    def handler(request):
        return responses.pop(0)

    monkeypatch.setattr(
        http_scraper.httpx, "AsyncClient",
        lambda *args, **kwargs: real_client(*args, transport=httpx.MockTransport(handler), **kwargs),
    )
    return responses


def _html(text, status=200):
    return httpx.Response(status, text=text, headers={"content-type": "text/html; charset=utf-8"})


@pytest.mark.asyncio
async def test_fetch_html_retries_unavailable(transport):
    transport.extend([_html("busy", 503), _html("<p>ok</p>")])
    sleeps = []

    async def fake_sleep(seconds):
        sleeps.append(seconds)

    html, error = await fetch_html("https://acme.com", sleep=fake_sleep)

    assert (html, error) == ("<p>ok</p>", None)
    assert sleeps == [2.0]


@pytest.mark.asyncio
async def test_fetch_html_gives_up_after_retries(transport):
    transport.extend([_html("busy", 429)] * 3)

    async def fake_sleep(seconds):
        return None

    assert await fetch_html("https://acme.com", max_retries=2, sleep=fake_sleep) == (None, "HTTP 429")


@pytest.mark.asyncio
async def test_fetch_html_rejects_errors_and_binary(transport):
    transport.extend([
        _html("missing", 404),
        httpx.Response(200, content=b"%PDF", headers={"content-type": "application/pdf"}),
    ])
    assert await fetch_html("https://acme.com/missing") == (None, "HTTP 404")
    html, error = await fetch_html("https://acme.com/file.pdf")
    assert html is None
    assert error.startswith("Non-HTML content")


@pytest.mark.asyncio
async def test_direct_scraper_extracts_text_and_metadata(transport):
    transport.append(_html(PAGE))

    page = await DirectScraper().scrape_url("https://acme.com")

    assert page.title == "Acme & Co | Rockets"
    assert page.metadata.description == "Small satellite launch provider"
    assert "reusable rockets" in page.content
    assert "trackVisitor" not in page.content
    assert page.metadata.keywords


@pytest.mark.asyncio
async def test_direct_scraper_raises_on_fetch_failure(transport):
    transport.append(_html("gone", 410))
    with pytest.raises(ScrapeError, match="HTTP 410"):
        await DirectScraper().scrape_url("https://acme.com")


@pytest.mark.asyncio
async def test_direct_scraper_batch_raises_when_all_fail(transport):
    transport.extend([_html("gone", 404), _html("gone", 404)])
    with pytest.raises(ScrapeError, match="All URLs failed"):
        await DirectScraper().scrape_multiple_urls(["https://a.com", "https://b.com"])


def test_basic_html_to_text():
    text = basic_html_to_text("<style>x{}</style><p>Hello&nbsp;<b>world</b></p><!-- c -->")
    assert text == "Hello world"


def test_truncate_content_prefers_sentence_boundary():
    text = ("Sentence one is here. " * 10).strip()
    cut = truncate_content(text, 100)
    assert cut.endswith(". [content truncated]")
    assert truncate_content("short", 100) == "short"
