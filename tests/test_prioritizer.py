from presales_research.optimization.prioritizer import is_high_value_url, prioritize_urls, score_url


def test_high_value_patterns():
    assert is_high_value_url("https://www.linkedin.com/company/acme")
    assert is_high_value_url("https://about.acme.io")
    assert is_high_value_url("https://acme.com")
    assert is_high_value_url("https://acme.io/newsroom")
    assert not is_high_value_url("https://acme.io/pricing")
    assert not is_high_value_url("")
    assert not is_high_value_url(None)
    assert not is_high_value_url(42)


def test_score_sums_every_matching_pattern():
    # linkedin.com/company (10) + .com (7)
    assert score_url("https://linkedin.com/company/acme") == 17
    # .com (7) + news (6) + blog (5)
    assert score_url("https://acme.com/news/blog") == 18
    assert score_url("https://acme.io/pricing") == 0


def test_prioritize_filters_ranks_and_truncates():
    urls = [
        "https://acme.io/pricing",
        "https://acme.io/careers",
        "https://linkedin.com/company/acme",
        "https://acme.io/press",
        "https://acme.io/blog",
        "https://acme.io/investor",
        "https://acme.io/news",
        "https://acme.com",
    ]
    ranked = prioritize_urls(urls)

    assert len(ranked) == 5
    assert "https://acme.io/pricing" not in ranked
    assert ranked[0] == "https://linkedin.com/company/acme"
    assert ranked[1:] == [
        "https://acme.com",
        "https://acme.io/news",
        "https://acme.io/blog",
        "https://acme.io/press",
    ]


def test_prioritize_keeps_input_order_for_ties():
    urls = ["https://a.io/blog", "https://b.io/blog", "https://c.io/blog"]
    assert prioritize_urls(urls) == urls


def test_prioritize_rejects_non_list():
    assert prioritize_urls("https://acme.com") == []
    assert prioritize_urls(None) == []
    assert prioritize_urls([]) == []
