from presales_research.optimization.content import extract_relevant_sections, optimize_content_for_analysis


def test_noise_blocks_are_removed():
    html = (
        "<nav>Home | Pricing</nav><script>track()</script><style>p{}</style>"
        "<!-- hidden --><div>Acme makes widgets</div><footer>(c) Acme</footer>"
    )
    result = optimize_content_for_analysis(html)
    for noise in ("track()", "Home | Pricing", "hidden", "(c) Acme", "p{}"):
        assert noise not in result
    assert "Acme makes widgets" in result


def test_keeps_only_header_sections_with_priority_keywords():
    html = (
        "<h2>About Us</h2><p>We build rockets for small satellites.</p>"
        "<h2>Pricing</h2><p>Cheap launches</p>"
        "<h3>Leadership</h3><p>Jane Doe, CEO</p>"
    )
    result = optimize_content_for_analysis(html)

    assert result.startswith("About Us:\n")
    assert "We build rockets for small satellites." in result
    assert "Leadership:" in result
    assert "Cheap launches" not in result


def test_paragraph_fallback_when_no_header_qualifies():
    long_paragraph = "Our company serves enterprise customers across many regions. " * 3
    html = f"<p>{long_paragraph}</p><p>Short company note</p><p>{'x' * 150}</p>"
    sections = extract_relevant_sections(html)

    assert sections == [long_paragraph.strip()]


def test_result_is_capped_at_max_chars():
    assert len(optimize_content_for_analysis("a " * 20000)) == 10000
    assert len(optimize_content_for_analysis("a " * 200, max_chars=50)) == 50


def test_non_string_or_empty_input():
    assert optimize_content_for_analysis(None) == ""
    assert optimize_content_for_analysis("") == ""
    assert optimize_content_for_analysis(123) == ""


def test_cap_is_measured_in_utf16_units():
    text = "\U0001F600" * 40
    assert optimize_content_for_analysis(text, max_chars=50) == "\U0001F600" * 25
