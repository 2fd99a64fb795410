from presales_research.optimization.dedup import deduplicate_content, simple_hash


def test_simple_hash_matches_32bit_rolling_hash():
    assert simple_hash("a") == "97"
    assert simple_hash("ab") == str(97 * 31 + 98)
    assert simple_hash("hello") == "99162322"
    # wraps to the most negative 32-bit value
    assert simple_hash("polygenelubricants") == "-2147483648"


def test_simple_hash_empty_is_zero():
    assert simple_hash("") == "0"
    assert simple_hash(None) == "0"


def test_simple_hash_uses_utf16_code_units():
    # U+1F600 is a surrogate pair: 0xD83D 0xDE00
    assert simple_hash("\U0001F600") == str(0xD83D * 31 + 0xDE00)


def test_deduplicate_keeps_first_occurrence(make_page):
    shared = "Acme builds rockets. " * 80
    pages = [
        make_page("https://acme.com", shared + "home"),
        make_page("https://acme.com/about", "Different content about Acme"),
        make_page("https://mirror.example/acme", shared + "mirror"),
    ]
    unique = deduplicate_content(pages)
    assert [p.url for p in unique] == ["https://acme.com", "https://acme.com/about"]


def test_deduplicate_skips_empty_and_invalid_items(make_page):
    pages = [make_page("https://a.com", ""), "not a page", make_page("https://b.com", "text")]
    assert [p.url for p in deduplicate_content(pages)] == ["https://b.com"]
    assert deduplicate_content(None) == []
    assert deduplicate_content("text") == []
