from app.core.cors import build_cors_headers


def test_wildcard_origin():
    headers = build_cors_headers("https://example.com")
    assert headers["Access-Control-Allow-Origin"] == "*"
    assert "Authorization" in headers["Access-Control-Allow-Headers"]
    assert "DELETE" in headers["Access-Control-Allow-Methods"]


def test_listed_origin_is_echoed():
    headers = build_cors_headers("https://a.example", ["https://a.example", "https://b.example"])
    assert headers["Access-Control-Allow-Origin"] == "https://a.example"
    assert headers["Vary"] == "Origin"


def test_unlisted_origin_gets_no_allow_origin():
    headers = build_cors_headers("https://evil.example", ["https://a.example"])
    assert "Access-Control-Allow-Origin" not in headers


def test_each_call_returns_a_new_mapping():
    first = build_cors_headers(None)
    first["X-Extra"] = "1"
    assert "X-Extra" not in build_cors_headers(None)
