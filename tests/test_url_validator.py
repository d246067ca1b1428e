from app.platform.utils.url_validator import validate_url


def test_adds_https_scheme():
    assert validate_url("example.com/about") == (True, "https://example.com/about", "")


def test_accepts_http_with_port():
    is_valid, url, _ = validate_url("http://localhost:3000/")
    assert is_valid
    assert url == "http://localhost:3000/"


def test_rejects_empty():
    assert validate_url("   ")[0] is False


def test_rejects_other_schemes():
    is_valid, _, error = validate_url("ftp://example.com")
    assert not is_valid
    assert "scheme" in error


def test_rejects_free_text():
    assert validate_url("not a url")[0] is False


def test_rejects_bad_port():
    assert validate_url("https://example.com:99999")[0] is False


def test_accepts_internationalized_host():
    is_valid, url, _ = validate_url("https://münchen.de/")
    assert is_valid
    assert url == "https://münchen.de/"


def test_accepts_ipv6_literal():
    assert validate_url("http://[::1]:8080/")[0] is True


def test_accepts_underscore_in_host():
    assert validate_url("https://my_site.example.com/")[0] is True
