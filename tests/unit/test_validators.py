import pytest

from appreg.core.validators import (
    is_absolute_uri,
    normalize_app_name,
    parse_secret_validity_days,
    validate_redirect_uri,
)


@pytest.mark.parametrize("raw", [None, "", "   ", "\t"])
def test_normalize_app_name_defaults_when_blank(raw):
    assert normalize_app_name(raw) == "Easy2PatchProd"


def test_normalize_app_name_trims():
    assert normalize_app_name("  Acme Patching  ") == "Acme Patching"


def test_normalize_app_name_custom_default():
    assert normalize_app_name("", default="Fallback") == "Fallback"


def test_validate_redirect_uri_accepts_callback_route():
    assert validate_redirect_uri(" https://e2p.contoso.com/#/auth/azuread/ ") == "https://e2p.contoso.com/#/auth/azuread/"


def test_validate_redirect_uri_accepts_marker_in_longer_path():
    uri = "https://contoso.com:8443/app/#/auth/azuread/callback"
    assert validate_redirect_uri(uri) == uri


@pytest.mark.parametrize("raw", [None, "", "   "])
def test_validate_redirect_uri_requires_value(raw):
    with pytest.raises(ValueError, match="required"):
        validate_redirect_uri(raw)


@pytest.mark.parametrize("raw", [
    "https://e2p.contoso.com/",
    "https://e2p.contoso.com/auth/azuread/",
    "https://e2p.contoso.com/#/auth/okta/",
    "/#/auth/azuread/",
    "e2p.contoso.com/#/auth/azuread/",
    "not a uri",
])
def test_validate_redirect_uri_rejects_invalid(raw):
    with pytest.raises(ValueError, match="Invalid format"):
        validate_redirect_uri(raw)


def test_validate_redirect_uri_custom_marker():
    assert validate_redirect_uri("https://x.example/cb", marker="/cb") == "https://x.example/cb"


def test_is_absolute_uri():
    assert is_absolute_uri("https://contoso.com/#/auth/azuread/")
    assert not is_absolute_uri("contoso.com")
    assert not is_absolute_uri("mailto:someone@contoso.com")


@pytest.mark.parametrize("raw,expected", [
    ("365", 365),
    (" 90 ", 90),
    ("1", 1),
    ("+30", 30),
    ("2147483647", 2147483647),
])
def test_parse_secret_validity_days_valid(raw, expected):
    assert parse_secret_validity_days(raw) == expected


@pytest.mark.parametrize("raw", [
    None, "", "0", "-5", "abc", "12.5", "1e3",
    "99999999999", "2147483648", "1_0", "\u0661\u0662",
])
def test_parse_secret_validity_days_quiet_default(raw):
    assert parse_secret_validity_days(raw) == 730


def test_parse_secret_validity_days_custom_default():
    assert parse_secret_validity_days("zero", default=30) == 30


def test_validate_redirect_uri_error_quotes_example():
    with pytest.raises(ValueError, match="Example: https://apps.contoso.com/cb"):
        validate_redirect_uri("not a uri", marker="/cb", example="https://apps.contoso.com/cb")


def test_validate_redirect_uri_default_example_follows_marker():
    with pytest.raises(ValueError, match="Example: https://e2p.domain.com/cb"):
        validate_redirect_uri("not a uri", marker="/cb")
