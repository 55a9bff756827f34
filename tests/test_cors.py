"""Tests for print_bridge/security/cors.py."""

from print_bridge.config.settings import Settings
from print_bridge.security.cors import ALLOWED_HEADERS, cors_options


def test_wildcard_allows_any_origin():
    options = cors_options(Settings())
    assert options["allow_origins"] == ["*"]


def test_wildcard_wins_over_listed_origins():
    options = cors_options(Settings(allowed_origins=["https://a.example.com", "*"]))
    assert options["allow_origins"] == ["*"]


def test_exact_origins_without_trailing_slash():
    options = cors_options(Settings(allowed_origins=["https://a.example.com/", "http://localhost:3000"]))
    assert options["allow_origins"] == ["https://a.example.com", "http://localhost:3000"]


def test_methods_and_headers():
    options = cors_options(Settings())
    assert options["allow_methods"] == ["GET", "POST", "OPTIONS"]
    assert "x-api-token" in ALLOWED_HEADERS
    assert options["allow_headers"] == ALLOWED_HEADERS
