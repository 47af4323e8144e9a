"""Tests for favicon helpers."""

from __future__ import annotations

from bookmark_keeper.favicon import extract_domain, favicon_url, initial


def test_favicon_url() -> None:
    url = favicon_url("https://docs.python.org/3/library/")
    if url != "https://www.google.com/s2/favicons?domain=docs.python.org&sz=32":
        msg = f"Unexpected favicon url {url}"
        raise AssertionError(msg)
    if favicon_url("not a url") != "":
        raise AssertionError("Urls without a host have no favicon")


def test_extract_domain_and_initial() -> None:
    if extract_domain("https://Example.com:8080/x") != "example.com":
        raise AssertionError("Hostname should be extracted and lower-cased")
    if extract_domain("plain text") != "plain text":
        raise AssertionError("Unparsable input should be echoed")
    if initial("github") != "G" or initial("") != "?":
        raise AssertionError("Initial fallback failed")
