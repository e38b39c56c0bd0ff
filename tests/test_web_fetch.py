from __future__ import annotations

import io
import socket
import urllib.error

import pytest

from ccbrowse.modules import changelog as changelog_module
from ccbrowse.tools.changelog import VersionEntry
from ccbrowse.tools.web_fetch import ChangelogError, FetchFailed, NetworkError, WebFetcher


class FakeResponse:
    def __init__(self, body: str, status: int = 200) -> None:
        self._body = body.encode("utf-8")
        self.status = status
        self.closed = False

    def read(self) -> bytes:
        return self._body

    def close(self) -> None:
        self.closed = True


def _serve(monkeypatch, outcome):
    seen = []

    def fake_urlopen(req, timeout=None):  # noqa: ANN001
        seen.append((req.full_url, timeout))
        if isinstance(outcome, BaseException):
            raise outcome
        return outcome

    monkeypatch.setattr("urllib.request.urlopen", fake_urlopen)
    return seen


def test_fetch_text_returns_body(monkeypatch):
    resp = FakeResponse("## 1.0.0\n- hello\n")
    seen = _serve(monkeypatch, resp)
    text = WebFetcher(timeout=5).fetch_text("https://example.com/CHANGELOG.md")
    assert text.startswith("## 1.0.0")
    assert seen == [("https://example.com/CHANGELOG.md", 5)]
    assert resp.closed


def test_http_error_becomes_fetch_failed_with_status(monkeypatch):
    err = urllib.error.HTTPError("https://example.com", 404, "Not Found", {}, io.BytesIO(b""))
    seen = _serve(monkeypatch, err)
    with pytest.raises(FetchFailed) as info:
        WebFetcher().fetch_text("https://example.com")
    assert info.value.status == 404
    assert str(info.value) == "Failed to fetch changelog: 404"
    assert len(seen) == 1


def test_error_status_without_exception(monkeypatch):
    _serve(monkeypatch, FakeResponse("oops", status=503))
    with pytest.raises(FetchFailed) as info:
        WebFetcher().fetch_text("https://example.com")
    assert info.value.status == 503


@pytest.mark.parametrize(
    "cause",
    [urllib.error.URLError("Name or service not known"), socket.timeout("timed out"), ConnectionResetError()],
)
def test_transport_failures_become_network_error(monkeypatch, cause):
    seen = _serve(monkeypatch, cause)
    with pytest.raises(NetworkError) as info:
        WebFetcher().fetch_text("https://example.com")
    assert info.value.__cause__ is cause
    assert not isinstance(info.value, FetchFailed)
    assert isinstance(info.value, ChangelogError)
    assert len(seen) == 1


def test_fetch_changelog_parses_response(monkeypatch):
    _serve(monkeypatch, FakeResponse("# Changelog\n\n## 2.0.1\n- Fix\n* Tweak\n## 2.0.0\n"))
    entries = changelog_module.fetch_changelog("https://example.com/c.md")
    assert entries == [VersionEntry("2.0.1", ("Fix", "Tweak")), VersionEntry("2.0.0", ())]


def test_fetch_changelog_propagates_errors(monkeypatch):
    _serve(monkeypatch, urllib.error.HTTPError("u", 500, "boom", {}, io.BytesIO(b"")))
    with pytest.raises(FetchFailed):
        changelog_module.fetch_changelog("https://example.com/c.md")


def test_version_rendering():
    entry = VersionEntry("1.2.0", ("Added A", "Fixed B"))
    assert changelog_module.format_version_changes(entry) == "- Added A\n- Fixed B"
    assert changelog_module.version_markdown(entry) == "# Version 1.2.0\n---\n## Changes\n\n- Added A\n- Fixed B"
    assert changelog_module.change_count_text(entry) == "2 changes"
    assert changelog_module.change_count_text(VersionEntry("1.0.0", ("x",))) == "1 change"


def test_find_version_returns_first_match():
    first = VersionEntry("1.0.0", ("a",))
    entries = [VersionEntry("2.0.0"), first, VersionEntry("1.0.0", ("b",))]
    assert changelog_module.find_version(entries, "1.0.0") is first
    assert changelog_module.find_version(entries, "9.9.9") is None
