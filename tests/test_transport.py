"""Tests for reading the dataset text from disk or over http."""

import asyncio

import pytest
import requests

from cobenefits import transport
from cobenefits.data import index_from_text
from cobenefits.errors import LoadFailed


class _FakeResponse:
    def __init__(self, text="", status=200, content=None):
        self.content = content if content is not None else text.encode("utf-8")
        self.status_code = status
        # what requests reports for text/csv served without a charset
        self.encoding = "ISO-8859-1"

    def raise_for_status(self):
        if self.status_code >= 400:
            raise requests.HTTPError(f"{self.status_code} Client Error")


class TestIsUrl:
    @pytest.mark.parametrize(
        "source, expected",
        [("https://example.org/a.csv", True), ("HTTP://x/y", True), ("data/Level_1.csv", False)],
    )
    def test_detection(self, source, expected):
        assert transport.is_url(source) is expected


class TestReadFile:
    def test_reads_local_file(self, tmp_path, scenario_text):
        path = tmp_path / "x.csv"
        path.write_text(scenario_text, encoding="utf-8")
        assert transport.read_text(path) == scenario_text
        assert transport.read_text(str(path)) == scenario_text

    def test_missing_file(self, tmp_path):
        with pytest.raises(LoadFailed, match="Failed to load CSV"):
            transport.read_text(tmp_path / "missing.csv")

    def test_undecodable_file(self, tmp_path):
        path = tmp_path / "bad.csv"
        path.write_bytes(b"small_area;sum\n\xff\xfe;1\n")
        with pytest.raises(LoadFailed):
            transport.read_text(path)


class TestReadUrl:
    def test_success(self, monkeypatch, scenario_text):
        calls = []

        def fake_get(url, timeout):
            calls.append((url, timeout))
            return _FakeResponse(scenario_text)

        monkeypatch.setattr(transport.requests, "get", fake_get)
        assert transport.read_text("https://example.org/Level_1.csv", timeout=5) == scenario_text
        assert calls == [("https://example.org/Level_1.csv", 5)]

    def test_bom_and_non_ascii_decoded_like_local_file(self, monkeypatch, tmp_path):
        text = "small_area;air_quality;sum\nBogotá Süd;1;5\n"
        path = tmp_path / "bom.csv"
        path.write_text(text, encoding="utf-8-sig")
        monkeypatch.setattr(
            transport.requests, "get", lambda url, timeout: _FakeResponse(content=text.encode("utf-8-sig"))
        )
        remote = index_from_text(transport.read_text("https://example.org/bom.csv"))
        local = index_from_text(transport.read_text(path))
        assert remote.ranked_areas == ["Bogotá Süd"]
        assert remote.ranked_areas == local.ranked_areas
        assert remote.benefit_totals["air_quality"] == 1.0

    def test_undecodable_body(self, monkeypatch):
        monkeypatch.setattr(transport.requests, "get", lambda url, timeout: _FakeResponse(content=b"small_area\n\xff\n"))
        with pytest.raises(LoadFailed):
            transport.read_text("https://example.org/bad.csv")

    def test_http_error(self, monkeypatch):
        monkeypatch.setattr(transport.requests, "get", lambda url, timeout: _FakeResponse(status=404))
        with pytest.raises(LoadFailed, match="404"):
            transport.read_text("https://example.org/missing.csv")

    def test_connection_error(self, monkeypatch):
        def fake_get(url, timeout):
            raise requests.ConnectionError("refused")

        monkeypatch.setattr(transport.requests, "get", fake_get)
        with pytest.raises(LoadFailed, match="refused"):
            transport.read_text("http://localhost:1/x.csv")


class TestLoadText:
    def test_async_load(self, tmp_path, divergent_text):
        path = tmp_path / "x.csv"
        path.write_text(divergent_text, encoding="utf-8")
        assert asyncio.run(transport.load_text(path)) == divergent_text

    def test_async_failure(self, tmp_path):
        with pytest.raises(LoadFailed):
            asyncio.run(transport.load_text(tmp_path / "missing.csv"))
