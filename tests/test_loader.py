import asyncio

import pytest
import requests

from rating_predictor.config import Settings
from rating_predictor.data import loader
from rating_predictor.data.loader import (load_dataset, load_raw_text,
                                          read_uploads)
from rating_predictor.errors import DataUnavailable
from rating_predictor.models import RawData


class _FakeResponse:
    def __init__(self, content: bytes, status_code: int = 200):
        self.content = content
        self.status_code = status_code

    def raise_for_status(self):
        if self.status_code >= 400:
            raise requests.HTTPError(f"{self.status_code} error")


def _load(settings: Settings, uploads=None) -> RawData:
    return asyncio.run(load_raw_text(settings, uploads))


def test_embedded_source():
    raw = _load(Settings(data_source="embedded"))
    dataset = load_dataset(raw)
    assert raw.origin == "embedded"
    assert dataset.num_movies == 20
    assert dataset.num_users == 10
    assert dataset.user_ids() == list(range(1, 11))
    assert dataset.movie(20).title == "Angels and Insects"
    assert dataset.movie(999) is None


def test_local_source(tmp_path):
    (tmp_path / "u.item").write_bytes("1|Misérables, Les (1995)|x\n".encode("latin-1"))
    (tmp_path / "u.data").write_text("1\t1\t4\t0\n")
    raw = _load(Settings(data_source="local", data_dir=tmp_path))
    dataset = load_dataset(raw)
    assert raw.origin == "local"
    assert dataset.movies[0].title == "Misérables, Les"
    assert dataset.movies[0].year == 1995


def test_local_source_missing_files(tmp_path):
    with pytest.raises(DataUnavailable, match="u.item"):
        _load(Settings(data_source="local", data_dir=tmp_path))


def test_local_source_fallback(tmp_path):
    raw = _load(Settings(data_source="local", data_dir=tmp_path, fallback_to_sample=True))
    assert raw.origin == "fallback"
    assert load_dataset(raw).num_movies == 20


def test_remote_source(monkeypatch):
    contents = {
        "http://example.test/ok/u.item": b"1|Toy Story (1995)|x\n",
        "http://example.test/ok/u.data": b"1\t1\t5\t0\n",
    }
    monkeypatch.setattr(
        loader.requests, "get", lambda url, timeout: _FakeResponse(contents[url])
    )
    settings = Settings(
        movies_url="http://example.test/ok/u.item",
        ratings_url="http://example.test/ok/u.data",
    )
    raw = _load(settings)
    assert raw == RawData("1|Toy Story (1995)|x\n", "1\t1\t5\t0\n", "remote")


def test_remote_source_http_error(monkeypatch):
    monkeypatch.setattr(
        loader.requests, "get", lambda url, timeout: _FakeResponse(b"", status_code=404)
    )
    settings = Settings(
        movies_url="http://example.test/missing/u.item",
        ratings_url="http://example.test/missing/u.data",
    )
    with pytest.raises(DataUnavailable):
        _load(settings)


def test_remote_source_network_error_with_fallback(monkeypatch):
    def _offline(url, timeout):
        raise requests.ConnectionError("network unreachable")

    monkeypatch.setattr(loader.requests, "get", _offline)
    settings = Settings(
        movies_url="http://example.test/offline/u.item",
        ratings_url="http://example.test/offline/u.data",
        fallback_to_sample=True,
    )
    raw = _load(settings)
    assert raw.origin == "fallback"


def test_uploads_require_both_files():
    with pytest.raises(DataUnavailable):
        read_uploads(b"1|Toy Story (1995)|x\n", None)


def test_upload_errors_are_not_masked_by_fallback():
    settings = Settings(data_source="upload", fallback_to_sample=True)
    with pytest.raises(DataUnavailable):
        _load(settings, uploads=(None, b"1\t1\t5\t0\n"))


def test_uploads_decoded():
    raw = _load(Settings(), uploads=(b"1|Toy Story (1995)|x\n", b"1\t1\t5\t0\n"))
    assert raw.origin == "upload"
    assert load_dataset(raw).ratings[0].rating == 5.0


def test_empty_dataset_is_unavailable():
    with pytest.raises(DataUnavailable):
        load_dataset(RawData("garbage\n", "1\t1\t5\t0\n", "upload"))
    with pytest.raises(DataUnavailable):
        load_dataset(RawData("1|Toy Story (1995)|x\n", "\n", "upload"))
