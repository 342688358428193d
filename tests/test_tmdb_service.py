import pytest
import requests

from movieclub.errors import CatalogUnavailableError
from movieclub.services.tmdb_service import TMDBService


class FakeResponse:
    def __init__(self, status_code=200, payload=None, bad_json=False):
        self.status_code = status_code
        self._payload = payload
        self._bad_json = bad_json

    def raise_for_status(self):
        if self.status_code >= 400:
            raise requests.exceptions.HTTPError(f"{self.status_code} error")

    def json(self):
        if self._bad_json:
            raise ValueError("Expecting value")
        return self._payload


class FakeSession:
    def __init__(self, response=None, error=None):
        self.response = response
        self.error = error
        self.calls = []

    def get(self, url, params=None, timeout=None):
        self.calls.append((url, params, timeout))
        if self.error:
            raise self.error
        return self.response


def make_service(**kwargs):
    session = FakeSession(**kwargs)
    return TMDBService("secret-key", timeout=3.0, session=session), session


def test_get_movie_success():
    service, session = make_service(response=FakeResponse(payload={"id": 27205, "title": "Inception"}))

    assert service.get_movie(27205)["title"] == "Inception"

    url, params, timeout = session.calls[0]
    assert url == "https://api.themoviedb.org/3/movie/27205"
    assert params["api_key"] == "secret-key"
    assert timeout == 3.0


def test_get_movie_not_found_returns_none():
    service, _ = make_service(response=FakeResponse(status_code=404))

    assert service.get_movie(1) is None


@pytest.mark.parametrize("kwargs", [
    {"response": FakeResponse(status_code=500)},
    {"response": FakeResponse(status_code=401)},
    {"response": FakeResponse(payload=None, bad_json=True)},
    {"error": requests.exceptions.Timeout("timed out")},
    {"error": requests.exceptions.ConnectionError("refused")},
])
def test_get_movie_failures_raise_catalog_unavailable(kwargs):
    service, _ = make_service(**kwargs)

    with pytest.raises(CatalogUnavailableError):
        service.get_movie(27205)


def test_status_code_kept_on_error():
    service, _ = make_service(response=FakeResponse(status_code=503))

    with pytest.raises(CatalogUnavailableError) as exc_info:
        service.get_movie(27205)

    assert exc_info.value.status_code == 503


def test_search_first_page_without_adult_titles():
    results = [{"id": 1, "title": "Heat"}]
    service, session = make_service(response=FakeResponse(payload={"page": 1, "results": results}))

    assert service.search("heat") == results

    url, params, _ = session.calls[0]
    assert url.endswith("/search/movie")
    assert params["query"] == "heat"
    assert params["include_adult"] == "false"
    assert "page" not in params


def test_empty_search_skips_request():
    service, session = make_service(response=FakeResponse(payload={}))

    assert service.search("") == []
    assert session.calls == []
