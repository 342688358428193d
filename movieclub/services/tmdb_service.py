import requests
from typing import Dict, List, Optional
import logging

from movieclub.errors import CatalogUnavailableError

logger = logging.getLogger(__name__)

IMAGE_BASE_URL = "https://image.tmdb.org/t/p"


def release_year(release_date: Optional[str]) -> Optional[int]:
    """
    Year from a TMDB release date ("2021-05-14" -> 2021).

    Returns None when the first four characters are not all ASCII digits
    ("TBD", "", "20", None).
    """
    if not release_date or len(release_date) < 4:
        return None
    prefix = release_date[:4]
    if not (prefix.isascii() and prefix.isdigit()):
        return None
    return int(prefix)


def poster_url(path: Optional[str], size: str = "w500") -> Optional[str]:
    """
    Full image URL for a TMDB poster path.
    Size options: w92, w154, w185, w342, w500, w780, original
    """
    if not path:
        return None
    return f"{IMAGE_BASE_URL}/{size}{path}"


# TMDB Service to interact with The Movie Database API
class TMDBService:
    BASE_URL = "https://api.themoviedb.org/3"

    def __init__(self, api_key: str, timeout: float = 10.0, session: Optional[requests.Session] = None):
        self.api_key = api_key
        self.timeout = timeout
        self.session = session or requests.Session()

    # Internal method to make GET requests to TMDB API
    def _make_request(self, endpoint: str, params: Dict = None) -> Optional[Dict]:
        """
        Make HTTP request to TMDB API.

        Args:
            endpoint: API endpoint (e.g., "/search/movie")
            params: Query parameters

        Returns:
            JSON response from TMDB, or None on 404

        Raises:
            CatalogUnavailableError: network failure, non-2xx status, bad JSON
        """
        params = dict(params or {})
        params['api_key'] = self.api_key
        url = f"{self.BASE_URL}{endpoint}"

        try:
            response = self.session.get(url, params=params, timeout=self.timeout)
        except requests.exceptions.RequestException as e:
            logger.error(f"TMDB API error for {endpoint}: {str(e)}")
            raise CatalogUnavailableError(f"TMDB request failed: {str(e)}", original_error=e)

        if response.status_code == 404:
            logger.info(f"TMDB returned 404 for {endpoint}")
            return None

        try:
            response.raise_for_status()
            data = response.json()
        except requests.exceptions.HTTPError as e:
            logger.error(f"TMDB API error for {endpoint}: {response.status_code}")
            raise CatalogUnavailableError(
                f"TMDB API error: {response.status_code}",
                status_code=response.status_code,
                original_error=e,
            )
        except ValueError as e:
            logger.error(f"TMDB returned invalid JSON for {endpoint}: {str(e)}")
            raise CatalogUnavailableError("TMDB returned an invalid response", original_error=e)

        logger.debug(f"TMDB API request successful: {endpoint}")
        return data

    def search(self, query: str) -> List[Dict]:
        """
        Search movies by title. First page only, adult titles excluded.
        """
        if not query:
            return []
        data = self._make_request("/search/movie", {'query': query, 'include_adult': 'false'})
        if not data:
            return []
        return data.get('results', [])

    def get_movie(self, tmdb_id: int) -> Optional[Dict]:
        """
        Get detailed movie information, None when TMDB has no such movie.
        """
        return self._make_request(f"/movie/{tmdb_id}")
