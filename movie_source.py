"""
Remote movie collection client.
"""
import logging
from typing import Any, Dict, List

import requests
from requests.exceptions import ConnectionError, Timeout

DEFAULT_MOVIES_URL = "https://raw.githubusercontent.com/prust/wikipedia-movie-data/master/movies.json"

logger = logging.getLogger(__name__)


class DataLoadError(Exception):
    """Raised when the movie collection cannot be fetched or parsed."""

    def __init__(self, message: str, url: str, status_code: int = 0):
        """
        Initialize DataLoadError.

        Args:
            message: Error message describing what went wrong
            url: The URL that was requested
            status_code: HTTP status code (0 when no response was received)
        """
        self.message = message
        self.url = url
        self.status_code = status_code
        super().__init__(f"Failed to load movies from {url}: {message}")


class MovieSource:
    """Fetches the full movie collection from a JSON endpoint."""

    def __init__(self, url: str = DEFAULT_MOVIES_URL, timeout: float = 30):
        """
        Initialize the movie source.

        Args:
            url: URL returning a JSON array of movie objects
            timeout: Request timeout in seconds
        """
        self.url = url
        self.timeout = timeout

    def fetch_movies(self) -> List[Dict[str, Any]]:
        """
        Fetch every movie in one request. No retry is attempted.

        Returns:
            List of movie dictionaries, exactly as returned by the endpoint

        Raises:
            DataLoadError: On network failure, HTTP error or malformed body
        """
        logger.debug("GET %s", self.url)
        try:
            response = requests.get(self.url, timeout=self.timeout)
        except (ConnectionError, Timeout) as e:
            raise DataLoadError(f"Connection error: {e}", self.url)
        except requests.RequestException as e:
            raise DataLoadError(str(e), self.url)

        if response.status_code >= 400:
            raise DataLoadError(
                f"HTTP {response.status_code}: {response.text[:200]}",
                self.url,
                response.status_code
            )

        try:
            data = response.json()
        except ValueError:
            raise DataLoadError("Response is not valid JSON", self.url, response.status_code)

        if not isinstance(data, list):
            raise DataLoadError(
                f"Expected a JSON array, got {type(data).__name__}",
                self.url,
                response.status_code
            )

        return data
