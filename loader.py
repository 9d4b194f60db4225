"""Movie loader: fetches the collection once and derives the genre list."""

import logging
from typing import Any, Dict, List, Optional, Tuple

from rich.progress import Progress, SpinnerColumn, TextColumn

from filter import derive_genres
from movie_source import DataLoadError, MovieSource

logger = logging.getLogger(__name__)


class MovieLoader:
    """Loads the movie collection a single time per view."""

    def __init__(self, source: MovieSource, show_progress: bool = True):
        """Initialize loader with a movie source.

        Args:
            source: MovieSource used for the one fetch
            show_progress: Whether to show a spinner while fetching
        """
        self.source = source
        self.show_progress = show_progress
        self.error: Optional[DataLoadError] = None
        self._result: Optional[Tuple[List[Dict[str, Any]], List[str]]] = None

    @property
    def loaded(self) -> bool:
        return self._result is not None

    def load(self) -> Tuple[List[Dict[str, Any]], List[str]]:
        """Fetch the collection and derive its genres.

        Failures are logged and degrade to an empty collection; this method
        never raises DataLoadError. Later calls return the first result.

        Returns:
            Tuple of (movies, genres)
        """
        if self._result is not None:
            return self._result

        try:
            raw_movies = self._fetch()
        except DataLoadError as e:
            logger.error("Error fetching data: %s", e)
            self.error = e
            raw_movies = []

        movies = []
        for index, raw_movie in enumerate(raw_movies):
            if not isinstance(raw_movie, dict):
                logger.warning("Skipping record %d: expected an object, got %s",
                               index, type(raw_movie).__name__)
                continue
            movies.append(raw_movie)

        genres = derive_genres(movies)
        logger.info("Loaded %d movies across %d genres", len(movies), len(genres))

        self._result = (movies, genres)
        return self._result

    def _fetch(self) -> List[Any]:
        if not self.show_progress:
            return self.source.fetch_movies()

        with Progress(
            SpinnerColumn(),
            TextColumn("[progress.description]{task.description}"),
            transient=True
        ) as progress:
            progress.add_task("[cyan]Loading movies...", total=None)
            return self.source.fetch_movies()
