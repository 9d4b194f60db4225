"""Title and genre filtering for the movie collection."""
from typing import Any, Dict, Iterable, List, Optional, Set


def derive_genres(movies: List[Dict[str, Any]]) -> List[str]:
    """
    Collect every distinct genre in the collection.

    Args:
        movies: List of movie dictionaries with 'genres' field

    Returns:
        Deduplicated genres, in order of first appearance
    """
    seen = {}
    for movie in movies:
        for genre in movie.get('genres') or []:
            seen.setdefault(genre, None)
    return list(seen)


def matches_title(movie: Dict[str, Any], query: str) -> bool:
    """Case-insensitive substring match of query against the title."""
    if not query:
        return True
    title = movie.get('title') or ''
    return query.lower() in str(title).lower()


def matches_genres(movie: Dict[str, Any], selected_genres: Set[str]) -> bool:
    """True when nothing is selected or the movie shares at least one genre."""
    if not selected_genres:
        return True
    return any(genre in selected_genres for genre in movie.get('genres') or [])


def filter_movies(
    movies: List[Dict[str, Any]],
    query: str = "",
    selected_genres: Optional[Iterable[str]] = None
) -> List[Dict[str, Any]]:
    """
    Filter movies by title substring AND genre intersection.

    Args:
        movies: List of movie dictionaries
        query: Text to look for in titles (empty matches everything)
        selected_genres: Genres to keep; a movie needs any one of them
                         (empty or None matches everything)

    Returns:
        Matching movies in their original order
    """
    genres = frozenset(selected_genres or ())
    return [
        movie for movie in movies
        if matches_title(movie, query) and matches_genres(movie, genres)
    ]


class MovieFilter:
    """Memoized filter over a loaded collection."""

    def __init__(self):
        self._movies = None
        self._key = None
        self._result: List[Dict[str, Any]] = []

    def filter(
        self,
        movies: List[Dict[str, Any]],
        query: str = "",
        selected_genres: Optional[Iterable[str]] = None
    ) -> List[Dict[str, Any]]:
        """
        Filter movies, reusing the previous result when nothing changed.

        The cache holds the collection itself, so a different list object
        always triggers a fresh computation.
        """
        genres = frozenset(selected_genres or ())
        key = (query, genres)
        if movies is not self._movies or key != self._key:
            self._result = filter_movies(movies, query, genres)
            self._movies = movies
            self._key = key
        return self._result

    def get_statistics(self, movies, filtered_movies):
        """
        Calculate statistics for total and filtered movies.

        Args:
            movies: List of all movies
            filtered_movies: List of filtered movies

        Returns:
            Dictionary with counts:
            - total_count: Total number of movies
            - filtered_count: Number of filtered movies
            - total_genres: Distinct genres in the whole collection
            - filtered_genres: Distinct genres among filtered movies
        """
        return {
            'total_count': len(movies),
            'filtered_count': len(filtered_movies),
            'total_genres': len(derive_genres(movies)),
            'filtered_genres': len(derive_genres(filtered_movies))
        }
