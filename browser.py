"""
Movie browser state: collection, filter inputs and the visible window.
"""
import logging
import threading
from typing import Any, Callable, Dict, Iterable, List

from debounce import Debouncer
from filter import MovieFilter
from loader import MovieLoader
from pagination import DEFAULT_PAGE_SIZE, Paginator

logger = logging.getLogger(__name__)

Listener = Callable[['MovieBrowser'], None]


class MovieBrowser:
    """View model behind the movie list: search, genre filter and paging."""

    def __init__(
        self,
        loader: MovieLoader,
        page_size: int = DEFAULT_PAGE_SIZE,
        debounce_wait: float = 0.3,
        reset_on_filter_change: bool = False,
        timer_factory: Callable[..., Any] = threading.Timer
    ):
        """
        Initialize the browser.

        Args:
            loader: MovieLoader providing the collection
            page_size: Rows revealed per "load more"
            debounce_wait: Seconds of quiet before a search is applied
            reset_on_filter_change: Shrink the window back to one page when
                                    the query or genre selection changes
            timer_factory: Timer constructor for the search debouncer
        """
        self.loader = loader
        self.reset_on_filter_change = reset_on_filter_change
        self.paginator = Paginator(page_size)
        self.movie_filter = MovieFilter()
        self.search = Debouncer(self._apply_query, debounce_wait, timer_factory)

        self.movies: List[Dict[str, Any]] = []
        self.genres: List[str] = []
        self.search_input = ""
        self.query = ""
        self.selected_genres = frozenset()
        self.closed = False

        self._lock = threading.RLock()
        self._listeners: List[Listener] = []

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """
        Register a callback run after every state change.

        Returns:
            A function that removes the listener
        """
        self._listeners.append(listener)

        def unsubscribe():
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _notify(self) -> None:
        for listener in list(self._listeners):
            listener(self)

    def start(self) -> None:
        """Load the collection. Only the first call fetches."""
        movies, genres = self.loader.load()
        with self._lock:
            self.movies = movies
            self.genres = genres
        self._notify()

    def type_search(self, raw: str) -> None:
        """Record a keystroke; the query follows once typing settles."""
        with self._lock:
            if self.closed:
                return
            self.search_input = raw
        self.search(raw)

    def submit_search(self) -> None:
        """Apply whatever search is still waiting on the debounce timer."""
        self.search.flush()

    def _apply_query(self, value: str) -> None:
        with self._lock:
            if self.closed:
                return
            if value == self.query:
                return
            self.query = value
            if self.reset_on_filter_change:
                self.paginator.reset()
        logger.debug("Applied search query %r", value)
        self._notify()

    def select_genres(self, genres: Iterable[str]) -> None:
        """Replace the genre selection with exactly ``genres``."""
        with self._lock:
            if self.closed:
                return
            self.selected_genres = frozenset(genres)
            if self.reset_on_filter_change:
                self.paginator.reset()
        self._notify()

    def clear_filters(self) -> None:
        self.search.cancel()
        with self._lock:
            self.search_input = ""
            self.query = ""
            self.selected_genres = frozenset()
            if self.reset_on_filter_change:
                self.paginator.reset()
        self._notify()

    def load_more(self) -> None:
        with self._lock:
            self.paginator.load_more()
        self._notify()

    @property
    def visible_count(self) -> int:
        return self.paginator.visible_count

    @property
    def filtered_movies(self) -> List[Dict[str, Any]]:
        with self._lock:
            return self.movie_filter.filter(self.movies, self.query, self.selected_genres)

    @property
    def visible_movies(self) -> List[Dict[str, Any]]:
        return self.paginator.window(self.filtered_movies)

    @property
    def has_more(self) -> bool:
        return self.paginator.has_more(self.filtered_movies)

    @property
    def remaining(self) -> int:
        return self.paginator.remaining(self.filtered_movies)

    def close(self) -> None:
        """Tear down: a pending search must never be applied after this."""
        self.search.cancel()
        with self._lock:
            self.closed = True
        self._listeners.clear()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()
