#!/usr/bin/env python3
"""
Movie Browser - search, filter and page through a remote movie collection.
"""
import argparse
import logging
import os
import sys
from typing import Any, Dict, List, Optional

import questionary
from dotenv import load_dotenv
from questionary import Choice
from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape
from rich.table import Table
from rich.text import Text

from browser import MovieBrowser
from loader import MovieLoader
from movie_source import DEFAULT_MOVIES_URL, MovieSource
from pagination import DEFAULT_PAGE_SIZE

console = Console()
logger = logging.getLogger(__name__)

ACTION_SEARCH = "search"
ACTION_GENRES = "genres"
ACTION_LOAD_MORE = "load_more"
ACTION_CLEAR = "clear"
ACTION_QUIT = "quit"


def configure_logging(level: str = "WARNING") -> None:
    """Send log records through rich on stderr."""
    logging.basicConfig(
        level=level.upper(),
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
        force=True
    )


def format_cast(movie: Dict[str, Any]) -> str:
    cast = movie.get('cast')
    return ', '.join(cast) if cast else "N/A"


def format_genres(movie: Dict[str, Any]) -> str:
    return ', '.join(movie.get('genres') or [])


def format_thumbnail(movie: Dict[str, Any]) -> str:
    return movie.get('thumbnail') or "No Image"


def display_movies_table(movies: List[Dict[str, Any]], total: Optional[int] = None) -> None:
    """
    Display movies in a formatted table.

    Args:
        movies: Movies to render (already windowed)
        total: Size of the full filtered list, shown in the caption
    """
    if not movies:
        console.print("[yellow]No movies found[/yellow]")
        return

    caption = None
    if total is not None:
        caption = f"Showing {len(movies)} of {total} movies"

    table = Table(title="Movie List", caption=caption)
    table.add_column("Title", style="cyan", no_wrap=False)
    table.add_column("Year", style="magenta", justify="center")
    table.add_column("Cast", style="green", no_wrap=False)
    table.add_column("Genres", style="blue", no_wrap=False)
    table.add_column("Thumbnail", style="dim", justify="center", overflow="fold")

    for movie in movies:
        # Remote data is shown verbatim, never parsed as markup
        table.add_row(
            Text(str(movie.get('title', ''))),
            Text(str(movie.get('year', ''))),
            Text(format_cast(movie)),
            Text(format_genres(movie)),
            Text(format_thumbnail(movie))
        )

    console.print(table)


def display_load_more_hint(remaining: int, interactive: bool = False) -> None:
    if remaining <= 0:
        return
    if interactive:
        console.print(f"[dim]{remaining} more movies, choose 'Load more' to see them[/dim]")
    else:
        console.print(f"[dim]{remaining} more movies, use --pages to load more[/dim]")


def render_browser(browser: MovieBrowser) -> None:
    """Redraw the current view of the browser."""
    filters = []
    if browser.query:
        filters.append(f"title contains '{escape(browser.query)}'")
    if browser.selected_genres:
        filters.append("genres: " + ', '.join(escape(genre) for genre in sorted(browser.selected_genres)))
    if filters:
        console.print(f"\n[bold]Filters:[/bold] {'; '.join(filters)}")

    display_movies_table(browser.visible_movies, total=len(browser.filtered_movies))
    display_load_more_hint(browser.remaining, interactive=True)


def prompt_genres(browser: MovieBrowser) -> Optional[List[str]]:
    """
    Ask the user which genres to show.

    Returns:
        The full new selection, or None if the prompt was cancelled
    """
    if not browser.genres:
        console.print("[yellow]No genres available[/yellow]")
        return None

    choices = [
        Choice(title=genre, value=genre, checked=genre in browser.selected_genres)
        for genre in browser.genres
    ]
    return questionary.checkbox(
        "Filter by genre:",
        choices=choices,
        instruction="(Space to toggle, Enter to confirm, none selected shows all)"
    ).ask()


def build_actions(browser: MovieBrowser) -> List[Choice]:
    actions = [
        Choice(title="Search by title", value=ACTION_SEARCH),
        Choice(title="Filter genres", value=ACTION_GENRES),
    ]
    if browser.has_more:
        actions.append(Choice(title=f"Load more ({browser.remaining} hidden)", value=ACTION_LOAD_MORE))
    if browser.query or browser.selected_genres:
        actions.append(Choice(title="Clear filters", value=ACTION_CLEAR))
    actions.append(Choice(title="Quit", value=ACTION_QUIT))
    return actions


def browse_loop(browser: MovieBrowser) -> None:
    """Run the interactive menu until the user quits."""
    browser.subscribe(render_browser)
    browser.start()

    while True:
        action = questionary.select("What next?", choices=build_actions(browser)).ask()

        # None means Ctrl+C
        if action is None or action == ACTION_QUIT:
            return

        if action == ACTION_SEARCH:
            text = questionary.text("Search by title:", default=browser.search_input).ask()
            if text is None:
                continue
            browser.type_search(text)
            browser.submit_search()
        elif action == ACTION_GENRES:
            selected = prompt_genres(browser)
            if selected is None:
                continue
            browser.select_genres(selected)
        elif action == ACTION_LOAD_MORE:
            browser.load_more()
        elif action == ACTION_CLEAR:
            browser.clear_filters()


def build_browser(args: argparse.Namespace, reset_on_filter_change: bool = False) -> MovieBrowser:
    source = MovieSource(args.url, timeout=args.timeout)
    loader = MovieLoader(source)
    return MovieBrowser(
        loader,
        page_size=args.page_size,
        debounce_wait=args.debounce / 1000,
        reset_on_filter_change=reset_on_filter_change
    )


def cmd_list(args: argparse.Namespace) -> int:
    """
    Execute the list command: filter once and print the requested pages.

    Args:
        args: Parsed command-line arguments

    Returns:
        Exit code (0 for success, 1 for error)
    """
    try:
        with build_browser(args) as browser:
            browser.start()

            if args.search:
                browser.type_search(args.search)
                browser.submit_search()
            if args.genre:
                browser.select_genres(args.genre)
            for _ in range(args.pages - 1):
                browser.load_more()

            filtered = browser.filtered_movies
            display_movies_table(browser.visible_movies, total=len(filtered))
            display_load_more_hint(browser.remaining)

            if args.verbose:
                stats = browser.movie_filter.get_statistics(browser.movies, filtered)
                console.print("\n[bold cyan]Summary:[/bold cyan]")
                console.print(f"  Matched {stats['filtered_count']} of {stats['total_count']} movies")
                console.print(f"  Matches span {stats['filtered_genres']} of {stats['total_genres']} genres")
        return 0

    except Exception as e:
        console.print(f"[bold red]Error:[/bold red] {escape(str(e))}")
        if args.verbose:
            import traceback
            console.print(f"\n[dim]{traceback.format_exc()}[/dim]")
        return 1


def cmd_genres(args: argparse.Namespace) -> int:
    """List every genre in the collection."""
    with build_browser(args) as browser:
        browser.start()

        if not browser.genres:
            console.print("[yellow]No genres found[/yellow]")
            return 0

        if not args.counts:
            for genre in browser.genres:
                console.print(escape(genre))
            return 0

        counts = {genre: 0 for genre in browser.genres}
        for movie in browser.movies:
            for genre in set(movie.get('genres') or []):
                counts[genre] += 1

        table = Table(title="Genres")
        table.add_column("Genre", style="blue")
        table.add_column("Movies", style="green", justify="right")
        for genre, count in sorted(counts.items(), key=lambda item: (-item[1], item[0])):
            table.add_row(Text(genre), str(count))
        console.print(table)
    return 0


def cmd_browse(args: argparse.Namespace) -> int:
    """Interactive browsing session."""
    browser = build_browser(args, reset_on_filter_change=args.reset_on_filter)
    try:
        browse_loop(browser)
        return 0
    except KeyboardInterrupt:
        return 0
    except Exception as e:
        console.print(f"[bold red]Error:[/bold red] {escape(str(e))}")
        return 1
    finally:
        browser.close()


def env_number(name: str, default, convert=int):
    value = os.getenv(name)
    if not value:
        return default
    try:
        return convert(value)
    except ValueError:
        logger.warning("Ignoring %s=%r, expected a %s", name, value, convert.__name__)
        return default


def main(argv: Optional[List[str]] = None) -> int:
    """
    Main entry point for the CLI application.

    Returns:
        Exit code (0 for success, 1 for error)
    """
    # Load environment variables from .env file
    load_dotenv()

    parser = argparse.ArgumentParser(
        description="Movie Browser - search and filter a movie collection",
        formatter_class=argparse.RawDescriptionHelpFormatter
    )

    # Global arguments
    parser.add_argument(
        '--url',
        default=os.getenv('MOVIES_URL', DEFAULT_MOVIES_URL),
        help='Movie collection URL (overrides MOVIES_URL env var)'
    )
    parser.add_argument(
        '--timeout',
        type=float,
        default=env_number('MOVIES_TIMEOUT', 30.0, float),
        help='Request timeout in seconds (default: 30)'
    )
    parser.add_argument(
        '--page-size',
        type=int,
        default=env_number('MOVIES_PAGE_SIZE', DEFAULT_PAGE_SIZE),
        help=f'Movies revealed per page (default: {DEFAULT_PAGE_SIZE})'
    )
    parser.add_argument(
        '--debounce',
        type=int,
        default=env_number('MOVIES_DEBOUNCE_MS', 300),
        help='Search debounce interval in milliseconds (default: 300)'
    )
    parser.add_argument(
        '--log-level',
        default=os.getenv('MOVIES_LOG_LEVEL', 'WARNING'),
        choices=['DEBUG', 'INFO', 'WARNING', 'ERROR'],
        type=str.upper,
        help='Logging level (overrides MOVIES_LOG_LEVEL env var)'
    )

    subparsers = parser.add_subparsers(dest='command', help='Command to execute')

    # List command
    list_parser = subparsers.add_parser('list', help='Print filtered movies')
    list_parser.add_argument(
        '--search', '-s',
        default='',
        help='Case-insensitive text to find in titles'
    )
    list_parser.add_argument(
        '--genre', '-g',
        action='append',
        default=[],
        help='Genre to include; repeat for several (matches any)'
    )
    list_parser.add_argument(
        '--pages', '-p',
        type=int,
        default=1,
        help='Number of pages to show (default: 1)'
    )
    list_parser.add_argument(
        '--verbose', '-v',
        action='store_true',
        help='Show detailed output'
    )

    # Genres command
    genres_parser = subparsers.add_parser('genres', help='List all genres')
    genres_parser.add_argument(
        '--counts', '-c',
        action='store_true',
        help='Show how many movies carry each genre'
    )

    # Browse command
    browse_parser = subparsers.add_parser('browse', help='Browse interactively')
    browse_parser.add_argument(
        '--reset-on-filter',
        action='store_true',
        help='Return to the first page whenever the filters change'
    )

    args = parser.parse_args(argv)

    configure_logging(args.log_level)

    if args.page_size < 1:
        console.print("[bold red]Error:[/bold red] --page-size must be at least 1")
        return 1

    if args.command == 'list':
        if args.pages < 1:
            console.print("[bold red]Error:[/bold red] --pages must be at least 1")
            return 1
        return cmd_list(args)
    elif args.command == 'genres':
        return cmd_genres(args)
    elif args.command == 'browse':
        return cmd_browse(args)
    else:
        parser.print_help()
        return 1


if __name__ == '__main__':
    sys.exit(main())
