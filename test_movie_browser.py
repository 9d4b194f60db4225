"""
Tests for the movie browser CLI: rendering, commands and the interactive loop.
"""
import io

import pytest
from rich.console import Console
from unittest.mock import Mock, patch

from browser import MovieBrowser
from loader import MovieLoader
from movie_browser import (
    ACTION_CLEAR, ACTION_GENRES, ACTION_LOAD_MORE, ACTION_QUIT, ACTION_SEARCH,
    browse_loop, build_actions, display_movies_table, env_number, format_cast,
    format_genres, format_thumbnail, main, prompt_genres, render_browser,
)
from movie_source import DataLoadError, MovieSource


@pytest.fixture
def sample_movies():
    return [
        {"title": "Up", "year": 2009, "cast": ["Ed Asner", "Jordan Nagai"],
         "genres": ["Animation"], "thumbnail": "https://example.org/up.jpg"},
        {"title": "Us", "year": 2019, "genres": ["Horror"]},
        {"title": "Heat", "year": 1995, "cast": [], "genres": ["Crime", "Horror"]},
    ]


@pytest.fixture
def browser(sample_movies):
    loader = Mock(spec=MovieLoader)
    loader.load.return_value = (sample_movies, ["Animation", "Horror", "Crime"])
    b = MovieBrowser(loader, page_size=2)
    yield b
    b.close()


@pytest.fixture
def mock_source(sample_movies):
    """Patch MovieSource so CLI commands never touch the network."""
    with patch("movie_browser.MovieSource") as source_cls:
        source = Mock(spec=MovieSource)
        source.fetch_movies.return_value = sample_movies
        source_cls.return_value = source
        yield source_cls


@pytest.fixture
def recorded_console():
    """Real rich console writing to memory, for checking rendered text."""
    recorder = Console(file=io.StringIO(), record=True, width=200)
    with patch("movie_browser.console", recorder):
        yield recorder


# ============================================================================
# FORMATTING TESTS
# ============================================================================

class TestFormatting:

    def test_cast_joined(self, sample_movies):
        assert format_cast(sample_movies[0]) == "Ed Asner, Jordan Nagai"

    def test_cast_missing_or_empty(self, sample_movies):
        assert format_cast(sample_movies[1]) == "N/A"
        assert format_cast(sample_movies[2]) == "N/A"

    def test_genres_joined(self, sample_movies):
        assert format_genres(sample_movies[2]) == "Crime, Horror"

    def test_thumbnail(self, sample_movies):
        assert format_thumbnail(sample_movies[0]) == "https://example.org/up.jpg"
        assert format_thumbnail(sample_movies[1]) == "No Image"


# ============================================================================
# COMMAND TESTS
# ============================================================================

class TestCommands:

    @patch("movie_browser.display_movies_table")
    def test_list_filters_and_pages(self, mock_display, mock_source):
        result = main(["--page-size", "1", "list", "--search", "U", "--genre", "Horror", "--pages", "2"])

        assert result == 0
        shown = mock_display.call_args.args[0]
        assert [m["title"] for m in shown] == ["Us"]
        assert mock_display.call_args.kwargs["total"] == 1

    @patch("movie_browser.display_movies_table")
    def test_list_uses_url_flag(self, mock_display, mock_source):
        main(["--url", "http://localhost/movies.json", "--timeout", "5", "list"])

        mock_source.assert_called_once_with("http://localhost/movies.json", timeout=5.0)

    @patch("movie_browser.display_load_more_hint")
    @patch("movie_browser.display_movies_table")
    def test_list_reports_remaining(self, mock_display, mock_hint, mock_source):
        main(["--page-size", "2", "list"])

        assert len(mock_display.call_args.args[0]) == 2
        mock_hint.assert_called_once_with(1)

    @patch("movie_browser.display_movies_table")
    def test_list_with_failed_load_renders_empty(self, mock_display, mock_source):
        mock_source.return_value.fetch_movies.side_effect = DataLoadError("boom", "http://x")

        result = main(["list"])

        assert result == 0
        assert mock_display.call_args.args[0] == []

    def test_list_rejects_zero_pages(self, mock_source):
        with patch("movie_browser.console"):
            assert main(["list", "--pages", "0"]) == 1

    def test_rejects_zero_page_size(self, mock_source):
        with patch("movie_browser.console"):
            assert main(["--page-size", "0", "list"]) == 1

    def test_genres_lists_universe(self, mock_source):
        with patch("movie_browser.console") as mock_console:
            result = main(["genres"])

        assert result == 0
        printed = [c.args[0] for c in mock_console.print.call_args_list]
        assert printed == ["Animation", "Horror", "Crime"]

    def test_genres_with_counts(self, mock_source):
        with patch("movie_browser.console") as mock_console:
            result = main(["genres", "--counts"])

        assert result == 0
        table = mock_console.print.call_args.args[0]
        assert table.row_count == 3

    def test_no_command_prints_help(self, mock_source):
        assert main([]) == 1

    @patch("movie_browser.browse_loop")
    def test_browse_passes_reset_flag(self, mock_loop, mock_source):
        result = main(["browse", "--reset-on-filter"])

        assert result == 0
        browser = mock_loop.call_args.args[0]
        assert browser.reset_on_filter_change is True
        assert browser.closed

    @patch("movie_browser.browse_loop")
    def test_browse_interrupt_closes_browser(self, mock_loop, mock_source):
        mock_loop.side_effect = KeyboardInterrupt

        assert main(["browse"]) == 0
        assert mock_loop.call_args.args[0].closed


# ============================================================================
# INTERACTIVE TESTS
# ============================================================================

class TestPromptGenres:

    @patch("movie_browser.questionary")
    def test_checkbox_lists_universe_with_selection_checked(self, mock_questionary, browser):
        browser.start()
        browser.select_genres(["Horror"])
        mock_questionary.checkbox.return_value.ask.return_value = ["Crime"]

        result = prompt_genres(browser)

        assert result == ["Crime"]
        choices = mock_questionary.checkbox.call_args.kwargs["choices"]
        assert [c.value for c in choices] == ["Animation", "Horror", "Crime"]
        assert [c.checked for c in choices] == [False, True, False]

    @patch("movie_browser.questionary")
    def test_cancelled_returns_none(self, mock_questionary, browser):
        browser.start()
        mock_questionary.checkbox.return_value.ask.return_value = None

        assert prompt_genres(browser) is None

    @patch("movie_browser.questionary")
    def test_no_genres_skips_prompt(self, mock_questionary, browser):
        with patch("movie_browser.console"):
            assert prompt_genres(browser) is None
        mock_questionary.checkbox.assert_not_called()


class TestBuildActions:

    def test_load_more_only_when_rows_hidden(self, browser):
        browser.start()
        assert ACTION_LOAD_MORE in [c.value for c in build_actions(browser)]

        browser.load_more()
        assert ACTION_LOAD_MORE not in [c.value for c in build_actions(browser)]

    def test_clear_only_when_filtered(self, browser):
        browser.start()
        assert ACTION_CLEAR not in [c.value for c in build_actions(browser)]

        browser.select_genres(["Horror"])
        assert ACTION_CLEAR in [c.value for c in build_actions(browser)]


class TestBrowseLoop:

    @patch("movie_browser.render_browser")
    @patch("movie_browser.questionary")
    def test_search_genres_load_more_then_quit(self, mock_questionary, mock_render, browser):
        mock_questionary.select.return_value.ask.side_effect = [
            ACTION_SEARCH, ACTION_GENRES, ACTION_LOAD_MORE, ACTION_CLEAR, ACTION_QUIT
        ]
        mock_questionary.text.return_value.ask.return_value = "u"
        mock_questionary.checkbox.return_value.ask.return_value = ["Horror"]

        seen = []
        mock_render.side_effect = lambda b: seen.append(
            (b.query, b.selected_genres, b.visible_count)
        )

        browse_loop(browser)

        assert seen == [
            ("", frozenset(), 2),
            ("u", frozenset(), 2),
            ("u", frozenset({"Horror"}), 2),
            ("u", frozenset({"Horror"}), 4),
            ("", frozenset(), 4),
        ]

    @patch("movie_browser.render_browser")
    @patch("movie_browser.questionary")
    def test_ctrl_c_exits(self, mock_questionary, mock_render, browser):
        mock_questionary.select.return_value.ask.return_value = None

        browse_loop(browser)

        mock_render.assert_called_once_with(browser)

    @patch("movie_browser.render_browser")
    @patch("movie_browser.questionary")
    def test_cancelled_search_keeps_query(self, mock_questionary, mock_render, browser):
        mock_questionary.select.return_value.ask.side_effect = [ACTION_SEARCH, ACTION_QUIT]
        mock_questionary.text.return_value.ask.return_value = None

        browse_loop(browser)

        assert browser.query == ""
        assert mock_render.call_count == 1


# ============================================================================
# RENDERING TESTS
# ============================================================================

class TestRendering:
    """Text from the user or the data source is printed literally."""

    def test_bracketed_title_is_kept_in_table(self, recorded_console):
        display_movies_table([
            {"title": "Best of [bold]", "year": 2001, "cast": ["[/x] Smith"],
             "genres": ["[red]"], "thumbnail": "https://example.org/[1].jpg"},
        ])

        output = recorded_console.export_text()
        assert "Best of [bold]" in output
        assert "[/x] Smith" in output
        assert "[red]" in output
        assert "https://example.org/[1].jpg" in output

    def test_query_with_closing_tag_renders(self, recorded_console, browser):
        browser.start()
        browser.type_search("[/b]")
        browser.submit_search()
        browser.select_genres(["[/i]"])

        render_browser(browser)

        output = recorded_console.export_text()
        assert "title contains '[/b]'" in output
        assert "genres: [/i]" in output
        assert "No movies found" in output

    def test_bracketed_genre_names(self, recorded_console, mock_source, sample_movies):
        sample_movies.append({"title": "Odd", "year": 2020, "genres": ["[/x]"]})

        assert main(["genres"]) == 0
        assert main(["genres", "--counts"]) == 0

        output = recorded_console.export_text()
        assert output.count("[/x]") == 2


# ============================================================================
# CONFIGURATION TESTS
# ============================================================================

class TestEnvironment:

    @patch("movie_browser.display_movies_table")
    def test_fractional_timeout_from_env(self, mock_display, mock_source, monkeypatch):
        monkeypatch.setenv("MOVIES_TIMEOUT", "2.5")

        assert main(["list"]) == 0
        assert mock_source.call_args.kwargs["timeout"] == 2.5

    def test_env_number_parses_with_converter(self, monkeypatch):
        monkeypatch.setenv("MOVIES_PAGE_SIZE", "25")

        assert env_number("MOVIES_PAGE_SIZE", 50) == 25
        assert env_number("MOVIES_PAGE_SIZE", 50.0, float) == 25.0

    def test_env_number_falls_back_on_garbage(self, monkeypatch):
        monkeypatch.setenv("MOVIES_TIMEOUT", "soon")

        assert env_number("MOVIES_TIMEOUT", 30.0, float) == 30.0

    def test_env_number_unset(self, monkeypatch):
        monkeypatch.delenv("MOVIES_DEBOUNCE_MS", raising=False)

        assert env_number("MOVIES_DEBOUNCE_MS", 300) == 300
