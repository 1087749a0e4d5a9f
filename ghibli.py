#!/usr/bin/env python3
"""
Ghibli - Studio Ghibli film catalog in the terminal
Browse the film catalog, read the details of a film and keep a list of favorites.
"""

import argparse
import asyncio
import json
import logging
import os
import sys
from typing import Any, Dict, List, Optional

from colorama import init, Fore, Style

from app.errors import CatalogError
from app.models import Film
from app.services import CatalogSession, DisplaySettingsService
from catalog_client import DEFAULT_API_URL, CatalogClient

# Initialize colorama for cross-platform colored terminal output
init(autoreset=True)

# ---------------------------------------------------------------------------
# Logging setup
# ---------------------------------------------------------------------------

def setup_logging(level: str = 'WARNING') -> logging.Logger:
    """Configure the root ``ghibli`` logger.

    Args:
        level: Log level string (DEBUG, INFO, WARNING, ERROR, CRITICAL).
               Defaults to WARNING so normal use is quiet.

    Returns:
        Configured logger instance.
    """
    numeric = getattr(logging, level.upper(), logging.WARNING)
    logger = logging.getLogger('ghibli')
    if not logger.handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter('[%(levelname)s] %(name)s: %(message)s'))
        logger.addHandler(handler)
    logger.setLevel(numeric)
    return logger


logger = setup_logging()

# ---------------------------------------------------------------------------
# Configuration
# ---------------------------------------------------------------------------

DEFAULT_CONFIG: Dict[str, Any] = {
    'api_url': DEFAULT_API_URL,
    'timeout': 10,
    'log_level': 'WARNING',
    'prune_stale_favorites': False,
    'light_mode': False,
    'language': 'English',
    'font_size': 16,
}

_TRUE_VALUES = {'1', 'true', 'yes', 'on'}


def load_config(config_path: str = 'config.json') -> Dict[str, Any]:
    """Load configuration from an optional JSON file with environment overrides.

    A missing file means defaults.  Environment variables take precedence over
    file values:
    - GHIBLI_API_URL overrides api_url
    - GHIBLI_TIMEOUT overrides timeout
    - GHIBLI_LOG_LEVEL overrides log_level
    - GHIBLI_PRUNE_FAVORITES overrides prune_stale_favorites

    Raises:
        ValueError: The file is not a JSON object, or an override is malformed.
    """
    config = dict(DEFAULT_CONFIG)

    if os.path.exists(config_path):
        try:
            with open(config_path, 'r') as f:
                data = json.load(f)
        except json.JSONDecodeError as e:
            raise ValueError(f"Error parsing config file '{config_path}': {e}") from e
        except OSError as e:
            raise ValueError(f"Error reading config file '{config_path}': {e}") from e
        if not isinstance(data, dict):
            raise ValueError(f"Config file '{config_path}' must contain a JSON object")
        config.update(data)
    else:
        logger.debug("Config file %s not found, using defaults", config_path)

    if os.getenv('GHIBLI_API_URL'):
        config['api_url'] = os.getenv('GHIBLI_API_URL')
    if os.getenv('GHIBLI_TIMEOUT'):
        try:
            config['timeout'] = float(os.getenv('GHIBLI_TIMEOUT'))
        except ValueError as e:
            raise ValueError(f"GHIBLI_TIMEOUT must be a number: {e}") from e
    if os.getenv('GHIBLI_LOG_LEVEL'):
        config['log_level'] = os.getenv('GHIBLI_LOG_LEVEL')
    if os.getenv('GHIBLI_PRUNE_FAVORITES'):
        config['prune_stale_favorites'] = os.getenv('GHIBLI_PRUNE_FAVORITES').strip().lower() in _TRUE_VALUES

    if not isinstance(config['timeout'], (int, float)) or config['timeout'] <= 0:
        raise ValueError(f"timeout must be a positive number, got {config['timeout']!r}")
    if not isinstance(config['prune_stale_favorites'], bool):
        raise ValueError(
            f"prune_stale_favorites must be a boolean, got {config['prune_stale_favorites']!r}"
        )
    return config


class FilmCatalogApp:
    """Terminal front-end over one :class:`CatalogSession`."""

    def __init__(self, config: Optional[Dict[str, Any]] = None,
                 session: Optional[CatalogSession] = None):
        self.config = dict(DEFAULT_CONFIG)
        self.config.update(config or {})
        self._log = logging.getLogger('ghibli.cli')
        self.timeout = self.config['timeout']
        self.settings = DisplaySettingsService(
            light_mode=self.config['light_mode'],
            language=self.config['language'],
            font_size=self.config['font_size'],
        )
        prune = self.config['prune_stale_favorites']
        if not isinstance(prune, bool):
            raise ValueError(f"prune_stale_favorites must be a boolean, got {prune!r}")
        if session is None:
            client = CatalogClient(self.config['api_url'], timeout=self.timeout)
            session = CatalogSession(client, prune_stale_favorites=prune)
        self.session = session

    # ------------------------------------------------------------------
    # Catalog
    # ------------------------------------------------------------------

    def load(self) -> bool:
        """Fetch the catalog; prints the error and returns False on failure."""
        print(f"{Fore.CYAN}Fetching the film catalog...")
        try:
            films = asyncio.run(self.session.load(timeout=self.timeout))
        except CatalogError as e:
            print(f"{Fore.RED}Could not load the catalog: {e}")
            return False
        print(f"{Fore.GREEN}Found {len(films)} films!")
        return True

    @property
    def _text(self) -> str:
        return Fore.BLACK if self.settings.light_mode else Fore.WHITE

    def _film_line(self, film: Film) -> str:
        heart = f" {Fore.RED}♥" if self.session.is_favorite(film.id) else ''
        return (f"{Fore.YELLOW}{film.id}: {self._text}{Style.BRIGHT}{film.title}"
                f"{Style.RESET_ALL} {Fore.CYAN}({film.director}){heart}")

    # ------------------------------------------------------------------
    # Views
    # ------------------------------------------------------------------

    def display_films(self):
        """List every film of the catalog"""
        films = self.session.films
        if not films:
            print(f"\n{Fore.YELLOW}No Films")
            return

        print(f"\n{Fore.CYAN}{Style.BRIGHT}🎬 Movies ({len(films)})")
        print(f"{Fore.GREEN}{'='*60}")
        for film in films:
            print(self._film_line(film))
        print(f"{Fore.GREEN}{'='*60}\n")

    def display_film(self, film: Film):
        """Display the details of one film"""
        text = self._text
        print(f"\n{Fore.GREEN}{'='*60}")
        print(f"{Fore.CYAN}{Style.BRIGHT}🎬 {film.title}")
        if self.session.is_favorite(film.id):
            print(f"{Fore.RED}♥ FAVORITE")
        print(f"{Fore.GREEN}{'='*60}")
        print(f"{Fore.YELLOW}Director: {text}{film.director}")
        print(f"{Fore.YELLOW}Producer: {text}{film.producer}")
        print(f"{Fore.YELLOW}Running Time: {text}{film.running_time} min")
        print(f"{Fore.YELLOW}Release Date: {text}{film.release_date}")
        print(f"{Fore.YELLOW}Cover Art: {text}{film.image}")
        print(f"\n{text}{film.description}")
        print(f"{Fore.GREEN}{'='*60}\n")

    def display_favorites(self):
        """List the favorite films"""
        favorites = self.session.favorites()
        if not favorites:
            print(f"\n{Fore.YELLOW}No Films")
            return

        print(f"\n{Fore.CYAN}{Style.BRIGHT}♥ Favorite ({len(favorites)})")
        print(f"{Fore.GREEN}{'='*60}")
        for film in favorites:
            print(self._film_line(film))
        print(f"{Fore.GREEN}{'='*60}\n")

    def display_settings(self):
        """Display the current display settings"""
        text = self._text
        print(f"\n{Fore.CYAN}{Style.BRIGHT}⚙ Settings")
        print(f"{Fore.GREEN}{'='*40}")
        print(f"{Fore.YELLOW}Light Mode: {text}{'on' if self.settings.light_mode else 'off'}")
        print(f"{Fore.YELLOW}Language: {text}{self.settings.language}")
        print(f"{Fore.YELLOW}Current font size: {text}{self.settings.font_size}")
        print(f"{Fore.GREEN}{'='*40}\n")

    # ------------------------------------------------------------------
    # Actions
    # ------------------------------------------------------------------

    def show(self, film_id: str) -> bool:
        """Display *film_id*; returns False if it is not in the catalog."""
        film = self.session.find(film_id)
        if film is None:
            print(f"{Fore.YELLOW}Film {film_id} not found in the catalog.")
            return False
        self.display_film(film)
        return True

    def toggle_favorite(self, film_id: str) -> bool:
        """Toggle *film_id*; only ids present in the catalog are accepted."""
        film = self.session.find(film_id)
        if film is None:
            print(f"{Fore.YELLOW}Film {film_id} not found in the catalog.")
            return False
        if self.session.toggle_favorite(film_id):
            print(f"{Fore.GREEN}Added {film.title} to favorites!")
        else:
            print(f"{Fore.GREEN}Removed {film.title} from favorites!")
        return True

    def change_settings(self, **changes) -> bool:
        try:
            self.settings.update(**changes)
        except ValueError as e:
            print(f"{Fore.RED}Invalid setting: {e}")
            return False
        return True

    def settings_menu(self):
        """Edit display settings interactively"""
        while True:
            self.display_settings()
            print(f"{Fore.YELLOW}1. {self._text}Toggle light mode")
            print(f"{Fore.YELLOW}2. {self._text}Change language")
            print(f"{Fore.YELLOW}3. {self._text}Change font size")
            print(f"{Fore.YELLOW}b. {self._text}Back to main menu")

            choice = input(f"\n{Fore.GREEN}Enter your choice: {Fore.WHITE}").strip().lower()

            if choice == 'b':
                break
            elif choice == '1':
                self.change_settings(light_mode=not self.settings.light_mode)
            elif choice == '2':
                language = input(f"{Fore.GREEN}Language (English/Arabic): {Fore.WHITE}").strip()
                self.change_settings(language=language)
            elif choice == '3':
                raw = input(f"{Fore.GREEN}Font size (12-30): {Fore.WHITE}").strip()
                try:
                    size = int(raw)
                except ValueError:
                    print(f"{Fore.RED}Font size must be a whole number.")
                    continue
                self.change_settings(font_size=size)
            else:
                print(f"{Fore.RED}Invalid choice.")

    def interactive_mode(self):
        """Run in interactive mode"""
        if not self.load():
            return

        while True:
            text = self._text
            print(f"\n{Fore.CYAN}{Style.BRIGHT}Ghibli - Film Catalog")
            print(f"{text}{'='*40}")
            print(f"{Fore.YELLOW}1. {text}List films")
            print(f"{Fore.YELLOW}2. {text}Show film details")
            print(f"{Fore.YELLOW}3. {text}Toggle a favorite")
            print(f"{Fore.YELLOW}4. {text}List favorites")
            print(f"{Fore.YELLOW}5. {text}Settings")
            print(f"{Fore.YELLOW}6. {text}Reload catalog")
            print(f"{Fore.YELLOW}q. {text}Quit")
            print(f"{text}{'='*40}")

            choice = input(f"\n{Fore.GREEN}Enter your choice: {Fore.WHITE}").strip().lower()

            if choice == 'q':
                print(f"\n{Fore.CYAN}Thanks for using Ghibli! 🎬")
                break
            elif choice == '1':
                self.display_films()
            elif choice == '2':
                film_id = input(f"{Fore.GREEN}Enter Film ID: {Fore.WHITE}").strip()
                self.show(film_id)
            elif choice == '3':
                film_id = input(f"{Fore.GREEN}Enter Film ID: {Fore.WHITE}").strip()
                self.toggle_favorite(film_id)
            elif choice == '4':
                self.display_favorites()
            elif choice == '5':
                self.settings_menu()
            elif choice == '6':
                self.load()
            else:
                print(f"{Fore.RED}Invalid choice. Please try again.")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description='Ghibli - Studio Ghibli film catalog',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python3 ghibli.py                          # Run in interactive mode
  python3 ghibli.py --list                   # List all films and exit
  python3 ghibli.py --show ID                # Show the details of one film
  python3 ghibli.py --favorite ID --favorites  # Mark a film and list favorites
        """
    )
    parser.add_argument('--config', '-c', default='config.json',
                        help='Path to config file (default: config.json)')
    parser.add_argument('--list', '-l', action='store_true',
                        help='List all films and exit')
    parser.add_argument('--show', '-s', metavar='ID',
                        help='Show the details of a film and exit')
    parser.add_argument('--favorite', '-f', metavar='ID', action='append', default=[],
                        help='Toggle a film as favorite (repeatable)')
    parser.add_argument('--favorites', action='store_true',
                        help='List favorite films and exit')
    parser.add_argument('--settings', action='store_true',
                        help='Show display settings and exit')
    mode = parser.add_mutually_exclusive_group()
    mode.add_argument('--light-mode', dest='light_mode', action='store_true', default=None,
                      help='Use light mode colours')
    mode.add_argument('--dark-mode', dest='light_mode', action='store_false',
                      help='Use dark mode colours')
    parser.set_defaults(light_mode=None)
    parser.add_argument('--language', help='Display language (English or Arabic)')
    parser.add_argument('--font-size', type=int, metavar='SIZE',
                        help='Display font size (12-30)')
    parser.add_argument('--timeout', type=float, metavar='SECONDS',
                        help='Catalog fetch timeout in seconds')
    parser.add_argument('--log-level', metavar='LEVEL',
                        help='Log level (DEBUG, INFO, WARNING, ERROR)')
    return parser


def main(argv: Optional[List[str]] = None):
    """Main entry point"""
    args = build_parser().parse_args(argv)

    try:
        config = load_config(args.config)
    except ValueError as e:
        print(f"{Fore.RED}{e}")
        sys.exit(1)

    if args.timeout is not None:
        if args.timeout <= 0:
            print(f"{Fore.RED}Error: --timeout must be positive")
            sys.exit(1)
        config['timeout'] = args.timeout
    setup_logging(args.log_level or config['log_level'])

    try:
        app = FilmCatalogApp(config)
    except ValueError as e:
        print(f"{Fore.RED}Invalid setting in config: {e}")
        sys.exit(1)

    changes = {}
    if args.light_mode is not None:
        changes['light_mode'] = args.light_mode
    if args.language is not None:
        changes['language'] = args.language
    if args.font_size is not None:
        changes['font_size'] = args.font_size
    try:
        if changes and not app.change_settings(**changes):
            sys.exit(1)

        if args.settings:
            app.display_settings()
            return

        if args.list or args.show or args.favorite or args.favorites:
            if not app.load():
                sys.exit(1)
            ok = True
            for film_id in args.favorite:
                ok = app.toggle_favorite(film_id) and ok
            if args.list:
                app.display_films()
            if args.show:
                ok = app.show(args.show) and ok
            if args.favorites:
                app.display_favorites()
            if not ok:
                sys.exit(1)
            return

        app.interactive_mode()
    except KeyboardInterrupt:
        print(f"\n{Fore.CYAN}Goodbye!")
    finally:
        app.session.close()


if __name__ == '__main__':
    main()
