"""Coordinates catalog fetches and favourites for the presentation layer."""
import asyncio
import enum
import functools
import logging
import threading
from concurrent.futures import ThreadPoolExecutor
from typing import List, Optional

from ..errors import CatalogError, NetworkError
from ..models import Film
from .favorites_service import FavoritesService, favorites_of


class SessionState(enum.Enum):
    EMPTY = 'empty'    # no successful load yet
    LOADED = 'loaded'  # holds the last successful catalog


class CatalogSession:
    """Holds the current catalog and the favourites set.

    One session is created at application start and passed to every view.
    The blocking fetch of the injected client runs in a worker thread so
    :meth:`load` can be awaited.  A single lock guards both the film list and
    the favourites set, so a session may also be shared between threads.

    Concurrent :meth:`load` calls are not de-duplicated: whichever succeeds
    last replaces the catalog.
    """

    def __init__(self, client, favorites: Optional[FavoritesService] = None,
                 prune_stale_favorites: bool = False) -> None:
        """
        Args:
            client:    Object exposing ``fetch_catalog(timeout=None)``, normally
                a :class:`catalog_client.CatalogClient`.
            favorites: Favourites store to use; a fresh empty one by default.
            prune_stale_favorites: When ``True`` a successful load drops
                favourite ids that are absent from the new catalog.  By
                default they are kept until the user un-favourites them.
        """
        self._client = client
        self._favorites = favorites if favorites is not None else FavoritesService()
        self._prune = prune_stale_favorites
        self._films: List[Film] = []
        self._state = SessionState.EMPTY
        self._lock = threading.Lock()
        # asyncio.run joins only the default executor, so an abandoned fetch
        # running here does not delay the caller.
        self._executor = ThreadPoolExecutor(max_workers=4,
                                            thread_name_prefix='ghibli_fetch')
        self._log = logging.getLogger('ghibli.session')

    # ------------------------------------------------------------------
    # Catalog
    # ------------------------------------------------------------------

    @property
    def state(self) -> SessionState:
        with self._lock:
            return self._state

    @property
    def films(self) -> List[Film]:
        """The catalog from the last successful load (empty before one)."""
        with self._lock:
            return list(self._films)

    async def load(self, timeout: Optional[float] = None) -> List[Film]:
        """Fetch the catalog and replace the held film list with it.

        Args:
            timeout: Seconds to wait for the whole fetch.  Also used as the
                HTTP timeout.  ``None`` uses the client's own timeout for the
                request and sets no overall deadline.

        Returns:
            The newly held films.

        Raises:
            NetworkError: Transport failure, or *timeout* elapsed.
            DecodeError:  The payload did not match the film schema.

        On failure the held films and favourites are left untouched.
        """
        self._log.debug("Loading catalog")
        try:
            loop = asyncio.get_running_loop()
            fetch = loop.run_in_executor(
                self._executor, functools.partial(self._client.fetch_catalog, timeout=timeout)
            )
            if timeout is None:
                films = await fetch
            else:
                films = await asyncio.wait_for(fetch, timeout=timeout)
        except asyncio.TimeoutError as e:
            self._log.error("Catalog load timed out after %ss", timeout)
            raise NetworkError(f"catalog fetch timed out after {timeout}s") from e
        except CatalogError as e:
            self._log.error("Catalog load failed, keeping previous state: %s", e)
            raise

        with self._lock:
            self._films = list(films)
            self._state = SessionState.LOADED
            if self._prune:
                self._favorites.prune(film.id for film in self._films)
        self._log.info("Catalog loaded with %d films", len(films))
        return list(films)

    def find(self, film_id: str) -> Optional[Film]:
        """Return the first held film with *film_id*, or ``None``."""
        with self._lock:
            return next((f for f in self._films if f.id == film_id), None)

    # ------------------------------------------------------------------
    # Favourites
    # ------------------------------------------------------------------

    def favorites(self) -> List[Film]:
        """Return the held films that are favourites, in catalog order."""
        with self._lock:
            return favorites_of(self._films, self._favorites.snapshot())

    def toggle_favorite(self, film_id: str) -> bool:
        """Toggle *film_id*; returns ``True`` if it is now a favourite."""
        with self._lock:
            return self._favorites.toggle(film_id)

    def is_favorite(self, film_id: str) -> bool:
        with self._lock:
            return self._favorites.is_favorite(film_id)

    def favorite_ids(self) -> List[str]:
        """Return every favourite id, including ids missing from the catalog."""
        with self._lock:
            return self._favorites.get_all()

    def close(self) -> None:
        """Stop the fetch workers and close the client's HTTP resources.

        A fetch still in flight is abandoned, not waited for.
        """
        self._executor.shutdown(wait=False)
        close = getattr(self._client, 'close', None)
        if close is not None:
            close()
