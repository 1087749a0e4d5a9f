"""Business logic for the favourites set."""
import logging
from typing import Iterable, List, Set

from ..models import Film


def favorites_of(catalog: Iterable[Film], ids: Set[str]) -> List[Film]:
    """Return the films of *catalog* whose id is in *ids*, in catalog order."""
    return [film for film in catalog if film.id in ids]


class FavoritesService:
    """Keeps the set of favourite film ids in memory.

    Nothing is persisted: the set starts empty and lives as long as the
    owning session.  Membership is independent of the catalog, so an id may
    outlive the film it refers to (see :meth:`prune`).
    """

    def __init__(self) -> None:
        self._ids: Set[str] = set()
        self._log = logging.getLogger('ghibli.favorites')

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def toggle(self, film_id: str) -> bool:
        """Add *film_id* if absent, remove it if present.

        Returns:
            ``True`` if *film_id* is a favourite after the call.
        """
        if film_id in self._ids:
            self._ids.remove(film_id)
            self._log.debug("Removed %s from favourites", film_id)
            return False
        self._ids.add(film_id)
        self._log.debug("Added %s to favourites", film_id)
        return True

    def add(self, film_id: str) -> bool:
        """Add *film_id* to favourites.

        Returns:
            ``True`` if added; ``False`` if already in the set.
        """
        if film_id in self._ids:
            return False
        self._ids.add(film_id)
        return True

    def remove(self, film_id: str) -> bool:
        """Remove *film_id* from favourites.

        Returns:
            ``True`` if removed; ``False`` if not found.
        """
        if film_id not in self._ids:
            return False
        self._ids.remove(film_id)
        return True

    def is_favorite(self, film_id: str) -> bool:
        """Return ``True`` if *film_id* is in the favourites set."""
        return film_id in self._ids

    def clear(self) -> None:
        self._ids.clear()

    def prune(self, valid_ids: Iterable[str]) -> List[str]:
        """Drop every favourite not listed in *valid_ids*.

        Returns:
            The dropped ids, sorted.
        """
        stale = sorted(self._ids.difference(valid_ids))
        if stale:
            self._ids.difference_update(stale)
            self._log.info("Pruned %d stale favourite(s): %s", len(stale), ', '.join(stale))
        return stale

    def get_all(self) -> List[str]:
        """Return the favourite ids, sorted."""
        return sorted(self._ids)

    def snapshot(self) -> Set[str]:
        """Return a copy of the id set for filtering."""
        return set(self._ids)
