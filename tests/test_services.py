#!/usr/bin/env python3
"""
Unit tests for the app/services layer.

Run with:
    python -m pytest tests/test_services.py
"""
import asyncio
import os
import sys
import threading
import time
import unittest

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from app.errors import DecodeError, NetworkError
from app.models import Film
from app.services import (
    CatalogSession, DisplaySettingsService, FavoritesService, SessionState,
    favorites_of,
)


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def make_film(film_id: str, title: str) -> Film:
    return Film(
        id=film_id, title=title, description='', director='Hayao Miyazaki',
        producer='Toshio Suzuki', running_time='100', release_date='1990',
        image=f'https://example.test/{film_id}.jpg',
    )


FILM_A = make_film('1', 'A')
FILM_B = make_film('2', 'B')
FILM_C = make_film('3', 'C')


class FakeClient:
    """Stands in for CatalogClient; returns or raises the queued results in turn."""

    def __init__(self, *results, delay: float = 0.0):
        self.results = list(results)
        self.delay = delay
        self.calls = []
        self.closed = False

    def fetch_catalog(self, timeout=None):
        self.calls.append(timeout)
        if self.delay:
            time.sleep(self.delay)
        result = self.results.pop(0)
        if isinstance(result, Exception):
            raise result
        return list(result)

    def close(self):
        self.closed = True


def load(session, timeout=None):
    return asyncio.run(session.load(timeout=timeout))


# ===========================================================================
# favorites_of
# ===========================================================================

class TestFavoritesOf(unittest.TestCase):

    def test_keeps_catalog_order(self):
        result = favorites_of([FILM_C, FILM_A, FILM_B], {'2', '3'})
        self.assertEqual(result, [FILM_C, FILM_B])

    def test_ids_missing_from_catalog_ignored(self):
        self.assertEqual(favorites_of([FILM_A], {'1', '99'}), [FILM_A])

    def test_empty_ids(self):
        self.assertEqual(favorites_of([FILM_A, FILM_B], set()), [])

    def test_result_is_subsequence(self):
        catalog = [FILM_A, FILM_B, FILM_C, FILM_A]
        result = favorites_of(catalog, {'1', '3'})
        it = iter(catalog)
        self.assertTrue(all(film in it for film in result))
        self.assertTrue(all(film.id in {'1', '3'} for film in result))


# ===========================================================================
# FavoritesService
# ===========================================================================

class TestFavoritesService(unittest.TestCase):

    def setUp(self):
        self.svc = FavoritesService()

    def test_starts_empty(self):
        self.assertEqual(self.svc.get_all(), [])

    def test_toggle_adds_then_removes(self):
        self.assertTrue(self.svc.toggle('1'))
        self.assertTrue(self.svc.is_favorite('1'))
        self.assertFalse(self.svc.toggle('1'))
        self.assertFalse(self.svc.is_favorite('1'))

    def test_toggle_twice_restores_state(self):
        self.svc.add('5')
        before = self.svc.snapshot()
        for film_id in ('5', '6'):
            self.svc.toggle(film_id)
            self.svc.toggle(film_id)
        self.assertEqual(self.svc.snapshot(), before)

    def test_add_duplicate_returns_false(self):
        self.assertTrue(self.svc.add('1'))
        self.assertFalse(self.svc.add('1'))

    def test_remove_missing_returns_false(self):
        self.assertFalse(self.svc.remove('1'))

    def test_clear(self):
        self.svc.add('1')
        self.svc.add('2')
        self.svc.clear()
        self.assertEqual(self.svc.get_all(), [])

    def test_prune_drops_unknown_ids(self):
        for film_id in ('1', '2', '3'):
            self.svc.add(film_id)
        self.assertEqual(self.svc.prune(['1', '3']), ['2'])
        self.assertEqual(self.svc.get_all(), ['1', '3'])

    def test_snapshot_is_a_copy(self):
        snap = self.svc.snapshot()
        snap.add('x')
        self.assertFalse(self.svc.is_favorite('x'))


# ===========================================================================
# CatalogSession
# ===========================================================================

class TestCatalogSession(unittest.TestCase):

    def test_starts_empty(self):
        session = CatalogSession(FakeClient())
        self.assertEqual(session.state, SessionState.EMPTY)
        self.assertEqual(session.films, [])
        self.assertEqual(session.favorites(), [])

    def test_load_replaces_films(self):
        session = CatalogSession(FakeClient([FILM_A, FILM_B], [FILM_C]))
        self.assertEqual(load(session), [FILM_A, FILM_B])
        self.assertEqual(session.state, SessionState.LOADED)
        load(session)
        self.assertEqual(session.films, [FILM_C])
        self.assertEqual(session.state, SessionState.LOADED)

    def test_toggle_then_favorites(self):
        session = CatalogSession(FakeClient([FILM_A, FILM_B]))
        load(session)
        self.assertTrue(session.toggle_favorite('2'))
        self.assertEqual(session.favorites(), [FILM_B])

    def test_toggle_twice_empties_favorites(self):
        session = CatalogSession(FakeClient([FILM_A, FILM_B]))
        load(session)
        session.toggle_favorite('2')
        session.toggle_favorite('2')
        self.assertEqual(session.favorites(), [])
        self.assertFalse(session.is_favorite('2'))

    def test_favorites_recomputed_after_reload(self):
        session = CatalogSession(FakeClient([FILM_A, FILM_B], [FILM_B, FILM_A]))
        load(session)
        session.toggle_favorite('1')
        session.toggle_favorite('2')
        self.assertEqual(session.favorites(), [FILM_A, FILM_B])
        load(session)
        self.assertEqual(session.favorites(), [FILM_B, FILM_A])

    def test_decode_error_keeps_loaded_state(self):
        session = CatalogSession(FakeClient([FILM_A, FILM_B], DecodeError("missing field 'id'")))
        load(session)
        session.toggle_favorite('1')
        with self.assertLogs('ghibli.session', level='ERROR'):
            with self.assertRaises(DecodeError):
                load(session)
        self.assertEqual(session.state, SessionState.LOADED)
        self.assertEqual(session.films, [FILM_A, FILM_B])
        self.assertEqual(session.favorites(), [FILM_A])

    def test_network_error_keeps_empty_state(self):
        session = CatalogSession(FakeClient(NetworkError('unreachable')))
        session.toggle_favorite('1')
        with self.assertRaises(NetworkError):
            load(session)
        self.assertEqual(session.state, SessionState.EMPTY)
        self.assertEqual(session.films, [])
        self.assertEqual(session.favorite_ids(), ['1'])

    def test_timeout_passed_to_client(self):
        client = FakeClient([FILM_A])
        load(CatalogSession(client), timeout=2.5)
        self.assertEqual(client.calls, [2.5])

    def test_deadline_raises_network_error(self):
        session = CatalogSession(FakeClient([FILM_A], delay=1.5))
        self.addCleanup(session.close)
        started = time.monotonic()
        with self.assertRaises(NetworkError):
            load(session, timeout=0.05)
        # The slow fetch is abandoned instead of being waited for.
        self.assertLess(time.monotonic() - started, 0.75)
        self.assertEqual(session.state, SessionState.EMPTY)

    def test_stale_favorites_kept_by_default(self):
        session = CatalogSession(FakeClient([FILM_A, FILM_B], [FILM_A], [FILM_A, FILM_B]))
        load(session)
        session.toggle_favorite('2')
        load(session)
        self.assertEqual(session.favorites(), [])
        self.assertTrue(session.is_favorite('2'))
        load(session)
        self.assertEqual(session.favorites(), [FILM_B])

    def test_prune_stale_favorites(self):
        session = CatalogSession(FakeClient([FILM_A, FILM_B], [FILM_A]),
                                 prune_stale_favorites=True)
        load(session)
        session.toggle_favorite('1')
        session.toggle_favorite('2')
        load(session)
        self.assertEqual(session.favorite_ids(), ['1'])

    def test_failed_load_does_not_prune(self):
        session = CatalogSession(FakeClient([FILM_A], NetworkError('down')),
                                 prune_stale_favorites=True)
        load(session)
        session.toggle_favorite('9')
        with self.assertRaises(NetworkError):
            load(session)
        self.assertEqual(session.favorite_ids(), ['9'])

    def test_find(self):
        session = CatalogSession(FakeClient([FILM_A, FILM_B]))
        load(session)
        self.assertEqual(session.find('2'), FILM_B)
        self.assertIsNone(session.find('99'))

    def test_films_is_a_copy(self):
        session = CatalogSession(FakeClient([FILM_A]))
        load(session)
        session.films.append(FILM_B)
        self.assertEqual(session.films, [FILM_A])

    def test_shared_favorites_store(self):
        store = FavoritesService()
        session = CatalogSession(FakeClient([FILM_A]), favorites=store)
        session.toggle_favorite('1')
        self.assertTrue(store.is_favorite('1'))

    def test_concurrent_toggles_are_consistent(self):
        session = CatalogSession(FakeClient())
        ids = [str(i) for i in range(50)]

        def worker():
            for film_id in ids:
                session.toggle_favorite(film_id)

        threads = [threading.Thread(target=worker) for _ in range(4)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()
        # An even number of toggles per id leaves the set empty.
        self.assertEqual(session.favorite_ids(), [])

    def test_close_closes_client(self):
        client = FakeClient()
        CatalogSession(client).close()
        self.assertTrue(client.closed)


# ===========================================================================
# DisplaySettingsService
# ===========================================================================

class TestDisplaySettingsService(unittest.TestCase):

    def test_defaults(self):
        svc = DisplaySettingsService()
        self.assertEqual(svc.get_all(),
                         {'light_mode': False, 'language': 'English', 'font_size': 16})

    def test_initial_overrides(self):
        svc = DisplaySettingsService(light_mode=True, language='Arabic', font_size=20)
        self.assertTrue(svc.light_mode)
        self.assertEqual(svc.language, 'Arabic')
        self.assertEqual(svc.font_size, 20)

    def test_font_size_bounds(self):
        svc = DisplaySettingsService()
        svc.update(font_size=12)
        svc.update(font_size=30)
        self.assertEqual(svc.font_size, 30)
        for bad in (11, 31, 16.5, '16', True, float('inf'), float('nan')):
            with self.assertRaises(ValueError):
                svc.update(font_size=bad)

    def test_whole_float_font_size_accepted(self):
        svc = DisplaySettingsService(font_size=18.0)
        self.assertEqual(svc.font_size, 18)
        self.assertIsInstance(svc.font_size, int)

    def test_unknown_language_rejected(self):
        with self.assertRaises(ValueError):
            DisplaySettingsService().update(language='French')

    def test_light_mode_must_be_bool(self):
        with self.assertRaises(ValueError):
            DisplaySettingsService().update(light_mode='yes')

    def test_unknown_key_rejected(self):
        with self.assertRaises(ValueError):
            DisplaySettingsService().update(theme='dark')

    def test_update_is_all_or_nothing(self):
        svc = DisplaySettingsService()
        with self.assertRaises(ValueError):
            svc.update(language='Arabic', font_size=99)
        self.assertEqual(svc.language, 'English')

    def test_get_all_is_a_copy(self):
        svc = DisplaySettingsService()
        svc.get_all()['font_size'] = 99
        self.assertEqual(svc.font_size, 16)


if __name__ == '__main__':
    unittest.main()
