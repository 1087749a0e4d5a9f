"""Services package: expose all concrete services from one import."""
from .favorites_service import FavoritesService, favorites_of
from .catalog_session import CatalogSession, SessionState
from .display_settings_service import DisplaySettingsService

__all__ = [
    'FavoritesService',
    'favorites_of',
    'CatalogSession',
    'SessionState',
    'DisplaySettingsService',
]
