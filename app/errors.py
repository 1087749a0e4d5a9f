"""Errors raised while fetching and decoding the film catalog."""


class CatalogError(Exception):
    """Base class for every catalog failure surfaced to callers."""


class NetworkError(CatalogError):
    """Raised when the catalog endpoint cannot be reached or answers non-2xx."""


class DecodeError(CatalogError):
    """Raised when the catalog payload does not match the expected schema."""
