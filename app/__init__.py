"""
Ghibli film catalog application package.

Layered the same way throughout:

  app/models.py    : the immutable ``Film`` record and its wire decoding.
  app/errors.py    : the error taxonomy raised by the catalog layer.
  app/services/    : business logic for favorites, the catalog session and
                     the display settings.

``ghibli.py`` is the integration point: it builds a ``CatalogClient``
(``catalog_client.py``), hands it to a ``CatalogSession`` and renders the
session's films and favorites in the terminal.
"""
