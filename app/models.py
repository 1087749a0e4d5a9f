"""The ``Film`` record and its mapping to and from the catalog wire format."""
from dataclasses import dataclass, fields
from typing import Any, Dict
from urllib.parse import urlparse

from .errors import DecodeError

# Field names match the keys of the catalog feed (``running_time`` and
# ``release_date`` included), so no renaming happens in either direction.


def _is_absolute_url(value: str) -> bool:
    parsed = urlparse(value)
    return bool(parsed.scheme and parsed.netloc)


@dataclass(frozen=True)
class Film:
    """One film of the catalog.

    Every field is text, exactly as the feed delivers it: ``running_time``
    is a number of minutes and ``release_date`` a year, both encoded as
    strings.  ``image`` is the absolute URL of the cover art.
    """

    id: str
    title: str
    description: str
    director: str
    producer: str
    running_time: str
    release_date: str
    image: str

    @classmethod
    def from_dict(cls, raw: Dict[str, Any]) -> 'Film':
        """Decode one catalog object.

        Keys the record does not know about are ignored.

        Raises:
            DecodeError: *raw* is not an object, a field is missing or not a
                string, ``id`` is empty, or ``image`` is not an absolute URL.
        """
        if not isinstance(raw, dict):
            raise DecodeError(f"expected a JSON object, got {type(raw).__name__}")

        values: Dict[str, str] = {}
        for key in (field.name for field in fields(cls)):
            if key not in raw:
                raise DecodeError(f"missing field '{key}'")
            value = raw[key]
            if not isinstance(value, str):
                raise DecodeError(
                    f"field '{key}' must be a string, got {type(value).__name__}"
                )
            values[key] = value

        if not values['id']:
            raise DecodeError("field 'id' must not be empty")
        if not _is_absolute_url(values['image']):
            raise DecodeError(f"field 'image' is not an absolute URL: {values['image']!r}")
        return cls(**values)

    def to_dict(self) -> Dict[str, str]:
        """Encode back to the wire shape accepted by :meth:`from_dict`."""
        return {field.name: getattr(self, field.name) for field in fields(self)}
