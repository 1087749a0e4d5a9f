"""Business logic for the user's display settings."""
import logging
import math
from typing import Any, Dict

LANGUAGES = ('English', 'Arabic')
MIN_FONT_SIZE = 12
MAX_FONT_SIZE = 30

_DEFAULTS: Dict[str, Any] = {
    'light_mode': False,
    'language': 'English',
    'font_size': 16,
}


class DisplaySettingsService:
    """Holds the light-mode flag, the selected language and the font size.

    These are plain display values: they do not interact with the catalog
    session and are not persisted.
    """

    def __init__(self, **initial) -> None:
        """
        Args:
            **initial: Optional ``light_mode``, ``language`` and ``font_size``
                overrides, validated like :meth:`update`.
        """
        self._values: Dict[str, Any] = dict(_DEFAULTS)
        self._log = logging.getLogger('ghibli.settings')
        if initial:
            self.update(**initial)

    # ------------------------------------------------------------------
    # Validation
    # ------------------------------------------------------------------

    @staticmethod
    def _validate(key: str, value: Any) -> Any:
        if key == 'light_mode':
            if not isinstance(value, bool):
                raise ValueError(f"light_mode must be a boolean, got {value!r}")
            return value
        if key == 'language':
            if value not in LANGUAGES:
                raise ValueError(
                    f"language must be one of {', '.join(LANGUAGES)}, got {value!r}"
                )
            return value
        if key == 'font_size':
            # The slider moves in whole steps; 16.0 is accepted, 16.5 is not.
            if isinstance(value, bool) or not isinstance(value, (int, float)) \
                    or not math.isfinite(value) or int(value) != value:
                raise ValueError(f"font_size must be a whole number, got {value!r}")
            size = int(value)
            if not MIN_FONT_SIZE <= size <= MAX_FONT_SIZE:
                raise ValueError(
                    f"font_size must be between {MIN_FONT_SIZE} and {MAX_FONT_SIZE}, got {size}"
                )
            return size
        raise ValueError(f"unknown display setting: {key!r}")

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    @property
    def light_mode(self) -> bool:
        return self._values['light_mode']

    @property
    def language(self) -> str:
        return self._values['language']

    @property
    def font_size(self) -> int:
        return self._values['font_size']

    def get_all(self) -> Dict[str, Any]:
        """Return all settings as a ``{key: value}`` dict."""
        return dict(self._values)

    def update(self, **changes) -> None:
        """Apply *changes* after validating every one of them.

        Nothing is changed if any value is invalid.

        Raises:
            ValueError: Unknown key or invalid value.
        """
        validated = {key: self._validate(key, value) for key, value in changes.items()}
        self._values.update(validated)
        if validated:
            self._log.debug("Display settings updated: %s", validated)
