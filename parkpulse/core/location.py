"""
Location provider - supplies the current position and authorization state.

The store never reads this directly; callers look up the position at call
time and pass it to the ranking queries.
"""

import threading
from enum import Enum
from typing import Optional

from .config import FORCE_DEFAULT_LOCATION, get_default_position
from .schema import Position
from ..util.logging import logger


class AuthorizationStatus(str, Enum):
    NOT_DETERMINED = "not_determined"
    DENIED = "denied"
    AUTHORIZED_WHEN_IN_USE = "authorized_when_in_use"
    AUTHORIZED_ALWAYS = "authorized_always"


_AUTHORIZED = {AuthorizationStatus.AUTHORIZED_WHEN_IN_USE, AuthorizationStatus.AUTHORIZED_ALWAYS}


class LocationProvider:
    """
    Thread-safe holder of the user's current position.

    While force_default is on, device updates are ignored and the default
    position is kept; explicit overrides (set_custom_location) still apply.
    """

    def __init__(self, default_position: Optional[Position] = None, force_default: Optional[bool] = None):
        self._lock = threading.Lock()
        self.default_position = default_position or Position(*get_default_position())
        self.force_default = FORCE_DEFAULT_LOCATION if force_default is None else force_default
        self._position = self.default_position
        self._status = AuthorizationStatus.NOT_DETERMINED

    @property
    def authorization_status(self) -> AuthorizationStatus:
        with self._lock:
            return self._status

    @property
    def is_authorized(self) -> bool:
        return self.authorization_status in _AUTHORIZED

    def set_authorization(self, status: AuthorizationStatus) -> None:
        status = AuthorizationStatus(status)
        with self._lock:
            self._status = status
        logger.info(f"Location authorization status changed: {status.value}")

    def current_position(self) -> Position:
        with self._lock:
            return self._position

    def update_location(self, position: Position) -> bool:
        """Accept a device location update. Returns False when it was ignored."""
        if self.force_default:
            logger.debug("Ignoring device location update; default location is forced")
            return False
        with self._lock:
            self._position = position
        return True

    def set_custom_location(self, latitude: float, longitude: float) -> Position:
        position = Position(latitude, longitude)
        with self._lock:
            self._position = position
        logger.info(f"Location set to {latitude}, {longitude}")
        return position

    def reset_to_default_location(self) -> Position:
        with self._lock:
            self._position = self.default_position
        return self.default_position
