"""Error types shared by the registry implementations."""

from typing import Optional


class BackendError(Exception):
    """Transport failure talking to the remote CCTV backend."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code

    @property
    def is_client_error(self) -> bool:
        """4xx responses are rejected commands, not outages."""
        return self.status_code is not None and 400 <= self.status_code < 500


class StaleDataWarning(UserWarning):
    """Emitted when a registry returns cached data or skips a command."""
