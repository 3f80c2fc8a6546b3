from abc import ABC, abstractmethod


class SessionTerminator(ABC):
    """Contract for invalidating a user's authenticated sessions."""

    @abstractmethod
    def terminate(self, user_id: int) -> None:
        """Invalidate every session of *user_id*.

        Raises:
            Exception: implementation-specific; the purge records it as a warning.
        """
