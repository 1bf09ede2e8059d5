"""Client tracker interface.

The middleware should depend on this abstraction (not the concrete
implementation) so the storage backend can be swapped with minimal changes.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass


@dataclass(frozen=True)
class AdmissionResult:
    """Outcome of a single admission decision.

    Attributes:
        allowed: Whether the request may proceed to the downstream handler.
        count: Admitted requests in the client's current window, including
            this one when allowed.
        limit: Max requests per window.
        window_end: UNIX epoch seconds when the client's window expires.
        reset: True when this request opened a new window (first contact or
            first request after expiry).
        retry_after_seconds: Whole seconds until the window expires when
            denied, otherwise None.
    """

    allowed: bool
    count: int
    limit: int
    window_end: float
    reset: bool = False
    retry_after_seconds: int | None = None


class AbstractClientTracker(ABC):
    """Interface for per-client admission control."""

    @abstractmethod
    def consume(self, identity: str) -> AdmissionResult:
        """Decide whether a request from ``identity`` is admitted.

        Args:
            identity: Client identity (typically an IP address). Unknown
                identities are provisioned on first contact.

        Returns:
            AdmissionResult describing the decision.
        """
        raise NotImplementedError

    def admit(self, identity: str) -> bool:
        """Return True when a request from ``identity`` may proceed."""
        return self.consume(identity).allowed
