"""Rate limiting adapters.

The HTTP layer depends on ``AbstractClientTracker`` only, so the per-process
in-memory tracker can later be replaced by a shared store without touching
the middleware.
"""

from gateway.adapters.rate_limit.base import AbstractClientTracker, AdmissionResult
from gateway.adapters.rate_limit.in_memory import ClientTracker

__all__ = ["AbstractClientTracker", "AdmissionResult", "ClientTracker"]
