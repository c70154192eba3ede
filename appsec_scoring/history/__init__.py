"""Score history package — append-only audit trail of computed scores."""

from .store import ScoreHistory

__all__ = ["ScoreHistory"]
