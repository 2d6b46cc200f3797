"""Recall API collaborator."""

from signalengine.client.recall import RecallApiError, RecallClient

__all__ = [
    "RecallApiError",
    "RecallClient",
]
