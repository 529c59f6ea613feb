"""
Data Models Layer.

This package contains the configuration model and the value types that flow
through the resolve, lookup and dispatch stages.
"""

from .config import QueueConfig
from .dispatch import DispatchItem, ItemState
from .track import (
    DEFAULT_PACING_INTERVAL,
    AccessToken,
    DispatchBatch,
    ResourceKind,
    SpotifyLink,
    TrackDescriptor,
)

__all__ = [
    "DEFAULT_PACING_INTERVAL",
    "AccessToken",
    "DispatchBatch",
    "DispatchItem",
    "ItemState",
    "QueueConfig",
    "ResourceKind",
    "SpotifyLink",
    "TrackDescriptor",
]
