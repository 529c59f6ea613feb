"""
API Layer.

This package handles all communication with the Spotify Web API and the
YouTube Data API.
"""

from .auth import CredentialCache
from .client import SpotifyCatalogClient
from .youtube import YouTubeSearchClient

__all__ = ["CredentialCache", "SpotifyCatalogClient", "YouTubeSearchClient"]
