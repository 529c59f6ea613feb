"""
spotify-queue: queue Spotify playlists, albums, tracks and artists as YouTube videos.
"""

__version__ = "1.0.1"
