"""
Core application engine for the '!spotify' command.

The `SpotifyCommandHandler` resolves a link into tracks and hands the batch
to the `DispatchScheduler`, which looks each track up one interval apart.
"""
