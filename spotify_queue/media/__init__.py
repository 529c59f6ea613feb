"""
Media Layer.

This package contains the queue sinks that receive resolved YouTube URLs.
"""

from .queue import ConsoleQueueSink, FanOutQueueSink, M3UQueueSink, QueueSink

__all__ = ["ConsoleQueueSink", "FanOutQueueSink", "M3UQueueSink", "QueueSink"]
