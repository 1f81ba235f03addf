"""Configuration management for the mirror backup application."""

from .settings import LoggingOptions, MirrorConfig, SyncJobConfig, SyncOptions

__all__ = ["MirrorConfig", "SyncJobConfig", "SyncOptions", "LoggingOptions"]
