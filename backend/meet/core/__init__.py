"""Core utilities for security, JaaS tokens and time handling."""

from . import jitsi, security, time

__all__ = ["jitsi", "security", "time"]
