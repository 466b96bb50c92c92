"""
Services Module - Black Box Interface

Purpose: Give handlers access to the running instance
Interface: Services (registry, loader, auth, audit, enabled module set)
Hidden: Nothing; this is the composition seam between the server and handlers
"""

from .locator import Services

__all__ = ["Services"]
