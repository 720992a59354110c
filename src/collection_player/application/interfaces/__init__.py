"""
Application Interfaces (Ports)

Abstract interfaces that define contracts between the application
layer and infrastructure adapters. These are the "ports" in
hexagonal architecture.
"""

from collection_player.application.interfaces.media_backend import MediaBackend

__all__ = [
    "MediaBackend",
]
