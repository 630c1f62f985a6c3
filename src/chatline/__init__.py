"""
Chatline Backend
GraphQL conversations and participant-filtered real-time events
"""

__version__ = "0.1.0"

from .config import settings

__all__ = ["settings", "__version__"]
