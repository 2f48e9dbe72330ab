"""HTTP surface and server lifecycle."""

from .app import create_app
from .lifecycle import ServerController, ServerState

__all__ = ["ServerController", "ServerState", "create_app"]
