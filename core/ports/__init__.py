"""Port interfaces for adapters."""

from core.ports.command_bus import CommandBus
from core.ports.quote_provider import QuoteProvider
from core.ports.session_store import SessionStore

__all__ = ["CommandBus", "QuoteProvider", "SessionStore"]
