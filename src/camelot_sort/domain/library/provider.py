"""
Provider state for playlist sources.

Providers are implemented as modules with pure functions, not classes.
All functions take a ProviderState and return a new one alongside their result.
"""

from dataclasses import dataclass, field
from typing import Any, Dict


@dataclass
class ProviderConfig:
    """Base configuration for a provider."""
    name: str  # Provider name, e.g. "spotify"
    client_id: str = ""
    client_secret: str = ""
    redirect_uri: str = "http://localhost:8080/callback"


@dataclass
class ProviderState:
    """Runtime state for a provider.

    Immutable state container passed to all provider functions.
    Functions return new ProviderState instead of mutating.
    """
    config: ProviderConfig
    authenticated: bool = False
    cache: Dict[str, Any] = field(default_factory=dict)  # e.g. token_data

    def with_authenticated(self, authenticated: bool) -> 'ProviderState':
        """Return new state with updated authentication status."""
        return ProviderState(
            config=self.config,
            authenticated=authenticated,
            cache=self.cache
        )

    def with_cache(self, **updates) -> 'ProviderState':
        """Return new state with updated cache entries."""
        return ProviderState(
            config=self.config,
            authenticated=self.authenticated,
            cache={**self.cache, **updates}
        )
