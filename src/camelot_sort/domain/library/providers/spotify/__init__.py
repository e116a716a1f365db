"""
Spotify provider for camelot-sort.

Implements OAuth 2.0 + PKCE authentication and playlist read/write access.
"""

from loguru import logger

from ...provider import ProviderConfig, ProviderState

from . import api, auth
from .exceptions import (
    AuthenticationError,
    InvalidPlaylistIdError,
    PlaylistUnavailableError,
    PlaylistWriteError,
    SpotifyError,
)


def init_provider(config: ProviderConfig, interactive: bool = True) -> ProviderState:
    """Initialize Spotify provider from stored tokens, refreshing or re-authorizing as needed.

    Token lookup order:
    1. Stored tokens (~/.local/share/camelot-sort/spotify/user_tokens.json),
       refreshed if expired
    2. Interactive browser authorization (when interactive=True)

    Raises:
        AuthenticationError: If no valid token can be obtained
    """
    state = ProviderState(config=config)

    token_data = auth.load_user_tokens()
    if token_data:
        logger.debug("Found stored Spotify tokens")
        if auth.is_token_expired(token_data):
            logger.info("Spotify token expired, attempting refresh")
            token_data = auth.refresh_token(config, token_data)
        if token_data:
            return state.with_authenticated(True).with_cache(token_data=token_data)
        logger.warning("Stored Spotify token could not be refreshed")

    if not interactive:
        raise AuthenticationError("No valid Spotify token; run interactively to authorize")

    state, success = auth.authenticate(state)
    if not success:
        raise AuthenticationError("Spotify authorization failed")
    return state


__all__ = [
    "api",
    "auth",
    "init_provider",
    "AuthenticationError",
    "InvalidPlaylistIdError",
    "PlaylistUnavailableError",
    "PlaylistWriteError",
    "SpotifyError",
]
