"""
Spotify OAuth 2.0 authentication and token management.

Handles the PKCE authorization-code flow, token refresh and token storage.
"""

import base64
import hashlib
import json
import secrets
import threading
import webbrowser
from datetime import datetime, timedelta
from http.server import BaseHTTPRequestHandler, HTTPServer
from pathlib import Path
from typing import Any, Dict, Optional, Tuple
from urllib.parse import parse_qs, urlencode, urlparse

import requests
from loguru import logger

from camelot_sort.core.output import log

from ...provider import ProviderConfig, ProviderState

AUTHORIZE_URL = "https://accounts.spotify.com/authorize"
TOKEN_URL = "https://accounts.spotify.com/api/token"

# Reading private playlists and rewriting their contents
SPOTIFY_SCOPES = [
    "playlist-read-private",
    "playlist-read-collaborative",
    "playlist-modify-public",
    "playlist-modify-private",
]

CALLBACK_TIMEOUT_SECONDS = 120


def _generate_pkce() -> Dict[str, str]:
    """Generate PKCE code verifier and challenge."""
    code_verifier = (
        base64.urlsafe_b64encode(secrets.token_bytes(32)).decode("utf-8").rstrip("=")
    )
    challenge_bytes = hashlib.sha256(code_verifier.encode("utf-8")).digest()
    code_challenge = (
        base64.urlsafe_b64encode(challenge_bytes).decode("utf-8").rstrip("=")
    )
    return {"code_verifier": code_verifier, "code_challenge": code_challenge}


def build_authorize_url(config: ProviderConfig, code_challenge: str, csrf_state: str) -> str:
    """Authorization URL the user opens in a browser."""
    params = {
        "client_id": config.client_id,
        "response_type": "code",
        "redirect_uri": config.redirect_uri,
        "code_challenge_method": "S256",
        "code_challenge": code_challenge,
        "state": csrf_state,
        "scope": " ".join(SPOTIFY_SCOPES),
    }
    return f"{AUTHORIZE_URL}?{urlencode(params)}"


def parse_callback(url: str) -> Dict[str, Optional[str]]:
    """Extract code, state and error from a redirect URL or path."""
    params = parse_qs(urlparse(url).query)
    return {
        "code": params.get("code", [None])[0],
        "state": params.get("state", [None])[0],
        "error": params.get("error", [None])[0],
    }


def _wait_for_callback(auth_url: str, redirect_uri: str) -> Optional[Dict[str, Optional[str]]]:
    """Run a one-shot local server for the OAuth redirect.

    Falls back to asking the user to paste the redirect URL when the server
    cannot start. Returns None on timeout or cancellation.
    """
    result: Dict[str, Optional[str]] = {}

    class CallbackHandler(BaseHTTPRequestHandler):
        def do_GET(self):
            result.update(parse_callback(self.path))
            self.send_response(200)
            self.send_header("Content-type", "text/html")
            self.end_headers()
            message = (
                "Authorization complete. You can close this window."
                if result.get("code")
                else f"Authorization failed: {result.get('error') or 'unknown error'}"
            )
            self.wfile.write(f"<html><body><h2>{message}</h2></body></html>".encode())

        def log_message(self, format, *args):
            pass  # Suppress server logs

    port = urlparse(redirect_uri).port or 8080
    server = None
    try:
        server = HTTPServer(("localhost", port), CallbackHandler)
        server_thread = threading.Thread(target=server.handle_request, daemon=True)
        server_thread.start()

        logger.debug(f"Authorization URL: {auth_url}")
        if not webbrowser.open(auth_url):
            log(f"Open this URL in your browser:\n{auth_url}", level="info")
        log(
            f"⏳ Waiting for Spotify authorization ({CALLBACK_TIMEOUT_SECONDS}s timeout)...",
            level="info",
        )
        server_thread.join(timeout=CALLBACK_TIMEOUT_SECONDS)

    except OSError as e:
        logger.warning(f"Callback server error: {e}")
        log(f"⚠ Could not start callback server: {e}", level="warning")
        log(f"1. Open this URL in your browser:\n{auth_url}", level="info")
        log("2. Paste the FULL URL you are redirected to", level="info")
        try:
            pasted = input("Redirect URL: ").strip()
        except (EOFError, KeyboardInterrupt):
            return None
        if pasted:
            result.update(parse_callback(pasted))

    finally:
        if server:
            server.server_close()

    return result or None


def _basic_auth_header(config: ProviderConfig) -> Dict[str, str]:
    credentials = base64.b64encode(
        f"{config.client_id}:{config.client_secret}".encode("utf-8")
    ).decode("utf-8")
    return {"Authorization": f"Basic {credentials}"}


def _stamp_expiry(token_data: Dict[str, Any]) -> Dict[str, Any]:
    expires_in = token_data.get("expires_in", 3600)
    token_data["expires_at"] = (datetime.now() + timedelta(seconds=expires_in)).isoformat()
    return token_data


def authenticate(state: ProviderState) -> Tuple[ProviderState, bool]:
    """Authenticate with Spotify using OAuth 2.0 + PKCE.

    Args:
        state: Current provider state

    Returns:
        (new_state, success)
    """
    config = state.config
    if not config.client_id or not config.client_secret:
        log("❌ Spotify credentials not configured", level="error")
        log(
            "Set SPOTIFY_CLIENT_ID and SPOTIFY_CLIENT_SECRET "
            "(https://developer.spotify.com/dashboard)",
            level="info",
        )
        return state, False

    pkce = _generate_pkce()
    csrf_state = secrets.token_urlsafe(32)
    auth_url = build_authorize_url(config, pkce["code_challenge"], csrf_state)

    callback = _wait_for_callback(auth_url, config.redirect_uri)
    if not callback:
        log("❌ Authorization timeout - no response received", level="error")
        return state, False
    if callback.get("error"):
        log(f"❌ Authorization error: {callback['error']}", level="error")
        return state, False
    if not callback.get("code"):
        log("❌ No authorization code received", level="error")
        return state, False
    if callback.get("state") != csrf_state:
        log("❌ CSRF state mismatch - please try again", level="error")
        logger.error(f"CSRF state mismatch: expected {csrf_state}, got {callback.get('state')}")
        return state, False

    try:
        response = requests.post(
            TOKEN_URL,
            data={
                "grant_type": "authorization_code",
                "code": callback["code"],
                "redirect_uri": config.redirect_uri,
                "code_verifier": pkce["code_verifier"],
            },
            headers=_basic_auth_header(config),
            timeout=30,
        )
        response.raise_for_status()
        token_data = _stamp_expiry(response.json())
    except requests.RequestException as e:
        log(f"❌ Token exchange failed: {e}", level="error")
        logger.exception("Token exchange failed")
        return state, False

    _save_user_tokens(token_data)
    logger.info(f"Spotify authentication successful, token expires: {token_data['expires_at']}")
    log("✓ Spotify authentication successful", level="info")
    return state.with_authenticated(True).with_cache(token_data=token_data), True


def _get_tokens_dir() -> Path:
    """Get directory for storing tokens."""
    from camelot_sort.core.config import get_data_dir

    tokens_dir = get_data_dir() / "spotify"
    tokens_dir.mkdir(parents=True, exist_ok=True)
    return tokens_dir


def load_user_tokens() -> Optional[Dict[str, Any]]:
    """Load user OAuth tokens from file."""
    tokens_file = _get_tokens_dir() / "user_tokens.json"
    if not tokens_file.exists():
        return None

    try:
        with open(tokens_file) as f:
            return json.load(f)
    except (OSError, json.JSONDecodeError) as e:
        logger.warning(f"Failed to load Spotify tokens from file: {e}")
        return None


def _save_user_tokens(token_data: Dict[str, Any]) -> None:
    """Save user OAuth tokens to file with secure permissions."""
    tokens_file = _get_tokens_dir() / "user_tokens.json"
    with open(tokens_file, "w") as f:
        json.dump(token_data, f, indent=2)
    tokens_file.chmod(0o600)
    logger.debug(f"Saved Spotify tokens to {tokens_file}")


def is_token_expired(token_data: Dict[str, Any]) -> bool:
    """Check if token is expired (with 5-minute buffer)."""
    if "expires_at" not in token_data:
        return True
    expires_at = datetime.fromisoformat(token_data["expires_at"])
    return datetime.now() >= expires_at - timedelta(minutes=5)


def refresh_token(config: ProviderConfig, token_data: Dict[str, Any]) -> Optional[Dict[str, Any]]:
    """Refresh an expired OAuth token.

    Returns:
        New token data, or None if refresh fails
    """
    refresh_value = token_data.get("refresh_token")
    if not config.client_id or not config.client_secret or not refresh_value:
        logger.warning("Missing credentials or refresh token for Spotify token refresh")
        return None

    try:
        response = requests.post(
            TOKEN_URL,
            data={"grant_type": "refresh_token", "refresh_token": refresh_value},
            headers=_basic_auth_header(config),
            timeout=30,
        )
        response.raise_for_status()
        new_token_data = _stamp_expiry(response.json())
    except requests.RequestException as e:
        logger.warning(f"Failed to refresh Spotify token: {e}")
        return None

    # Spotify may omit the refresh token when it is unchanged
    new_token_data.setdefault("refresh_token", refresh_value)
    _save_user_tokens(new_token_data)
    logger.info(f"Spotify token refreshed, expires: {new_token_data['expires_at']}")
    return new_token_data
