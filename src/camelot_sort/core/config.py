"""
Configuration management for camelot-sort
"""

import os
import tomllib
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional


@dataclass
class SpotifyConfig:
    """Configuration for Spotify provider integration."""

    client_id: str = ""
    client_secret: str = ""
    redirect_uri: str = "http://localhost:8080/callback"
    page_size: int = 100  # Items per playlist page (Spotify max: 100)
    write_chunk_size: int = 100  # URIs per write-back request (Spotify max: 100)


@dataclass
class LookupConfig:
    """Configuration for the external GetSongBPM lookup."""

    enabled: bool = True
    api_key: str = ""
    base_url: str = "https://api.getsong.co/search/"
    timeout_seconds: float = 30.0
    max_workers: int = 1  # Concurrent in-flight lookups (1 = sequential)


@dataclass
class ReferenceConfig:
    """Configuration for the local reference dataset."""

    path: str = "local_db.json"


@dataclass
class LoggingConfig:
    """Configuration for logging."""

    level: str = "INFO"  # DEBUG, INFO, WARNING, ERROR, CRITICAL
    log_file: Optional[str] = (
        None  # Custom log file path (default: ~/.local/share/camelot-sort/camelot-sort.log)
    )
    console_output: bool = True  # Echo user-facing messages to the terminal


@dataclass
class Config:
    """Main configuration object."""

    spotify: SpotifyConfig = field(default_factory=SpotifyConfig)
    lookup: LookupConfig = field(default_factory=LookupConfig)
    reference: ReferenceConfig = field(default_factory=ReferenceConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)

    def validate(self) -> None:
        """Validate values that would otherwise fail deep inside a run.

        Raises:
            ValueError: If configuration values are invalid
        """
        if self.lookup.max_workers < 1:
            raise ValueError(
                f"lookup.max_workers must be >= 1, got {self.lookup.max_workers}"
            )
        for name in ("page_size", "write_chunk_size"):
            value = getattr(self.spotify, name)
            if not 1 <= value <= 100:
                raise ValueError(f"spotify.{name} must be between 1 and 100, got {value}")


def get_config_dir() -> Path:
    """Get the configuration directory path."""
    config_home = os.environ.get("XDG_CONFIG_HOME")
    if config_home:
        return Path(config_home) / "camelot-sort"
    return Path.home() / ".config" / "camelot-sort"


def get_data_dir() -> Path:
    """Get the data directory path."""
    data_home = os.environ.get("XDG_DATA_HOME")
    if data_home:
        return Path(data_home) / "camelot-sort"
    return Path.home() / ".local" / "share" / "camelot-sort"


def _find_project_config() -> Optional[Path]:
    """Find config.toml next to pyproject.toml when running from a checkout."""
    current = Path(__file__).resolve().parent
    for parent in [current] + list(current.parents):
        if (parent / "pyproject.toml").exists():
            config_path = parent / "config.toml"
            return config_path if config_path.exists() else None
    return None


def get_config_path() -> Path:
    """Get the main configuration file path.

    Checks for config.toml in the following order:
    1. Project root (detected via pyproject.toml) - for development
    2. Current working directory
    3. XDG_CONFIG_HOME/camelot-sort (or ~/.config/camelot-sort)
    """
    project_config = _find_project_config()
    if project_config:
        return project_config

    local_config = Path.cwd() / "config.toml"
    if local_config.exists():
        return local_config

    return get_config_dir() / "config.toml"


def create_default_config() -> str:
    """Create a default configuration TOML content."""
    return """
# camelot-sort configuration

[spotify]
# Spotify API credentials (https://developer.spotify.com/dashboard)
# Prefer SPOTIFY_CLIENT_ID / SPOTIFY_CLIENT_SECRET in ~/.config/camelot-sort/.env
# client_id = "your-client-id-here"
# client_secret = "your-client-secret-here"

# OAuth redirect URI (must match your app settings)
redirect_uri = "http://localhost:8080/callback"

# Items per playlist page and per write-back request (max 100)
page_size = 100
write_chunk_size = 100

[lookup]
# Query GetSongBPM for tracks missing from the local dataset
enabled = true

# GetSongBPM API key (or set GETSONGBPM_API_KEY)
# api_key = "your-api-key-here"

# Request timeout in seconds
timeout_seconds = 30

# Concurrent lookups (1 = sequential, friendliest to API quotas)
max_workers = 1

[reference]
# JSON array of {name, artist, bpm, key_camelot, duration_ms?, album?}
path = "local_db.json"

[logging]
# Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
level = "INFO"

# Custom log file path (default: ~/.local/share/camelot-sort/camelot-sort.log)
# log_file = "/path/to/camelot-sort.log"

# Echo progress to the terminal
console_output = true
""".strip()


def _apply_env_overrides(config: Config) -> Config:
    """Environment variables win over TOML values."""
    config.spotify.client_id = os.environ.get(
        "SPOTIFY_CLIENT_ID", config.spotify.client_id
    )
    config.spotify.client_secret = os.environ.get(
        "SPOTIFY_CLIENT_SECRET", config.spotify.client_secret
    )
    config.spotify.redirect_uri = os.environ.get(
        "SPOTIFY_REDIRECT_URI", config.spotify.redirect_uri
    )
    config.lookup.api_key = os.environ.get("GETSONGBPM_API_KEY", config.lookup.api_key)
    config.reference.path = os.environ.get(
        "CAMELOT_SORT_REFERENCE_DB", config.reference.path
    )
    return config


def parse_config(toml_data: dict) -> Config:
    """Build a Config from parsed TOML, falling back to defaults per key."""
    config = Config()

    if "spotify" in toml_data:
        spotify_data = toml_data["spotify"]
        config.spotify = SpotifyConfig(
            client_id=spotify_data.get("client_id", config.spotify.client_id),
            client_secret=spotify_data.get(
                "client_secret", config.spotify.client_secret
            ),
            redirect_uri=spotify_data.get("redirect_uri", config.spotify.redirect_uri),
            page_size=spotify_data.get("page_size", config.spotify.page_size),
            write_chunk_size=spotify_data.get(
                "write_chunk_size", config.spotify.write_chunk_size
            ),
        )

    if "lookup" in toml_data:
        lookup_data = toml_data["lookup"]
        config.lookup = LookupConfig(
            enabled=lookup_data.get("enabled", config.lookup.enabled),
            api_key=lookup_data.get("api_key", config.lookup.api_key),
            base_url=lookup_data.get("base_url", config.lookup.base_url),
            timeout_seconds=float(
                lookup_data.get("timeout_seconds", config.lookup.timeout_seconds)
            ),
            max_workers=lookup_data.get("max_workers", config.lookup.max_workers),
        )

    if "reference" in toml_data:
        reference_data = toml_data["reference"]
        config.reference = ReferenceConfig(
            path=str(
                Path(reference_data.get("path", config.reference.path)).expanduser()
            ),
        )

    if "logging" in toml_data:
        logging_data = toml_data["logging"]
        config.logging = LoggingConfig(
            level=logging_data.get("level", config.logging.level),
            log_file=logging_data.get("log_file"),
            console_output=logging_data.get(
                "console_output", config.logging.console_output
            ),
        )

    return config


def load_config(config_path: Optional[Path] = None) -> Config:
    """Load configuration from file or create default.

    Environment variables override TOML values:
    - SPOTIFY_CLIENT_ID, SPOTIFY_CLIENT_SECRET, SPOTIFY_REDIRECT_URI
    - GETSONGBPM_API_KEY
    - CAMELOT_SORT_REFERENCE_DB

    Raises:
        ValueError: If the file is not valid TOML or holds invalid values
    """
    from dotenv import load_dotenv

    env_path = get_config_dir() / ".env"
    if env_path.exists():
        load_dotenv(env_path)
    local_env = Path.cwd() / ".env"
    if local_env.exists():
        load_dotenv(local_env)

    config_path = config_path or get_config_path()

    if not config_path.exists():
        config_path.parent.mkdir(parents=True, exist_ok=True)
        with open(config_path, "w", encoding="utf-8") as f:
            f.write(create_default_config())
        print(f"Created default configuration at: {config_path}")
        config = Config()
    else:
        try:
            with open(config_path, "rb") as f:
                toml_data = tomllib.load(f)
        except tomllib.TOMLDecodeError as e:
            raise ValueError(f"Invalid configuration file {config_path}: {e}") from e
        config = parse_config(toml_data)

    config = _apply_env_overrides(config)
    config.validate()
    return config
