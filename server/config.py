"""
Centralized configuration for the Blackjack table server.

Configuration is loaded from (in order of precedence):
1. Environment variables
2. .env file (if exists)
3. Default values

Usage:
    from config import config
    print(config.PORT)
    print(config.timing.NEXT_ROUND_DELAY)
"""

import os
from dataclasses import dataclass, field
from pathlib import Path

from dotenv import load_dotenv

# Load .env file if it exists
env_path = Path(__file__).parent.parent / ".env"
if env_path.exists():
    load_dotenv(env_path)


def get_env(key: str, default: str = "") -> str:
    """Get environment variable with default."""
    return os.environ.get(key, default)


def get_env_bool(key: str, default: bool = False) -> bool:
    """Get boolean environment variable."""
    val = os.environ.get(key, "").lower()
    if val in ("true", "1", "yes", "on"):
        return True
    if val in ("false", "0", "no", "off"):
        return False
    return default


def get_env_int(key: str, default: int = 0) -> int:
    """Get integer environment variable."""
    try:
        return int(os.environ.get(key, str(default)))
    except ValueError:
        return default


def get_env_float(key: str, default: float = 0.0) -> float:
    """Get float environment variable."""
    try:
        return float(os.environ.get(key, str(default)))
    except ValueError:
        return default


@dataclass
class TableTiming:
    """
    Presentation pacing for a table's round loop, in seconds.

    Every pause is a plain asyncio.sleep inside the table's own task, so a
    long pause at one table never holds up another.
    """
    JOIN_GRACE_DELAY: float = 1.0    # Before the first deal, lets near-simultaneous joiners sit
    DEAL_DELAY: float = 0.6          # After the dealer's opening cards
    TURN_DELAY: float = 0.4          # After players receive their cards
    REVEAL_DELAY: float = 0.8        # After the hole card is revealed
    DEALER_DRAW_DELAY: float = 0.5   # After each dealer draw
    RESULT_DELAY: float = 0.6        # After results are sent
    REPLAY_DELAY: float = 0.2        # After each replay answer
    NEXT_ROUND_DELAY: float = 1.5    # Between rounds

    @classmethod
    def instant(cls) -> "TableTiming":
        """No pauses at all (tests, simulations)."""
        return cls(0, 0, 0, 0, 0, 0, 0, 0)


@dataclass
class ServerConfig:
    """Server configuration."""
    HOST: str = "0.0.0.0"
    PORT: int = 8000
    DEBUG: bool = False
    LOG_LEVEL: str = "INFO"
    ENVIRONMENT: str = "development"

    # Table settings
    MAX_PLAYERS_PER_TABLE: int = 5
    TABLE_CODE_LENGTH: int = 6
    RESPONSE_TIMEOUT: float = 30.0

    timing: TableTiming = field(default_factory=TableTiming)

    @classmethod
    def from_env(cls) -> "ServerConfig":
        """Load configuration from environment variables."""
        return cls(
            HOST=get_env("HOST", "0.0.0.0"),
            PORT=get_env_int("PORT", 8000),
            DEBUG=get_env_bool("DEBUG", False),
            LOG_LEVEL=get_env("LOG_LEVEL", "INFO"),
            ENVIRONMENT=get_env("ENVIRONMENT", "development"),
            MAX_PLAYERS_PER_TABLE=get_env_int("MAX_PLAYERS_PER_TABLE", 5),
            TABLE_CODE_LENGTH=get_env_int("TABLE_CODE_LENGTH", 6),
            RESPONSE_TIMEOUT=get_env_float("RESPONSE_TIMEOUT", 30.0),
            timing=TableTiming(
                JOIN_GRACE_DELAY=get_env_float("JOIN_GRACE_DELAY", 1.0),
                DEAL_DELAY=get_env_float("DEAL_DELAY", 0.6),
                TURN_DELAY=get_env_float("TURN_DELAY", 0.4),
                REVEAL_DELAY=get_env_float("REVEAL_DELAY", 0.8),
                DEALER_DRAW_DELAY=get_env_float("DEALER_DRAW_DELAY", 0.5),
                RESULT_DELAY=get_env_float("RESULT_DELAY", 0.6),
                REPLAY_DELAY=get_env_float("REPLAY_DELAY", 0.2),
                NEXT_ROUND_DELAY=get_env_float("NEXT_ROUND_DELAY", 1.5),
            ),
        )


# Global config instance - loaded once at module import
config = ServerConfig.from_env()


def reload_config() -> ServerConfig:
    """Reload configuration from environment (useful for testing)."""
    global config
    config = ServerConfig.from_env()
    return config
