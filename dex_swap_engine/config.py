"""
Configuration management for the swap engine

Loads settings from environment variables and .env file.
Includes logging configuration with file output and correlation ID support.
"""

import os
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional, List

from dotenv import load_dotenv


def _load_env_file():
    """Load .env file from project root"""
    current = Path(__file__).parent.parent  # dex_swap_engine package parent
    env_file = current / ".env"

    if env_file.exists():
        load_dotenv(env_file)


# Load .env on module import
_load_env_file()


def _get_env(key: str, default: Optional[str] = "") -> Optional[str]:
    """Get environment variable with default"""
    value = os.getenv(key)
    if value is None:
        return default
    return value


def _get_env_float(key: str, default: float) -> float:
    """Get environment variable as float"""
    value = os.getenv(key)
    if value is None:
        return default
    try:
        return float(value)
    except ValueError:
        logging.getLogger(__name__).warning(
            f"Invalid float value for {key}='{value}', using default={default}"
        )
        return default


def _get_env_int(key: str, default: int) -> int:
    """Get environment variable as int"""
    value = os.getenv(key)
    if value is None:
        return default
    try:
        return int(value)
    except ValueError:
        logging.getLogger(__name__).warning(
            f"Invalid int value for {key}='{value}', using default={default}"
        )
        return default


def _get_env_bool(key: str, default: bool) -> bool:
    """Get environment variable as bool"""
    value = os.getenv(key)
    if value is None:
        return default
    return value.lower() in ("true", "1", "yes", "on")


def _get_env_list(key: str, default: str) -> List[str]:
    """Get comma separated environment variable as a list of lowercase names"""
    value = _get_env(key, default) or ""
    return [item.strip().lower() for item in value.split(",") if item.strip()]


DEFAULT_USER_AGENT = "Mozilla/5.0"


@dataclass
class RpcConfig:
    """RPC client configuration"""
    url: str = field(default_factory=lambda: _get_env("SOLANA_RPC_URL", "https://api.mainnet-beta.solana.com"))
    timeout_seconds: float = field(default_factory=lambda: _get_env_float("RPC_TIMEOUT_SECONDS", 30.0))
    max_retries: int = field(default_factory=lambda: _get_env_int("RPC_MAX_RETRIES", 3))
    retry_delay_seconds: float = field(default_factory=lambda: _get_env_float("RPC_RETRY_DELAY", 1.0))
    commitment: str = field(default_factory=lambda: _get_env("RPC_COMMITMENT", "confirmed"))


@dataclass
class ProviderConfig:
    """
    Per-provider HTTP configuration

    Every provider client is constructed with one of these instead of
    reading module-level endpoint constants.
    """
    base_url: str = ""
    slippage_bps: int = 50
    user_agent: str = DEFAULT_USER_AGENT
    timeout: float = 30.0
    api_key: Optional[str] = None

    def __post_init__(self):
        self.base_url = (self.base_url or "").rstrip("/")


@dataclass
class JupiterConfig(ProviderConfig):
    """Jupiter aggregator API configuration"""
    base_url: str = field(default_factory=lambda: _get_env("JUPITER_BASE_URL", "https://api.jup.ag/swap/v1"))
    slippage_bps: int = field(default_factory=lambda: _get_env_int("JUPITER_SLIPPAGE_BPS", 50))
    user_agent: str = field(default_factory=lambda: _get_env("JUPITER_USER_AGENT", DEFAULT_USER_AGENT))
    timeout: float = field(default_factory=lambda: _get_env_float("JUPITER_TIMEOUT", 30.0))
    api_key: Optional[str] = field(default_factory=lambda: _get_env("JUPITER_API_KEY", None))


@dataclass
class RaydiumConfig(ProviderConfig):
    """Raydium trade API configuration"""
    base_url: str = field(default_factory=lambda: _get_env(
        "RAYDIUM_BASE_URL", _get_env("RAYDIUM_API_URL", "https://transaction-v1.raydium.io")
    ))
    slippage_bps: int = field(default_factory=lambda: _get_env_int("RAYDIUM_SLIPPAGE_BPS", 100))
    user_agent: str = field(default_factory=lambda: _get_env("RAYDIUM_USER_AGENT", DEFAULT_USER_AGENT))
    timeout: float = field(default_factory=lambda: _get_env_float("RAYDIUM_TIMEOUT", 30.0))
    api_key: Optional[str] = None
    tx_version: str = field(default_factory=lambda: _get_env("RAYDIUM_TX_VERSION", "V0"))
    # Priority fee passed to the transaction builder; 0 disables it
    compute_unit_price: int = field(default_factory=lambda: _get_env_int("RAYDIUM_COMPUTE_UNIT_PRICE", 0))


@dataclass
class TxConfig:
    """Transaction execution configuration"""
    confirm_interval: float = field(default_factory=lambda: _get_env_float("TX_CONFIRM_INTERVAL", 10.0))
    confirm_max_attempts: int = field(default_factory=lambda: _get_env_int("TX_CONFIRM_MAX_ATTEMPTS", 6))
    # Pause between dependent transactions of one set
    settle_delay: float = field(default_factory=lambda: _get_env_float("TX_SETTLE_DELAY", 5.0))
    send_max_retries: int = field(default_factory=lambda: _get_env_int("TX_SEND_MAX_RETRIES", 2))
    skip_preflight: bool = field(default_factory=lambda: _get_env_bool("TX_SKIP_PREFLIGHT", True))
    # Associated account creation waits for this commitment
    account_commitment: str = field(default_factory=lambda: _get_env("TX_ACCOUNT_COMMITMENT", "finalized"))
    account_confirm_timeout: float = field(default_factory=lambda: _get_env_float("TX_ACCOUNT_CONFIRM_TIMEOUT", 60.0))


@dataclass
class SwapConfig:
    """Swap orchestration parameters"""
    # Registration order is the tie-break order
    providers: List[str] = field(default_factory=lambda: _get_env_list("SWAP_PROVIDERS", "jupiter,raydium"))
    ensure_output_account: bool = field(default_factory=lambda: _get_env_bool("SWAP_ENSURE_OUTPUT_ACCOUNT", False))


def _get_default_log_path() -> str:
    """Get default log file path under dex_swap_engine/log/ with UTC timestamp"""
    from datetime import datetime, timezone
    timestamp = datetime.now(timezone.utc).strftime("%Y%m%d_%H%M%S")
    log_dir = Path(__file__).parent / "log"
    return str(log_dir / f"swap_engine_{timestamp}.log")


@dataclass
class LoggingConfig:
    """
    Logging configuration with file output and correlation ID support.

    Environment variables:
        LOG_FILE: Path to log file (empty disables file output)
        LOG_LEVEL: DEBUG, INFO, WARNING, ERROR, CRITICAL (default: INFO)
        LOG_FORMAT: Custom log format string
        LOG_CONSOLE: Enable console output (default: true)
        LOG_MAX_BYTES: Max log file size before rotation (default: 10MB)
        LOG_BACKUP_COUNT: Number of backup files to keep (default: 5)
    """
    log_file: str = field(default_factory=lambda: _get_env("LOG_FILE", _get_default_log_path()))
    log_level: str = field(default_factory=lambda: _get_env("LOG_LEVEL", "INFO"))
    log_format: str = field(default_factory=lambda: _get_env(
        "LOG_FORMAT",
        "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    ))
    console_output: bool = field(default_factory=lambda: _get_env_bool("LOG_CONSOLE", True))
    max_bytes: int = field(default_factory=lambda: _get_env_int("LOG_MAX_BYTES", 10 * 1024 * 1024))  # 10MB
    backup_count: int = field(default_factory=lambda: _get_env_int("LOG_BACKUP_COUNT", 5))

    @property
    def level(self) -> int:
        """Get numeric log level"""
        return getattr(logging, self.log_level.upper(), logging.INFO)


@dataclass
class Config:
    """
    Main configuration container

    Usage:
        from dex_swap_engine.config import config

        print(config.rpc.url)
        print(config.jupiter.base_url)
    """
    rpc: RpcConfig = field(default_factory=RpcConfig)
    jupiter: JupiterConfig = field(default_factory=JupiterConfig)
    raydium: RaydiumConfig = field(default_factory=RaydiumConfig)
    tx: TxConfig = field(default_factory=TxConfig)
    swap: SwapConfig = field(default_factory=SwapConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)

    @classmethod
    def reload(cls) -> "Config":
        """Reload configuration from environment"""
        _load_env_file()
        return cls()


# Global config instance
config = Config()


def get_config() -> Config:
    """Get global configuration instance"""
    return config


def reload_config() -> Config:
    """Reload and return new configuration"""
    global config
    config = Config.reload()
    return config


def setup_logging(
    log_config: Optional[LoggingConfig] = None,
    logger_name: str = "dex_swap_engine",
) -> logging.Logger:
    """
    Set up logging based on configuration.

    Creates handlers for file and/or console output with rotation.
    The log file directory is created automatically if it doesn't exist.

    Args:
        log_config: Logging configuration (uses global config if None)
        logger_name: Name of the logger to configure

    Returns:
        Configured logger instance
    """
    if log_config is None:
        log_config = config.logging

    logger = logging.getLogger(logger_name)
    logger.setLevel(log_config.level)

    # Close before removing to release file handles on reload
    for handler in logger.handlers[:]:
        handler.close()
        logger.removeHandler(handler)

    formatter = logging.Formatter(log_config.log_format)

    handlers: List[logging.Handler] = []

    if log_config.log_file:
        from logging.handlers import RotatingFileHandler

        log_path = Path(log_config.log_file)
        log_path.parent.mkdir(parents=True, exist_ok=True)

        file_handler = RotatingFileHandler(
            log_config.log_file,
            maxBytes=log_config.max_bytes,
            backupCount=log_config.backup_count,
            encoding='utf-8',
        )
        file_handler.setLevel(log_config.level)
        file_handler.setFormatter(formatter)
        handlers.append(file_handler)

    if log_config.console_output:
        console_handler = logging.StreamHandler()
        console_handler.setLevel(log_config.level)
        console_handler.setFormatter(formatter)
        handlers.append(console_handler)

    for handler in handlers:
        logger.addHandler(handler)

    # Child loggers inherit handlers from the parent
    for name in [
        f"{logger_name}.infra",
        f"{logger_name}.modules",
        f"{logger_name}.protocols",
    ]:
        logging.getLogger(name).setLevel(log_config.level)

    if log_config.log_file:
        logger.info(f"Logging initialized: file={log_config.log_file}, level={log_config.log_level}")

    return logger


def enable_file_logging(
    log_file: Optional[str] = None,
    level: str = "INFO",
    console: bool = True,
) -> logging.Logger:
    """
    Quick setup for file logging.

    Example:
        from dex_swap_engine.config import enable_file_logging

        logger = enable_file_logging(level="DEBUG")
    """
    if log_file is None:
        log_file = config.logging.log_file

    log_config = LoggingConfig(
        log_file=log_file,
        log_level=level,
        console_output=console,
    )
    return setup_logging(log_config)
