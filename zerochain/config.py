"""
Zerochain Client Configuration
"""

from __future__ import annotations
import json
import logging
from dataclasses import dataclass, field, asdict
from pathlib import Path
from typing import List, Optional

from zerochain.constants import DEFAULT_NODE_URL, DEFAULT_RPC_TIMEOUT_SEC

logger = logging.getLogger(__name__)

DEFAULT_PROVING_KEY_PATH = "zeroc/proving.params"
DEFAULT_VERIFYING_KEY_PATH = "zeroc/verification.params"


@dataclass
class NodeConfig:
    """Ledger node endpoint."""
    url: str = DEFAULT_NODE_URL
    timeout: float = DEFAULT_RPC_TIMEOUT_SEC


@dataclass
class ParamsConfig:
    """Proof parameter locations."""
    proving_key_path: str = DEFAULT_PROVING_KEY_PATH
    verifying_key_path: str = DEFAULT_VERIFYING_KEY_PATH


@dataclass
class LogConfig:
    """Logging configuration."""
    level: str = "INFO"
    file: Optional[str] = None
    format: str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    max_size_mb: int = 10
    backup_count: int = 3


@dataclass
class ClientConfig:
    """
    Complete client configuration.

    All settings for running the zeroc wallet.
    """
    node: NodeConfig = field(default_factory=NodeConfig)
    params: ParamsConfig = field(default_factory=ParamsConfig)
    log: LogConfig = field(default_factory=LogConfig)

    @property
    def proving_key_path(self) -> Path:
        return Path(self.params.proving_key_path)

    @property
    def verifying_key_path(self) -> Path:
        return Path(self.params.verifying_key_path)

    def validate(self) -> List[str]:
        """
        Validate configuration.

        Returns:
            List of validation errors (empty if valid)
        """
        errors = []

        if not self.node.url.startswith(("http://", "https://")):
            errors.append(f"Node URL must be http(s): {self.node.url}")

        if self.node.timeout <= 0:
            errors.append("timeout must be positive")

        if not self.params.proving_key_path:
            errors.append("proving_key_path cannot be empty")

        if not self.params.verifying_key_path:
            errors.append("verifying_key_path cannot be empty")

        if not isinstance(logging.getLevelName(self.log.level.upper()), int):
            errors.append(f"Unknown log level: {self.log.level}")

        return errors

    def save(self, path: str) -> None:
        """Save configuration to file."""
        with open(path, 'w') as f:
            json.dump(self.to_dict(), f, indent=2)

        logger.info(f"Configuration saved to {path}")

    @classmethod
    def load(cls, path: str) -> "ClientConfig":
        """Load configuration from file."""
        with open(path, 'r') as f:
            data = json.load(f)

        config = cls()

        if "node" in data:
            config.node = NodeConfig(**data["node"])

        if "params" in data:
            config.params = ParamsConfig(**data["params"])

        if "log" in data:
            config.log = LogConfig(**data["log"])

        logger.info(f"Configuration loaded from {path}")
        return config

    def to_dict(self) -> dict:
        """Export configuration as dictionary."""
        return {
            "node": asdict(self.node),
            "params": asdict(self.params),
            "log": asdict(self.log),
        }


def setup_logging(config: LogConfig) -> None:
    """Configure logging based on config."""
    level = getattr(logging, config.level.upper(), logging.INFO)

    handlers = [logging.StreamHandler()]

    if config.file:
        from logging.handlers import RotatingFileHandler
        file_handler = RotatingFileHandler(
            config.file,
            maxBytes=config.max_size_mb * 1024 * 1024,
            backupCount=config.backup_count,
        )
        handlers.append(file_handler)

    logging.basicConfig(
        level=level,
        format=config.format,
        handlers=handlers,
    )
