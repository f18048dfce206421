"""Configuration management for arcgate."""
import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Mapping, Optional

logger = logging.getLogger(__name__)

ENV_PREFIX = "ARCGATE_"
DEFAULT_CONFIG_DIR = Path.home() / ".config" / "arcgate"


def _env_flag(env: Mapping[str, str], name: str, default: bool = False) -> bool:
    return env.get(ENV_PREFIX + name, "true" if default else "false").lower() == "true"


@dataclass
class ArcgateConfig:
    """Where repositories live and how archive operations behave."""
    config_dir: Path = field(default_factory=lambda: DEFAULT_CONFIG_DIR)
    transient_namespace: str = "tmp"
    overwrite_existing: bool = False

    def __post_init__(self):
        self.config_dir = Path(self.config_dir).expanduser()
        if not self.transient_namespace:
            raise ValueError("Transient namespace is required")

    @property
    def locations_file(self) -> Path:
        return self.config_dir / "locations.json"

    @property
    def principals_file(self) -> Path:
        return self.config_dir / "principals.json"

    @property
    def ownership_file(self) -> Path:
        return self.config_dir / "ownership.json"

    @classmethod
    def from_env(cls, env: Optional[Mapping[str, str]] = None, config_dir: Optional[Path] = None) -> "ArcgateConfig":
        """Load settings from ``ARCGATE_*`` environment variables.

        An explicit ``config_dir`` wins over ``ARCGATE_CONFIG_DIR``.
        """
        env = os.environ if env is None else env
        directory = config_dir or env.get(ENV_PREFIX + "CONFIG_DIR") or DEFAULT_CONFIG_DIR
        config = cls(
            config_dir=Path(directory),
            transient_namespace=env.get(ENV_PREFIX + "TRANSIENT_NAMESPACE", "tmp"),
            overwrite_existing=_env_flag(env, "OVERWRITE_EXISTING"),
        )
        logger.debug(f"Configuration loaded from {config.config_dir}")
        return config
