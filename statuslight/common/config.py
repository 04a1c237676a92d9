import copy
import json
import logging
from pathlib import Path
from typing import Any, Dict, Optional
from typing_extensions import TypedDict

from statuslight.common.enums import Channel

logger = logging.getLogger(__name__)


class LedPathConfig(TypedDict):
    """Type definition for the per-channel brightness files."""

    red: str
    green: str
    blue: str


class ConfigData(TypedDict):
    """Type definition for the complete configuration structure."""

    led_paths: LedPathConfig
    grace_period_ms: int
    enabled_on_start: bool
    default_effect: Optional[str]


class ConfigManager:
    """Handles configuration loading and saving."""

    DEFAULT_CONFIG: ConfigData = {
        "led_paths": {
            "red": "/sys/class/leds/sc27xx:red/brightness",
            "green": "/sys/class/leds/sc27xx:green/brightness",
            "blue": "/sys/class/leds/sc27xx:blue/brightness",
        },
        "grace_period_ms": 50,
        "enabled_on_start": True,
        "default_effect": None,
    }

    def __init__(self, config_file: Optional[Path] = None):
        self.config_file = config_file or Path("config.json")
        self.data = self._load_or_create_config()

    def _load_or_create_config(self) -> ConfigData:
        """Load config from file or create default if it doesn't exist."""
        if self.config_file.exists():
            try:
                with open(self.config_file, "r", encoding="utf-8") as f:
                    config_data = json.load(f)
                    logger.info(f"Loaded config from {self.config_file}")

                    # Merge with defaults to ensure all keys exist
                    merged_config = self._deep_merge_config(
                        self.DEFAULT_CONFIG, config_data
                    )

                    # Save back to file if new keys were added
                    if merged_config != config_data:
                        self._save_config(merged_config)
                        logger.info("Updated config file with missing default values")

                    return merged_config

            except (json.JSONDecodeError, IOError) as e:
                logger.error(f"Error loading config from {self.config_file}: {e}")
                logger.info("Creating new config file with defaults")

        # Create default config file
        self._save_config(self.DEFAULT_CONFIG)
        logger.info(f"Created default config file at {self.config_file}")
        return self._deep_merge_config(self.DEFAULT_CONFIG, {})

    def _save_config(self, config_data: ConfigData) -> None:
        """Save config data to file."""
        try:
            with open(self.config_file, "w", encoding="utf-8") as f:
                json.dump(config_data, f, indent=4, sort_keys=True)
        except IOError as e:
            logger.error(f"Error saving config to {self.config_file}: {e}")

    def _deep_merge_config(self, default_config: Any, user_config: Any) -> Any:
        """Deep merge user config with defaults, ensuring all default keys exist."""
        merged = copy.deepcopy(default_config)

        for key, value in user_config.items():
            if (
                key in merged
                and isinstance(merged[key], dict)
                and isinstance(value, dict)
            ):
                merged[key] = self._deep_merge_config(merged[key], value)
            else:
                merged[key] = value
        return merged

    def reload_config(self) -> None:
        """Reload configuration from file."""
        self.data = self._load_or_create_config()

    def save(self) -> None:
        """Save current configuration to file."""
        self._save_config(self.data)
        logger.info(f"Saved configuration to {self.config_file}")

    def get_led_paths(self) -> Dict[Channel, Path]:
        """Brightness file for each channel."""
        paths = self.data["led_paths"]
        return {channel: Path(paths[channel.value]) for channel in Channel}

    def set_led_path(self, channel: Channel, path: str) -> None:
        """Point one channel at a different brightness file and save."""
        self.data["led_paths"][Channel(channel).value] = str(path)
        self.save()
        logger.info(f"Saved LED path for {Channel(channel).value}: {path}")

    @property
    def grace_period(self) -> float:
        """Preemption grace window in seconds."""
        return max(0, self.data.get("grace_period_ms", 50)) / 1000.0

    @property
    def enabled_on_start(self) -> bool:
        return bool(self.data.get("enabled_on_start", True))

    def set_enabled_on_start(self, enabled: bool) -> None:
        """Set the initial master enable and save to config."""
        self.data["enabled_on_start"] = enabled
        self.save()
        logger.info(f"LED output {'enabled' if enabled else 'disabled'} on start")

    @property
    def default_effect(self) -> Optional[str]:
        return self.data.get("default_effect")


# Global config manager instance
_config_manager: Optional[ConfigManager] = None


def get_config() -> ConfigManager:
    """Get the global config manager instance."""
    global _config_manager
    if _config_manager is None:
        _config_manager = ConfigManager()
    return _config_manager


def set_config(config: Optional[ConfigManager]) -> None:
    """Replace the global config manager (``None`` resets it)."""
    global _config_manager
    _config_manager = config
