"""Configuration handling for gityard"""

import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

from gityard.constants import CONFIG_FILENAME, DEFAULT_BASE_BRANCH, DEFAULT_SCRIPTS
from gityard.exceptions import ConfigError
from gityard.logging_config import get_logger

logger = get_logger(__name__)


def _as_command_list(value: Any, where: str) -> List[str]:
    """Normalize a string or string array into an ordered command list."""
    if isinstance(value, str):
        return [value]
    if isinstance(value, list) and all(isinstance(item, str) for item in value):
        return list(value)
    raise ConfigError(f"Invalid {CONFIG_FILENAME}: '{where}' must be a string or an array of strings")


@dataclass
class HooksConfig:
    """Lifecycle hooks, each entry naming a script (or a raw shell command)."""

    on_create: List[str] = field(default_factory=list)
    on_remove: List[str] = field(default_factory=list)


@dataclass
class ProjectConfig:
    """Per-repository settings loaded from gityard.json."""

    scripts: Dict[str, List[str]] = field(default_factory=dict)
    hooks: HooksConfig = field(default_factory=HooksConfig)
    display_base_path: Optional[str] = None
    base_branch: Optional[str] = None

    def __post_init__(self):
        """Validate configuration after initialization."""
        self._validate_scripts()
        self._validate_display_base_path()
        self._validate_base_branch()

    def _validate_scripts(self):
        """Validate scripts is a mapping of name to command list."""
        if not isinstance(self.scripts, dict):
            raise ConfigError(f"Invalid {CONFIG_FILENAME}: missing or invalid 'scripts' field")
        self.scripts = {
            name: _as_command_list(commands, f"scripts.{name}")
            for name, commands in self.scripts.items()
        }

    def _validate_display_base_path(self):
        if self.display_base_path is not None and not isinstance(self.display_base_path, str):
            raise ConfigError(f"Invalid {CONFIG_FILENAME}: 'displayBasePath' must be a string")

    def _validate_base_branch(self):
        """Validate base_branch is not blank when given."""
        if self.base_branch is None:
            return
        if not isinstance(self.base_branch, str) or not self.base_branch.strip():
            raise ConfigError(f"Invalid {CONFIG_FILENAME}: 'baseBranch' must be a non-empty string")
        self.base_branch = self.base_branch.strip()

    def get_script(self, script_name: str) -> Optional[List[str]]:
        """Get the command list for a script, or None if it is not defined."""
        return self.scripts.get(script_name)

    def to_dict(self) -> dict:
        """Convert config back to the gityard.json document shape."""
        data: Dict[str, Any] = {
            "scripts": {
                name: commands[0] if len(commands) == 1 else list(commands)
                for name, commands in self.scripts.items()
            }
        }
        hooks = {}
        if self.hooks.on_create:
            hooks["onCreate"] = list(self.hooks.on_create)
        if self.hooks.on_remove:
            hooks["onRemove"] = list(self.hooks.on_remove)
        if hooks:
            data["hooks"] = hooks
        if self.display_base_path is not None:
            data["displayBasePath"] = self.display_base_path
        if self.base_branch is not None:
            data["baseBranch"] = self.base_branch
        return data

    @classmethod
    def from_dict(cls, config_dict: Any) -> "ProjectConfig":
        """Create a ProjectConfig from a parsed gityard.json document."""
        if not isinstance(config_dict, dict):
            raise ConfigError(f"Invalid {CONFIG_FILENAME}: expected a JSON object")

        scripts = config_dict.get("scripts")
        if not isinstance(scripts, dict):
            raise ConfigError(f"Invalid {CONFIG_FILENAME}: missing or invalid 'scripts' field")

        hooks_data = config_dict.get("hooks") or {}
        if not isinstance(hooks_data, dict):
            raise ConfigError(f"Invalid {CONFIG_FILENAME}: 'hooks' must be an object")
        hooks = HooksConfig(
            on_create=_as_command_list(hooks_data.get("onCreate", []), "hooks.onCreate"),
            on_remove=_as_command_list(hooks_data.get("onRemove", []), "hooks.onRemove"),
        )

        return cls(
            scripts=scripts,
            hooks=hooks,
            display_base_path=config_dict.get("displayBasePath"),
            base_branch=config_dict.get("baseBranch"),
        )


def get_config_path(directory: Union[str, Path]) -> Path:
    return Path(directory) / CONFIG_FILENAME


def load_config(directory: Union[str, Path]) -> Optional[ProjectConfig]:
    """
    Find and load gityard.json in a directory.

    Args:
        directory: Directory expected to hold gityard.json

    Returns:
        ProjectConfig, or None when the file does not exist

    Raises:
        ConfigError: If the file is not valid JSON or has no valid 'scripts'
    """
    config_path = get_config_path(directory)
    try:
        content = config_path.read_text(encoding="utf-8")
    except FileNotFoundError:
        logger.debug(f"No {CONFIG_FILENAME} in {directory}")
        return None
    except OSError as e:
        raise ConfigError(f"Failed to load {CONFIG_FILENAME}: {e}") from e

    try:
        data = json.loads(content)
    except json.JSONDecodeError as e:
        raise ConfigError(f"Failed to load {CONFIG_FILENAME}: {e}") from e

    config = ProjectConfig.from_dict(data)
    logger.debug(f"Loaded {config_path} with scripts: {', '.join(config.scripts)}")
    return config


def init_config(directory: Union[str, Path]) -> Path:
    """
    Write a gityard.json with the default scripts.

    Raises:
        ConfigError: If gityard.json already exists
    """
    config_path = get_config_path(directory)
    if config_path.exists():
        raise ConfigError(
            f"{CONFIG_FILENAME} already exists. Remove it first if you want to reinitialize."
        )

    default_config = {"scripts": dict(DEFAULT_SCRIPTS)}
    config_path.write_text(json.dumps(default_config, indent=2) + "\n", encoding="utf-8")
    logger.info(f"Created {config_path}")
    return config_path


@dataclass
class Settings:
    """Run-time settings for one gityard invocation, built from CLI arguments."""

    verbose: bool = False
    debug: bool = False
    base_branch: Optional[str] = None

    def __post_init__(self):
        """Validate configuration after initialization."""
        self._validate_base_branch()

    def _validate_base_branch(self):
        """Validate base_branch is not empty."""
        if self.base_branch is None:
            return
        if not self.base_branch.strip():
            raise ValueError("base_branch cannot be empty")
        self.base_branch = self.base_branch.strip()

    def preferred_base_branch(self, project: Optional[ProjectConfig] = None) -> str:
        """Base branch to guard and merge into, by precedence CLI > gityard.json > default."""
        if self.base_branch:
            return self.base_branch
        if project and project.base_branch:
            return project.base_branch
        return DEFAULT_BASE_BRANCH

    def to_dict(self) -> dict:
        return {
            "verbose": self.verbose,
            "debug": self.debug,
            "base_branch": self.base_branch,
        }
