import os
from pathlib import Path
from typing import Optional

import yaml

from githistory_core.errors import InvalidArgument

DEFAULT_CONFIG: dict = {
    "git": "git",
    "timeout": None,  # seconds per git invocation; None = wait indefinitely
    "max_concurrency": 100,  # ceiling on git processes running at once during fan-out
    "candidate_cap": 100,  # tracked files scanned by repository-wide queries
    "commit_limit": 10,
    "change_limit": 5,
    "related_limit": 5,
    "summary_limit": 10,
}

_POSITIVE_INT_KEYS = ("max_concurrency", "candidate_cap", "commit_limit", "change_limit", "related_limit", "summary_limit")


def load_config(config_path: str = ".githistory.yml", cli_overrides: Optional[dict] = None) -> dict:
    """
    Load configuration by merging (in order of precedence):
      1. Built-in defaults
      2. .githistory.yml in the current directory
      3. CLI argument overrides
      4. GITHISTORY_GIT environment variable (git executable)
    """
    config = dict(DEFAULT_CONFIG)

    path = Path(config_path)
    if path.exists():
        with open(path) as f:
            file_config = yaml.safe_load(f) or {}
        config.update(file_config)

    if cli_overrides:
        for key, value in cli_overrides.items():
            if value is not None:
                config[key] = value

    git_executable = os.environ.get("GITHISTORY_GIT")
    if git_executable:
        config["git"] = git_executable

    validate_config(config)
    return config


def validate_config(config: dict) -> None:
    """Reject values that would otherwise be silently coerced into something else."""
    for key in _POSITIVE_INT_KEYS:
        value = config.get(key)
        if isinstance(value, bool) or not isinstance(value, int) or value < 1:
            raise InvalidArgument(f"Config value {key!r} must be a positive integer, got {value!r}")

    timeout = config.get("timeout")
    if timeout is not None and (isinstance(timeout, bool) or not isinstance(timeout, (int, float)) or timeout <= 0):
        raise InvalidArgument(f"Config value 'timeout' must be a positive number or null, got {timeout!r}")

    if not config.get("git"):
        raise InvalidArgument("Config value 'git' must name the git executable.")
