"""
Configuration management for wcagscan.

Supports multiple configuration sources in order of priority:
1. Environment variables (highest priority)
2. Project .env file (.wcagscan/.env)
3. Global config file (~/.wcagscan/config.yml)
4. Default values (lowest priority)
"""

from .env_loader import (
    find_project_dir,
    get_global_config_dir,
    get_project_env_path,
    is_global_config_dir,
    load_env_file,
    load_global_config,
    load_project_config,
)
from .getters import (
    get_chrome_path,
    get_config,
    get_max_concurrent,
    get_rule_sources,
    get_timeout,
    get_wait_time,
    is_debug_mode,
    is_verbose,
)

__all__ = [
    # env_loader
    "find_project_dir",
    "get_global_config_dir",
    "get_project_env_path",
    "is_global_config_dir",
    "load_env_file",
    "load_global_config",
    "load_project_config",
    # getters
    "get_chrome_path",
    "get_config",
    "get_max_concurrent",
    "get_rule_sources",
    "get_timeout",
    "get_wait_time",
    "is_debug_mode",
    "is_verbose",
]
