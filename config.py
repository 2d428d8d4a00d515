#!/usr/bin/env python3
"""
NodeForge Configuration Manager
Loads static panel configuration from the environment file
"""

import os
from typing import Dict, Optional


# Application version for cache busting
APP_VERSION = "1.2.0"


class PanelConfig:
    """Configuration manager for the panel"""

    def __init__(self, env_file: str = "nodeforge_env.env", overrides: Optional[Dict[str, str]] = None):
        # Look for environment file in the same directory as this script
        script_dir = os.path.dirname(os.path.abspath(__file__))
        self.env_file = os.path.join(script_dir, env_file)

        if os.path.exists(self.env_file):
            print(f"✅ Found environment file: {self.env_file}")
        else:
            print(f"⚠️  Environment file not found: {self.env_file}")
            print(f"   Please create {env_file} in the project root directory")

        self.env_config = self.load_env_config()
        if overrides:
            self.env_config.update({k: str(v) for k, v in overrides.items()})
        print(f"📋 Loaded environment configuration: {list(self.env_config.keys())}")

    def load_env_config(self) -> Dict[str, str]:
        """Load configuration from environment file (read-only)"""
        config = {}
        if self.env_file and os.path.exists(self.env_file):
            try:
                with open(self.env_file, 'r') as f:
                    for line in f:
                        line = line.strip()
                        if line and not line.startswith('#') and '=' in line:
                            key, value = line.split('=', 1)
                            config[key.strip()] = value.strip().strip('"').strip("'")
            except OSError as e:
                print(f"❌ Error loading env file: {e}")
        return config

    def get(self, key: str, default: str = "") -> str:
        """Get configuration value"""
        value = self.env_config.get(key, default)
        if not value:
            print(f"⚠️  Configuration key '{key}' not found, using default: '{default}'")
        return value

    def get_int(self, key: str, default: int = 0) -> int:
        try:
            return int(self.env_config.get(key, default))
        except (TypeError, ValueError):
            print(f"⚠️  Configuration key '{key}' is not an integer, using default: {default}")
            return default

    def get_float(self, key: str, default: float = 0.0) -> float:
        try:
            return float(self.env_config.get(key, default))
        except (TypeError, ValueError):
            print(f"⚠️  Configuration key '{key}' is not a number, using default: {default}")
            return default

    def get_bool(self, key: str, default: bool = False) -> bool:
        value = self.env_config.get(key)
        if value is None:
            return default
        return str(value).lower() in ('1', 'true', 'yes', 'on')
