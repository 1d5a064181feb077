"""
Catalog search configuration.

Contains SearchConfig class and the built-in defaults it merges over.
"""

import os
import json

_CONFIG_PATH = os.environ.get(
    'SEARCH_CONFIG',
    os.path.join(os.path.dirname(os.path.dirname(os.path.abspath(__file__))), 'search_config.json')
)

DEFAULTS = {
    'search': {
        'radius': {'default_km': 20, 'max_km': 1000, 'degrees_per_km': 0.009},
        'pagination': {'default_count': 100, 'max_count': 1000},
        'tags': {'separator': ','},
        'string_aggregation': True,
    },
    'performance': {'mmap_size_mb': 256, 'cache_size_mb': 64},
    'logging': {'level': 'INFO'},
}


class SearchConfig:
    """Loads search configuration from a JSON file, merged over DEFAULTS.

    A missing file yields the defaults. Keys present in the file win.
    """

    def __init__(self, config_path=None, overrides=None):
        self.config_path = config_path or _CONFIG_PATH
        self.config = self._merge_configs(DEFAULTS, self._load_config())
        if overrides:
            self.config = self._merge_configs(self.config, overrides)

    def _load_config(self):
        """Load config from file.

        Raises:
            ValueError: If the file exists but is not a JSON object
        """
        if not os.path.exists(self.config_path):
            return {}

        try:
            with open(self.config_path, 'r') as f:
                config = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            raise ValueError(f"Could not load config from {self.config_path}: {e}")

        if not isinstance(config, dict):
            raise ValueError(f"Config file {self.config_path} must contain a JSON object")
        return config

    def _merge_configs(self, base, override):
        """Deep merge override into base config."""
        result = base.copy()
        for key, value in override.items():
            if key in result and isinstance(result[key], dict) and isinstance(value, dict):
                result[key] = self._merge_configs(result[key], value)
            else:
                result[key] = value
        return result

    @property
    def search(self):
        return self.config['search']

    @property
    def default_radius_km(self):
        return self.search['radius']['default_km']

    @property
    def max_radius_km(self):
        return self.search['radius']['max_km']

    @property
    def degrees_per_km(self):
        return self.search['radius']['degrees_per_km']

    @property
    def default_count(self):
        return self.search['pagination']['default_count']

    @property
    def max_count(self):
        return self.search['pagination']['max_count']

    @property
    def tag_separator(self):
        return self.search['tags']['separator']

    @property
    def string_aggregation(self):
        return bool(self.search['string_aggregation'])

    @property
    def performance(self):
        return self.config['performance']

    @property
    def log_level(self):
        return str(self.config['logging']['level']).upper()
