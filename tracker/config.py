import copy
import os
import yaml
import logging

logger = logging.getLogger(__name__)

# Default configuration matching config.yaml.example
DEFAULT_CONFIG = {
    'database': {
        'url': None,  # None -> sqlite file in the project root
    },
    'api': {
        'prefix': '/projects',
        'detailed_errors': False,
    },
    'pagination': {
        'page_size': 8,
    },
    'projects': {
        'strict_status': False,  # True -> reject statuses outside ProjectStatus
    },
    'cache': {
        'stats_expire': 30,  # seconds
    },
    'logging': {
        'level': 'INFO',
        'format': '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    },
}

PROJECT_ROOT = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))


class Config:
    _instance = None
    _config = {}

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super(Config, cls).__new__(cls)
            cls._instance._load_config()
        return cls._instance

    def _load_config(self, config_path=None):
        """Load configuration from config.yaml or fall back to defaults."""
        self._config = copy.deepcopy(DEFAULT_CONFIG)

        if config_path is None:
            config_path = os.getenv('TRACKER_CONFIG', os.path.join(PROJECT_ROOT, 'config.yaml'))

        if os.path.exists(config_path):
            try:
                with open(config_path, 'r', encoding='utf-8') as f:
                    user_config = yaml.safe_load(f)
                    if user_config:
                        self._merge_config(self._config, user_config)
                logger.info(f"Loaded configuration from {config_path}")
            except (OSError, yaml.YAMLError) as e:
                logger.error(f"Failed to load {config_path}: {e}. Using defaults.")
        else:
            logger.info("config.yaml not found. Using default configuration.")

    def reload(self, config_path=None):
        """Re-read configuration, optionally from another config file."""
        self._load_config(config_path)

    def _merge_config(self, default, user):
        """Recursively merge dictionary user_config into default_config."""
        for key, value in user.items():
            if isinstance(value, dict) and key in default and isinstance(default[key], dict):
                self._merge_config(default[key], value)
            else:
                default[key] = value

    def get(self, section, key=None, default=None):
        """
        Get a configuration value.
        Usage: config.get('pagination', 'page_size') or config.get('api')
        """
        if section not in self._config:
            return default

        if key is None:
            return self._config[section]

        return self._config[section].get(key, default)

    def set(self, section, key, value):
        self._config.setdefault(section, {})[key] = value

# Global accessor
config = Config()
