"""
Configuration loader for the Speaker Network Local Server
Loads and validates configuration from YAML files
"""

import yaml
import logging
from typing import Dict, Any
from pathlib import Path
from datetime import datetime
import pytz

logger = logging.getLogger(__name__)

def load_config(config_path: str = "config/config.yaml") -> Dict[str, Any]:
    """
    Load configuration from YAML file with validation
    """
    try:
        config_file = Path(config_path)
        if not config_file.exists():
            logger.error(f"Configuration file not found: {config_path}")
            raise FileNotFoundError(f"Config file not found: {config_path}")

        with open(config_file, 'r') as f:
            config = yaml.safe_load(f) or {}

        # Validate required sections
        _validate_config(config)

        # Apply defaults
        config = _apply_defaults(config)

        logger.info(f"Configuration loaded from {config_path}")
        return config

    except Exception as e:
        logger.error(f"Failed to load configuration: {e}")
        raise

def _validate_config(config: Dict) -> None:
    """Validate that required configuration sections exist"""
    required_sections = ['network']

    for section in required_sections:
        if section not in config or config[section] is None:
            raise ValueError(f"Missing required configuration section: {section}")

    # Validate network section
    network = config['network']
    for field in ('discovery_timeout', 'request_timeout'):
        if field in network and network[field] <= 0:
            raise ValueError(f"network.{field} must be positive")

    ttl = network.get('multicast_ttl')
    if ttl is not None and not 1 <= ttl <= 255:
        raise ValueError("network.multicast_ttl must be between 1 and 255")

    # Validate cache section if enabled
    cache = config.get('cache') or {}
    if cache.get('enabled', False):
        required_cache_fields = ['host', 'port', 'database', 'username', 'password']
        for field in required_cache_fields:
            if field not in cache:
                raise ValueError(f"Missing required cache field: {field}")

    # Validate logging timezone if present
    log_tz = (config.get('logging') or {}).get('timezone')
    if log_tz and log_tz not in pytz.all_timezones_set:
        raise ValueError(f"Unknown logging.timezone: {log_tz}")

def _apply_defaults(config: Dict) -> Dict:
    """Apply default values to configuration"""

    # Network defaults
    network_defaults = {
        'discovery_timeout': 1,
        'request_timeout': 5,
        'multicast_address': '239.255.255.250',
        'multicast_port': 1900,
        'multicast_ttl': 2,
        'search_target': 'urn:schemas-upnp-org:device:ZonePlayer:1',
        'device_port': 1400,
        'topology_path': '/status/topology',
        'browse_count': 100
    }
    for key, default_value in network_defaults.items():
        if key not in config['network']:
            config['network'][key] = default_value

    # Cache defaults
    if not config.get('cache'):
        config['cache'] = {}
    cache_defaults = {
        'enabled': False,
        'ttl_seconds': 3600
    }
    for key, default_value in cache_defaults.items():
        if key not in config['cache']:
            config['cache'][key] = default_value

    # API defaults
    if not config.get('api'):
        config['api'] = {}
    api_defaults = {
        'host': '0.0.0.0',
        'port': 8000
    }
    for key, default_value in api_defaults.items():
        if key not in config['api']:
            config['api'][key] = default_value

    # Logging defaults
    if not config.get('logging'):
        config['logging'] = {}
    logging_defaults = {
        'level': 'INFO',
        'file': 'logs/speaker_server.log',
        'console_output': True,
        'timezone': 'UTC'
    }
    for key, default_value in logging_defaults.items():
        if key not in config['logging']:
            config['logging'][key] = default_value

    return config


class TimezoneFormatter(logging.Formatter):
    """Formatter that renders timestamps in a configured timezone"""

    def __init__(self, fmt=None, timezone_name: str = 'UTC'):
        super().__init__(fmt)
        self.tz = pytz.timezone(timezone_name)

    def formatTime(self, record, datefmt=None):
        dt = datetime.fromtimestamp(record.created, tz=self.tz)
        if datefmt:
            return dt.strftime(datefmt)
        else:
            # Default format: YYYY-MM-DD HH:MM:SS TZ
            return dt.strftime('%Y-%m-%d %H:%M:%S %Z')

def setup_logging(config: Dict) -> None:
    """Setup logging based on configuration with timezone-aware timestamps"""
    log_config = config.get('logging', {})
    level = log_config.get('level', 'INFO')
    timezone_name = log_config.get('timezone', 'UTC')

    log_format = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    formatter = TimezoneFormatter(log_format, timezone_name)

    logging.basicConfig(
        level=getattr(logging, level.upper()),
        format=log_format,
        handlers=[]
    )

    # Console handler
    if log_config.get('console_output', True):
        console_handler = logging.StreamHandler()
        console_handler.setFormatter(formatter)
        logging.getLogger().addHandler(console_handler)

    # File handler
    log_file = log_config.get('file')
    if log_file:
        log_path = Path(log_file)
        log_path.parent.mkdir(parents=True, exist_ok=True)

        file_handler = logging.FileHandler(log_file)
        file_handler.setFormatter(formatter)
        logging.getLogger().addHandler(file_handler)

    logger.info(f"Logging configured: level={level}, timezone={timezone_name}, "
                f"console={log_config.get('console_output', True)}, file={log_file}")

def get_sample_config() -> Dict:
    """Return a sample configuration for reference"""
    return {
        "network": {
            "discovery_timeout": 1,
            "request_timeout": 5,
            "multicast_address": "239.255.255.250",
            "multicast_port": 1900,
            "multicast_ttl": 2,
            "search_target": "urn:schemas-upnp-org:device:ZonePlayer:1",
            "device_port": 1400,
            "topology_path": "/status/topology",
            "browse_count": 100
        },
        "cache": {
            "enabled": False,
            "host": "localhost",
            "port": 5432,
            "database": "speaker_db",
            "username": "postgres",
            "password": "postgres",
            "ttl_seconds": 3600
        },
        "api": {
            "host": "0.0.0.0",
            "port": 8000
        },
        "logging": {
            "level": "INFO",
            "file": "logs/speaker_server.log",
            "console_output": True,
            "timezone": "UTC"
        }
    }
