import os
import re
import configparser
from pathlib import Path
from typing import Dict, Any, Optional, List
import logging

logger = logging.getLogger(__name__)

# Define allowed values for configuration options
ALLOWED_LOG_LEVELS = ['DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL']
SINGULARITY_VERSION_RE = re.compile(r'^v\d+(\.\d+)*$')
# configparser strips whitespace and treats these as comment starts
UNSTORABLE_SEPARATOR_CHARS = ('#', ';')

# Keys holding filesystem paths, expanded with ~ on get()
PATH_KEYS = {
    'LOCATOR': ['sample_list', 'search_root', 'output_dir'],
}

CONFIG_PATH_ENV_VAR = 'FQCOLLECT_CONFIG_PATH'


class FqcollectConfig:
    """Centralized configuration manager for fqcollect"""

    DEFAULT_CONFIG = {
        'DEFAULT': {
            'log_level': 'WARNING',
        },
        'LOCATOR': {
            'sample_list': 'samples',
            'search_root': '/space/sequences/Illumina/',
            'output_dir': 'fastq',
            'separator': '_',
            'copy_files': 'True',
        },
        'INSTALLER': {
            'singularity_version': 'v3.9.0',
            'go_version': '1.17.3',
            'singularity_repo': 'https://github.com/sylabs/singularity.git',
            'go_url_template': 'https://golang.org/dl/go{version}.linux-amd64.tar.gz',
        },
    }

    def __init__(self, config_path_override: Optional[str] = None):
        self.config = configparser.ConfigParser(
            defaults=self.DEFAULT_CONFIG['DEFAULT'],
            inline_comment_prefixes=('#', ';'),
            interpolation=None,
            converters={'boolean': self._parse_boolean}
        )
        self.config_path = self._get_config_path(config_path_override)
        self._load_or_create_config()

    @staticmethod
    def _parse_boolean(value: str) -> bool:
        """Boolean converter for configparser. Raises ValueError on anything unrecognised."""
        lowered = str(value).strip().lower()
        if lowered in ('true', 'yes', '1', 'on'):
            return True
        if lowered in ('false', 'no', '0', 'off'):
            return False
        raise ValueError(f"Not a boolean: '{value}'")

    def _get_config_path(self, config_path_override: Optional[str] = None) -> Path:
        """Determines the configuration file path, prioritizing override, then env var, then default."""
        if config_path_override:
            path = Path(config_path_override).expanduser()
            logger.debug(f"Using specified config path: {path}")
            return path
        elif CONFIG_PATH_ENV_VAR in os.environ:
            path = Path(os.environ[CONFIG_PATH_ENV_VAR]).expanduser()
            logger.debug(f"Using config path from {CONFIG_PATH_ENV_VAR}: {path}")
            return path
        else:
            default_path = Path.home() / ".config" / "fqcollect" / "fqcollect.cfg"
            logger.debug(f"Using default config path: {default_path}")
            return default_path

    def _load_or_create_config(self):
        """Loads the config file or creates it with defaults if it doesn't exist."""
        if self.config_path.exists():
            logger.info(f"Loading configuration from: {self.config_path}")
            self.config.read(self.config_path)
            self._ensure_defaults()
        else:
            logger.info(f"Configuration file not found at {self.config_path}. Creating default config.")
            self._create_default_config()
            self.save_config()

    def _ensure_defaults(self):
        """Adds any default sections or keys missing from a loaded file."""
        needs_save = False
        for key, value in self.DEFAULT_CONFIG['DEFAULT'].items():
            if key not in self.config.defaults():
                self.config.defaults()[key] = str(value)
                needs_save = True
                logger.info(f"Added missing default option: [DEFAULT] {key} = {value}")

        for section, defaults in self.DEFAULT_CONFIG.items():
            if section == 'DEFAULT':
                continue
            if not self.config.has_section(section):
                self.config.add_section(section)
                needs_save = True
                logger.info(f"Added missing default section: [{section}]")
            for key, value in defaults.items():
                if not self.config.has_option(section, key):
                    self.config.set(section, key, str(value))
                    needs_save = True
                    logger.info(f"Added missing default key: [{section}] {key} = {value}")

        if needs_save:
            self.save_config()

    def _create_default_config(self):
        """Populates the non-DEFAULT sections with their default settings."""
        for section, defaults in self.DEFAULT_CONFIG.items():
            if section == 'DEFAULT':
                continue
            if not self.config.has_section(section):
                self.config.add_section(section)
            for key, value in defaults.items():
                self.config.set(section, key, str(value))

    def save_config(self):
        """Save the current configuration to file"""
        try:
            self.config_path.parent.mkdir(parents=True, exist_ok=True)
            with open(self.config_path, 'w') as configfile:
                self.config.write(configfile)
            logger.debug(f"Configuration saved to {self.config_path}")
        except OSError as e:
            logger.error(f"Failed to save configuration file {self.config_path}: {e}")

    def get(self, section: str, key: str, default: Any = None) -> Any:
        """Get a configuration value, falling back to [DEFAULT] and then to `default`."""
        if section != 'DEFAULT' and not self.config.has_section(section):
            logger.warning(f"Config section [{section}] not found.")
            return default

        value = self.config.get(section, key, fallback=default)
        if value and isinstance(value, str) and key in PATH_KEYS.get(section, []):
            value = os.path.expanduser(value)

        logger.debug(f"Config get [{section}].{key}: returning '{value}'")
        return value

    def getboolean(self, section: str, key: str, default: bool = False) -> bool:
        """Get a boolean configuration value."""
        return self.config.getboolean(section, key, fallback=default)

    def set(self, section: str, key: str, value: Any):
        """Validate, set and save a configuration value."""
        if section == 'DEFAULT' and key != 'log_level':
            raise ValueError("Cannot set values directly in the 'DEFAULT' section.")

        str_value = str(value)

        validation_error = None
        if key == 'log_level' and str_value.upper() not in ALLOWED_LOG_LEVELS:
            validation_error = f"Invalid log_level '{str_value}'. Allowed: {', '.join(ALLOWED_LOG_LEVELS)}"
        elif section == 'LOCATOR' and key == 'copy_files':
            try:
                self._parse_boolean(str_value)
            except ValueError:
                validation_error = f"Invalid boolean value for copy_files: '{str_value}'. Use true/false, yes/no, 1/0."
        elif section == 'LOCATOR' and key == 'separator':
            if any(char.isspace() or char in UNSTORABLE_SEPARATOR_CHARS for char in str_value):
                validation_error = (f"Invalid separator '{str_value}': whitespace, '#' and ';' cannot be stored "
                                    "in the config file. Pass it with -s instead.")
        elif section == 'INSTALLER' and key == 'singularity_version':
            if not SINGULARITY_VERSION_RE.match(str_value):
                validation_error = f"Invalid singularity_version '{str_value}'. Expected a release tag like v3.9.0"

        if validation_error:
            logger.error(f"Config set validation failed for [{section}].{key}: {validation_error}")
            raise ValueError(validation_error)

        if key == 'log_level':
            str_value = str_value.upper()
        if section == 'DEFAULT':
            self.config.defaults()[key] = str_value
        else:
            if not self.config.has_section(section):
                self.config.add_section(section)
                logger.info(f"Created new config section: [{section}]")
            self.config[section][key] = str_value
        logger.info(f"Config set [{section}].{key} = {str_value}")
        self.save_config()

    def get_section(self, section_name: str) -> Optional[Dict[str, str]]:
        """Returns the options of one section (without inherited DEFAULT keys)."""
        if section_name == 'DEFAULT':
            return dict(self.config.defaults())
        if not self.config.has_section(section_name):
            return None
        defaults = self.config.defaults()
        return {
            key: value for key, value in self.config.items(section_name)
            if key not in defaults
        }

    def get_all_config(self) -> Dict[str, Dict[str, str]]:
        """Returns every section, DEFAULT first."""
        all_config = {'DEFAULT': dict(self.config.defaults())}
        for section in self.config.sections():
            all_config[section] = self.get_section(section)
        return all_config

    def get_available_sections(self) -> List[str]:
        return ['DEFAULT'] + self.config.sections()

    def get_log_level(self) -> str:
        level = str(self.get('DEFAULT', 'log_level', 'WARNING')).upper()
        if level not in ALLOWED_LOG_LEVELS:
            logger.warning(f"Ignoring invalid log_level '{level}' in config, using WARNING")
            return 'WARNING'
        return level

    def get_installer_config(self) -> Dict[str, str]:
        """Settings for the Singularity installer, with the Go download URL resolved."""
        section = 'INSTALLER'
        defaults = self.DEFAULT_CONFIG[section]
        go_version = self.get(section, 'go_version', defaults['go_version'])
        template = self.get(section, 'go_url_template', defaults['go_url_template'])
        return {
            'singularity_version': self.get(section, 'singularity_version', defaults['singularity_version']),
            'go_version': go_version,
            'repo_url': self.get(section, 'singularity_repo', defaults['singularity_repo']),
            'go_url': template.replace('{version}', go_version),
        }


_config: Optional[FqcollectConfig] = None


def get_config() -> FqcollectConfig:
    """Returns the process-wide config, loading it on first use."""
    global _config
    if _config is None:
        _config = FqcollectConfig()
    return _config


def reset_config() -> None:
    """Forget the cached config so the next get_config() re-reads the file."""
    global _config
    _config = None
