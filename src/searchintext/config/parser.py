"""
YAML settings parser for searchintext.

This module loads, validates and writes the optional settings file that
supplies defaults for the size ceiling, worker pool and output format.
Values given on the command line always take precedence over the file.
"""

import os
import yaml
from pathlib import Path
from typing import Dict, Any, Optional, List, Union
import logging
from dataclasses import dataclass

from ..models.config import SearchSettings, validate_config_dict


logger = logging.getLogger(__name__)


@dataclass
class ConfigParseResult:
    """
    Result of a settings parsing operation.

    Attributes:
        settings: The parsed and validated settings
        warnings: List of non-fatal warnings
        config_path: Path to the settings file used
        is_default: Whether default settings were used
    """
    settings: SearchSettings
    warnings: List[str]
    config_path: Optional[Path]
    is_default: bool


class ConfigurationError(Exception):
    """Raised when configuration is missing, unreadable or invalid."""
    pass


class ConfigParser:
    """
    YAML settings parser with validation and error handling.

    Looks for a settings file in the working directory and then in the
    user's config directory, falling back to built-in defaults when none
    exists.
    """

    DEFAULT_CONFIG_NAMES = [
        '.searchintext.yaml',
        '.searchintext.yml',
    ]
    USER_CONFIG_NAME = 'config.yaml'

    def __init__(self, strict_mode: bool = False):
        """
        Initialize the settings parser.

        Args:
            strict_mode: If True, treat warnings as errors
        """
        self.strict_mode = strict_mode
        self.logger = logging.getLogger(f"{__name__}.{self.__class__.__name__}")

    def load_config(self, config_path: Optional[Union[str, Path]] = None) -> ConfigParseResult:
        """
        Load and parse settings from file or use defaults.

        Args:
            config_path: Path to settings file. If None, searches default locations.

        Returns:
            ConfigParseResult containing parsed settings and metadata

        Raises:
            ConfigurationError: If settings are invalid or the file cannot be read
        """
        try:
            if config_path:
                config_path = Path(config_path)
                if not config_path.exists():
                    raise ConfigurationError(f"Configuration file not found: {config_path}")

                config_data = self._load_yaml_file(config_path)
                is_default = False
            else:
                config_path, config_data = self._find_and_load_config()
                is_default = config_data is None

                if is_default:
                    config_data = self._get_default_config()

            validated_data = self._validate_config_data(config_data)
            settings = SearchSettings.from_dict(validated_data)

            warnings = settings.validate_configuration()
            warnings.extend(self._get_parser_warnings(settings, is_default))

            if self.strict_mode and warnings:
                raise ConfigurationError(f"Configuration warnings in strict mode: {'; '.join(warnings)}")

            self.logger.debug(f"Configuration loaded from {config_path or 'defaults'}")

            return ConfigParseResult(
                settings=settings,
                warnings=warnings,
                config_path=config_path,
                is_default=is_default
            )

        except Exception as e:
            if isinstance(e, ConfigurationError):
                raise
            raise ConfigurationError(f"Failed to load configuration: {e}") from e

    def _candidate_paths(self) -> List[Path]:
        """Settings files to try, in discovery order."""
        candidates = [Path.cwd() / name for name in self.DEFAULT_CONFIG_NAMES]
        candidates.append(Path.home() / '.config' / 'searchintext' / self.USER_CONFIG_NAME)
        return candidates

    def _find_and_load_config(self) -> tuple[Optional[Path], Optional[Dict[str, Any]]]:
        """
        Find and load a settings file from default locations.

        Returns:
            Tuple of (config_path, config_data) or (None, None) if not found
        """
        for config_file in self._candidate_paths():
            if config_file.exists() and config_file.is_file():
                config_data = self._load_yaml_file(config_file)
                self.logger.debug(f"Found configuration file: {config_file}")
                return config_file, config_data

        self.logger.debug("No configuration file found, using defaults")
        return None, None

    def _load_yaml_file(self, file_path: Path) -> Dict[str, Any]:
        """
        Load and parse a YAML file.

        Args:
            file_path: Path to YAML file

        Returns:
            Parsed YAML data as dictionary

        Raises:
            ConfigurationError: If file cannot be read or parsed
        """
        try:
            with open(file_path, 'r', encoding='utf-8') as f:
                content = f.read()

            if not content.strip():
                self.logger.warning(f"Configuration file is empty: {file_path}")
                return {}

            data = yaml.safe_load(content)

            if data is None:
                return {}

            if not isinstance(data, dict):
                raise ConfigurationError(f"Configuration file must contain a YAML object, got {type(data).__name__}")

            return data

        except yaml.YAMLError as e:
            raise ConfigurationError(f"Invalid YAML syntax in {file_path}: {e}") from e
        except OSError as e:
            raise ConfigurationError(f"Cannot read configuration file {file_path}: {e}") from e

    def _validate_config_data(self, config_data: Dict[str, Any]) -> Dict[str, Any]:
        """
        Validate settings structure.

        Raises:
            ConfigurationError: If an unknown or malformed section is present
        """
        try:
            return validate_config_dict(config_data)
        except ValueError as e:
            raise ConfigurationError(f"Configuration validation failed: {e}") from e

    def _get_default_config(self) -> Dict[str, Any]:
        """Get default settings when no file is found."""
        return SearchSettings().to_dict()

    def _get_parser_warnings(self, settings: SearchSettings, is_default: bool) -> List[str]:
        warnings = []

        if is_default:
            warnings.append("No configuration file found, using default settings")

        cpu_count = os.cpu_count() or 1
        if settings.limits.max_workers > cpu_count * 8:
            warnings.append(
                f"max_workers ({settings.limits.max_workers}) is far above the CPU count ({cpu_count})"
            )

        return warnings

    def save_config(self, settings: SearchSettings, output_path: Union[str, Path]) -> None:
        """
        Save settings to a YAML file.

        Args:
            settings: Settings to save
            output_path: Path where to save the settings

        Raises:
            ConfigurationError: If file cannot be written
        """
        try:
            output_path = Path(output_path)
            output_path.parent.mkdir(parents=True, exist_ok=True)

            yaml_content = self._generate_yaml_with_comments(settings.to_dict())

            with open(output_path, 'w', encoding='utf-8') as f:
                f.write(yaml_content)

            self.logger.info(f"Configuration saved to {output_path}")

        except OSError as e:
            raise ConfigurationError(f"Cannot write configuration file {output_path}: {e}") from e

    def _generate_yaml_with_comments(self, config_dict: Dict[str, Any]) -> str:
        """
        Generate YAML content with section comments.

        Args:
            config_dict: Settings dictionary

        Returns:
            YAML content with comments
        """
        lines = [
            "# searchintext settings",
            "# Values here are defaults; command-line flags override them",
            "",
        ]

        sections = [
            ("limits", "Size ceiling for content search and worker pool sizing"),
            ("output", "Log format (text or json), verbosity and log level"),
        ]

        for section_name, comment in sections:
            if section_name in config_dict:
                section = dict(config_dict[section_name])
                section.pop('max_size_human', None)
                lines.append(f"# {comment}")
                section_yaml = yaml.dump({section_name: section},
                                         default_flow_style=False,
                                         sort_keys=False)
                lines.append(section_yaml.rstrip())
                lines.append("")

        return "\n".join(lines)

    def validate_config_file(self, config_path: Union[str, Path]) -> List[str]:
        """
        Validate a settings file without using it.

        Args:
            config_path: Path to settings file

        Returns:
            List of validation errors (empty if valid)
        """
        try:
            self.load_config(config_path)
            return []
        except ConfigurationError as e:
            return [str(e)]

    def get_config_template(self) -> str:
        """Get a settings template populated with the defaults."""
        return self._generate_yaml_with_comments(SearchSettings().to_dict())


def load_config(config_path: Optional[Union[str, Path]] = None, strict_mode: bool = False) -> ConfigParseResult:
    """
    Convenience function to load settings.

    Args:
        config_path: Path to settings file (optional)
        strict_mode: Whether to treat warnings as errors

    Returns:
        ConfigParseResult containing parsed settings

    Raises:
        ConfigurationError: If settings are invalid
    """
    parser = ConfigParser(strict_mode=strict_mode)
    return parser.load_config(config_path)


def validate_config_file(config_path: Union[str, Path]) -> List[str]:
    """Convenience function to validate a settings file."""
    parser = ConfigParser()
    return parser.validate_config_file(config_path)


def create_config_template(output_path: Union[str, Path]) -> None:
    """
    Create a template settings file.

    Args:
        output_path: Where to save the template

    Raises:
        ConfigurationError: If template cannot be created
    """
    parser = ConfigParser()
    template_content = parser.get_config_template()

    try:
        output_path = Path(output_path)
        output_path.parent.mkdir(parents=True, exist_ok=True)

        with open(output_path, 'w', encoding='utf-8') as f:
            f.write(template_content)

    except OSError as e:
        raise ConfigurationError(f"Cannot create template file {output_path}: {e}") from e
