import configparser
import logging
import os
from dataclasses import dataclass, fields
from pathlib import Path
from typing import Any, Optional

import yaml
from omegaconf import MISSING, OmegaConf
from omegaconf.errors import MissingMandatoryValue, ValidationError

from cloud_control.constants import (
    AWS_CONFIG_SECTION,
    DEFAULT_AWS_CONFIG_PATH,
    DEFAULT_REPORT_DIR,
    LAUNCH_CONFIG_SECTION,
)
from cloud_control.core.exceptions import ConfigNotFoundError, ConfigParseError

logger = logging.getLogger(__name__)

YAML_SUFFIXES = (".yaml", ".yml")


@dataclass
class AwsConfig:
    """Region and static credentials from the ``[default]`` section."""

    region: str = MISSING
    aws_access_key_id: Optional[str] = None
    aws_secret_access_key: Optional[str] = None


@dataclass
class LaunchConfig:
    """Parameters of a launch request from the ``[instance]`` section."""

    ami_id: str = MISSING
    instance_type: str = MISSING
    count: int = MISSING
    ami_name: str = ""


class ConfigLoader:
    """Load INI/YAML configuration files into typed config objects.

    Every missing or malformed key maps to ``ConfigParseError``; nothing is
    silently defaulted except the optional ``ami_name`` label and the
    credential pair, which may be left to boto3's own resolution.
    """

    def resolve_aws_config_path(self, config_path: str | None = None) -> Path:
        """Resolve the AWS config path.

        Parameters
        ----------
        config_path : str | None
            Explicit path. If None, checks CLOUD_CONTROL_AWS_CONFIG env var,
            then falls back to ~/.aws/config

        Returns
        -------
        Path
            User-expanded config path
        """
        if config_path is None:
            config_path = os.environ.get("CLOUD_CONTROL_AWS_CONFIG", DEFAULT_AWS_CONFIG_PATH)

        return Path(str(config_path)).expanduser()

    def report_dir(self) -> Path:
        """Directory that receives snapshot files."""
        return Path(os.environ.get("CLOUD_CONTROL_REPORT_DIR", DEFAULT_REPORT_DIR)).expanduser()

    def load_aws_config(self, config_path: str | None = None) -> AwsConfig:
        """Load region and credentials from an AWS config file.

        Parameters
        ----------
        config_path : str | None
            Path to the INI file; see resolve_aws_config_path

        Returns
        -------
        AwsConfig
            Validated AWS settings

        Raises
        ------
        ConfigNotFoundError
            If the file does not exist
        ConfigParseError
            If the file is malformed, has no region, or only half a key pair
        """
        path = self.resolve_aws_config_path(config_path)
        section = self._read_ini_section(path, AWS_CONFIG_SECTION)
        config = self._build(AwsConfig, section, path)

        if not config.region:
            raise ConfigParseError(f"Empty 'region' in [{AWS_CONFIG_SECTION}] of {path}")

        has_key_id = bool(config.aws_access_key_id)
        has_secret = bool(config.aws_secret_access_key)
        if has_key_id != has_secret:
            raise ConfigParseError(
                f"{path} must set both aws_access_key_id and aws_secret_access_key, "
                "or neither"
            )

        if not has_key_id:
            logger.debug("No static credentials in %s; using boto3 credential chain", path)

        return config

    def load_launch_config(self, config_path: str) -> LaunchConfig:
        """Load a launch request from an INI or YAML file.

        Parameters
        ----------
        config_path : str
            Path to the launch configuration

        Returns
        -------
        LaunchConfig
            Validated launch parameters

        Raises
        ------
        ConfigNotFoundError
            If the file does not exist
        ConfigParseError
            If the file is malformed, a key is missing, or count is not a
            positive base-10 integer
        """
        path = Path(str(config_path)).expanduser()

        if path.suffix.lower() in YAML_SUFFIXES:
            section = self._read_yaml_section(path, LAUNCH_CONFIG_SECTION)
        else:
            section = self._read_ini_section(path, LAUNCH_CONFIG_SECTION)

        config = self._build(LaunchConfig, section, path)

        for key in ("ami_id", "instance_type"):
            if not getattr(config, key):
                raise ConfigParseError(f"Empty '{key}' in [{LAUNCH_CONFIG_SECTION}] of {path}")

        if config.count < 1:
            raise ConfigParseError(
                f"Invalid 'count' in [{LAUNCH_CONFIG_SECTION}] of {path}: "
                f"{config.count} (must be at least 1)"
            )

        return config

    def _read_ini_section(self, path: Path, section: str) -> dict[str, str]:
        if not path.exists():
            raise ConfigNotFoundError(str(path))

        parser = configparser.ConfigParser(interpolation=None)
        try:
            with open(path, encoding="utf-8") as f:
                parser.read_file(f)
        except configparser.Error as e:
            raise ConfigParseError(f"Invalid INI in {path}: {e}") from e
        except (OSError, UnicodeDecodeError) as e:
            raise ConfigParseError(f"Failed to read config file {path}: {e}") from e

        if not parser.has_section(section):
            raise ConfigParseError(f"Missing [{section}] section in {path}")

        return dict(parser.items(section))

    def _read_yaml_section(self, path: Path, section: str) -> dict[str, Any]:
        if not path.exists():
            raise ConfigNotFoundError(str(path))

        try:
            cfg = OmegaConf.load(path)
        except yaml.YAMLError as e:
            raise ConfigParseError(f"Invalid YAML in {path}: {e}") from e
        except OSError as e:
            raise ConfigParseError(f"Failed to read config file {path}: {e}") from e

        if not OmegaConf.is_dict(cfg) or section not in cfg:
            raise ConfigParseError(f"Missing '{section}' mapping in {path}")

        values = OmegaConf.to_container(cfg[section], resolve=True)
        if not isinstance(values, dict):
            raise ConfigParseError(f"'{section}' in {path} must be a mapping")

        return {str(key): value for key, value in values.items()}

    def _build(self, schema: type, values: dict[str, Any], path: Path) -> Any:
        known = {field.name for field in fields(schema)}
        unknown = sorted(set(values) - known)
        if unknown:
            logger.debug("Ignoring unrecognized keys in %s: %s", path, ", ".join(unknown))

        try:
            merged = OmegaConf.merge(
                OmegaConf.structured(schema),
                {key: value for key, value in values.items() if key in known},
            )
            return OmegaConf.to_object(merged)
        except MissingMandatoryValue as e:
            raise ConfigParseError(f"Missing key '{e.full_key}' in {path}") from e
        except ValidationError as e:
            raise ConfigParseError(
                f"Invalid value for '{e.full_key}' in {path}: {e.msg or e}"
            ) from e
