"""
Configuration schema for tops-decoder.

Supports:
- YAML file loading
- Environment variable substitution (${VAR_NAME})
- Validation with error messages

Example config (tops.yml):
    version: 1

    decoder:
      symbol_type: interned
      on_error: skip
      chunk_size: 65536

    logging:
      level: ${TOPS_LOG_LEVEL}
"""

import logging
import os
import re
from pathlib import Path
from dataclasses import dataclass, field, asdict
from typing import Optional, List, Any, Callable

import yaml

from ..core.errors import ConfigError
from ..decoder.stream import ON_ERROR_CHOICES
from ..formats.symbols import SYMBOL_FACTORIES, get_symbol_factory


LOG_LEVELS = ('DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL')


def _substitute_env_vars(value: Any) -> Any:
    """
    Substitute ${VAR_NAME} with environment variable values.

    Example:
        ${TOPS_LOG_LEVEL} → os.environ.get('TOPS_LOG_LEVEL')
    """
    if isinstance(value, str):
        pattern = r'\$\{([^}]+)\}'

        def replace(match):
            var_name = match.group(1)
            env_value = os.environ.get(var_name)
            if env_value is None:
                return match.group(0)  # Leave unresolved if not set
            return env_value

        return re.sub(pattern, replace, value)

    elif isinstance(value, dict):
        return {k: _substitute_env_vars(v) for k, v in value.items()}

    elif isinstance(value, list):
        return [_substitute_env_vars(v) for v in value]

    return value


@dataclass
class DecoderConfig:
    """Decoder settings."""
    symbol_type: str = 'str'
    on_error: str = 'raise'
    chunk_size: int = 64 * 1024

    def symbol_factory(self) -> Callable[[str], object]:
        return get_symbol_factory(self.symbol_type)


@dataclass
class LoggingConfig:
    """Logging settings."""
    level: str = 'INFO'
    format: str = '%(asctime)s %(levelname)s %(name)s: %(message)s'

    def apply(self) -> None:
        """Configure the root logger."""
        logging.basicConfig(level=self.level.upper(), format=self.format, force=True)


@dataclass
class TopsConfig:
    """Root configuration."""

    version: int = 1
    decoder: DecoderConfig = field(default_factory=DecoderConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)

    @classmethod
    def load(cls, path: Path) -> 'TopsConfig':
        """
        Load from YAML file with env var substitution.

        Raises:
            FileNotFoundError: If the file doesn't exist
            ConfigError: The file is not valid YAML or not a mapping
        """
        path = Path(path)

        if not path.exists():
            raise FileNotFoundError(f"Config not found: {path}")

        try:
            with open(path) as f:
                data = yaml.safe_load(f) or {}
        except yaml.YAMLError as e:
            raise ConfigError([f"{path}: invalid YAML: {e}"]) from e

        if not isinstance(data, dict):
            raise ConfigError([f"{path}: expected a mapping, got {type(data).__name__}"])

        data = _substitute_env_vars(data)
        return cls.from_dict(data)

    @classmethod
    def from_dict(cls, data: dict) -> 'TopsConfig':
        """Create from dictionary."""
        try:
            return cls(
                version=data.get('version', 1),
                decoder=DecoderConfig(**(data.get('decoder') or {})),
                logging=LoggingConfig(**(data.get('logging') or {})),
            )
        except TypeError as e:
            raise ConfigError([str(e)]) from e

    def to_dict(self) -> dict:
        """Convert to dictionary."""
        return asdict(self)

    def to_yaml(self) -> str:
        """Convert to YAML string."""
        return yaml.dump(self.to_dict(), default_flow_style=False, sort_keys=False)

    def validate(self) -> List[str]:
        """Validate config. Returns list of errors (empty if valid)."""
        errors = []

        if self.version != 1:
            errors.append(f"Unsupported config version: {self.version}")

        if self.decoder.symbol_type not in SYMBOL_FACTORIES:
            errors.append(
                f"Invalid symbol_type: {self.decoder.symbol_type!r} "
                f"(expected one of {', '.join(sorted(SYMBOL_FACTORIES))})"
            )

        if self.decoder.on_error not in ON_ERROR_CHOICES:
            errors.append(
                f"Invalid on_error: {self.decoder.on_error!r} "
                f"(expected one of {', '.join(ON_ERROR_CHOICES)})"
            )

        if not isinstance(self.decoder.chunk_size, int) or self.decoder.chunk_size <= 0:
            errors.append(f"Invalid chunk_size: {self.decoder.chunk_size}")

        if str(self.logging.level).upper() not in LOG_LEVELS:
            errors.append(f"Invalid logging level: {self.logging.level}")

        return errors

    def check(self) -> 'TopsConfig':
        """Raise ConfigError if validation fails, else return self."""
        errors = self.validate()
        if errors:
            raise ConfigError(errors)
        return self


def load_config(path: Optional[Path] = None) -> TopsConfig:
    """Load config from file or return defaults."""
    if path and Path(path).exists():
        return TopsConfig.load(path)

    search_paths = [
        Path('./tops.yml'),
        Path('./tops.yaml'),
        Path.home() / '.tops' / 'config.yml',
    ]

    for p in search_paths:
        if p.exists():
            return TopsConfig.load(p)

    return TopsConfig()


def generate_default_config() -> str:
    """Generate default config as YAML."""
    return """# tops-decoder configuration
version: 1

decoder:
  symbol_type: str      # str | interned | bytes
  on_error: raise       # raise | skip
  chunk_size: 65536

logging:
  level: INFO
"""
