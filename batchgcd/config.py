import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Optional

import yaml

from batchgcd.errors import ConfigError

logger = logging.getLogger(__name__)

# =============================================================================
# Konstanten

# ab so vielen Elementen wird im Produktbaum geforkt
PRODUCT_FORK_THRESHOLD = 64
# ab dieser Bitlänge des Modulus wird im Restbaum geforkt
REMAINDER_FORK_BITS = 65536
# Faktoren unterhalb dieser Grenze werden per Probedivision zerlegt (Integer.MAX_VALUE)
SMALL_FACTOR_LIMIT = 2 ** 31 - 1

# =============================================================================
# Konfigurationsklassen


@dataclass
class ProductTreeConfig:
    fork_threshold: int = PRODUCT_FORK_THRESHOLD


@dataclass
class RemainderTreeConfig:
    fork_bits: int = REMAINDER_FORK_BITS


@dataclass
class RefinerConfig:
    small_factor_limit: int = SMALL_FACTOR_LIMIT


@dataclass
class LoggingConfig:
    level: str = "INFO"

    def numeric_level(self) -> int:
        """Übersetzt den Levelnamen in den numerischen logging-Wert."""
        level = logging.getLevelName(str(self.level).upper())
        if not isinstance(level, int):
            raise ConfigError(f"Unknown log level: {self.level}")
        return level


@dataclass
class BatchGCDConfig:
    """Gesamte Konfiguration, wird einmal geladen und danach nur gelesen."""
    workers: Optional[int] = None
    product_tree: ProductTreeConfig = field(default_factory=ProductTreeConfig)
    remainder_tree: RemainderTreeConfig = field(default_factory=RemainderTreeConfig)
    refiner: RefinerConfig = field(default_factory=RefinerConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)

    def worker_count(self) -> int:
        """Anzahl Threads im Pool, Standard ist die Anzahl CPU-Kerne."""
        if self.workers is None:
            return os.cpu_count() or 1
        return self.workers

    def validate(self) -> 'BatchGCDConfig':
        """Prüft, dass alle Schwellwerte positiv sind."""
        checks = {
            "workers": self.workers if self.workers is not None else 1,
            "product_tree.fork_threshold": self.product_tree.fork_threshold,
            "remainder_tree.fork_bits": self.remainder_tree.fork_bits,
            "refiner.small_factor_limit": self.refiner.small_factor_limit,
        }
        for name, value in checks.items():
            if not isinstance(value, int) or isinstance(value, bool) or value < 1:
                raise ConfigError(f"{name} must be a positive integer, got {value!r}")
        self.logging.numeric_level()
        return self

# =============================================================================
# Laden


def deep_merge(base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
    """Mischt override rekursiv in eine Kopie von base."""
    result = dict(base)
    for key, value in override.items():
        if isinstance(value, dict) and isinstance(result.get(key), dict):
            result[key] = deep_merge(result[key], value)
        else:
            result[key] = value
    return result


def local_config_path(config_path: Path) -> Path:
    """config.yaml -> config.local.yaml im selben Verzeichnis."""
    return config_path.with_name(f"{config_path.stem}.local{config_path.suffix}")


def _read_yaml(path: Path) -> Dict[str, Any]:
    with open(path, 'r', encoding='utf-8') as f:
        try:
            raw = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise ConfigError(f"Invalid YAML in {path}: {e}")
    if raw is None:
        logger.warning(f"Configuration file is empty: {path}")
        return {}
    if not isinstance(raw, dict):
        raise ConfigError(f"Configuration root must be a mapping: {path}")
    return raw


def parse_config(raw: Dict[str, Any]) -> BatchGCDConfig:
    """Baut aus einem YAML-Dictionary die typisierte Konfiguration."""
    product_tree = raw.get('product_tree') or {}
    remainder_tree = raw.get('remainder_tree') or {}
    refiner = raw.get('refiner') or {}
    log = raw.get('logging') or {}
    config = BatchGCDConfig(
        workers=raw.get('workers'),
        product_tree=ProductTreeConfig(
            fork_threshold=product_tree.get('fork_threshold', PRODUCT_FORK_THRESHOLD),
        ),
        remainder_tree=RemainderTreeConfig(
            fork_bits=remainder_tree.get('fork_bits', REMAINDER_FORK_BITS),
        ),
        refiner=RefinerConfig(
            small_factor_limit=refiner.get('small_factor_limit', SMALL_FACTOR_LIMIT),
        ),
        logging=LoggingConfig(level=log.get('level', 'INFO')),
    )
    return config.validate()


def load_config(config_path=None) -> BatchGCDConfig:
    """
    Lädt die Konfiguration aus einer YAML-Datei. Liegt daneben eine
    <name>.local.yaml, überschreibt sie einzelne Werte. Ohne Pfad gelten die Standardwerte.
    """
    if config_path is None:
        return BatchGCDConfig()

    path = Path(config_path)
    if not path.exists():
        raise FileNotFoundError(f"Configuration file not found: {config_path}")

    logger.debug(f"Loading configuration from: {path}")
    raw = _read_yaml(path)

    local_path = local_config_path(path)
    if local_path.exists():
        logger.info(f"Loading local configuration overrides from: {local_path}")
        raw = deep_merge(raw, _read_yaml(local_path))

    return parse_config(raw)
