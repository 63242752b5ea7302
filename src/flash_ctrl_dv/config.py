#
# Flash Ctrl DV - Distribution Config
#
# Copyright (c) 2026 Shareef Jalloq
# SPDX-License-Identifier: BSD-2-Clause
#

"""
Policy knobs for constrained-random flash stimulus.

A DistributionConfig is created once per run and never mutated. Every
generator receives it explicitly.

Usage:
    cfg = PRESETS['no_overlap']
    cfg = DEFAULT_DIST.replace(num_enabled_regions=6, allow_region_overlap=True)
    cfg, params = load_config("runs/erase_storm.yaml")

YAML layout (all sections optional):

    preset: erase_heavy
    dist:
      max_configs: 8
      allow_region_overlap: false
    params:
      num_banks: 2
      pages_per_bank: 64
"""

import dataclasses
from dataclasses import dataclass, fields
from pathlib import Path
from typing import Any, Dict, Tuple, Union

import yaml

from flash_ctrl_dv.common.params import FlashParams
from flash_ctrl_dv.common.types import BkdrInit
from flash_ctrl_dv.errors import ConfigError


# Fields holding a 0-100 percentage
PCT_FIELDS = (
    'erase_bank_vs_page_pct',
    'op_on_info_partition_pct',
    'region_read_en_pct',
    'region_program_en_pct',
    'region_erase_en_pct',
    'region_info_partition_pct',
    'default_read_en_pct',
    'default_program_en_pct',
    'default_erase_en_pct',
    'bank_erase_disable_pct',
)

# Fields that must be at least 1
MIN_ONE_FIELDS = (
    'max_configs',
    'max_ops_per_config',
    'max_words_per_op',
    'region_max_pages',
    'region_placement_retries',
    'op_timeout_cycles',
)

WEIGHT_FIELDS = ('read_op_weight', 'program_op_weight', 'erase_op_weight')


@dataclass(frozen=True)
class DistributionConfig:
    """Read-only randomization policy for one run."""

    # Sequencing bounds
    max_configs: int = 4
    max_ops_per_config: int = 16

    # Operation shape
    erase_bank_vs_page_pct: int = 5
    op_on_info_partition_pct: int = 20
    max_words_per_op: int = 64

    # Operation kind mix (relative weights)
    read_op_weight: int = 40
    program_op_weight: int = 40
    erase_op_weight: int = 20

    # Protection regions
    num_enabled_regions: int = 3
    region_read_en_pct: int = 50
    region_program_en_pct: int = 50
    region_erase_en_pct: int = 50
    region_max_pages: int = 32
    region_info_partition_pct: int = 25
    allow_region_overlap: bool = False
    region_placement_retries: int = 1000

    # Default region and bank erase
    default_read_en_pct: int = 50
    default_program_en_pct: int = 50
    default_erase_en_pct: int = 50
    bank_erase_disable_pct: int = 10

    # Environment
    bkdr_init_mode: BkdrInit = BkdrInit.RANDOMIZE
    op_timeout_cycles: int = 100_000

    def __post_init__(self):
        try:
            mode = BkdrInit.parse(self.bkdr_init_mode)
        except ValueError as e:
            raise ConfigError(str(e)) from None
        object.__setattr__(self, 'bkdr_init_mode', mode)

        for name in PCT_FIELDS:
            value = getattr(self, name)
            if not _is_int(value) or not 0 <= value <= 100:
                raise ConfigError(f"{name} must be a percentage in 0..100, got {value!r}")
        for name in MIN_ONE_FIELDS:
            value = getattr(self, name)
            if not _is_int(value) or value < 1:
                raise ConfigError(f"{name} must be >= 1, got {value!r}")
        for name in WEIGHT_FIELDS:
            value = getattr(self, name)
            if not _is_int(value) or value < 0:
                raise ConfigError(f"{name} must be a non-negative integer, got {value!r}")
        if sum(getattr(self, name) for name in WEIGHT_FIELDS) == 0:
            raise ConfigError("At least one operation kind weight must be non-zero")
        if not _is_int(self.num_enabled_regions) or self.num_enabled_regions < 0:
            raise ConfigError(
                f"num_enabled_regions must be >= 0, got {self.num_enabled_regions!r}")
        if not isinstance(self.allow_region_overlap, bool):
            raise ConfigError(
                f"allow_region_overlap must be a bool, got {self.allow_region_overlap!r}")

    def replace(self, **overrides) -> "DistributionConfig":
        """Derive a new config with some fields changed."""
        try:
            return dataclasses.replace(self, **overrides)
        except TypeError as e:
            raise ConfigError(str(e)) from None

    @classmethod
    def from_dict(cls, data: Dict[str, Any], base: "DistributionConfig" = None) -> "DistributionConfig":
        known = {f.name for f in fields(cls)}
        unknown = set(data) - known
        if unknown:
            raise ConfigError(f"Unknown distribution field(s): {', '.join(sorted(unknown))}")
        return (base or cls()).replace(**data)

    def to_dict(self) -> Dict[str, Any]:
        d = dataclasses.asdict(self)
        d['bkdr_init_mode'] = self.bkdr_init_mode.name.lower()
        return d


def _is_int(value) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


# =============================================================================
# Pre-defined Distribution Sets
# =============================================================================

DEFAULT_DIST = DistributionConfig()

NO_OVERLAP_DIST = DistributionConfig(
    num_enabled_regions=8,
    region_max_pages=16,
    allow_region_overlap=False,
)

ERASE_HEAVY_DIST = DistributionConfig(
    read_op_weight=20,
    program_op_weight=30,
    erase_op_weight=50,
    erase_bank_vs_page_pct=20,
    bank_erase_disable_pct=0,
    default_erase_en_pct=100,
)

STRESS_DIST = DistributionConfig(
    max_configs=16,
    max_ops_per_config=64,
    max_words_per_op=256,
    num_enabled_regions=8,
    region_max_pages=128,
    allow_region_overlap=True,
    op_on_info_partition_pct=50,
    region_info_partition_pct=50,
)

PRESETS: Dict[str, DistributionConfig] = {
    'default': DEFAULT_DIST,
    'no_overlap': NO_OVERLAP_DIST,
    'erase_heavy': ERASE_HEAVY_DIST,
    'stress': STRESS_DIST,
}


def get_preset(name: str) -> DistributionConfig:
    try:
        return PRESETS[name]
    except KeyError:
        raise ConfigError(
            f"Unknown preset: {name}. Available: {', '.join(PRESETS)}"
        ) from None


# =============================================================================
# YAML Loading
# =============================================================================

def load_config(path: Union[str, Path]) -> Tuple[DistributionConfig, FlashParams]:
    """
    Load a run configuration from YAML.

    Args:
        path: YAML file with optional 'preset', 'dist' and 'params' keys

    Returns:
        (DistributionConfig, FlashParams)
    """
    path = Path(path)
    try:
        with open(path) as f:
            data = yaml.safe_load(f)
    except OSError as e:
        raise ConfigError(f"Cannot read config {path}: {e}") from e
    except yaml.YAMLError as e:
        raise ConfigError(f"Invalid YAML in {path}: {e}") from e

    return config_from_dict(data or {}, source=str(path))


def config_from_dict(data: Dict[str, Any], source: str = "<dict>") -> Tuple[DistributionConfig, FlashParams]:
    if not isinstance(data, dict):
        raise ConfigError(f"{source}: top level must be a mapping")

    unknown = set(data) - {'preset', 'dist', 'params'}
    if unknown:
        raise ConfigError(f"{source}: unknown section(s): {', '.join(sorted(unknown))}")

    base = get_preset(data['preset']) if 'preset' in data else DEFAULT_DIST

    dist = data.get('dist') or {}
    params = data.get('params') or {}
    if not isinstance(dist, dict) or not isinstance(params, dict):
        raise ConfigError(f"{source}: 'dist' and 'params' must be mappings")

    return DistributionConfig.from_dict(dist, base=base), FlashParams.from_dict(params)
