#
# Flash Ctrl DV - Constrained-Random Stimulus Generator
#
# Copyright (c) 2026 Shareef Jalloq
# SPDX-License-Identifier: BSD-2-Clause
#

"""
Constrained-random stimulus generation for flash controller testing.

Provides:
- FlashRandomizer: One seeded random source driving every generator
- History tracking for debug/reproduction

Usage:
    rand = FlashRandomizer(seed=12345, cfg=NO_OVERLAP_DIST)
    regions = rand.random_region_set()
    default, bank = rand.random_policies()
    op = rand.random_op()
    payload = rand.random_payload(op)
"""

import random
from typing import Any, Dict, List, Optional, Tuple

from flash_ctrl_dv.common.params import FlashParams, DEFAULT_PARAMS
from flash_ctrl_dv.common.types import (
    BankErasePolicy,
    DefaultRegionPolicy,
    FifoThresholds,
    FlashOp,
    FlashOperation,
    OperationPayload,
    RegionSet,
)
from flash_ctrl_dv.config import DistributionConfig, DEFAULT_DIST
from .ops import generate_op, generate_payload, random_op_kind
from .policy import generate_fifo_thresholds, generate_policies
from .regions import generate_regions


class FlashRandomizer:
    """Constrained-random flash stimulus generator."""

    def __init__(self, seed: Optional[int] = None,
                 cfg: Optional[DistributionConfig] = None,
                 params: Optional[FlashParams] = None):
        """
        Initialize randomizer.

        Args:
            seed: Random seed for reproducibility. If None, uses system entropy.
            cfg: Distribution config. If None, uses defaults.
            params: Flash geometry. If None, uses defaults.
        """
        self.seed = seed
        self.rng = random.Random(seed)
        self.cfg = cfg or DEFAULT_DIST
        self.params = params or DEFAULT_PARAMS
        self.generated_count = 0
        self.history: List[Tuple[str, Any]] = []

    def get_state(self) -> Dict[str, Any]:
        """Get current state for reproduction."""
        return {
            'seed': self.seed,
            'generated_count': self.generated_count,
        }

    def _record(self, kind: str, item: Any) -> None:
        self.generated_count += 1
        self.history.append((kind, item))

    # -------------------------------------------------------------------------
    # Configuration
    # -------------------------------------------------------------------------

    def random_region_set(self) -> RegionSet:
        regions = generate_regions(
            self.rng, self.cfg,
            total_pages=self.params.total_pages,
            num_slots=self.params.num_regions,
        )
        self._record('regions', regions)
        return regions

    def random_policies(self) -> Tuple[DefaultRegionPolicy, BankErasePolicy]:
        policies = generate_policies(self.rng, self.cfg, self.params.num_banks)
        self._record('policies', policies)
        return policies

    def random_fifo_thresholds(self) -> FifoThresholds:
        return generate_fifo_thresholds(self.rng, self.params.fifo_depth)

    # -------------------------------------------------------------------------
    # Operations
    # -------------------------------------------------------------------------

    def random_op_kind(self) -> FlashOp:
        return random_op_kind(self.rng, self.cfg)

    def random_op(self, kind: Optional[FlashOp] = None) -> FlashOperation:
        """Generate an operation; the kind is drawn from the run policy if not given."""
        if kind is None:
            kind = self.random_op_kind()
        op = generate_op(
            self.rng, self.cfg, kind,
            flash_size_bytes=self.params.flash_size_bytes,
            bus_word_bytes=self.params.bus_word_bytes,
            max_address_offset_bits=self.params.max_address_offset_bits,
        )
        self._record('op', op)
        return op

    def random_payload(self, op: FlashOperation) -> OperationPayload:
        return generate_payload(self.rng, op, self.params.bus_word_bytes)

    def random_words(self, count: int) -> List[int]:
        """Fresh random bus words, e.g. reference data for a read."""
        return [self.rng.getrandbits(8 * self.params.bus_word_bytes) for _ in range(count)]

    # -------------------------------------------------------------------------
    # Iteration counts
    # -------------------------------------------------------------------------

    def random_num_configs(self) -> int:
        return self.rng.randint(1, self.cfg.max_configs)

    def random_num_ops(self) -> int:
        return self.rng.randint(1, self.cfg.max_ops_per_config)
