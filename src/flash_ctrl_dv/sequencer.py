#
# Flash Ctrl DV - Randomized Operation Sequencer
#
# Copyright (c) 2026 Shareef Jalloq
# SPDX-License-Identifier: BSD-2-Clause
#

"""
Configure -> prepare -> issue -> wait -> check loop.

The outer loop applies a freshly sampled region/default/bank configuration.
The inner loop generates operations against it, prepares the backdoor
reference, issues each operation, waits for completion and checks the
result. Everything is strictly sequential: one operation outstanding at
most, and no configuration change while it is.

The controller collaborator is awaited (cocotb BFM or FlashCtrlModel). The
backdoor collaborator is zero-time and called directly.

Every failure is fatal: ConstraintUnsatisfiable from the generators,
OperationTimeout from the wait and CheckMismatch from the checks all
propagate out of run() with no retry.

Usage:
    seq = FlashSequencer(ctrl, bkdr, cfg=DEFAULT_DIST, params=params, seed=1)
    summary = await seq.run()
"""

import logging
from collections import Counter
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Optional, Protocol, Sequence

from flash_ctrl_dv.common.params import FlashParams
from flash_ctrl_dv.common.types import (
    BankErasePolicy,
    BkdrInit,
    DefaultRegionPolicy,
    EraseType,
    FlashOp,
    FlashOperation,
    MemoryProtectionRegion,
    OperationPayload,
    Partition,
    RegionSet,
)
from flash_ctrl_dv.config import DistributionConfig
from flash_ctrl_dv.coverage import CoverageCollector
from flash_ctrl_dv.errors import CheckMismatch, OperationTimeout
from flash_ctrl_dv.randomizer import FlashRandomizer


# =============================================================================
# Collaborator Interfaces
# =============================================================================

class FlashController(Protocol):
    """Front-door access to the controller under test."""

    async def apply_region_config(self, index: int, region: MemoryProtectionRegion) -> None: ...

    async def apply_default_region_config(self, policy: DefaultRegionPolicy) -> None: ...

    async def apply_bank_erase_config(self, policy: BankErasePolicy) -> None: ...

    async def start_operation(self, op: FlashOperation, payload: OperationPayload) -> None: ...

    async def wait_operation_done(self, timeout_cycles: int) -> bool: ...


class FlashBackdoorAccess(Protocol):
    """Zero-time access to the flash array behind the controller."""

    def init(self, partition: Partition, mode: BkdrInit) -> None: ...

    def write(self, op: FlashOperation, words: Sequence[int]) -> None: ...

    def read(self, op: FlashOperation) -> List[Optional[int]]: ...

    def read_check(self, op: FlashOperation, expected: Sequence[int]) -> bool: ...

    def erase_check(self, op: FlashOperation) -> bool: ...


# =============================================================================
# Records
# =============================================================================

class SeqState(Enum):
    IDLE        = "idle"
    CONFIGURING = "configuring"
    OPERATING   = "operating"
    CHECKING    = "checking"
    DONE        = "done"


@dataclass
class OpRecord:
    """One executed and checked operation."""
    config_index: int
    op_index: int
    op: FlashOperation
    payload: OperationPayload
    region_hit: Optional[int] = None


@dataclass
class RunSummary:
    seed: Optional[int]
    num_configs: int = 0
    num_ops: int = 0
    ops_by_kind: Dict[str, int] = field(default_factory=dict)


def _first_mismatch(expected: Sequence[Optional[int]], actual: Sequence[Optional[int]]):
    for i, (exp, act) in enumerate(zip(expected, actual)):
        if exp != act:
            return i, exp, act
    if len(expected) != len(actual):
        i = min(len(expected), len(actual))
        return (i,
                expected[i] if i < len(expected) else None,
                actual[i] if i < len(actual) else None)
    return None


# =============================================================================
# Sequencer
# =============================================================================

class FlashSequencer:
    """Randomized configuration and operation sequencer."""

    def __init__(
        self,
        ctrl: FlashController,
        bkdr: FlashBackdoorAccess,
        cfg: Optional[DistributionConfig] = None,
        params: Optional[FlashParams] = None,
        seed: Optional[int] = None,
        randomizer: Optional[FlashRandomizer] = None,
        coverage: Optional[CoverageCollector] = None,
        log: Optional[logging.Logger] = None,
    ):
        """
        Args:
            ctrl: Controller collaborator (awaited)
            bkdr: Backdoor collaborator (called directly)
            cfg: Distribution config. Ignored if randomizer is given.
            params: Flash geometry. Ignored if randomizer is given.
            seed: Random seed. Ignored if randomizer is given.
            randomizer: Pre-built randomizer sharing its random source
            coverage: Optional coverage collector to sample into
            log: Logger, e.g. dut._log from a cocotb test
        """
        self.ctrl = ctrl
        self.bkdr = bkdr
        self.rand = randomizer or FlashRandomizer(seed=seed, cfg=cfg, params=params)
        self.cfg = self.rand.cfg
        self.params = self.rand.params
        self.coverage = coverage
        self.log = log or logging.getLogger(__name__)

        self.state = SeqState.IDLE
        self.regions: Optional[RegionSet] = None
        self.default_policy: Optional[DefaultRegionPolicy] = None
        self.bank_policy: Optional[BankErasePolicy] = None
        self.history: List[OpRecord] = []

        self._outstanding: Optional[FlashOperation] = None
        self._config_index = -1
        self._op_index = 0

    @property
    def seed(self) -> Optional[int]:
        return self.rand.seed

    # -------------------------------------------------------------------------
    # Outer loop
    # -------------------------------------------------------------------------

    async def run(self, num_configs: Optional[int] = None) -> RunSummary:
        """
        Run the whole sequence.

        Args:
            num_configs: Outer iteration count. Sampled from
                [1, cfg.max_configs] if None.

        Returns:
            RunSummary of the executed operations
        """
        self.log.info(f"Flash sequence seed: {self.seed}")

        for partition in Partition:
            self.bkdr.init(partition, self.cfg.bkdr_init_mode)

        if num_configs is None:
            num_configs = self.rand.random_num_configs()

        kinds: Counter = Counter()
        num_ops_total = 0
        for _ in range(num_configs):
            await self.configure()
            num_ops = self.rand.random_num_ops()
            self.log.info(f"Config {self._config_index}: {num_ops} operations")
            for _ in range(num_ops):
                record = await self.run_op()
                kinds[record.op.kind.label] += 1
                num_ops_total += 1

        self.state = SeqState.DONE
        summary = RunSummary(
            seed=self.seed,
            num_configs=num_configs,
            num_ops=num_ops_total,
            ops_by_kind=dict(kinds),
        )
        self.log.info(f"Completed {num_configs} configs, {num_ops_total} operations")
        return summary

    async def configure(self) -> None:
        """Sample and apply a new region/default/bank configuration."""
        if self._outstanding is not None:
            raise RuntimeError(f"Cannot reconfigure while {self._outstanding} is outstanding")

        self.state = SeqState.CONFIGURING
        regions = self.rand.random_region_set()
        default, bank = self.rand.random_policies()

        # Slots left enabled by the previous configuration are written back disabled
        if self.regions is not None:
            for index, _ in self.regions.enabled():
                if not regions[index].enabled:
                    self.log.debug(f"Region {index}: cleared")
                    await self.ctrl.apply_region_config(index, regions[index])
        for index, region in regions.enabled():
            self.log.debug(f"Region {index}: {region}")
            await self.ctrl.apply_region_config(index, region)
            if self.coverage:
                self.coverage.sample_region(region)
        await self.ctrl.apply_default_region_config(default)
        await self.ctrl.apply_bank_erase_config(bank)
        if self.coverage:
            self.coverage.sample_policy(default, bank)

        self.regions = regions
        self.default_policy = default
        self.bank_policy = bank
        self._config_index += 1
        self._op_index = 0

    # -------------------------------------------------------------------------
    # Inner loop
    # -------------------------------------------------------------------------

    async def run_op(self, op: Optional[FlashOperation] = None,
                     payload: Optional[OperationPayload] = None) -> OpRecord:
        """
        Prepare, issue, wait for and check one operation.

        Args:
            op: Operation to execute. Generated if None.
            payload: Data buffer for op. Generated if None.

        Returns:
            OpRecord of the checked operation
        """
        if op is None:
            op = self.rand.random_op()
        else:
            self._validate_op(op)
        if payload is None:
            payload = self.rand.random_payload(op)
        elif len(payload) != (0 if op.is_erase else op.num_words):
            raise ValueError(f"{op}: payload has {len(payload)} words")

        self.state = SeqState.OPERATING
        expected = self.prepare(op, payload)

        self.log.debug(f"[{self._config_index}.{self._op_index}] Issue {op}")
        await self.ctrl.start_operation(op, payload)
        self._outstanding = op
        done = await self.ctrl.wait_operation_done(self.cfg.op_timeout_cycles)
        if not done:
            self.log.error(f"{op} timed out after {self.cfg.op_timeout_cycles} cycles")
            raise OperationTimeout(op, self.cfg.op_timeout_cycles)
        self._outstanding = None

        self.state = SeqState.CHECKING
        self.check(op, payload, expected)

        hit = None
        if self.regions is not None:
            match = self.regions.match(op.partition, self.params.page_of(op.address))
            hit = match[0] if match else None
        if self.coverage:
            self.coverage.sample_op(op, region_hit=hit is not None,
                                    flash_size_bytes=self.params.flash_size_bytes)

        record = OpRecord(
            config_index=self._config_index,
            op_index=self._op_index,
            op=op,
            payload=list(payload),
            region_hit=hit,
        )
        self.history.append(record)
        self._op_index += 1
        return record

    def _validate_op(self, op: FlashOperation) -> None:
        """Reject a caller-built operation the generators would never produce."""
        try:
            FlashOp(op.kind)
        except ValueError:
            raise ValueError(f"Unsupported operation kind: {op.kind!r}") from None
        if not 0 <= op.address < self.params.flash_size_bytes:
            raise ValueError(
                f"Address 0x{op.address:X} outside the "
                f"0x{self.params.flash_size_bytes:X} byte flash")
        if op.is_erase:
            if op.erase_type not in tuple(EraseType):
                raise ValueError(f"Erase at 0x{op.address:X} has no valid erase type: "
                                 f"{op.erase_type!r}")
            return
        last_word = self.params.word_of(op.address) + op.num_words
        if op.num_words < 1 or last_word > self.params.total_bus_words:
            raise ValueError(f"{op}: word range does not fit in the flash")

    def prepare(self, op: FlashOperation, payload: OperationPayload) -> List[int]:
        """
        Set up the backdoor reference for op.

        Returns:
            Words expected at the target after the operation (empty for erase)
        """
        if op.is_read:
            # Fresh data so a stale or wrong-address read cannot pass
            reference = self.rand.random_words(op.num_words)
            self.bkdr.write(op, reference)
            return reference
        if op.is_program:
            self.bkdr.write(op, [self.params.bus_word_mask] * op.num_words)
            return list(payload)
        return []

    def check(self, op: FlashOperation, payload: OperationPayload, expected: List[int]) -> None:
        """Compare controller/backdoor state against expected; raise CheckMismatch on failure."""
        if op.is_read:
            mismatch = _first_mismatch(expected, payload)
            if mismatch:
                raise CheckMismatch(op, "read data differs from reference", *mismatch)
            if not self.bkdr.read_check(op, expected):
                mismatch = _first_mismatch(expected, self.bkdr.read(op))
                raise CheckMismatch(op, "memory changed by read", *(mismatch or ()))
        elif op.is_program:
            if not self.bkdr.read_check(op, expected):
                mismatch = _first_mismatch(expected, self.bkdr.read(op))
                raise CheckMismatch(op, "programmed data differs from payload", *(mismatch or ()))
        elif op.is_erase:
            if not self.bkdr.erase_check(op):
                raise CheckMismatch(op, f"{op.erase_type.label.lower()} not blank after erase")
