#
# Flash Ctrl DV - Controller Reference Model
#
# Copyright (c) 2026 Shareef Jalloq
# SPDX-License-Identifier: BSD-2-Clause
#
# Behavioral stand-in for the controller collaborator. Coroutine methods so
# it can be awaited from asyncio or from a cocotb test.
#
# Protection settings are recorded, not enforced: every operation executes.
#

import logging
from typing import List, Optional, Tuple

from flash_ctrl_dv.common.params import FlashParams
from flash_ctrl_dv.common.types import (
    BankErasePolicy,
    DefaultRegionPolicy,
    FlashOperation,
    MemoryProtectionRegion,
    OperationPayload,
)
from .bkdr import FlashBackdoor, erase_word_range

logger = logging.getLogger(__name__)


class FlashCtrlModel:
    """
    Controller model operating on a shared FlashBackdoor.

    Operations execute when their completion is awaited. An operation whose
    latency exceeds the wait budget is left outstanding and the wait reports
    failure.
    """

    def __init__(self, bkdr: FlashBackdoor, latency_cycles: int = 0):
        self.bkdr = bkdr
        self.params: FlashParams = bkdr.params
        self.latency_cycles = latency_cycles

        self.regions: List[Optional[MemoryProtectionRegion]] = [None] * self.params.num_regions
        self.default_policy: Optional[DefaultRegionPolicy] = None
        self.bank_policy: Optional[BankErasePolicy] = None

        self.completed: List[FlashOperation] = []
        self.config_writes = 0
        self._pending: Optional[Tuple[FlashOperation, OperationPayload]] = None

    @property
    def busy(self) -> bool:
        return self._pending is not None

    def _check_idle(self, what: str) -> None:
        if self._pending is not None:
            raise RuntimeError(f"{what} while {self._pending[0]} is outstanding")

    # -------------------------------------------------------------------------
    # Configuration
    # -------------------------------------------------------------------------

    async def apply_region_config(self, index: int, region: MemoryProtectionRegion) -> None:
        self._check_idle("Region config")
        if not 0 <= index < self.params.num_regions:
            raise IndexError(f"Region slot {index} out of range")
        self.regions[index] = region
        self.config_writes += 1

    async def apply_default_region_config(self, policy: DefaultRegionPolicy) -> None:
        self._check_idle("Default region config")
        self.default_policy = policy
        self.config_writes += 1

    async def apply_bank_erase_config(self, policy: BankErasePolicy) -> None:
        self._check_idle("Bank erase config")
        self.bank_policy = policy
        self.config_writes += 1

    # -------------------------------------------------------------------------
    # Operations
    # -------------------------------------------------------------------------

    async def start_operation(self, op: FlashOperation, payload: OperationPayload) -> None:
        self._check_idle(f"Start of {op}")
        self._pending = (op, payload)

    async def wait_operation_done(self, timeout_cycles: int) -> bool:
        if self._pending is None:
            return True
        if self.latency_cycles > timeout_cycles:
            return False
        op, payload = self._pending
        self._execute(op, payload)
        self._pending = None
        self.completed.append(op)
        return True

    def _execute(self, op: FlashOperation, payload: OperationPayload) -> None:
        bkdr = self.bkdr
        word = self.params.word_of(op.address)

        if op.is_read:
            data = bkdr.read_words(op.partition, word, op.num_words)
            payload[:] = [0 if w is None else w for w in data]
        elif op.is_program:
            # Programming can only clear bits
            current = bkdr.read_words(op.partition, word, op.num_words)
            bkdr.write_words(op.partition, word, [
                None if c is None else c & d for c, d in zip(current, payload)
            ])
        elif op.is_erase:
            words = erase_word_range(self.params, op)
            bkdr.write_words(op.partition, words.start, [self.params.bus_word_mask] * len(words))
        logger.debug(f"Executed {op}")
