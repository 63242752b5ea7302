#
# Flash Ctrl DV - Flash Controller Bus Functional Models
#
# Copyright (c) 2026 Shareef Jalloq
# SPDX-License-Identifier: BSD-2-Clause
#

"""
Bus Functional Models for the flash controller testbench.

Provides:
- FlashCtrlBFM: Front-door register access implementing the sequencer's
  controller interface (region/default/bank config, start, wait)
- SimFlashBackdoor: FlashBackdoor that reads and writes the simulated
  flash arrays directly

The testbench top is expected to expose a simple CSR port (csr_*) and the
data and info memory arrays, each holding total_bus_words words.
"""

from typing import List, Optional, Sequence

from cocotb.triggers import RisingEdge, ClockCycles
from cocotb.types import LogicArray

from flash_ctrl_dv.common.params import FlashParams, DEFAULT_PARAMS
from flash_ctrl_dv.common.types import (
    BankErasePolicy,
    BkdrInit,
    DefaultRegionPolicy,
    EraseType,
    FifoThresholds,
    FlashOperation,
    MemoryProtectionRegion,
    OperationPayload,
    Partition,
)
from flash_ctrl_dv.model import FlashBackdoor


# =============================================================================
# Register Map
# =============================================================================

REG_CONTROL         = 0x00  # [0]=start [5:4]=op [6]=erase_sel [8]=partition_sel [27:16]=num-1
REG_ADDR            = 0x04
REG_PROG_FIFO       = 0x08
REG_RD_FIFO         = 0x0C
REG_OP_STATUS       = 0x10  # [0]=done [1]=err, write 0 to clear
REG_STATUS          = 0x14  # [0]=rd_full [1]=rd_empty [2]=prog_full [3]=prog_empty
REG_FIFO_LVL        = 0x18  # watermarks: [4:0]=prog [12:8]=rd
REG_DEFAULT_REGION  = 0x1C  # [0]=rd_en [1]=prog_en [2]=erase_en
REG_MP_BANK_CFG     = 0x20  # one erase enable bit per bank
REG_MP_REGION_CFG   = 0x40  # +4*i: [0]=en [1]=rd_en [2]=prog_en [3]=erase_en [4]=info_sel
REG_MP_REGION       = 0x80  # +4*i: [15:0]=base page [31:16]=num pages

CONTROL_START       = 1 << 0
OP_STATUS_DONE      = 1 << 0
OP_STATUS_ERR       = 1 << 1
STATUS_RD_EMPTY     = 1 << 1


def region_cfg_word(region: MemoryProtectionRegion) -> int:
    """Pack the enable/permission bits of a protection region."""
    return (int(region.enabled) |
            int(region.read_en) << 1 |
            int(region.program_en) << 2 |
            int(region.erase_en) << 3 |
            int(region.partition) << 4)


def control_word(op: FlashOperation) -> int:
    """Pack the CONTROL register for op, start bit set."""
    word = CONTROL_START | (int(op.kind) << 4) | (int(op.partition) << 8)
    if op.is_erase:
        word |= int(op.erase_type == EraseType.BANK) << 6
    else:
        word |= ((op.num_words - 1) & 0xFFF) << 16
    return word


# =============================================================================
# Front-Door BFM
# =============================================================================

class FlashCtrlBFM:
    """
    Bus Functional Model for the flash controller register interface.

    Implements the controller side of FlashSequencer. Program data is pushed
    from start_operation; read data is drained into the payload while
    waiting for completion.
    """

    def __init__(self, dut, prefix="csr", params: Optional[FlashParams] = None):
        """
        Initialize BFM with DUT reference.

        Args:
            dut: Cocotb DUT reference
            prefix: Prefix for CSR port signals
            params: Flash geometry
        """
        self.dut = dut
        self.clk = dut.clk
        self.prefix = prefix
        self.params = params or DEFAULT_PARAMS
        self._get_signals()

        self._op: Optional[FlashOperation] = None
        self._payload: OperationPayload = []

    def _get_signals(self):
        """Get signal handles from DUT."""
        p = self.prefix
        self.valid  = getattr(self.dut, f"{p}_valid")
        self.ready  = getattr(self.dut, f"{p}_ready")
        self.we     = getattr(self.dut, f"{p}_we")
        self.addr   = getattr(self.dut, f"{p}_addr")
        self.wdata  = getattr(self.dut, f"{p}_wdata")
        self.rvalid = getattr(self.dut, f"{p}_rvalid")
        self.rdata  = getattr(self.dut, f"{p}_rdata")

        self.valid.value = 0
        self.we.value = 0

    async def reset(self):
        """Reset the DUT and idle the CSR port."""
        self.dut.rst_n.value = 0
        self.valid.value = 0
        self.we.value = 0
        self._op = None

        await ClockCycles(self.clk, 10)
        self.dut.rst_n.value = 1
        await ClockCycles(self.clk, 10)

    # -------------------------------------------------------------------------
    # CSR access
    # -------------------------------------------------------------------------

    async def csr_write(self, addr: int, data: int):
        self.valid.value = 1
        self.we.value = 1
        self.addr.value = addr
        self.wdata.value = data & 0xFFFFFFFF

        while True:
            await RisingEdge(self.clk)
            if self.ready.value:
                break

        self.valid.value = 0
        self.we.value = 0

    async def csr_read(self, addr: int, timeout_cycles=100) -> int:
        self.valid.value = 1
        self.we.value = 0
        self.addr.value = addr

        while True:
            await RisingEdge(self.clk)
            if self.ready.value:
                break
        self.valid.value = 0

        for _ in range(timeout_cycles):
            if self.rvalid.value:
                return int(self.rdata.value)
            await RisingEdge(self.clk)
        raise TimeoutError(f"No read response from CSR 0x{addr:02X}")

    # -------------------------------------------------------------------------
    # Configuration
    # -------------------------------------------------------------------------

    async def apply_region_config(self, index: int, region: MemoryProtectionRegion):
        # Range must be written before the enable bit
        await self.csr_write(REG_MP_REGION + 4 * index,
                             (region.num_pages << 16) | region.start_page)
        await self.csr_write(REG_MP_REGION_CFG + 4 * index, region_cfg_word(region))

    async def apply_default_region_config(self, policy: DefaultRegionPolicy):
        await self.csr_write(REG_DEFAULT_REGION,
                             int(policy.read_en) |
                             int(policy.program_en) << 1 |
                             int(policy.erase_en) << 2)

    async def apply_bank_erase_config(self, policy: BankErasePolicy):
        word = 0
        for bank, en in enumerate(policy.bank_erase_en):
            word |= int(en) << bank
        await self.csr_write(REG_MP_BANK_CFG, word)

    # -------------------------------------------------------------------------
    # Operations
    # -------------------------------------------------------------------------

    async def start_operation(self, op: FlashOperation, payload: OperationPayload):
        """Issue op; program words are pushed as the FIFO accepts them."""
        self._op = op
        self._payload = payload

        await self.csr_write(REG_OP_STATUS, 0)
        await self.csr_write(REG_ADDR, op.address)
        await self.csr_write(REG_CONTROL, control_word(op))

        if op.is_program:
            for word in payload:
                await self.csr_write(REG_PROG_FIFO, word)

    async def wait_operation_done(self, timeout_cycles: int) -> bool:
        """
        Poll for completion, draining read data on the way.

        Args:
            timeout_cycles: Maximum number of status polls

        Returns:
            True if the operation completed, False on timeout
        """
        op = self._op
        if op is None:
            return True

        received: List[int] = []
        for _ in range(timeout_cycles):
            if op.is_read and len(received) < op.num_words:
                status = await self.csr_read(REG_STATUS)
                if not status & STATUS_RD_EMPTY:
                    received.append(await self.csr_read(REG_RD_FIFO))
                    continue

            op_status = await self.csr_read(REG_OP_STATUS)
            if op_status & OP_STATUS_DONE:
                if op_status & OP_STATUS_ERR:
                    self.dut._log.warning(f"{op} completed with error status")
                if op.is_read:
                    self._payload[:] = received + [0] * (op.num_words - len(received))
                self._op = None
                return True
            await RisingEdge(self.clk)

        return False

    async def apply_fifo_thresholds(self, fifo: FifoThresholds):
        """Program the program/read FIFO watermark levels."""
        await self.csr_write(REG_FIFO_LVL, (fifo.prog & 0x1F) | (fifo.rd & 0x1F) << 8)


# =============================================================================
# Backdoor
# =============================================================================

def _find_handle(dut, path: str):
    handle = dut
    for name in path.split("."):
        handle = getattr(handle, name)
    return handle


class SimFlashBackdoor(FlashBackdoor):
    """
    Backdoor over the simulated flash arrays.

    Word storage lives in the simulator; unknown (X) words read back as None.
    The operation-scoped checks are inherited from FlashBackdoor.
    """

    def __init__(self, dut, params: Optional[FlashParams] = None, seed: Optional[int] = None,
                 data_path: str = "u_flash.data_mem", info_path: str = "u_flash.info_mem"):
        super().__init__(params, seed)
        self.dut = dut
        self.arrays = {
            Partition.DATA: _find_handle(dut, data_path),
            Partition.INFO: _find_handle(dut, info_path),
        }
        self._width = 8 * self.params.bus_word_bytes

    def _unknown(self) -> LogicArray:
        return LogicArray("X" * self._width)

    def init(self, partition: Partition, mode: BkdrInit):
        mode = BkdrInit.parse(mode)
        self._mode[partition] = mode
        mem = self.arrays[partition]
        for word in range(self.params.total_bus_words):
            if mode == BkdrInit.RANDOMIZE:
                mem[word].value = self.rng.getrandbits(self._width)
            elif mode == BkdrInit.SET_BLANK:
                mem[word].value = self.params.bus_word_mask
            else:
                mem[word].value = self._unknown()
        self.dut._log.debug(f"Backdoor {partition.label} initialized: {mode.name}")

    def read_words(self, partition: Partition, word: int, count: int) -> List[Optional[int]]:
        self._check_range(word, count)
        mem = self.arrays[partition]
        values = []
        for i in range(word, word + count):
            value = mem[i].value
            values.append(int(value) if value.is_resolvable else None)
        return values

    def write_words(self, partition: Partition, word: int, values: Sequence[Optional[int]]):
        self._check_range(word, len(values))
        mem = self.arrays[partition]
        mask = self.params.bus_word_mask
        for i, value in enumerate(values):
            mem[word + i].value = self._unknown() if value is None else value & mask
