#
# Flash Ctrl DV - Backdoor and Controller Model Tests
#
# Copyright (c) 2026 Shareef Jalloq
# SPDX-License-Identifier: BSD-2-Clause
#

import asyncio

import pytest

from flash_ctrl_dv.common.types import (
    BankErasePolicy,
    BkdrInit,
    DefaultRegionPolicy,
    EraseType,
    FlashOp,
    FlashOperation,
    MemoryProtectionRegion,
    Partition,
)
from flash_ctrl_dv.model import FlashCtrlModel, erase_word_range


BLANK = 0xFFFFFFFF


# =============================================================================
# Backdoor
# =============================================================================

def test_default_mode_is_invalidate(bkdr):
    assert bkdr.mode(Partition.DATA) is BkdrInit.INVALIDATE
    assert bkdr.read_words(Partition.DATA, 0, 2) == [None, None]


def test_set_blank(bkdr):
    bkdr.init(Partition.INFO, BkdrInit.SET_BLANK)
    assert bkdr.read_words(Partition.INFO, 10, 3) == [BLANK] * 3
    assert bkdr.read_words(Partition.DATA, 10, 1) == [None]


def test_randomize_is_stable(bkdr):
    bkdr.init(Partition.DATA, "randomize")
    first = bkdr.read_words(Partition.DATA, 100, 8)
    assert all(w is not None for w in first)
    assert bkdr.read_words(Partition.DATA, 100, 8) == first


def test_write_then_read(bkdr):
    bkdr.write_words(Partition.DATA, 5, [1, 2, 0x1FFFFFFFF])
    assert bkdr.read_words(Partition.DATA, 5, 3) == [1, 2, BLANK]
    # Partitions are independent
    assert bkdr.read_words(Partition.INFO, 5, 1) == [None]


def test_init_clears_partition(bkdr):
    bkdr.write_words(Partition.DATA, 0, [7])
    bkdr.init(Partition.DATA, BkdrInit.SET_BLANK)
    assert bkdr.read_words(Partition.DATA, 0, 1) == [BLANK]


def test_out_of_range(bkdr, params):
    last = params.total_bus_words - 1
    bkdr.read_words(Partition.DATA, last, 1)
    with pytest.raises(IndexError):
        bkdr.read_words(Partition.DATA, last, 2)
    with pytest.raises(IndexError):
        bkdr.write_words(Partition.DATA, -1, [0])


def test_op_scoped_access_uses_word_address(bkdr):
    op = FlashOperation(FlashOp.PROGRAM, Partition.INFO, address=0x103, num_words=2)
    bkdr.write(op, [0xA, 0xB])
    assert bkdr.read_words(Partition.INFO, 0x40, 2) == [0xA, 0xB]
    assert bkdr.read(op) == [0xA, 0xB]
    assert bkdr.read_check(op, [0xA, 0xB])
    assert not bkdr.read_check(op, [0xA, 0xC])


def test_read_check_fails_on_unknown(bkdr):
    op = FlashOperation(FlashOp.READ, address=0, num_words=1)
    assert not bkdr.read_check(op, [0])


def test_erase_word_range(params):
    page_op = FlashOperation(FlashOp.ERASE, address=params.bytes_per_page * 3 + 5,
                             erase_type=EraseType.PAGE)
    assert erase_word_range(params, page_op) == params.page_word_range(3)
    bank_op = FlashOperation(FlashOp.ERASE, address=params.bytes_per_bank + 1,
                             erase_type=EraseType.BANK)
    assert erase_word_range(params, bank_op) == params.bank_word_range(1)


def test_erase_check(bkdr, params):
    op = FlashOperation(FlashOp.ERASE, address=params.bytes_per_page, erase_type=EraseType.PAGE)
    bkdr.init(Partition.DATA, BkdrInit.SET_BLANK)
    assert bkdr.erase_check(op)
    bkdr.write_words(Partition.DATA, params.page_word_range(1)[-1], [0])
    assert not bkdr.erase_check(op)
    # Neighbouring page is not part of the check
    bkdr.init(Partition.DATA, BkdrInit.SET_BLANK)
    bkdr.write_words(Partition.DATA, params.page_word_range(2).start, [0])
    assert bkdr.erase_check(op)


# =============================================================================
# Controller Model
# =============================================================================

def _exec(ctrl, op, payload):
    async def go():
        await ctrl.start_operation(op, payload)
        return await ctrl.wait_operation_done(100)
    return asyncio.run(go())


def test_read_fills_payload(ctrl, bkdr):
    bkdr.write_words(Partition.DATA, 4, [0x11, 0x22])
    op = FlashOperation(FlashOp.READ, address=16, num_words=3)
    payload = [0, 0, 0]
    assert _exec(ctrl, op, payload)
    # Unknown words come back as zero
    assert payload == [0x11, 0x22, 0]
    assert ctrl.completed == [op]


def test_program_only_clears_bits(ctrl, bkdr):
    bkdr.write_words(Partition.DATA, 0, [0xF0F0F0F0])
    op = FlashOperation(FlashOp.PROGRAM, address=0, num_words=1)
    _exec(ctrl, op, [0xFF00FF00])
    assert bkdr.read_words(Partition.DATA, 0, 1) == [0xF000F000]


def test_program_onto_unknown_stays_unknown(ctrl, bkdr):
    op = FlashOperation(FlashOp.PROGRAM, address=0, num_words=1)
    _exec(ctrl, op, [0])
    assert bkdr.read_words(Partition.DATA, 0, 1) == [None]


@pytest.mark.parametrize("erase_type", list(EraseType))
def test_erase_blanks_range(ctrl, bkdr, params, erase_type):
    bkdr.init(Partition.INFO, BkdrInit.RANDOMIZE)
    op = FlashOperation(FlashOp.ERASE, Partition.INFO, address=params.bytes_per_bank + 300,
                        erase_type=erase_type)
    _exec(ctrl, op, [])
    assert bkdr.erase_check(op)
    # Data partition untouched
    assert bkdr.read_words(Partition.DATA, params.word_of(op.address), 1) == [None]


def test_latency_beyond_timeout(bkdr):
    ctrl = FlashCtrlModel(bkdr, latency_cycles=50)
    op = FlashOperation(FlashOp.READ, address=0, num_words=1)

    async def go():
        await ctrl.start_operation(op, [0])
        assert not await ctrl.wait_operation_done(10)
        assert ctrl.busy
        with pytest.raises(RuntimeError, match="outstanding"):
            await ctrl.start_operation(op, [0])
        with pytest.raises(RuntimeError, match="outstanding"):
            await ctrl.apply_default_region_config(DefaultRegionPolicy())
        assert await ctrl.wait_operation_done(50)
        assert not ctrl.busy

    asyncio.run(go())


def test_wait_with_nothing_pending(ctrl):
    assert asyncio.run(ctrl.wait_operation_done(1))


def test_config_recorded_not_enforced(ctrl, bkdr):
    region = MemoryProtectionRegion(enabled=True, start_page=0, num_pages=4)

    async def go():
        await ctrl.apply_region_config(2, region)
        await ctrl.apply_default_region_config(DefaultRegionPolicy())
        await ctrl.apply_bank_erase_config(BankErasePolicy((False, False)))
        with pytest.raises(IndexError):
            await ctrl.apply_region_config(8, region)

    asyncio.run(go())
    assert ctrl.regions[2] is region
    assert ctrl.config_writes == 3

    # Everything disabled, the erase still executes
    op = FlashOperation(FlashOp.ERASE, address=0, erase_type=EraseType.BANK)
    _exec(ctrl, op, [])
    assert bkdr.erase_check(op)
