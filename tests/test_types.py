#
# Flash Ctrl DV - Data Model Tests
#
# Copyright (c) 2026 Shareef Jalloq
# SPDX-License-Identifier: BSD-2-Clause
#

import pytest

from flash_ctrl_dv.common.types import (
    BkdrInit,
    EraseType,
    FlashOp,
    FlashOperation,
    MemoryProtectionRegion,
    Partition,
    RegionSet,
    op_to_dict,
    region_to_dict,
)


def _region(start, pages, partition=Partition.DATA):
    return MemoryProtectionRegion(enabled=True, read_en=True, partition=partition,
                                  start_page=start, num_pages=pages)


def test_region_contains():
    r = _region(4, 3)
    assert r.end_page == 7
    assert not r.contains(Partition.DATA, 3)
    assert r.contains(Partition.DATA, 4)
    assert r.contains(Partition.DATA, 6)
    assert not r.contains(Partition.DATA, 7)
    assert not r.contains(Partition.INFO, 5)
    assert not MemoryProtectionRegion(start_page=0, num_pages=10).contains(Partition.DATA, 1)


@pytest.mark.parametrize("a, b, overlap", [
    ((0, 4), (4, 4), False),
    ((0, 5), (4, 4), True),
    ((8, 1), (0, 8), False),
    ((2, 2), (0, 10), True),
])
def test_region_overlaps(a, b, overlap):
    assert _region(*a).overlaps(_region(*b)) is overlap
    assert _region(*b).overlaps(_region(*a)) is overlap


def test_region_overlap_ignores_partition():
    assert _region(0, 4, Partition.DATA).overlaps(_region(2, 4, Partition.INFO))


def test_region_set_match_lowest_slot():
    regions = RegionSet([
        MemoryProtectionRegion(),
        _region(10, 10),
        _region(0, 32),
        _region(0, 32, Partition.INFO),
    ])
    assert regions.num_enabled == 3
    assert [i for i, _ in regions.enabled()] == [1, 2, 3]
    assert regions.match(Partition.DATA, 12)[0] == 1
    assert regions.match(Partition.DATA, 5)[0] == 2
    assert regions.match(Partition.INFO, 12)[0] == 3
    assert regions.match(Partition.DATA, 40) is None


def test_operation_str():
    op = FlashOperation(FlashOp.PROGRAM, Partition.INFO, 0x100, 4)
    assert str(op) == "Program(Info @0x00000100, 4 words)"
    erase = FlashOperation(FlashOp.ERASE, address=0x800, erase_type=EraseType.BANK)
    assert str(erase) == "Erase(Data @0x00000800, Bank)"


def test_operation_kind_flags():
    op = FlashOperation(FlashOp.READ)
    assert op.is_read and not op.is_program and not op.is_erase


def test_op_to_dict():
    erase = FlashOperation(FlashOp.ERASE, address=16, erase_type=EraseType.PAGE)
    assert op_to_dict(erase) == {
        'kind': 'Erase',
        'partition': 'Data',
        'address': 16,
        'num_words': 0,
        'erase_type': 'Page',
    }


def test_region_to_dict():
    d = region_to_dict(_region(3, 2, Partition.INFO))
    assert d['partition'] == 'Info'
    assert d['start_page'] == 3
    assert d['enabled'] is True


def test_bkdr_init_parse():
    assert BkdrInit.parse("randomize") is BkdrInit.RANDOMIZE
    assert BkdrInit.parse(BkdrInit.SET_BLANK) is BkdrInit.SET_BLANK
    assert BkdrInit.parse(0) is BkdrInit.INVALIDATE
    with pytest.raises(ValueError):
        BkdrInit.parse("zero")
    with pytest.raises(ValueError):
        BkdrInit.parse(9)
