#
# Flash Ctrl DV - Shared Test Fixtures
#
# Copyright (c) 2026 Shareef Jalloq
# SPDX-License-Identifier: BSD-2-Clause
#

import random

import pytest

from flash_ctrl_dv.common.params import FlashParams
from flash_ctrl_dv.model import FlashBackdoor, FlashCtrlModel


# 2 banks x 128 pages x 256 bytes: small enough to erase a bank quickly
SMALL_PARAMS = FlashParams(num_banks=2, pages_per_bank=128, bytes_per_page=256)


@pytest.fixture
def rng():
    return random.Random(1234)


@pytest.fixture
def params():
    return SMALL_PARAMS


@pytest.fixture
def bkdr(params):
    return FlashBackdoor(params, seed=99)


@pytest.fixture
def ctrl(bkdr):
    return FlashCtrlModel(bkdr)
