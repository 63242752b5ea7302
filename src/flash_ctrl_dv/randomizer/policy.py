#
# Flash Ctrl DV - Default Region and Bank Policy Generator
#
# Copyright (c) 2026 Shareef Jalloq
# SPDX-License-Identifier: BSD-2-Clause
#
# Every field is an independent weighted Bernoulli draw; there are no
# cross-field constraints.
#

import random
from typing import Tuple

from flash_ctrl_dv.common.types import BankErasePolicy, DefaultRegionPolicy, FifoThresholds
from flash_ctrl_dv.config import DistributionConfig
from .dist import bernoulli


def generate_policies(rng: random.Random, cfg: DistributionConfig,
                      num_banks: int) -> Tuple[DefaultRegionPolicy, BankErasePolicy]:
    default = DefaultRegionPolicy(
        read_en=bernoulli(rng, cfg.default_read_en_pct),
        program_en=bernoulli(rng, cfg.default_program_en_pct),
        erase_en=bernoulli(rng, cfg.default_erase_en_pct),
    )
    bank = BankErasePolicy(tuple(
        not bernoulli(rng, cfg.bank_erase_disable_pct) for _ in range(num_banks)
    ))
    return default, bank


def generate_fifo_thresholds(rng: random.Random, fifo_depth: int) -> FifoThresholds:
    """Program/read FIFO watermarks, uniform in [0, fifo_depth - 1]."""
    return FifoThresholds(
        prog=rng.randint(0, fifo_depth - 1),
        rd=rng.randint(0, fifo_depth - 1),
    )
