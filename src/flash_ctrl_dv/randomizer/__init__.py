#
# Flash Ctrl DV - Randomizer
#
# Copyright (c) 2026 Shareef Jalloq
# SPDX-License-Identifier: BSD-2-Clause
#

from flash_ctrl_dv.randomizer.dist import Dist, bernoulli, pct_choice
from flash_ctrl_dv.randomizer.regions import generate_regions, random_region
from flash_ctrl_dv.randomizer.policy import generate_policies, generate_fifo_thresholds
from flash_ctrl_dv.randomizer.ops import generate_op, generate_payload, random_op_kind
from flash_ctrl_dv.randomizer.flash_randomizer import FlashRandomizer

__all__ = [
    'Dist',
    'bernoulli',
    'pct_choice',
    'generate_regions',
    'random_region',
    'generate_policies',
    'generate_fifo_thresholds',
    'generate_op',
    'generate_payload',
    'random_op_kind',
    'FlashRandomizer',
]
