#
# Flash Ctrl DV - Common Definitions
#
# Copyright (c) 2026 Shareef Jalloq
# SPDX-License-Identifier: BSD-2-Clause
#
# Shared geometry and data model used by the randomizer, sequencer, reference
# model and the cocotb testbench.
#

from .params import (
    FlashParams,
    DEFAULT_PARAMS,
)
from .types import (
    # Enums
    Partition,
    FlashOp,
    EraseType,
    BkdrInit,
    # Data structures
    MemoryProtectionRegion,
    RegionSet,
    DefaultRegionPolicy,
    BankErasePolicy,
    FifoThresholds,
    FlashOperation,
    OperationPayload,
    # Conversion helpers
    op_to_dict,
    region_to_dict,
)

__all__ = [
    "FlashParams",
    "DEFAULT_PARAMS",
    "Partition",
    "FlashOp",
    "EraseType",
    "BkdrInit",
    "MemoryProtectionRegion",
    "RegionSet",
    "DefaultRegionPolicy",
    "BankErasePolicy",
    "FifoThresholds",
    "FlashOperation",
    "OperationPayload",
    "op_to_dict",
    "region_to_dict",
]
