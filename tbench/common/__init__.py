#
# Flash Ctrl DV - Common Testbench Infrastructure
#
# Copyright (c) 2026 Shareef Jalloq
# SPDX-License-Identifier: BSD-2-Clause
#

"""
Common cocotb infrastructure for the flash controller testbench.

This package provides:
- FlashCtrlBFM: Front-door CSR model of the controller interface
- SimFlashBackdoor: Backdoor access to the simulated flash arrays
"""

from tbench.common.flash_bfm import FlashCtrlBFM, SimFlashBackdoor

__all__ = [
    'FlashCtrlBFM',
    'SimFlashBackdoor',
]
