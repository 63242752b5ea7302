#
# Flash Ctrl DV - Reference Models
#
# Copyright (c) 2026 Shareef Jalloq
# SPDX-License-Identifier: BSD-2-Clause
#
# Pure-Python controller and backdoor models. No simulator needed.
#

from flash_ctrl_dv.model.bkdr import FlashBackdoor, erase_word_range
from flash_ctrl_dv.model.ctrl import FlashCtrlModel

__all__ = [
    'FlashBackdoor',
    'FlashCtrlModel',
    'erase_word_range',
]
