#
# Flash Ctrl DV - Host Tools Package
#
# Copyright (c) 2026 Shareef Jalloq
# SPDX-License-Identifier: BSD-2-Clause
#
# Host-side tools for generating stimulus, running the sequencer against the
# reference model and exporting results.
#
# These tools have minimal dependencies (click, rich) and do not require a
# simulator (cocotb).
#

from flash_ctrl_dv.tools.export import (
    record_to_dict,
    export_jsonl,
    export_json,
    export_csv,
    export_history,
)

__all__ = [
    'record_to_dict',
    'export_jsonl',
    'export_json',
    'export_csv',
    'export_history',
]
