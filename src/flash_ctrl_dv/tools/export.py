#
# Flash Ctrl DV - Export Functions
#
# Copyright (c) 2026 Shareef Jalloq
# SPDX-License-Identifier: BSD-2-Clause
#
# Export sequencer history to various formats.
#

import csv
import json
from pathlib import Path
from typing import Any, Dict, Iterable, Optional

from flash_ctrl_dv.common.types import op_to_dict
from flash_ctrl_dv.sequencer import OpRecord


def record_to_dict(record: OpRecord) -> Dict[str, Any]:
    """Convert an executed operation record to a JSON-friendly dictionary."""
    d = {
        'config': record.config_index,
        'op': record.op_index,
    }
    d.update(op_to_dict(record.op))
    d['region_hit'] = record.region_hit
    d['payload'] = [f"0x{w:08x}" for w in record.payload]
    return d


def export_jsonl(
    records: Iterable[OpRecord],
    output: Path,
    pretty: bool = False,
) -> int:
    """
    Export records to JSON Lines format.

    Each record is written as a single JSON object per line.

    Args:
        records: Iterable of records to export
        output: Output file path
        pretty: If True, pretty-print each JSON object

    Returns:
        Number of records exported
    """
    count = 0
    indent = 2 if pretty else None

    with open(output, 'w') as f:
        for rec in records:
            obj = record_to_dict(rec)
            line = json.dumps(obj, indent=indent)
            f.write(line + '\n')
            count += 1

    return count


def export_json(
    records: Iterable[OpRecord],
    output: Path,
    seed: Optional[int] = None,
) -> int:
    """
    Export records to a single JSON document.

    Args:
        records: Iterable of records to export
        output: Output file path
        seed: Run seed, stored alongside the records for reproduction

    Returns:
        Number of records exported
    """
    record_list = [record_to_dict(rec) for rec in records]

    with open(output, 'w') as f:
        json.dump({'seed': seed, 'ops': record_list}, f, indent=2)

    return len(record_list)


def export_csv(
    records: Iterable[OpRecord],
    output: Path,
) -> int:
    """
    Export records to CSV format.

    The payload column holds space-separated hex words.

    Args:
        records: Iterable of records to export
        output: Output file path

    Returns:
        Number of records exported
    """
    fieldnames = [
        'config', 'op', 'kind', 'partition', 'address', 'num_words',
        'erase_type', 'region_hit', 'payload',
    ]

    count = 0
    with open(output, 'w', newline='') as f:
        writer = csv.DictWriter(f, fieldnames=fieldnames)
        writer.writeheader()

        for rec in records:
            row = record_to_dict(rec)
            row['address'] = f"0x{row['address']:08x}"
            row['payload'] = ' '.join(row['payload'])
            writer.writerow(row)
            count += 1

    return count


EXPORTERS = {
    'jsonl': export_jsonl,
    'json': export_json,
    'csv': export_csv,
}


def export_history(
    records: Iterable[OpRecord],
    output: Path,
    format: Optional[str] = None,
    seed: Optional[int] = None,
) -> int:
    """
    Export records, choosing the format from the file suffix if not given.

    Args:
        records: Records to export
        output: Output file path
        format: 'jsonl', 'json' or 'csv'
        seed: Run seed (JSON only)

    Returns:
        Number of records exported
    """
    output = Path(output)
    if format is None:
        format = output.suffix.lstrip('.').lower() or 'jsonl'

    if format not in EXPORTERS:
        raise ValueError(f"Unknown export format: {format}. Available: {', '.join(EXPORTERS)}")

    if format == 'json':
        return export_json(records, output, seed=seed)
    return EXPORTERS[format](records, output)
