#
# Flash Ctrl DV - Functional Coverage Collection
#
# Copyright (c) 2026 Shareef Jalloq
# SPDX-License-Identifier: BSD-2-Clause
#

"""
Functional coverage collection for flash controller stimulus.

Tracks which region shapes, policies and operation parameter combinations
have been exercised to identify gaps.

Usage:
    cov = CoverageCollector("rand_ops")
    cov.sample_region(region)
    cov.sample_op(op, region_hit=True)
    print(cov.report())
    cov.save("coverage.json")
"""

from collections import defaultdict
from typing import Any, Dict, Optional, Set
import json

from flash_ctrl_dv.common.types import (
    BankErasePolicy,
    DefaultRegionPolicy,
    FlashOperation,
    MemoryProtectionRegion,
)


class CoverageCollector:
    """Collects functional coverage data."""

    def __init__(self, name: str = "default"):
        self.name = name
        self.coverpoints: Dict[str, Dict[Any, int]] = defaultdict(lambda: defaultdict(int))
        self.crosses: Dict[str, Set[tuple]] = defaultdict(set)

    def sample(self, coverpoint: str, value: Any):
        """Sample a single coverpoint."""
        self.coverpoints[coverpoint][value] += 1

    def sample_cross(self, name: str, *values):
        """Sample a cross-coverage point (multiple values together)."""
        self.crosses[name].add(tuple(values))

    def sample_region(self, region: MemoryProtectionRegion):
        """Sample coverpoints for one enabled protection region."""
        perms = ("R" if region.read_en else "-") + \
                ("P" if region.program_en else "-") + \
                ("E" if region.erase_en else "-")
        self.sample("region_partition", region.partition.label)
        self.sample("region_perms", perms)
        self.sample("region_size", self._pages_to_bin(region.num_pages))
        self.sample_cross("region_perms_x_partition", perms, region.partition.label)

    def sample_policy(self, default: DefaultRegionPolicy, bank: BankErasePolicy):
        """Sample default region and bank erase policy coverpoints."""
        self.sample("default_read_en", default.read_en)
        self.sample("default_program_en", default.program_en)
        self.sample("default_erase_en", default.erase_en)
        for i, en in enumerate(bank.bank_erase_en):
            self.sample(f"bank{i}_erase_en", en)

    def sample_op(self, op: FlashOperation, region_hit: Optional[bool] = None,
                  flash_size_bytes: Optional[int] = None):
        """
        Sample all standard coverpoints for an operation.

        Args:
            op: The generated operation
            region_hit: Whether an enabled region covers the target page
            flash_size_bytes: Enables address-range binning when given
        """
        kind = op.kind.label
        prefix = kind.lower()

        self.sample("op_kind", kind)
        self.sample(f"{prefix}_partition", op.partition.label)
        self.sample_cross("kind_x_partition", kind, op.partition.label)

        if flash_size_bytes:
            addr_bin = self._addr_to_bin(op.address, flash_size_bytes)
            self.sample(f"{prefix}_addr_range", addr_bin)

        if op.is_erase:
            granularity = op.erase_type.label
            self.sample("erase_type", granularity)
            self.sample_cross("erase_type_x_partition", granularity, op.partition.label)
        else:
            len_bin = self._length_to_bin(op.num_words)
            self.sample(f"{prefix}_length", len_bin)
            self.sample_cross(f"{prefix}_len_x_partition", len_bin, op.partition.label)

        if region_hit is not None:
            self.sample(f"{prefix}_region_hit", region_hit)
            self.sample_cross("kind_x_region_hit", kind, region_hit)

    def _addr_to_bin(self, addr: int, flash_size_bytes: int) -> str:
        """Bin address into quarters of the flash."""
        quarter = min(4 * addr // flash_size_bytes, 3)
        return f"Q{quarter}"

    def _length_to_bin(self, num_words: int) -> str:
        """Bin word count into ranges."""
        if num_words == 1:
            return "1W"
        elif num_words == 2:
            return "2W"
        elif num_words <= 4:
            return "3-4W"
        elif num_words <= 16:
            return "5-16W"
        elif num_words <= 64:
            return "17-64W"
        else:
            return "65+W"

    def _pages_to_bin(self, num_pages: int) -> str:
        """Bin region size into ranges."""
        if num_pages == 1:
            return "1P"
        elif num_pages <= 4:
            return "2-4P"
        elif num_pages <= 32:
            return "5-32P"
        else:
            return "33+P"

    def get_hits(self, coverpoint: str) -> int:
        """Get total hits for a coverpoint."""
        return sum(self.coverpoints[coverpoint].values())

    def report(self) -> str:
        """Generate human-readable coverage report."""
        lines = [
            "=" * 60,
            f"Coverage Report: {self.name}",
            "=" * 60,
        ]

        # Summary
        total_samples = sum(
            sum(v.values()) for v in self.coverpoints.values()
        )
        total_bins = sum(len(v) for v in self.coverpoints.values())
        lines.append(f"Total samples: {total_samples}, Unique bins: {total_bins}")
        lines.append("")

        # Coverpoints
        for cp in sorted(self.coverpoints.keys()):
            values = self.coverpoints[cp]
            total_hits = sum(values.values())
            unique_bins = len(values)
            lines.append(f"{cp}:")
            lines.append(f"  Bins: {unique_bins}, Samples: {total_hits}")

            # Show distribution (top values)
            sorted_vals = sorted(values.items(), key=lambda x: -x[1])
            for val, count in sorted_vals[:8]:
                pct = (count / total_hits) * 100 if total_hits > 0 else 0
                lines.append(f"    {val}: {count} ({pct:.1f}%)")

            if len(sorted_vals) > 8:
                lines.append(f"    ... and {len(sorted_vals) - 8} more")
            lines.append("")

        # Cross coverage
        if self.crosses:
            lines.append("Cross Coverage:")
            for name, combinations in sorted(self.crosses.items()):
                lines.append(f"  {name}: {len(combinations)} combinations")

        lines.append("=" * 60)
        return "\n".join(lines)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'name': self.name,
            'coverpoints': {k: {str(kk): vv for kk, vv in v.items()}
                            for k, v in self.coverpoints.items()},
            'crosses': {k: sorted([list(t) for t in v], key=str)
                        for k, v in self.crosses.items()},
        }

    def save(self, filename: str):
        """Save coverage to JSON file."""
        with open(filename, 'w') as f:
            json.dump(self.to_dict(), f, indent=2)

    def load(self, filename: str):
        """Load coverage from JSON file (accumulates into existing bins)."""
        with open(filename) as f:
            data = json.load(f)

        for cp, values in data.get('coverpoints', {}).items():
            for val, count in values.items():
                # Bins are saved as strings; booleans are the only non-string bins
                if val in ('True', 'False'):
                    val = val == 'True'
                self.coverpoints[cp][val] += count

        for name, combinations in data.get('crosses', {}).items():
            for combo in combinations:
                self.crosses[name].add(tuple(combo))


# Global coverage instance for easy access
_global_coverage: Optional[CoverageCollector] = None


def get_coverage(name: str = "flash_ctrl") -> CoverageCollector:
    """Get or create global coverage collector."""
    global _global_coverage
    if _global_coverage is None:
        _global_coverage = CoverageCollector(name)
    return _global_coverage
