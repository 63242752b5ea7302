#
# Flash Ctrl DV - Stimulus Data Model
#
# Copyright (c) 2026 Shareef Jalloq
# SPDX-License-Identifier: BSD-2-Clause
#
# Records produced by the randomizer and consumed by the sequencer and the
# controller/backdoor collaborators.
#
# IMPORTANT: This module must have NO simulator dependencies (no cocotb).
#

from dataclasses import dataclass, asdict
from enum import IntEnum
from typing import Any, Dict, Iterator, List, Optional, Tuple


# =============================================================================
# Enums
# =============================================================================

class Partition(IntEnum):
    """Flash address space."""
    DATA = 0
    INFO = 1

    @property
    def label(self) -> str:
        return self.name.capitalize()


class FlashOp(IntEnum):
    """Controller operation kind."""
    READ    = 0
    PROGRAM = 1
    ERASE   = 2

    @property
    def label(self) -> str:
        return self.name.capitalize()


class EraseType(IntEnum):
    """Erase granularity."""
    PAGE = 0
    BANK = 1

    @property
    def label(self) -> str:
        return self.name.capitalize()


class BkdrInit(IntEnum):
    """Backdoor initialization mode for a whole partition."""
    INVALIDATE = 0
    RANDOMIZE  = 1
    SET_BLANK  = 2

    @classmethod
    def parse(cls, value) -> "BkdrInit":
        """Accept an enum member, its value, or a case-insensitive name."""
        if isinstance(value, cls):
            return value
        if isinstance(value, str):
            key = value.strip().upper().replace("-", "_")
            try:
                return cls[key]
            except KeyError:
                raise ValueError(f"Unknown backdoor init mode: {value!r}") from None
        return cls(value)


# =============================================================================
# Region Configuration
# =============================================================================

@dataclass
class MemoryProtectionRegion:
    """Page-range scoped permission record."""
    enabled: bool = False
    read_en: bool = False
    program_en: bool = False
    erase_en: bool = False
    partition: Partition = Partition.DATA
    start_page: int = 0
    num_pages: int = 1

    @property
    def end_page(self) -> int:
        """First page past the region."""
        return self.start_page + self.num_pages

    def contains(self, partition: Partition, page: int) -> bool:
        return (self.enabled and self.partition == partition
                and self.start_page <= page < self.end_page)

    def overlaps(self, other: "MemoryProtectionRegion") -> bool:
        """Page-range overlap, regardless of partition."""
        return self.start_page < other.end_page and other.start_page < self.end_page

    def __str__(self) -> str:
        if not self.enabled:
            return "MpRegion(disabled)"
        perms = ("R" if self.read_en else "-") + \
                ("P" if self.program_en else "-") + \
                ("E" if self.erase_en else "-")
        return (f"MpRegion({self.partition.label} pages "
                f"{self.start_page}-{self.end_page - 1}, {perms})")


class RegionSet:
    """Fixed-size ordered collection of protection region slots."""

    def __init__(self, regions: List[MemoryProtectionRegion]):
        self.regions = list(regions)

    def __len__(self) -> int:
        return len(self.regions)

    def __iter__(self) -> Iterator[MemoryProtectionRegion]:
        return iter(self.regions)

    def __getitem__(self, index: int) -> MemoryProtectionRegion:
        return self.regions[index]

    def enabled(self) -> List[Tuple[int, MemoryProtectionRegion]]:
        """(slot index, region) for every enabled slot, in slot order."""
        return [(i, r) for i, r in enumerate(self.regions) if r.enabled]

    @property
    def num_enabled(self) -> int:
        return sum(1 for r in self.regions if r.enabled)

    def match(self, partition: Partition, page: int) -> Optional[Tuple[int, MemoryProtectionRegion]]:
        """Effective region for a page: the lowest enabled slot that covers it."""
        for i, region in enumerate(self.regions):
            if region.contains(partition, page):
                return i, region
        return None


@dataclass
class DefaultRegionPolicy:
    """Permissions applied where no enabled region matches."""
    read_en: bool = False
    program_en: bool = False
    erase_en: bool = False


@dataclass
class BankErasePolicy:
    """Per-bank whole-bank erase enables."""
    bank_erase_en: Tuple[bool, ...] = ()

    def __getitem__(self, bank: int) -> bool:
        return self.bank_erase_en[bank]

    def __len__(self) -> int:
        return len(self.bank_erase_en)


@dataclass
class FifoThresholds:
    """Program/read FIFO watermark levels."""
    prog: int = 0
    rd: int = 0


# =============================================================================
# Operations
# =============================================================================

@dataclass
class FlashOperation:
    """A single controller operation."""
    kind: FlashOp
    partition: Partition = Partition.DATA
    address: int = 0
    num_words: int = 0
    erase_type: Optional[EraseType] = None

    @property
    def is_read(self) -> bool:
        return self.kind == FlashOp.READ

    @property
    def is_program(self) -> bool:
        return self.kind == FlashOp.PROGRAM

    @property
    def is_erase(self) -> bool:
        return self.kind == FlashOp.ERASE

    def __str__(self) -> str:
        base = f"{self.kind.label}({self.partition.label} @0x{self.address:08X}"
        if self.is_erase:
            granularity = self.erase_type.label if self.erase_type is not None else "?"
            return f"{base}, {granularity})"
        return f"{base}, {self.num_words} words)"


# Payload words, one int per bus word. Empty for erase.
OperationPayload = List[int]


def op_to_dict(op: FlashOperation) -> Dict[str, Any]:
    """Convert an operation to a JSON-friendly dictionary."""
    return {
        'kind': op.kind.label,
        'partition': op.partition.label,
        'address': op.address,
        'num_words': op.num_words,
        'erase_type': op.erase_type.label if op.erase_type is not None else None,
    }


def region_to_dict(region: MemoryProtectionRegion) -> Dict[str, Any]:
    """Convert a region to a JSON-friendly dictionary."""
    d = asdict(region)
    d['partition'] = region.partition.label
    return d
