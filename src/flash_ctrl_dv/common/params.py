#
# Flash Ctrl DV - Hardware Parameters
#
# Copyright (c) 2026 Shareef Jalloq
# SPDX-License-Identifier: BSD-2-Clause
#
# Geometry of the flash macro behind the controller. Generators take these
# as an explicit argument; nothing in the package hard-codes a geometry.
#
# IMPORTANT: This module must have NO simulator dependencies (no cocotb).
#

from dataclasses import dataclass, fields
from typing import Any, Dict

from flash_ctrl_dv.errors import ConfigError


# =============================================================================
# Default Geometry
# =============================================================================

DEFAULT_NUM_BANKS           = 2
DEFAULT_PAGES_PER_BANK      = 256
DEFAULT_BYTES_PER_PAGE      = 2048
DEFAULT_BUS_WORD_BYTES      = 4
DEFAULT_NUM_REGIONS         = 8
DEFAULT_FIFO_DEPTH          = 16


@dataclass(frozen=True)
class FlashParams:
    """Flash geometry and controller sizing."""

    num_banks: int = DEFAULT_NUM_BANKS
    pages_per_bank: int = DEFAULT_PAGES_PER_BANK
    bytes_per_page: int = DEFAULT_BYTES_PER_PAGE
    bus_word_bytes: int = DEFAULT_BUS_WORD_BYTES
    num_regions: int = DEFAULT_NUM_REGIONS
    fifo_depth: int = DEFAULT_FIFO_DEPTH

    def __post_init__(self):
        for f in fields(self):
            value = getattr(self, f.name)
            if not isinstance(value, int) or isinstance(value, bool) or value < 1:
                raise ConfigError(f"{f.name} must be a positive integer, got {value!r}")
        if self.bytes_per_page % self.bus_word_bytes:
            raise ConfigError(
                f"bytes_per_page ({self.bytes_per_page}) is not a multiple of "
                f"bus_word_bytes ({self.bus_word_bytes})"
            )

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "FlashParams":
        known = {f.name for f in fields(cls)}
        unknown = set(data) - known
        if unknown:
            raise ConfigError(f"Unknown flash parameter(s): {', '.join(sorted(unknown))}")
        return cls(**data)

    # -------------------------------------------------------------------------
    # Derived sizes
    # -------------------------------------------------------------------------

    @property
    def total_pages(self) -> int:
        return self.num_banks * self.pages_per_bank

    @property
    def bytes_per_bank(self) -> int:
        return self.pages_per_bank * self.bytes_per_page

    @property
    def flash_size_bytes(self) -> int:
        return self.total_pages * self.bytes_per_page

    @property
    def words_per_page(self) -> int:
        return self.bytes_per_page // self.bus_word_bytes

    @property
    def total_bus_words(self) -> int:
        return self.flash_size_bytes // self.bus_word_bytes

    @property
    def max_address_offset_bits(self) -> int:
        """Bits needed to address every byte of the flash."""
        return (self.flash_size_bytes - 1).bit_length()

    @property
    def bus_word_mask(self) -> int:
        """All-ones bus word, i.e. the erased pattern."""
        return (1 << (8 * self.bus_word_bytes)) - 1

    # -------------------------------------------------------------------------
    # Address helpers
    # -------------------------------------------------------------------------

    def word_of(self, address: int) -> int:
        return address // self.bus_word_bytes

    def page_of(self, address: int) -> int:
        return address // self.bytes_per_page

    def bank_of(self, address: int) -> int:
        return address // self.bytes_per_bank

    def page_word_range(self, page: int) -> range:
        start = page * self.words_per_page
        return range(start, start + self.words_per_page)

    def bank_word_range(self, bank: int) -> range:
        words_per_bank = self.pages_per_bank * self.words_per_page
        start = bank * words_per_bank
        return range(start, start + words_per_bank)


DEFAULT_PARAMS = FlashParams()
