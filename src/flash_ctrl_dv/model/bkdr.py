#
# Flash Ctrl DV - Backdoor Memory Model
#
# Copyright (c) 2026 Shareef Jalloq
# SPDX-License-Identifier: BSD-2-Clause
#

"""
Backdoor view of the flash array.

Stores one sparse word map per partition. Unwritten words resolve according
to the partition's init mode:

    INVALIDATE  -> None (unknown, never matches an expected value)
    RANDOMIZE   -> a random word, drawn on first access and then kept
    SET_BLANK   -> all-ones

All accesses are zero-time. The controller model mutates the same arrays
while executing operations, so the sequencer must not touch them until the
outstanding operation has completed.
"""

import random
from typing import Dict, List, Optional, Sequence

from flash_ctrl_dv.common.params import FlashParams, DEFAULT_PARAMS
from flash_ctrl_dv.common.types import BkdrInit, EraseType, FlashOperation, Partition


def erase_word_range(params: FlashParams, op: FlashOperation) -> range:
    """Words cleared by an erase: the page or bank holding op.address."""
    if op.erase_type == EraseType.BANK:
        return params.bank_word_range(params.bank_of(op.address))
    return params.page_word_range(params.page_of(op.address))


class FlashBackdoor:
    """Sparse backdoor memory model for both flash partitions."""

    def __init__(self, params: Optional[FlashParams] = None, seed: Optional[int] = None):
        self.params = params or DEFAULT_PARAMS
        self.rng = random.Random(seed)
        self._mem: Dict[Partition, Dict[int, Optional[int]]] = {p: {} for p in Partition}
        self._mode: Dict[Partition, BkdrInit] = {p: BkdrInit.INVALIDATE for p in Partition}

    def init(self, partition: Partition, mode: BkdrInit) -> None:
        """Reinitialize a whole partition."""
        self._mem[partition].clear()
        self._mode[partition] = BkdrInit.parse(mode)

    def mode(self, partition: Partition) -> BkdrInit:
        return self._mode[partition]

    # -------------------------------------------------------------------------
    # Word access
    # -------------------------------------------------------------------------

    def _check_range(self, word: int, count: int) -> None:
        if word < 0 or word + count > self.params.total_bus_words:
            raise IndexError(
                f"Words {word}..{word + count - 1} outside 0..{self.params.total_bus_words - 1}")

    def _resolve(self, partition: Partition, word: int) -> Optional[int]:
        mem = self._mem[partition]
        if word in mem:
            return mem[word]
        mode = self._mode[partition]
        if mode == BkdrInit.SET_BLANK:
            return self.params.bus_word_mask
        if mode == BkdrInit.RANDOMIZE:
            value = self.rng.getrandbits(8 * self.params.bus_word_bytes)
            mem[word] = value
            return value
        return None

    def read_words(self, partition: Partition, word: int, count: int) -> List[Optional[int]]:
        self._check_range(word, count)
        return [self._resolve(partition, word + i) for i in range(count)]

    def write_words(self, partition: Partition, word: int, values: Sequence[Optional[int]]) -> None:
        self._check_range(word, len(values))
        mem = self._mem[partition]
        mask = self.params.bus_word_mask
        for i, value in enumerate(values):
            mem[word + i] = None if value is None else value & mask

    # -------------------------------------------------------------------------
    # Operation-scoped access (collaborator interface)
    # -------------------------------------------------------------------------

    def write(self, op: FlashOperation, words: Sequence[int]) -> None:
        """Fill the words targeted by op, starting at its word-aligned address."""
        self.write_words(op.partition, self.params.word_of(op.address), words)

    def read(self, op: FlashOperation) -> List[Optional[int]]:
        return self.read_words(op.partition, self.params.word_of(op.address), op.num_words)

    def read_check(self, op: FlashOperation, expected: Sequence[int]) -> bool:
        """True when the words targeted by op equal expected."""
        return self.read(op) == list(expected)

    def erase_check(self, op: FlashOperation) -> bool:
        """True when every word of the erased page or bank reads all-ones."""
        blank = self.params.bus_word_mask
        words = erase_word_range(self.params, op)
        actual = self.read_words(op.partition, words.start, len(words))
        return all(w == blank for w in actual)
