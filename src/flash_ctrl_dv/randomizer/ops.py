#
# Flash Ctrl DV - Operation and Payload Generators
#
# Copyright (c) 2026 Shareef Jalloq
# SPDX-License-Identifier: BSD-2-Clause
#

import random

from flash_ctrl_dv.common.types import EraseType, FlashOp, FlashOperation, OperationPayload, Partition
from flash_ctrl_dv.config import DistributionConfig
from .dist import Dist, pct_choice


def random_op_kind(rng: random.Random, cfg: DistributionConfig) -> FlashOp:
    """Run policy: pick the next operation kind from the configured weights."""
    return Dist([
        (FlashOp.READ, cfg.read_op_weight),
        (FlashOp.PROGRAM, cfg.program_op_weight),
        (FlashOp.ERASE, cfg.erase_op_weight),
    ]).sample(rng)


def generate_op(rng: random.Random, cfg: DistributionConfig, kind: FlashOp,
                flash_size_bytes: int, bus_word_bytes: int,
                max_address_offset_bits: int) -> FlashOperation:
    """
    Generate one legal operation of the given kind.

    Args:
        rng: Seeded random source
        cfg: Distribution config
        kind: Operation kind chosen by the caller
        flash_size_bytes: Size of each partition's address space
        bus_word_bytes: Bytes per bus word
        max_address_offset_bits: Width of the controller address field

    Returns:
        FlashOperation satisfying the address and word-count bounds
    """
    try:
        kind = FlashOp(kind)
    except ValueError:
        raise ValueError(f"Unsupported operation kind: {kind!r}") from None

    addr_limit = min(flash_size_bytes, 1 << max_address_offset_bits)
    address = rng.randint(0, addr_limit - 1)
    partition = pct_choice(rng, cfg.op_on_info_partition_pct, Partition.INFO, Partition.DATA)

    if kind == FlashOp.ERASE:
        erase_type = pct_choice(rng, cfg.erase_bank_vs_page_pct, EraseType.BANK, EraseType.PAGE)
        return FlashOperation(kind=kind, partition=partition, address=address,
                              num_words=0, erase_type=erase_type)

    # Whole bus words from the word-aligned address to the end of the space
    remaining = flash_size_bytes // bus_word_bytes - address // bus_word_bytes
    num_words = rng.randint(1, min(remaining, cfg.max_words_per_op))
    return FlashOperation(kind=kind, partition=partition, address=address,
                          num_words=num_words)


def generate_payload(rng: random.Random, op: FlashOperation,
                     bus_word_bytes: int) -> OperationPayload:
    """
    Size (and for program, fill) the data buffer for an operation.

    Read buffers are zeroed; the executed read overwrites them.
    """
    if op.is_program:
        return [rng.getrandbits(8 * bus_word_bytes) for _ in range(op.num_words)]
    if op.is_read:
        return [0] * op.num_words
    return []
