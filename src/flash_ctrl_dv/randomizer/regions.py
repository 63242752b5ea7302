#
# Flash Ctrl DV - Protection Region Generator
#
# Copyright (c) 2026 Shareef Jalloq
# SPDX-License-Identifier: BSD-2-Clause
#
# Two-phase sampling: the enable mask is solved first, then the fields of
# each enabled slot are drawn conditioned on it.
#
# Non-overlap placement is a bounded rejection sampler. Each enabled region
# gets cfg.region_placement_retries draws to land clear of the regions
# already placed; running out raises ConstraintUnsatisfiable. Placement
# order leaks into slot order, so the placed regions are shuffled before
# they are assigned to slots.
#

import random
from typing import List

from flash_ctrl_dv.common.types import MemoryProtectionRegion, Partition, RegionSet
from flash_ctrl_dv.config import DistributionConfig
from flash_ctrl_dv.errors import ConstraintUnsatisfiable
from .dist import bernoulli, pct_choice


def generate_regions(rng: random.Random, cfg: DistributionConfig,
                     total_pages: int, num_slots: int) -> RegionSet:
    """
    Sample a protection region set.

    Args:
        rng: Seeded random source
        cfg: Distribution config
        total_pages: Pages in the region address space
        num_slots: Number of region slots in the controller

    Returns:
        RegionSet with exactly cfg.num_enabled_regions enabled slots
    """
    num_enabled = cfg.num_enabled_regions
    if num_enabled > num_slots:
        raise ConstraintUnsatisfiable(
            f"num_enabled_regions={num_enabled} exceeds the {num_slots} region slots")
    if num_enabled and total_pages < 1:
        raise ConstraintUnsatisfiable("No pages to place regions in")
    if not cfg.allow_region_overlap and num_enabled > total_pages:
        raise ConstraintUnsatisfiable(
            f"{num_enabled} disjoint regions cannot fit in {total_pages} pages")

    mask = sorted(rng.sample(range(num_slots), num_enabled))

    if cfg.allow_region_overlap:
        placed = [random_region(rng, cfg, total_pages) for _ in mask]
    else:
        placed = _place_disjoint(rng, cfg, total_pages, num_enabled)
        rng.shuffle(placed)

    regions = [MemoryProtectionRegion() for _ in range(num_slots)]
    for slot, region in zip(mask, placed):
        regions[slot] = region
    return RegionSet(regions)


def random_region(rng: random.Random, cfg: DistributionConfig,
                  total_pages: int) -> MemoryProtectionRegion:
    """Sample the fields of one enabled region."""
    start_page = rng.randint(0, total_pages - 1)
    max_pages = min(cfg.region_max_pages, total_pages - start_page)
    return MemoryProtectionRegion(
        enabled=True,
        read_en=bernoulli(rng, cfg.region_read_en_pct),
        program_en=bernoulli(rng, cfg.region_program_en_pct),
        erase_en=bernoulli(rng, cfg.region_erase_en_pct),
        partition=pct_choice(rng, cfg.region_info_partition_pct, Partition.INFO, Partition.DATA),
        start_page=start_page,
        num_pages=rng.randint(1, max_pages),
    )


def _place_disjoint(rng: random.Random, cfg: DistributionConfig,
                    total_pages: int, count: int) -> List[MemoryProtectionRegion]:
    placed: List[MemoryProtectionRegion] = []
    used = 0
    for n in range(count):
        # Leave at least one free page for each region still to be placed
        budget = total_pages - (count - n - 1)
        for _ in range(cfg.region_placement_retries):
            candidate = random_region(rng, cfg, total_pages)
            if used + candidate.num_pages > budget:
                continue
            if not any(candidate.overlaps(other) for other in placed):
                placed.append(candidate)
                used += candidate.num_pages
                break
        else:
            raise ConstraintUnsatisfiable(
                f"Could not place non-overlapping region {n + 1} of {count} in "
                f"{total_pages} pages after {cfg.region_placement_retries} attempts"
            )
    return placed
