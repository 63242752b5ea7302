#
# Flash Ctrl DV - Weighted Distributions
#
# Copyright (c) 2026 Shareef Jalloq
# SPDX-License-Identifier: BSD-2-Clause
#

"""
Discrete weighted sampling.

A Dist is a table of (value_or_range, weight) entries sampled with a single
cumulative-weight draw. A range entry carries its weight as a whole and
returns a uniform member, like a SystemVerilog `[lo:hi] :/ w` item.

Usage:
    size = Dist([(range(1, 5), 50), (range(5, 33), 40), (range(33, 257), 10)])
    n = size.sample(rng)

    if bernoulli(rng, cfg.region_read_en_pct):
        ...
"""

import random
from typing import Any, Iterable, List, Tuple


class Dist:
    """Weighted table of values and ranges."""

    def __init__(self, entries: Iterable[Tuple[Any, float]]):
        self.entries: List[Tuple[Any, float]] = []
        for value, weight in entries:
            if weight < 0:
                raise ValueError(f"Negative weight {weight} for {value!r}")
            if isinstance(value, range) and len(value) == 0:
                if weight:
                    raise ValueError(f"Empty range {value!r} carries weight {weight}")
                continue
            self.entries.append((value, weight))

        self.total = sum(w for _, w in self.entries)
        if self.total <= 0:
            raise ValueError("Distribution has no outcome with non-zero weight")

    def sample(self, rng: random.Random) -> Any:
        r = rng.random() * self.total
        cumulative = 0.0
        chosen = None
        for value, weight in self.entries:
            if weight == 0:
                continue
            chosen = value
            cumulative += weight
            if r < cumulative:
                break
        # Float round-off lands on the last weighted entry
        if isinstance(chosen, range):
            return rng.choice(chosen)
        return chosen

    def __repr__(self) -> str:
        return f"Dist({self.entries!r})"


def bernoulli(rng: random.Random, pct: float) -> bool:
    """True with probability pct/100."""
    return Dist([(True, pct), (False, 100 - pct)]).sample(rng)


def pct_choice(rng: random.Random, pct: float, if_hit: Any, otherwise: Any) -> Any:
    """Two-outcome weighted draw: if_hit with probability pct/100."""
    return Dist([(if_hit, pct), (otherwise, 100 - pct)]).sample(rng)
