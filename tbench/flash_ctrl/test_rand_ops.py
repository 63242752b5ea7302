#
# Flash Ctrl DV - Randomized Operation Tests
#
# Copyright (c) 2026 Shareef Jalloq
# SPDX-License-Identifier: BSD-2-Clause
#

"""
Randomized configure/operate/check tests for the flash controller.

Each test runs the FlashSequencer against the RTL through the CSR BFM, with
the simulated flash arrays as the backdoor. Any check mismatch or timeout
fails the test; the seed is logged for reproduction.

Run with:
    make
    make COCOTB_TEST_FILTER=test_rand_ops_erase_heavy
    RANDOM_SEED=12345 N_CONFIGS=8 make              # Reproducible
    FLASH_CONFIG=runs/small.yaml make               # Custom policy/geometry
"""

import os
import sys
import atexit

import cocotb
from cocotb.clock import Clock
from cocotb.triggers import ClockCycles

# Add repository root to path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.dirname(os.path.abspath(__file__)))))

from tbench.common.flash_bfm import FlashCtrlBFM, SimFlashBackdoor
from flash_ctrl_dv.common.params import DEFAULT_PARAMS
from flash_ctrl_dv.config import get_preset, load_config
from flash_ctrl_dv.coverage import get_coverage
from flash_ctrl_dv.randomizer import FlashRandomizer
from flash_ctrl_dv.sequencer import FlashSequencer


# =============================================================================
# Configuration
# =============================================================================

# Get seed from environment for reproducibility
RANDOM_SEED = int(os.environ.get('RANDOM_SEED', '42'))

# Outer iterations per test; sampled from the policy if unset
N_CONFIGS = int(os.environ['N_CONFIGS']) if 'N_CONFIGS' in os.environ else None

# Optional YAML run configuration (overrides the per-test preset)
FLASH_CONFIG = os.environ.get('FLASH_CONFIG')


# =============================================================================
# Utilities
# =============================================================================

def log_seed(dut, seed: int, test_name: str):
    """Log seed for reproduction of failures."""
    dut._log.info(f"{'='*60}")
    dut._log.info(f"Test: {test_name}")
    dut._log.info(f"Random seed: {seed}")
    dut._log.info(f"To reproduce: RANDOM_SEED={seed} make COCOTB_TEST_FILTER={test_name}")
    dut._log.info(f"{'='*60}")


async def run_sequence(dut, test_name: str, preset: str):
    """Reset the DUT and run one randomized sequence."""
    seed = RANDOM_SEED
    if FLASH_CONFIG:
        cfg, params = load_config(FLASH_CONFIG)
    else:
        cfg, params = get_preset(preset), DEFAULT_PARAMS

    cocotb.start_soon(Clock(dut.clk, 10, unit="ns").start())

    bfm = FlashCtrlBFM(dut, params=params)
    await bfm.reset()

    log_seed(dut, seed, test_name)

    rand = FlashRandomizer(seed=seed, cfg=cfg, params=params)
    bkdr = SimFlashBackdoor(dut, params=params, seed=seed)
    seq = FlashSequencer(bfm, bkdr, randomizer=rand, coverage=get_coverage(), log=dut._log)

    fifo = rand.random_fifo_thresholds()
    dut._log.info(f"FIFO watermarks: prog={fifo.prog} rd={fifo.rd}")
    await bfm.apply_fifo_thresholds(fifo)

    summary = await seq.run(num_configs=N_CONFIGS)

    dut._log.info(f"{summary.num_ops} operations over {summary.num_configs} configs: "
                  f"{summary.ops_by_kind}")
    await ClockCycles(dut.clk, 10)


# =============================================================================
# Tests
# =============================================================================

@cocotb.test()
async def test_rand_ops(dut):
    """
    Randomized operations with the default policy.

    Exercises:
    - Read/program/erase mix on both partitions
    - Fresh region, default and bank erase configuration per outer iteration
    """
    await run_sequence(dut, "test_rand_ops", "default")


@cocotb.test()
async def test_rand_ops_no_overlap(dut):
    """All region slots enabled, pairwise disjoint."""
    await run_sequence(dut, "test_rand_ops_no_overlap", "no_overlap")


@cocotb.test()
async def test_rand_ops_erase_heavy(dut):
    """Erase-dominated mix with bank erase always enabled."""
    await run_sequence(dut, "test_rand_ops_erase_heavy", "erase_heavy")


@cocotb.test()
async def test_rand_ops_stress(dut):
    """Long sequences, overlapping regions and multi-FIFO-depth transfers."""
    await run_sequence(dut, "test_rand_ops_stress", "stress")


# =============================================================================
# Coverage Reporting
# =============================================================================

COVERAGE_JSON = "coverage_rand_ops.json"
COVERAGE_REPORT = "coverage_rand_ops.txt"
RESET_COVERAGE = os.environ.get('RESET_COVERAGE', '0') == '1'


def load_existing_coverage():
    """Load existing coverage from previous runs to accumulate results."""
    if RESET_COVERAGE:
        if os.path.exists(COVERAGE_JSON):
            os.remove(COVERAGE_JSON)
            print(f"Reset coverage: removed {COVERAGE_JSON}")
        return

    cov = get_coverage()
    if os.path.exists(COVERAGE_JSON):
        cov.load(COVERAGE_JSON)
        print(f"Loaded existing coverage from {COVERAGE_JSON}")


def save_coverage():
    """Save coverage data and report at end of test run."""
    try:
        cov = get_coverage()

        # Save raw data to JSON (for merging with future runs)
        cov.save(COVERAGE_JSON)

        with open(COVERAGE_REPORT, 'w') as f:
            f.write(cov.report())

        print(f"Coverage saved to {COVERAGE_JSON}")
        print(f"Coverage report written to {COVERAGE_REPORT}")
    except OSError as e:
        print(f"Failed to save coverage: {e}")


# Load any existing coverage at module import time
load_existing_coverage()

atexit.register(save_coverage)
