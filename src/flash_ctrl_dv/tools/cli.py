#
# Flash Ctrl DV - Command Line Interface
#
# Copyright (c) 2026 Shareef Jalloq
# SPDX-License-Identifier: BSD-2-Clause
#
# Click-based CLI for generating stimulus and running the sequencer against
# the reference model.
#

import asyncio
import json
import logging
import random
from pathlib import Path
from typing import Optional

import click
from rich.console import Console
from rich.logging import RichHandler

from flash_ctrl_dv import __version__
from flash_ctrl_dv.common.params import DEFAULT_PARAMS
from flash_ctrl_dv.common.types import op_to_dict, region_to_dict
from flash_ctrl_dv.config import DEFAULT_DIST, PRESETS, get_preset, load_config
from flash_ctrl_dv.coverage import CoverageCollector
from flash_ctrl_dv.errors import FlashDVError
from flash_ctrl_dv.model import FlashBackdoor, FlashCtrlModel
from flash_ctrl_dv.randomizer import FlashRandomizer
from flash_ctrl_dv.sequencer import FlashSequencer
from .export import EXPORTERS, export_history
from .report import history_table, ops_table, policy_table, presets_table, region_table, summary_panel


def _setup_logging(verbose: bool, console: Console) -> None:
    logger = logging.getLogger("flash_ctrl_dv")
    logger.setLevel(logging.DEBUG if verbose else logging.INFO)
    for handler in [h for h in logger.handlers if isinstance(h, RichHandler)]:
        logger.removeHandler(handler)
    logger.addHandler(RichHandler(console=console, show_path=False))


def _resolve(preset: Optional[str], config: Optional[str]):
    """Load the distribution config and flash geometry from options."""
    if preset and config:
        raise click.UsageError(
            "--preset and --config are mutually exclusive; set 'preset:' in the config file")
    try:
        if config:
            return load_config(config)
        return (get_preset(preset) if preset else DEFAULT_DIST), DEFAULT_PARAMS
    except FlashDVError as e:
        raise click.ClickException(str(e))


COMMON_OPTIONS = [
    click.option('-s', '--seed', type=int, default=None, envvar='RANDOM_SEED',
                 help='Random seed (env RANDOM_SEED). Random if omitted.'),
    click.option('-p', '--preset', type=click.Choice(sorted(PRESETS)), default=None,
                 help='Distribution preset'),
    click.option('-c', '--config', type=click.Path(exists=True, dir_okay=False), default=None,
                 help='YAML run configuration'),
    click.option('-v', '--verbose', is_flag=True, help='Debug logging'),
]


def common_options(f):
    """Options shared by the gen and run commands."""
    for option in reversed(COMMON_OPTIONS):
        f = option(f)
    return f


@click.group()
@click.version_option(version=__version__)
def cli():
    """Flash Ctrl DV - Constrained-Random Flash Stimulus.

    Generates legal randomized protection-region configurations and
    read/program/erase operations, and runs them through the check
    sequencer.
    """
    pass


@cli.command()
def presets():
    """List the built-in distribution presets."""
    Console().print(presets_table(PRESETS))


@cli.command()
@common_options
@click.option('-n', '--configs', default=1, show_default=True, help='Configurations to generate')
@click.option('-o', '--ops', type=int, default=None,
              help='Operations per configuration (sampled if omitted)')
@click.option('-j', '--json', 'json_path', type=click.Path(dir_okay=False), default=None,
              help='Also write the stimulus to a JSON file')
def gen(seed: Optional[int], preset: Optional[str], config: Optional[str], verbose: bool,
        configs: int, ops: Optional[int], json_path: Optional[str]):
    """Generate stimulus without executing it.

    Example:
      flash-rand gen -n 2 --seed 7 --preset no_overlap
    """
    console = Console()
    _setup_logging(verbose, console)
    cfg, params = _resolve(preset, config)
    if seed is None:
        seed = random.randrange(1 << 32)

    rand = FlashRandomizer(seed=seed, cfg=cfg, params=params)
    console.print(f"[bold]Seed:[/] {seed}")

    dump = {'seed': seed, 'configs': []}
    try:
        for i in range(configs):
            regions = rand.random_region_set()
            default, bank = rand.random_policies()
            fifo = rand.random_fifo_thresholds()
            n_ops = ops if ops is not None else rand.random_num_ops()
            op_list = [rand.random_op() for _ in range(n_ops)]

            console.print(region_table(regions, title=f"Config {i}: Protection Regions"))
            console.print(policy_table(default, bank, fifo))
            console.print(ops_table(op_list, title=f"Config {i}: Operations"))

            dump['configs'].append({
                'regions': [region_to_dict(r) for r in regions],
                'default': vars(default),
                'bank_erase_en': list(bank.bank_erase_en),
                'fifo': vars(fifo),
                'ops': [op_to_dict(op) for op in op_list],
            })
    except FlashDVError as e:
        raise click.ClickException(str(e))

    if json_path:
        with open(json_path, 'w') as f:
            json.dump(dump, f, indent=2)
        console.print(f"Stimulus written to {json_path}")


@cli.command()
@common_options
@click.option('-n', '--configs', type=int, default=None,
              help='Configurations to run (sampled if omitted)')
@click.option('-e', '--export', 'export_path', type=click.Path(dir_okay=False), default=None,
              help='Write executed operations to a file')
@click.option('-f', '--format', 'fmt', type=click.Choice(sorted(EXPORTERS)), default=None,
              help='Export format (default: from file extension)')
@click.option('--coverage', 'coverage_path', type=click.Path(dir_okay=False), default=None,
              help='Save coverage JSON')
@click.option('-r', '--rows', default=20, show_default=True, help='Max history table rows')
@click.option('--no-report', is_flag=True, help='Suppress the coverage report')
def run(seed: Optional[int], preset: Optional[str], config: Optional[str], verbose: bool,
        configs: Optional[int], export_path: Optional[str], fmt: Optional[str],
        coverage_path: Optional[str], rows: int, no_report: bool):
    """Run the sequencer against the reference model.

    Example:
      flash-rand run --seed 42 -n 4 -e ops.jsonl
    """
    console = Console()
    _setup_logging(verbose, console)
    cfg, params = _resolve(preset, config)
    if seed is None:
        seed = random.randrange(1 << 32)

    bkdr = FlashBackdoor(params, seed=seed)
    ctrl = FlashCtrlModel(bkdr)
    cov = CoverageCollector("flash-rand")
    seq = FlashSequencer(ctrl, bkdr, cfg=cfg, params=params, seed=seed, coverage=cov)

    try:
        summary = asyncio.run(seq.run(num_configs=configs))
    except FlashDVError as e:
        console.print(history_table(seq.history, max_rows=rows))
        raise click.ClickException(f"{type(e).__name__}: {e} (seed {seed})")

    console.print(history_table(seq.history, max_rows=rows))
    console.print(summary_panel(summary))
    if not no_report:
        console.print(cov.report(), markup=False, highlight=False)

    if export_path:
        try:
            count = export_history(seq.history, Path(export_path), format=fmt, seed=seed)
        except ValueError as e:
            raise click.ClickException(str(e))
        console.print(f"Exported {count} operations to {export_path}")

    if coverage_path:
        cov.save(coverage_path)
        console.print(f"Coverage saved to {coverage_path}")


def main():
    cli()


if __name__ == '__main__':
    main()
