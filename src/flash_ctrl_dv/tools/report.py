#
# Flash Ctrl DV - Rich Reports
#
# Copyright (c) 2026 Shareef Jalloq
# SPDX-License-Identifier: BSD-2-Clause
#
# Rich tables for generated configurations, operations and run summaries.
#

from typing import Iterable, Optional, Sequence

from rich.panel import Panel
from rich.table import Table

from flash_ctrl_dv.common.types import (
    BankErasePolicy,
    DefaultRegionPolicy,
    FifoThresholds,
    FlashOp,
    FlashOperation,
    RegionSet,
)
from flash_ctrl_dv.config import DistributionConfig
from flash_ctrl_dv.sequencer import OpRecord, RunSummary


def op_kind_style(kind: int) -> str:
    """Get Rich style for an operation kind."""
    styles = {
        FlashOp.READ: "cyan",
        FlashOp.PROGRAM: "green",
        FlashOp.ERASE: "red",
    }
    return styles.get(kind, "white")


def _flag(value: bool) -> str:
    return "[green]Y[/]" if value else "[dim]-[/]"


def region_table(regions: RegionSet, title: str = "Protection Regions") -> Table:
    """Create a table of region slots; disabled slots are dimmed."""
    table = Table(title=title, show_header=True, header_style="bold", border_style="dim")

    table.add_column("Slot", justify="right")
    table.add_column("En", justify="center")
    table.add_column("Part")
    table.add_column("Pages", justify="right")
    table.add_column("R", justify="center")
    table.add_column("P", justify="center")
    table.add_column("E", justify="center")

    for i, region in enumerate(regions):
        if not region.enabled:
            table.add_row(str(i), _flag(False), "", "", "", "", "", style="dim")
            continue
        table.add_row(
            str(i),
            _flag(True),
            region.partition.label,
            f"{region.start_page}-{region.end_page - 1}",
            _flag(region.read_en),
            _flag(region.program_en),
            _flag(region.erase_en),
        )

    return table


def policy_table(default: DefaultRegionPolicy, bank: BankErasePolicy,
                 fifo: Optional[FifoThresholds] = None) -> Table:
    """Create a table of default region, bank erase and FIFO settings."""
    table = Table(title="Policies", show_header=True, header_style="bold", border_style="dim")
    table.add_column("Setting")
    table.add_column("Value")

    table.add_row("Default read", _flag(default.read_en))
    table.add_row("Default program", _flag(default.program_en))
    table.add_row("Default erase", _flag(default.erase_en))
    for i, en in enumerate(bank.bank_erase_en):
        table.add_row(f"Bank {i} erase", _flag(en))
    if fifo is not None:
        table.add_row("Prog FIFO level", str(fifo.prog))
        table.add_row("Read FIFO level", str(fifo.rd))

    return table


def ops_table(ops: Sequence[FlashOperation], title: str = "Operations") -> Table:
    """Create a table of generated operations."""
    table = Table(title=title, show_header=True, header_style="bold", border_style="dim")

    table.add_column("#", style="dim", justify="right")
    table.add_column("Kind")
    table.add_column("Part")
    table.add_column("Address")
    table.add_column("Words/Erase", justify="right")

    for i, op in enumerate(ops):
        style = op_kind_style(op.kind)
        size = op.erase_type.label if op.is_erase else str(op.num_words)
        table.add_row(
            str(i),
            f"[{style}]{op.kind.label}[/]",
            op.partition.label,
            f"0x{op.address:08x}",
            size,
        )

    return table


def history_table(records: Iterable[OpRecord], max_rows: int = 30) -> Table:
    """Create a table of the last max_rows executed operations."""
    records = list(records)
    shown = records[-max_rows:] if max_rows > 0 else records

    table = Table(
        title=f"Executed Operations ({len(shown)} of {len(records)})",
        show_header=True,
        header_style="bold",
        border_style="dim",
    )
    table.add_column("Cfg.Op", justify="right")
    table.add_column("Kind")
    table.add_column("Part")
    table.add_column("Address")
    table.add_column("Size", justify="right")
    table.add_column("Region", justify="center")
    table.add_column("Data")

    for rec in shown:
        op = rec.op
        style = op_kind_style(op.kind)
        size = op.erase_type.label if op.is_erase else str(op.num_words)
        if rec.payload:
            preview = " ".join(f"{w:08x}" for w in rec.payload[:2])
            if len(rec.payload) > 2:
                preview += " ..."
        else:
            preview = "-"
        table.add_row(
            f"{rec.config_index}.{rec.op_index}",
            f"[{style}]{op.kind.label}[/]",
            op.partition.label,
            f"0x{op.address:08x}",
            size,
            "-" if rec.region_hit is None else str(rec.region_hit),
            preview,
        )

    return table


def summary_panel(summary: RunSummary) -> Panel:
    """Create the run summary panel."""
    lines = [
        f"[bold]Seed:[/] {summary.seed}",
        f"[bold]Configs:[/] {summary.num_configs}",
        f"[bold]Operations:[/] {summary.num_ops}",
    ]
    for kind in FlashOp:
        count = summary.ops_by_kind.get(kind.label, 0)
        lines.append(f"  [{op_kind_style(kind)}]{kind.label}[/]: {count}")
    return Panel("\n".join(lines), title="Run Summary", border_style="green")


def presets_table(presets: dict) -> Table:
    """Create a table comparing distribution presets."""
    table = Table(title="Distribution Presets", show_header=True, header_style="bold",
                  border_style="dim")
    table.add_column("Name")
    table.add_column("Configs", justify="right")
    table.add_column("Ops/cfg", justify="right")
    table.add_column("Regions", justify="right")
    table.add_column("Overlap", justify="center")
    table.add_column("R/P/E weight")

    for name, cfg in presets.items():
        cfg: DistributionConfig
        table.add_row(
            name,
            str(cfg.max_configs),
            str(cfg.max_ops_per_config),
            f"{cfg.num_enabled_regions} (<= {cfg.region_max_pages}p)",
            _flag(cfg.allow_region_overlap),
            f"{cfg.read_op_weight}/{cfg.program_op_weight}/{cfg.erase_op_weight}",
        )

    return table
