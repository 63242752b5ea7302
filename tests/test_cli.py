#
# Flash Ctrl DV - CLI Tests
#
# Copyright (c) 2026 Shareef Jalloq
# SPDX-License-Identifier: BSD-2-Clause
#

import json

from click.testing import CliRunner

from flash_ctrl_dv.tools.cli import cli


def test_presets():
    result = CliRunner().invoke(cli, ['presets'])
    assert result.exit_code == 0, result.output
    for name in ('default', 'no_overlap', 'erase_heavy', 'stress'):
        assert name in result.output


def test_gen_json(tmp_path):
    out = tmp_path / "stim.json"
    result = CliRunner().invoke(cli, ['gen', '--seed', '7', '-n', '2', '-o', '3',
                                      '-p', 'no_overlap', '-j', str(out)])
    assert result.exit_code == 0, result.output
    assert "Seed:" in result.output

    data = json.loads(out.read_text())
    assert data['seed'] == 7
    assert len(data['configs']) == 2
    for config in data['configs']:
        assert len(config['ops']) == 3
        assert sum(r['enabled'] for r in config['regions']) == 8
        assert len(config['bank_erase_en']) == 2


def test_gen_is_reproducible(tmp_path):
    runner = CliRunner()
    outs = []
    for name in ("a.json", "b.json"):
        path = tmp_path / name
        runner.invoke(cli, ['gen', '--seed', '3', '-j', str(path)])
        outs.append(json.loads(path.read_text()))
    assert outs[0] == outs[1]


def test_run_exports(tmp_path):
    ops = tmp_path / "ops.jsonl"
    cov = tmp_path / "cov.json"
    result = CliRunner().invoke(cli, ['run', '--seed', '11', '-n', '2', '-e', str(ops),
                                      '--coverage', str(cov)])
    assert result.exit_code == 0, result.output
    assert "Run Summary" in result.output
    assert "Coverage Report" in result.output
    assert len(ops.read_text().splitlines()) > 0
    assert json.loads(cov.read_text())['coverpoints']['op_kind']


def test_run_with_config_file(tmp_path):
    cfg = tmp_path / "run.yaml"
    cfg.write_text(
        "preset: erase_heavy\n"
        "dist:\n"
        "  max_ops_per_config: 4\n"
        "params:\n"
        "  pages_per_bank: 64\n"
        "  bytes_per_page: 512\n"
    )
    out = tmp_path / "ops.json"
    result = CliRunner().invoke(cli, ['run', '-s', '2', '-c', str(cfg), '-n', '1',
                                      '-e', str(out), '--no-report'])
    assert result.exit_code == 0, result.output
    assert "Coverage Report" not in result.output
    data = json.loads(out.read_text())
    assert data['seed'] == 2
    assert 1 <= len(data['ops']) <= 4


def test_preset_and_config_exclusive(tmp_path):
    cfg = tmp_path / "run.yaml"
    cfg.write_text("preset: stress\n")
    result = CliRunner().invoke(cli, ['run', '-p', 'default', '-c', str(cfg)])
    assert result.exit_code == 2
    assert "mutually exclusive" in result.output


def test_bad_config_reported(tmp_path):
    cfg = tmp_path / "run.yaml"
    cfg.write_text("dist:\n  max_configs: 0\n")
    result = CliRunner().invoke(cli, ['gen', '-c', str(cfg)])
    assert result.exit_code == 1
    assert "max_configs" in result.output


def test_unsatisfiable_reported(tmp_path):
    cfg = tmp_path / "run.yaml"
    cfg.write_text("dist:\n  num_enabled_regions: 9\n")
    result = CliRunner().invoke(cli, ['run', '-s', '1', '-c', str(cfg)])
    assert result.exit_code == 1
    assert "ConstraintUnsatisfiable" in result.output
    assert "seed 1" in result.output
