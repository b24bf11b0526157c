"""Tests for the rrdsink command line entry point."""

from __future__ import annotations

import json

import pytest
import yaml

from rrdsink import cli
from rrdsink.writer import RRDToolWriter
from rrdsink.writer.naming import data_source_name


RESULTS = [
    {"type_name": "type=OperatingSystem", "attribute_name": "SystemLoadAverage", "values": {"value": 0.75}},
    {"type_name": "type=Threading", "attribute_name": "ThreadCount", "values": {"value": 31}},
]


def write_results(tmp_path, payload=RESULTS):
    path = tmp_path / "results.json"
    path.write_text(json.dumps(payload), encoding="utf-8")
    return path


def write_config(tmp_path, names):
    template = tmp_path / "template.yaml"
    template.write_text(
        yaml.safe_dump(
            {
                "step": 60,
                "datasource": [
                    {"name": name, "type": "GAUGE", "heartbeat": 120, "min": "U", "max": "U"} for name in names
                ],
                "archive": [{"cf": "AVERAGE", "xff": 0.5, "steps": 1, "rows": 1440}],
            }
        ),
        encoding="utf-8",
    )
    config = tmp_path / "storage.yaml"
    config.write_text(
        yaml.safe_dump(
            {
                "outputs": [
                    {
                        "output_file": str(tmp_path / "os.rrd"),
                        "template_file": str(template),
                        "binary_path": str(tmp_path / "bin"),
                    }
                ]
            }
        ),
        encoding="utf-8",
    )
    return config


def test_generate_prints_snippet(tmp_path, capsys):
    exit_code = cli.main(["generate", str(write_results(tmp_path))])

    out = capsys.readouterr().out
    assert exit_code == 0
    assert f"<name>{data_source_name('', 'SystemLoadAverage', 'value')}</name>" in out
    assert "type=Threading:ThreadCount:value" in out


def test_generate_reports_duplicates(tmp_path):
    duplicated = RESULTS + [RESULTS[1]]

    assert cli.main(["generate", str(write_results(tmp_path, duplicated))]) == 1


def test_write_runs_every_configured_output(tmp_path, monkeypatch):
    names = [data_source_name("", "ThreadCount", "value")]
    commands = []

    def fake_init(self, settings, **kwargs):
        real_init(self, settings, runner=lambda args, timeout_s=None: commands.append(list(args)), **kwargs)

    real_init = RRDToolWriter.__init__
    monkeypatch.setattr(RRDToolWriter, "__init__", fake_init)

    exit_code = cli.main(["write", str(write_results(tmp_path)), "--config", str(write_config(tmp_path, names))])

    assert exit_code == 0
    assert [command[1] for command in commands] == ["create", "update"]
    assert commands[1][-1] == "N:31"


def test_write_returns_error_when_output_fails(tmp_path):
    config = write_config(tmp_path, [data_source_name("", "ThreadCount", "value")])

    # binary_path apunta a un directorio inexistente: la creación no puede arrancar
    assert cli.main(["write", str(write_results(tmp_path)), "--config", str(config)]) == 1


def test_write_reads_settings_from_env_file(tmp_path, monkeypatch):
    for name in ("RRDTOOL_OUTPUT_FILE", "RRDTOOL_TEMPLATE_FILE", "RRDTOOL_BINARY_PATH"):
        monkeypatch.delenv(name, raising=False)
    env_file = tmp_path / ".env"
    env_file.write_text("RRDTOOL_OUTPUT_FILE=/tmp/x.rrd\n", encoding="utf-8")

    # falta RRDTOOL_TEMPLATE_FILE: error de configuración
    assert cli.main(["write", str(write_results(tmp_path)), "--env-file", str(env_file)]) == 2


def test_unknown_log_level_is_a_usage_error(tmp_path, capsys):
    with pytest.raises(SystemExit) as excinfo:
        cli.main(["--log-level", "LOUD", "generate", str(write_results(tmp_path))])

    assert excinfo.value.code == 2
    assert "--log-level" in capsys.readouterr().err


def test_log_level_is_case_insensitive(tmp_path):
    args = cli.build_parser().parse_args(["--log-level", "debug", "generate", str(write_results(tmp_path))])

    assert args.log_level == "DEBUG"
