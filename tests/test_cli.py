import json
import sys
from datetime import datetime

import psutil
import pytest

from vm_health import cli, cpu, system_state
from vm_health.errors import DataUnavailable, ProbeFailure
from vm_health.system_state import UtilizationSnapshot


def fake_gather(cpu, memory, disk):
    def gather_snapshot(interval, mount_point="/"):
        return UtilizationSnapshot(
            timestamp=datetime(2024, 5, 1, 12, 0, 0),
            cpu_percent=cpu,
            memory_percent=memory,
            disk_percent=disk,
            mount_point=mount_point,
        )

    return gather_snapshot


def test_healthy_prints_verdict_only(monkeypatch, capsys):
    monkeypatch.setattr(cli, "gather_snapshot", fake_gather(10.0, 20.0, 30.0))
    assert cli.main([]) == 0
    assert capsys.readouterr().out == "VM Health: Healthy\n"


def test_unhealthy_explain(monkeypatch, capsys):
    monkeypatch.setattr(cli, "gather_snapshot", fake_gather(75.5, 10.0, 10.0))
    assert cli.main(["explain"]) == 1
    out = capsys.readouterr().out
    assert out.startswith("VM Health: Unhealthy\n")
    assert "    - CPU utilization is above 60%" in out
    assert "Memory utilization is above" not in out
    assert "Disk usage (/) is above" not in out


def test_interval_is_passed_to_sampler(monkeypatch):
    seen = []

    def gather_snapshot(interval, mount_point="/"):
        seen.append(interval)
        return fake_gather(1.0, 1.0, 1.0)(interval)

    monkeypatch.setattr(cli, "gather_snapshot", gather_snapshot)
    cli.main(["--interval", "0.1"])
    assert seen == [0.1]


def test_json_output_keeps_exit_code(monkeypatch, capsys):
    monkeypatch.setattr(cli, "gather_snapshot", fake_gather(10.0, 90.0, 10.0))
    assert cli.main(["--json"]) == 1
    assert json.loads(capsys.readouterr().out)["exceeding"] == ["memory"]


def test_rich_ui_output(monkeypatch, capsys):
    monkeypatch.setattr(cli, "gather_snapshot", fake_gather(10.0, 20.0, 30.0))
    assert cli.main(["explain", "--ui"]) == 0
    assert "VM Health: Healthy" in capsys.readouterr().out


def test_probe_failure_names_each_source(monkeypatch, capsys):
    def gather_snapshot(interval, mount_point="/"):
        raise ProbeFailure(
            [
                DataUnavailable("cpu", "cannot read /proc/stat"),
                DataUnavailable("memory", "unsupported platform"),
                DataUnavailable("disk", "/: no such file or directory"),
            ]
        )

    monkeypatch.setattr(cli, "gather_snapshot", gather_snapshot)
    assert cli.main(["explain"]) == 2
    captured = capsys.readouterr()
    assert captured.out == ""
    assert "vm-health: cpu data unavailable: cannot read /proc/stat" in captured.err
    assert "vm-health: memory data unavailable" in captured.err
    assert "vm-health: disk data unavailable" in captured.err


@pytest.mark.parametrize("argv", [["--interval", "-1"], ["--interval", "soon"], ["--unknown"]])
def test_bad_arguments_exit_with_usage_error(argv):
    with pytest.raises(SystemExit) as excinfo:
        cli.main(argv)
    assert excinfo.value.code == 2


def test_unknown_positional_is_ignored(monkeypatch, capsys):
    monkeypatch.setattr(cli, "gather_snapshot", fake_gather(10.0, 20.0, 30.0))
    assert cli.main(["Explain"]) == 0
    assert capsys.readouterr().out == "VM Health: Healthy\n"


def test_help_documents_exit_status(capsys):
    with pytest.raises(SystemExit) as excinfo:
        cli.main(["--help"])
    assert excinfo.value.code == 0
    help_text = " ".join(capsys.readouterr().out.split())
    assert "exit status: 0 healthy, 1 unhealthy, 2 probe failure or invalid option" in help_text


linux_only = pytest.mark.skipif(not sys.platform.startswith("linux"), reason="reads procfs")


@linux_only
def test_meminfo_without_total_is_probe_failure(monkeypatch, tmp_path, capsys):
    (tmp_path / "meminfo").write_text("MemFree:         1024 kB\nBuffers:          512 kB\n")
    monkeypatch.setattr(psutil, "PROCFS_PATH", str(tmp_path))
    monkeypatch.setattr(system_state, "sample_cpu_utilization", lambda interval: 5.0)

    assert cli.main([]) == 2
    captured = capsys.readouterr()
    assert captured.out == ""
    assert "vm-health: memory data unavailable" in captured.err


@linux_only
def test_all_real_sources_broken(monkeypatch, tmp_path, capsys):
    empty_proc = tmp_path / "proc"
    empty_proc.mkdir()
    monkeypatch.setattr(cpu, "PROC_STAT", str(tmp_path / "missing-stat"))
    monkeypatch.setattr(psutil, "PROCFS_PATH", str(empty_proc))
    monkeypatch.setattr(system_state, "ROOT_MOUNT", str(tmp_path / "not-mounted"))

    assert cli.main(["explain", "--interval", "0"]) == 2
    captured = capsys.readouterr()
    assert captured.out == ""
    diagnostics = [line for line in captured.err.splitlines() if line.startswith("vm-health: ")]
    assert [line.split()[1] for line in diagnostics] == ["cpu", "memory", "disk"]
    assert all("data unavailable" in line for line in diagnostics)
