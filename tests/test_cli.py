"""Tests for CLI dispatch, exit codes, and argument parsing."""

import json
import logging

import pytest

from structlens.cli import _fail, _out, build_parser, main
from structlens.snapshot_io import load_snapshot, snapshot_to_dict

from conftest import make_rel, make_snapshot, write_json


@pytest.fixture(autouse=True)
def _restore_logging():
    root = logging.getLogger()
    handlers, level = list(root.handlers), root.level
    yield
    root.handlers[:] = handlers
    root.setLevel(level)


@pytest.fixture
def workdir(tmp_path, monkeypatch):
    """Empty working directory so no default config files are picked up."""
    monkeypatch.chdir(tmp_path)
    return tmp_path


@pytest.fixture
def layered_file(workdir, layered_snapshot):
    return write_json(workdir / "snapshot.json", snapshot_to_dict(layered_snapshot))


GOVERNANCE_YAML = """
layers:
  - {name: Controllers, pattern: "*.Controllers.*"}
  - {name: Data, pattern: "*.Data.*"}
rules:
  - {name: no-data-from-controllers, from: Controllers, to: Data, action: deny}
"""


def _run(capsys, *argv):
    code = main(list(argv))
    return code, json.loads(capsys.readouterr().out)


class TestHelpers:
    def test_out_success(self, capsys):
        assert _out({"ok": True}) == 0
        assert json.loads(capsys.readouterr().out)["ok"] is True

    def test_fail_prints_error(self, capsys):
        assert _fail("bad thing", query="x") == 2
        captured = capsys.readouterr()
        assert json.loads(captured.out) == {"error": "bad thing", "query": "x"}
        assert "bad thing" in captured.err


class TestParserStructure:
    def test_blast_defaults(self):
        args = build_parser().parse_args(["blast", "--snapshot", "s.json", "--component", "Foo"])
        assert args.max_depth == 5
        assert args.deadline is None

    def test_federate_collects_snapshots(self):
        args = build_parser().parse_args(
            ["federate", "--snapshot", "a.json", "--snapshot", "b.json", "--strategy", "priority",
             "--priority", "core", "web"])
        assert args.snapshots == ["a.json", "b.json"]
        assert args.priority == ["core", "web"]

    def test_unknown_strategy_rejected(self):
        with pytest.raises(SystemExit):
            build_parser().parse_args(["federate", "--snapshot", "a.json", "--strategy", "loudest"])

    def test_no_command_exit_2(self, capsys):
        assert main([]) == 2


class TestReport:
    def test_passes_without_config(self, capsys, layered_file):
        code, data = _run(capsys, "report", "--snapshot", str(layered_file))
        assert code == 0
        assert data["repository"] == "repo"
        assert data["policy"] == {"passed": True, "gates": []}
        assert data["governance"] == []

    def test_gate_failure_exit_1(self, capsys, workdir, layered_file):
        (workdir / "gov.yml").write_text(GOVERNANCE_YAML, encoding="utf-8")
        (workdir / "policy.yml").write_text("gates:\n  governance: {max_violations: 0}\n", encoding="utf-8")
        code, data = _run(capsys, "report", "--snapshot", str(layered_file),
                          "--policy", "policy.yml", "--governance", "gov.yml")
        assert code == 1
        assert len(data["governance"]) == 1
        gate = data["policy"]["gates"][0]
        assert gate == {"gate": "governance-violation-count", "passed": False, "actual": 1, "threshold": 0}

    def test_external_findings_gated(self, capsys, workdir, layered_file):
        write_json(workdir / "sec.json", {"findings": [
            {"category": "security", "severity": "critical", "ruleId": "SEC-9",
             "title": "Hardcoded secret", "description": "", "filePath": "a.cs"}]})
        (workdir / "policy.yml").write_text("gates:\n  architecture: {max_high: 5}\n", encoding="utf-8")
        code, data = _run(capsys, "report", "--snapshot", str(layered_file),
                          "--policy", "policy.yml", "--findings", "sec.json")
        assert code == 0
        assert data["analysis"]["findings"][0]["rule_id"] == "SEC-9"

    def test_missing_snapshot_exit_2(self, capsys, workdir):
        code, data = _run(capsys, "report", "--snapshot", "nope.json")
        assert code == 2
        assert "not found" in data["error"]

    def test_malformed_policy_exit_2(self, capsys, workdir, layered_file):
        (workdir / "policy.yml").write_text("gates: [unclosed", encoding="utf-8")
        code, data = _run(capsys, "report", "--snapshot", str(layered_file), "--policy", "policy.yml")
        assert code == 2
        assert "policy.yml" in data["error"]


class TestGraphCommands:
    def test_blast(self, capsys, layered_file):
        code, data = _run(capsys, "blast", "--snapshot", str(layered_file),
                          "--component", "App.Data.UserRepo", "--max-depth", "1")
        assert code == 0
        assert data["root"] == "App.Data.UserRepo"
        assert data["total_affected"] == 2

    def test_blast_not_found(self, capsys, layered_file):
        code, data = _run(capsys, "blast", "--snapshot", str(layered_file), "--component", "Nothing")
        assert code == 2
        assert data["query"] == "Nothing"

    def test_blast_negative_depth(self, capsys, layered_file):
        code, _ = _run(capsys, "blast", "--snapshot", str(layered_file),
                       "--component", "UserRepo", "--max-depth", "-1")
        assert code == 2

    def test_diff(self, capsys, workdir):
        baseline = make_snapshot(["A", "B", "C"], [make_rel("A", "B"), make_rel("B", "C")])
        current = make_snapshot(["A", "C"])
        write_json(workdir / "base.json", snapshot_to_dict(baseline))
        write_json(workdir / "cur.json", snapshot_to_dict(current))
        code, data = _run(capsys, "diff", "--baseline", "base.json", "--current", "cur.json")
        assert code == 0
        assert data["added"] == []
        assert data["removed"] == ["B"]
        assert data["blast_radius"] == ["A", "C"]

    def test_federate_writes_output(self, capsys, workdir):
        write_json(workdir / "a.json", snapshot_to_dict(make_snapshot(["a.X"], repository="a")))
        write_json(workdir / "b.json", snapshot_to_dict(make_snapshot(["a.X", "b.Y"], repository="b",
                                                                      scanned="2025-01-01T00:00:00+00:00")))
        code, data = _run(capsys, "federate", "--snapshot", "a.json", "--snapshot", "b.json",
                          "--output", "out/merged.json")
        assert code == 0
        assert data["components"] == 2
        assert data["conflicts"][0]["winner_repository"] == "b"
        merged = load_snapshot(workdir / "out" / "merged.json")
        assert {c.id for c in merged.components} == {"a.X", "b.Y"}


class TestAnalysisCommands:
    def test_validate(self, capsys, workdir, snapshot_dict):
        write_json(workdir / "s.json", snapshot_dict)
        code, data = _run(capsys, "validate", "--snapshot", "s.json")
        assert code == 0
        assert data["components"] == 3
        assert data["data_objects"] == 1
        assert data["diagnostics"] == []

    def test_non_object_metadata_exit_2(self, capsys, workdir):
        write_json(workdir / "s.json", {"metadata": "v1", "codeAtoms": []})
        code, data = _run(capsys, "validate", "--snapshot", "s.json")
        assert code == 2
        assert "Malformed snapshot" in data["error"]

    def test_risk_top(self, capsys, layered_file):
        code, data = _run(capsys, "risk", "--snapshot", str(layered_file), "--top", "1")
        assert code == 0
        assert len(data["scores"]) == 1
        assert data["scores"][0]["component_id"] == "App.Data.UserRepo"

    def test_governance(self, capsys, workdir, layered_file):
        (workdir / "gov.yml").write_text(GOVERNANCE_YAML, encoding="utf-8")
        code, data = _run(capsys, "governance", "--snapshot", str(layered_file), "--governance", "gov.yml")
        assert code == 0
        assert data["rules"] == 1
        assert data["findings"][0]["rule_id"] == "GOV-no-data-from-controllers"
