"""Tests for the command line interface."""

import json

import pytest

from diagram_backend import cli


def run_cli(capsys, *argv):
    with pytest.raises(SystemExit) as exc_info:
        cli.main(list(argv))
    return exc_info.value.code, json.loads(capsys.readouterr().out)


class TestCli:
    """Test the subcommands end to end."""

    def test_build_a_diagram(self, capsys, workspace):
        code, out = run_cli(capsys, "new", "cli.svg")
        assert code == 0
        assert out["file_path"] == str(workspace / "cli.svg")

        code, out = run_cli(
            capsys, "add-nodes", "cli.svg",
            "--nodes", json.dumps([{"id": "a"}, {"id": "b", "kind": "Ellipse"}]),
            "--layout", json.dumps({"algorithm": "hierarchical", "options": {"direction": "left-right"}}),
        )
        assert out["added"] == ["a", "b"]

        code, out = run_cli(capsys, "link-nodes", "cli.svg", "--edges", json.dumps([{"source": "a", "target": "b"}]))
        assert out["edges"] == ["a-2-b"]

        code, out = run_cli(capsys, "edit-nodes", "cli.svg", "--nodes", json.dumps([{"id": "a", "title": "A"}]))
        assert out["edited"] == ["a"]

        code, out = run_cli(capsys, "inspect", "cli.svg")
        assert out["summary"]["total_edges"] == 1
        assert out["diagram"]["nodes"][0]["label"] == "A"

        code, out = run_cli(capsys, "remove-nodes", "cli.svg", "--ids", json.dumps(["b"]))
        assert set(out["removed"]) == {"b", "a-2-b"}

    def test_diagram_error(self, capsys, workspace):
        code, out = run_cli(capsys, "add-nodes", "e.svg", "--nodes", json.dumps([{"id": "a", "kind": "Blob"}]))
        assert code == 1
        assert out["status"] == "error"
        assert "Unknown node kind: Blob" in out["error"]

    def test_invalid_input(self, capsys, workspace):
        code, out = run_cli(capsys, "add-nodes", "e.svg", "--nodes", json.dumps([{"title": "no id"}]))
        assert code == 1
        assert out["error"].startswith("Invalid input")

    @pytest.mark.parametrize("value", ["not json", "{}", "[]"])
    def test_bad_list_argument(self, capsys, workspace, value):
        code, out = run_cli(capsys, "remove-nodes", "e.svg", "--ids", value)
        assert code == 1
        assert "--ids" in out["error"]
