"""
test_cli.py

Tests for the zshprof command-line converter.
"""

import json

import pytest

from zshprof.cli import build_parser, main

TRACE = "\n".join([
    "+Z|1|10.000|zsh|.zshrc|1> source plugins.zsh",
    "+Z|2|10.250|plugins.zsh|plugins.zsh|1> compinit",
    "zsh: corrupt history file",
    "+Z|1|10.500|zsh|.zshrc|2> prompt_setup",
])


@pytest.fixture
def trace_file(tmp_path):
    path = tmp_path / "zsh.10.99.zsh-trace.log"
    path.write_text(TRACE, encoding="utf-8")
    return path


class TestConvert:
    """Successful conversions."""

    def test_default_output_path(self, trace_file, capsys):
        assert main([str(trace_file)]) == 0

        out = trace_file.with_suffix(".json")
        data = json.loads(out.read_text(encoding="utf-8"))
        assert data["name"] == "zsh.10.99.zsh-trace.log"
        assert len(data["shared"]["frames"]) == 3
        assert data["profiles"][0]["startValue"] == 10.0
        assert data["profiles"][0]["endValue"] == 10.5
        assert "Profile written to:" in capsys.readouterr().out

    def test_explicit_output_path(self, trace_file, tmp_path):
        out = tmp_path / "profile.json"
        assert main([str(trace_file), "-o", str(out)]) == 0
        assert out.exists()
        assert not trace_file.with_suffix(".json").exists()

    def test_summary(self, trace_file, capsys):
        assert main([str(trace_file), "--summary", "2"]) == 0
        out = capsys.readouterr().out
        assert "self ms" in out
        assert "total: 500.000 ms" in out
        assert "plugins.zsh (plugins.zsh:1)" in out

    def test_custom_marker(self, tmp_path):
        path = tmp_path / "colour.log"
        path.write_text("+0mZ|1|1.0|f|a.sh|1> x+0mZ|1|2.0|g|a.sh|2> y\n", encoding="utf-8")
        assert main([str(path), "--marker", "+0mZ|"]) == 0

        data = json.loads(path.with_suffix(".json").read_text(encoding="utf-8"))
        assert [f["name"] for f in data["shared"]["frames"]] == ["f", "g"]


class TestFailures:
    """Exit codes on failure."""

    def test_strict_mode_rejects_noise(self, trace_file, capsys):
        assert main([str(trace_file), "--strict"]) == 1
        err = capsys.readouterr().err
        assert "E101" in err
        assert "line 3" in err
        assert not trace_file.with_suffix(".json").exists()

    def test_missing_file(self, tmp_path, capsys):
        assert main([str(tmp_path / "missing.log")]) == 1
        assert "Error:" in capsys.readouterr().err

    def test_invalid_marker(self, trace_file, capsys):
        assert main([str(trace_file), "--marker", "Z"]) == 1
        assert "E300" in capsys.readouterr().err

    def test_usage_error(self):
        with pytest.raises(SystemExit) as exc_info:
            build_parser().parse_args([])
        assert exc_info.value.code == 2

    def test_refuses_to_overwrite_json_trace(self, tmp_path, capsys):
        path = tmp_path / "trace.json"
        path.write_text(TRACE, encoding="utf-8")

        assert main([str(path)]) == 1
        assert path.read_text(encoding="utf-8") == TRACE
        assert "would overwrite the trace" in capsys.readouterr().err

    def test_json_trace_with_explicit_output(self, tmp_path):
        path = tmp_path / "trace.json"
        path.write_text(TRACE, encoding="utf-8")
        out = tmp_path / "profile.json"

        assert main([str(path), "-o", str(out)]) == 0
        assert path.read_text(encoding="utf-8") == TRACE
        assert out.exists()

    def test_unexpected_error_exits_with_status(self, trace_file, monkeypatch, capsys):
        def broken(*args, **kwargs):
            raise ValueError("builder exploded")

        monkeypatch.setattr("zshprof.cli.import_evented_profile", broken)

        assert main([str(trace_file)]) == 1
        assert "Error: builder exploded" in capsys.readouterr().err
        assert not trace_file.with_suffix(".json").exists()
