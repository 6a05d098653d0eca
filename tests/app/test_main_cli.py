from __future__ import annotations

import os
from pathlib import Path

import pytest

from app import main as app_main


def test_main_renders_inline(monkeypatch, tmp_path) -> None:
    called = {}

    def fake_streamlit_app(*, default_data=None, default_interval_ms=None):
        called["default_data"] = default_data
        called["default_interval_ms"] = default_interval_ms

    monkeypatch.setenv("STREAMLIT_SERVER_PORT", "1")
    # Patch the imported symbol used inside app.main (not the package attribute)
    monkeypatch.setattr(app_main, "streamlit_app", fake_streamlit_app, raising=True)

    csv = str(tmp_path / "data-table.csv")
    app_main.main(["--data", csv, "--interval-ms", "500", "--log-level", "debug"])

    assert called["default_data"] == csv
    assert called["default_interval_ms"] == 500


def test_main_inline_defaults(monkeypatch) -> None:
    called = {}

    def fake_streamlit_app(*, default_data=None, default_interval_ms=None):
        called["args"] = (default_data, default_interval_ms)

    monkeypatch.setenv("STREAMLIT_SERVER_PORT", "1")
    monkeypatch.setattr(app_main, "streamlit_app", fake_streamlit_app, raising=True)

    app_main.main([])

    assert called["args"] == (None, None)


def test_main_rejects_non_integer_interval(monkeypatch) -> None:
    monkeypatch.setenv("STREAMLIT_SERVER_PORT", "1")

    with pytest.raises(SystemExit):
        app_main.main(["--interval-ms", "fast"])


def test_main_execs_streamlit(monkeypatch, tmp_path) -> None:
    # Ensure not in Streamlit context
    monkeypatch.delenv("STREAMLIT_SERVER_PORT", raising=False)

    captured = {}

    def fake_execv(exe: str, cmd: list[str]) -> None:
        captured["exe"] = exe
        captured["cmd"] = cmd
        # Prevent process handoff
        raise SystemExit

    monkeypatch.setattr(os, "execv", fake_execv, raising=True)

    csv = str(tmp_path / "data-table.csv")
    with pytest.raises(SystemExit):
        app_main.main(["--data", csv, "--interval-ms", "300"])

    assert captured["cmd"][0] == captured["exe"]
    # Assert we launch `python -m streamlit run <path>`
    assert captured["cmd"][1:4] == ["-m", "streamlit", "run"]
    # The script path should be the path to app.main
    expected_main_path = str(Path(app_main.__file__).resolve())
    assert captured["cmd"][4] == expected_main_path
    # Passthrough args present after `--`
    assert "--" in captured["cmd"]
    dashdash_idx = captured["cmd"].index("--")
    passthrough = captured["cmd"][dashdash_idx + 1 :]
    assert passthrough == ["--data", csv, "--interval-ms", "300", "--log-level", "INFO"]


def test_main_falls_back_to_subprocess(monkeypatch) -> None:
    monkeypatch.delenv("STREAMLIT_SERVER_PORT", raising=False)

    def failing_execv(exe: str, cmd: list[str]) -> None:
        raise OSError("exec not permitted")

    ran = {}

    def fake_run(cmd: list[str], check: bool) -> None:
        ran["cmd"] = cmd
        ran["check"] = check

    monkeypatch.setattr(os, "execv", failing_execv, raising=True)
    monkeypatch.setattr(app_main.subprocess, "run", fake_run, raising=True)

    app_main.main([])

    assert ran["cmd"][1:4] == ["-m", "streamlit", "run"]
    assert ran["check"] is False
