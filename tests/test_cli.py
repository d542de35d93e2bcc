"""Tests for the chartbot command-line interface.

The renderer is monkeypatched with a fake so that no
``capture-website`` process is launched.
"""

from __future__ import annotations

from pathlib import Path
from typing import List, Optional

import pytest
from click.testing import CliRunner

from chartbot.charts.models import RenderedArtifact, RenderRequest
from chartbot.cli import cli
from chartbot.config import load_settings
from chartbot.errors import RenderError


class FakeRenderer:
    def __init__(self, exc: Optional[Exception] = None) -> None:
        self.requests: List[RenderRequest] = []
        self.exc = exc

    def render(self, request: RenderRequest) -> RenderedArtifact:
        self.requests.append(request)
        if self.exc is not None:
            raise self.exc
        return RenderedArtifact.from_request(request)


def _clear_env(monkeypatch: pytest.MonkeyPatch) -> None:
    for var in [
        "CAPTURE_WEBSITE_BIN",
        "CHARTBOT_IMAGE_DIR",
        "CHARTBOT_RENDER_TIMEOUT",
        "CHARTBOT_LOCALE",
        "CHARTBOT_DELETE_COMMANDS",
        "TELEGRAM_BOT_TOKEN",
        "TELEGRAM_CHAT_ID_ALLOWLIST",
    ]:
        monkeypatch.delenv(var, raising=False)


def test_render_prints_artifact_path(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    _clear_env(monkeypatch)
    fake = FakeRenderer()
    monkeypatch.setattr("chartbot.cli._build_renderer", lambda binary: fake)
    runner = CliRunner()
    result = runner.invoke(
        cli,
        ["render", "--symbol", "NASDAQ:AAPL", "--range", "3M", "--out-dir", str(tmp_path), "--output", "aapl"],
    )
    assert result.exit_code == 0, result.output
    assert str(tmp_path / "aapl.png") in result.output
    request = fake.requests[0]
    assert request.symbol == "NASDAQ:AAPL"
    assert request.time_range == "|3M"
    assert (request.width, request.height, request.delay) == (1015, 400, 4)
    assert request.input == "-"


def test_render_with_url_uses_remote_input(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    _clear_env(monkeypatch)
    fake = FakeRenderer()
    monkeypatch.setattr("chartbot.cli._build_renderer", lambda binary: fake)
    result = CliRunner().invoke(
        cli, ["render", "--symbol", "AAPL", "--url", "https://example.com", "--out-dir", str(tmp_path)]
    )
    assert result.exit_code == 0, result.output
    assert fake.requests[0].input == "https://example.com"
    assert fake.requests[0].output.endswith("-AAPL")


def test_render_failure_exits_nonzero(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    _clear_env(monkeypatch)
    fake = FakeRenderer(exc=RenderError("Renderer exited with status 1", output="boom", returncode=1))
    monkeypatch.setattr("chartbot.cli._build_renderer", lambda binary: fake)
    result = CliRunner().invoke(cli, ["render", "--symbol", "AAPL", "--out-dir", str(tmp_path)])
    assert result.exit_code == 1
    assert "status 1" in result.output


def test_markup_prints_widget(monkeypatch: pytest.MonkeyPatch) -> None:
    _clear_env(monkeypatch)
    result = CliRunner().invoke(cli, ["markup", "--symbol", "AAPL", "-t", "--range", "6M"])
    assert result.exit_code == 0, result.output
    assert '"range": "6M"' in result.output
    assert "MASimple@tv-basicstudies" in result.output


def test_config_check_reports_renderer(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    _clear_env(monkeypatch)
    binary = tmp_path / "capture-website"
    binary.write_text("#!/bin/sh\n")
    monkeypatch.setenv("CAPTURE_WEBSITE_BIN", str(binary))
    result = CliRunner().invoke(cli, ["config-check"])
    assert result.exit_code == 0, result.output
    assert f"renderer: {binary} (found)" in result.output
    assert "telegram token: not set" in result.output


def test_config_check_unsupported_platform(monkeypatch: pytest.MonkeyPatch) -> None:
    """Without a configured binary, an unknown platform exits with status 2."""
    _clear_env(monkeypatch)
    monkeypatch.setattr("chartbot.charts.renderer.RENDERER_PATHS", {})
    result = CliRunner().invoke(cli, ["config-check"])
    assert result.exit_code == 2
    assert "Unsupported platform" in result.output


def test_poll_requires_token(monkeypatch: pytest.MonkeyPatch) -> None:
    _clear_env(monkeypatch)
    result = CliRunner().invoke(cli, ["poll", "--once"])
    assert result.exit_code == 2
    assert "TELEGRAM_BOT_TOKEN" in result.output


def test_poll_once_wires_handler(monkeypatch: pytest.MonkeyPatch) -> None:
    _clear_env(monkeypatch)
    monkeypatch.setenv("TELEGRAM_BOT_TOKEN", "dummy-token")
    monkeypatch.setenv("TELEGRAM_CHAT_ID_ALLOWLIST", "1, 2")
    monkeypatch.setenv("CHARTBOT_DELETE_COMMANDS", "yes")
    monkeypatch.setattr("chartbot.cli._build_renderer", lambda binary: FakeRenderer())
    recorded = {}

    def fake_run_bot(bot, handler, allowlist=(), delete_source=False, once=False):  # type: ignore[no-untyped-def]
        recorded.update(allowlist=list(allowlist), delete_source=delete_source, once=once, handler=handler)

    monkeypatch.setattr("chartbot.cli.run_bot", fake_run_bot)
    result = CliRunner().invoke(cli, ["poll", "--once"])
    assert result.exit_code == 0, result.output
    assert recorded["allowlist"] == ["1", "2"]
    assert recorded["delete_source"] is True
    assert recorded["once"] is True


def test_load_settings_defaults(monkeypatch: pytest.MonkeyPatch) -> None:
    _clear_env(monkeypatch)
    settings = load_settings()
    assert settings.image_dir == "./img"
    assert settings.renderer_path is None
    assert settings.chat_allowlist == []
    assert settings.delete_commands is False
    assert settings.render_timeout == 60.0


def test_load_settings_bad_timeout_falls_back(monkeypatch: pytest.MonkeyPatch) -> None:
    _clear_env(monkeypatch)
    monkeypatch.setenv("CHARTBOT_RENDER_TIMEOUT", "soon")
    assert load_settings().render_timeout == 60.0
