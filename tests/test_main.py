from __future__ import annotations

from pathlib import Path

import pytest
import requests

import main
from main import (
    Arguments, ColorMode, break_line_width, parse_args, parse_config, run
)


COMMAND = (
    "curl -X POST https://api.example.com/items "
    "-H 'Content-Type: application/json' -d '{\"name\":\"a\"}'"
)


def write_command(tmp_path: Path, text: str) -> str:
    path = tmp_path / "command.txt"
    path.write_text(text)
    return str(path)


def make_args(tmp_path: Path, command: str, **kwargs) -> Arguments:
    return Arguments(
        file=write_command(tmp_path, command),
        config_file=str(tmp_path / "missing.ini"),
        color=False,
        **kwargs,
    )


def test_break_line_width() -> None:
    assert break_line_width(10, "short") == ["short"]

    line = "a" * 9 + "b" * 16
    lines = break_line_width(10, line)
    assert all(len(part) <= 10 for part in lines)
    assert lines[0] + "".join(part[2:] for part in lines[1:]) == line


def test_parse_args() -> None:
    args = parse_args([
        "-f", "cmd.txt", "-X", "put", "-H", "A: 1", "-H", "B: 2",
        "-n", "-m", "8bit",
    ])
    assert args.file == "cmd.txt"
    assert args.method == "put"
    assert args.headers == ["A: 1", "B: 2"]
    assert args.color is False
    assert args.send is False
    assert args.color_mode == ColorMode.Bit8
    assert Path(args.config_file).name == "curlform.ini"


def test_parse_config(tmp_path: Path) -> None:
    config = tmp_path / "curlform.ini"
    config.write_text(
        "[request]\ntimeout = 2.5\nverify = no\n\n"
        "[logging]\nlevel = info\n\n"
        "[4bit]\nerror_color = 91\n"
    )
    args = Arguments(config_file=str(config), color_mode=ColorMode.Bit4)
    settings = parse_config(args)
    assert settings.timeout == 2.5
    assert settings.verify is False
    assert settings.log_level == "INFO"
    assert settings.theme.error_color == "91"
    assert settings.theme.text_color == "37"


def test_parse_config_defaults(tmp_path: Path) -> None:
    args = Arguments(config_file=str(tmp_path / "missing.ini"))
    settings = parse_config(args)
    assert settings.timeout == 30.0
    assert settings.verify is True
    assert settings.theme.title_color == "97,175,239"


def test_parse_config_rejects_bad_color(tmp_path: Path) -> None:
    config = tmp_path / "curlform.ini"
    config.write_text("[24bit]\ntext_color = 12\n")
    with pytest.raises(Exception, match="Invalid RGB color"):
        parse_config(Arguments(config_file=str(config)))


def test_run_prints_request(tmp_path: Path,
                            capsys: pytest.CaptureFixture) -> None:
    assert run(make_args(tmp_path, COMMAND)) == 0
    out = capsys.readouterr().out
    assert "Method -> POST" in out
    assert "URL -> https://api.example.com/items" in out
    assert "Content-Type: application/json" in out
    assert '{"name":"a"}' in out


def test_run_applies_overrides(tmp_path: Path,
                               capsys: pytest.CaptureFixture) -> None:
    args = make_args(tmp_path, COMMAND, method="delete",
                     headers=["X-Extra: yes"])
    assert run(args) == 0
    out = capsys.readouterr().out
    assert "Method -> DELETE" in out
    assert "X-Extra: yes" in out


def test_run_reports_missing_url(tmp_path: Path,
                                 capsys: pytest.CaptureFixture) -> None:
    assert run(make_args(tmp_path, "curl -X POST")) == 1
    assert "Error parsing curl command" in capsys.readouterr().out


def test_run_sends_request(tmp_path: Path, capsys: pytest.CaptureFixture,
                           monkeypatch: pytest.MonkeyPatch) -> None:
    response = requests.Response()
    response.status_code = 201
    response.reason = "Created"
    response.url = "https://api.example.com/items"
    response.headers["Content-Type"] = "application/json"
    response.encoding = "utf-8"
    response._content = b'{"id": 7}'

    sent = []

    def fake_send(request, timeout, verify):
        sent.append(request)
        return response

    monkeypatch.setattr(main, "send_request", fake_send)
    assert run(make_args(tmp_path, COMMAND, send=True)) == 0

    assert sent[0].body == '{"name":"a"}'
    out = capsys.readouterr().out
    assert "Status code -> 201 Created" in out
    assert '"id": 7' in out


def test_run_reports_failed_request(tmp_path: Path,
                                    capsys: pytest.CaptureFixture,
                                    monkeypatch: pytest.MonkeyPatch) -> None:
    def fake_send(request, timeout, verify):
        raise main.RequestFailed("Error sending request: 500 Server Error")

    monkeypatch.setattr(main, "send_request", fake_send)
    assert run(make_args(tmp_path, COMMAND, send=True)) == 1
    assert "500 Server Error" in capsys.readouterr().out
