"""Tests for the woci command line surface."""

from __future__ import annotations

from pathlib import Path

import pytest

import woci_cli.cli as cli_mod
from woci_cli import main
from woci_core.auth import CredentialRecord, CredentialStore
from woci_core.errors import AuthenticationError


def test_cli_help_without_command(capsys) -> None:
    assert main([]) == 0
    assert "usage: woci" in capsys.readouterr().out


def test_cli_version(capsys) -> None:
    with pytest.raises(SystemExit) as excinfo:
        main(["--version"])
    assert excinfo.value.code == 0
    assert "woci v0.1.0" in capsys.readouterr().out


def test_login_prints_confirmation(monkeypatch, tmp_path: Path, capsys) -> None:
    captured = {}

    def fake_login(url, username, password, path, *, settings=None):
        captured.update(url=url, username=username, password=password, path=path)
        return CredentialRecord.new("ghcr.io", username, password)

    monkeypatch.setattr(cli_mod, "login", fake_login)
    auth_file = tmp_path / "auth.json"
    code = main(["login", "https://ghcr.io", "-u", "me", "-p", "secret", "--auth-file", str(auth_file)])

    assert code == 0
    assert captured == {"url": "https://ghcr.io", "username": "me", "password": "secret", "path": auth_file}
    assert "[woci:login] Login success" in capsys.readouterr().out


def test_login_failure_reports_error(monkeypatch, tmp_path: Path, capsys) -> None:
    def fake_login(*args, **kwargs):
        raise AuthenticationError("ghcr.io rejected me")

    monkeypatch.setattr(cli_mod, "login", fake_login)
    code = main(["login", "https://ghcr.io", "-u", "me", "-p", "bad", "--auth-file", str(tmp_path / "a.json")])

    assert code == 1
    out = capsys.readouterr().out
    assert "[woci:login] error: ghcr.io rejected me" in out
    assert "Login success" not in out


def test_logout_unknown_host(tmp_path: Path, capsys) -> None:
    code = main(["logout", "ghcr.io", "--auth-file", str(tmp_path / "auth.json")])
    assert code == 1
    assert "[woci:logout] error:" in capsys.readouterr().out


def test_push_uses_stored_credentials(monkeypatch, tmp_path: Path, capsys) -> None:
    auth_file = tmp_path / "auth.json"
    store = CredentialStore()
    store.set_login(CredentialRecord.new("ghcr.io", "stored", "pw"))
    store.save(auth_file)
    captured = {}

    def fake_push(args, *, settings=None):
        captured["args"] = args
        return "https://ghcr.io/v2/org/module/manifests/v1"

    monkeypatch.setattr(cli_mod, "push", fake_push)
    code = main(
        [
            "push",
            "module.wasm",
            "https://ghcr.io/org/module:v1",
            "--annotation",
            "title=demo",
            "--auth-file",
            str(auth_file),
        ]
    )

    assert code == 0
    args = captured["args"]
    assert (args.username, args.password) == ("stored", "pw")
    assert args.annotations == {"title": "demo"}
    assert "manifests/v1" in capsys.readouterr().out


def test_pull_falls_back_to_anonymous(monkeypatch, tmp_path: Path) -> None:
    captured = {}

    def fake_pull(args, *, settings=None):
        captured["args"] = args
        return Path(args.write_file)

    monkeypatch.setattr(cli_mod, "pull", fake_pull)
    code = main(
        [
            "pull",
            "https://ghcr.io/org/module",
            "-o",
            str(tmp_path / "out.wasm"),
            "--auth-file",
            str(tmp_path / "auth.json"),
        ]
    )

    assert code == 0
    assert (captured["args"].username, captured["args"].password) == ("", "")


def test_explicit_flags_win(monkeypatch, tmp_path: Path) -> None:
    captured = {}

    def fake_pull(args, *, settings=None):
        captured["args"] = args
        return Path(args.write_file)

    monkeypatch.setattr(cli_mod, "pull", fake_pull)
    main(["pull", "https://u:p@ghcr.io/org/module", "-o", str(tmp_path / "o.wasm"), "-u", "flag-user"])
    assert (captured["args"].username, captured["args"].password) == ("flag-user", "")


def test_bad_annotation_is_reported(tmp_path: Path, capsys) -> None:
    code = main(["push", "module.wasm", "https://ghcr.io/org/module", "--annotation", "novalue", "-u", "u"])
    assert code == 1
    assert "invalid key=value pair" in capsys.readouterr().out


def _write_gh_hosts(path: Path) -> Path:
    path.write_text("github.com:\n    user: octocat\n    oauth_token: gho_abc123\n", encoding="utf-8")
    return path


def test_gh_token_beats_stored_credentials(monkeypatch, tmp_path: Path) -> None:
    auth_file = tmp_path / "auth.json"
    store = CredentialStore()
    store.set_login(CredentialRecord.new("ghcr.io", "stored", "pw"))
    store.save(auth_file)
    hosts = _write_gh_hosts(tmp_path / "hosts.yml")
    captured = {}

    def fake_pull(args, *, settings=None):
        captured["args"] = args
        return Path(args.write_file)

    monkeypatch.setattr(cli_mod, "pull", fake_pull)
    code = main(
        [
            "pull",
            "https://ghcr.io/org/module",
            "-o",
            str(tmp_path / "out.wasm"),
            "--gh-token",
            "--gh-hosts-file",
            str(hosts),
            "--auth-file",
            str(auth_file),
        ]
    )

    assert code == 0
    assert (captured["args"].username, captured["args"].password) == ("octocat", "gho_abc123")


def test_gh_token_reads_home_hosts_file_by_default(monkeypatch, tmp_path: Path) -> None:
    (tmp_path / ".config" / "gh").mkdir(parents=True)
    _write_gh_hosts(tmp_path / ".config" / "gh" / "hosts.yml")
    monkeypatch.setattr(Path, "home", classmethod(lambda cls: tmp_path))
    captured = {}

    def fake_pull(args, *, settings=None):
        captured["args"] = args
        return Path(args.write_file)

    monkeypatch.setattr(cli_mod, "pull", fake_pull)
    code = main(["pull", "https://ghcr.io/org/module", "-o", str(tmp_path / "o.wasm"), "--gh-token"])

    assert code == 0
    assert (captured["args"].username, captured["args"].password) == ("octocat", "gho_abc123")


def test_explicit_username_beats_gh_token(monkeypatch, tmp_path: Path) -> None:
    hosts = _write_gh_hosts(tmp_path / "hosts.yml")
    captured = {}

    def fake_push(args, *, settings=None):
        captured["args"] = args
        return "https://ghcr.io/v2/org/module/manifests/latest"

    monkeypatch.setattr(cli_mod, "push", fake_push)
    code = main(
        [
            "push",
            "module.wasm",
            "https://ghcr.io/org/module",
            "-u",
            "flag-user",
            "-p",
            "flag-pass",
            "--gh-token",
            "--gh-hosts-file",
            str(hosts),
        ]
    )

    assert code == 0
    assert (captured["args"].username, captured["args"].password) == ("flag-user", "flag-pass")


def test_password_without_username_is_rejected(monkeypatch, tmp_path: Path, capsys) -> None:
    called = []
    monkeypatch.setattr(cli_mod, "pull", lambda args, *, settings=None: called.append(args))
    code = main(["pull", "https://ghcr.io/org/module", "-o", str(tmp_path / "o.wasm"), "-p", "secret"])

    assert code == 1
    assert called == []
    assert "--password requires --username" in capsys.readouterr().out
