"""Command line surface for woci: login, logout, push and pull."""

from __future__ import annotations

import argparse
import logging
from pathlib import Path
from typing import Sequence

from woci_core.auth import (
    CredentialStore,
    github_cli_credentials,
    login,
    logout,
    resolve_credentials,
)
from woci_core.config import Settings, load_settings
from woci_core.errors import InvalidInputError, NotFoundError, WociError
from woci_core.paths import default_auth_path
from woci_core.wasm import PullArgs, PushArgs, pull, push

CLI_VERSION = "0.1.0"

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="woci",
        description="woci — push and pull WebAssembly modules through OCI registries.",
    )
    parser.add_argument("--version", action="version", version=f"woci v{CLI_VERSION}")
    parser.add_argument("-v", "--verbose", action="store_true", help="enable debug logging")
    parser.add_argument("--config", type=Path, help="path to config.toml")
    subparsers = parser.add_subparsers(dest="command")
    subparsers.required = False

    login_cmd = subparsers.add_parser("login", help="verify and store credentials for a registry")
    login_cmd.add_argument("url", help="registry url (e.g. https://ghcr.io)")
    login_cmd.add_argument("-u", "--username", required=True, help="registry username")
    login_cmd.add_argument("-p", "--password", required=True, help="registry password or token")
    _add_auth_file(login_cmd)
    login_cmd.set_defaults(func=_handle_login)

    logout_cmd = subparsers.add_parser("logout", help="forget stored credentials for a registry host")
    logout_cmd.add_argument("host", help="registry host (e.g. ghcr.io)")
    _add_auth_file(logout_cmd)
    logout_cmd.set_defaults(func=_handle_logout)

    push_cmd = subparsers.add_parser("push", help="push a wasm module to a registry")
    push_cmd.add_argument("file", help="local .wasm file")
    push_cmd.add_argument("image_url", help="target url (e.g. https://ghcr.io/org/module:v1)")
    push_cmd.add_argument(
        "--annotation",
        action="append",
        default=[],
        help="manifest annotation (KEY=VALUE)",
    )
    _add_credentials(push_cmd)
    push_cmd.set_defaults(func=_handle_push)

    pull_cmd = subparsers.add_parser("pull", help="pull a wasm module from a registry")
    pull_cmd.add_argument("image_url", help="source url (e.g. https://ghcr.io/org/module:v1)")
    pull_cmd.add_argument("-o", "--output", dest="write_file", required=True, help="file to write")
    _add_credentials(pull_cmd)
    pull_cmd.set_defaults(func=_handle_pull)

    return parser


def main(argv: Sequence[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    settings = load_settings(args.config)
    _configure_logging(settings, verbose=args.verbose)
    func = getattr(args, "func", None)
    if func is None:
        parser.print_help()
        return 0
    try:
        return func(args, settings)
    except WociError as exc:
        print(f"[woci:{args.command}] error: {exc}")
        return 1


def _add_auth_file(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--auth-file",
        type=Path,
        default=None,
        help="credential file (defaults to the per-user config directory)",
    )


def _add_credentials(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("-u", "--username", help="registry username")
    parser.add_argument("-p", "--password", help="registry password or token")
    parser.add_argument(
        "--gh-token",
        action="store_true",
        help="use the GitHub CLI token from ~/.config/gh/hosts.yml",
    )
    parser.add_argument(
        "--gh-hosts-file",
        type=Path,
        default=None,
        help="GitHub CLI hosts.yml read by --gh-token",
    )
    _add_auth_file(parser)


def _configure_logging(settings: Settings, *, verbose: bool) -> None:
    level = logging.DEBUG if verbose else getattr(logging, settings.log_level, logging.WARNING)
    logging.basicConfig(level=level, format="%(levelname)s %(name)s: %(message)s")


def _auth_file(args: argparse.Namespace) -> Path:
    return args.auth_file or default_auth_path()


def _handle_login(args: argparse.Namespace, settings: Settings) -> int:
    login(args.url, args.username, args.password, _auth_file(args), settings=settings)
    print("[woci:login] Login success")
    return 0


def _handle_logout(args: argparse.Namespace, settings: Settings) -> int:
    logout(args.host, _auth_file(args))
    print(f"[woci:logout] credentials for '{args.host}' removed")
    return 0


def _handle_push(args: argparse.Namespace, settings: Settings) -> int:
    annotations = _parse_key_values(args.annotation)
    username, password = _credentials_for(args)
    manifest_url = push(
        PushArgs(
            file=args.file,
            image_url=args.image_url,
            username=username,
            password=password,
            annotations=annotations or None,
        ),
        settings=settings,
    )
    print(f"[woci:push] pushed {args.file} -> {manifest_url}")
    return 0


def _handle_pull(args: argparse.Namespace, settings: Settings) -> int:
    username, password = _credentials_for(args)
    target = pull(
        PullArgs(
            write_file=args.write_file,
            image_url=args.image_url,
            username=username,
            password=password,
        ),
        settings=settings,
    )
    print(f"[woci:pull] wrote {target}")
    return 0


def _credentials_for(args: argparse.Namespace) -> tuple[str, str]:
    """Explicit flags, then the gh token, then the URL or credential store, then anonymous."""

    if args.password and not args.username:
        raise InvalidInputError("--password requires --username")
    if args.username:
        return args.username, args.password or ""
    if args.gh_token:
        return github_cli_credentials(args.gh_hosts_file)
    try:
        return resolve_credentials(args.image_url, CredentialStore.load(_auth_file(args)))
    except NotFoundError:
        logger.debug("no stored credentials for %s; continuing anonymously", args.image_url)
        return "", ""


def _parse_key_values(items: Sequence[str] | None) -> dict[str, str]:
    result: dict[str, str] = {}
    if not items:
        return result
    for entry in items:
        if "=" not in entry:
            raise InvalidInputError(f"invalid key=value pair: {entry}")
        key, value = entry.split("=", 1)
        result[key.strip()] = value.strip()
    return result
