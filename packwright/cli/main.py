# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
CLI entrypoint for packwright.

Every operation is a subcommand of `packwright`. The global options
(--config, --log-level, --dry-run) are inherited by every subcommand
through argparse's parent parser mechanism.

Usage:
    packwright <subcommand> [options]
    packwright package --config packwright.yaml
    packwright sign --app target/appdir/Demo.app --launcher target/appdir/Demo.app/Contents/MacOS/Demo
    packwright notarize --artifact target/appdir/Demo-1.0.dmg --keychain-profile notary
    packwright info
"""

import argparse
import sys
from typing import Optional, Sequence

from packwright.cli.commands import (
    handle_info,
    handle_notarize,
    handle_package,
    handle_sign,
    handle_unsign,
)
from packwright.cli.exit_codes import USER_ERROR


def _build_global_parser(suppress_defaults: bool = False) -> argparse.ArgumentParser:
    """
    Build the parent parser with global options.

    add_help=False keeps the parent's help from colliding with the
    subcommand parsers. The subcommand copy uses SUPPRESS defaults so
    `packwright --config x.yaml package` keeps the root-level value.
    """

    def _default(value: object) -> object:
        return argparse.SUPPRESS if suppress_defaults else value

    parent = argparse.ArgumentParser(add_help=False)
    parent.add_argument(
        "--config",
        type=str,
        default=_default(None),
        help="Path to YAML configuration file.",
    )
    parent.add_argument(
        "--log-level",
        type=str,
        default=_default(None),
        dest="log_level",
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        help="Set the logging verbosity level (overrides global.log_level).",
    )
    parent.add_argument(
        "--dry-run",
        action="store_true",
        default=_default(False),
        dest="dry_run",
        help="Log the native commands instead of running them.",
    )
    return parent


def _register_subcommands(
    subparsers: argparse._SubParsersAction,  # type: ignore[type-arg]
    parent: argparse.ArgumentParser,
) -> None:
    commands = [
        ("package", "Build the native installer for this host.", handle_package),
        ("sign", "Code sign a macOS .app bundle.", handle_sign),
        ("unsign", "Remove signatures from the runtime inside a .app bundle.", handle_unsign),
        ("notarize", "Notarize and staple a signed artifact.", handle_notarize),
        ("info", "Display the build host and available formats.", handle_info),
    ]

    for name, help_text, handler in commands:
        parser = subparsers.add_parser(name, parents=[parent], help=help_text)
        parser.set_defaults(func=handler)

    sign_parser = subparsers.choices["sign"]
    sign_parser.add_argument("--app", required=True, help="Path to the .app bundle.")
    sign_parser.add_argument("--launcher", required=True, help="Path to the launcher executable.")
    sign_parser.add_argument(
        "--identity",
        default=None,
        help="Signing certificate name (defaults to mac.developer_id).",
    )
    sign_parser.add_argument(
        "--entitlements-runtime",
        default=None,
        dest="entitlements_runtime",
        help="Entitlements for the runtime executables (defaults to the bundled ones).",
    )
    sign_parser.add_argument(
        "--entitlements-launcher",
        default=None,
        dest="entitlements_launcher",
        help="Entitlements for the launcher (defaults to the bundled ones).",
    )

    unsign_parser = subparsers.choices["unsign"]
    unsign_parser.add_argument("--app", required=True, help="Path to the .app bundle.")

    notarize_parser = subparsers.choices["notarize"]
    notarize_parser.add_argument("--artifact", required=True, help="Signed .dmg, .zip or .pkg.")
    notarize_parser.add_argument(
        "--keychain-profile",
        default=None,
        dest="keychain_profile",
        help="notarytool credential profile (defaults to mac.keychain_profile).",
    )


def build_parser() -> argparse.ArgumentParser:
    root_parser = argparse.ArgumentParser(
        prog="packwright",
        description="packwright: native installers for modular Java applications.",
        parents=[_build_global_parser()],
    )
    subparsers = root_parser.add_subparsers(dest="command")
    _register_subcommands(subparsers, _build_global_parser(suppress_defaults=True))
    return root_parser


def main(argv: Optional[Sequence[str]] = None) -> None:
    """
    Main CLI entrypoint. This is what pyproject.toml's [project.scripts] points to.

    If no subcommand is given, we show help and exit with USER_ERROR.
    """
    root_parser = build_parser()
    args = root_parser.parse_args(argv)

    if not hasattr(args, "func") or args.func is None:
        root_parser.print_help()
        sys.exit(USER_ERROR)

    exit_code = args.func(args)
    sys.exit(exit_code)


if __name__ == "__main__":
    main()
