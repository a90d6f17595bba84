"""
Command line interface of the answer file builder.

``inject`` is run once per build while the installation media is prepared. The other commands are run afterwards,
possibly by the bootstrapped script on the target machine, against the answer file written by ``inject``.
"""

# SPDX-License-Identifier: GPL-2.0-or-later

import argparse
import logging
import logging.config
import os
import pathlib
import sys
from typing import Dict, List, Optional

from unattend import bootstrap, extension, identity
from unattend.cexceptions import UnattendException
from unattend.document import AnswerDocument
from unattend.layout import MediaLayout
from unattend.settings import DEFAULT_SETTINGS_FILE, Settings, read_settings_file

DEFAULT_LOGGING_CONFIG = "/etc/unattend/logging_config.conf"

logger = logging.getLogger()


def setup_logging(log_config: str, log_level: Optional[str]) -> None:
    """
    Configure logging from the logging config file if there is one.

    :param log_config: Path of a :func:`logging.config.fileConfig` file.
    :param log_level: Optional level name overriding the configured level.
    """
    if os.path.exists(log_config):
        logging.config.fileConfig(log_config, disable_existing_loggers=False)
    else:
        logging.basicConfig(format="%(asctime)s %(levelname)s %(message)s")
        logging.getLogger().setLevel(logging.INFO)
    if log_level:
        logging.getLogger().setLevel(log_level.upper())


def load_settings(filepath: str) -> Settings:
    if os.path.isfile(filepath):
        return read_settings_file(filepath)
    logger.debug("settings file %s not found, using defaults", filepath)
    return Settings()


def parse_fields(pairs: List[str]) -> Dict[str, str]:
    """
    Turn ``KEY=VALUE`` arguments into a dict.

    :raises ValueError: In case an argument has no ``=`` or an empty key.
    """
    fields: Dict[str, str] = {}
    for pair in pairs:
        key, separator, value = pair.partition("=")
        if not separator or not key:
            raise ValueError(f'"{pair}" is not of the form KEY=VALUE')
        fields[key] = value
    return fields


def open_document(options: argparse.Namespace, settings: Settings) -> AnswerDocument:
    """
    Open the answer file the runtime commands operate on: the one given on the command line or the output file of the
    layout.
    """
    layout = MediaLayout.from_settings(settings, options.media_root)
    path = options.answer_file or layout.output_answer_file
    return AnswerDocument.from_file(path, settings)


def do_inject(options: argparse.Namespace, settings: Settings) -> int:
    layout = MediaLayout.from_settings(settings, options.media_root)
    document = AnswerDocument.load(layout, settings)
    if options.answer_file:
        document.path = pathlib.Path(options.answer_file)
    bootstrap.inject_bootstrap(document, layout, options.folder_name)
    print(document.path)
    return 0


def do_set_device_name(options: argparse.Namespace, settings: Settings) -> int:
    identity.set_device_name(open_document(options, settings), options.name)
    return 0


def do_set_user_input(options: argparse.Namespace, settings: Settings) -> int:
    fields = parse_fields(options.fields)
    extension.set_user_input(open_document(options, settings), fields)
    return 0


def do_set_local_account(options: argparse.Namespace, settings: Settings) -> int:
    if options.encoded_password is not None:
        encoded = options.encoded_password
    else:
        encoded = identity.encode_password(options.password)
    identity.set_local_account(
        open_document(options, settings), options.username, encoded
    )
    return 0


def build_parser() -> argparse.ArgumentParser:
    op = argparse.ArgumentParser(
        prog="unattend", description="Build and patch Windows answer files."
    )
    op.add_argument(
        "--config",
        "-c",
        help="The location of the settings file.",
        default=DEFAULT_SETTINGS_FILE,
    )
    op.add_argument(
        "--log-config",
        help="The location of the logging configuration file.",
        default=DEFAULT_LOGGING_CONFIG,
    )
    op.add_argument(
        "-l",
        "--log-level",
        dest="log_level",
        metavar="LEVEL",
        help="log level (ie. DEBUG, INFO, WARNING, ERROR, CRITICAL)",
    )
    op.add_argument(
        "--media-root",
        help="Root of the installation media. Overrides the settings file.",
    )
    op.add_argument(
        "--answer-file",
        help="Answer file to write to. Defaults to the output location on the runtime drive.",
    )
    subparsers = op.add_subparsers(dest="command", required=True)

    inject = subparsers.add_parser(
        "inject", help="embed the copy script and add the bootstrap commands"
    )
    inject.add_argument(
        "--folder-name",
        help="argument for the embedded script, defaults to the deployment folder name",
    )
    inject.set_defaults(func=do_inject)

    device_name = subparsers.add_parser(
        "set-device-name", help="set the computer name"
    )
    device_name.add_argument("name")
    device_name.set_defaults(func=do_set_device_name)

    user_input = subparsers.add_parser(
        "set-user-input", help="store KEY=VALUE pairs in the answer file"
    )
    user_input.add_argument("fields", nargs="+", metavar="KEY=VALUE")
    user_input.set_defaults(func=do_set_user_input)

    local_account = subparsers.add_parser(
        "set-local-account", help="create or update a local administrator"
    )
    local_account.add_argument("username")
    password = local_account.add_mutually_exclusive_group(required=True)
    password.add_argument("--password", help="clear text password, encoded before writing")
    password.add_argument("--encoded-password", help="already encoded password value")
    local_account.set_defaults(func=do_set_local_account)
    return op


def main(argv: Optional[List[str]] = None) -> int:
    """
    Main entrypoint for the answer file builder.
    """
    options = build_parser().parse_args(argv)
    setup_logging(options.log_config, options.log_level)

    # Disable broad exception caught as this is desired on a top-level entrypoint
    # pylint: disable=broad-exception-caught
    try:
        settings = load_settings(options.config)
        return options.func(options, settings)
    except (UnattendException, ValueError) as error:
        logger.error("%s", error)
        return 1
    except Exception as error:
        logger.exception("Unexpected error: %s", error)
        return 1


if __name__ == "__main__":
    sys.exit(main())
