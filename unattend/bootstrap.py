"""
Injects the bootstrap commands into an answer file.

The machine that executes the answer file cannot reach the build host. The copy script is therefore embedded into the
answer file itself, and the specialize pass gets a command that reads it back out of the file and runs it. The
oobeSystem pass gets a first logon command that starts the second stage script the copy script put into place.
"""

# SPDX-License-Identifier: GPL-2.0-or-later

import logging
from typing import Optional, Tuple

from unattend import enums, extension
from unattend.cexceptions import SourceUnreadableError
from unattend.document import AnswerDocument
from unattend.layout import MediaLayout
from unattend.ordering import append_ordered_command
from unattend.templar import Templar
from unattend.utils import filesystem_helpers

logger = logging.getLogger()

QUOTE_CHARACTERS = ("'", '"')


def validate_folder_name(extension_folder_name: str) -> str:
    """
    The folder name ends up inside a quoted PowerShell argument, so it must not contain quotes.

    :raises ValueError: In case the name is empty or contains a quote character.
    :return: The unchanged folder name.
    """
    if not extension_folder_name:
        raise ValueError("The extension folder name must not be empty!")
    if any(quote in extension_folder_name for quote in QUOTE_CHARACTERS):
        raise ValueError(
            f'The extension folder name "{extension_folder_name}" must not contain quotes!'
        )
    return extension_folder_name


def render_commands(
    document: AnswerDocument,
    layout: MediaLayout,
    extension_folder_name: str,
    templar: Optional[Templar] = None,
) -> Tuple[str, str]:
    """
    Render the specialize and the first logon command lines from the templates in the settings.

    :raises ValueError: In case the folder name contains quotes.
    :return: The bootstrap command and the second stage command.
    """
    templar = templar or Templar()
    settings = document.settings
    search_table = {
        "runtime_answer_file": settings.runtime_answer_file,
        "extension_namespace": document.extension_namespace,
        "extension_block_name": settings.extension_block_name,
        "extension_folder_name": validate_folder_name(extension_folder_name),
        "second_stage_script": layout.second_stage_script,
    }
    return (
        templar.render(settings.bootstrap_command_template, search_table),
        templar.render(settings.second_stage_command_template, search_table),
    )


def read_copy_script(layout: MediaLayout) -> str:
    """
    Read the copy script from the media and make sure it can be embedded.

    :raises SourceUnreadableError: In case the script cannot be read, is empty or contains characters XML cannot
                                   carry.
    """
    script_text = filesystem_helpers.read_text_file(layout.copy_script)
    if not script_text.strip():
        raise SourceUnreadableError("Copy script %s is empty", str(layout.copy_script))
    try:
        AnswerDocument.check_text(script_text)
    except ValueError as error:
        raise SourceUnreadableError(
            "Copy script %s cannot be embedded: %s", str(layout.copy_script), str(error)
        ) from error
    return script_text


def inject_bootstrap(
    document: AnswerDocument,
    layout: MediaLayout,
    extension_folder_name: Optional[str] = None,
    templar: Optional[Templar] = None,
) -> None:
    """
    Embed the copy script and append both bootstrap commands, then save.

    Calling this twice appends the commands twice, each with its own order.

    :param document: The answer file.
    :param layout: The paths of the current provisioning run.
    :param extension_folder_name: Argument passed to the embedded script. Defaults to the deployment folder name.
    :param templar: The renderer for the command templates.
    :raises SourceUnreadableError: In case the copy script cannot be read, is empty or cannot be embedded. The document
                                   is not touched.
    :raises ValueError: In case the folder name contains quotes or a rendered command is not valid XML text. The
                        document is not touched.
    :raises CX: In case a command template cannot be rendered. The document is not touched.
    """
    folder_name = extension_folder_name or layout.deployment_folder_name
    script_text = read_copy_script(layout)
    bootstrap_command, second_stage_command = render_commands(
        document, layout, folder_name, templar
    )
    settings = document.settings
    for text in (
        bootstrap_command,
        second_stage_command,
        settings.bootstrap_description,
        settings.second_stage_description,
    ):
        document.check_text(text)

    extension.store_copy_script(document, script_text)

    deployment = document.component(
        enums.ConfigurationPass.SPECIALIZE, enums.ComponentName.DEPLOYMENT
    )
    append_ordered_command(
        document,
        document.find_or_create(deployment, "RunSynchronous"),
        "RunSynchronousCommand",
        enums.CommandField.PATH,
        bootstrap_command,
        settings.bootstrap_description,
    )

    shell_setup = document.component(
        enums.ConfigurationPass.OOBESYSTEM, enums.ComponentName.SHELL_SETUP
    )
    append_ordered_command(
        document,
        document.find_or_create(shell_setup, "FirstLogonCommands"),
        "SynchronousCommand",
        enums.CommandField.COMMAND_LINE,
        second_stage_command,
        settings.second_stage_description,
    )
    logger.info(
        "Bootstrap injected for %s from %s", folder_name, layout.copy_script
    )
    document.save()
