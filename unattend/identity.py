"""
Machine identity: the computer name set during ``specialize`` and local administrator accounts created during
``oobeSystem``.
"""

# SPDX-License-Identifier: GPL-2.0-or-later

import base64
import logging
from typing import Optional

from lxml import etree

from unattend import enums
from unattend.cexceptions import StructureNotFoundError
from unattend.document import AnswerDocument, qname

logger = logging.getLogger()


def encode_password(password: str, field: str = "Password") -> str:
    """
    Obfuscate a password the way the setup engine expects when ``PlainText`` is ``false``: the name of the password
    element is appended, the result is encoded as UTF-16-LE and then as base64. This is no encryption.

    :param password: The clear text password.
    :param field: The name of the element that will hold the value.
    :return: The encoded value.
    """
    return base64.b64encode((password + field).encode("utf-16-le")).decode("ascii")


def set_device_name(document: AnswerDocument, name: str) -> None:
    """
    Set ``ComputerName`` of the Shell-Setup component in the specialize pass.

    The component has to exist already, it is never created here.

    :param document: The answer file.
    :param name: The new computer name.
    :raises ValueError: In case the name is empty or not valid XML text.
    :raises StructureNotFoundError: In case the specialize pass or its Shell-Setup component is missing. Nothing is
                                    written in that case.
    """
    if not name:
        raise ValueError("The device name must not be empty!")
    document.check_text(name)
    shell_setup = document.find_component(
        document.find_pass(enums.ConfigurationPass.SPECIALIZE),
        enums.ComponentName.SHELL_SETUP,
    )
    if shell_setup is None:
        raise StructureNotFoundError(
            "Component %s not found in pass %s",
            enums.ComponentName.SHELL_SETUP.value,
            enums.ConfigurationPass.SPECIALIZE.value,
        )
    document.set_text(shell_setup, "ComputerName", name)
    logger.info("Device name set to %s", name)
    document.save()


def find_local_account(
    document: AnswerDocument, local_accounts: "etree._Element", username: str
) -> Optional["etree._Element"]:
    """
    :return: The ``LocalAccount`` whose ``Name`` equals the username or None.
    """
    for account in local_accounts.iterchildren(qname("LocalAccount")):
        name = document.find(account, "Name")
        if name is not None and name.text == username:
            return account
    return None


def set_local_account(
    document: AnswerDocument, username: str, password_value_encoded: str
) -> None:
    """
    Create or update a local administrator account.

    An existing account only gets a new password, its display name and group are left alone. A new account gets the
    username as display name and the configured group.

    :param document: The answer file.
    :param username: The account name. Used as key.
    :param password_value_encoded: The already encoded password, see :func:`encode_password`.
    :raises ValueError: In case the username is empty or one of the values is not valid XML text. Nothing is created in
                        that case.
    """
    if not username:
        raise ValueError("The username must not be empty!")
    document.check_text(username)
    document.check_text(password_value_encoded)
    document.check_text(document.settings.account_group)
    shell_setup = document.component(
        enums.ConfigurationPass.OOBESYSTEM, enums.ComponentName.SHELL_SETUP
    )
    user_accounts = document.find_or_create(shell_setup, "UserAccounts")
    local_accounts = document.find_or_create(user_accounts, "LocalAccounts")

    account = find_local_account(document, local_accounts, username)
    if account is None:
        account = document.create(local_accounts, "LocalAccount")
        document.set_attribute(account, "action", "add", enums.Namespace.WCM)
        password = document.create(account, "Password")
        document.create(password, "Value").text = password_value_encoded
        document.create(password, "PlainText").text = "false"
        document.create(account, "DisplayName").text = username
        document.create(account, "Group").text = document.settings.account_group
        document.create(account, "Name").text = username
        logger.info("Local account %s created", username)
    else:
        password = document.find_or_create(account, "Password")
        document.set_text(password, "Value", password_value_encoded)
        document.set_text(password, "PlainText", "false")
        logger.info("Password of local account %s updated", username)
    document.save()
