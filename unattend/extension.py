"""
The extension subtree of the answer file. It lives in its own namespace and carries the embedded copy script and the
user input that was captured during deployment.
"""

# SPDX-License-Identifier: GPL-2.0-or-later

import logging
from typing import Dict, Mapping, Optional

from lxml import etree

from unattend.document import AnswerDocument

logger = logging.getLogger()

COPY_SCRIPT_ELEMENT = "CopyScript"
USER_INPUT_ELEMENT = "UserInput"

REDACTED_USER_INPUT_KEYS = frozenset({"localPassword"})
"""
User input keys that are never written to disk, no matter what the caller passes.
"""


def store_copy_script(document: AnswerDocument, script_text: str) -> "etree._Element":
    """
    Put the script text into the extension block without saving. Used by operations that save on their own.
    """
    return document.set_text(
        document.extension_block(),
        COPY_SCRIPT_ELEMENT,
        script_text,
        document.extension_namespace,
    )


def set_copy_script(document: AnswerDocument, script_text: str) -> None:
    """
    Embed the verbatim source of the copy script and save the document.
    """
    store_copy_script(document, script_text)
    document.save()


def get_copy_script(document: AnswerDocument) -> Optional[str]:
    """
    :return: The embedded script or None if the document does not carry one.
    """
    block = document.find_extension_block()
    if block is None:
        return None
    element = document.find(block, COPY_SCRIPT_ELEMENT, document.extension_namespace)
    if element is None:
        return None
    return element.text or ""


def redact_user_input(fields: Mapping[str, str]) -> Dict[str, str]:
    """
    Drop every key in :data:`REDACTED_USER_INPUT_KEYS`.

    :return: A copy of the fields with all values converted to str.
    """
    redacted = {}
    for key, value in fields.items():
        if key in REDACTED_USER_INPUT_KEYS:
            logger.info("Not persisting user input field %s", key)
            continue
        redacted[key] = str(value)
    return redacted


def set_user_input(document: AnswerDocument, fields: Mapping[str, str]) -> bool:
    """
    Upsert user input fields below ``UserInput``. Each key becomes an element named after it.

    :param document: The answer file.
    :param fields: Field names and their values.
    :raises ValueError: In case a key is not a valid XML element name or a value is not valid element text. Nothing is
                        changed in that case.
    :raises SerializationError: In case the document could not be saved.
    :return: True once the document was saved.
    """
    redacted = redact_user_input(fields)
    namespace = document.extension_namespace
    for key, value in redacted.items():
        try:
            etree.QName(namespace, key)
        except ValueError as error:
            raise ValueError(f'"{key}" is not a valid user input field name') from error
        try:
            document.check_text(value)
        except ValueError as error:
            raise ValueError(f'Value of user input field "{key}" is not valid XML text') from error

    user_input = document.find_or_create(
        document.extension_block(), USER_INPUT_ELEMENT, namespace
    )
    for key, value in redacted.items():
        document.set_text(user_input, key, value, namespace)
    document.save()
    return True


def get_user_input(document: AnswerDocument) -> Dict[str, str]:
    """
    Read back the captured user input.

    :return: The fields stored in the document. Empty if there are none.
    """
    result: Dict[str, str] = {}
    block = document.find_extension_block()
    if block is None:
        return result
    user_input = document.find(block, USER_INPUT_ELEMENT, document.extension_namespace)
    if user_input is None:
        return result
    for field in user_input.iterchildren(tag=etree.Element):
        name = etree.QName(field)
        if name.namespace != document.extension_namespace:
            continue
        result[name.localname] = field.text or ""
    return result
