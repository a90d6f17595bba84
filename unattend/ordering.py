"""
Ordered command lists of the answer file (``RunSynchronous`` and ``FirstLogonCommands``).

The ``Order`` of a new entry is always computed from the entries already present. Entries are only ever appended,
never reordered or removed.
"""

# SPDX-License-Identifier: GPL-2.0-or-later

import logging
from typing import Optional

from lxml import etree

from unattend import enums
from unattend.document import AnswerDocument, qname

logger = logging.getLogger()


def next_order(list_node: "etree._Element") -> int:
    """
    Compute the ``Order`` for the next entry of a command list.

    Only direct children that carry an ``Order`` element are taken into account. Values that are not integers are
    ignored, they neither raise nor count.

    :param list_node: The list element, e.g. ``RunSynchronous``.
    :return: The highest existing order plus one, 1 for an empty list.
    """
    highest = 0
    order_tag = qname("Order")
    for entry in list_node.iterchildren(tag=etree.Element):
        order = entry.find(order_tag)
        if order is None:
            continue
        try:
            value = int((order.text or "").strip())
        except ValueError:
            logger.debug("ignoring malformed Order %r in %s", order.text, entry.tag)
            continue
        highest = max(highest, value)
    return highest + 1


def append_ordered_command(
    document: AnswerDocument,
    list_node: "etree._Element",
    entry_name: str,
    command_field: enums.CommandField,
    command: str,
    description: Optional[str] = None,
) -> "etree._Element":
    """
    Append a command to an ordered list. The order is taken right before the entry is built.

    :param document: The answer file the list belongs to.
    :param list_node: The list element.
    :param entry_name: ``RunSynchronousCommand`` or ``SynchronousCommand``.
    :param command_field: The element that holds the command for this kind of entry.
    :param command: The executable path or full command line.
    :param description: Optional human readable description.
    :return: The new entry.
    """
    order = next_order(list_node)
    entry = document.create(list_node, entry_name)
    document.set_attribute(entry, "action", "add", enums.Namespace.WCM)
    document.create(entry, "Order").text = str(order)
    document.create(entry, command_field.value).text = command
    if description:
        document.create(entry, "Description").text = description
    logger.info("Added %s with Order %s", entry_name, order)
    return entry
