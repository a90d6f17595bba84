"""
Renders the command lines that are injected into the answer file. Commands are Cheetah templates so that paths and
namespaces can be changed from the settings file without touching code.
"""

# SPDX-License-Identifier: GPL-2.0-or-later

import logging
from typing import Any, Dict

from Cheetah.Template import Template as CheetahTemplate  # type: ignore

from unattend.cexceptions import CX

logger = logging.getLogger()


class Templar:
    """
    Wrapper to encapsulate all logic of Cheetah vs. the answer file builder.
    """

    def __init__(self) -> None:
        self.last_errors: list = []

    def render(self, raw_data: str, search_table: Dict[str, Any]) -> str:
        """
        Render a Cheetah template.

        :param raw_data: The template source. Literal dollar signs have to be escaped as ``\\$``.
        :param search_table: The values placeholders are resolved against.
        :raises CX: In case the template could not be compiled or references an unknown placeholder.
        :return: The rendered string with surrounding whitespace removed.
        """
        try:
            template = CheetahTemplate(source=raw_data, searchList=[search_table])
            data_out = str(template)
        except Exception as exc:
            self.last_errors.append(str(exc))
            logger.warning("errors were encountered rendering the template")
            logger.warning(str(exc))
            raise CX("Error rendering template: %s", str(exc)) from exc
        return data_out.strip()
