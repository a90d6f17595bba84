"""
Misc helper functions for the answer file builder
"""

# SPDX-License-Identifier: GPL-2.0-or-later

import logging
import sys
import traceback

logger = logging.getLogger()


def log_exc() -> None:
    """
    Log an exception.
    """
    (exception_type, exception_value, exception_traceback) = sys.exc_info()
    logger.info("Exception occurred: %s", exception_type)
    logger.info("Exception value: %s", exception_value)
    logger.info(
        "Exception Info:\n%s",
        "\n".join(traceback.format_list(traceback.extract_tb(exception_traceback))),
    )
