"""
Filesystem helpers used when reading embedded content and writing the answer file.
"""

# SPDX-License-Identifier: GPL-2.0-or-later

import logging
import os
import pathlib
import tempfile
from typing import Union

from unattend.cexceptions import CX, SourceUnreadableError
from unattend.utils import log_exc

logger = logging.getLogger()


def mkdir(path: Union[str, os.PathLike], mode: int = 0o755) -> None:
    """
    Create directory with a given mode. Missing parents are created as well.

    :param path: The path to create the directory at.
    :param mode: The mode to create the directory with.
    :raises CX: Raised in case creating the directory fails for another reason than it already existing.
    """
    try:
        pathlib.Path(path).mkdir(mode=mode, parents=True, exist_ok=True)
    except OSError as os_error:
        log_exc()
        raise CX("Error creating %s", str(path)) from os_error


def read_text_file(path: Union[str, os.PathLike]) -> str:
    """
    Read a text file that has to be embedded verbatim. Line endings are kept as they are on disk.

    :param path: The file to read.
    :raises SourceUnreadableError: In case the file does not exist, is not readable or is not valid UTF-8.
    :return: The content of the file.
    """
    try:
        with open(path, "r", encoding="utf-8-sig", newline="") as source_fd:
            return source_fd.read()
    except (OSError, UnicodeDecodeError) as error:
        raise SourceUnreadableError("Cannot read: %s", str(path)) from error


def atomic_write(path: Union[str, os.PathLike], data: bytes) -> None:
    """
    Write ``data`` to a temporary file next to ``path`` and move it into place. Readers never see a half written file.

    :param path: The destination of the data.
    :param data: The bytes to write.
    :raises OSError: Raised in case the directory is not writable or the rename fails.
    """
    target = pathlib.Path(path)
    file_descriptor, temp_name = tempfile.mkstemp(
        prefix=f".{target.name}.", dir=str(target.parent)
    )
    try:
        with os.fdopen(file_descriptor, "wb") as temp_fd:
            temp_fd.write(data)
            temp_fd.flush()
            os.fsync(temp_fd.fileno())
        os.chmod(temp_name, 0o644)
        os.replace(temp_name, target)
    except OSError:
        pathlib.Path(temp_name).unlink(missing_ok=True)
        raise
    logger.debug("wrote %s bytes to %s", len(data), target)
