"""
Custom exceptions for the answer file builder
"""
from typing import Any, Iterable

# SPDX-License-Identifier: GPL-2.0-or-later


class UnattendException(Exception):
    """
    This is the default exception where all other exceptions of this package are inheriting from.
    """

    def __init__(self, value: Any, *args: Iterable[str]):
        """
        Default constructor for the Exception.

        Bad example: ``UnattendException("Pass %s not found" % pass_name)``

        Good example: ``UnattendException("Pass %s not found", pass_name)``

        :param value: The string representation of the Exception. Do not glue strings and pass them as one. Instead pass
                      them as params and let the constructor of the Exception build the string like (same as it should
                      be done with logging calls). Example see above.
        :param args: Optional arguments which replace a ``%s`` in a Python string.
        """
        self.value = value % args if args else value
        super().__init__(self.value)

    def __str__(self) -> str:
        """
        This is the string representation of the base exception.
        :return: self.value as a string represented.
        """
        return repr(self.value)


class CX(UnattendException):
    """
    This is a general exception which gets thrown often inside this package.
    """


class StructureNotFoundError(CX):
    """
    A required ancestor node is missing and the operation is not allowed to create it.
    """


class SourceUnreadableError(CX):
    """
    External content that has to be embedded into the answer file could not be read.
    """


class SerializationError(CX):
    """
    The answer file could not be written to its target path.
    """


class AnswerFileParseError(CX):
    """
    An existing answer file could not be parsed as XML.
    """
