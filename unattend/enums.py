"""
This module is responsible for containing all enums we use in the answer file builder. It should not be dependent upon
any other module except the Python standard library.
"""

# SPDX-License-Identifier: GPL-2.0-or-later

import enum
from typing import TypeVar, Union

CONVERTABLEENUM = TypeVar("CONVERTABLEENUM", bound="ConvertableEnum")

EXTENSION_NAMESPACE_DEFAULT = "urn:schemas-eds-com:unattend"
"""
Namespace of the custom extension subtree. The setup engine ignores elements in namespaces it does not know.
"""


class ConvertableEnum(enum.Enum):
    """
    Abstract class to convert the enum via our convert method.
    """

    @classmethod
    def to_enum(cls, value: Union[str, CONVERTABLEENUM]) -> CONVERTABLEENUM:
        """
        This method converts the chosen str to the corresponding enum type.

        :param value: str which contains the to be converted value.
        :returns: The enum value.
        :raises TypeError: In case value was not of type str.
        :raises ValueError: In case value was not in the range of valid values.
        """
        try:
            if isinstance(value, str):
                return cls[value.upper()]  # type: ignore
            if isinstance(value, cls):
                return value  # type: ignore
            raise TypeError(f"{value} must be a str or Enum")
        except KeyError:
            raise ValueError(f"{value} must be one of {list(cls)}") from KeyError


class Namespace(enum.Enum):
    """
    Fixed XML namespaces of the answer file vocabulary.
    """

    UNATTEND = "urn:schemas-microsoft-com:unattend"
    """
    Namespace of the setup engine. This is the default namespace of every answer file.
    """
    WCM = "http://schemas.microsoft.com/WMIConfig/2002/State"
    """
    Carries the ``wcm:action`` attribute of list entries.
    """
    XSI = "http://www.w3.org/2001/XMLSchema-instance"


class ConfigurationPass(ConvertableEnum):
    """
    The configuration passes this package writes to. Other passes exist in the schema but are not produced here.
    """

    SPECIALIZE = "specialize"
    OOBESYSTEM = "oobeSystem"


class ComponentName(enum.Enum):
    """
    Components that are touched inside the configuration passes.
    """

    SHELL_SETUP = "Microsoft-Windows-Shell-Setup"
    DEPLOYMENT = "Microsoft-Windows-Deployment"


class Architecture(ConvertableEnum):
    """
    Values the setup engine accepts for the ``processorArchitecture`` attribute of a component.
    """

    AMD64 = "amd64"
    X86 = "x86"
    ARM64 = "arm64"


class CommandField(enum.Enum):
    """
    Element holding the command of an ordered list entry. ``RunSynchronousCommand`` uses ``Path`` while
    ``SynchronousCommand`` uses ``CommandLine``.
    """

    PATH = "Path"
    COMMAND_LINE = "CommandLine"
