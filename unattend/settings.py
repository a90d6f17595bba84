"""
App-wide settings of the answer file builder
"""

# SPDX-License-Identifier: GPL-2.0-or-later

import logging
import os.path
import traceback
from typing import Any, Dict, Optional

import yaml
from schema import And, Optional as SchemaOptional, Schema, SchemaError  # type: ignore

from unattend import enums

DEFAULT_SETTINGS_FILE = "/etc/unattend/settings.yaml"

BOOTSTRAP_COMMAND_TEMPLATE = (
    r'powershell.exe -NoP -EP Bypass -C "&([ScriptBlock]::Create((Select-Xml'
    r" -LiteralPath '$runtime_answer_file'"
    r" -XPath '//e:$extension_block_name/e:CopyScript'"
    r" -Namespace @{e='$extension_namespace'}).Node.InnerText))"
    r" '$extension_folder_name'"
    r'"'
)
"""
Cheetah template of the specialize command that runs the script embedded in the answer file. The rendered command has
to stay below the 259 characters the setup engine accepts for ``Path``. Literal dollar signs have to be escaped as
``\\$`` so Cheetah leaves them alone.
"""

SECOND_STAGE_COMMAND_TEMPLATE = (
    r'powershell.exe -NoProfile -ExecutionPolicy Bypass -File "$second_stage_script"'
)

schema = Schema(
    {
        SchemaOptional("deployment_folder_name"): And(str, len),
        SchemaOptional("media_root"): str,
        SchemaOptional("runtime_drive"): And(str, len),
        SchemaOptional("runtime_answer_file"): And(str, len),
        SchemaOptional("processor_architecture"): And(
            str, lambda arch: arch in [item.value for item in enums.Architecture]
        ),
        SchemaOptional("public_key_token"): str,
        SchemaOptional("language"): str,
        SchemaOptional("version_scope"): str,
        SchemaOptional("extension_namespace"): And(str, len),
        SchemaOptional("extension_prefix"): And(str, len),
        SchemaOptional("extension_block_name"): And(str, len),
        SchemaOptional("account_group"): And(str, len),
        SchemaOptional("bootstrap_command_template"): And(str, len),
        SchemaOptional("bootstrap_description"): str,
        SchemaOptional("second_stage_command_template"): And(str, len),
        SchemaOptional("second_stage_description"): str,
    },
    ignore_extra_keys=False,
)


class Settings:
    """
    This class contains all app-wide settings. It should only exist once per provisioning run.
    """

    def __init__(self) -> None:
        """
        Constructor.
        """
        self.deployment_folder_name = "EDS"
        self.media_root = "/mnt/media"
        self.runtime_drive = "X:"
        self.runtime_answer_file = r"C:\Windows\Panther\unattend.xml"
        self.processor_architecture = enums.Architecture.AMD64.value
        self.public_key_token = "31bf3856ad364e35"
        self.language = "neutral"
        self.version_scope = "nonSxS"
        self.extension_namespace = enums.EXTENSION_NAMESPACE_DEFAULT
        self.extension_prefix = "eds"
        self.extension_block_name = "EDS"
        self.account_group = "Administrators"
        self.bootstrap_command_template = BOOTSTRAP_COMMAND_TEMPLATE
        self.bootstrap_description = "Run the copy script embedded in the answer file"
        self.second_stage_command_template = SECOND_STAGE_COMMAND_TEMPLATE
        self.second_stage_description = "Run the second stage specialize script"

    def to_dict(self) -> Dict[str, Any]:
        """
        Return an easily serializable representation of the config.

        :return: The dict with all user settings combined with settings which are left to the default.
        """
        return dict(self.__dict__)

    def from_dict(self, new_values: Optional[Dict[str, Any]]) -> Optional["Settings"]:
        """
        Modify this object to load values in dictionary.

        :param new_values: The dictionary with settings to replace.
        :raises ValueError: In case the merged settings would not be valid.
        :return: Returns the settings instance this method was called from.
        """
        if new_values is None:
            logging.warning("Not loading empty settings dictionary!")
            return None

        old_settings = dict(self.__dict__)
        self.__dict__.update(new_values)

        if not self.is_valid():
            self.__dict__ = old_settings
            raise ValueError(
                "New settings would not be valid. Please fix the dict you pass."
            )

        return self

    def is_valid(self) -> bool:
        """
        Silently drops all errors and returns ``True`` when everything is valid.

        :return: If this settings object is valid this returns true. Otherwise false.
        """
        try:
            validate_settings(self.__dict__)
        except SchemaError:
            return False
        return True

    def component_attributes(self) -> Dict[str, str]:
        """
        The fixed attribute set every newly created component receives.
        """
        return {
            "processorArchitecture": self.processor_architecture,
            "publicKeyToken": self.public_key_token,
            "language": self.language,
            "versionScope": self.version_scope,
        }


def validate_settings(settings_content: Dict[str, Any]) -> Dict[str, Any]:
    """
    This function performs logical validation of our loaded YAML files.

    :param settings_content: The dictionary content from the YAML file.
    :raises SchemaError: In case the data given is invalid.
    :return: The validated settings.
    """
    return schema.validate(settings_content)


def read_yaml_file(filepath: str = DEFAULT_SETTINGS_FILE) -> Dict[str, Any]:
    """
    Reads settings files from ``filepath`` and saves the content in a dictionary.

    :param filepath: Settings file path, defaults to "/etc/unattend/settings.yaml"
    :raises FileNotFoundError: In case file does not exist or is a directory.
    :raises yaml.YAMLError: In case the file is not a valid YAML file.
    :return: The aggregated dict of all settings.
    """
    if not os.path.isfile(filepath):
        raise FileNotFoundError(
            f'Given path "{filepath}" does not exist or is a directory.'
        )
    try:
        with open(filepath, encoding="UTF-8") as main_settingsfile:
            filecontent: Optional[Dict[str, Any]] = yaml.safe_load(
                main_settingsfile.read()
            )
    except yaml.YAMLError as error:
        traceback.print_exc()
        raise yaml.YAMLError(f'"{filepath}" is not a valid YAML file') from error
    return filecontent or {}


def read_settings_file(filepath: str = DEFAULT_SETTINGS_FILE) -> Settings:
    """
    Utilizes ``read_yaml_file()`` and builds a validated settings object from it. Keys missing from the file keep
    their defaults.

    :param filepath: The path to the settings file.
    :raises SchemaError: In case the file content does not match the schema.
    :return: The settings object.
    """
    filecontent = read_yaml_file(filepath)
    validate_settings(filecontent)
    settings = Settings()
    settings.from_dict(filecontent)
    return settings
