"""
Paths that make up one provisioning run: where the answer file is read from on the installation media, where the
working copy is written and which scripts are referenced or embedded.
"""

# SPDX-License-Identifier: GPL-2.0-or-later

import ntpath
import pathlib
from dataclasses import dataclass
from typing import Optional, Union

from unattend.settings import Settings

ANSWER_FILE_NAME = "unattended.xml"
COPY_SCRIPT_NAME = "CopySpecialize.ps1"
SECOND_STAGE_SCRIPT_NAME = "Specialize.ps1"


@dataclass(frozen=True)
class MediaLayout:
    """
    Replaces a process-wide "current answer file" with an explicit value that is passed to every call.
    """

    media_root: pathlib.Path
    deployment_folder_name: str
    runtime_drive: str

    @classmethod
    def from_settings(
        cls,
        settings: Settings,
        media_root: Optional[Union[str, pathlib.Path]] = None,
    ) -> "MediaLayout":
        """
        Build the layout from the settings.

        :param settings: The settings to take the folder name, runtime drive and default media root from.
        :param media_root: Overrides ``settings.media_root`` when given.
        """
        return cls(
            media_root=pathlib.Path(media_root or settings.media_root),
            deployment_folder_name=settings.deployment_folder_name,
            runtime_drive=settings.runtime_drive,
        )

    @property
    def installer_dir(self) -> pathlib.Path:
        return self.media_root / self.deployment_folder_name / "Installer"

    @property
    def source_answer_file(self) -> pathlib.Path:
        return self.installer_dir / ANSWER_FILE_NAME

    @property
    def copy_script(self) -> pathlib.Path:
        return self.installer_dir / "Functions" / COPY_SCRIPT_NAME

    @property
    def output_answer_file(self) -> pathlib.Path:
        return pathlib.Path(self.runtime_drive) / "Temp" / ANSWER_FILE_NAME

    @property
    def second_stage_script(self) -> str:
        """
        Location of the second stage script on the installed system. Only referenced by path, never read here.
        """
        return ntpath.join(
            "C:\\Windows\\Setup", self.deployment_folder_name, SECOND_STAGE_SCRIPT_NAME
        )
