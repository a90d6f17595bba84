"""
Fixtures that are shared between all tests inside the testsuite.
"""

import pathlib
from contextlib import contextmanager
from typing import Callable

import pytest

from unattend.document import AnswerDocument
from unattend.layout import MediaLayout
from unattend.settings import Settings

SOURCE_ANSWER_FILE = """<?xml version="1.0" encoding="utf-8"?>
<unattend xmlns="urn:schemas-microsoft-com:unattend">
    <settings pass="specialize">
        <component name="Microsoft-Windows-Shell-Setup" processorArchitecture="amd64"
                   publicKeyToken="31bf3856ad364e35" language="neutral" versionScope="nonSxS"
                   xmlns:wcm="http://schemas.microsoft.com/WMIConfig/2002/State">
            <ComputerName>*</ComputerName>
        </component>
    </settings>
</unattend>
"""


@contextmanager
def does_not_raise():
    """
    Fixture that represents a context manager that will expect that no raise occurs.
    """
    yield


@pytest.fixture(name="settings", scope="function")
def fixture_settings() -> Settings:
    """
    Fixture that provides default settings for a single test.
    """
    return Settings()


@pytest.fixture(name="media_layout", scope="function")
def fixture_media_layout(tmp_path: pathlib.Path, settings: Settings) -> MediaLayout:
    """
    Fixture that places the installation media and the runtime drive inside the folder of the current test.
    """
    return MediaLayout(
        media_root=tmp_path / "media",
        deployment_folder_name=settings.deployment_folder_name,
        runtime_drive=str(tmp_path / "runtime"),
    )


@pytest.fixture(name="create_copy_script", scope="function")
def fixture_create_copy_script(
    media_layout: MediaLayout,
) -> Callable[[str], pathlib.Path]:
    """
    Fixture that provides a method to write the copy script onto the installation media of the current test.
    """

    def _create_copy_script(content: str = "param($Folder)\nWrite-Host $Folder\n"):
        media_layout.copy_script.parent.mkdir(parents=True, exist_ok=True)
        media_layout.copy_script.write_text(content, encoding="utf-8")
        return media_layout.copy_script

    return _create_copy_script


@pytest.fixture(name="create_source_answer_file", scope="function")
def fixture_create_source_answer_file(
    media_layout: MediaLayout,
) -> Callable[[str], pathlib.Path]:
    """
    Fixture that provides a method to put an answer file onto the installation media of the current test.
    """

    def _create_source_answer_file(content: str = SOURCE_ANSWER_FILE):
        media_layout.source_answer_file.parent.mkdir(parents=True, exist_ok=True)
        media_layout.source_answer_file.write_text(content, encoding="utf-8")
        return media_layout.source_answer_file

    return _create_source_answer_file


@pytest.fixture(name="answer_document", scope="function")
def fixture_answer_document(
    media_layout: MediaLayout, settings: Settings
) -> AnswerDocument:
    """
    Fixture that represents a fresh answer file that saves to the runtime drive of the current test.
    """
    return AnswerDocument.load(media_layout, settings)


@pytest.fixture(name="reload", scope="function")
def fixture_reload(settings: Settings) -> Callable[[AnswerDocument], AnswerDocument]:
    """
    Fixture that provides a method to read back what a document wrote to disk.
    """

    def _reload(document: AnswerDocument) -> AnswerDocument:
        return AnswerDocument.from_file(document.path, settings)

    return _reload
