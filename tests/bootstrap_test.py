"""
Test module to verify the injection of the bootstrap commands.
"""

import pathlib
from typing import Callable

import pytest
from pytest_mock import MockerFixture

from unattend import bootstrap, enums, extension
from unattend.cexceptions import CX, SourceUnreadableError
from unattend.document import AnswerDocument, qname
from unattend.layout import MediaLayout
from unattend.settings import Settings
from unattend.templar import Templar

UNATTEND = enums.Namespace.UNATTEND.value


def run_synchronous(document: AnswerDocument) -> list:
    deployment = document.find_component(
        document.find_pass("specialize"), enums.ComponentName.DEPLOYMENT
    )
    return list(deployment.iter(qname("RunSynchronousCommand")))


def first_logon(document: AnswerDocument) -> list:
    shell_setup = document.find_component(
        document.find_pass("oobeSystem"), enums.ComponentName.SHELL_SETUP
    )
    return list(shell_setup.iter(qname("SynchronousCommand")))


def test_render_commands(answer_document: AnswerDocument, media_layout: MediaLayout):
    """
    Verify that the placeholders are filled in and the specialize command fits the Path limit.
    """
    # Arrange & Act
    bootstrap_command, second_stage_command = bootstrap.render_commands(
        answer_document, media_layout, "EDS", Templar()
    )

    # Assert
    assert bootstrap_command == (
        'powershell.exe -NoP -EP Bypass -C "&([ScriptBlock]::Create((Select-Xml'
        " -LiteralPath 'C:\\Windows\\Panther\\unattend.xml'"
        " -XPath '//e:EDS/e:CopyScript'"
        " -Namespace @{e='urn:schemas-eds-com:unattend'}).Node.InnerText)) 'EDS'\""
    )
    assert len(bootstrap_command) < 260
    assert second_stage_command == (
        'powershell.exe -NoProfile -ExecutionPolicy Bypass -File "C:\\Windows\\Setup\\EDS\\Specialize.ps1"'
    )


def test_inject_bootstrap_new_document(
    answer_document: AnswerDocument,
    media_layout: MediaLayout,
    create_copy_script: Callable[[str], pathlib.Path],
    reload: Callable[[AnswerDocument], AnswerDocument],
):
    """
    Verify that injecting into a new document results in exactly one command per pass.
    """
    # Arrange
    create_copy_script("param($Folder)\r\nWrite-Host $Folder\r\n")

    # Act
    bootstrap.inject_bootstrap(answer_document, media_layout, "EDS")

    # Assert
    reloaded = reload(answer_document)
    specialize_commands = run_synchronous(reloaded)
    logon_commands = first_logon(reloaded)
    assert len(specialize_commands) == 1
    assert len(logon_commands) == 1
    assert specialize_commands[0].findtext(qname("Order")) == "1"
    assert logon_commands[0].findtext(qname("Order")) == "1"
    assert "//e:EDS/e:CopyScript" in specialize_commands[0].findtext(qname("Path"))
    assert "Specialize.ps1" in logon_commands[0].findtext(qname("CommandLine"))
    assert (
        extension.get_copy_script(reloaded)
        == "param($Folder)\r\nWrite-Host $Folder\r\n"
    )


def test_inject_bootstrap_default_folder_name(
    answer_document: AnswerDocument,
    media_layout: MediaLayout,
    create_copy_script: Callable[[str], pathlib.Path],
):
    """
    Verify that the deployment folder name is passed to the embedded script if no name is given.
    """
    # Arrange
    create_copy_script()

    # Act
    bootstrap.inject_bootstrap(answer_document, media_layout)

    # Assert
    path = run_synchronous(answer_document)[0].findtext(qname("Path"))
    assert path.endswith(f"'{media_layout.deployment_folder_name}'\"")


def test_inject_bootstrap_twice(
    answer_document: AnswerDocument,
    media_layout: MediaLayout,
    create_copy_script: Callable[[str], pathlib.Path],
    reload: Callable[[AnswerDocument], AnswerDocument],
):
    """
    Verify that a second injection appends a second command pair with the next order.
    """
    # Arrange
    create_copy_script()
    bootstrap.inject_bootstrap(answer_document, media_layout, "EDS")

    # Act
    bootstrap.inject_bootstrap(answer_document, media_layout, "EDS")

    # Assert
    reloaded = reload(answer_document)
    assert [entry.findtext(qname("Order")) for entry in run_synchronous(reloaded)] == [
        "1",
        "2",
    ]
    assert [entry.findtext(qname("Order")) for entry in first_logon(reloaded)] == [
        "1",
        "2",
    ]
    block = reloaded.find_extension_block()
    assert len(list(block.iterchildren())) == 1


def test_inject_bootstrap_existing_orders(
    media_layout: MediaLayout,
    settings: Settings,
    create_copy_script: Callable[[str], pathlib.Path],
    create_source_answer_file: Callable[[str], pathlib.Path],
):
    """
    Verify that existing entries, including malformed ones, are kept and the new entry gets the next order.
    """
    # Arrange
    create_copy_script()
    create_source_answer_file(
        f'<unattend xmlns="{UNATTEND}"><settings pass="specialize">'
        '<component name="Microsoft-Windows-Deployment"><RunSynchronous>'
        "<RunSynchronousCommand><Order>1</Order><Path>a.exe</Path></RunSynchronousCommand>"
        "<RunSynchronousCommand><Order>abc</Order><Path>b.exe</Path></RunSynchronousCommand>"
        "<RunSynchronousCommand><Order>4</Order><Path>c.exe</Path></RunSynchronousCommand>"
        "</RunSynchronous></component></settings></unattend>"
    )
    document = AnswerDocument.load(media_layout, settings)

    # Act
    bootstrap.inject_bootstrap(document, media_layout, "EDS")

    # Assert
    orders = [entry.findtext(qname("Order")) for entry in run_synchronous(document)]
    assert orders == ["1", "abc", "4", "5"]


@pytest.mark.parametrize("script_content", [None, "", "  \r\n"])
def test_inject_bootstrap_unreadable_script(
    answer_document: AnswerDocument,
    media_layout: MediaLayout,
    create_copy_script: Callable[[str], pathlib.Path],
    script_content,
):
    """
    Verify that a missing or empty copy script fails before the document is touched.
    """
    # Arrange
    if script_content is not None:
        create_copy_script(script_content)

    # Act
    with pytest.raises(SourceUnreadableError):
        bootstrap.inject_bootstrap(answer_document, media_layout, "EDS")

    # Assert
    assert len(answer_document.root) == 0
    assert not answer_document.path.exists()


def test_inject_bootstrap_render_error(
    mocker: MockerFixture,
    answer_document: AnswerDocument,
    media_layout: MediaLayout,
    create_copy_script: Callable[[str], pathlib.Path],
):
    """
    Verify that a template error fails before the document is touched.
    """
    # Arrange
    create_copy_script()
    templar = mocker.MagicMock(spec=Templar)
    templar.render.side_effect = CX("Error rendering template: %s", "broken")

    # Act
    with pytest.raises(CX):
        bootstrap.inject_bootstrap(answer_document, media_layout, "EDS", templar)

    # Assert
    assert len(answer_document.root) == 0
    assert not answer_document.path.exists()


def test_inject_bootstrap_script_not_embeddable(
    answer_document: AnswerDocument,
    media_layout: MediaLayout,
    create_copy_script: Callable[[str], pathlib.Path],
):
    """
    Verify that a copy script with characters XML cannot carry counts as unreadable and leaves the document untouched.
    """
    # Arrange
    create_copy_script("Write-Host 'page'\x0c\n")

    # Act
    with pytest.raises(SourceUnreadableError):
        bootstrap.inject_bootstrap(answer_document, media_layout, "EDS")

    # Assert
    assert answer_document.find_extension_block() is None
    assert len(answer_document.root) == 0


@pytest.mark.parametrize("folder_name", ["EDS' ; Remove-Item C:\\ ; '", 'E"DS'])
def test_inject_bootstrap_quoted_folder_name(
    answer_document: AnswerDocument,
    media_layout: MediaLayout,
    create_copy_script: Callable[[str], pathlib.Path],
    folder_name: str,
):
    """
    Verify that a folder name that would break out of the quoted PowerShell argument is rejected.
    """
    # Arrange
    create_copy_script()

    # Act
    with pytest.raises(ValueError):
        bootstrap.inject_bootstrap(answer_document, media_layout, folder_name)

    # Assert
    assert len(answer_document.root) == 0
    assert not answer_document.path.exists()
