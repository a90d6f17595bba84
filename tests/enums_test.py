import pytest

from unattend import enums
from tests.conftest import does_not_raise


@pytest.mark.parametrize(
    "test_pass,test_raise",
    [
        (enums.ConfigurationPass.SPECIALIZE, does_not_raise()),
        ("specialize", does_not_raise()),
        ("oobeSystem", does_not_raise()),
        ("windowsPE", pytest.raises(ValueError)),
        (0, pytest.raises(TypeError)),
    ],
)
def test_configuration_pass_to_enum(test_pass, test_raise):
    # Arrange

    # Act
    with test_raise:
        result = enums.ConfigurationPass.to_enum(test_pass)

        # Assert
        if isinstance(test_pass, str):
            assert result.value == test_pass
        elif isinstance(test_pass, enums.ConfigurationPass):
            assert result == test_pass
        else:
            raise TypeError("result had a non expected result")


@pytest.mark.parametrize(
    "value,expected_exception",
    [
        ("amd64", does_not_raise()),
        ("arm64", does_not_raise()),
        (enums.Architecture.X86, does_not_raise()),
        ("ia64", pytest.raises(ValueError)),
    ],
)
def test_architecture_to_enum(value, expected_exception):
    # Arrange

    # Act
    with expected_exception:
        result = enums.Architecture.to_enum(value)

        # Assert
        if isinstance(value, str):
            assert result.value == value
        else:
            assert result == value
