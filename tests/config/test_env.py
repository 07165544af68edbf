from __future__ import annotations

import pytest

from presalewatch.config import ConfigurationError, MissingConfigurationError
from presalewatch.config.env import (
    env_flag,
    env_float,
    env_int,
    require_env_var,
    require_env_vars,
)


def test_require_env_vars_returns_values(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("EXAMPLE_VAR", "value")

    assert require_env_vars(["EXAMPLE_VAR"]) == {"EXAMPLE_VAR": "value"}


def test_require_env_vars_lists_every_missing_name(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("MISSING_A", raising=False)
    monkeypatch.setenv("MISSING_B", "   ")

    with pytest.raises(MissingConfigurationError) as exc:
        require_env_vars(["MISSING_B", "MISSING_A"])

    assert exc.value.names == ("MISSING_A", "MISSING_B")
    assert "MISSING_A, MISSING_B" in str(exc.value)


def test_require_env_var_handles_blank_values(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("EXAMPLE_VAR", "")

    with pytest.raises(MissingConfigurationError):
        require_env_var("EXAMPLE_VAR")


def test_typed_values(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("FLAG", "off")
    monkeypatch.setenv("COUNT", " 4 ")
    monkeypatch.setenv("DELAY", "0.5")

    assert env_flag("FLAG", default=True) is False
    assert env_flag("UNSET_FLAG", default=True) is True
    assert env_int("COUNT", default=1) == 4
    assert env_float("DELAY", default=2.0) == 0.5


@pytest.mark.parametrize(
    ("name", "value", "loader"),
    [
        ("FLAG", "maybe", lambda: env_flag("FLAG", default=False)),
        ("COUNT", "many", lambda: env_int("COUNT", default=1)),
        ("COUNT", "0", lambda: env_int("COUNT", default=1, minimum=1)),
        ("DELAY", "-1", lambda: env_float("DELAY", default=1.0, minimum=0.0)),
    ],
)
def test_invalid_values_raise(
    monkeypatch: pytest.MonkeyPatch,
    name: str,
    value: str,
    loader: object,
) -> None:
    monkeypatch.setenv(name, value)

    with pytest.raises(ConfigurationError) as exc:
        loader()  # type: ignore[operator]

    assert exc.value.variable == name
