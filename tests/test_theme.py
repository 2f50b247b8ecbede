"""Tests for the theme script (the "default" spelling of the neutral scheme)."""

from unittest.mock import patch

import pytest

import theme
from color_scheme import ColorScheme


@pytest.fixture(autouse=True)
def no_delay_env(monkeypatch):
    monkeypatch.delenv("COLOR_SCHEME_DELAY", raising=False)


def test_sets_default_scheme(capsys):
    with patch("color_scheme.GSettingsWriter") as writer_cls, patch(
        "color_scheme.PortalSettingsReader"
    ) as reader_cls:
        reader_cls.return_value.read.return_value = ColorScheme.DEFAULT

        theme.main(["default", "--delay", "0"])

    writer_cls.return_value.write.assert_called_once_with(ColorScheme.DEFAULT)
    assert capsys.readouterr().out == "default\n"


def test_prints_light_scheme(capsys):
    with patch("color_scheme.GSettingsWriter") as writer_cls, patch(
        "color_scheme.PortalSettingsReader"
    ) as reader_cls:
        reader_cls.return_value.read.return_value = ColorScheme.from_code(2)

        theme.main([])

    writer_cls.return_value.write.assert_not_called()
    assert capsys.readouterr().out == "light\n"


def test_rejects_no_preference_spelling():
    with patch("color_scheme.GSettingsWriter") as writer_cls:
        with pytest.raises(SystemExit) as exc_info:
            theme.main(["no-preference"])

    assert exc_info.value.code == 2
    writer_cls.return_value.write.assert_not_called()
