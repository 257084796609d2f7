# tests/test_cli.py

from unittest.mock import patch

import pytest

from voicerag.interface import cli


@pytest.mark.parametrize("score, expected", [
    (1.0, "green"),
    (0.75, "green"),
    (0.6, "yellow"),
    (0.5, "yellow"),
    (0.33, "red"),
])
def test_score_to_color_bands(score, expected):
    assert cli._score_to_color(score) == expected


def test_prompt_for_query_skips_blank_input():
    with patch.object(cli.Prompt, "ask", side_effect=["   ", "", "  reset password "]) as ask:
        assert cli.prompt_for_query() == "reset password"

    assert ask.call_count == 3


def test_ask_continue_uses_confirmation():
    with patch.object(cli.Confirm, "ask", return_value=False):
        assert cli.ask_continue() is False
