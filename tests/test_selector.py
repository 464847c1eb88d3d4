import pytest

from audioswitch.directory import PLAYBACK
from audioswitch.selector import (
    confirm, list_devices, parse_selection, prompt_nonempty, prompt_selection,
)
from conftest import dev

DEVICES = [
    dev("A", "Speakers", PLAYBACK, default=True),
    dev("C", "Headphones", PLAYBACK),
    dev("E", "HDMI Output", PLAYBACK),
]


@pytest.mark.parametrize("text,expected", [
    ("0", 0), ("1", 1), (" 3 ", 3),
])
def test_parse_selection_accepts(text, expected):
    assert parse_selection(text, 3) == (expected, None)


@pytest.mark.parametrize("text", ["4", "-1", "abc", "", "1.5"])
def test_parse_selection_rejects(text):
    choice, err = parse_selection(text, 3)
    assert choice is None
    assert err


def test_parse_selection_without_cancel_rejects_zero():
    choice, err = parse_selection("0", 3, allow_cancel=False)
    assert choice is None
    assert "between 1 and 3" in err


def test_list_devices_reads_directory_every_time(directory):
    first = list_devices(directory, PLAYBACK)
    directory.devices[PLAYBACK].pop()
    assert len(list_devices(directory, PLAYBACK)) == len(first) - 1


def test_second_choice_returns_second_device(feed_input):
    feed_input(["2"])
    assert prompt_selection(DEVICES) is DEVICES[1]


def test_zero_cancels(feed_input):
    feed_input(["0"])
    assert prompt_selection(DEVICES) is None


def test_out_of_range_and_text_reprompt(feed_input, capsys):
    prompts = feed_input(["5", "abc", "3"])
    assert prompt_selection(DEVICES) is DEVICES[2]
    assert len(prompts) == 3
    assert capsys.readouterr().err.count("WARNING") == 2


def test_zero_reprompts_when_cancel_not_allowed(feed_input):
    prompts = feed_input(["0", "1"])
    assert prompt_selection(DEVICES, allow_cancel=False) is DEVICES[0]
    assert len(prompts) == 2


def test_listing_marks_default_in_directory_order(feed_input, capsys):
    feed_input(["0"])
    prompt_selection(DEVICES)
    out = capsys.readouterr().out
    assert "1. Speakers  [DEFAULT]" in out
    assert out.index("Headphones") < out.index("HDMI Output")
    assert "0. Cancel" in out


def test_empty_list_returns_without_prompting(feed_input, capsys):
    prompts = feed_input([])
    assert prompt_selection([], label="recording device") is None
    assert prompts == []
    assert "No recording devices found." in capsys.readouterr().out


def test_confirm_reprompts_until_yes_or_no(feed_input):
    feed_input(["maybe", "Y"])
    assert confirm("Overwrite?") is True
    feed_input(["no"])
    assert confirm("Overwrite?") is False


def test_prompt_nonempty_strips_and_reprompts(feed_input):
    prompts = feed_input(["", "   ", "  Work  "])
    assert prompt_nonempty("Profile name") == "Work"
    assert len(prompts) == 3
