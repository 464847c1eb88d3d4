from audioswitch.directory import PLAYBACK, RECORDING
from audioswitch.menu import MenuController
from audioswitch.profiles import Profile


def make_menu(manager, directory):
    return MenuController(manager, directory)


def test_quit_returns_zero(manager, directory, feed_input):
    feed_input(["q"])
    assert make_menu(manager, directory).main_loop() == 0


def test_invalid_choice_reprompts(manager, directory, feed_input, capsys):
    prompts = feed_input(["9", "", "Q"])
    assert make_menu(manager, directory).main_loop() == 0
    assert len(prompts) == 3
    assert capsys.readouterr().err.count("not a valid choice") == 2


def test_show_current_defaults(manager, directory, feed_input, capsys):
    feed_input(["1", "Q"])
    make_menu(manager, directory).main_loop()
    out = capsys.readouterr().out
    assert "Default playback device: Speakers" in out
    assert "Default recording device: Microphone" in out


def test_set_default_playback_and_recording(manager, directory, feed_input):
    feed_input(["2", "3", "3", "2", "Q"])
    make_menu(manager, directory).main_loop()
    assert directory.set_calls == ["E", "D"]
    assert directory.get_default(PLAYBACK)["name"] == "HDMI Output"
    assert directory.get_default(RECORDING)["name"] == "Headset Mic"


def test_set_default_cancel(manager, directory, feed_input):
    feed_input(["2", "0", "Q"])
    make_menu(manager, directory).main_loop()
    assert directory.set_calls == []


def test_set_default_failure_is_reported(manager, directory, feed_input, capsys):
    directory.fail_ids.add("C")
    feed_input(["2", "2", "Q"])
    assert make_menu(manager, directory).main_loop() == 0
    assert "failed to set default playback device" in capsys.readouterr().err


def test_apply_profile_from_main_menu(manager, store, directory, feed_input):
    store.save([Profile("Alt", "C", "Headphones", "D", "Headset Mic")])
    feed_input(["4", "1", "Q"])
    make_menu(manager, directory).main_loop()
    assert directory.set_calls == ["C", "D"]


def test_advanced_menu_create_list_delete(manager, store, directory, feed_input, capsys):
    feed_input([
        "5",
        "1", "Work", "1", "1",   # create
        "2",                     # list
        "x",                     # invalid
        "3", "1", "Y",           # delete
        "r",
        "Q",
    ])
    assert make_menu(manager, directory).main_loop() == 0
    captured = capsys.readouterr()
    assert "Profile 'Work' saved." in captured.out
    assert "1. Work" in captured.out
    assert "Profile 'Work' deleted." in captured.out
    assert "not a valid choice" in captured.err
    assert store.load() == []


def test_advanced_list_all_devices_shows_ids(manager, directory, feed_input, capsys):
    feed_input(["5", "4", "R", "Q"])
    make_menu(manager, directory).main_loop()
    out = capsys.readouterr().out
    assert "--- Playback ---" in out and "--- Recording ---" in out
    assert "id=E" in out and "id=D" in out


def test_action_error_does_not_end_session(manager, directory, feed_input, capsys, monkeypatch):
    def broken(kind):
        raise RuntimeError("device enumeration failed")

    monkeypatch.setattr(directory, "enumerate", broken)
    feed_input(["2", "Q"])
    assert make_menu(manager, directory).main_loop() == 0
    assert "ERROR: device enumeration failed" in capsys.readouterr().err
