import builtins

import pytest

from audioswitch import logging_setup
from audioswitch.directory import DeviceDirectory, PLAYBACK, RECORDING
from audioswitch.manager import ProfileManager
from audioswitch.profiles import ProfileStore


class InputExhausted(BaseException):
    """Raised when code under test asks for more input than the test scripted."""


def dev(dev_id, name, kind, default=False):
    return {"id": dev_id, "name": name, "kind": kind, "isDefault": default}


class FakeDirectory(DeviceDirectory):
    """In-memory device directory that records every lookup and mutation."""

    def __init__(self, playback=(), recording=(), fail_ids=(), raise_ids=()):
        self.devices = {
            PLAYBACK: [dict(d) for d in playback],
            RECORDING: [dict(d) for d in recording],
        }
        self.fail_ids = set(fail_ids)
        self.raise_ids = set(raise_ids)
        self.set_calls = []
        self.exists_calls = []

    def enumerate(self, kind):
        return [dict(d) for d in self.devices[kind]]

    def exists(self, device_id):
        self.exists_calls.append(device_id)
        return super().exists(device_id)

    def set_default(self, device_id):
        self.set_calls.append(device_id)
        if device_id in self.raise_ids:
            raise OSError("PolicyConfig rejected the call")
        if device_id in self.fail_ids:
            return False
        for devices in self.devices.values():
            if any(d["id"] == device_id for d in devices):
                for d in devices:
                    d["isDefault"] = d["id"] == device_id
                return True
        return False


@pytest.fixture(autouse=True)
def _isolated_log(tmp_path, monkeypatch):
    # Keep log output out of the source tree and skip hook installation.
    monkeypatch.setattr(logging_setup, "_LOG_DIR", str(tmp_path))
    monkeypatch.setattr(logging_setup, "_LOG_PATH", str(tmp_path / "audioswitch.log"))
    monkeypatch.setattr(logging_setup, "_INITIALIZED", True)


@pytest.fixture
def feed_input(monkeypatch):
    """feed_input(["1", "Q"]) makes input() return those lines in order."""
    prompts = []

    def _feed(lines):
        it = iter(lines)

        def fake_input(prompt=""):
            prompts.append(prompt)
            try:
                return next(it)
            except StopIteration:
                raise InputExhausted(f"no scripted answer for prompt {prompt!r}")

        monkeypatch.setattr(builtins, "input", fake_input)
        return prompts

    return _feed


@pytest.fixture
def directory():
    return FakeDirectory(
        playback=[
            dev("A", "Speakers", PLAYBACK, default=True),
            dev("C", "Headphones", PLAYBACK),
            dev("E", "HDMI Output", PLAYBACK),
        ],
        recording=[
            dev("B", "Microphone", RECORDING, default=True),
            dev("D", "Headset Mic", RECORDING),
        ],
    )


@pytest.fixture
def store(tmp_path):
    return ProfileStore(str(tmp_path / "audioprofiles.json"))


@pytest.fixture
def manager(store, directory):
    return ProfileManager(store, directory)
