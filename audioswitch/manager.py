# audioswitch/manager.py
#
# Profile Manager: create / list / apply / delete.
#
# Every operation re-reads the store, works on a new list and writes the whole
# list back, so a failed save never leaves a half-modified list behind.
import sys

from .directory import PLAYBACK, RECORDING
from .logging_setup import _log, _log_exc
from .profiles import Profile
from .selector import confirm, list_devices, parse_selection, prompt_nonempty, prompt_selection

OUTCOME_SUCCESS = "success"
OUTCOME_PARTIAL = "partial"
OUTCOME_FAILURE = "failure"

def find_profile(profiles, name):
    for p in profiles:
        if p.name == name:
            return p
    return None

def remove_profiles(profiles, name):
    # Removes every entry with this name; duplicates can only come from hand edits.
    return [p for p in profiles if p.name != name]

def replace_profile(profiles, profile):
    # Overwrite = drop the old entry and append, so the profile moves to the end.
    return remove_profiles(profiles, profile.name) + [profile]

def classify_apply(playback_ok, recording_ok):
    if playback_ok and recording_ok:
        return OUTCOME_SUCCESS
    if playback_ok or recording_ok:
        return OUTCOME_PARTIAL
    return OUTCOME_FAILURE


class ProfileManager:
    def __init__(self, store, directory):
        self.store = store
        self.directory = directory

    # ---- create ------------------------------------------------------------
    def create(self, name, playback, recording, overwrite=None):
        """
        Save a profile for the given playback/recording devices.

        overwrite: None asks the user if `name` already exists; True/False
        answers in advance. Returns "created", "overwritten", "declined" or
        "save-failed".
        """
        if not name or not name.strip():
            raise ValueError("profile name must not be empty")
        profiles = self.store.load()
        exists = find_profile(profiles, name) is not None
        if exists:
            if overwrite is None:
                overwrite = confirm(f"Profile '{name}' already exists. Overwrite?")
            if not overwrite:
                print(f"Profile '{name}' left unchanged.")
                return "declined"

        profile = Profile.from_devices(name, playback, recording)
        if not self.store.save(replace_profile(profiles, profile)):
            return "save-failed"
        _log(f"profile saved: {name} (playback={profile.playback_id}, recording={profile.recording_id})")
        print(f"Profile '{name}' saved.")
        return "overwritten" if exists else "created"

    def create_interactive(self):
        name = prompt_nonempty("Profile name")
        overwrite = None
        if find_profile(self.store.load(), name) is not None:
            if not confirm(f"Profile '{name}' already exists. Overwrite?"):
                print(f"Profile '{name}' left unchanged.")
                return "declined"
            overwrite = True

        print("\nChoose the playback device for this profile:")
        playback = prompt_selection(list_devices(self.directory, PLAYBACK), label="playback device")
        if playback is None:
            print("Profile creation cancelled.")
            return "cancelled"

        print("\nChoose the recording device for this profile:")
        recording = prompt_selection(list_devices(self.directory, RECORDING), label="recording device")
        if recording is None:
            print("Profile creation cancelled.")
            return "cancelled"

        return self.create(name, playback, recording, overwrite=overwrite)

    # ---- list --------------------------------------------------------------
    def list_profiles(self):
        return self.store.load()

    def show_profiles(self, profiles=None):
        if profiles is None:
            profiles = self.list_profiles()
        if not profiles:
            print("No saved profiles.")
            return profiles
        print()
        for i, p in enumerate(profiles, start=1):
            print(f"  {i}. {p.name}")
            print(f"       Playback:  {p.playback_name or '-'}")
            print(f"       Recording: {p.recording_name or '-'}")
        return profiles

    def _pick_profile(self, verb):
        profiles = self.show_profiles()
        if not profiles:
            return None
        print("  0. Cancel")
        while True:
            choice, err = parse_selection(input(f"Profile to {verb}: "), len(profiles))
            if err:
                print(f"WARNING: {err}", file=sys.stderr)
                continue
            return profiles[choice - 1] if choice else None

    # ---- apply -------------------------------------------------------------
    def _apply_role(self, label, device_id, device_name):
        shown = device_name or device_id or "(none)"
        try:
            if not self.directory.exists(device_id):
                print(f"WARNING: {label} device '{shown}' is not connected.", file=sys.stderr)
                return False
            ok = bool(self.directory.set_default(device_id))
        except Exception as e:
            _log_exc(f"setting {label.lower()} default to {device_id} failed")
            print(f"ERROR: could not set {label.lower()} device '{shown}': {e}", file=sys.stderr)
            return False
        if ok:
            print(f"{label} device set to: {shown}")
        else:
            print(f"ERROR: could not set {label.lower()} device '{shown}'.", file=sys.stderr)
        return ok

    def apply(self, profile):
        """
        Make the profile's devices the defaults. Each role is tried on its own;
        returns {"playback": bool, "recording": bool, "outcome": str}.
        """
        playback_ok = self._apply_role("Playback", profile.playback_id, profile.playback_name)
        recording_ok = self._apply_role("Recording", profile.recording_id, profile.recording_name)
        outcome = classify_apply(playback_ok, recording_ok)

        if outcome == OUTCOME_SUCCESS:
            print(f"Profile '{profile.name}' applied.")
        elif outcome == OUTCOME_PARTIAL:
            print(f"WARNING: profile '{profile.name}' was only partially applied.", file=sys.stderr)
        else:
            print(f"ERROR: profile '{profile.name}' could not be applied.", file=sys.stderr)
        _log(f"apply {profile.name}: playback={playback_ok} recording={recording_ok} -> {outcome}")
        return {"playback": playback_ok, "recording": recording_ok, "outcome": outcome}

    def apply_interactive(self):
        profile = self._pick_profile("apply")
        if profile is None:
            return None
        return self.apply(profile)

    # ---- delete ------------------------------------------------------------
    def delete(self, name, confirmed=None):
        """
        Remove the profile(s) called `name`. Asks first unless `confirmed` is
        given. Returns True only when the reduced list was saved.
        """
        profiles = self.store.load()
        if find_profile(profiles, name) is None:
            print(f"WARNING: no profile named '{name}'.", file=sys.stderr)
            return False
        if confirmed is None:
            confirmed = confirm(f"Delete profile '{name}'?")
        if not confirmed:
            print("Nothing deleted.")
            return False
        if not self.store.save(remove_profiles(profiles, name)):
            return False
        _log(f"profile deleted: {name}")
        print(f"Profile '{name}' deleted.")
        return True

    def delete_interactive(self):
        profile = self._pick_profile("delete")
        if profile is None:
            return False
        return self.delete(profile.name)
