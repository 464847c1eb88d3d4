# audioswitch/profiles.py
#
# Profile Store: the audioprofiles.json file.
#
# On disk the store is a JSON array of objects keyed exactly like this:
#   [{"ProfileName": "...", "PlaybackDeviceID": "...", "PlaybackDeviceName": "...",
#     "RecordingDeviceID": "...", "RecordingDeviceName": "..."}]
#
# Reading is tolerant (the file is hand-editable) and never raises; writing
# always replaces the whole file.
import json
import os
import sys
import tempfile
from dataclasses import dataclass

from .logging_setup import _exe_dir, _log, _log_exc, _dbg

PROFILES_FILENAME = "audioprofiles.json"

# JSON key -> Profile attribute
_FIELDS = (
    ("ProfileName", "name"),
    ("PlaybackDeviceID", "playback_id"),
    ("PlaybackDeviceName", "playback_name"),
    ("RecordingDeviceID", "recording_id"),
    ("RecordingDeviceName", "recording_name"),
)


@dataclass(frozen=True)
class Profile:
    name: str
    playback_id: str = ""
    playback_name: str = ""
    recording_id: str = ""
    recording_name: str = ""

    @classmethod
    def from_devices(cls, name, playback, recording):
        return cls(
            name=name,
            playback_id=playback["id"],
            playback_name=playback["name"],
            recording_id=recording["id"],
            recording_name=recording["name"],
        )

    @classmethod
    def from_record(cls, record: dict):
        values = {}
        for key, attr in _FIELDS:
            v = record.get(key)
            values[attr] = "" if v is None else str(v)
        return cls(**values)

    def to_record(self) -> dict:
        return {key: getattr(self, attr) for key, attr in _FIELDS}


def normalize_profiles(payload):
    """
    Turn any accepted JSON shape into a list of Profiles.

    Accepted: a list of objects, a single bare object (a hand-edited file with
    one profile and no brackets), or null. Returns None for anything else,
    including a list that holds a non-object; callers treat None as malformed.

    Missing keys become "", non-string scalars are stringified, and entries
    without a usable ProfileName are dropped (parse_profiles_text reports how
    many).
    """
    if payload is None:
        return []
    if isinstance(payload, dict):
        payload = [payload]
    if not isinstance(payload, list):
        return None
    if not all(isinstance(item, dict) for item in payload):
        return None

    out = []
    for item in payload:
        p = Profile.from_record(item)
        if not p.name.strip():
            _dbg(f"dropping profile entry without a name: {item!r}")
            continue
        out.append(p)
    return out


def parse_profiles_text(text: str):
    """
    Parse the file contents. Returns (profiles, warning); warning is None
    unless some or all of the text had to be discarded.
    """
    if not text or not text.strip():
        return [], None
    try:
        payload = json.loads(text)
    except (ValueError, RecursionError) as e:
        # RecursionError: nesting deeper than the decoder can follow.
        return [], f"profile file is not valid JSON ({e}); starting with no profiles"
    profiles = normalize_profiles(payload)
    if profiles is None:
        return [], (f"profile file has an unexpected structure "
                    f"(top-level {type(payload).__name__}); starting with no profiles")
    entries = 1 if isinstance(payload, dict) else len(payload or ())
    dropped = entries - len(profiles)
    if dropped:
        noun = "entry" if dropped == 1 else "entries"
        return profiles, (f"ignored {dropped} profile {noun} without a ProfileName; "
                          f"they will not be kept when the file is next saved")
    return profiles, None


def serialize_profiles(profiles) -> str:
    # ASCII-only output: names may carry lone surrogates that UTF-8 cannot encode.
    return json.dumps([p.to_record() for p in profiles], indent=2, ensure_ascii=True) + "\n"


def default_profiles_path():
    """
    Where audioprofiles.json lives: $AUDIOSWITCH_PROFILES if set, otherwise
    next to the executable/script, otherwise the current directory (with a
    warning, since the file then moves with the shell's cwd).
    """
    override = os.environ.get("AUDIOSWITCH_PROFILES")
    if override:
        return os.path.abspath(os.path.expanduser(override))
    base = _exe_dir()
    if base:
        return os.path.join(base, PROFILES_FILENAME)
    cwd = os.getcwd()
    print(f"WARNING: could not determine the program directory; using {cwd} for {PROFILES_FILENAME}",
          file=sys.stderr)
    _log(f"profile dir fallback to cwd: {cwd}")
    return os.path.join(cwd, PROFILES_FILENAME)


class ProfileStore:
    """Load/save the full profile list from one JSON file. No caching."""

    def __init__(self, path):
        self.path = path

    def load(self):
        if not os.path.exists(self.path):
            return []
        try:
            with open(self.path, "r", encoding="utf-8-sig") as f:
                text = f.read()
        except (OSError, UnicodeDecodeError) as e:
            _log_exc(f"reading {self.path} failed")
            print(f"WARNING: could not read profiles from {self.path}: {e}", file=sys.stderr)
            return []

        profiles, warning = parse_profiles_text(text)
        if warning:
            _log(f"{self.path}: {warning}")
            print(f"WARNING: {warning}.", file=sys.stderr)
        return profiles

    def save(self, profiles) -> bool:
        """
        Rewrite the whole file. The new content goes to a temp file in the same
        directory which then replaces the target, so a failed write leaves the
        previous file intact.
        """
        data = serialize_profiles(profiles)
        directory = os.path.dirname(os.path.abspath(self.path))
        tmp_path = None
        try:
            with tempfile.NamedTemporaryFile("w", encoding="utf-8", dir=directory,
                                             prefix=".audioprofiles-", suffix=".tmp",
                                             delete=False) as f:
                tmp_path = f.name
                f.write(data)
            os.replace(tmp_path, self.path)
        except (OSError, ValueError) as e:
            # ValueError covers UnicodeEncodeError from the write.
            _log_exc(f"saving profiles to {self.path} failed")
            print(f"ERROR: failed to save profiles to {self.path}: {e}", file=sys.stderr)
            return False
        finally:
            if tmp_path and os.path.exists(tmp_path):
                try:
                    os.remove(tmp_path)
                except OSError:
                    _log_exc(f"could not remove temp file {tmp_path}")
        _dbg(f"saved {len(profiles)} profile(s) to {self.path}")
        return True
