# audioswitch/cli.py
#
# Startup: check that the Windows audio backend is usable, wire the store,
# manager and menus together, and run the interactive session.
#
# Exit codes:
#   0   normal quit (Q) or end of input
#   1   audio backend unavailable
#   130 interrupted (Ctrl+C)
import sys

from .directory import PLAYBACK
from .logging_setup import _log, _log_exc
from .manager import ProfileManager
from .menu import MenuController
from .profiles import ProfileStore, default_profiles_path

REMEDY = (
    "This tool needs Windows and the 'pycaw' and 'comtypes' packages.\n"
    "Install them with:  pip install pycaw comtypes"
)

def load_device_directory():
    """
    Import the COM backend and make one enumeration call.
    Returns (directory, None) or (None, error).
    """
    try:
        from .devices import WindowsDeviceDirectory
    except Exception as e:
        # ImportError without pycaw/comtypes; OSError/AttributeError off Windows.
        _log_exc("audio backend import failed")
        return None, e
    directory = WindowsDeviceDirectory()
    try:
        directory.enumerate(PLAYBACK)
    except Exception as e:
        _log_exc("audio backend probe failed")
        return None, e
    return directory, None

def main(argv=None):
    args = sys.argv[1:] if argv is None else list(argv)
    _log(f"start: argv={args!r}")
    if args:
        print(f"WARNING: audioswitch takes no command-line arguments; ignoring: {' '.join(args)}",
              file=sys.stderr)
    directory, err = load_device_directory()
    if directory is None:
        print(f"ERROR: audio device control is not available: {err}", file=sys.stderr)
        print(REMEDY, file=sys.stderr)
        return 1

    store = ProfileStore(default_profiles_path())
    _log(f"profiles: {store.path}")
    manager = ProfileManager(store, directory)
    menu = MenuController(manager, directory)

    try:
        rc = menu.main_loop()
    except KeyboardInterrupt:
        print()
        rc = 130
    except EOFError:
        # stdin closed or exhausted: same as Q
        print()
        _log("end of input")
        rc = 0
    _log(f"exit: rc={rc}")
    return rc
