# audioswitch/menu.py
#
# Interactive menus. Each action runs to completion before the menu is shown
# again; an unexpected error in an action is logged and reported, never fatal.
import sys

from .directory import KINDS, PLAYBACK, RECORDING, device_label
from .logging_setup import _log_exc, _log_path
from .selector import list_devices, prompt_selection

MAIN_MENU = """
=== Audio Device Switcher ===
  1. Show current default devices
  2. Set default playback device
  3. Set default recording device
  4. Apply a profile
  5. Advanced settings
  Q. Quit"""

ADVANCED_MENU = """
=== Advanced Settings ===
  1. Create profile
  2. List profiles
  3. Delete profile
  4. List all devices (with IDs)
  R. Return to main menu"""


class MenuController:
    def __init__(self, manager, directory):
        self.manager = manager
        self.directory = directory

    # ---- actions -----------------------------------------------------------
    def show_defaults(self):
        for kind in KINDS:
            d = self.directory.get_default(kind)
            print(f"Default {kind.lower()} device: {d['name'] if d else '(none)'}")

    def set_default(self, kind):
        label = f"{kind.lower()} device"
        target = prompt_selection(list_devices(self.directory, kind), label=label)
        if target is None:
            return None
        if self.directory.set_default(target["id"]):
            print(f"Default {label} set to: {target['name']}")
            return True
        print(f"ERROR: failed to set default {label} to '{target['name']}'.", file=sys.stderr)
        return False

    def list_all_devices(self):
        for kind in KINDS:
            print(f"\n--- {kind} ---")
            devices = list_devices(self.directory, kind)
            if not devices:
                print("  (none)")
            for d in devices:
                print(f"  {device_label(d)}\n      id={d['id']}")

    # ---- loops -------------------------------------------------------------
    def _run(self, action):
        try:
            action()
        except EOFError:
            # end of input ends the session, it is not an action failure
            raise
        except Exception as e:
            _log_exc("menu action failed")
            print(f"ERROR: {e} (details in {_log_path()})", file=sys.stderr)

    def advanced_loop(self):
        actions = {
            "1": self.manager.create_interactive,
            "2": self.manager.show_profiles,
            "3": self.manager.delete_interactive,
            "4": self.list_all_devices,
        }
        while True:
            print(ADVANCED_MENU)
            choice = input("Choice: ").strip().upper()
            if choice == "R":
                return
            action = actions.get(choice)
            if action is None:
                print(f"WARNING: '{choice}' is not a valid choice.", file=sys.stderr)
                continue
            self._run(action)

    def main_loop(self):
        actions = {
            "1": self.show_defaults,
            "2": lambda: self.set_default(PLAYBACK),
            "3": lambda: self.set_default(RECORDING),
            "4": self.manager.apply_interactive,
            "5": self.advanced_loop,
        }
        while True:
            print(MAIN_MENU)
            choice = input("Choice: ").strip().upper()
            if choice == "Q":
                return 0
            action = actions.get(choice)
            if action is None:
                print(f"WARNING: '{choice}' is not a valid choice.", file=sys.stderr)
                continue
            self._run(action)
