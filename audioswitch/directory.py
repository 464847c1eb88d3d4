# audioswitch/directory.py
#
# Device kinds and the Device Directory contract.
#
# Everything above this layer (selector, manager, menu) talks to a
# DeviceDirectory and never to COM directly. The Windows implementation lives
# in devices.py; tests substitute an in-memory directory.
#
# A device is a plain dict, the same shape list_devices() has always returned:
#   {"id": str, "name": str, "kind": "Playback" | "Recording", "isDefault": bool}

PLAYBACK = "Playback"
RECORDING = "Recording"

KINDS = (PLAYBACK, RECORDING)


class DeviceDirectory:
    """
    Live view of the OS audio endpoints.

    Implementations must re-query on every call (no caching across calls) and
    must report failures as return values, not exceptions, for set_default()
    and exists().
    """

    def enumerate(self, kind):
        """Return the active devices of `kind` in display order."""
        raise NotImplementedError

    def get_default(self, kind):
        """Return the current default device of `kind`, or None."""
        for d in self.enumerate(kind):
            if d.get("isDefault"):
                return d
        return None

    def set_default(self, device_id) -> bool:
        raise NotImplementedError

    def exists(self, device_id) -> bool:
        if not device_id:
            return False
        for kind in KINDS:
            for d in self.enumerate(kind):
                if d["id"] == device_id:
                    return True
        return False


def device_label(device):
    # One-line display form used by the selector and the menu.
    tag = "  [DEFAULT]" if device.get("isDefault") else ""
    return f"{device['name']}{tag}"
