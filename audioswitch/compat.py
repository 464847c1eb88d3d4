# audioswitch/compat.py
"""
Compatibility shims and Core Audio constants.

Must be imported before pycaw/comtypes interfaces are used (devices.py does
this first thing).
"""
# --- comtypes compatibility shim (MUST be at the VERY TOP) ---
try:
    import comtypes.automation as _automation
    # Some comtypes builds only expose tagPROPVARIANT; pycaw expects PROPVARIANT.
    if not hasattr(_automation, "PROPVARIANT") and hasattr(_automation, "tagPROPVARIANT"):
        _automation.PROPVARIANT = _automation.tagPROPVARIANT
    if not hasattr(_automation, "VT_LPWSTR"):
        _automation.VT_LPWSTR = 31
except ImportError:
    # No comtypes: devices.py fails on its own import and cli.py reports it.
    pass
except Exception as e:
    import sys
    print(f"WARNING: comtypes compatibility shim failed during import: {e}", file=sys.stderr)

# comtypes releases COM pointers from __del__ via these modules; load them up
# front so a late import during interpreter shutdown cannot fail, and so
# PyInstaller bundles them.
try:
    import comtypes._post_coinit
    import comtypes._post_coinit.unknwn
except ImportError:
    pass

import ctypes

def is_admin():
    try:
        return bool(ctypes.windll.shell32.IsUserAnAdmin())
    except Exception:
        return False

# Endpoint data flow
E_RENDER = 0   # Playback
E_CAPTURE = 1  # Recording

# Endpoint roles. "Default device" in the Sound control panel is console +
# multimedia; "Default communication device" is communications.
E_CONSOLE = 0
E_MULTIMEDIA = 1
E_COMMUNICATIONS = 2

ALL_ROLES = (
    ("console", E_CONSOLE),
    ("multimedia", E_MULTIMEDIA),
    ("communications", E_COMMUNICATIONS),
)

DEVICE_STATE_ACTIVE = 0x00000001

def _guid_from_parts(*parts: str) -> str:
    """
    Assemble a GUID string from parts.
    Example: _guid_from_parts("870AF99C", "-171D-4F9E-", "AF0D-", "E63DF40C2BC9")
    """
    return "{" + "".join(parts) + "}"
