# audioswitch/devices.py
#
# Windows Core Audio backend for the Device Directory.
#
# - Enumerate active Render (playback) / Capture (recording) endpoints and flag
#   the current default of each.
# - Set the default endpoint via PolicyConfig (undocumented but stable COM API).
#
# Stability rules carried over from the COM work in this codebase:
# - Every helper that touches COM runs inside _com_context(); COM is never
#   initialised globally.
# - COM objects are never cached between calls. Only interface *definitions*
#   are cached, so no class construction happens mid-operation.
#
# Importing this module fails off Windows or without pycaw/comtypes; cli.py
# treats that as "audio backend unavailable".

import ctypes
import sys
import threading
import warnings
from contextlib import contextmanager
from ctypes import wintypes

# Import compat BEFORE pycaw: it patches comtypes.automation.
from .compat import (
    E_RENDER, E_CAPTURE, E_CONSOLE, ALL_ROLES,
    DEVICE_STATE_ACTIVE, _guid_from_parts, is_admin,
)

import comtypes
from comtypes import CLSCTX_ALL, CoCreateInstance, GUID, IUnknown, COMMETHOD, HRESULT
from pycaw.pycaw import AudioUtilities, IMMDeviceEnumerator
from pycaw.constants import CLSID_MMDeviceEnumerator

from .directory import DeviceDirectory, PLAYBACK, RECORDING
from .logging_setup import _log, _log_exc, _dbg

_FLOWS = {PLAYBACK: E_RENDER, RECORDING: E_CAPTURE}

# ---- COM lifecycle -----------------------------------------------------------
# Thread-local refcount so nested helpers (exists() inside set_default(), etc.)
# do not uninitialise COM underneath their caller. First enter initialises,
# last exit uninitialises. Failures here are non-fatal: the COM call that
# follows is the real success/failure signal.
_com_tls = threading.local()

def _com_enter():
    cnt = getattr(_com_tls, "count", 0)
    if cnt == 0:
        try:
            comtypes.CoInitialize()
        except OSError as e:
            _dbg(f"CoInitialize failed: {e}")
    _com_tls.count = cnt + 1

def _com_exit():
    cnt = getattr(_com_tls, "count", 0) - 1
    if cnt <= 0:
        _com_tls.count = 0
        try:
            comtypes.CoUninitialize()
        except OSError as e:
            _dbg(f"CoUninitialize failed: {e}")
    else:
        _com_tls.count = cnt

@contextmanager
def _com_context():
    _com_enter()
    try:
        yield
    finally:
        _com_exit()

# ---- PolicyConfig ------------------------------------------------------------
_POLICY_CONFIG_INTERFACES_CACHE = None

def _get_policy_config_interfaces():
    """
    Return (IPolicyConfig, CLSID_PolicyConfigClient), defined once and cached.

    Prefer pycaw's own definition; older pycaw releases do not ship one, in
    which case the vtable is declared here. Only SetDefaultEndpoint is called,
    but every preceding slot must be declared for the vtable offset to be right.
    """
    global _POLICY_CONFIG_INTERFACES_CACHE
    if _POLICY_CONFIG_INTERFACES_CACHE is not None:
        return _POLICY_CONFIG_INTERFACES_CACHE

    try:
        from pycaw.policyconfig import IPolicyConfig, CLSID_PolicyConfigClient
        _POLICY_CONFIG_INTERFACES_CACHE = (IPolicyConfig, CLSID_PolicyConfigClient)
        return _POLICY_CONFIG_INTERFACES_CACHE
    except ImportError:
        pass

    LPCWSTR = wintypes.LPCWSTR
    PVOID = ctypes.c_void_p

    class IPolicyConfig(IUnknown):
        _iid_ = GUID(_guid_from_parts("F8679F50", "-850A-41CF-", "9C72-", "430F290290C8"))
        _methods_ = (
            COMMETHOD([], HRESULT, "GetMixFormat",
                      (["in"], LPCWSTR, "wszDeviceId"),
                      (["out"], ctypes.POINTER(PVOID), "ppFormat")),
            COMMETHOD([], HRESULT, "GetDeviceFormat",
                      (["in"], LPCWSTR, "wszDeviceId"),
                      (["in"], wintypes.BOOL, "bDefault"),
                      (["out"], ctypes.POINTER(PVOID), "ppFormat")),
            COMMETHOD([], HRESULT, "ResetDeviceFormat",
                      (["in"], LPCWSTR, "wszDeviceId")),
            COMMETHOD([], HRESULT, "SetDeviceFormat",
                      (["in"], LPCWSTR, "wszDeviceId"),
                      (["in"], PVOID, "pEndpointFormat"),
                      (["in"], PVOID, "mixFormat")),
            COMMETHOD([], HRESULT, "GetProcessingPeriod",
                      (["in"], LPCWSTR, "wszDeviceId"),
                      (["in"], wintypes.BOOL, "bDefault"),
                      (["out"], ctypes.POINTER(ctypes.c_longlong), "pmftDefaultPeriod"),
                      (["out"], ctypes.POINTER(ctypes.c_longlong), "pmftMinimumPeriod")),
            COMMETHOD([], HRESULT, "SetProcessingPeriod",
                      (["in"], LPCWSTR, "wszDeviceId"),
                      (["in"], ctypes.POINTER(ctypes.c_longlong), "pmftPeriod")),
            COMMETHOD([], HRESULT, "GetShareMode",
                      (["in"], LPCWSTR, "wszDeviceId"),
                      (["out"], ctypes.POINTER(PVOID), "pMode")),
            COMMETHOD([], HRESULT, "SetShareMode",
                      (["in"], LPCWSTR, "wszDeviceId"),
                      (["in"], PVOID, "mode")),
            COMMETHOD([], HRESULT, "GetPropertyValue",
                      (["in"], LPCWSTR, "wszDeviceId"),
                      (["in"], wintypes.BOOL, "bFxStore"),
                      (["in"], PVOID, "pKey"),
                      (["out"], ctypes.POINTER(PVOID), "pv")),
            COMMETHOD([], HRESULT, "SetPropertyValue",
                      (["in"], LPCWSTR, "wszDeviceId"),
                      (["in"], wintypes.BOOL, "bFxStore"),
                      (["in"], PVOID, "pKey"),
                      (["in"], PVOID, "pv")),
            COMMETHOD([], HRESULT, "SetDefaultEndpoint",
                      (["in"], LPCWSTR, "wszDeviceId"),
                      (["in"], wintypes.DWORD, "role")),
            COMMETHOD([], HRESULT, "SetEndpointVisibility",
                      (["in"], LPCWSTR, "wszDeviceId"),
                      (["in"], wintypes.BOOL, "bVisible")),
        )

    CLSID_PolicyConfigClient = GUID(_guid_from_parts("870AF99C", "-171D-4F9E-", "AF0D-", "E63DF40C2BC9"))
    _POLICY_CONFIG_INTERFACES_CACHE = (IPolicyConfig, CLSID_PolicyConfigClient)
    return _POLICY_CONFIG_INTERFACES_CACHE

def _get_policy_config():
    """
    Fresh PolicyConfig instance for one operation (never a singleton: COM
    objects must be released in the apartment that created them).

    Raises AttributeError if no usable interface exists in this environment.
    """
    getter = getattr(AudioUtilities, "GetPolicyConfig", None)
    if getter:
        try:
            return getter()
        except Exception as e:
            _dbg(f"AudioUtilities.GetPolicyConfig failed, using local definition: {e}")
    try:
        IPolicyConfig, CLSID_PolicyConfigClient = _get_policy_config_interfaces()
        return CoCreateInstance(CLSID_PolicyConfigClient, interface=IPolicyConfig, clsctx=CLSCTX_ALL)
    except Exception as e:
        raise AttributeError("Audio policy config interface not available in this environment") from e

# ---- Enumeration ---------------------------------------------------------------
def enum_endpoints(flow, state_mask=DEVICE_STATE_ACTIVE):
    # Caller must already be inside _com_context().
    enumerator = CoCreateInstance(CLSID_MMDeviceEnumerator, IMMDeviceEnumerator, CLSCTX_ALL)
    collection = enumerator.EnumAudioEndpoints(flow, state_mask)
    return enumerator, collection

def _default_id(enumerator, flow):
    try:
        return enumerator.GetDefaultAudioEndpoint(flow, E_CONSOLE).GetId()
    except Exception:
        # No default at all (e.g. every device of this flow is disabled).
        return None

def _friendly_names_by_id():
    """
    {device_id: FriendlyName} from pycaw's managed wrappers. Cheaper and more
    stable than raw PropertyStore reads per device; callers fall back to the id.
    """
    names = {}
    try:
        for dev in AudioUtilities.GetAllDevices():
            try:
                dev_id = getattr(dev, "id", None) or dev.GetId()
                fn = getattr(dev, "FriendlyName", None)
            except Exception:
                continue
            if dev_id and fn:
                names[dev_id] = fn
    except Exception:
        _log_exc("GetAllDevices failed; falling back to raw ids for names")
    return names

def _sort_by_name(devices):
    # Same ordering the device pickers have always used: case-insensitive name.
    return sorted(devices, key=lambda d: d["name"].lower())


class WindowsDeviceDirectory(DeviceDirectory):
    """Device Directory backed by IMMDeviceEnumerator + PolicyConfig."""

    def enumerate(self, kind):
        flow = _FLOWS[kind]
        out = []
        with _com_context():
            with warnings.catch_warnings():
                # pycaw warns on devices whose property store cannot be read.
                warnings.simplefilter("ignore", UserWarning)
                enumerator, coll = enum_endpoints(flow)
                default_id = _default_id(enumerator, flow)
                name_map = _friendly_names_by_id()
                for i in range(coll.GetCount()):
                    dev_id = coll.Item(i).GetId()
                    out.append({
                        "id": dev_id,
                        "name": name_map.get(dev_id) or dev_id,
                        "kind": kind,
                        "isDefault": dev_id == default_id,
                    })
        _dbg(f"enumerate({kind}): {len(out)} device(s)")
        return _sort_by_name(out)

    def exists(self, device_id):
        # Active endpoints only: a device that is unplugged/disabled counts as
        # missing, since PolicyConfig cannot make it the default anyway.
        if not device_id:
            return False
        with _com_context():
            for flow in (E_RENDER, E_CAPTURE):
                try:
                    _, coll = enum_endpoints(flow)
                    for i in range(coll.GetCount()):
                        if coll.Item(i).GetId() == device_id:
                            return True
                except Exception:
                    _log_exc(f"enumeration failed while looking up {device_id}")
        return False

    def set_default(self, device_id):
        """
        Make `device_id` the default for all three roles (console, multimedia,
        communications). Returns True only if every role was set.
        """
        _dbg(f"SetDefaultEndpoint start: id={device_id}")
        if not self.exists(device_id):
            _log(f"SetDefaultEndpoint refused: {device_id} is not an active endpoint")
            return False
        with _com_context():
            try:
                policy = _get_policy_config()
            except AttributeError as e:
                _log(f"SetDefaultEndpoint unavailable: {e}")
                return False

            results = {}
            for rname, rval in ALL_ROLES:
                try:
                    policy.SetDefaultEndpoint(device_id, rval)
                    results[rname] = True
                except Exception as e:
                    _log(f"SetDefaultEndpoint({device_id}, {rname}) failed: {e}")
                    results[rname] = False

        ok = all(results.values())
        if not ok:
            details = ", ".join(f"{k}={'ok' if v else 'fail'}" for k, v in results.items())
            _log(f"SetDefaultEndpoint partial failure for {device_id}: {details}")
            if not is_admin():
                print("WARNING: changing the default device may require Administrator privileges on this system.",
                      file=sys.stderr)
        _dbg("SetDefaultEndpoint done")
        return ok
