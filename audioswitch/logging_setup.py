# audioswitch/logging_setup.py
#
# Small file logger shared by every module.
#
# - Nothing touches the filesystem at import time; the log file is created on
#   the first _log()/_dbg() call.
# - Debug lines are only written when AUDIOSWITCH_DEBUG=1.
# - AUDIOSWITCH_LOG_DIR moves the log; otherwise it sits next to the
#   executable/script, falling back to %TEMP%/audioswitch when that directory
#   is not writable.
import os
import sys
import traceback
import datetime
import tempfile

try:
    import faulthandler
except Exception:
    faulthandler = None

LOG_NAME = "audioswitch.log"

_DEBUG = os.environ.get("AUDIOSWITCH_DEBUG", "0").strip() not in ("", "0")

_LOG_DIR = None
_LOG_PATH = None
_INITIALIZED = False
_FH = None  # faulthandler file handle

def _exe_dir():
    """
    Directory of the running program: the frozen EXE when built with
    PyInstaller, otherwise the launched script. Returns None when it cannot
    be determined (e.g. interactive interpreter with an empty argv[0]).
    """
    try:
        if getattr(sys, "frozen", False):
            return os.path.dirname(sys.executable)
        script = sys.argv[0] if sys.argv else ""
        if not script or script == "-c":
            return None
        return os.path.dirname(os.path.abspath(script))
    except Exception:
        return None

def _resolve_log_path():
    base = os.environ.get("AUDIOSWITCH_LOG_DIR") or _exe_dir() or os.getcwd()
    try:
        os.makedirs(base, exist_ok=True)
        # Probe writability without creating the real log.
        probe = os.path.join(base, ".writetest")
        with open(probe, "w", encoding="utf-8"):
            pass
        os.remove(probe)
        return base, os.path.join(base, LOG_NAME)
    except OSError:
        tdir = os.path.join(tempfile.gettempdir(), "audioswitch")
        try:
            os.makedirs(tdir, exist_ok=True)
        except OSError:
            tdir = tempfile.gettempdir()
        return tdir, os.path.join(tdir, LOG_NAME)

def _ensure_resolved():
    global _LOG_DIR, _LOG_PATH
    if _LOG_DIR is None or _LOG_PATH is None:
        _LOG_DIR, _LOG_PATH = _resolve_log_path()

def _global_excepthook(exc_type, exc_value, exc_tb):
    _log_exc("UNCAUGHT EXCEPTION", (exc_type, exc_value, exc_tb))
    sys.__excepthook__(exc_type, exc_value, exc_tb)

def _ensure_init():
    """
    First-use initialisation: create the log with a breadcrumb, hook uncaught
    exceptions, point faulthandler at the log.
    """
    global _INITIALIZED, _FH
    if _INITIALIZED:
        return
    _INITIALIZED = True
    _ensure_resolved()

    _write_line(f"logging to: {_LOG_PATH}")

    sys.excepthook = _global_excepthook

    if faulthandler and _FH is None:
        try:
            _FH = open(_LOG_PATH, "a", buffering=1, encoding="utf-8")
            faulthandler.enable(file=_FH)
        except Exception:
            _FH = None

    import atexit
    atexit.register(_atexit_close)

def _atexit_close():
    global _FH
    try:
        if faulthandler and _FH and not _FH.closed:
            faulthandler.disable()
            _FH.close()
    except Exception:
        pass
    _FH = None

def _write_line(msg: str):
    try:
        ts = datetime.datetime.now().strftime("%Y-%m-%d %H:%M:%S")
        with open(_LOG_PATH, "a", encoding="utf-8", errors="replace") as f:
            f.write(f"[{ts}] {msg}\n")
    except Exception:
        # Logging must never take the tool down.
        pass

def _log_path():
    _ensure_resolved()
    return _LOG_PATH

def _log(msg: str):
    _ensure_init()
    _write_line(msg)

def _log_exc(prefix: str, exc_info=None):
    if exc_info is None:
        exc_info = sys.exc_info()
    tb = "".join(traceback.format_exception(*exc_info))
    _log(f"{prefix}\n{tb}")

def _dbg(msg: str):
    if not _DEBUG:
        return
    _ensure_init()
    _write_line(f"[DBG pid={os.getpid()}] {msg}")
