# audioswitch.py
# -----------------------------------------------------------------------------
# PyInstaller entrypoint.
#
# A single-file script target for PyInstaller (and `python audioswitch.py`);
# the application itself lives in the `audioswitch` package.
# -----------------------------------------------------------------------------

import os

# Bind to the parent console when launched from one (older PowerShell can
# otherwise open a second console window for a console EXE).
if os.name == "nt":
    try:
        import ctypes
        ctypes.windll.kernel32.AttachConsole(-1)  # ATTACH_PARENT_PROCESS
    except Exception:
        # No parent console: the session still runs in its own window.
        pass

from audioswitch.cli import main

if __name__ == "__main__":
    import sys
    sys.exit(main())
