# audioswitch/__main__.py
# `python -m audioswitch` behaves like the console script and the frozen EXE.

from .cli import main

if __name__ == "__main__":
    import sys
    sys.exit(main())
