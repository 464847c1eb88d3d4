# audioswitch/__init__.py

# Re-export the entrypoint so the tool can be started programmatically
# (tests, "python -c", other scripts) without going through __main__.py.
from .cli import main

__all__ = ["main"]
