# audioswitch/selector.py
#
# Device Selector plus the small prompt helpers the menus share.
#
# Validation functions return (value, error) pairs, the same convention as the
# name/index resolution helpers: bad input is an expected outcome, not an
# exception. Prompt loops print the error and ask again.
import sys

from .directory import device_label

def list_devices(directory, kind):
    # Always a fresh read; device lists are never reused across actions.
    return directory.enumerate(kind)

def parse_selection(text, count, allow_cancel=True):
    """
    Validate a 1-based menu choice.

    Returns (0, None) for cancel (when allowed), (n, None) for 1 <= n <= count,
    otherwise (None, message).
    """
    s = (text or "").strip()
    lo = 0 if allow_cancel else 1
    try:
        n = int(s)
    except ValueError:
        return None, f"'{s}' is not a number."
    if n == 0 and allow_cancel:
        return 0, None
    if 1 <= n <= count:
        return n, None
    return None, f"Enter a number between {lo} and {count}."

def prompt_selection(devices, allow_cancel=True, label="device"):
    """
    Show `devices` numbered 1..N in the given order and ask for one.

    Returns the chosen device dict, or None when the user enters 0 (or when
    there is nothing to choose from). Keeps asking until it gets a valid answer.
    """
    if not devices:
        print(f"No {label}s found.")
        return None

    print()
    for i, d in enumerate(devices, start=1):
        print(f"  {i}. {device_label(d)}")
    if allow_cancel:
        print("  0. Cancel")

    while True:
        choice, err = parse_selection(input(f"Select {label}: "), len(devices), allow_cancel)
        if err:
            print(f"WARNING: {err}", file=sys.stderr)
            continue
        if choice == 0:
            return None
        return devices[choice - 1]

def confirm(question):
    while True:
        answer = input(f"{question} (Y/N): ").strip().lower()
        if answer in ("y", "yes"):
            return True
        if answer in ("n", "no"):
            return False
        print("WARNING: please answer Y or N.", file=sys.stderr)

def prompt_nonempty(question):
    while True:
        value = input(f"{question}: ").strip()
        if value:
            return value
        print("WARNING: a value is required.", file=sys.stderr)
