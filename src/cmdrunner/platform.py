"""Platform checks for the features that depend on POSIX shell semantics."""

import os
import sys


def is_windows() -> bool:
    return sys.platform.startswith("win")


def is_mac() -> bool:
    return sys.platform == "darwin"


def is_linux() -> bool:
    return sys.platform.startswith("linux")


def is_unix_like() -> bool:
    """Mac and Linux are the platforms where ``sh`` and ``ssh`` are assumed."""
    return is_mac() or is_linux()


def supports_shell_mode() -> bool:
    return is_unix_like()


def supports_remote_host() -> bool:
    return is_unix_like()


def supports_process_groups() -> bool:
    """True when a whole process group can be signalled with ``os.killpg``."""
    return os.name == "posix" and hasattr(os, "killpg")
