import logging
import os
import platform
import shutil
import subprocess

import psutil

logger = logging.getLogger(__name__)

# Interfaces never counted as traffic sources
_IGNORED_INTERFACES = ("lo", "loopback")

# Programs tried, in order, when the indicator is clicked
_SYSTEM_MONITORS = {
    "Linux": [
        ["gnome-system-monitor"],
        ["plasma-systemmonitor"],
        ["ksysguard"],
        ["xfce4-taskmanager"],
        ["mate-system-monitor"],
    ],
    "Windows": [["taskmgr"]],
    "Darwin": [["open", "-a", "Activity Monitor"]],
}


class InterfacesUnavailable(RuntimeError):
    """Raised when network interfaces cannot be enumerated."""


# ---- Helpers ----
def _which(cmd: str) -> bool:
    """Check if a command is available in the system's PATH."""
    return shutil.which(cmd) is not None


def format_metric_pretty(value, units=None):
    """
    Format a value with a binary prefix.

    Example: format_metric_pretty(2048, "B") -> "2.00 KiB"
    """
    metric_prefix = ""

    if value > 1024 * 1024:
        value /= 1024 * 1024
        metric_prefix = "Mi"
    elif value > 1024:
        value /= 1024
        metric_prefix = "Ki"

    return "%0.2f %s%s" % (value, metric_prefix, units or "")


# ---- CPU ----
def get_cpu_count():
    try:
        return psutil.cpu_count(logical=True) or 1
    except Exception:
        logger.exception("Could not read the number of CPUs")
        return 1


def get_cpu_ticks():
    """
    Returns a list of (total, idle) cumulative CPU times, one entry per core.
    Guest time is already part of user time on Linux, so it is not counted twice.
    """
    ticks = []
    for times in psutil.cpu_times(percpu=True):
        total = sum(times)
        total -= getattr(times, "guest", 0.0)
        total -= getattr(times, "guest_nice", 0.0)
        ticks.append((total, times.idle))
    return ticks


# ---- RAM ----
def _read_meminfo_field(field):
    """Read a single kB field from /proc/meminfo, in bytes. None when unavailable."""
    try:
        with open("/proc/meminfo") as f:
            for line in f:
                if line.startswith(field + ":"):
                    return int(line.split()[1]) * 1024
    except (OSError, ValueError, IndexError):
        pass
    return None


def get_memory():
    """
    Returns a memory snapshot in bytes.
    `slab` and `locked` are None on platforms that do not report them.
    """
    mem = psutil.virtual_memory()
    return {
        "user": mem.used,
        "buffer": getattr(mem, "buffers", 0),
        "shared": getattr(mem, "shared", 0),
        "cached": getattr(mem, "cached", 0),
        "slab": getattr(mem, "slab", None),
        "locked": _read_meminfo_field("Mlocked"),
        "free": mem.free,
        "total": mem.total,
    }


# ---- Swap ----
def get_swap():
    swap = psutil.swap_memory()
    return {"used": swap.used, "total": swap.total}


# ---- Network ----
def get_network_devices():
    """
    Enumerate network devices.
    Returns a list of dicts: {"name", "activated", "speed"}; speed is in Mbit/s, -1 when unknown.
    Raises InterfacesUnavailable when the interface table cannot be read.
    """
    try:
        if_stats = psutil.net_if_stats()
    except Exception as e:
        raise InterfacesUnavailable(f"Cannot enumerate network interfaces: {e}") from e

    devices = []
    for name, stats in if_stats.items():
        if name.lower() in _IGNORED_INTERFACES:
            continue
        devices.append({
            "name": name,
            "activated": bool(stats.isup),
            "speed": stats.speed if stats.speed else -1,
        })
    return devices


def get_network_counters(names):
    """
    Returns {name: (bytes_in, errors_in, bytes_out, errors_out, collisions)}
    for every requested interface that still exists.
    """
    pernic = psutil.net_io_counters(pernic=True)
    counters = {}
    for name in names:
        nic = pernic.get(name)
        if nic is None:
            continue
        counters[name] = (
            nic.bytes_recv,
            nic.errin,
            nic.bytes_sent,
            nic.errout,
            getattr(nic, "collisions", 0),
        )
    return counters


# ---- System monitor launcher ----
def open_system_monitor(command=None):
    """
    Launch the desktop's system monitor. `command` (list of args) overrides the
    platform defaults. Returns True when a program was started.
    """
    candidates = [command] if command else _SYSTEM_MONITORS.get(platform.system(), [])

    for args in candidates:
        if not args or not _which(args[0]):
            continue
        try:
            subprocess.Popen(
                args,
                stdout=subprocess.DEVNULL,
                stderr=subprocess.DEVNULL,
                start_new_session=(os.name != "nt"),
            )
            return True
        except OSError as e:
            logger.warning("Could not start %s: %s", args[0], e)

    logger.info("No system monitor program found")
    return False
