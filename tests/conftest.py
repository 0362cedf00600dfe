"""
Shared fakes: a manually advanced event loop, a recording drawing context,
drawing areas, labels, views and a scripted metrics provider.
"""

import sys
from pathlib import Path

import pytest

# Modules live at the repository root
root_dir = Path(__file__).parent.parent
if str(root_dir) not in sys.path:
    sys.path.insert(0, str(root_dir))

import monitor_core  # noqa: E402


class FakeLoop:
    """after/after_cancel with a virtual millisecond clock."""

    def __init__(self):
        self.now = 0
        self._jobs = {}
        self._seq = 0

    def after(self, ms, callback):
        self._seq += 1
        job = f"after#{self._seq}"
        self._jobs[job] = (self.now + ms, self._seq, callback)
        return job

    def after_cancel(self, job):
        self._jobs.pop(job, None)

    def advance(self, ms):
        end = self.now + ms
        while True:
            due = [(d, s, j) for j, (d, s, _) in self._jobs.items() if d <= end]
            if not due:
                break
            d, _, job = min(due)
            callback = self._jobs.pop(job)[2]
            self.now = d
            callback()
        self.now = end

    @property
    def pending(self):
        return len(self._jobs)


class FakeContext:
    """Records every drawing call."""

    def __init__(self):
        self.ops = []

    def move_to(self, x, y):
        self.ops.append(("move_to", x, y))

    def line_to(self, x, y):
        self.ops.append(("line_to", x, y))

    def close_path(self):
        self.ops.append(("close_path",))

    def set_source_color(self, color):
        self.ops.append(("color", color))

    def set_line_width(self, width):
        self.ops.append(("line_width", width))

    def set_dash(self, dashes, offset=0):
        self.ops.append(("dash", tuple(dashes)))

    def stroke(self):
        self.ops.append(("stroke",))

    def fill(self):
        self.ops.append(("fill",))

    def count(self, name):
        return sum(1 for op in self.ops if op[0] == name)

    def paths(self, terminator):
        """Point lists of every path finished with `terminator` ("stroke" or "fill")."""
        result = []
        current = []
        for op in self.ops:
            if op[0] == "move_to":
                current.append([(op[1], op[2])])
            elif op[0] == "line_to":
                current[-1].append((op[1], op[2]))
            elif op[0] in ("stroke", "fill"):
                if op[0] == terminator:
                    result.append(current)
                current = []
        return result

    def colors_before(self, terminator):
        result = []
        color = None
        for op in self.ops:
            if op[0] == "color":
                color = op[1]
            elif op[0] == terminator:
                result.append(color)
        return result


class FakeArea:
    def __init__(self, width=100, height=40, mapped=True, has_context=True):
        self.width = width
        self.height = height
        self.mapped = mapped
        self.has_context = has_context
        self.contexts = []
        self.destroyed = False

    def is_mapped(self):
        return self.mapped and not self.destroyed

    def get_surface_size(self):
        return self.width, self.height

    def get_context(self):
        if not self.has_context:
            return None
        cr = FakeContext()
        self.contexts.append(cr)
        return cr

    @property
    def last(self):
        return self.contexts[-1] if self.contexts else None

    def destroy(self):
        self.destroyed = True


class FakeLabel:
    def __init__(self):
        self.text = None

    def config(self, text=None, **kwargs):
        if text is not None:
            self.text = text


class FakeView:
    def __init__(self, layout):
        self.layout = layout
        self.area = FakeArea(width=30, height=40)
        self.popup_area = FakeArea(width=100, height=40)
        self.max_label = FakeLabel()
        self.labels = {entry[1]: FakeLabel() for entry in layout if entry[0] == "row"}
        self.width = None
        self.popup_shown = 0
        self.popup_hidden = 0
        self.destroyed = False

    def set_width(self, width):
        self.width = width

    def show_popup(self):
        self.popup_shown += 1

    def hide_popup(self):
        self.popup_hidden += 1

    def destroy(self):
        self.destroyed = True


class FakeHost:
    def __init__(self, suspended=False):
        self.suspended = suspended

    def is_suspended(self):
        return self.suspended


class FakeProvider:
    """Scripted stand-in for monitor_core."""

    def __init__(self):
        self.cpu_ticks = [(0.0, 0.0), (0.0, 0.0)]
        self.memory = {
            "user": 600, "buffer": 10, "shared": 20, "cached": 30,
            "slab": 100, "locked": None, "free": 400, "total": 1000,
        }
        self.swap = {"used": 0, "total": 1000}
        self.devices = [
            {"name": "eth0", "activated": True, "speed": 1000},
            {"name": "wlan0", "activated": False, "speed": -1},
        ]
        self.counters = {
            "eth0": (0, 0, 0, 0, 0),
            "wlan0": (0, 0, 0, 0, 0),
        }
        self.interfaces_error = False
        self.fail = False

    def get_cpu_count(self):
        return len(self.cpu_ticks)

    def get_cpu_ticks(self):
        if self.fail:
            raise RuntimeError("provider failure")
        return list(self.cpu_ticks)

    def get_memory(self):
        if self.fail:
            raise RuntimeError("provider failure")
        return dict(self.memory)

    def get_swap(self):
        return dict(self.swap)

    def get_network_devices(self):
        if self.interfaces_error:
            raise monitor_core.InterfacesUnavailable("no interface table")
        return [dict(d) for d in self.devices]

    def get_network_counters(self, names):
        return {name: self.counters[name] for name in names if name in self.counters}


class ManualClock:
    def __init__(self, now=0.0):
        self.now = now

    def __call__(self):
        return self.now


@pytest.fixture
def loop():
    return FakeLoop()


@pytest.fixture
def provider():
    return FakeProvider()


@pytest.fixture
def host():
    return FakeHost()


def fake_view_factory(indicator, layout):
    return FakeView(layout)
