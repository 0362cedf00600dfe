"""
Metric indicators.

An Indicator owns a compact bar graph, an optional popup line graph and two
periodic tasks: one samples the metrics provider, the other repaints. What
is sampled and how it is normalized comes from a small strategy object
(CPU, memory, swap, network) with three hooks: init, sample_tick and
compute_graph_layout.
"""

import logging
import time

from constants import CPU_DECAY_CAP, GRAPH_OPTION_KEYS, INDICATOR_DEFAULTS, NET_DECAY_FACTOR
from crt_graphics import BarGraph, HorizontalGraph
from rate_estimator import IN_BYTES, OUT_BYTES, NUM_CHANNELS, RateEstimator
from scheduler import PeriodicTask
import monitor_core as core

logger = logging.getLogger(__name__)


class Indicator:
    """Generic indicator engine, parameterized by a metric strategy."""

    def __init__(self, strategy, loop, provider=core, host=None, resolver=None, options=None, scale_factor=1.0):
        self.strategy = strategy
        self.name = strategy.name
        self.loop = loop
        self.provider = provider
        self.host = host
        self.resolver = resolver

        self.options = dict(INDICATOR_DEFAULTS)
        self.options.update(strategy.defaults)
        self.options.update(options or {})

        self.ready = False
        self.popup_visible = False
        self.view = None
        self.graph = None
        self.labels = {}
        self.values = {}

        self.bar_graph = BarGraph(self.options, resolver, host, scale_factor)

        self._sample_task = PeriodicTask(
            loop, self.options["update_interval_ms"], self._update_values, name=f"{self.name}-sample"
        )
        self._render_task = PeriodicTask(
            loop, self.options["render_interval_ms"], self.repaint, name=f"{self.name}-render"
        )

        strategy.init(self)

    # ---- Series plumbing used by strategies ----
    def add_data_set(self, name, color):
        return self.bar_graph.add_data_set(name, color)

    def add_data_point(self, name, value):
        self.bar_graph.add_data_point(name, value)

    def make_graph(self, options):
        """Popup graph; configured graph keys override the strategy's own."""
        options = dict(options)
        options.update({key: self.options[key] for key in GRAPH_OPTION_KEYS if key in self.options})
        self.graph = HorizontalGraph(options, self.resolver, self.host)
        return self.graph

    def set_value(self, key, text):
        self.values[key] = text
        label = self.labels.get(key)
        if label is not None:
            label.config(text=text)

    def set_series_color(self, name, color):
        self.bar_graph.stats[name].set_color(color)

    def compute_graph_layout(self):
        return self.strategy.compute_graph_layout(self)

    # ---- View ----
    def attach_view(self, view):
        self.view = view
        self.labels = dict(view.labels)
        self.bar_graph.attach(view.area)
        if self.graph is not None:
            self.graph.attach(view.popup_area, view.max_label)
        for key, text in self.values.items():
            self.set_value(key, text)
        view.set_width(self.bar_graph.preferred_width())

    # ---- Lifecycle ----
    @property
    def sampling(self):
        return self._sample_task.active

    def enable(self):
        self._sample_task.start()
        self._render_task.start()
        self.ready = True
        self.bar_graph.enable()
        if self.graph is not None:
            self.graph.enable()
        logger.debug("indicator::enable %s", self.name)

    def disable(self):
        self.ready = False
        self._sample_task.stop()
        self._render_task.stop()
        self.bar_graph.disable()
        if self.graph is not None:
            self.graph.disable()
        logger.debug("indicator::disable %s", self.name)

    def show_popup(self):
        if self.graph is not None:
            self.graph.show()
        self.popup_visible = True
        if self.view is not None:
            self.view.show_popup()

    def hide_popup(self):
        if self.graph is not None:
            self.graph.hide()
        self.popup_visible = False
        if self.view is not None:
            self.view.hide_popup()

    def style_changed(self):
        self.bar_graph.style_changed()
        if self.graph is not None:
            self.graph.style_changed()

    def destroy(self):
        self.disable()
        self.popup_visible = False
        self.bar_graph.destroy()
        if self.graph is not None:
            self.graph.destroy()
        if self.view is not None:
            self.view.destroy()
            self.view = None
        self.labels = {}

    # ---- Tasks ----
    def _update_values(self):
        if self.ready:
            self.strategy.sample_tick(self)

    def repaint(self):
        self.bar_graph.draw()
        if self.popup_visible and self.graph is not None:
            self.graph.draw()


# ==============================================================================
# ==== CPU
# ==============================================================================
def cpu_reading(total_delta, idle_delta):
    """Busy fraction of one core over a sampling interval."""
    if total_delta > 0:
        return 1.0 - idle_delta / total_delta
    return 0.0


def decayed_value(reading, previous, decay):
    """Peak-hold smoothing: a reading never drops faster than `previous * decay`."""
    return max(reading, min(previous * decay, CPU_DECAY_CAP))


class CpuStrategy:
    name = "cpu"
    defaults = {"update_interval_ms": 250, "decay": 0.2}

    def init(self, indicator):
        provider = indicator.provider
        self._prev = provider.get_cpu_ticks()
        self.ncpu = len(self._prev) or provider.get_cpu_count()
        self._pcpu = [0.0] * self.ncpu

        for cpu in range(self.ncpu):
            indicator.add_data_set(f"cpu_{cpu}", "cpu-color")

        graph = indicator.make_graph({"autoscale": False, "max": 100, "units": "%", "show_max": False})
        graph.add_data_set("cpu-usage", "cpu-color")

    def sample_tick(self, indicator):
        cpu = indicator.provider.get_cpu_ticks()
        decay = indicator.options["decay"]
        total_usage = 0.0

        for i in range(min(self.ncpu, len(cpu), len(self._prev))):
            total = max(cpu[i][0] - self._prev[i][0], 0)
            idle = max(cpu[i][1] - self._prev[i][1], 0)

            reading = cpu_reading(total, idle)
            total_usage += reading

            value = decayed_value(reading, self._pcpu[i], decay)
            indicator.add_data_point(f"cpu_{i}", value)
            self._pcpu[i] = value

        total_usage = total_usage / self.ncpu * 100
        indicator.graph.add_data_point("cpu-usage", total_usage)
        indicator.set_value("cpu", "%s%%" % core.format_metric_pretty(total_usage, ""))

        self._prev = cpu

    def compute_graph_layout(self, indicator):
        return [
            ("title", "Current:"),
            ("row", "cpu", "Total CPU usage"),
        ]


# ==============================================================================
# ==== Memory
# ==============================================================================
_MEMORY_ROWS = [
    ("used", "Total memory usage"),
    ("buffer", "Total buffer usage"),
    ("shared", "Total shared usage"),
    ("cached", "Total cache usage"),
    ("slab", "Total slab usage"),
    ("locked", "Total locked usage"),
    ("free", "Total free usage"),
    ("total", "Total RAM present"),
]


class MemoryStrategy:
    name = "memory"
    defaults = {"update_interval_ms": 1000}

    def init(self, indicator):
        mem = indicator.provider.get_memory()
        self.total = mem["total"]
        self.has_slab = mem.get("slab") is not None
        self.has_locked = mem.get("locked") is not None

        indicator.add_data_set("mem-used", "mem-used-color")

        graph = indicator.make_graph({"autoscale": False, "units": "B", "max": self.total})
        graph.add_data_set("mem-used", "mem-used-color")

    def sample_tick(self, indicator):
        mem = indicator.provider.get_memory()

        mem_used = mem["user"]
        if mem.get("slab") is not None:
            mem_used -= mem["slab"]
        t = mem_used / mem["total"] if mem["total"] > 0 else 0.0
        indicator.add_data_point("mem-used", t)
        indicator.graph.add_data_point("mem-used", mem_used)

        readings = dict(mem, used=mem_used)
        for key, _ in _MEMORY_ROWS:
            value = readings.get(key)
            if value is None:
                continue
            indicator.set_value(key, core.format_metric_pretty(value, "B"))

    def compute_graph_layout(self, indicator):
        layout = [("title", "Current:")]
        for key, description in _MEMORY_ROWS:
            if key == "slab" and not self.has_slab:
                continue
            if key == "locked" and not self.has_locked:
                continue
            layout.append(("row", key, description))
        return layout


# ==============================================================================
# ==== Swap
# ==============================================================================
def swap_color(ratio):
    if ratio > 0.5:
        return "swap-used-bad-color"
    elif ratio > 0.25:
        return "swap-used-warn-color"
    return "swap-used-color"


class SwapStrategy:
    name = "swap"
    defaults = {"update_interval_ms": 2000}

    def init(self, indicator):
        swap = indicator.provider.get_swap()

        indicator.add_data_set("swap-used", "swap-used-color")

        graph = indicator.make_graph({"autoscale": False, "max": swap["total"], "units": "B"})
        graph.add_data_set("swap-used", "swap-used-color")

    def sample_tick(self, indicator):
        swap = indicator.provider.get_swap()

        t = swap["used"] / swap["total"] if swap["total"] > 0 else 0.0
        indicator.add_data_point("swap-used", t)
        indicator.graph.add_data_point("swap-used", swap["used"])

        indicator.set_value("swap", core.format_metric_pretty(swap["used"], "B"))
        indicator.set_series_color("swap-used", swap_color(t))

    def compute_graph_layout(self, indicator):
        return [
            ("title", "Current:"),
            ("row", "swap", "Total swap usage"),
        ]


# ==============================================================================
# ==== Network
# ==============================================================================
class NetworkStrategy:
    name = "network"
    defaults = {"update_interval_ms": 250, "decay_factor": NET_DECAY_FACTOR}

    def __init__(self, clock=time.monotonic):
        self.clock = clock
        self.interfaces = []
        self.link_speed = 0
        self.interfaces_changed = False
        self._unavailable = False

    def init(self, indicator):
        self.estimator = RateEstimator(decay_factor=indicator.options["decay_factor"], clock=self.clock)

        indicator.add_data_set("network-in-used", "network-ok-color")
        indicator.add_data_set("network-out-used", "network-ok-color")

        graph = indicator.make_graph({"units": "b/s"})
        graph.add_data_set("network-in-used", "network-in-color")
        graph.add_data_set("network-out-used", "network-out-color")

        self.estimator.prime(self.accumulate_device_values(indicator.provider))

    def _active_interfaces(self, provider):
        try:
            devices = provider.get_network_devices()
            self._unavailable = False
        except core.InterfacesUnavailable as e:
            if not self._unavailable:
                logger.warning("Network interfaces unavailable: %s", e)
                self._unavailable = True
            devices = []

        active = [d for d in devices if d["activated"]]
        names = [d["name"] for d in active]
        self.interfaces_changed = names != self.interfaces
        if self.interfaces_changed:
            logger.info("Interfaces found: %d (%s)", len(names), ", ".join(names) or "none")
            self.interfaces = names
        self.link_speed = sum(d["speed"] for d in active if d["speed"] > 0)
        return names

    def accumulate_device_values(self, provider):
        """Sum the counters of every activated interface."""
        accum = [0] * NUM_CHANNELS
        names = self._active_interfaces(provider)
        if not names:
            return accum

        for counters in provider.get_network_counters(names).values():
            for i in range(NUM_CHANNELS):
                accum[i] += counters[i]
        return accum

    def sample_tick(self, indicator):
        accum = self.accumulate_device_values(indicator.provider)

        indicator.set_value("speed", "%d Mb/s" % self.link_speed if self.link_speed > 0 else "unknown")

        if self.interfaces_changed:
            # Counters of a newly activated interface would read as one huge burst.
            self.estimator.prime(accum)
            return

        sample = self.estimator.update(accum)
        if sample is None:
            return

        if not sample.bootstrap:
            indicator.add_data_point("network-in-used", sample.normalized(IN_BYTES))
            indicator.add_data_point("network-out-used", sample.normalized(OUT_BYTES))

            indicator.graph.add_data_point("network-in-used", sample.rates[IN_BYTES])
            indicator.graph.add_data_point("network-out-used", sample.rates[OUT_BYTES])

            indicator.set_value("in", "%sb/s" % core.format_metric_pretty(sample.rates[IN_BYTES], ""))
            indicator.set_value("out", "%sb/s" % core.format_metric_pretty(sample.rates[OUT_BYTES], ""))
            indicator.set_value("max_in", "%sb/s" % core.format_metric_pretty(sample.ceilings[IN_BYTES], ""))
            indicator.set_value("max_out", "%sb/s" % core.format_metric_pretty(sample.ceilings[OUT_BYTES], ""))

        indicator.set_series_color("network-in-used", "network-bad-color" if sample.in_bad else "network-ok-color")
        indicator.set_series_color("network-out-used", "network-bad-color" if sample.out_bad else "network-ok-color")

    def compute_graph_layout(self, indicator):
        return [
            ("title", "Current:"),
            ("row", "in", "Inbound"),
            ("row", "out", "Outbound"),
            ("row", "speed", "Link speed"),
            ("title", "Maximum (over 2 hours):"),
            ("row", "max_in", "Inbound"),
            ("row", "max_out", "Outbound"),
        ]


STRATEGIES = [CpuStrategy, MemoryStrategy, SwapStrategy, NetworkStrategy]
