import copy
import logging

from conftest import fake_view_factory
from constants import COLORBLIND_COLORS, DEFAULT_CONFIG, NORMAL_COLORS
from graph_data import Color
from indicators import CpuStrategy, SwapStrategy
from panel import StatsPanel, create_panel, palette_for


def _config(**overrides):
    config = copy.deepcopy(DEFAULT_CONFIG)
    config.update(overrides)
    return config


def _panel(loop, provider, host, **kwargs):
    return create_panel(loop, _config(), fake_view_factory, provider=provider, host=host, **kwargs)


def test_palette_for():
    assert palette_for({"colorblind_mode": True}) is COLORBLIND_COLORS
    assert palette_for({}) is NORMAL_COLORS


def test_panel_builds_all_indicators(loop, provider, host):
    panel = _panel(loop, provider, host)
    assert isinstance(panel, StatsPanel)
    assert [i.name for i in panel.indicators] == ["cpu", "memory", "swap", "network"]
    assert all(i.view is not None for i in panel.indicators)


def test_configured_intervals_reach_indicators(loop, provider, host):
    config = _config()
    config["indicators"]["swap"]["update_interval_ms"] = 5000
    panel = create_panel(loop, config, fake_view_factory, provider=provider, host=host)
    swap = panel.indicators[2]
    assert swap.options["update_interval_ms"] == 5000


def test_enable_disable_leave_no_timers(loop, provider, host):
    panel = _panel(loop, provider, host)
    panel.enable()
    assert loop.pending == 8
    loop.advance(2000)
    assert loop.pending == 8

    panel.disable()
    assert loop.pending == 0
    assert all(i.view.popup_hidden >= 1 for i in panel.indicators)


def test_destroy_tears_down(loop, provider, host):
    panel = _panel(loop, provider, host)
    views = [i.view for i in panel.indicators]
    panel.enable()
    panel.destroy()
    assert panel.indicators == []
    assert loop.pending == 0
    assert all(view.destroyed for view in views)


def test_failing_indicator_is_skipped(loop, provider, host, caplog):
    class BrokenStrategy:
        name = "broken"
        defaults = {}

        def init(self, indicator):
            raise RuntimeError("no such metric")

    with caplog.at_level(logging.ERROR, logger="panel"):
        panel = _panel(loop, provider, host, strategies=[CpuStrategy, BrokenStrategy, SwapStrategy])

    assert [i.name for i in panel.indicators] == ["cpu", "swap"]
    assert "broken" in caplog.text


def test_hover_shows_popup_after_delay(loop, provider, host):
    panel = _panel(loop, provider, host)
    cpu = panel.indicators[0]

    panel.on_hover(cpu, True)
    loop.advance(299)
    assert cpu.view.popup_shown == 0
    loop.advance(1)
    assert cpu.view.popup_shown == 1
    assert cpu.popup_visible

    panel.on_hover(cpu, False)
    assert not cpu.popup_visible


def test_disable_cancels_pending_hover(loop, provider, host):
    panel = _panel(loop, provider, host)
    cpu = panel.indicators[0]
    panel.on_hover(cpu, True)
    panel.disable()
    loop.advance(1000)
    assert cpu.view.popup_shown == 0


def test_colorblind_mode_switches_series_colors(loop, provider, host):
    panel = _panel(loop, provider, host)
    cpu = panel.indicators[0]
    panel.enable()
    loop.advance(250)
    assert cpu.bar_graph.stats["cpu_0"].concrete_color == Color.from_hex(NORMAL_COLORS["cpu-color"])

    panel.set_colorblind_mode(True)
    assert panel.config["colorblind_mode"] is True
    loop.advance(250)
    assert cpu.bar_graph.stats["cpu_0"].concrete_color == Color.from_hex(COLORBLIND_COLORS["cpu-color"])


def test_configured_graph_options_through_panel(loop, provider, host):
    config = _config()
    config["indicators"]["network"].update({"autoscale": False, "max": 1e6, "units": "bit/s"})
    panel = create_panel(loop, config, fake_view_factory, provider=provider, host=host)
    network = panel.indicators[3]
    assert network.graph.options["autoscale"] is False
    assert network.graph.max == 1e6
    assert network.graph.options["units"] == "bit/s"


def test_failing_view_is_skipped(loop, provider, host, caplog):
    def view_factory(indicator, layout):
        if indicator.name == "memory":
            raise RuntimeError("widget error")
        return fake_view_factory(indicator, layout)

    with caplog.at_level(logging.ERROR, logger="panel"):
        panel = create_panel(loop, _config(), view_factory, provider=provider, host=host)

    assert [i.name for i in panel.indicators] == ["cpu", "swap", "network"]
    assert "memory" in caplog.text
    panel.enable()
    assert loop.pending == 6
