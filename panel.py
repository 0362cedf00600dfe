import logging

from config import indicator_options
from constants import COLORBLIND_COLORS, NORMAL_COLORS
from graph_data import ColorResolver
from indicators import STRATEGIES, Indicator
from scheduler import HoverDebouncer
import monitor_core as core

logger = logging.getLogger(__name__)


def palette_for(config):
    if config.get("colorblind_mode"):
        return COLORBLIND_COLORS
    return NORMAL_COLORS


class StatsPanel:
    """
    The row of indicators plus the shared hover debounce.

    `view_factory(indicator, layout)` builds the widgets for one indicator
    and returns its view; the panel never touches the toolkit directly.
    """

    def __init__(self, loop, config, view_factory, provider=core, host=None, scale_factor=1.0, strategies=STRATEGIES):
        self.loop = loop
        self.config = config
        self.resolver = ColorResolver(palette_for(config))
        self.debouncer = HoverDebouncer(loop)
        self.indicators = []

        for strategy_cls in strategies:
            strategy = strategy_cls()
            try:
                indicator = Indicator(
                    strategy,
                    loop,
                    provider=provider,
                    host=host,
                    resolver=self.resolver,
                    options=indicator_options(config, strategy.name),
                    scale_factor=scale_factor,
                )
            except Exception:
                logger.exception("Could not create the %s indicator", strategy.name)
                continue

            try:
                view = view_factory(indicator, indicator.compute_graph_layout())
                indicator.attach_view(view)
            except Exception:
                logger.exception("Could not build the view for the %s indicator", strategy.name)
                indicator.destroy()
                continue
            self.indicators.append(indicator)

    def enable(self):
        for indicator in self.indicators:
            logger.info("indicator::enable %s", indicator.name)
            indicator.enable()

    def disable(self):
        self.debouncer.cancel()
        for indicator in self.indicators:
            indicator.hide_popup()
            indicator.disable()

    def destroy(self):
        self.debouncer.cancel()
        for indicator in self.indicators:
            indicator.destroy()
        self.indicators = []

    def on_hover(self, indicator, hovering):
        self.debouncer.on_hover(indicator, hovering)

    def set_colorblind_mode(self, enabled):
        self.config["colorblind_mode"] = bool(enabled)
        self.resolver.set_palette(palette_for(self.config))
        for indicator in self.indicators:
            indicator.style_changed()


def create_panel(loop, config, view_factory, **kwargs):
    """Build a panel; the caller keeps it and hands it back to teardown."""
    return StatsPanel(loop, config, view_factory, **kwargs)
