"""
Series buffers, theme colors and the autoscale/truncate pass shared by every graph.
"""

from collections import namedtuple

from constants import DEFAULT_SERIES_RGBA, MIN_GRAPH_MAX


class Color(namedtuple("Color", ["red", "green", "blue", "alpha"])):
    """RGBA color with 0-255 channels."""

    __slots__ = ()

    @classmethod
    def from_hex(cls, value, alpha=255):
        value = value.lstrip("#")
        if len(value) == 3:
            value = "".join(c * 2 for c in value)
        if len(value) == 8:
            alpha = int(value[6:8], 16)
        return cls(int(value[0:2], 16), int(value[2:4], 16), int(value[4:6], 16), alpha)

    def with_alpha_scaled(self, factor):
        return self._replace(alpha=int(self.alpha * factor))

    def to_hex(self, background="#000000"):
        """Flatten the alpha channel onto `background`; Tk canvases have no transparency."""
        bg = Color.from_hex(background)
        a = self.alpha / 255.0
        channels = (
            round(self.red * a + bg.red * (1 - a)),
            round(self.green * a + bg.green * (1 - a)),
            round(self.blue * a + bg.blue * (1 - a)),
        )
        return "#%02x%02x%02x" % channels


DEFAULT_COLOR = Color(*DEFAULT_SERIES_RGBA)


class ColorResolver:
    """Looks up symbolic color keys in the active palette."""

    def __init__(self, palette):
        self._palette = dict(palette)

    def set_palette(self, palette):
        self._palette = dict(palette)

    def resolve(self, key):
        """Return the Color for `key`, or None when the palette has no entry."""
        value = self._palette.get(key)
        if value is None:
            return None
        if isinstance(value, Color):
            return value
        try:
            return Color.from_hex(value)
        except (ValueError, AttributeError):
            return None


class DataSeries:
    """
    Append-only buffer of samples for a single metric.

    Writers only append; the owning graph trims the front when it renders.
    """

    def __init__(self, name, color):
        self.name = name
        self.color = color
        self.values = []
        self.scaled = []
        self.max = -1
        self.concrete_color = None

    def append(self, value):
        self.values.append(float(value))

    def set_color(self, key):
        """Change the symbolic color; the cached concrete color is dropped if it differs."""
        if key != self.color:
            self.color = key
            self.concrete_color = None

    def resolve_color(self, resolver):
        color = resolver.resolve(self.color) if resolver is not None else None
        self.concrete_color = color if color is not None else DEFAULT_COLOR
        return self.concrete_color

    def clear(self):
        self.values = []
        self.scaled = []
        self.max = -1


class SeriesSet:
    """Ordered collection of DataSeries; index 0 is the first rendered."""

    def __init__(self):
        self.render_stats = []
        self.stats = {}

    def add_data_set(self, name, color):
        self.render_stats.append(name)
        self.stats[name] = DataSeries(name, color)
        return self.stats[name]

    def add_data_point(self, name, value):
        self.stats[name].append(value)

    def series(self):
        return [self.stats[name] for name in self.render_stats]

    def clear(self):
        for stat in self.stats.values():
            stat.clear()


# ---- Autoscale / truncate ----
def truncate_data_points(values, new_width):
    """Keep the `new_width` most recent values."""
    if new_width <= 0:
        return []
    if len(values) > new_width:
        return values[len(values) - new_width:]
    return values


def scale_data_points(values, max_value):
    return [value / max_value for value in values]


class GraphScale:
    """
    Maintains the shared maximum of a graph.

    With autoscale enabled every prepare() truncates each series to the
    visible width, recomputes per-series maxima and folds them into the
    graph max. Fixed-scale graphs keep the max they were built with.
    `on_max_changed` is called whenever the max moves.
    """

    def __init__(self, autoscale=True, fixed_max=0, on_max_changed=None):
        self.autoscale = autoscale
        self.on_max_changed = on_max_changed
        self.max = -1
        if not autoscale:
            self.max = fixed_max

    def _set_max(self, value):
        if value != self.max:
            self.max = value
            if self.on_max_changed is not None:
                self.on_max_changed(value)

    def update_series_max(self, stat):
        stat.max = max(stat.values, default=0)
        # A larger max is shown right away, before the fold below.
        if stat.max > self.max:
            self._set_max(stat.max)
        return stat.max

    def fold_max(self, series_list):
        self._set_max(max((stat.max for stat in series_list), default=0))

    def prepare(self, series_list, width):
        """Truncate, rescale and return True when there is anything to draw."""
        new_width = width + 1

        for stat in series_list:
            stat.values = truncate_data_points(stat.values, new_width)
            if self.autoscale:
                self.update_series_max(stat)

        if self.autoscale:
            self.fold_max(series_list)

        if not self.can_scale():
            for stat in series_list:
                stat.scaled = []
            return False

        for stat in series_list:
            stat.scaled = scale_data_points(stat.values, self.max)
        return True

    def can_scale(self):
        return self.max > MIN_GRAPH_MAX
