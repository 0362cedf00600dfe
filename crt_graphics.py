from constants import (
    BAR_GRAPH_KEEP,
    CRT_BACKGROUND,
    CRT_GRID,
    GRAPH_DEFAULTS,
    INDICATOR_DEFAULTS,
    INDICATOR_NUM_GRID_LINES,
)
from graph_data import Color, GraphScale, SeriesSet
import monitor_core as core

GRID_DASH = (2, 1)


# This class adapts a Tk canvas to the path-based drawing calls used below.
class TkPathContext:
    """
    Collects move_to/line_to paths and emits them as canvas items on
    stroke()/fill(). Alpha is flattened onto the canvas background.
    """

    def __init__(self, canvas, background=CRT_BACKGROUND, tags="graph"):
        self.canvas = canvas
        self.background = background
        self.tags = tags
        self._subpaths = []
        self._color = Color.from_hex("#FFFFFF")
        self._line_width = 1.0
        self._dash = ()

    def move_to(self, x, y):
        self._subpaths.append([(x, y)])

    def line_to(self, x, y):
        if not self._subpaths:
            self.move_to(x, y)
            return
        self._subpaths[-1].append((x, y))

    def close_path(self):
        if self._subpaths and len(self._subpaths[-1]) > 1:
            path = self._subpaths[-1]
            path.append(path[0])
            # Drawing continues from the start point, as in cairo
            self._subpaths.append([path[0]])

    def set_source_color(self, color):
        self._color = color

    def set_line_width(self, width):
        self._line_width = width

    def set_dash(self, dashes, offset=0):
        self._dash = tuple(int(d) for d in dashes)

    def stroke(self):
        fill = self._color.to_hex(self.background)
        for path in self._subpaths:
            if len(path) < 2:
                continue
            flat_pts = [coord for pt in path for coord in pt]
            options = {"fill": fill, "width": self._line_width, "tags": self.tags}
            if self._dash:
                options["dash"] = self._dash
            self.canvas.create_line(*flat_pts, **options)
        self._subpaths = []

    def fill(self):
        fill = self._color.to_hex(self.background)
        for path in self._subpaths:
            if len(path) < 3:
                continue
            flat_pts = [coord for pt in path for coord in pt]
            self.canvas.create_polygon(*flat_pts, fill=fill, outline="", tags=self.tags)
        self._subpaths = []


def _merge_options(defaults, options):
    merged = dict(defaults)
    merged.update(options or {})
    return merged


def host_suspended(host):
    return host is not None and host.is_suspended()


class _GraphBase(SeriesSet):
    """Shared liveness checks and theme color caching."""

    def __init__(self, options, resolver, host):
        super().__init__()
        self.options = options
        self.resolver = resolver
        self.host = host
        self.area = None
        self.ready = True
        self.grid_color = Color.from_hex(CRT_GRID)
        self.style_cached = False

    def attach(self, area):
        self.area = area

    def enable(self):
        self.ready = True

    def disable(self):
        self.ready = False

    def style_changed(self):
        """Theme changed; colors are looked up again on the next repaint."""
        self.style_cached = False

    def update_styles(self):
        if self.resolver is None:
            return
        grid_color = self.resolver.resolve(self.options["grid_color"])
        if grid_color is not None:
            self.grid_color = grid_color
        for stat in self.series():
            stat.resolve_color(self.resolver)

    def _initialize_drawing_styles(self):
        if not self.style_cached:
            self.update_styles()
            self.style_cached = True
        # Series whose color key changed since the last style pass
        for stat in self.series():
            if stat.concrete_color is None:
                stat.resolve_color(self.resolver)

    def can_draw(self):
        return not (
            not self.ready
            or host_suspended(self.host)
            or self.area is None
            or not self.area.is_mapped()
        )

    def destroy(self):
        self.ready = False
        self.clear()
        if self.area is not None:
            self.area.destroy()
            self.area = None


def draw_grid_lines(cr, width, grid_offset, count, color):
    """Draws `count` dashed horizontal division lines."""
    for i in range(1, count + 1):
        cr.move_to(0, i * grid_offset + 0.5)
        cr.line_to(width, i * grid_offset + 0.5)
    cr.set_source_color(color)
    cr.set_line_width(1)
    cr.set_dash(GRID_DASH, 0)
    cr.stroke()


def plot_data_set(cr, height, values):
    cr.move_to(0, (1 - (values[0] if values else 0)) * height)
    for k in range(1, len(values)):
        cr.line_to(k, (1 - values[k]) * height)


class HorizontalGraph(_GraphBase):
    """
    Expanded line graph shown in an indicator popup.

    Series are truncated to the pixel width on every repaint and scaled
    against the graph max (autoscaled or fixed). The first series also gets
    a translucent filled area.
    """

    def __init__(self, options=None, resolver=None, host=None):
        super().__init__(_merge_options(GRAPH_DEFAULTS, options), resolver, host)
        self.max_label = None
        self.scale = GraphScale(
            autoscale=self.options["autoscale"],
            fixed_max=self.options["max"],
            on_max_changed=self._on_max_changed,
        )

    @property
    def max(self):
        return self.scale.max

    def attach(self, area, max_label=None):
        super().attach(area)
        self.max_label = max_label
        if not self.options["autoscale"]:
            self._update_max_label()

    def _on_max_changed(self, value):
        self._update_max_label()

    def _update_max_label(self):
        if self.options["show_max"] and self.max_label is not None:
            self.max_label.config(text=core.format_metric_pretty(self.max, self.options["units"]))

    def show(self):
        self.ready = True

    def hide(self):
        self.ready = False

    def draw(self):
        if not self.can_draw():
            return

        width, height = self.area.get_surface_size()
        self._initialize_drawing_styles()

        cr = self.area.get_context()
        if cr is None:
            return

        grid_offset = height // (INDICATOR_NUM_GRID_LINES + 1)
        self._draw_grid(cr, width, grid_offset)

        if not self.scale.prepare(self.series(), width):
            return
        self._render_stats(cr, height)

    def _draw_grid(self, cr, width, grid_offset):
        # major divisions
        draw_grid_lines(cr, width, grid_offset, INDICATOR_NUM_GRID_LINES, self.grid_color)
        # minor divisions
        draw_grid_lines(
            cr,
            width,
            grid_offset / 2,
            INDICATOR_NUM_GRID_LINES * 2 + 1,
            self.grid_color.with_alpha_scaled(0.2),
        )

    def _render_stats(self, cr, height):
        for index, stat in enumerate(self.series()):
            if not stat.scaled:
                continue
            outline_color = stat.concrete_color
            if index == 0:
                self._render_fill(cr, height, stat, outline_color.with_alpha_scaled(0.2))

            plot_data_set(cr, height, stat.scaled)
            cr.set_source_color(outline_color)
            cr.set_line_width(1.0)
            cr.set_dash((), 0)
            cr.stroke()

    def _render_fill(self, cr, height, stat, fill_color):
        plot_data_set(cr, height, stat.scaled)
        cr.line_to(len(stat.scaled) - 1, height)
        cr.line_to(0, height)
        cr.close_path()
        cr.set_source_color(fill_color)
        cr.fill()


class BarGraph(_GraphBase):
    """Compact panel graph: one bar per series, values already in [0, 1]."""

    def __init__(self, options=None, resolver=None, host=None, scale_factor=1.0):
        super().__init__(_merge_options(INDICATOR_DEFAULTS, options), resolver, host)
        self.scale_factor = scale_factor
        self.bar_padding = self.options["bar_padding"] * scale_factor
        self.bar_width = self.options["bar_width"] * scale_factor

    def preferred_width(self):
        return len(self.render_stats) * (self.bar_width + self.bar_padding) + self.bar_padding * 2.0 - 1

    def draw(self):
        if not self.can_draw():
            return

        width, height = self.area.get_surface_size()
        cr = self.area.get_context()
        if cr is None:
            return

        self._initialize_drawing_styles()

        # draw the background grid
        grid_offset = height // (INDICATOR_NUM_GRID_LINES + 2)
        for i in range(INDICATOR_NUM_GRID_LINES + 3):
            cr.move_to(0, i * grid_offset)
            cr.line_to(width, i * grid_offset)
        cr.set_source_color(self.grid_color)
        cr.set_line_width(1)
        cr.set_dash(GRID_DASH, 0)
        cr.stroke()

        self.trim()

        bar_outer_width = self.bar_width + self.bar_padding
        for i, stat in enumerate(self.series()):
            outline_color = stat.concrete_color

            # fill at 80% opacity
            self._plot_bar_top(cr, height, i, stat.values)
            cr.line_to((i + 1) * bar_outer_width, height)
            cr.line_to(i * bar_outer_width + self.bar_padding, height)
            cr.close_path()
            cr.set_source_color(outline_color.with_alpha_scaled(0.8))
            cr.fill()

            # height line
            self._plot_bar_top(cr, height, i, stat.values, nudge=0.5)
            cr.set_source_color(outline_color)
            cr.set_line_width(1.0)
            cr.set_dash((), 0)
            cr.stroke()

    def trim(self):
        for stat in self.series():
            if len(stat.values) > BAR_GRAPH_KEEP:
                stat.values = stat.values[len(stat.values) - BAR_GRAPH_KEEP:]

    def _plot_bar_top(self, cr, height, position, values, nudge=0):
        bar_outer_width = self.bar_width + self.bar_padding
        bar_height = 1 - (values[0] if values else 0)
        cr.move_to(position * bar_outer_width + self.bar_padding, bar_height * height + nudge)
        cr.line_to((position + 1) * bar_outer_width, bar_height * height + nudge)
