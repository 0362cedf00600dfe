import tkinter as tk
from tkinter import Toplevel

import ttkbootstrap as tb
from screeninfo import get_monitors

from constants import CRT_BACKGROUND, GRAPH_HEIGHT, POPUP_GRAPH_HEIGHT, POPUP_GRAPH_WIDTH
from crt_graphics import TkPathContext


class TkDrawingArea:
    """Drawing surface backed by a Tk canvas."""

    def __init__(self, canvas):
        self.canvas = canvas

    def _alive(self):
        try:
            return bool(self.canvas.winfo_exists())
        except tk.TclError:
            return False

    def is_mapped(self):
        return self._alive() and bool(self.canvas.winfo_ismapped())

    def get_surface_size(self):
        return self.canvas.winfo_width(), self.canvas.winfo_height()

    def get_context(self):
        if not self._alive():
            return None
        self.canvas.delete("graph")  # Clear the previous frame
        return TkPathContext(self.canvas, background=CRT_BACKGROUND, tags="graph")

    def destroy(self):
        if self._alive():
            self.canvas.destroy()


def get_monitor_geometry(x, y):
    """Returns (width, height, x, y) of the monitor containing the point."""
    try:
        monitors = get_monitors()
        for m in monitors:
            if m.x <= x < m.x + m.width and m.y <= y < m.y + m.height:
                return m.width, m.height, m.x, m.y
        primary = [m for m in monitors if m.is_primary] or monitors
        return primary[0].width, primary[0].height, primary[0].x, primary[0].y
    except Exception:
        return 1920, 1080, 0, 0


class IndicatorView:
    """Compact canvas in the panel plus a hidden popup with the detailed graph."""

    def __init__(self, parent, layout, graph_options=None):
        graph_options = graph_options or {}
        self.parent = parent

        # --- Compact indicator ---
        self.frame = tb.Frame(parent)
        self.canvas = tb.Canvas(self.frame, height=GRAPH_HEIGHT, width=1, background=CRT_BACKGROUND,
                                highlightthickness=0)
        self.canvas.pack(fill="y", expand=True)
        self.area = TkDrawingArea(self.canvas)

        # --- Popup ---
        self.popup = Toplevel(parent)
        self.popup.overrideredirect(True)
        self.popup.attributes("-topmost", True)
        self.popup.withdraw()

        body = tb.Frame(self.popup, padding=6)
        body.pack(fill="both", expand=True)
        body.columnconfigure(0, weight=1)
        body.columnconfigure(1, weight=1)

        self.popup_canvas = tb.Canvas(body, width=POPUP_GRAPH_WIDTH, height=POPUP_GRAPH_HEIGHT,
                                      background=CRT_BACKGROUND, highlightthickness=0)
        self.popup_canvas.grid(row=0, column=0, columnspan=2, sticky="nsew", pady=(0, 4))
        self.popup_area = TkDrawingArea(self.popup_canvas)

        self.max_label = tb.Label(body, text="", style="Overlay.TLabel")
        self.max_label.place(in_=self.popup_canvas,
                             x=graph_options.get("offset_x", 2),
                             y=graph_options.get("offset_y", -1) + 1)

        self.labels = {}
        row = 1
        for entry in layout:
            if entry[0] == "title":
                tb.Label(body, text=entry[1], style="Title.TLabel").grid(
                    row=row, column=0, columnspan=2, sticky="w", pady=(4, 0))
            else:
                _, key, description = entry
                tb.Label(body, text=description, style="Description.TLabel").grid(
                    row=row, column=0, sticky="w", padx=(0, 8))
                value_lbl = tb.Label(body, text="...", style="Value.TLabel", anchor="e")
                value_lbl.grid(row=row, column=1, sticky="e")
                self.labels[key] = value_lbl
            row += 1

    def set_width(self, width):
        self.canvas.config(width=max(1, int(round(width))))

    def show_popup(self):
        self.popup.update_idletasks()
        x = self.frame.winfo_rootx()
        y = self.frame.winfo_rooty() + self.frame.winfo_height()
        item_width = self.frame.winfo_width()
        popup_width = self.popup.winfo_reqwidth()

        mon_w, mon_h, mon_x, mon_y = get_monitor_geometry(x, y)
        x = min(x + (item_width - popup_width) // 2,
                mon_x + mon_w - 4 - max(item_width, popup_width))
        x = max(x, mon_x)

        self.popup.geometry(f"+{x}+{y}")
        self.popup.deiconify()
        self.popup.lift()

    def hide_popup(self):
        self.popup.withdraw()

    def destroy(self):
        for widget in (self.popup, self.frame):
            try:
                widget.destroy()
            except tk.TclError:
                pass


def build_indicator_view(parent, indicator, layout, on_hover=None, on_click=None):
    """
    Builds the widgets for one indicator and wires hover/click events.
    Returns the IndicatorView.
    """
    graph_options = indicator.graph.options if indicator.graph is not None else None
    view = IndicatorView(parent, layout, graph_options)
    view.frame.pack(side="left", fill="y", padx=2, pady=2)

    if on_hover is not None:
        view.canvas.bind("<Enter>", lambda e: on_hover(indicator, True))
        view.canvas.bind("<Leave>", lambda e: on_hover(indicator, False))
    if on_click is not None:
        view.canvas.bind("<Button-1>", lambda e: on_click(indicator))

    return view
