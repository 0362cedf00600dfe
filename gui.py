import logging
import os

import ttkbootstrap as tb
from screeninfo import get_monitors

from config import load_config, save_config
from constants import CONFIG_FILE, configure_app_styles
from panel import create_panel
from widgets import build_indicator_view
import monitor_core as core

logger = logging.getLogger(__name__)


def configure_logging():
    """Configure application-wide logging handlers and formatters."""
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s | %(levelname)s | %(name)s | %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )


class TkHost:
    """Reports whether the window is currently viewable."""

    def __init__(self, root):
        self.root = root

    def is_suspended(self):
        try:
            return self.root.state() in ("iconic", "withdrawn")
        except Exception:
            return True


def place_window(root, monitor_idx):
    """Put the panel at the top-right corner of the configured monitor."""
    root.update_idletasks()
    w = root.winfo_reqwidth()
    try:
        monitors = get_monitors()
        if 0 < monitor_idx <= len(monitors):
            monitor = monitors[monitor_idx - 1]
        else:
            monitor = ([m for m in monitors if m.is_primary] or monitors)[0]
        root.geometry(f"+{monitor.x + monitor.width - w - 8}+{monitor.y + 8}")
    except Exception:
        root.geometry(f"+{root.winfo_screenwidth() - w - 8}+8")


class StatsPlusApp:
    """Window hosting the indicator panel."""

    def __init__(self, config_path=CONFIG_FILE):
        self.config_path = config_path
        self.config = load_config(config_path)

        self.root = tb.Window(themename="darkly")
        self.root.title("CRT StatsPlus")
        self.root.resizable(False, False)
        self.style = tb.Style()
        configure_app_styles(self.style)

        self.bar = tb.Frame(self.root, padding=2)
        self.bar.pack(fill="both", expand=True)

        scale_factor = float(self.root.tk.call("tk", "scaling")) / (96 / 72)

        self.panel = create_panel(
            self.root,
            self.config,
            self._build_view,
            host=TkHost(self.root),
            scale_factor=max(scale_factor, 1.0),
        )

        self.root.bind("<F12>", self.toggle_colorblind)
        self.root.protocol("WM_DELETE_WINDOW", self.on_app_close)
        place_window(self.root, self.config.get("monitor_index", 0))

    def _build_view(self, indicator, layout):
        return build_indicator_view(
            self.bar,
            indicator,
            layout,
            on_hover=self.panel_hover,
            on_click=self.open_system_monitor,
        )

    def panel_hover(self, indicator, hovering):
        self.panel.on_hover(indicator, hovering)

    def open_system_monitor(self, indicator):
        core.open_system_monitor(self.config.get("system_monitor_command"))

    def toggle_colorblind(self, event=None):
        enabled = not self.config.get("colorblind_mode", False)
        self.panel.set_colorblind_mode(enabled)
        save_config(self.config, self.config_path)
        logger.info("Colorblind mode %s", "on" if enabled else "off")

    def run(self):
        self.panel.enable()
        logger.info("enable")
        self.root.mainloop()

    def on_app_close(self):
        """Clean shutdown of all components."""
        logger.info("disable")
        self.panel.disable()
        self.panel.destroy()
        self.root.destroy()


def main():
    configure_logging()
    script_dir = os.path.dirname(os.path.abspath(__file__))
    app = StatsPlusApp(os.path.join(script_dir, CONFIG_FILE))
    app.run()
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
