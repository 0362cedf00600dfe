# --- Timers (milliseconds) ---
INDICATOR_UPDATE_INTERVAL = 250
CPU_UPDATE_MS = 250
MEM_UPDATE_MS = 1000
SWAP_UPDATE_MS = 2000
NET_UPDATE_MS = 250
ITEM_HOVER_TIMEOUT = 300

# --- Graph geometry ---
INDICATOR_NUM_GRID_LINES = 3
BAR_GRAPH_KEEP = 3
MIN_GRAPH_MAX = 0.00001
GRAPH_HEIGHT = 90
POPUP_GRAPH_WIDTH = 220
POPUP_GRAPH_HEIGHT = 80

# --- Rate estimation ---
NET_DECAY_FACTOR = 0.9999
NET_BOOTSTRAP_RATE = 56 * 1024 * 8  # bits/s
CPU_DECAY_CAP = 0.999999999

# --- Colors ---
CRT_GREEN = "#00FF66"
CRT_YELLOW = "#FFFF00"
CRT_RED = "#FF4444"
CRT_GRID = "#575757"
CRT_BACKGROUND = "#000000"

# RGBA used when the theme has no entry for a series color key
DEFAULT_SERIES_RGBA = (0, 190, 240, 255)

# Symbolic color keys resolved by the renderer
NORMAL_COLORS = {
    "grid-color": CRT_GRID,
    "cpu-color": CRT_GREEN,
    "mem-used-color": CRT_GREEN,
    "swap-used-color": CRT_GREEN,
    "swap-used-warn-color": CRT_YELLOW,
    "swap-used-bad-color": CRT_RED,
    "network-ok-color": CRT_GREEN,
    "network-bad-color": CRT_RED,
    "network-in-color": CRT_GREEN,
    "network-out-color": "#FFFFFF",
}

COLORBLIND_COLORS = {
    "grid-color": CRT_GRID,
    "cpu-color": "#0173B2",         # Blue
    "mem-used-color": "#0173B2",
    "swap-used-color": "#0173B2",
    "swap-used-warn-color": "#DE8F05",  # Orange
    "swap-used-bad-color": "#CC78BC",   # Pink
    "network-ok-color": "#029E73",      # Teal
    "network-bad-color": "#CC78BC",
    "network-in-color": "#029E73",
    "network-out-color": "#FFFFFF",
}

# --- Font styling ---
FONT_TITLE = ("Consolas", 10, "bold")
FONT_INFOTXT = ("Consolas", 9, "bold")
FONT_OVERLAY = ("Consolas", 8)

# --- Configuration defaults ---
CONFIG_FILE = "statsplus_config.json"

DEFAULT_CONFIG = {
    "monitor_index": 0,
    "colorblind_mode": False,
    "system_monitor_command": None,
    "indicators": {
        "cpu": {
            "update_interval_ms": CPU_UPDATE_MS,
            "decay": 0.2,
        },
        "memory": {
            "update_interval_ms": MEM_UPDATE_MS,
        },
        "swap": {
            "update_interval_ms": SWAP_UPDATE_MS,
        },
        "network": {
            "update_interval_ms": NET_UPDATE_MS,
            "decay_factor": NET_DECAY_FACTOR,
        },
    },
}

# Options shared by every indicator; per-indicator dicts override them
INDICATOR_DEFAULTS = {
    "update_interval_ms": INDICATOR_UPDATE_INTERVAL,
    "render_interval_ms": INDICATOR_UPDATE_INTERVAL,
    "bar_width": 6,
    "bar_padding": 1,
    "grid_color": "grid-color",
}

# Options for a popup line graph
GRAPH_DEFAULTS = {
    "offset_x": 2,
    "offset_y": -1,
    "units": "",
    "grid_color": "grid-color",
    "autoscale": True,
    "show_max": True,
    "max": 0,
}

# Indicator options that configure its popup graph
GRAPH_OPTION_KEYS = ("autoscale", "max", "units", "show_max", "offset_x", "offset_y")


def configure_app_styles(style_obj):
    """
    Configure the label styles used by the indicator popups.
    Call this once after creating your tb.Style() object.
    """

    # ===== POPUP TITLES ("Current:", "Maximum ...") =====
    style_obj.configure(
        "Title.TLabel",
        foreground=CRT_GREEN,
        font=FONT_TITLE,
    )

    # ===== ROW DESCRIPTIONS =====
    style_obj.configure(
        "Description.TLabel",
        foreground="#AAAAAA",
        font=FONT_INFOTXT,
    )

    # ===== ROW VALUES =====
    style_obj.configure(
        "Value.TLabel",
        foreground=CRT_GREEN,
        font=FONT_INFOTXT,
    )

    # ===== GRAPH MAX OVERLAY =====
    style_obj.configure(
        "Overlay.TLabel",
        foreground="#FFFFFF",
        background=CRT_BACKGROUND,
        font=FONT_OVERLAY,
    )
