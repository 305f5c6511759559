from tkinter import ttk

BG = "#ecf0f1"
ACCENT_COLOR = "#8e44ad"
BEAT_COLOR = "#3498db"
IDLE_COLOR = "#bdc3c7"
STOP_COLOR = "#e74c3c"

def setup_styles():
    style = ttk.Style()
    style.theme_use("clam")

    # General button style
    style.configure("TButton",
                    font=("Segoe UI", 12),
                    padding=8)

    # Hover effect for buttons
    style.map("TButton",
              background=[("active", "#2980b9")],
              foreground=[("active", "white")])

    # Selected preset / meter button
    style.configure("Selected.TButton",
                    background=ACCENT_COLOR,
                    foreground="white")

    # Start/Stop button while running
    style.configure("Stop.TButton",
                    background=STOP_COLOR,
                    foreground="white")

    style.configure("TLabel",
                    font=("Segoe UI", 12))

    style.configure("Title.TLabel",
                    font=("Segoe UI", 20, "bold"),
                    foreground="#2c3e50")

    # Big BPM readout
    style.configure("Bpm.TLabel",
                    font=("Segoe UI", 48, "bold"),
                    foreground="#2c3e50")

    style.configure("TCheckbutton",
                    font=("Segoe UI", 12))

    style.configure("TFrame", background=BG)

def create_title(parent, text):
    """Create a styled title label"""
    lbl = ttk.Label(parent, text=text, style="Title.TLabel")
    lbl.pack(pady=(10, 20))
    return lbl

def create_section(parent, title):
    """Create a section frame with a title inside"""
    frame = ttk.Frame(parent, padding=15, relief="ridge")
    lbl = ttk.Label(frame, text=title, font=("Segoe UI", 14, "bold"))
    lbl.pack(anchor="w", pady=(0, 10))
    return frame

def beat_color(index, active):
    """Fill colour for one beat indicator cell."""
    if not active:
        return IDLE_COLOR
    return ACCENT_COLOR if index == 0 else BEAT_COLOR
