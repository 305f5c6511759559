import argparse
import logging
import tkinter as tk
from tkinter import ttk

from control import ControlSurface
from speech import Announcer, SpeechWorker, DEFAULT_LANG
from ui_style import setup_styles, create_title, create_section, beat_color, BG
from utils import (MIN_BPM, MAX_BPM, BPM_PRESETS, METER_CHOICES, DEFAULT_BPM, DEFAULT_METER,
                   DEFAULT_VOLUME, VOLUME_STEP, parse_bpm)

logger = logging.getLogger(__name__)

CELL_SIZE = 48
CELL_PAD = 8


class MetronomeApp(tk.Tk):
    def __init__(self, bpm=DEFAULT_BPM, meter=DEFAULT_METER, volume=DEFAULT_VOLUME, voice=False, voice_lang=DEFAULT_LANG):
        super().__init__()
        self.title("Metronome")
        self.geometry("520x640")
        self.configure(bg=BG)

        setup_styles()

        self.control = ControlSurface(self, announcer=Announcer(SpeechWorker(lang=voice_lang)))
        self.control.set_tempo(bpm)
        self.control.set_meter(meter)
        self.control.set_volume(volume)
        self.control.set_voice_enabled(voice)

        self.bpm_var = tk.StringVar(value=self._bpm_text())
        self.tempo_var = tk.DoubleVar(value=self.control.params.tempo)
        self.volume_var = tk.DoubleVar(value=self.control.params.volume)
        self.voice_var = tk.BooleanVar(value=self.control.params.voice_enabled)

        self.preset_buttons = {}
        self.meter_buttons = {}
        self.cells = []

        self.main_frame = ttk.Frame(self)
        self.create_widgets()

        self.control.add_listener(self.on_beat)
        self.bind('<space>', lambda e: self.toggle_running())
        self.protocol('WM_DELETE_WINDOW', self.on_close)

    def _bpm_text(self):
        return f"{self.control.params.tempo:g}"

    def create_widgets(self):
        self.main_frame.pack(fill='both', expand=True, padx=20, pady=20)
        create_title(self.main_frame, "Metronome")

        # Tempo section
        tempo_frame = create_section(self.main_frame, "Tempo (BPM)")
        tempo_frame.pack(fill='x', pady=6)
        ttk.Label(tempo_frame, textvariable=self.bpm_var, style="Bpm.TLabel").pack()

        row = ttk.Frame(tempo_frame)
        ttk.Button(row, text='-', width=3, command=lambda: self.nudge_tempo(-1)).pack(side='left', padx=4)
        ttk.Scale(row, from_=MIN_BPM, to=MAX_BPM, variable=self.tempo_var, orient='horizontal', length=240,
                  command=self.on_tempo_slider).pack(side='left', padx=4)
        ttk.Button(row, text='+', width=3, command=lambda: self.nudge_tempo(1)).pack(side='left', padx=4)
        row.pack(pady=4)

        entry_row = ttk.Frame(tempo_frame)
        self.bpm_entry = ttk.Entry(entry_row, width=6)
        self.bpm_entry.insert(0, self._bpm_text())
        self.bpm_entry.bind('<Return>', self.on_tempo_entry)
        self.bpm_entry.pack(side='left', padx=4)
        for preset in BPM_PRESETS:
            btn = ttk.Button(entry_row, text=str(preset), width=4, command=lambda p=preset: self.set_tempo(p))
            btn.pack(side='left', padx=2)
            self.preset_buttons[preset] = btn
        entry_row.pack(pady=4)

        # Beat indicator
        self.indicator = tk.Canvas(self.main_frame, height=CELL_SIZE + 2 * CELL_PAD, bg=BG, highlightthickness=0)
        self.indicator.pack(fill='x', pady=10)
        self.indicator.bind('<Configure>', lambda e: self.draw_indicator())

        # Time signature
        meter_frame = create_section(self.main_frame, "Time signature")
        meter_frame.pack(fill='x', pady=6)
        meter_row = ttk.Frame(meter_frame)
        for beats in METER_CHOICES:
            btn = ttk.Button(meter_row, text=f"{beats}/4", width=4, command=lambda b=beats: self.set_meter(b))
            btn.pack(side='left', padx=2)
            self.meter_buttons[beats] = btn
        meter_row.pack()

        # Sound
        sound_frame = create_section(self.main_frame, "Sound")
        sound_frame.pack(fill='x', pady=6)
        vol_row = ttk.Frame(sound_frame)
        ttk.Label(vol_row, text="Volume").pack(side='left', padx=(0, 6))
        ttk.Scale(vol_row, from_=0.0, to=1.0, variable=self.volume_var, orient='horizontal', length=240,
                  command=self.on_volume_slider).pack(side='left')
        vol_row.pack(anchor='w', pady=4)
        ttk.Checkbutton(sound_frame, text="Voice counting", variable=self.voice_var,
                        command=lambda: self.control.set_voice_enabled(self.voice_var.get())).pack(anchor='w', pady=4)

        self.start_btn = ttk.Button(self.main_frame, text="Start", command=self.toggle_running)
        self.start_btn.pack(fill='x', pady=12)

        self.refresh_controls()

    # --- control handlers ---
    def set_tempo(self, bpm):
        self.control.set_tempo(bpm)
        self.refresh_controls()

    def nudge_tempo(self, delta):
        self.control.nudge_tempo(delta)
        self.refresh_controls()

    def on_tempo_slider(self, value):
        bpm = round(float(value))
        if bpm != self.control.params.tempo:
            self.set_tempo(bpm)

    def on_tempo_entry(self, event=None):
        bpm = parse_bpm(self.bpm_entry.get())
        if bpm is None:
            logger.info("Ignoring tempo entry %r", self.bpm_entry.get())
        else:
            self.control.set_tempo(bpm)
        self.refresh_controls()

    def on_volume_slider(self, value):
        # snap to the slider step
        volume = round(float(value) / VOLUME_STEP) * VOLUME_STEP
        self.control.set_volume(volume)

    def set_meter(self, beats):
        self.control.set_meter(beats)
        self.refresh_controls()

    def toggle_running(self):
        self.control.toggle_running()
        self.refresh_controls()

    # --- rendering ---
    def refresh_controls(self):
        tempo = self.control.params.tempo
        self.bpm_var.set(self._bpm_text())
        self.tempo_var.set(tempo)
        self.bpm_entry.delete(0, 'end')
        self.bpm_entry.insert(0, self._bpm_text())
        for preset, btn in self.preset_buttons.items():
            btn.configure(style="Selected.TButton" if preset == tempo else "TButton")
        for beats, btn in self.meter_buttons.items():
            btn.configure(style="Selected.TButton" if beats == self.control.params.meter else "TButton")
        if self.control.running:
            self.start_btn.configure(text="Stop", style="Stop.TButton")
        else:
            self.start_btn.configure(text="Start", style="TButton")
        self.draw_indicator()

    def draw_indicator(self):
        self.indicator.delete('all')
        meter = self.control.params.meter
        width = self.indicator.winfo_width() or 1
        total = meter * CELL_SIZE + (meter - 1) * CELL_PAD
        x = max(0, (width - total) // 2)
        self.cells = []
        for i in range(meter):
            active = self.control.running and self.control.current_beat == i
            cell = self.indicator.create_oval(x, CELL_PAD, x + CELL_SIZE, CELL_PAD + CELL_SIZE,
                                              fill=beat_color(i, active), outline='')
            self.cells.append(cell)
            x += CELL_SIZE + CELL_PAD

    def on_beat(self, beat):
        for i, cell in enumerate(self.cells):
            active = beat is not None and beat.index == i
            self.indicator.itemconfig(cell, fill=beat_color(i, active))

    def on_close(self):
        self.control.shutdown()
        self.destroy()


def parse_args(argv=None):
    parser = argparse.ArgumentParser(description="Visual/audio metronome with optional voice counting")
    parser.add_argument('--bpm', type=float, default=DEFAULT_BPM, help=f"initial tempo ({MIN_BPM}-{MAX_BPM})")
    parser.add_argument('--meter', type=int, default=DEFAULT_METER, help="beats per measure (2-6)")
    parser.add_argument('--volume', type=float, default=DEFAULT_VOLUME, help="initial volume (0-1)")
    parser.add_argument('--voice', action='store_true', help="count beats aloud")
    parser.add_argument('--voice-lang', default=DEFAULT_LANG, help="language hint for the counting voice")
    parser.add_argument('--start', action='store_true', help="start ticking immediately")
    parser.add_argument('--log-level', default='WARNING', choices=['DEBUG', 'INFO', 'WARNING', 'ERROR'])
    return parser.parse_args(argv)


def main(argv=None):
    args = parse_args(argv)
    logging.basicConfig(level=getattr(logging, args.log_level), format="[%(levelname)s] %(message)s")
    app = MetronomeApp(bpm=args.bpm, meter=args.meter, volume=args.volume, voice=args.voice, voice_lang=args.voice_lang)
    if args.start:
        app.after(0, app.toggle_running)
    app.mainloop()


if __name__ == "__main__":
    main()
