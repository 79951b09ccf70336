"""
GUI components and widgets for the ECG Monitor application.
Handles the window layout and the controls around the waveform.
"""

import tkinter as tk
from tkinter import ttk, messagebox
import matplotlib
matplotlib.use('TkAgg')
from matplotlib.backends.backend_tkagg import FigureCanvasTkAgg
from matplotlib.figure import Figure
from typing import List, Optional
from config import *
from data_models import AcquisitionMode


class MainWindow:
    """Main application window with all GUI components."""

    def __init__(self, root: tk.Tk):
        self.root = root
        root.title("ECG Monitor")
        root.geometry(WINDOW_GEOMETRY)

        # Initialize GUI components
        self.toolbar = None
        self.port_combo: Optional[ttk.Combobox] = None
        self.alert_label: Optional[tk.Label] = None
        self.support_label: Optional[tk.Label] = None
        self._alarm_shown = False
        self._no_ports_shown = False
        self.value_label: Optional[ttk.Label] = None
        self.rate_label: Optional[ttk.Label] = None
        self.status_label: Optional[ttk.Label] = None
        self.plot_frame: Optional[ttk.Frame] = None
        self.fig: Optional[Figure] = None
        self.canvas = None

        # Button references
        self.btn_connect: Optional[ttk.Button] = None
        self.btn_disconnect: Optional[ttk.Button] = None
        self.btn_demo: Optional[ttk.Button] = None
        self.btn_monitor: Optional[ttk.Button] = None
        self.btn_clear: Optional[ttk.Button] = None

    def build_ui(self, callbacks: dict):
        """
        Build the complete user interface.

        Args:
            callbacks: Dictionary of callback functions and variables for UI events
        """
        self._build_toolbar(callbacks)
        self._build_alerts()
        self._build_readout()
        self._build_plot()
        self._build_status_bar()

    def _build_toolbar(self, callbacks: dict):
        """Build the top toolbar with controls."""
        self.toolbar = ttk.Frame(self.root, padding=4)
        self.toolbar.pack(side=tk.TOP, fill=tk.X)

        # Port selection
        ttk.Label(self.toolbar, text="Port:").pack(side=tk.LEFT)
        self.port_combo = ttk.Combobox(self.toolbar, width=15,
                                       textvariable=callbacks['port_var'])
        self.port_combo.pack(side=tk.LEFT, padx=4)

        # Control buttons
        self.btn_connect = ttk.Button(self.toolbar, text="Connect to Device",
                                      command=callbacks['connect'])
        self.btn_connect.pack(side=tk.LEFT, padx=4)

        self.btn_demo = ttk.Button(self.toolbar, text="Enable Demo Mode",
                                   command=callbacks['toggle_demo'])
        self.btn_demo.pack(side=tk.LEFT, padx=4)

        self.btn_monitor = ttk.Button(self.toolbar, text="Start Monitoring",
                                      command=callbacks['toggle_monitoring'],
                                      state=tk.DISABLED)
        self.btn_monitor.pack(side=tk.LEFT, padx=4)

        self.btn_clear = ttk.Button(self.toolbar, text="Clear Data",
                                    command=callbacks['clear_data'], state=tk.DISABLED)
        self.btn_clear.pack(side=tk.LEFT, padx=4)

        self.btn_disconnect = ttk.Button(self.toolbar, text="Disconnect",
                                         command=callbacks['disconnect'], state=tk.DISABLED)
        self.btn_disconnect.pack(side=tk.LEFT, padx=4)

    def _build_alerts(self):
        """Build the alert banners (hidden until needed)."""
        self.alert_label = tk.Label(self.root, text="Leads Off! Check electrode connections.",
                                    bg="#fde2e2", fg=ALARM_COLOR,
                                    font=("Segoe UI", 11, "bold"), pady=4)
        self.support_label = tk.Label(self.root,
                                      text="No serial ports detected. Type a port name "
                                           "or use demo mode.",
                                      bg="#fff4d6", pady=4)

    def _build_readout(self):
        """Build the signal readout above the plot."""
        readout = ttk.LabelFrame(self.root, text="ECG Waveform", padding=6)
        readout.pack(side=tk.TOP, fill=tk.X, padx=4, pady=(2, 4))

        self.value_label = ttk.Label(readout, text="",
                                     font=("Consolas", VALUE_FONT_SIZE, "bold"))
        self.value_label.pack(side=tk.LEFT, padx=4)

        self.rate_label = ttk.Label(readout, text="",
                                    font=("Consolas", VALUE_FONT_SIZE, "bold"))
        self.rate_label.pack(side=tk.LEFT, padx=12)

    def _build_plot(self):
        """Build the matplotlib plot component."""
        self.plot_frame = ttk.Frame(self.root)
        self.plot_frame.pack(fill=tk.BOTH, expand=True, padx=4, pady=4)

        self.fig = Figure(figsize=PLOT_FIGURE_SIZE, dpi=BASE_DPI)

        # Embed plot in tkinter
        self.canvas = FigureCanvasTkAgg(self.fig, master=self.plot_frame)
        self.canvas.get_tk_widget().pack(fill=tk.BOTH, expand=True)

    def _build_status_bar(self):
        """Build the bottom status bar."""
        status = ttk.Frame(self.root, padding=4)
        status.pack(side=tk.BOTTOM, fill=tk.X, before=self.plot_frame)

        self.status_label = ttk.Label(status, text="Idle")
        self.status_label.pack(side=tk.LEFT)

    # UI Update Methods
    def plot_size(self) -> tuple:
        """Return (logical width, logical height, pixel ratio) of the plot area."""
        widget = self.canvas.get_tk_widget()
        pixel_ratio = max(1.0, self.root.winfo_fpixels('1i') / BASE_DPI)
        width = max(1, widget.winfo_width()) / pixel_ratio
        height = max(1, widget.winfo_height()) / pixel_ratio
        return width, height, pixel_ratio

    def update_port_list(self, ports: List[str]):
        """Update the COM port dropdown list."""
        if self.port_combo:
            self.port_combo['values'] = ports

    def update_mode(self, mode: AcquisitionMode):
        """Update buttons and status for the acquisition mode."""
        active = not mode.is_disconnected
        self.btn_connect.config(state=tk.DISABLED if active else tk.NORMAL)
        self.btn_disconnect.config(state=tk.NORMAL if mode.is_connected else tk.DISABLED)
        self.btn_demo.config(text="Exit Demo Mode" if mode.is_synthetic else "Enable Demo Mode",
                             state=tk.DISABLED if mode.is_connected else tk.NORMAL)
        self.btn_monitor.config(text="Stop Monitoring" if mode.monitoring else "Start Monitoring",
                                state=tk.NORMAL if active else tk.DISABLED)
        self.btn_clear.config(state=tk.NORMAL if active else tk.DISABLED)

        if mode.is_connected:
            self.update_status("Connected")
        elif mode.is_synthetic:
            self.update_status("Demo Mode")
        else:
            self.update_status("Disconnected")

    def update_readout(self, value: Optional[int]):
        """Show the latest value, or blank the readout when not monitoring."""
        if value is None:
            self.value_label.config(text="")
            self.rate_label.config(text="")
        else:
            self.value_label.config(text=f"Signal: {value}")
            self.rate_label.config(text=f"HR: {HEART_RATE_BPM} BPM")

    def set_alarm(self, active: bool):
        """Show or hide the lead-off banner."""
        if active == self._alarm_shown:
            return
        if active:
            self.alert_label.pack(side=tk.TOP, fill=tk.X, padx=4, after=self.toolbar)
        else:
            self.alert_label.pack_forget()
        self._alarm_shown = active

    def set_no_ports(self, visible: bool):
        """Show or hide the hint shown while no ports are enumerated."""
        if visible == self._no_ports_shown:
            return
        if visible:
            self.support_label.pack(side=tk.TOP, fill=tk.X, padx=4, after=self.toolbar)
        else:
            self.support_label.pack_forget()
        self._no_ports_shown = visible

    def update_status(self, status_text: str):
        """Update the status bar text."""
        if self.status_label:
            self.status_label.config(text=status_text)


class DialogHelper:
    """Helper class for showing dialogs."""

    @staticmethod
    def show_warning(title: str, message: str):
        """Show a warning dialog."""
        messagebox.showwarning(title, message)

    @staticmethod
    def show_error(title: str, message: str):
        """Show an error dialog."""
        messagebox.showerror(title, message)
