"""
Main GUI application for ECG monitoring.
Wires the acquisition session, the waveform renderer and the window together.
"""
import logging
import tkinter as tk
from typing import Optional

from config import FRAME_INTERVAL_MS, PORT_REFRESH_INTERVAL_MS
from data_models import AcquisitionMode
from gui_components import DialogHelper, MainWindow
from renderer import WaveformRenderer
from scheduling import TkScheduler
from serial_handler import SerialTransport, choose_port, get_available_ports
from session import AcquisitionSession, Notice

logger = logging.getLogger(__name__)

IDLE_READY = "Click Start Monitoring to begin"
IDLE_DISCONNECTED = "Connect to device or enable demo mode"


class EcgMonitorApp:
    """Main GUI application for ECG monitoring."""

    def __init__(self, port: Optional[str] = None):
        # Initialize main window
        self.root = tk.Tk()
        self.window = MainWindow(self.root)
        self.port_var = tk.StringVar(value=port or "")
        self.scheduler = TkScheduler(self.root)

        self.window.build_ui({
            'port_var': self.port_var,
            'connect': self._connect,
            'disconnect': self._disconnect,
            'toggle_demo': self._toggle_demo,
            'toggle_monitoring': self._toggle_monitoring,
            'clear_data': self._clear_data,
        })

        # Communication and data
        self.transport = SerialTransport(lambda: self.port_var.get())
        self.session = AcquisitionSession(self.transport, self.scheduler,
                                          on_notice=self._on_notice)
        self.session.add_listener(self._on_mode_changed)

        self.renderer = WaveformRenderer(
            self.window.fig,
            self.scheduler,
            snapshot_provider=self.session.buffer.snapshot,
            alarm_provider=lambda: self.session.alarm_active,
            size_provider=self.window.plot_size,
            draw=self.window.canvas.draw_idle,
        )

        self._on_mode_changed(self.session.mode)
        self._setup_periodic_tasks()

    # Button handlers
    def _connect(self):
        self.session.connect()

    def _disconnect(self):
        self.session.disconnect()

    def _toggle_demo(self):
        if self.session.mode.is_synthetic:
            self.session.disable_synthetic()
        else:
            self.session.enable_synthetic()

    def _toggle_monitoring(self):
        self.session.toggle_monitoring()

    def _clear_data(self):
        self.session.clear()

    # Session callbacks
    def _on_notice(self, notice: Notice):
        self.window.update_status(notice.message)
        if notice.level == "error":
            DialogHelper.show_error("ECG Monitor", notice.message)
        elif notice.level == "warning":
            DialogHelper.show_warning("ECG Monitor", notice.message)

    def _on_mode_changed(self, mode: AcquisitionMode):
        self.window.update_mode(mode)
        if mode.monitoring:
            self.renderer.start()
        else:
            self.renderer.show_idle(IDLE_DISCONNECTED if mode.is_disconnected else IDLE_READY)
            self.window.update_readout(None)

    # Periodic tasks
    def _setup_periodic_tasks(self):
        """Setup periodic GUI updates."""
        self._refresh_ports()
        self._update_indicators()

    def _refresh_ports(self):
        """Refresh the list of available serial ports."""
        ports = get_available_ports()
        self.window.update_port_list(ports)
        self.window.set_no_ports(not ports)
        self.port_var.set(choose_port(self.port_var.get(), ports))
        self.root.after(PORT_REFRESH_INTERVAL_MS, self._refresh_ports)

    def _update_indicators(self):
        self.window.set_alarm(self.session.alarm_active)
        if self.session.monitoring:
            self.window.update_readout(self.session.current_value)
        self.root.after(FRAME_INTERVAL_MS, self._update_indicators)

    def on_close(self):
        self.session.shutdown()
        self.renderer.release()
        self.root.destroy()

    def run(self, demo: bool = False):
        """Start the GUI application."""
        self.root.protocol("WM_DELETE_WINDOW", self.on_close)
        if demo:
            self.session.enable_synthetic()
        self.root.mainloop()
