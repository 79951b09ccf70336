# Configuration constants for the ECG Monitor application

# Acquisition contract (fixed, not runtime configurable)
BAUD_RATE = 9600            # Serial link baud rate
BUFFER_CAPACITY = 500       # Samples kept in the history buffer
SYNTH_TICK_MS = 10          # Synthesizer cadence (100 Hz)
ALARM_DURATION_MS = 3000    # Lead-off alarm auto-clear delay
DISPLAY_WINDOW_MS = 5000    # Time span shown across the plot width
HEART_RATE_BPM = 75         # Synthetic heart rate
FAULT_PROBABILITY = 0.001   # Per-tick chance of a synthetic lead-off
FAULT_TOKEN = "!"           # Wire token for a lead-off marker

# Waveform synthesis
BASELINE = 512              # Isoelectric line of the synthetic trace
NOISE_AMPLITUDE = 5.0       # Peak-to-peak uniform noise
MIN_VALUE = 0
MAX_VALUE = 1023
FULL_SCALE = 1024           # Vertical scale divisor for rendering

# Serial communication settings
SERIAL_TIMEOUT = 0.2        # Serial read timeout in seconds
READ_CHUNK_SIZE = 256       # Max bytes requested per read
SERIAL_POLL_MS = 10         # How often queued serial chunks are drained

# Rendering
FRAME_INTERVAL_MS = 16      # Render loop period (~60 Hz)
GRID_SPACING_PX = 20        # Reference grid spacing in logical pixels
GRID_LINE_WIDTH = 0.5
TRACE_LINE_WIDTH = 2.5
BACKGROUND_COLOR = "#0b1410"
GRID_COLOR = "#1f3d2c"
TRACE_COLOR = "#22c55e"
ALARM_COLOR = "#e11d1d"
BASE_DPI = 96               # Logical pixels per inch

# GUI dimensions and formatting
WINDOW_GEOMETRY = "1100x650"
PLOT_FIGURE_SIZE = (8, 4)   # Initial plot figure size (width, height)
VALUE_FONT_SIZE = 14        # Font size for the signal readout

# Port refresh interval
PORT_REFRESH_INTERVAL_MS = 2000  # How often to refresh COM port list

# Logging
LOG_FORMAT = "%(asctime)s %(levelname)-7s %(name)s: %(message)s"
DEFAULT_LOG_LEVEL = "INFO"
