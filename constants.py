"""
Application constants and configuration values.
"""

# Layer names (as they appear on the board)
COMPONENT_PERIMETER = "comp-perim"
COMPONENT_STIPPLE = "comp-stipple"
SOLDER_PERIMETER = "solder-perim"
SOLDER_STIPPLE = "solder-stipple"

# Copper layers whose lines are kept out of the matching stipple layer
COMPONENT_COPPER = "component"
SOLDER_COPPER = "solder"

# Perimeter (template) layer -> stipple (target) layer
STIPPLE_LAYER_FOR = {
    COMPONENT_PERIMETER: COMPONENT_STIPPLE,
    SOLDER_PERIMETER: SOLDER_STIPPLE,
}

# Stipple layer -> copper layer supplying line keepouts
SOURCE_LAYER_FOR = {
    COMPONENT_STIPPLE: COMPONENT_COPPER,
    SOLDER_STIPPLE: SOLDER_COPPER,
}

# Unit translation: user values are entered in 1/100 mil
CENTIMIL_TO_NANOMETER = 254

# Default parameters (1/100 mil)
DEFAULT_COMPONENT_TRACE = 700
DEFAULT_COMPONENT_PITCH = 4500
DEFAULT_SOLDER_TRACE = 700
DEFAULT_SOLDER_PITCH = 7000
DEFAULT_ACTION = 1

# Preferences file (relative to the home directory)
PREFERENCES_PATH = ".pcb/stipple_prefs"

# Keepout smoothness
CIRCLE_SEGMENTS = 24  # Sides of a via/pin/end-cap polygon
CORNER_SEGMENTS = 8  # Segments per 90 degree pad corner

# Progress reporting
PROGRESS_START = 0.05
PROGRESS_DONE = 2.0  # Terminal sentinel, outside the [0, 1] working range
PROGRESS_ABORTED = -1.0
