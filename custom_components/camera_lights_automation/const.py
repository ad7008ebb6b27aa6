"""Constants for the Camera lights automation integration."""

DOMAIN = "camera_lights_automation"

# Configuration keys (entry data)
CONF_CAMERA_ENTITY = "camera_entity"  # binary_sensor/camera entities reporting camera use
CONF_LIGHTS = "lights"
CONF_DEVICE_TIMEOUT = "device_timeout"  # Seconds allowed per light service call

# Automation settings (entry options, editable at runtime)
CONF_LIGHTS_ON_WITH_CAMERA = "lights_on_with_camera"
CONF_BOOST_BRIGHTNESS = "boost_brightness_on_camera"
CONF_BOOST_PERCENT = "camera_brightness_boost_percent"

SETTINGS_KEYS = (
    CONF_LIGHTS_ON_WITH_CAMERA,
    CONF_BOOST_BRIGHTNESS,
    CONF_BOOST_PERCENT,
)

# Default values
DEFAULT_LIGHTS_ON_WITH_CAMERA = False
DEFAULT_BOOST_BRIGHTNESS = False
DEFAULT_BOOST_PERCENT = 20
DEFAULT_DEVICE_TIMEOUT = 10

MAX_BRIGHTNESS = 100

# Camera entity states that count as "camera in use"
CAMERA_ACTIVE_STATES = frozenset({"on", "streaming", "recording"})

SERVICE_RESTORE_LIGHTS = "restore_lights"

# Maximum number of diagnostic events kept by the coordinator
MAX_EVENTS = 100
