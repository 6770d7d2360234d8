"""
Application Constants.
Stores default values for UI configuration and magic numbers.
"""

# Window Configuration
WINDOW_TITLE = "TrashMap - v0.3.0"
DEFAULT_WINDOW_WIDTH = 1280
DEFAULT_WINDOW_HEIGHT = 800
WINDOW_SETTINGS_KEY = "TrashMap"
WINDOW_SETTINGS_APP = "TrashMapDesktop"

# Fallback location (Tiananmen Square, Beijing)
FALLBACK_LAT = 39.9042
FALLBACK_LNG = 116.4074

# Zoom Levels
INITIAL_ZOOM = 13
USER_LOCATION_ZOOM = 15
FOCUS_ZOOM = 16

# Timing
TRANSIENT_MARKER_MS = 3000
GEOLOCATION_TIMEOUT_MS = 10000

# Nearby Search Defaults
DEFAULT_SEARCH_RADIUS_KM = 5.0
DEFAULT_SEARCH_LIMIT = 10

# Logging
DEFAULT_LOG_DIR = "logs"
LOG_FILENAME = "trashmap.log"
DEFAULT_LOG_MAX_MB = 5
DEFAULT_LOG_BACKUPS = 5

# Backend
DEFAULT_API_URL = "http://localhost:8080/api"
DEFAULT_API_TIMEOUT_S = 10.0
API_SUCCESS_CODE = 2000
NEARBY_ENDPOINT = "trashcans/nearby"
TRASHCANS_ENDPOINT = "trashcans"

# Uploads
MAX_IMAGE_BYTES = 10 * 1024 * 1024  # 10 MB

# Leaflet
LEAFLET_VERSION = "1.9.4"
TILE_URL = "https://{s}.tile.openstreetmap.org/{z}/{x}/{y}.png"
TILE_ATTRIBUTION = "&copy; OpenStreetMap contributors"

# Status Messages
STATUS_SEARCH_FAILED = "Search failed: "
STATUS_UPLOAD_FAILED = "Upload failed: "
STATUS_LOCATION_FALLBACK = "Location unavailable, showing default area."

# File Dialog Filters
SUPPORTED_IMAGE_FORMATS = ["png", "jpg", "jpeg", "bmp", "webp", "gif"]
IMAGE_FILE_FILTER = (
    f"Images ({' '.join(['*.' + ext for ext in SUPPORTED_IMAGE_FORMATS])})"
)
