import os

# Load environment variables early
from dotenv import load_dotenv

load_dotenv()

# ==============================================================================
# ENDPOINTS
# ==============================================================================
API_BASE_URL = os.environ.get("STORYPAD_API_URL", "http://localhost:5000")
SOCKET_URL = os.environ.get("STORYPAD_SOCKET_URL", API_BASE_URL)

# Tried in order when opening the relay connection
SOCKET_TRANSPORTS = ["websocket", "polling"]

# ==============================================================================
# SESSION TIMERS (seconds)
# ==============================================================================
# Refresh the access token this long before it expires
TOKEN_REFRESH_MARGIN = 5 * 60

# Poll the absolute session deadline this often
SESSION_CHECK_INTERVAL = 5 * 60

# Warn when less than this remains before the absolute session deadline
SESSION_WARNING_THRESHOLD = 10 * 60

LOGIN_PATH = "/login"

# ==============================================================================
# EDITOR
# ==============================================================================
# How long a remote text-change suppresses re-broadcasting local edits
REMOTE_CHANGE_RESET_DELAY = 0.1
