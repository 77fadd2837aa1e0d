APP_NAME = "OrderDesk"
APP_VERSION = "0.4.0"
APP_TITLE = f"{APP_NAME} v{APP_VERSION}"

# Keep QSettings identifiers consistent to avoid breaking existing settings.
SETTINGS_ORG = "OrderDesk"
SETTINGS_APP = "OrderDeskClient"

# Default backend and paths
DEFAULT_API_BASE_URL = "http://localhost:8080/api/v1"
DEFAULT_API_TIMEOUT_SEC = 15
LOG_DIR = "logs"
