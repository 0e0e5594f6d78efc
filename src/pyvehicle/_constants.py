"""Internal constants shared across the library."""

BASE_URL = "http://localhost:8000"
USER_AGENT = "pyvehicle/1"
TOKEN_NAMESPACE = "auth_prefs"
DEFAULT_RECENT_LIMIT = 10

ACCESS_TOKEN_KEY = "access_token"
REFRESH_TOKEN_KEY = "refresh_token"

# ------------------------------------------------------------------
# Endpoints
# ------------------------------------------------------------------

LOGIN_ENDPOINT = "/token"
REFRESH_ENDPOINT = "/refresh-token"
SEARCH_ENDPOINT = "/vehicles/search/"
RECENT_ENDPOINT = "/vehicle"
VEHICLE_BY_ID_ENDPOINT = "/vehicle/{vehicle_id}"
VEHICLE_BY_VIN_ENDPOINT = "/vin/{vin}"

# Login rejections that mean "bad credentials" rather than a transport fault.
AUTH_REJECTED_STATUSES: frozenset[int] = frozenset({401, 403})

# The VIN lookup endpoint reports unknown VINs with either status.
VIN_NOT_FOUND_STATUSES: frozenset[int] = frozenset({404, 500})

# ------------------------------------------------------------------
# User-facing messages
# ------------------------------------------------------------------

EMPTY_QUERY_MESSAGE = "Enter a VIN to search"
NO_DATA_MESSAGE = "No vehicles found"
MISSING_CREDENTIALS_MESSAGE = "Username and password are not configured"
SEARCH_FAILED_MESSAGE = "Search failed"
LOAD_FAILED_MESSAGE = "Failed to load vehicles"
DETAIL_FAILED_MESSAGE = "Failed to load vehicle details"
AUTH_FAILED_MESSAGE = "Authentication failed"
