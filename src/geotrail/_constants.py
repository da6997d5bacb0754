"""Internal constants shared across the library."""

#: Maximum number of position records kept in the remote store.
CAPACITY = 1000
#: Samples closer than this to the latest record only refresh its timestamp.
MERGE_THRESHOLD_METERS = 10.0
#: Mean Earth radius used by the haversine distance.
EARTH_RADIUS_KM = 6371.0

LOCATIONS_PATH = "locations"
LOGS_PATH = "logs"
ORDER_FIELD = "timestamp"

DEFAULT_SAMPLING_INTERVAL = 30.0
DEFAULT_REQUEST_TIMEOUT = 15.0
DEFAULT_LOG_FILE = "geotrail_logs.txt"

# ------------------------------------------------------------------
# Local log capture
# ------------------------------------------------------------------

NO_LOG_FILE = "Log file does not exist."
LOG_READ_ERROR_PREFIX = "Error reading log file: "
#: ``[yyyy-MM-dd HH:mm:ss.SSS] `` prefix; milliseconds are appended separately.
LOG_TIMESTAMP_FORMAT = "%Y-%m-%d %H:%M:%S"

# ------------------------------------------------------------------
# Push ids (chronologically sortable remote keys)
# ------------------------------------------------------------------

PUSH_CHARS = "-0123456789ABCDEFGHIJKLMNOPQRSTUVWXYZ_abcdefghijklmnopqrstuvwxyz"
PUSH_TIME_CHARS = 8
PUSH_RANDOM_CHARS = 12
