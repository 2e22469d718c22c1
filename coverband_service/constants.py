# Coverage report types, as labelled by the instrumentation engine
RUNTIME_TYPE = "runtime"
EAGER_TYPE = "eager_loading"
MERGED_TYPE = "merged"
COVERAGE_TYPES = (RUNTIME_TYPE, EAGER_TYPE, MERGED_TYPE)

# Collection types understood by the collector endpoint
COVERAGE_DELTA = "coverage_delta"
VIEW_TRACKER_DELTA = "view_tracker_delta"

# Keys of an expanded per-file coverage entry
FIRST_UPDATED_KEY = "first_updated_at"
LAST_UPDATED_KEY = "last_updated_at"
FILE_HASH_KEY = "file_hash"
DATA_KEY = "data"

TOKEN_HEADER = "Coverband-Token"
JSON_CONTENT_TYPE = "application/json"

COLLECTOR_ENDPOINT = "api/collector"
COVERAGE_ENDPOINT = "api/coverage"

DEFAULT_URL = "https://coverband.io"
DEFAULT_ENV_FILTER = "production"
DEFAULT_TIMEOUT = 2.0
DEFAULT_DEVELOPMENT_TIMEOUT = 5.0

SAVE_TIME_METRIC = "coverband.save.time"
