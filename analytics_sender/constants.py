# Batching
DEFAULT_BATCH_SIZE = 100
MAX_BATCH_SIZE = 100
MAX_BATCH_BYTES = 512_000
MAX_MESSAGE_BYTES = 32_768

# Retry / backoff
DEFAULT_BACKOFF_INITIAL = 0.1
DEFAULT_BACKOFF_MULTIPLIER = 1.5
DEFAULT_BACKOFF_MAX = 10.0
DEFAULT_BACKOFF_JITTER = 0.05
DEFAULT_MAX_ATTEMPTS = 10

# Transport
DEFAULT_DATA_PLANE_URL = "http://localhost:8080"
BATCH_PATH = "/v1/batch"
DEFAULT_REQUEST_TIMEOUT = 10.0

# Status sentinels passed to on_error
STATUS_UNKNOWN_ERROR = -1
STATUS_RETRY_EXHAUSTED = -2

# Environment variables
ENV_BATCH_SIZE = "ANALYTICS_SENDER_BATCH_SIZE"
ENV_BACKOFF_INITIAL = "ANALYTICS_SENDER_BACKOFF_INITIAL"
ENV_MAX_RETRIES = "ANALYTICS_SENDER_MAX_RETRIES"
ENV_REQUEST_TIMEOUT = "ANALYTICS_SENDER_REQUEST_TIMEOUT"
ENV_DATA_PLANE_URL = "ANALYTICS_SENDER_DATA_PLANE_URL"
ENV_WRITE_KEY = "ANALYTICS_SENDER_WRITE_KEY"

EXIT_CODE_OK = 0
EXIT_CODE_FAILURE = 1
