# Environment variables
ENV_BASE_URL = "APIFORM_URL"
ENV_API_KEY = "APIFORM_API_KEY"
ENV_ENABLE_TELEMETRY = "APIFORM_ENABLE_TELEMETRY"
ENV_CA_BUNDLE = "APIFORM_CA_BUNDLE"

# Headers
HEADER_USER_AGENT = "User-Agent"
HEADER_CONTENT_TYPE = "Content-Type"
HEADER_CLIENT_TELEMETRY = "X-Client-Telemetry"
HEADER_REQUEST_ID = "Request-Id"

# Encoding
CHARSET = "UTF-8"
CONTENT_TYPE_FORM_URLENCODED = "application/x-www-form-urlencoded"
CONTENT_TYPE_MULTIPART_FORM_DATA = "multipart/form-data"
CONTENT_TYPE_OCTET_STREAM = "application/octet-stream"
DEFAULT_BLOB_NAME = "blob"

# Telemetry
MAX_REQUEST_METRICS_QUEUE_SIZE = 100

USER_AGENT_PREFIX = "ApiForm.Python.Client"
