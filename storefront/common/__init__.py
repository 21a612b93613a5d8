# Common utilities
from .config_loader import (
    ApiSettings,
    MediaHostConfig,
    load_api_settings,
    load_config,
    load_media_host_config,
)
from .errors import (
    AuthenticationError,
    MediaPermissionError,
    NetworkError,
    RequestTimeoutError,
    ServerError,
    StorefrontError,
    UploadError,
    ValidationError,
    describe_error,
)
from .log_config import setup_logging
