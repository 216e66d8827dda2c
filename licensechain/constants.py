"""Constants shared across the licensechain SDK."""

SDK_VERSION = "1.0.0"

# API
API_VERSION = "1.0"
API_PATH_PREFIX = "/v1"
PLATFORM = "python-sdk"
USER_AGENT = f"LicenseChain-Python-SDK/{SDK_VERSION}"

# Webhooks
DEFAULT_SIGNATURE_ALGORITHM = "sha256"
SIGNATURE_HEADER = "X-LicenseChain-Signature"
TIMESTAMP_HEADER = "X-LicenseChain-Timestamp"
