"""HTTP layer for the LicenseChain API.

The request pipeline is shared by every resource service:
    >>> from licensechain.api import RequestPipeline
    >>> from licensechain.config import Configuration
    >>> pipeline = RequestPipeline(Configuration(api_key="lc_live_..."))
    >>> pipeline.get("/health")
"""

from .models import Page
from .pipeline import RequestPipeline, classify_response

__all__ = [
    "Page",
    "RequestPipeline",
    "classify_response",
]
