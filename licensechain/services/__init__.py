"""Resource services for the LicenseChain API.

Every service validates its input locally and delegates to the shared
:class:`~licensechain.api.RequestPipeline`.
"""

from .analytics import AnalyticsService
from .apps import ApplicationService
from .auth import AuthService
from .base import BaseService
from .licenses import LicenseService
from .products import ProductService
from .users import UserService
from .webhooks import WebhookService

__all__ = [
    "AnalyticsService",
    "ApplicationService",
    "AuthService",
    "BaseService",
    "LicenseService",
    "ProductService",
    "UserService",
    "WebhookService",
]
