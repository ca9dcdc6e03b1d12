"""Client for the Vanish temporary-email API."""

from .cancel import CancelToken
from .client import VanishClient
from .config import Settings
from .errors import (
    APIError,
    CancelledError,
    DecodeError,
    MarshalError,
    TransportError,
    VanishError,
)
from .models import (
    AttachmentMeta,
    EmailDetail,
    EmailSummary,
    GenerateEmailOptions,
    ListEmailsOptions,
    PaginatedEmailList,
)
from .poller import Poller

__all__ = [
    "APIError",
    "AttachmentMeta",
    "CancelToken",
    "CancelledError",
    "DecodeError",
    "EmailDetail",
    "EmailSummary",
    "GenerateEmailOptions",
    "ListEmailsOptions",
    "MarshalError",
    "PaginatedEmailList",
    "Poller",
    "Settings",
    "TransportError",
    "VanishClient",
    "VanishError",
]
