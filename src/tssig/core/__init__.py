"""tssig core module.

Shared components used by the signing and verification services:
- Configuration management
- Error taxonomy
- RFC 3339 nanosecond timestamps
- Unpadded base64url encoding
"""

from tssig.core.config import (
    ConfigValidationError,
    KeyLookupSettings,
    Settings,
    TrustSettings,
)
from tssig.core.settings import (
    clear_settings_cache,
    get_settings,
)

__all__ = [
    "ConfigValidationError",
    "KeyLookupSettings",
    "Settings",
    "TrustSettings",
    "clear_settings_cache",
    "get_settings",
]
