"""Device Identity Resolver - module init."""

from session_sentinel.devices.fingerprint import (
    build_device_name,
    classify_device_type,
    compute_fingerprint_hash,
)
from session_sentinel.devices.resolver import (
    DeviceIdentityResolver,
    DeviceResolution,
    bump_trust,
    explicit_trust,
)

__all__ = [
    "DeviceIdentityResolver",
    "DeviceResolution",
    "build_device_name",
    "bump_trust",
    "classify_device_type",
    "compute_fingerprint_hash",
    "explicit_trust",
]
