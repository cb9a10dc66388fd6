"""Device fingerprinting - stable identity from client-reported attributes.

The hash is a SHA-256 hex digest over the attributes in a fixed order,
joined by a constant delimiter. Absent attributes hash as empty strings,
so the same tuple always yields the same digest.
"""

import hashlib
from typing import Optional

from session_sentinel.common.constants import DeviceConstants
from session_sentinel.core.types import DeviceType
from session_sentinel.data.schemas import DeviceFingerprint


# Checked in order; first matching group wins.
_DEVICE_TYPE_MARKERS = (
    (DeviceType.MOBILE, ("mobile", "android", "iphone")),
    (DeviceType.TABLET, ("tablet", "ipad")),
    (DeviceType.DESKTOP, ("electron",)),
)


def compute_fingerprint_hash(fingerprint: DeviceFingerprint) -> str:
    """Return the 64-character hex fingerprint hash."""
    payload = DeviceConstants.FINGERPRINT_DELIMITER.join(fingerprint.components())
    return hashlib.sha256(payload.encode("utf-8")).hexdigest()


def classify_device_type(user_agent: Optional[str]) -> DeviceType:
    """Classify a device from its user agent (case-insensitive).

    Examples:
        "Mozilla/5.0 (Linux; Android 12)" -> MOBILE
        "Mozilla/5.0 (iPad; CPU OS 16_0)" -> TABLET
        "Mozilla/5.0 ... Electron/28.0"   -> DESKTOP
        anything else, or None            -> WEB
    """
    if not user_agent:
        return DeviceType.WEB

    ua = user_agent.lower()
    for device_type, markers in _DEVICE_TYPE_MARKERS:
        if any(marker in ua for marker in markers):
            return device_type
    return DeviceType.WEB


def build_device_name(platform: Optional[str], device_type: DeviceType) -> str:
    return f"{platform or 'Unknown'} {device_type.value}"
