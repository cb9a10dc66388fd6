"""Device Identity Resolver - find-or-create devices and evolve trust.

A returning fingerprint bumps the device's trust score by a fixed step;
an unseen fingerprint creates a new, untrusted device at the initial
trust score. Explicit trust raises the score to a floor but never lowers
an already-higher score.
"""

from dataclasses import dataclass
from typing import List, Optional

from session_sentinel.common.clock import Clock, utc_now
from session_sentinel.common.constants import DeviceConstants
from session_sentinel.common.exceptions import DeviceNotFoundError
from session_sentinel.common.logging import get_logger
from session_sentinel.data.schemas import Device, DeviceFingerprint
from session_sentinel.devices.fingerprint import (
    build_device_name,
    classify_device_type,
    compute_fingerprint_hash,
)
from session_sentinel.storage.base import DeviceStore

logger = get_logger(__name__)


def bump_trust(trust_score: float) -> float:
    """Trust after a repeat login: min(t + 5, 100)."""
    return min(trust_score + DeviceConstants.TRUST_INCREMENT, DeviceConstants.TRUST_SCORE_MAX)


def explicit_trust(trust_score: float) -> float:
    """Trust after an explicit trust action: max(t, 90)."""
    return max(trust_score, DeviceConstants.EXPLICIT_TRUST_FLOOR)


@dataclass(frozen=True)
class DeviceResolution:
    """Outcome of resolving a fingerprint for a user."""
    device: Device
    is_new: bool


class DeviceIdentityResolver:
    """Resolves client fingerprints to per-user device records.

    Callers that need lost-update protection on trust_score must serialize
    calls per user (see sessions.locks.KeyedLock).
    """

    def __init__(self, store: DeviceStore, clock: Optional[Clock] = None):
        self._store = store
        self._clock = clock or utc_now

    def resolve(self, user_id: str, fingerprint: DeviceFingerprint) -> DeviceResolution:
        """Return the user's device for this fingerprint, creating it if unseen.

        Args:
            user_id: Owning user
            fingerprint: Client-reported attributes

        Returns:
            DeviceResolution with the stored device and whether it was created
        """
        fingerprint_hash = compute_fingerprint_hash(fingerprint)
        now = self._clock()

        device = self._store.find_by_fingerprint(user_id, fingerprint_hash)
        if device is not None:
            device.last_seen_at = now
            device.metadata = {**device.metadata, **fingerprint.attributes()}
            device.trust_score = bump_trust(device.trust_score)
            device = self._store.save(device)
            logger.debug(
                f"Recognised device {device.id} for user {user_id} "
                f"(trust={device.trust_score:.1f})"
            )
            return DeviceResolution(device=device, is_new=False)

        device_type = classify_device_type(fingerprint.user_agent)
        device = Device(
            user_id=user_id,
            fingerprint_hash=fingerprint_hash,
            device_name=build_device_name(fingerprint.platform, device_type),
            device_type=device_type,
            trust_score=DeviceConstants.INITIAL_TRUST_SCORE,
            is_trusted=False,
            first_seen_at=now,
            last_seen_at=now,
            metadata=fingerprint.attributes(),
        )
        device = self._store.add(device)
        logger.info(f"Registered new {device_type.value} device {device.id} for user {user_id}")
        return DeviceResolution(device=device, is_new=True)

    def get_device(self, device_id: str, user_id: str) -> Device:
        """Return a device owned by user_id.

        Raises:
            DeviceNotFoundError: If unknown or owned by another user
        """
        device = self._store.get(device_id)
        if device is None or device.user_id != user_id:
            raise DeviceNotFoundError(device_id)
        return device

    def trust_device(self, device_id: str, user_id: str) -> Device:
        """Mark a device as trusted, raising its score to at least the floor."""
        device = self.get_device(device_id, user_id)
        device.is_trusted = True
        device.trust_score = explicit_trust(device.trust_score)
        device = self._store.save(device)
        logger.info(f"Device {device_id} trusted by user {user_id}")
        return device

    def remove_device(self, device_id: str, user_id: str) -> None:
        if not self._store.delete(device_id, user_id):
            raise DeviceNotFoundError(device_id)
        logger.info(f"Device {device_id} removed by user {user_id}")

    def list_devices(self, user_id: str) -> List[Device]:
        return self._store.list_by_user(user_id)
