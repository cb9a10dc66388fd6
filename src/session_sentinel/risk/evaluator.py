"""Risk Evaluator - scores one login from its assembled context.

Four independent sub-scores, each clamped to [0, 100]:
- device: device age and trust
- location: implied travel speed against recent sessions, country spread
- behavioral: device churn and deviation from the usual login hour
- session: concurrency against the user's cap, country spread

The composite is a fixed convex combination of the four. Evaluation is
pure: no I/O, no clock reads, no randomness.
"""

from datetime import datetime, timedelta, timezone
from typing import List, Optional, Sequence, Set, Tuple

import numpy as np

from session_sentinel.common.config.risk import RiskConfig
from session_sentinel.common.constants import RiskConstants
from session_sentinel.data.schemas import Device, Session, User
from session_sentinel.risk.geo import haversine_many
from session_sentinel.risk.schema import (
    IMPOSSIBLE_TRAVEL_SIGNAL,
    EvaluationContext,
    RiskAssessment,
)

Scored = Tuple[float, List[str]]


def _clamp(score: float) -> float:
    return max(RiskConstants.SCORE_MIN, min(RiskConstants.SCORE_MAX, score))


def _utc_hour(moment: datetime) -> int:
    if moment.tzinfo is not None:
        moment = moment.astimezone(timezone.utc)
    return moment.hour


def _countries(sessions: Sequence[Session]) -> Set[str]:
    return {s.country for s in sessions if s.country}


class RiskEvaluator:
    """Computes RiskAssessments from EvaluationContexts.

    Thresholds and weights come from the RiskConfig given at
    construction; nothing is read from the environment.
    """

    def __init__(self, config: Optional[RiskConfig] = None):
        self.config = config or RiskConfig()

    def evaluate(self, context: EvaluationContext) -> RiskAssessment:
        device_risk, device_signals = self.device_risk(context.device, context.evaluated_at)
        location_risk, location_signals = self.location_risk(
            context.session, context.prior_sessions, context.evaluated_at
        )
        behavioral_risk, behavioral_signals = self.behavioral_risk(
            context.prior_sessions, context.evaluated_at
        )
        session_risk, session_signals = self.session_risk(
            context.user, context.session, context.prior_sessions
        )

        return RiskAssessment(
            device_risk=device_risk,
            location_risk=location_risk,
            behavioral_risk=behavioral_risk,
            session_risk=session_risk,
            composite_score=self.composite(
                device_risk, location_risk, behavioral_risk, session_risk
            ),
            signals=device_signals + location_signals + behavioral_signals + session_signals,
        )

    def composite(
        self,
        device_risk: float,
        location_risk: float,
        behavioral_risk: float,
        session_risk: float,
    ) -> float:
        weights = self.config.weights
        score = (
            device_risk * weights.device
            + location_risk * weights.location
            + behavioral_risk * weights.behavioral
            + session_risk * weights.session
        )
        return round(_clamp(score), RiskConstants.SCORE_DECIMALS)

    def device_risk(self, device: Device, now: datetime) -> Scored:
        rules = self.config.device
        score = 0.0
        signals: List[str] = []

        # Age runs from first_seen_at; repeat logins do not reset it.
        if now - device.first_seen_at < timedelta(hours=rules.new_device_window_hours):
            score += rules.new_device_penalty
            signals.append("new_device")

        if device.trust_score < rules.very_low_trust_below:
            score += rules.very_low_trust_penalty
            signals.append("very_low_trust")
        elif device.trust_score < rules.low_trust_below:
            score += rules.low_trust_penalty
            signals.append("low_trust")
        elif device.trust_score < rules.moderate_trust_below:
            score += rules.moderate_trust_penalty
            signals.append("moderate_trust")

        if not device.is_trusted:
            score += rules.untrusted_penalty
            signals.append("untrusted_device")

        return _clamp(score), signals

    def location_risk(
        self,
        session: Session,
        prior_sessions: Sequence[Session],
        now: datetime,
    ) -> Scored:
        rules = self.config.location

        if not session.has_coordinates:
            return _clamp(rules.unknown_location_risk), ["unknown_location"]

        score = 0.0
        signals: List[str] = []

        recent = sorted(
            (s for s in prior_sessions if s.has_coordinates),
            key=lambda s: s.started_at,
            reverse=True,
        )[:rules.max_compared_sessions]

        distances = haversine_many(
            (session.location.latitude, session.location.longitude),
            [(s.location.latitude, s.location.longitude) for s in recent],
        )
        for prior, distance_km in zip(recent, distances):
            elapsed_hours = (session.started_at - prior.started_at).total_seconds() / 3600
            if elapsed_hours <= 0:
                continue
            speed_kmh = distance_km / elapsed_hours
            if speed_kmh > rules.impossible_travel_speed_kmh:
                score += rules.impossible_travel_penalty
                signals.append(IMPOSSIBLE_TRAVEL_SIGNAL)
                break
            if speed_kmh > rules.suspicious_travel_speed_kmh:
                score += rules.suspicious_travel_penalty
                signals.append("suspicious_travel")

        window_start = now - timedelta(days=rules.country_window_days)
        countries = _countries([s for s in recent if s.started_at >= window_start])
        if session.country:
            countries.add(session.country)
        if len(countries) > rules.max_recent_countries:
            score += rules.many_countries_penalty
            signals.append("many_recent_countries")

        return _clamp(score), signals

    def behavioral_risk(self, prior_sessions: Sequence[Session], now: datetime) -> Scored:
        rules = self.config.behavioral
        score = 0.0
        signals: List[str] = []

        window_start = now - timedelta(hours=rules.device_window_hours)
        devices = {s.device_id for s in prior_sessions if s.started_at >= window_start}
        if len(devices) > rules.heavy_switching_devices:
            score += rules.heavy_switching_penalty
            signals.append("rapid_device_switching")
        elif len(devices) > rules.switching_devices:
            score += rules.switching_penalty
            signals.append("device_switching")

        if prior_sessions:
            mean_hour = float(np.mean([_utc_hour(s.started_at) for s in prior_sessions]))
            if abs(_utc_hour(now) - mean_hour) > rules.off_hours_deviation:
                score += rules.off_hours_penalty
                signals.append("unusual_login_hour")

        return _clamp(score), signals

    def session_risk(
        self,
        user: User,
        session: Session,
        prior_sessions: Sequence[Session],
    ) -> Scored:
        rules = self.config.session
        score = 0.0
        signals: List[str] = []

        active = len(prior_sessions)
        cap = user.max_concurrent_sessions
        if active >= cap:
            score += rules.at_cap_penalty
            signals.append("session_cap_reached")
        if active > cap + rules.over_cap_margin:
            score += rules.over_cap_penalty
            signals.append("session_cap_exceeded")

        countries = _countries(prior_sessions)
        if session.country:
            countries.add(session.country)
        if len(countries) > 2:
            score += rules.many_countries_penalty
            signals.append("multiple_active_countries")
        elif len(countries) == 2:
            score += rules.two_countries_penalty
            signals.append("two_active_countries")

        return _clamp(score), signals
