"""Account Risk Aggregator - account-level risk from unresolved alerts.

The aggregate is the sum of severity weights over unresolved alerts from
the trailing window, capped at 100. It describes accumulated history and
is stored on User.risk_score. It is never mixed with a login's composite.
"""

from datetime import timedelta
from typing import Optional

from session_sentinel.common.clock import Clock, utc_now
from session_sentinel.common.constants import AggregateConstants
from session_sentinel.common.exceptions import UserNotFoundError
from session_sentinel.common.logging import get_logger
from session_sentinel.data.schemas import User
from session_sentinel.storage.base import AlertStore, UserStore

logger = get_logger(__name__)


class AccountRiskAggregator:

    def __init__(
        self,
        alert_store: AlertStore,
        user_store: UserStore,
        clock: Optional[Clock] = None,
        window_days: float = AggregateConstants.WINDOW_DAYS,
    ):
        self._alerts = alert_store
        self._users = user_store
        self._clock = clock or utc_now
        self.window = timedelta(days=window_days)

    def calculate(self, user_id: str) -> float:
        since = self._clock() - self.window
        alerts = self._alerts.list_unresolved_since(user_id, since)
        score = sum(alert.severity.weight for alert in alerts)
        return float(min(score, AggregateConstants.SCORE_CAP))

    def refresh(self, user_id: str) -> User:
        """Recalculate the aggregate and write it to the user record.

        Raises:
            UserNotFoundError: If the user is unknown
        """
        user = self._users.get(user_id)
        if user is None:
            raise UserNotFoundError(user_id)

        user.risk_score = self.calculate(user_id)
        user = self._users.save(user)
        logger.debug(f"Account risk for user {user_id} is now {user.risk_score:.0f}")
        return user
