"""
Cooldown-gated proximity alerts.

The controller owns the only time-dependent state in the pipeline: the
timestamp of the last alert it raised. Everything upstream of it is a pure
function of the current frame.
"""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass
from typing import Optional

from models.alert import ALERT_DANGER, ALERT_WARNING, Alert
from models.proximity import ProximityLevel


@dataclass(frozen=True)
class AlertControllerConfig:
    """
    Attributes:
        cooldown_s: Minimum seconds between two alerts.
    """
    cooldown_s: float = 2.0


class AlertController:
    """
    Turn per-frame proximity levels into alert events.

    Rules, evaluated once per frame:
    - Inside the cooldown window of the last alert: no event.
    - DANGER: "danger" alert, cooldown restarts.
    - WARNING: "warning" alert, cooldown restarts.
    - SAFE: no event; the cooldown window is left untouched.

    One controller belongs to one camera session; call reset() when the
    session restarts.
    """

    def __init__(self, cfg: AlertControllerConfig):
        if cfg.cooldown_s < 0:
            raise ValueError(f"cooldown_s must be non-negative, got {cfg.cooldown_s}")
        self.cfg = cfg
        self._last_alert_ts: Optional[float] = None
        self._lock = threading.Lock()

    @property
    def last_alert_timestamp(self) -> Optional[float]:
        return self._last_alert_ts

    def in_cooldown(self, now: float) -> bool:
        """Whether an alert raised at `now` would be suppressed."""
        last = self._last_alert_ts
        return last is not None and now - last < self.cfg.cooldown_s

    def evaluate(
        self,
        level: ProximityLevel,
        now: float,
        closest_proximity: float = 0.0,
    ) -> Optional[Alert]:
        """
        Evaluate one frame.

        Args:
            level: Proximity level of the frame.
            now: Frame timestamp in seconds.
            closest_proximity: Proximity value carried on the alert.

        Returns:
            The alert to raise, or None.
        """
        if level == ProximityLevel.DANGER:
            alert_level = ALERT_DANGER
        elif level == ProximityLevel.WARNING:
            alert_level = ALERT_WARNING
        else:
            return None

        with self._lock:
            if self.in_cooldown(now):
                return None
            self._last_alert_ts = now

        logging.debug(f"Alert raised: level={alert_level} proximity={closest_proximity:.3f}")
        return Alert(level=alert_level, timestamp=now, closest_proximity=closest_proximity)

    def reset(self) -> None:
        """Forget the last alert (new camera session)."""
        with self._lock:
            self._last_alert_ts = None
