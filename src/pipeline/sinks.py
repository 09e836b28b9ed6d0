"""
Alert sinks: consumers of the alerts raised by the pipeline.

Speech playback lives on the host platform; sinks here only decide what to
say and hand it on.
"""

from __future__ import annotations

import logging
from collections import deque
from typing import Callable, Deque, Dict, Optional, Protocol

from models.alert import Alert
from models.config import AlertConfig


class AlertSink(Protocol):
    def on_alert(self, alert: Alert) -> None:
        ...


class LoggingAlertSink:
    """
    Map alerts to spoken phrases and log them.

    An optional `speak` callable receives the phrase, e.g. a text-to-speech
    engine's queue-flushing speak method.
    """

    def __init__(
        self,
        phrases: Optional[Dict[str, str]] = None,
        speak: Optional[Callable[[str], None]] = None,
    ):
        self.phrases = dict(phrases) if phrases is not None else AlertConfig().phrases
        self._speak = speak
        self.spoken: Deque[str] = deque(maxlen=100)

    def phrase_for(self, alert: Alert) -> str:
        return self.phrases.get(alert.level, alert.level)

    def on_alert(self, alert: Alert) -> None:
        phrase = self.phrase_for(alert)
        if alert.is_danger:
            logging.warning(f"ALERT [{alert.level}] {phrase} (proximity={alert.closest_proximity:.2f})")
        else:
            logging.info(f"ALERT [{alert.level}] {phrase} (proximity={alert.closest_proximity:.2f})")
        self.spoken.append(phrase)
        if self._speak is not None:
            self._speak(phrase)
