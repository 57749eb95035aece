"""Nominal content length -> actual shooting duration"""

import logging
import re
from typing import Any, Optional, Union

from .config import SchedulerSettings, get_settings

_DIGITS = re.compile(r"\d+(?:\.\d+)?")


class DurationEstimator:
    """Normalises nominal durations ('5분', '3 min', 4) and scales them to shooting time"""

    def __init__(self, settings: Optional[SchedulerSettings] = None,
                 logger: Optional[logging.Logger] = None):
        self.settings = settings or get_settings()
        self._logger = logger or logging.getLogger(__name__)

    @property
    def ratio(self) -> int:
        return self.settings.shooting_ratio

    @property
    def default(self) -> int:
        return self.settings.default_nominal_duration

    def parse(self, value: Any) -> Union[int, float]:
        """Extract nominal minutes; invalid, missing or non-positive values fall back to the default"""
        number = self._coerce(value)
        if number is None or number <= 0:
            return self.default
        return int(number) if float(number).is_integer() else number

    def is_valid(self, value: Any) -> bool:
        number = self._coerce(value)
        return number is not None and number > 0

    def actual(self, nominal: Union[int, float]) -> int:
        return int(round(nominal * self.ratio))

    def estimate(self, value: Any) -> int:
        """Parse then scale in one step"""
        return self.actual(self.parse(value))

    def _coerce(self, value: Any) -> Optional[float]:
        if value is None or isinstance(value, bool):
            return None
        if isinstance(value, (int, float)):
            return float(value)
        if isinstance(value, str):
            match = _DIGITS.search(value)
            if match:
                return float(match.group(0))
            return None
        self._logger.debug("Unsupported duration type %s", type(value).__name__)
        return None


def parse_duration(value: Any, default: int = 5) -> Union[int, float]:
    """Module-level shortcut used where no settings object is at hand"""
    estimator = DurationEstimator(SchedulerSettings(default_nominal_duration=default))
    return estimator.parse(value)
