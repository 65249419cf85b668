import math
from typing import Any, List, Optional, Tuple

from airgradient_core.domain.models import (
    METRIC_FIELDS,
    FieldWarning,
    RawTelemetry,
    ValidatedReading,
)


def _to_reading(raw_value: Any) -> Tuple[Optional[float], Optional[str]]:
    """Return ``(value, None)`` for a usable field, ``(None, reason)`` otherwise."""
    if raw_value is None:
        return None, "missing"
    # bool is an int subclass but never a measurement
    if isinstance(raw_value, bool) or not isinstance(raw_value, (int, float)):
        return None, "not numeric"
    try:
        value = float(raw_value)
    except OverflowError:
        return None, "not finite"
    if not math.isfinite(value):
        return None, "not finite"
    return value, None


def validate(raw: RawTelemetry) -> Tuple[ValidatedReading, List[FieldWarning]]:
    """Sanitize the tracked metrics of one telemetry record.

    Every tracked metric ends up either a finite float or None. Each rejected
    field produces a FieldWarning naming the metric and the offending raw value.
    This never fails as a whole: an empty reading is still a reading.
    """
    values = {}
    warnings: List[FieldWarning] = []

    for metric, field_name in METRIC_FIELDS.items():
        raw_value = raw.get(field_name)
        value, reason = _to_reading(raw_value)
        values[metric.value] = value
        if reason is not None:
            warnings.append(FieldWarning(metric=metric, raw_value=raw_value, reason=reason))

    return ValidatedReading(**values), warnings
