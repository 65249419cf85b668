import pytest

from airgradient_core.domain.models import TRACKED_METRICS, Metric, RawTelemetry
from airgradient_core.domain.validator import validate

FULL_LOCAL_BODY = {
    "serialno": "84fce6123456",
    "wifi": -52,
    "pm01": 3,
    "pm02": 8,
    "pm10": 20,
    "pm003Count": 512,
    "atmp": 22.4,
    "rhum": 41,
    "rco2": 612,
    "tvocIndex": 50,
    "noxIndex": 5,
    "firmwareVersion": "3.1.1",
}


def test_valid_record_has_no_warnings():
    reading, warnings = validate(RawTelemetry(FULL_LOCAL_BODY))

    assert warnings == []
    assert reading.pm2_5 == 8.0
    assert reading.pm10 == 20.0
    assert reading.tvoc_index == 50.0
    assert reading.nox_index == 5.0
    assert reading.temperature == 22.4
    assert reading.co2 == 612.0
    assert reading.relative_humidity == 41.0


def test_non_numeric_field_is_absent_with_warning():
    body = dict(FULL_LOCAL_BODY, pm02="n/a")
    reading, warnings = validate(RawTelemetry(body))

    assert reading.pm2_5 is None
    assert reading.pm10 == 20.0
    assert len(warnings) == 1
    assert warnings[0].metric is Metric.PM2_5
    assert warnings[0].raw_value == "n/a"
    assert warnings[0].reason == "not numeric"


def test_non_finite_and_bool_fields_rejected():
    body = dict(FULL_LOCAL_BODY, atmp=float("nan"), rco2=float("inf"), rhum=True, noxIndex=10**400)
    reading, warnings = validate(RawTelemetry(body))

    assert reading.temperature is None
    assert reading.co2 is None
    assert reading.relative_humidity is None
    assert reading.nox_index is None
    reasons = {w.metric: w.reason for w in warnings}
    assert reasons == {
        Metric.TEMPERATURE: "not finite",
        Metric.CO2: "not finite",
        Metric.RELATIVE_HUMIDITY: "not numeric",
        Metric.NOX_INDEX: "not finite",
    }


def test_missing_fields_reported():
    reading, warnings = validate(RawTelemetry({"pm02": 8, "pm10": 20}))

    assert reading.pm2_5 == 8.0
    assert {w.metric for w in warnings} == {
        Metric.TVOC_INDEX,
        Metric.NOX_INDEX,
        Metric.TEMPERATURE,
        Metric.CO2,
        Metric.RELATIVE_HUMIDITY,
    }
    assert all(w.reason == "missing" for w in warnings)


def test_empty_record_still_produces_reading():
    reading, warnings = validate(RawTelemetry({}))
    assert all(reading.value(m) is None for m in TRACKED_METRICS)
    assert len(warnings) == 7


def test_raw_telemetry_is_read_only():
    raw = RawTelemetry({"pm02": 8, "locationName": "Office"})
    assert raw.location_name == "Office"
    with pytest.raises(TypeError):
        raw.fields["pm02"] = 1  # type: ignore[index]
