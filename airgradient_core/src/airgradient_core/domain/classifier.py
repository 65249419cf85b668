# airgradient_core/domain/classifier.py

from typing import Optional

from airgradient_core.domain.models import (
    AirQuality,
    CarbonDioxideDetected,
    ClassifiedState,
    RawTelemetry,
    ValidatedReading,
)

# Inclusive upper bounds in µg/m³, US EPA PM2.5 AQI breakpoints.
PM2_5_BREAKPOINTS = (
    (12.0, AirQuality.EXCELLENT),
    (35.4, AirQuality.GOOD),
    (55.4, AirQuality.FAIR),
    (150.4, AirQuality.INFERIOR),
)

CO2_ABNORMAL_ABOVE_PPM = 800.0


def air_quality_category(pm2_5: float) -> AirQuality:
    for upper, category in PM2_5_BREAKPOINTS:
        if pm2_5 <= upper:
            return category
    return AirQuality.POOR


def co2_detected(co2_ppm: float) -> CarbonDioxideDetected:
    if co2_ppm <= CO2_ABNORMAL_ABOVE_PPM:
        return CarbonDioxideDetected.NORMAL
    return CarbonDioxideDetected.ABNORMAL


def classify(reading: ValidatedReading, telemetry: Optional[RawTelemetry] = None) -> ClassifiedState:
    """Attach the derived categories to a validated reading.

    A category is absent whenever the metric it is derived from is absent.
    """
    return ClassifiedState(
        reading=reading,
        air_quality=air_quality_category(reading.pm2_5) if reading.pm2_5 is not None else None,
        co2_detected=co2_detected(reading.co2) if reading.co2 is not None else None,
        telemetry=telemetry,
    )
