import logging
import re
from dataclasses import dataclass
from typing import Optional
from urllib.parse import quote

import requests

from airgradient_core.domain.errors import DecodeError, FetchError, NetworkError
from airgradient_core.domain.models import DeviceConfig, DeviceVariant, RawTelemetry

logger = logging.getLogger(__name__)

CLOUD_API_BASE = "https://api.airgradient.com/public/api/v1"
LOCAL_HOST_PREFIX = "airgradient"

_TOKEN_RE = re.compile(r"(token=)[^&]+")


def redact(url: str) -> str:
    """Mask the access token so URLs can be logged."""
    return _TOKEN_RE.sub(r"\1***", url)


def cloud_endpoint(location_id: str, token: str, base: str = CLOUD_API_BASE) -> str:
    return (
        f"{base.rstrip('/')}/locations/{quote(location_id, safe='')}"
        f"/measures/current?token={quote(token, safe='')}"
    )


def local_endpoint(
    serial_number: str, hostname: Optional[str] = None, prefix: str = LOCAL_HOST_PREFIX
) -> str:
    host = hostname or f"{prefix}_{serial_number}.local"
    return f"http://{host}/measures/current"


def endpoint_for(
    config: DeviceConfig,
    *,
    cloud_base: str = CLOUD_API_BASE,
    local_prefix: str = LOCAL_HOST_PREFIX,
) -> str:
    if config.variant is DeviceVariant.CLOUD:
        if not config.token:
            raise ValueError(f"Cloud device {config.device_key} has no access token")
        return cloud_endpoint(config.device_key, config.token, cloud_base)
    return local_endpoint(config.device_key, config.hostname, local_prefix)


@dataclass(frozen=True)
class FetchResult:
    telemetry: Optional[RawTelemetry] = None
    error: Optional[FetchError] = None

    @property
    def ok(self) -> bool:
        return self.error is None and self.telemetry is not None

    @classmethod
    def success(cls, telemetry: RawTelemetry) -> "FetchResult":
        return cls(telemetry=telemetry)

    @classmethod
    def failure(cls, error: FetchError) -> "FetchResult":
        return cls(error=error)


class TelemetryClient:
    """Fetches a device's ``measures/current`` document.

    Exactly one request per call, no retries; the poller's interval is the
    retry policy. ``fetch`` never raises: every failure comes back as a
    FetchResult carrying a NetworkError or DecodeError.
    """

    def __init__(self, session: Optional[requests.Session] = None, timeout: float = 10.0):
        self._session = session or requests.Session()
        self.timeout = timeout

    def fetch(self, url: str) -> FetchResult:
        safe_url = redact(url)
        logger.debug("GET %s", safe_url)

        try:
            response = self._session.get(url, timeout=self.timeout)
            response.raise_for_status()
        except requests.HTTPError as e:
            status = e.response.status_code if e.response is not None else None
            return FetchResult.failure(NetworkError(safe_url, f"HTTP {status}", status_code=status))
        except requests.RequestException as e:
            # connection errors echo the request path, token included
            return FetchResult.failure(NetworkError(safe_url, f"{type(e).__name__}: {redact(str(e))}"))

        try:
            body = response.json()
        except ValueError as e:
            return FetchResult.failure(DecodeError(safe_url, f"Body is not JSON: {e}"))

        if not isinstance(body, dict):
            return FetchResult.failure(
                DecodeError(safe_url, f"Expected a JSON object, got {type(body).__name__}")
            )

        return FetchResult.success(RawTelemetry(body))

    def close(self) -> None:
        self._session.close()
