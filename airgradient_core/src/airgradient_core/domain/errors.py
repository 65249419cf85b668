from typing import Optional


class FetchError(Exception):
    """A poll cycle could not obtain telemetry. Never fatal."""

    kind = "fetch"

    def __init__(self, url: str, message: str):
        super().__init__(f"{message} ({url})")
        self.url = url
        self.message = message


class NetworkError(FetchError):
    """Connection failure, timeout or non-2xx HTTP status."""

    kind = "network"

    def __init__(self, url: str, message: str, status_code: Optional[int] = None):
        super().__init__(url, message)
        self.status_code = status_code


class DecodeError(FetchError):
    """Body is not a JSON object."""

    kind = "decode"


class DeviceConfigError(ValueError):
    """Device configuration cannot be turned into DeviceConfig entries."""


class NoDataAvailable(LookupError):
    """A getter was asked for a value the device has never reported (or reported invalid)."""


class UnsupportedCharacteristic(LookupError):
    """The device variant does not expose the requested characteristic."""
