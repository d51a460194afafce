"""
Exception classes raised by the DIGIPIN codec and region registry.

Every codec failure is a validation failure: nothing here is transient and
nothing is retried. The HTTP layer turns these into 400 responses.
"""

from typing import Any, Dict, Optional


class DigipinError(ValueError):
    """Base exception class for all DIGIPIN validation errors."""

    error_code = "DIGIPIN_ERROR"

    def __init__(self, message: str, context: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.context = context or {}

    def to_dict(self) -> Dict[str, Any]:
        """Convert exception to dictionary for logging/serialization."""
        return {
            'error': self.message,
            'error_code': self.error_code,
            'context': self.context,
        }


class UnknownRegionError(DigipinError):
    """Raised when a region identifier is not in the registry."""

    error_code = "UNKNOWN_REGION"

    def __init__(self, region_id: Any):
        super().__init__(
            f"Unsupported country code: {region_id!r}",
            context={'country_code': region_id},
        )
        self.region_id = region_id


class _CoordinateOutOfRangeError(DigipinError):
    axis = ""

    def __init__(self, value: float, minimum: float, maximum: float):
        super().__init__(
            f"{self.axis.capitalize()} {value} is out of range [{minimum}, {maximum}]",
            context={'value': value, 'min': minimum, 'max': maximum},
        )
        self.value = value
        self.minimum = minimum
        self.maximum = maximum


class LatitudeOutOfRangeError(_CoordinateOutOfRangeError):
    error_code = "LATITUDE_OUT_OF_RANGE"
    axis = "latitude"


class LongitudeOutOfRangeError(_CoordinateOutOfRangeError):
    error_code = "LONGITUDE_OUT_OF_RANGE"
    axis = "longitude"


class InvalidCodeLengthError(DigipinError):
    """Raised when a DIGIPIN, separators removed, has the wrong length."""

    error_code = "INVALID_CODE_LENGTH"

    def __init__(self, length: int, expected: int):
        super().__init__(
            f"Invalid DIGIPIN: expected {expected} symbols, got {length}",
            context={'length': length, 'expected': expected},
        )
        self.length = length
        self.expected = expected


class InvalidSymbolError(DigipinError):
    """Raised when a DIGIPIN contains a character outside the symbol grid."""

    error_code = "INVALID_SYMBOL"

    def __init__(self, symbol: str, position: int):
        super().__init__(
            f"Invalid character {symbol!r} at position {position} in DIGIPIN",
            context={'symbol': symbol, 'position': position},
        )
        self.symbol = symbol
        self.position = position


class RegionConfigError(Exception):
    """Raised when the region table cannot be loaded or is malformed."""

    def __init__(self, message: str, region_id: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.region_id = region_id


class BatchInputError(DigipinError):
    """Raised when an uploaded batch file cannot be read or lacks a column."""

    error_code = "INVALID_BATCH_INPUT"

    def __init__(self, message: str, missing_columns=None):
        super().__init__(message, context={'missing_columns': list(missing_columns or [])})
        self.missing_columns = list(missing_columns or [])
