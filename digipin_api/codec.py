import math
from typing import Mapping, NamedTuple, Optional

from .regions import Region, get_region
from .exceptions import (InvalidCodeLengthError, InvalidSymbolError,
                         LatitudeOutOfRangeError, LongitudeOutOfRangeError)

DIGIPIN_GRID = (
    ('F', 'C', '9', '8'),
    ('J', '3', '2', '7'),
    ('K', '4', '5', '6'),
    ('L', 'M', 'P', 'T'),
)

SEPARATOR = '-'
# A separator follows the symbol at these (1-based) levels
SEPARATOR_LEVELS = (3, 6)

# For faster decoding, create a lookup map from character to its (row, col) index
CHAR_TO_INDEX = {
    char: (r, c)
    for r, row_list in enumerate(DIGIPIN_GRID)
    for c, char in enumerate(row_list)
}


class BoundingBox(NamedTuple):
    min_lat: float
    max_lat: float
    min_lon: float
    max_lon: float

    @classmethod
    def of(cls, region: Region) -> "BoundingBox":
        return cls(region.min_lat, region.max_lat, region.min_lon, region.max_lon)

    @property
    def center(self):
        return (self.min_lat + self.max_lat) / 2, (self.min_lon + self.max_lon) / 2


def get_digipin(lat: float, lon: float, country_code: str = "IN",
                regions: Optional[Mapping[str, Region]] = None) -> str:
    """
    Encodes a latitude and longitude into an alphanumeric DIGIPIN.

    Args:
        lat: The latitude coordinate.
        lon: The longitude coordinate.
        country_code: Region whose bounding box and code length apply.
        regions: Region table to use instead of the process-wide registry.

    Returns:
        The formatted DIGIPIN string (e.g., "FC9-8J3-27K4" for a 10-level region).

    Raises:
        UnknownRegionError: If the region is not registered.
        LatitudeOutOfRangeError: If the latitude lies outside the region.
        LongitudeOutOfRangeError: If the longitude lies outside the region.
    """
    region = get_region(country_code, regions)
    if not (region.min_lat <= lat <= region.max_lat):
        raise LatitudeOutOfRangeError(lat, region.min_lat, region.max_lat)
    if not (region.min_lon <= lon <= region.max_lon):
        raise LongitudeOutOfRangeError(lon, region.min_lon, region.max_lon)

    min_lat, max_lat, min_lon, max_lon = BoundingBox.of(region)

    digipin_chars = []

    for level in range(1, region.levels + 1):
        lat_div = (max_lat - min_lat) / 4
        lon_div = (max_lon - min_lon) / 4

        # Rows count down from the northern edge
        row = 3 - math.floor((lat - min_lat) / lat_div)
        col = math.floor((lon - min_lon) / lon_div)

        # Coordinates on the max edge would index past the grid
        row = max(0, min(row, 3))
        col = max(0, min(col, 3))

        digipin_chars.append(DIGIPIN_GRID[row][col])
        if level in SEPARATOR_LEVELS:
            digipin_chars.append(SEPARATOR)

        max_lat = min_lat + lat_div * (4 - row)
        min_lat = min_lat + lat_div * (3 - row)

        # max_lon is derived from the already updated min_lon
        min_lon = min_lon + lon_div * col
        max_lon = min_lon + lon_div

    return ''.join(digipin_chars)


def strip_separators(digipin: str) -> str:
    return digipin.replace(SEPARATOR, '')


def get_bounds_from_digipin(digipin: str, country_code: str = "IN",
                            regions: Optional[Mapping[str, Region]] = None) -> BoundingBox:
    """
    Decodes a DIGIPIN into the bounding box of the cell it designates.

    Separators are ignored wherever they appear.

    Raises:
        UnknownRegionError: If the region is not registered.
        InvalidCodeLengthError: If the code does not have one symbol per level.
        InvalidSymbolError: If a character is not in the DIGIPIN grid.
    """
    pin = strip_separators(digipin)
    region = get_region(country_code, regions)
    if len(pin) != region.levels:
        raise InvalidCodeLengthError(len(pin), region.levels)

    min_lat, max_lat, min_lon, max_lon = BoundingBox.of(region)

    for position, char in enumerate(pin):
        if char not in CHAR_TO_INDEX:
            raise InvalidSymbolError(char, position)

        ri, ci = CHAR_TO_INDEX[char]

        lat_div = (max_lat - min_lat) / 4
        lon_div = (max_lon - min_lon) / 4

        # Latitude uses reversed logic (subtracting from max_lat)
        new_min_lat = max_lat - lat_div * (ri + 1)
        new_max_lat = max_lat - lat_div * ri

        new_min_lon = min_lon + lon_div * ci
        new_max_lon = min_lon + lon_div * (ci + 1)

        min_lat, max_lat = new_min_lat, new_max_lat
        min_lon, max_lon = new_min_lon, new_max_lon

    return BoundingBox(min_lat, max_lat, min_lon, max_lon)


def get_lat_lng_from_digipin(digipin: str, country_code: str = "IN",
                             regions: Optional[Mapping[str, Region]] = None) -> dict:
    """
    Decodes a DIGIPIN back into its central latitude and longitude.

    Args:
        digipin: The DIGIPIN string (hyphens are optional).
        country_code: Region the code was produced for.
        regions: Region table to use instead of the process-wide registry.

    Returns:
        A dictionary containing the 'latitude' and 'longitude' as strings
        formatted to 6 decimal places.

    Raises:
        UnknownRegionError, InvalidCodeLengthError, InvalidSymbolError
    """
    center_lat, center_lon = get_bounds_from_digipin(digipin, country_code, regions).center

    return {
        'latitude': f"{center_lat:.6f}",
        'longitude': f"{center_lon:.6f}"
    }
