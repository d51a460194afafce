# digipin_api/regions.py
import math
from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path
from types import MappingProxyType
from typing import Mapping, Optional, Union

import structlog
import yaml

from . import config
from .exceptions import RegionConfigError, UnknownRegionError

logger = structlog.get_logger(__name__)

BUNDLED_REGIONS_PATH = Path(__file__).with_name("regions.yml")

# Deeper codes would shrink the final cell below float resolution
MAX_LEVELS = 20
# Smallest final cell, in units of the float spacing at the region's coordinates
MIN_CELL_ULPS = 64

# YAML key -> Region attribute
_BOUND_FIELDS = {
    'minLat': 'min_lat',
    'maxLat': 'max_lat',
    'minLon': 'min_lon',
    'maxLon': 'max_lon',
}


@dataclass(frozen=True)
class Region:
    """A named bounding box and the number of levels its codes carry."""
    code: str
    levels: int
    min_lat: float
    max_lat: float
    min_lon: float
    max_lon: float

    def to_dict(self) -> dict:
        return {
            'countryCode': self.code,
            'levels': self.levels,
            'minLat': self.min_lat,
            'maxLat': self.max_lat,
            'minLon': self.min_lon,
            'maxLon': self.max_lon,
        }


def _build_region(code, entry) -> Region:
    if not isinstance(code, str) or not code:
        # Unquoted keys such as NO or ON are read by YAML as booleans.
        raise RegionConfigError(f"Region key {code!r} must be a non-empty string (quote it in YAML)")
    if not isinstance(entry, dict):
        raise RegionConfigError(f"Region {code} must be a mapping", region_id=code)

    missing = [key for key in ('levels', *_BOUND_FIELDS) if key not in entry]
    if missing:
        raise RegionConfigError(f"Region {code} is missing {', '.join(missing)}", region_id=code)

    levels = entry['levels']
    if isinstance(levels, bool) or not isinstance(levels, int) or levels <= 0:
        raise RegionConfigError(f"Region {code} needs a positive integer level count, got {levels!r}", region_id=code)
    if levels > MAX_LEVELS:
        raise RegionConfigError(f"Region {code} allows at most {MAX_LEVELS} levels, got {levels}", region_id=code)

    bounds = {}
    for key, attr in _BOUND_FIELDS.items():
        value = entry[key]
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            raise RegionConfigError(f"Region {code}: {key} must be a number, got {value!r}", region_id=code)
        bounds[attr] = float(value)

    if not bounds['min_lat'] < bounds['max_lat']:
        raise RegionConfigError(f"Region {code}: minLat must be below maxLat", region_id=code)
    if not bounds['min_lon'] < bounds['max_lon']:
        raise RegionConfigError(f"Region {code}: minLon must be below maxLon", region_id=code)

    for lo, hi, axis in ((bounds['min_lat'], bounds['max_lat'], 'latitude'),
                         (bounds['min_lon'], bounds['max_lon'], 'longitude')):
        if (hi - lo) / 4 ** levels < math.ulp(max(abs(lo), abs(hi))) * MIN_CELL_ULPS:
            raise RegionConfigError(f"Region {code}: {levels} levels make the {axis} cells too small", region_id=code)

    return Region(code=code, levels=levels, **bounds)


def load_regions(path: Union[str, Path]) -> Mapping[str, Region]:
    """
    Loads a YAML region table into a read-only mapping.

    Args:
        path: Path to a YAML file mapping region codes to
            ``{levels, minLat, maxLat, minLon, maxLon}``.

    Returns:
        A read-only mapping of region code to Region.

    Raises:
        RegionConfigError: If the file is missing, unparsable or holds an
            invalid region.
    """
    try:
        with open(path, 'r') as f:
            data = yaml.safe_load(f)
    except FileNotFoundError:
        raise RegionConfigError(f"Region table not found at {path}")
    except yaml.YAMLError as e:
        raise RegionConfigError(f"Could not parse region table {path}: {e}")

    if not isinstance(data, dict) or not data:
        raise RegionConfigError(f"Region table {path} must map at least one region code to its bounds")

    regions = {code: _build_region(code, entry) for code, entry in data.items()}
    logger.info("regions_loaded", path=str(path), regions=sorted(regions))
    return MappingProxyType(regions)


@lru_cache(maxsize=None)
def default_regions() -> Mapping[str, Region]:
    """The process-wide registry, read once from DIGIPIN_REGIONS_FILE or the bundled table."""
    return load_regions(config.REGIONS_FILE or BUNDLED_REGIONS_PATH)


def get_region(region_id: str, regions: Optional[Mapping[str, Region]] = None) -> Region:
    if regions is None:
        regions = default_regions()
    try:
        return regions[region_id]
    except (KeyError, TypeError):
        raise UnknownRegionError(region_id)
