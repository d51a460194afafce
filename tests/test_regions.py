import pytest

from digipin_api.codec import get_bounds_from_digipin, get_digipin, strip_separators
from digipin_api.exceptions import RegionConfigError, UnknownRegionError
from digipin_api.regions import BUNDLED_REGIONS_PATH, Region, get_region, load_regions

VALID_TABLE = """
IN:
  levels: 10
  minLat: 2.5
  maxLat: 38.5
  minLon: 63.5
  maxLon: 99.5
XX:
  levels: 4
  minLat: 0
  maxLat: 16
  minLon: -8
  maxLon: 8
"""


def test_bundled_table_has_india(india):
    assert india == Region(code='IN', levels=10, min_lat=2.5, max_lat=38.5, min_lon=63.5, max_lon=99.5)
    assert 'IN' in load_regions(BUNDLED_REGIONS_PATH)


def test_load_regions(regions_file):
    regions = load_regions(regions_file(VALID_TABLE))
    assert sorted(regions) == ['IN', 'XX']
    assert regions['XX'].levels == 4
    assert regions['XX'].min_lon == -8.0
    assert isinstance(regions['XX'].max_lat, float)


def test_loaded_table_is_read_only(regions_file):
    regions = load_regions(regions_file(VALID_TABLE))
    with pytest.raises(TypeError):
        regions['ZZ'] = regions['IN']


def test_region_is_frozen(india):
    with pytest.raises(AttributeError):
        india.levels = 12


def test_get_region(regions_file):
    regions = load_regions(regions_file(VALID_TABLE))
    assert get_region('XX', regions).code == 'XX'
    with pytest.raises(UnknownRegionError) as excinfo:
        get_region('ZZ', regions)
    assert excinfo.value.error_code == "UNKNOWN_REGION"
    assert excinfo.value.region_id == 'ZZ'


def test_get_region_defaults_to_process_registry():
    assert get_region('IN').levels == 10
    with pytest.raises(UnknownRegionError):
        get_region(None)


@pytest.mark.parametrize("table,message", [
    ("XX:\n  levels: 0\n  minLat: 0\n  maxLat: 1\n  minLon: 0\n  maxLon: 1\n", "positive integer"),
    ("XX:\n  levels: 2.5\n  minLat: 0\n  maxLat: 1\n  minLon: 0\n  maxLon: 1\n", "positive integer"),
    ("XX:\n  levels: 3\n  minLat: 1\n  maxLat: 1\n  minLon: 0\n  maxLon: 1\n", "minLat"),
    ("XX:\n  levels: 3\n  minLat: 0\n  maxLat: 1\n  minLon: 5\n  maxLon: 1\n", "minLon"),
    ("XX:\n  levels: 3\n  minLat: 0\n  maxLat: 1\n  minLon: 0\n", "missing maxLon"),
    ("XX:\n  levels: 3\n  minLat: north\n  maxLat: 1\n  minLon: 0\n  maxLon: 1\n", "must be a number"),
    ("XX: 12\n", "must be a mapping"),
    ("NO:\n  levels: 3\n  minLat: 0\n  maxLat: 1\n  minLon: 0\n  maxLon: 1\n", "quote it"),
    ("- IN\n", "at least one region"),
    ("", "at least one region"),
    ("DEEP:\n  levels: 40\n  minLat: 2.5\n  maxLat: 38.5\n  minLon: 63.5\n  maxLon: 99.5\n", "at most 20 levels"),
    ("TINY:\n  levels: 20\n  minLat: 80\n  maxLat: 80.000001\n  minLon: 0\n  maxLon: 1\n", "latitude cells too small"),
])
def test_invalid_tables_are_rejected(regions_file, table, message):
    with pytest.raises(RegionConfigError) as excinfo:
        load_regions(regions_file(table))
    assert message in excinfo.value.message


def test_unparsable_table(regions_file):
    with pytest.raises(RegionConfigError):
        load_regions(regions_file("IN: [unclosed\n"))


def test_missing_table(tmp_path):
    with pytest.raises(RegionConfigError):
        load_regions(tmp_path / "missing.yml")


def test_deepest_allowed_region_still_encodes(regions_file):
    regions = load_regions(regions_file(
        "DEEP:\n  levels: 20\n  minLat: 2.5\n  maxLat: 38.5\n  minLon: 63.5\n  maxLon: 99.5\n"
    ))
    code = get_digipin(20.1, 81.1, "DEEP", regions)
    assert len(strip_separators(code)) == 20
    box = get_bounds_from_digipin(code, "DEEP", regions)
    assert box.min_lat - 1e-12 <= 20.1 <= box.max_lat + 1e-12
    assert box.min_lon - 1e-12 <= 81.1 <= box.max_lon + 1e-12
