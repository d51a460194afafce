import pytest
from fastapi.testclient import TestClient

from digipin_api.main import app
from digipin_api.regions import default_regions


@pytest.fixture
def client():
    return TestClient(app)


@pytest.fixture
def india():
    return default_regions()['IN']


@pytest.fixture
def regions_file(tmp_path):
    """Writes a YAML region table and returns its path."""
    def _write(text):
        path = tmp_path / "regions.yml"
        path.write_text(text)
        return path
    return _write
