import pytest

from vedic_api.config import get_settings


@pytest.fixture(autouse=True)
def moshier_only(tmp_path, monkeypatch):
    """Point the ephemeris at an empty data directory so charts use Moshier."""
    monkeypatch.setenv("EPHEMERIS_DIR", str(tmp_path))
    monkeypatch.delenv("EPHEMERIS_BACKEND", raising=False)
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()
