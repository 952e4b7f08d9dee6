import pytest
import swisseph as swe

from vedic_api.config import EphemerisSettings
from vedic_api.errors import EphemerisFailure, HouseComputationFailed
from vedic_api.services import ephem
from vedic_api.services.ephem import EphemerisAdapter, call_dual, normalize_calc, normalize_houses
from vedic_api.services.positions import compute_rasi, house_code, retrograde_flags

CUSPS = [10.0 + 30.0 * i for i in range(12)]


class FakeSwe:
    """Direct-return provider keyed like the JavaScript bindings."""

    def __init__(self, fail=None, calls=None):
        # fail: {engine_flag: body_id}
        self.fail = fail or {}
        self.calls = calls if calls is not None else []

    def calc_ut(self, jd, body, flags):
        engine = flags & (swe.FLG_SWIEPH | swe.FLG_MOSEPH)
        self.calls.append((engine, body))
        if self.fail.get(engine) == body:
            return {"serr": "SwissEph file 'sepl_18.se1' not found"}
        return {"longitude": 370.0 + body, "longitudeSpeed": 1.0, "rflag": flags}

    def houses(self, jd, lat, lon, hsys):
        return {"house": CUSPS, "ascendant": 100.0, "mc": 10.0}

    def get_ayanamsa_ut(self, jd):
        return 24.0

    def sidtime(self, jd):
        return {"siderealTime": 6.0}


class CallbackSwe(FakeSwe):
    """Provider that only completes through a trailing callback."""

    def calc_ut(self, jd, body, flags, callback):
        callback({"xx": [20.0 + body, 0.0, 1.0, -0.5, 0.0, 0.0], "serr": ""})

    def houses(self, jd, lat, lon, hsys, callback):
        callback({"cusps": [0.0] + CUSPS, "ascmc": [100.0, 10.0]})


def _settings(files=()):
    return EphemerisSettings(ephe_path="/nonexistent", ephe_files=tuple(files))


def test_engine_order():
    bare = EphemerisAdapter(_settings(), FakeSwe())
    with_files = EphemerisAdapter(_settings(["sepl_18.se1", "README"]), FakeSwe())
    assert bare.engine_order() == ["MOSEPH"]
    assert with_files.engine_order() == ["SWIEPH", "MOSEPH"]
    assert bare.engine_order("SWIEPH") == ["SWIEPH", "MOSEPH"]
    assert with_files.engine_order("moseph") == ["MOSEPH", "SWIEPH"]


def test_files_without_ephemeris_extension_do_not_count():
    assert not _settings(["notes.txt", "seas_18.txt"]).swieph_available
    assert _settings(["seas_18.se1"]).swieph_available


def test_call_dual_prefers_direct_return():
    assert call_dual(lambda x: x * 2, [4], lambda r: True) == 8


def test_call_dual_uses_callback():
    def cb_style(x, done):
        done(x + 1)

    assert call_dual(cb_style, [4], lambda r: True) == 5


def test_normalize_calc_shapes():
    assert normalize_calc(((12.5, 0.0, 1.0, 0.9, 0.0, 0.0), 258)).lon == 12.5
    assert normalize_calc({"xx": [7.0, 0, 0, -0.1]}).speed == -0.1
    assert normalize_calc({"longitude": 3.0}).lon == 3.0
    with pytest.raises(ephem.ProviderError):
        normalize_calc({"serr": "boom"})


def test_normalize_houses_shapes():
    cusps, asc = normalize_houses((tuple(CUSPS), (100.0, 10.0)))
    assert len(cusps) == 13 and cusps[0] == 0.0 and cusps[1] == 10.0
    assert asc == 100.0
    cusps, _ = normalize_houses({"cusp": [99.0] + CUSPS, "asc": 5.0})
    assert cusps[0] == 0.0 and cusps[12] == CUSPS[11]
    with pytest.raises(HouseComputationFailed):
        normalize_houses({"cusps": CUSPS})
    with pytest.raises(HouseComputationFailed):
        normalize_houses({"angles": [1, 2, 3], "ascendant": 1.0})


def test_rasi_from_direct_provider():
    adapter = EphemerisAdapter(_settings(), FakeSwe())
    rasi = compute_rasi(adapter, 2447907.0, 0.0, 0.0)
    pos = rasi.frame.positions
    assert rasi.engine == "MOSEPH"
    assert pos["Sun"] == pytest.approx(10.0)  # 370 reduced
    assert pos["Ketu"] == pytest.approx((pos["Rahu"] + 180.0) % 360.0)
    assert len(pos) == 12
    assert rasi.frame.ascendant == pytest.approx(76.0)
    assert rasi.frame.cusps[0] == 0.0
    assert rasi.frame.cusps[1] == pytest.approx(346.0)


def test_rasi_from_callback_provider():
    adapter = EphemerisAdapter(_settings(), CallbackSwe())
    rasi = compute_rasi(adapter, 2447907.0, 0.0, 0.0, "W")
    assert rasi.frame.positions["Moon"] == pytest.approx(21.0)
    assert rasi.speeds["Moon"] == -0.5
    assert rasi.frame.ascendant == pytest.approx(76.0)


def test_fallback_restarts_whole_body_set():
    calls = []
    provider = FakeSwe(fail={swe.FLG_SWIEPH: swe.SATURN}, calls=calls)
    adapter = EphemerisAdapter(_settings(["sepl_18.se1"]), provider)
    rasi = compute_rasi(adapter, 2447907.0, 0.0, 0.0)
    assert rasi.engine == "MOSEPH"
    moseph_bodies = [b for e, b in calls if e == swe.FLG_MOSEPH]
    # second engine computes every body again, starting from the Sun
    assert moseph_bodies[0] == swe.SUN
    assert len(moseph_bodies) == len(ephem.BODIES)
    swieph_bodies = [b for e, b in calls if e == swe.FLG_SWIEPH]
    assert swieph_bodies[-1] == swe.SATURN


def test_forced_primary_downgrade_falls_back():
    class Downgrading(FakeSwe):
        def calc_ut(self, jd, body, flags):
            # the library reports Moshier in the return flag when files are missing
            return ((50.0, 0.0, 1.0, 1.0, 0.0, 0.0), (flags & ~swe.FLG_SWIEPH) | swe.FLG_MOSEPH)

    adapter = EphemerisAdapter(_settings(), Downgrading())
    rasi = compute_rasi(adapter, 2447907.0, 0.0, 0.0, force_engine="SWIEPH")
    assert rasi.engine == "MOSEPH"
    assert rasi.frame.positions["Sun"] == 50.0


def test_all_engines_exhausted_is_attributed():
    provider = FakeSwe(fail={swe.FLG_SWIEPH: swe.MOON, swe.FLG_MOSEPH: swe.MOON})
    adapter = EphemerisAdapter(_settings(["sepl_18.se1"]), provider)
    with pytest.raises(EphemerisFailure) as info:
        compute_rasi(adapter, 2447907.0, 0.0, 0.0)
    err = info.value
    assert err.kind == "EphemerisFailure"
    assert "Moon" in err.message
    assert err.details["body"] == "Moon"
    assert "not found" in err.details["serr"]
    assert err.details["engines"] == ["SWIEPH", "MOSEPH"]
    assert err.details["jd_ut"] == 2447907.0
    assert err.details["ephe_files"] == ["sepl_18.se1"]


def test_unrecognised_house_shape():
    class BadHouses(FakeSwe):
        def houses(self, jd, lat, lon, hsys):
            return {"something": "else"}

    adapter = EphemerisAdapter(_settings(), BadHouses())
    with pytest.raises(HouseComputationFailed) as info:
        compute_rasi(adapter, 2447907.0, 0.0, 0.0)
    assert info.value.details["jd_ut"] == 2447907.0


def test_sidereal_time_field_names():
    adapter = EphemerisAdapter(_settings(), FakeSwe())
    assert adapter.sidereal_time(2447907.0) == 6.0


def test_house_code_mapping():
    assert house_code(None) == "P"
    assert house_code("placidus") == "P"
    assert house_code("whole_sign") == "W"
    assert house_code("equal") == "E"
    assert house_code("p") == "P"
    assert house_code("Z") is None
    assert house_code("G") is None


def test_library_house_tuples_are_zero_indexed():
    adapter = EphemerisAdapter(_settings(), swe)
    for hsys in ("P", "G"):
        raw_cusps, raw_ascmc = swe.houses(2447907.0, 13.0, 80.0, hsys.encode())
        cusps, asc = adapter.compute_houses(2447907.0, 13.0, 80.0, hsys)
        assert len(cusps) == 13 and cusps[0] == 0.0
        assert cusps[1:] == pytest.approx(list(raw_cusps[:12]))
        assert asc == pytest.approx(raw_ascmc[0])


def test_ayanamsa_failure_is_an_ephemeris_failure():
    class NoAyanamsa(FakeSwe):
        get_ayanamsa_ut = None

    adapter = EphemerisAdapter(_settings(), NoAyanamsa())
    with pytest.raises(EphemerisFailure) as info:
        compute_rasi(adapter, 2447907.0, 0.0, 0.0)
    assert info.value.details["engine"] == "MOSEPH"
    assert info.value.details["jd_ut"] == 2447907.0


def test_retrograde_flags_follow_speed():
    adapter = EphemerisAdapter(_settings(), CallbackSwe())
    rasi = compute_rasi(adapter, 2447907.0, 0.0, 0.0)
    flags = retrograde_flags(rasi.speeds)
    assert flags["Moon"] is True
    assert flags["Ketu"] == flags["Rahu"]
    assert retrograde_flags({"Sun": 1.0, "Mars": None}) == {"Sun": False}
