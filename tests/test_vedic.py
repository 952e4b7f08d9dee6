from vedic_api.services.constants import TABLE_ORDER
from vedic_api.services.vedic import NAK_SIZE, NAKSHATRAS, PADA_SIZE, nakshatra_of, nakshatra_table


def test_boundary_belongs_to_next_nakshatra():
    nk = nakshatra_of(NAK_SIZE)
    assert nk.index == 1
    assert nk.name == "Bharani"
    assert nk.pada == 1
    assert nk.lord == "Venus"


def test_pada_and_lord_cycle():
    assert nakshatra_of(0.0).pada == 1
    assert nakshatra_of(PADA_SIZE * 3 + 0.01).pada == 4
    assert nakshatra_of(359.99).name == "Revati"
    assert nakshatra_of(359.99).lord == "Mercury"
    # Magha (index 9) restarts the lord cycle at Ketu
    assert nakshatra_of(9 * NAK_SIZE + 1).lord == "Ketu"
    assert nakshatra_of(-1.0).name == "Revati"


def test_table_has_thirteen_rows_in_order():
    positions = {name: (i * 29.0) % 360 for i, name in enumerate(TABLE_ORDER[1:])}
    rows = nakshatra_table(100.0, positions)
    assert [r.body for r in rows] == TABLE_ORDER
    assert len(rows) == 13
    asc = rows[0]
    assert asc.sign == "Cancer"
    assert asc.nakshatra == "Pushya"
    for r in rows:
        assert r.nakshatra in NAKSHATRAS
        assert 1 <= r.pada <= 4
