from datetime import datetime, timedelta, timezone

import pytest

from models.element import AvailabilityRules, Element
from shared import time
from tools.base import decode_structured, element_unavailable_reason
from conftest import NOW


def _element(**rules):
    return Element(
        element_id="X", venue_vendor_id="VV1", name="Arch", price=10.0,
        availability_rules=AvailabilityRules(**rules),
    )


# ---------- time ----------

def test_days_until_is_floored():
    assert time.days_until(NOW + timedelta(days=10, hours=12), NOW) == 10
    assert time.days_until(NOW - timedelta(hours=1), NOW) == -1


def test_to_utc_accepts_dates_and_naive_values():
    assert time.to_utc("2025-06-15") == datetime(2025, 6, 15, tzinfo=timezone.utc)
    assert time.to_utc("2025-06-15T18:00:00Z").hour == 18
    assert time.to_utc(datetime(2025, 6, 15, 9)).tzinfo == timezone.utc


def test_fake_clock():
    time.set_fake_utcnow(NOW)
    try:
        assert time.utcnow() == NOW
    finally:
        time.clear_fake_utcnow()
    assert time.utcnow() != NOW


# ---------- structured arguments ----------

@pytest.mark.parametrize("raw,expected", [
    ('{"a": 1}', {"a": 1}),
    ('[1, 2]', [1, 2]),
    ("not json at all", "not json at all"),
    (None, None),
])
def test_decode_structured(raw, expected):
    assert decode_structured(raw) == expected


# ---------- availability ----------

def test_lead_time_boundary():
    element = _element(lead_time_days=30)

    assert element_unavailable_reason(element, NOW + timedelta(days=30), NOW) is None
    assert "lead time" in element_unavailable_reason(element, NOW + timedelta(days=29, hours=23), NOW)


def test_blackout_date():
    element = _element(blackout_dates=["2025-07-11"])

    assert "2025-07-11" in element_unavailable_reason(element, datetime(2025, 7, 11, 18, tzinfo=timezone.utc), NOW)
    assert element_unavailable_reason(element, datetime(2025, 7, 12, tzinfo=timezone.utc), NOW) is None


def test_free_text_rules_are_not_enforced():
    element = Element(
        element_id="X", venue_vendor_id="VV1", name="Arch", price=10.0, availability_rules="call first",
    )
    assert element_unavailable_reason(element, NOW, NOW) is None
