from pathlib import Path

import pytest

from services.listing_normalizer import NumberFormatter, normalize_feed
from services.xml_decoder import FeedParseError

FIXTURES = Path(__file__).parent / "fixtures"


def _read_fixture(name: str) -> bytes:
    return (FIXTURES / name).read_bytes()


def test_normalize_feed_end_to_end():
    cars = normalize_feed(_read_fixture("finn_two_entries.xml"), NumberFormatter())

    assert len(cars) == 2
    first, second = cars

    assert first.title == "Volkswagen Golf 1.5 TSI"
    assert first.price == 250000
    assert first.price_text == "250 000 kr"
    assert first.mileage == 45000
    assert first.mileage_text == "45 000 km"
    assert first.model_year == 2020
    assert first.image_url == "https://images.finncdn.no/dynamic/default/item/1001/golf.jpg"
    assert first.ad_url == "https://www.finn.no/car/used/ad.html?finnkode=1001"

    assert second.title == "Toyota Yaris"
    assert second.price == 99000
    assert second.price_text == "99 000 kr"
    assert second.mileage is None
    assert second.mileage_text == ""
    assert second.model_year is None
    assert second.image_url is None
    assert second.ad_url is None


def test_normalize_feed_handles_alternative_shapes():
    cars = normalize_feed(_read_fixture("finn_mixed_shapes.xml"), NumberFormatter())

    tesla, skoda, volvo = cars
    assert tesla.title == "Tesla Model 3 Long Range"
    assert tesla.model_year == 2021
    assert tesla.mileage == 32500
    assert tesla.mileage_text == "32 500 km"
    assert tesla.price == 349900
    assert tesla.price_text == "349 900 kr"
    assert tesla.image_url == "https://images.finncdn.no/tesla.jpg"
    assert tesla.ad_url == "https://www.finn.no/car/used/ad.html?finnkode=2001"

    assert skoda.model_year is None
    assert skoda.mileage is None
    assert skoda.price is None
    assert skoda.price_text == ""
    assert skoda.image_url == "https://images.finncdn.no/octavia-thumb.jpg"

    assert volvo.title == "Volvo V90"
    assert volvo.price is None
    assert volvo.mileage_text == ""


@pytest.mark.parametrize("fixture", ["finn_two_entries.xml", "finn_mixed_shapes.xml"])
def test_display_text_present_iff_value_present(fixture):
    for car in normalize_feed(_read_fixture(fixture), NumberFormatter()):
        assert (car.price is None) == (car.price_text == "")
        assert (car.mileage is None) == (car.mileage_text == "")
        for url in (car.image_url, car.ad_url):
            assert url is None or not url.startswith("http://")


def test_normalize_feed_keeps_order_and_applies_limit():
    cars = normalize_feed(_read_fixture("finn_mixed_shapes.xml"), NumberFormatter(), limit=2)
    assert [car.title for car in cars] == ["Tesla Model 3 Long Range", "Skoda Octavia"]


def test_empty_feed_yields_no_listings():
    assert normalize_feed("<feed xmlns='http://www.w3.org/2005/Atom'/>", NumberFormatter()) == []


def test_malformed_feed_raises():
    with pytest.raises(FeedParseError):
        normalize_feed("<feed><entry>", NumberFormatter())


def test_number_formatter_groups_thousands():
    formatter = NumberFormatter()
    assert formatter.format_number(0) == "0"
    assert formatter.format_number(999) == "999"
    assert formatter.format_number(1234567) == "1 234 567"
    assert formatter.format_with_unit(None, "kr") == ""


def test_number_formatter_custom_separator():
    formatter = NumberFormatter(thousands_separator=".")
    assert formatter.format_with_unit(250000, "kr") == "250.000 kr"
