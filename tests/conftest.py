import django
import pytest
from django.conf import settings

if not settings.configured:
    settings.configure(
        INSTALLED_APPS=[],
        PRICE_TRENDS_DEFAULT_TOP_N=5,
    )
    django.setup()

from price_trends.records import TransactionRecord


def make_record(date, community, price, valuation=0.0, district="Da'an", lat=25.0, lng=121.5):
    return TransactionRecord(
        date=date,
        community=community,
        price=float(price),
        valuation=float(valuation),
        city="Taipei",
        district=district,
        lat=lat,
        lng=lng,
        address=f"{community} No. 1",
    )


@pytest.fixture
def oak_gardens():
    return [
        make_record("20230101", "Oak Gardens", 1_000_000, 1_050_000),
        make_record("20230201", "Oak Gardens", 1_100_000, 1_080_000),
        make_record("20230301", "Oak Gardens", 1_200_000, 1_150_000),
    ]


@pytest.fixture
def mixed_records():
    """Three communities in two districts spread over 2022-2023."""
    return [
        make_record("20220115", "Oak Gardens", 1_000_000, 1_000_000, lat=25.0, lng=121.0),
        make_record("20220220", "Oak Gardens", 1_050_000, 1_000_000, lat=25.2, lng=121.2),
        make_record("20230310", "Oak Gardens", 1_200_000, 1_100_000, lat=25.1, lng=121.1),
        make_record("20230312", "Oak Gardens", 1_300_000, 0, lat=25.1, lng=121.1),
        make_record("20220105", "Maple Court", 800_000, 1_000_000, district="Xinyi", lat=24.0, lng=120.0),
        make_record("20220410", "Maple Court", 900_000, 1_000_000, district="Xinyi", lat=24.0, lng=120.0),
        make_record("20230105", "Pine Tower", 2_000_000, 2_000_000, district="Xinyi", lat=23.0, lng=119.0),
    ]
