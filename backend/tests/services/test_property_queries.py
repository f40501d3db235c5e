"""Property Queries — tests for aggregate reads, filtered listing and comparison.

Tests cover:
    - Inactive properties are invisible to every read path
    - Price / type / location / tenure filters and pagination metadata
    - Sorting on whitelisted columns; unknown sort keys fall back to createdAt
    - Compare: 2–3 ids, input order kept, missing ids skipped
"""

from datetime import date, timedelta
from decimal import Decimal
from uuid import uuid4

import pytest

from propertyhub.core.errors import ResourceNotFoundError, ValidationError
from propertyhub.models.property import Property
from propertyhub.services import property_queries
from propertyhub.services.property_queries import PropertyFilters
from tests.seed_data import make_user


@pytest.fixture
async def listings(seeded, test_db):
    owner = await make_user(test_db, seeded["roles"]["Owner"])
    today = date.today()
    rows = [
        Property(owner_id=owner.user_id, city="Mumbai", state="Maharashtra",
                 micro_market="BKC", property_type="Office",
                 selling_price=Decimal("50000000"), gross_rental_yield=Decimal("8.5"),
                 lease_end_date=today + timedelta(days=365 * 6)),
        Property(owner_id=owner.user_id, city="Pune", state="Maharashtra",
                 micro_market="Hinjewadi", property_type="Retail",
                 selling_price=Decimal("12000000"), gross_rental_yield=Decimal("7.0"),
                 lease_end_date=today + timedelta(days=365 * 2)),
        Property(owner_id=owner.user_id, city="Bengaluru", state="Karnataka",
                 micro_market="Whitefield", property_type="Office",
                 selling_price=Decimal("30000000"), gross_rental_yield=Decimal("9.1")),
        Property(owner_id=owner.user_id, city="Mumbai", state="Maharashtra",
                 property_type="Office", selling_price=Decimal("1"), is_active=False),
    ]
    test_db.add_all(rows)
    await test_db.commit()
    return rows


async def _list(db_manager, **filters):
    return await property_queries.list_properties(db_manager, PropertyFilters(**filters))


async def test_listing_hides_inactive(db_manager, listings):
    page = await _list(db_manager)
    assert page.total == 3
    assert listings[3].property_id not in {p.property_id for p in page.items}


async def test_price_and_type_filters(db_manager, listings):
    page = await _list(db_manager, min_price=Decimal("20000000"), property_types="Office")
    assert {p.city for p in page.items} == {"Mumbai", "Bengaluru"}


async def test_city_list_is_exact_match_set(db_manager, listings):
    page = await _list(db_manager, city="Pune,Bengaluru")
    assert {p.city for p in page.items} == {"Pune", "Bengaluru"}


async def test_single_city_is_substring_match(db_manager, listings):
    page = await _list(db_manager, city="mum")
    assert [p.city for p in page.items] == ["Mumbai"]


async def test_min_tenure_filter(db_manager, listings):
    page = await _list(db_manager, min_tenure=5)
    assert [p.micro_market for p in page.items] == ["BKC"]


async def test_sort_by_price_ascending(db_manager, listings):
    page = await _list(db_manager, sort_by="sellingPrice", sort_order="asc")
    assert [p.city for p in page.items] == ["Pune", "Bengaluru", "Mumbai"]


async def test_unknown_sort_key_falls_back(db_manager, listings):
    page = await _list(db_manager, sort_by="DROP TABLE", sort_order="desc")
    assert page.total == 3


async def test_pagination_metadata(db_manager, listings):
    page = await _list(db_manager, page=2, limit=2)
    assert page.total == 3
    assert page.total_pages == 2
    assert len(page.items) == 1


async def test_limit_is_capped(db_manager, listings):
    page = await _list(db_manager, limit=10_000)
    assert page.limit == property_queries.MAX_PAGE_SIZE


async def test_get_inactive_property_is_not_found(db_manager, listings):
    with pytest.raises(ResourceNotFoundError):
        await property_queries.get_property_aggregate(db_manager, listings[3].property_id)


async def test_get_property_aggregate(db_manager, listings):
    aggregate = await property_queries.get_property_aggregate(
        db_manager, listings[0].property_id,
    )
    assert aggregate.root.micro_market == "BKC"
    assert aggregate.amenities == []


# ─── Compare ────────────────────────────────────────────────────

async def test_compare_keeps_input_order(db_manager, listings):
    ids = [str(listings[2].property_id), str(listings[0].property_id)]
    result = await property_queries.compare_properties(db_manager, ids)
    assert [a.root.property_id for a in result] == [
        listings[2].property_id, listings[0].property_id,
    ]


async def test_compare_skips_missing_ids(db_manager, listings):
    ids = [str(listings[0].property_id), str(uuid4()), str(listings[3].property_id)]
    result = await property_queries.compare_properties(db_manager, ids)
    assert [a.root.property_id for a in result] == [listings[0].property_id]


async def test_compare_with_nothing_found_is_not_found(db_manager, listings):
    with pytest.raises(ResourceNotFoundError):
        await property_queries.compare_properties(db_manager, [str(uuid4()), str(uuid4())])


@pytest.mark.parametrize("ids", [["a"], ["1", "2", "3", "4"]])
def test_compare_requires_two_or_three_ids(ids):
    with pytest.raises(ValidationError):
        property_queries.parse_compare_ids(ids)


def test_compare_rejects_malformed_ids():
    with pytest.raises(ValidationError):
        property_queries.parse_compare_ids([str(uuid4()), "not-a-uuid"])


# ─── Reference data ─────────────────────────────────────────────

async def test_catalog_lists_active_entries_by_name(db_manager, seeded):
    amenities = await property_queries.list_amenities(db_manager)
    assert [a.amenity_name for a in amenities] == ["Cafeteria", "Gym", "Power Backup"]
    caretakers = await property_queries.list_caretakers(db_manager)
    assert [c.caretaker_name for c in caretakers] == ["Acme Facilities", "Ravi Kumar"]
