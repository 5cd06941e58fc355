"""Unit tests for place extraction from a search feed snapshot."""

import pytest

from google_maps_place_extractor import (
    Location,
    PlaceRecord,
    extract_places,
    parse_rating,
    parse_rating_count,
)


def _card(href, link_text="", summary=None, contact=None, image=None, body=True):
    lines = []
    if summary is not None:
        lines.append(f"<div>{summary}</div>")
    if contact is not None:
        lines.append(f"<div>{contact}</div>")
    image_html = f'<img src="{image}">' if image else ""
    body_html = (
        f'<div class="fontBodyMedium"><div>Name</div><div>{"".join(lines)}</div></div>' if body else "<div>no body</div>"
    )
    return f'<div class="card"><a href="{href}">{link_text}</a>{image_html}{body_html}</div>'


def _feed(*cards):
    return f"<html><body><div role='feed'>{''.join(cards)}</div></body></html>"


@pytest.fixture
def snapshot(load_fixture):
    return load_fixture("search_feed.html")


def test_extract_places_from_feed(snapshot):
    places = extract_places(snapshot)

    assert places == [
        PlaceRecord(
            id="ChIJFaMK2shZzpQRanfJ8jGUn9U",
            formatted_address="Rua Augusta, 100",
            location=Location(latitude=-23.5614321, longitude=-46.6559123),
            primary_type="restaurante italiano",
            maps_uri=(
                "https://www.google.com/maps/place/Cantina+Roma/data=!4m7!3m6!1s0x94ce59c8da0aa315:0xd59f9431f2c9776a"
                "!8m2!3d-23.5614321!4d-46.6559123!16s%2Fg%2F11b6d1x9k2!19sChIJFaMK2shZzpQRanfJ8jGUn9U"
                "?authuser=0&hl=pt-BR&rclk=1"
            ),
            thumbnail="https://lh5.googleusercontent.com/p/AF1QipCantina=w80-h106-k-no",
            international_phone_number="(11) 3333-4444",
            rating=4.5,
            user_rating_count=128,
        ),
        PlaceRecord(
            id="ChIJoeiywbVZzpQREC09WnseP3w",
            formatted_address="Av. Paulista, 900",
            location=Location(latitude=-23.5601, longitude=-46.6572),
            primary_type="padaria",
            maps_uri=(
                "https://www.google.com/maps/place/Padaria+Central/data=!4m7!3m6!1s0x94ce59b5c1b2e8a1:0x7c3f1e7b5a3d2c10"
                "!8m2!3d-23.5601!4d-46.6572!16s%2Fg%2F1tfz8w3r!19sChIJoeiywbVZzpQREC09WnseP3w"
                "?authuser=0&hl=pt-BR&rclk=1"
            ),
            thumbnail=None,
            international_phone_number=None,
            rating=4.8,
            user_rating_count=57,
        ),
        PlaceRecord(
            id="unknown",
            formatted_address="Rua Fradique Coutinho, 50",
            location=Location(latitude=0.0, longitude=0.0),
            primary_type="bar",
            maps_uri="https://www.google.com/maps/place/Bar+do+Z%C3%A9",
            thumbnail="https://lh5.googleusercontent.com/p/AF1QipBarDoZe=w80-h106-k-no",
            international_phone_number="(11) 98888-7777",
            rating=None,
            user_rating_count=None,
        ),
    ]


def test_extract_places_is_idempotent(snapshot):
    assert extract_places(snapshot) == extract_places(snapshot)


def test_every_record_keeps_maps_uri(snapshot):
    assert all(place.maps_uri for place in extract_places(snapshot))


def test_well_formed_cards_each_produce_a_record():
    cards = [
        _card(f"/maps/place/P{i}/data=!3d1.{i}!4d2.{i}!19sID{i}?hl=en", summary=f"Cafe · Street {i}", contact="Open")
        for i in range(5)
    ]

    places = extract_places(_feed(*cards))

    assert [place.id for place in places] == ["ID0", "ID1", "ID2", "ID3", "ID4"]
    assert [place.formatted_address for place in places] == [f"Street {i}" for i in range(5)]


def test_malformed_card_is_skipped_without_affecting_others():
    cards = [
        _card("/maps/place/A/data=!19sA?x", summary="Cafe · Street A", contact="Open"),
        _card("/maps/place/B/data=!19sB?x", summary="Cafe · Street B", contact="Open", body=False),
        _card("/maps/place/C/data=!19sC?x", summary="Cafe · Street C", contact="Open"),
    ]

    places = extract_places(_feed(*cards))

    assert [place.id for place in places] == ["A", "C"]
    assert [place.formatted_address for place in places] == ["Street A", "Street C"]


def test_type_is_lowercased_and_address_only_trimmed():
    html = _feed(_card("/maps/place/A", summary="Restaurant · Open now", contact="x"))

    (place,) = extract_places(html)

    assert place.primary_type == "restaurant"
    assert place.formatted_address == "Open now"


def test_rating_tokens_use_fixed_positions():
    html = _feed(_card("/maps/place/A", link_text="4,5 stars 128 reviews", summary="Cafe", contact="x"))

    (place,) = extract_places(html)

    assert place.rating == 4.5
    assert place.user_rating_count == 128


def test_unparsable_rating_tokens_become_none():
    html = _feed(_card("/maps/place/A", link_text="Cafe Central", summary="Cafe", contact="x"))

    (place,) = extract_places(html)

    assert place.rating is None
    assert place.user_rating_count is None


def test_single_metadata_child_serves_as_first_and_last():
    html = _feed(_card("/maps/place/A", summary="Bakery · Main St"))

    (place,) = extract_places(html)

    assert place.primary_type == "bakery"
    assert place.formatted_address == "Main St"
    assert place.international_phone_number == "Main St"


def test_metadata_line_without_children_yields_defaults():
    html = _feed('<div><a href="/maps/place/A"></a><div class="fontBodyMedium"><div>Only text</div></div></div>')

    (place,) = extract_places(html)

    assert place.formatted_address == ""
    assert place.primary_type == ""
    assert place.international_phone_number is None
    assert place.thumbnail is None


def test_link_at_document_root_is_skipped():
    assert extract_places('<a href="/maps/place/A">4,5 x 3</a>') == []


def test_card_with_empty_body_is_skipped():
    html = _feed('<div><a href="/maps/place/A"></a><div class="fontBodyMedium"></div></div>')

    assert extract_places(html) == []


def test_other_links_are_ignored():
    html = _feed('<div><a href="/maps/dir/A"></a><div class="fontBodyMedium"><div><div>x</div></div></div></div>')

    assert extract_places(html) == []


def test_empty_snapshot_yields_no_records():
    assert extract_places("") == []


def test_to_dict_uses_places_api_field_names(snapshot):
    data = extract_places(snapshot)[0].to_dict()

    assert data["id"] == "ChIJFaMK2shZzpQRanfJ8jGUn9U"
    assert data["formattedAddress"] == "Rua Augusta, 100"
    assert data["location"] == {"latitude": -23.5614321, "longitude": -46.6559123}
    assert data["primaryType"] == "restaurante italiano"
    assert data["internationalPhoneNumber"] == "(11) 3333-4444"
    assert data["userRatingCount"] == 128
    assert set(data) == {
        "id",
        "formattedAddress",
        "location",
        "primaryType",
        "mapsUri",
        "thumbnail",
        "internationalPhoneNumber",
        "rating",
        "userRatingCount",
    }


@pytest.mark.parametrize(
    "token, expected",
    [("4,5", 4.5), ("3.9", 3.9), ("5", 5.0), ("abc", None), ("", None), (None, None)],
)
def test_parse_rating(token, expected):
    assert parse_rating(token) == expected


@pytest.mark.parametrize(
    "token, expected",
    [
        ("128", 128),
        ("0", 0),
        ("+128", 128),
        ("4294967296", 4294967296),
        ("1.234", None),
        ("(128)", None),
        ("-3", None),
        (None, None),
    ],
)
def test_parse_rating_count(token, expected):
    assert parse_rating_count(token) == expected
