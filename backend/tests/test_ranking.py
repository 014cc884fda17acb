import pytest

from domain.models import UNNAMED_CAFE, Coordinate
from services.ranking import rank, resolve_coordinate

CENTER = Coordinate(0.0, 0.0)
METERS_PER_DEG_LAT = 111194.93


def _node(eid, meters_north, name=None):
    tags = {"amenity": "cafe"}
    if name:
        tags["name"] = name
    return {"type": "node", "id": eid, "lat": meters_north / METERS_PER_DEG_LAT, "lon": 0.0, "tags": tags}


def test_rank_orders_by_distance():
    elements = [_node(1, 500, "five"), _node(2, 100, "one"), _node(3, 900, "nine")]
    result = rank(elements, CENTER, 1500)
    assert result.names() == ["one", "five", "nine"]
    assert [round(p.distance_m) for p in result] == [100, 500, 900]


def test_empty_input_is_empty_result_not_error():
    result = rank([], CENTER, 1500)
    assert result.is_empty
    assert len(result) == 0
    assert rank(None, CENTER).is_empty


def test_way_uses_center_field():
    way = {"type": "way", "id": 7, "center": {"lat": 1.5, "lon": 2.5}, "tags": {}}
    assert resolve_coordinate(way) == Coordinate(1.5, 2.5)


def test_missing_name_defaults():
    result = rank([_node(1, 10)], CENTER)
    assert result.places[0].name == UNNAMED_CAFE


def test_tags_are_copied_onto_place():
    el = _node(1, 10, "Blue Tokai")
    el["tags"].update({"addr:street": "Hill Road", "opening_hours": "Mo-Su 08:00-23:00"})
    place = rank([el], CENTER).places[0]
    assert place.street == "Hill Road"
    assert place.opening_hours == "Mo-Su 08:00-23:00"
    assert place.identity == "node/1"


def test_elements_without_coordinates_are_skipped():
    broken = {"type": "relation", "id": 9, "tags": {"name": "Nowhere"}}
    result = rank([broken, _node(1, 50, "Somewhere")], CENTER)
    assert result.names() == ["Somewhere"]


def test_duplicate_identity_keeps_closest():
    result = rank([_node(1, 300, "far"), _node(1, 20, "near")], CENTER)
    assert len(result) == 1
    assert result.places[0].name == "near"


def test_ties_keep_input_order():
    result = rank([_node(1, 100, "first"), _node(2, 100, "second")], CENTER)
    assert result.names() == ["first", "second"]
    assert result.places[0].distance_m == pytest.approx(result.places[1].distance_m)


def test_non_object_elements_and_tags_are_tolerated():
    odd_tags = _node(2, 40)
    odd_tags["tags"] = "not a mapping"
    result = rank(["garbage", None, odd_tags, _node(1, 10, "ok")], CENTER)
    assert result.names() == ["ok", UNNAMED_CAFE]
