"""Tests for scene normalisation."""

from collections import Counter

import pytest

from shoot_scheduler.models import UNSPECIFIED, CastMember, Location, TimeBucket, TimeOfDay
from shoot_scheduler.scene_parser import SceneParser, normalize_time_of_day


@pytest.fixture
def parser(settings):
    return SceneParser(settings)


class TestTimeOfDay:
    """Test time-of-day normalisation."""

    @pytest.mark.parametrize("value, expected", [
        ("밤", TimeOfDay.NIGHT),
        ("Day", TimeOfDay.AFTERNOON),
        ("M", TimeOfDay.MORNING),
        ("오후", TimeOfDay.AFTERNOON),
        ("새벽", TimeOfDay.DAWN),
        ("EXT. ROOFTOP - NIGHT", TimeOfDay.NIGHT),
        ("whenever", TimeOfDay.UNSPECIFIED),
        (None, TimeOfDay.UNSPECIFIED),
        (3, TimeOfDay.UNSPECIFIED),
    ])
    def test_synonyms_collapse_to_closed_set(self, value, expected):
        assert normalize_time_of_day(value) == expected

    def test_buckets(self):
        assert TimeOfDay.MORNING.bucket == TimeBucket.DAY
        assert TimeOfDay.AFTERNOON.bucket == TimeBucket.DAY
        assert TimeOfDay.DAWN.bucket == TimeBucket.NIGHT
        assert TimeOfDay.UNSPECIFIED.bucket == TimeBucket.UNSPECIFIED


class TestSceneParser:
    """Test raw record parsing."""

    def test_camel_case_record(self, parser):
        stats = Counter()
        scene = parser.parse({
            "_id": "abc",
            "sceneNumber": "12",
            "title": "Rooftop chase",
            "location": {"name": "Studio A", "groupName": "Seoul"},
            "timeOfDay": "낮",
            "nominalDuration": "3분",
            "cast": [{"role": "Detective", "name": "Kim"}, "Lee", {"role": "extra"}],
        }, 0, stats)
        assert scene.id == "abc"
        assert scene.scene_number == 12
        assert scene.location == Location("Studio A", "Seoul")
        assert scene.time_of_day == TimeOfDay.AFTERNOON
        assert scene.nominal_duration == 3
        assert scene.actual_shooting_duration == 60
        assert scene.cast[0] == CastMember(name="Kim", role="Detective")
        assert scene.actors == ["Kim", "Lee"]
        assert stats["invalid_cast"] == 1

    def test_empty_record_gets_defaults_and_messages(self, parser):
        scenes, messages = parser.parse_all([{}])
        scene = scenes[0]
        assert scene.id == "scene-1"
        assert scene.scene_number == 1
        assert scene.location == Location(UNSPECIFIED, UNSPECIFIED)
        assert scene.time_of_day == TimeOfDay.UNSPECIFIED
        assert scene.actual_shooting_duration == 100
        assert any("no shooting location" in m for m in messages)
        assert any("no location group" in m for m in messages)
        assert any("unknown time of day" in m for m in messages)
        assert any("5 minutes was assumed" in m for m in messages)

    def test_location_as_plain_string(self, parser):
        scene = parser.parse({"location": "Harbor"})
        assert scene.location.name == "Harbor"
        assert scene.location.group_name == UNSPECIFIED

    def test_non_object_record_is_read_as_empty(self, parser):
        scenes, messages = parser.parse_all(["oops"])
        assert scenes[0].location.name == UNSPECIFIED
        assert any("were not objects" in m for m in messages)

    def test_well_formed_records_produce_no_messages(self, parser, scene_factory):
        _, messages = parser.parse_all([scene_factory(1), scene_factory(2, time_of_day="night")])
        assert messages == []

    def test_departments_and_props(self, parser):
        scene = parser.parse({
            "equipment": {
                "cinematography": {"cameras": ["Alexa"], "lenses": ["35mm"]},
                "lighting": "HMI",
                "catering": {"urn": ["tea"]},
            },
            "crew": {"direction": {"director": ["Park"]}},
            "props": {"character_props": ["sword"], "setProps": ["table"]},
            "costumes": "trench coat",
        })
        assert scene.equipment == {
            "cinematography": {"cameras": ["Alexa"], "lenses": ["35mm"]},
            "lighting": {"general": ["HMI"]},
        }
        assert scene.crew == {"direction": {"director": ["Park"]}}
        assert scene.props == ["sword", "table"]
        assert scene.costumes == ["trench coat"]
        assert scene.equipment_signature == ("35mm", "Alexa", "HMI")

    def test_raw_time_of_day_is_kept_in_output(self, parser):
        scene = parser.parse({"time_of_day": "EXT. ROOF - NIGHT"})
        assert scene.time_of_day == TimeOfDay.NIGHT
        assert scene.to_dict()["raw_time_of_day"] == "EXT. ROOF - NIGHT"
