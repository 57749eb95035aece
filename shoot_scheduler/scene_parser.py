"""
Scene normalisation.

Scenes come from the scene store in whatever shape the editor saved them:
camelCase or snake_case keys, durations as text, cast as strings or
{role, name} records, time of day in Korean, English or single-letter codes.
SceneParser turns them into Scene objects and never raises on bad data;
every coercion is counted and surfaced as a human-readable message.
"""

import logging
from collections import Counter
from typing import Any, Dict, Iterable, List, Optional, Tuple

from .config import SchedulerSettings, get_settings
from .duration import DurationEstimator
from .models import DEPARTMENTS, UNSPECIFIED, CastMember, Location, Scene, TimeOfDay

_TIME_OF_DAY_SYNONYMS = {
    TimeOfDay.MORNING: ("morning", "am", "m", "아침", "오전"),
    TimeOfDay.AFTERNOON: ("afternoon", "day", "daytime", "noon", "pm", "d", "낮", "오후", "주간"),
    TimeOfDay.NIGHT: ("night", "nite", "evening", "n", "e", "밤", "저녁", "야간"),
    TimeOfDay.DAWN: ("dawn", "sunrise", "daybreak", "새벽"),
}
_TIME_OF_DAY_LOOKUP = {
    synonym: time_of_day
    for time_of_day, synonyms in _TIME_OF_DAY_SYNONYMS.items()
    for synonym in synonyms
}


def normalize_time_of_day(value: Any) -> TimeOfDay:
    """Collapse every known spelling of a time of day into the closed enum"""
    if isinstance(value, TimeOfDay):
        return value
    if not isinstance(value, str):
        return TimeOfDay.UNSPECIFIED
    key = value.strip().casefold()
    if key in _TIME_OF_DAY_LOOKUP:
        return _TIME_OF_DAY_LOOKUP[key]
    # Slug lines like "EXT. ROOFTOP - NIGHT" carry the time after the last dash
    if "-" in key:
        return normalize_time_of_day(key.rsplit("-", 1)[1])
    return TimeOfDay.UNSPECIFIED


def _first(raw: Dict[str, Any], *keys: str, default: Any = None) -> Any:
    for key in keys:
        if key in raw and raw[key] is not None:
            return raw[key]
    return default


def _as_text(value: Any) -> str:
    if value is None:
        return ""
    return str(value).strip()


def _as_list(value: Any) -> List[str]:
    if value is None:
        return []
    if isinstance(value, str):
        return [value.strip()] if value.strip() else []
    if isinstance(value, (list, tuple)):
        return [_as_text(v) for v in value if _as_text(v)]
    return [_as_text(value)] if _as_text(value) else []


class SceneParser:
    """Turns raw scene-store records into normalised Scenes, collecting coercion messages"""

    def __init__(self, settings: Optional[SchedulerSettings] = None,
                 logger: Optional[logging.Logger] = None):
        self.settings = settings or get_settings()
        self._logger = logger or logging.getLogger(__name__)
        self.durations = DurationEstimator(self.settings, self._logger)

    def parse_all(self, raw_scenes: Iterable[Dict[str, Any]]) -> Tuple[List[Scene], List[str]]:
        """Parse every scene; returns the scenes and the non-fatal coercion messages"""
        parsing_stats = Counter()
        scenes = [self.parse(raw, index, parsing_stats) for index, raw in enumerate(raw_scenes)]
        messages = self._build_messages(parsing_stats)
        if messages:
            self._logger.info("Scene parsing coerced fields: %s", dict(parsing_stats))
        return scenes, messages

    def parse(self, raw: Dict[str, Any], index: int = 0,
              parsing_stats: Optional[Counter] = None) -> Scene:
        """Normalise one record, counting coercions into ``parsing_stats``"""
        if parsing_stats is None:
            parsing_stats = Counter()
        if not isinstance(raw, dict):
            parsing_stats["invalid_record"] += 1
            raw = {}

        scene_number = self._parse_scene_number(raw, index, parsing_stats)
        scene_id = _as_text(_first(raw, "id", "_id")) or f"scene-{scene_number}"

        nominal_raw = _first(raw, "nominal_duration", "nominalDuration",
                             "estimated_duration", "estimatedDuration")
        if not self.durations.is_valid(nominal_raw):
            parsing_stats["default_duration"] += 1
        nominal = self.durations.parse(nominal_raw)

        raw_time = _first(raw, "time_of_day", "timeOfDay", default="")
        time_of_day = normalize_time_of_day(raw_time)
        if time_of_day == TimeOfDay.UNSPECIFIED:
            parsing_stats["unspecified_time_of_day"] += 1

        return Scene(
            id=scene_id,
            scene_number=scene_number,
            title=_as_text(raw.get("title")) or f"Scene {scene_number}",
            description=_as_text(raw.get("description")),
            location=self._parse_location(raw.get("location"), parsing_stats),
            time_of_day=time_of_day,
            nominal_duration=nominal,
            actual_shooting_duration=self.durations.actual(nominal),
            cast=self._parse_cast(raw.get("cast"), parsing_stats),
            equipment=self._parse_departments(raw.get("equipment"), "equipment", parsing_stats),
            crew=self._parse_departments(raw.get("crew"), "crew", parsing_stats),
            props=self._parse_props(raw.get("props")),
            costumes=_as_list(raw.get("costumes")),
            camera_angle=_as_text(_first(raw, "camera_angle", "cameraAngle")),
            camera_work=_as_text(_first(raw, "camera_work", "cameraWork")),
            raw_time_of_day=_as_text(raw_time),
        )

    def _parse_scene_number(self, raw: Dict[str, Any], index: int, parsing_stats: Counter) -> int:
        value = _first(raw, "scene_number", "sceneNumber", "scene")
        try:
            number = int(str(value).strip())
        except (TypeError, ValueError):
            parsing_stats["default_scene_number"] += 1
            return index + 1
        return number

    def _parse_location(self, value: Any, parsing_stats: Counter) -> Location:
        if isinstance(value, str):
            value = {"name": value}
        if not isinstance(value, dict):
            value = {}
        name = _as_text(value.get("name"))
        group = _as_text(_first(value, "group_name", "groupName"))
        if not name:
            parsing_stats["unspecified_location"] += 1
            name = UNSPECIFIED
        if not group:
            parsing_stats["unspecified_group"] += 1
            group = UNSPECIFIED
        return Location(name=name, group_name=group)

    def _parse_cast(self, value: Any, parsing_stats: Counter) -> List[CastMember]:
        if isinstance(value, dict):
            value = [value]
        if not isinstance(value, (list, tuple)):
            if value not in (None, ""):
                parsing_stats["invalid_cast"] += 1
            return []
        cast = []
        for entry in value:
            if isinstance(entry, str) and entry.strip():
                cast.append(CastMember(name=entry.strip()))
            elif isinstance(entry, dict) and _as_text(entry.get("name")):
                cast.append(CastMember(name=_as_text(entry.get("name")),
                                       role=_as_text(entry.get("role"))))
            else:
                parsing_stats["invalid_cast"] += 1
        return cast

    def _parse_departments(self, value: Any, kind: str,
                           parsing_stats: Counter) -> Dict[str, Dict[str, List[str]]]:
        """department -> category (or role) -> items (or people)"""
        if not isinstance(value, dict):
            if value not in (None, "", [], {}):
                parsing_stats[f"invalid_{kind}"] += 1
            return {}
        parsed = {}
        for department in DEPARTMENTS:
            section = value.get(department)
            if section is None:
                continue
            if isinstance(section, dict):
                categories = {
                    category: _as_list(items)
                    for category, items in section.items()
                    if _as_list(items)
                }
            else:
                categories = {"general": _as_list(section)} if _as_list(section) else {}
            if categories:
                parsed[department] = categories
        return parsed

    def _parse_props(self, value: Any) -> List[str]:
        if isinstance(value, dict):
            props = _as_list(_first(value, "character_props", "characterProps"))
            props += _as_list(_first(value, "set_props", "setProps"))
            return props
        return _as_list(value)

    def _build_messages(self, stats: Counter) -> List[str]:
        messages = []
        if stats["unspecified_location"]:
            messages.append(
                f"{stats['unspecified_location']} scene(s) have no shooting location; "
                f"'{UNSPECIFIED}' was assigned. Please fill in the locations.")
        if stats["unspecified_group"]:
            messages.append(
                f"{stats['unspecified_group']} scene(s) have no location group; "
                f"'{UNSPECIFIED}' was assigned. Please assign a group.")
        if stats["unspecified_time_of_day"]:
            messages.append(
                f"{stats['unspecified_time_of_day']} scene(s) have an unknown time of day; "
                f"they are scheduled after day and night scenes.")
        if stats["default_duration"]:
            messages.append(
                f"{stats['default_duration']} scene(s) have a missing or invalid duration; "
                f"{self.settings.default_nominal_duration} minutes was assumed.")
        if stats["invalid_cast"]:
            messages.append(f"{stats['invalid_cast']} cast entries could not be read and were skipped.")
        if stats["default_scene_number"]:
            messages.append(
                f"{stats['default_scene_number']} scene(s) have no scene number; "
                f"input order was used.")
        if stats["invalid_record"]:
            messages.append(f"{stats['invalid_record']} scene record(s) were not objects and were read as empty.")
        return messages
