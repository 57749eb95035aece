"""
Scene weighting.

Each scene is scored against the whole scene set on six criteria. Counting
is done once for the whole set with numpy incidence matrices, so scoring n
scenes costs O(n * actors * locations) array work instead of n^2 Python
comparisons.
"""

import logging
from typing import Dict, Hashable, List, Optional, Sequence, Tuple

import numpy as np

from .models import Scene, SceneWeight, WeightedScene

LOCATION_FACTOR = 1000
ACTOR_SCENE_FACTOR = 300
LEAD_ACTOR_BONUS = 200
LEAD_ACTOR_MIN_SCENES = 3
ACTOR_SAME_LOCATION_FACTOR = 100
ACTOR_SAME_TIME_SLOT_FACTOR = 50
TIME_SLOT_FACTOR = 200
EQUIPMENT_FACTOR = 100
COMPLEXITY_FACTOR = 10
PRIORITY_BASE = 100


def _encode(values: Sequence[Hashable]) -> Tuple[np.ndarray, int]:
    """Map values to dense integer codes in first-seen order"""
    codes: Dict[Hashable, int] = {}
    encoded = np.fromiter((codes.setdefault(v, len(codes)) for v in values),
                          dtype=np.int64, count=len(values))
    return encoded, len(codes)


def _one_hot(codes: np.ndarray, width: int) -> np.ndarray:
    matrix = np.zeros((len(codes), width), dtype=np.int64)
    matrix[np.arange(len(codes)), codes] = 1
    return matrix


class WeightCalculator:
    """Scores scenes for location/actor/time-slot/equipment clustering"""

    def __init__(self, logger: Optional[logging.Logger] = None):
        self._logger = logger or logging.getLogger(__name__)

    def calculate(self, scene: Scene, all_scenes: Sequence[Scene]) -> SceneWeight:
        """Weight of one scene against the full scene list"""
        for weighted in self.calculate_all(all_scenes):
            if weighted.scene is scene:
                return weighted.weight
        # Scene not in the list: score it as if it were appended
        return self.calculate_all(list(all_scenes) + [scene])[-1].weight

    def calculate_all(self, scenes: Sequence[Scene]) -> List[WeightedScene]:
        if not scenes:
            return []

        location_codes, n_locations = _encode([s.location.name for s in scenes])
        time_codes, n_times = _encode([s.time_of_day for s in scenes])
        equipment_codes, _ = _encode([s.equipment_signature for s in scenes])

        location_counts = np.bincount(location_codes)[location_codes]
        time_counts = np.bincount(time_codes)[time_codes]
        equipment_counts = np.bincount(equipment_codes)[equipment_codes]

        actor_scores = self._actor_scores(scenes, location_codes, n_locations,
                                          time_codes, n_times)

        durations = np.array([s.actual_shooting_duration for s in scenes], dtype=np.int64)
        numbers = np.array([s.scene_number for s in scenes], dtype=np.int64)

        weights = []
        for i, scene in enumerate(scenes):
            weight = SceneWeight(
                location=int(location_counts[i]) * LOCATION_FACTOR,
                actor=int(actor_scores[i]),
                time_slot=int(time_counts[i]) * TIME_SLOT_FACTOR,
                equipment=int(equipment_counts[i]) * EQUIPMENT_FACTOR,
                complexity=int(durations[i]) * COMPLEXITY_FACTOR,
                priority=PRIORITY_BASE - int(numbers[i]),
            )
            weights.append(WeightedScene(scene=scene, weight=weight))

        self._logger.debug("Weighted %d scenes across %d locations", len(scenes), n_locations)
        return weights

    def _actor_scores(self, scenes: Sequence[Scene], location_codes: np.ndarray, n_locations: int,
                      time_codes: np.ndarray, n_times: int) -> np.ndarray:
        """Sum over each scene's cast of the actor idle-time terms"""
        actor_index: Dict[str, int] = {}
        for scene in scenes:
            for actor in scene.actors:
                actor_index.setdefault(actor, len(actor_index))
        if not actor_index:
            return np.zeros(len(scenes), dtype=np.int64)

        # incidence[i, a] == 1 when actor a appears in scene i
        incidence = np.zeros((len(scenes), len(actor_index)), dtype=np.int64)
        for i, scene in enumerate(scenes):
            for actor in scene.actors:
                incidence[i, actor_index[actor]] = 1

        scene_counts = incidence.sum(axis=0)
        per_actor = scene_counts * ACTOR_SCENE_FACTOR
        per_actor = per_actor + np.where(scene_counts >= LEAD_ACTOR_MIN_SCENES, LEAD_ACTOR_BONUS, 0)
        base = incidence @ per_actor

        # actor x location / actor x time-slot scene counts
        actor_location = incidence.T @ _one_hot(location_codes, n_locations)
        actor_time = incidence.T @ _one_hot(time_codes, n_times)

        rows = np.arange(len(scenes))
        same_location = (incidence @ actor_location)[rows, location_codes]
        same_time = (incidence @ actor_time)[rows, time_codes]

        return (base
                + same_location * ACTOR_SAME_LOCATION_FACTOR
                + same_time * ACTOR_SAME_TIME_SLOT_FACTOR)
