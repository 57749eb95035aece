"""Location-first ordering of weighted scenes"""

import logging
from collections import OrderedDict
from typing import Dict, List, Optional, Sequence

from .models import UNSPECIFIED, TimeBucket, WeightedScene

BUCKET_ORDER = (TimeBucket.DAY, TimeBucket.NIGHT, TimeBucket.UNSPECIFIED)


class LocationTimeSlotSorter:
    """Orders scenes by location group, then day/night/unspecified, then weight"""

    def __init__(self, logger: Optional[logging.Logger] = None):
        self._logger = logger or logging.getLogger(__name__)

    def group_by_location(self, weighted: Sequence[WeightedScene]) -> Dict[str, List[WeightedScene]]:
        groups: Dict[str, List[WeightedScene]] = OrderedDict()
        for item in weighted:
            location = item.scene.location.name or UNSPECIFIED
            groups.setdefault(location, []).append(item)
        return groups

    def sort(self, weighted: Sequence[WeightedScene]) -> List[WeightedScene]:
        ordered: List[WeightedScene] = []
        groups = self.group_by_location(weighted)
        for location, items in groups.items():
            for bucket in BUCKET_ORDER:
                in_bucket = [w for w in items if w.scene.bucket == bucket]
                ordered.extend(sorted(in_bucket, key=self._sort_key))
            self._logger.debug("Sorted location %s (%d scenes)", location, len(items))
        return ordered

    @staticmethod
    def _sort_key(item: WeightedScene):
        # Descending rank, ascending scene number on ties
        return tuple(-term for term in item.weight.rank_key) + (item.scene.scene_number,)
