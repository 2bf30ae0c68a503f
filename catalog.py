# backend/catalog.py
"""
Catalog filtering.

All filters are optional and combine with AND. Curriculum unit membership
is checked first since it usually removes most of the catalog; the other
predicates then run over what is left. Results keep store order.
"""
from typing import Iterable, List, Optional, Set

from schemas import ExperimentFilter, ExperimentResponse


def matches_search(experiment: ExperimentResponse, query: str) -> bool:
    query = query.lower()
    return (
        query in experiment.title.lower()
        or query in experiment.description.lower()
        or query in experiment.category.lower()
    )


def matches_filters(experiment: ExperimentResponse, filters: ExperimentFilter) -> bool:
    """Every predicate except curriculum unit membership"""
    if filters.category and experiment.category != filters.category:
        return False
    if filters.curriculum_stage and experiment.curriculum_stage != filters.curriculum_stage:
        return False
    if filters.difficulty and experiment.difficulty != filters.difficulty:
        return False
    if filters.household_items_only and not experiment.household_items_only:
        return False
    if filters.max_duration is not None and experiment.duration > filters.max_duration:
        return False
    if filters.search_query and not matches_search(experiment, filters.search_query):
        return False
    return True


def filter_experiments(
    experiments: Iterable[ExperimentResponse],
    filters: Optional[ExperimentFilter] = None,
    unit_members: Optional[Set[int]] = None,
) -> List[ExperimentResponse]:
    """
    Apply `filters` to `experiments`.

    `unit_members` holds the ids of the experiments linked to
    `filters.curriculum_unit_id`; pass None when that unit does not exist.
    """
    experiments = list(experiments)
    if filters is None:
        return experiments

    if filters.curriculum_unit_id:
        if not unit_members:
            return []
        experiments = [exp for exp in experiments if exp.id in unit_members]

    return [exp for exp in experiments if matches_filters(exp, filters)]
