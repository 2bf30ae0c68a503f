import random

import pytest

from catalog import filter_experiments
from schemas import (
    Category,
    CurriculumStage,
    CurriculumUnitCreate,
    Difficulty,
    ExperimentFilter,
    ExperimentResponse,
)
from storage import MemStorage

WORDS = ["volcano", "Rainbow", "density", "seed", "magnet", "CRYSTAL", "orbit", "fossil"]


def make_experiment(rng, experiment_id):
    return ExperimentResponse(
        id=experiment_id,
        title=f"{rng.choice(WORDS)} lab {experiment_id}",
        description=f"Explore {rng.choice(WORDS)} and {rng.choice(WORDS)}",
        category=rng.choice(list(Category)),
        curriculum_stage=rng.choice(list(CurriculumStage)),
        difficulty=rng.choice(list(Difficulty)),
        duration=rng.randint(5, 60),
        materials_needed=["water"],
        household_items_only=rng.random() < 0.5,
        steps=[{"step_number": 1, "title": "Go", "description": "Do it"}],
        science_explained="Science.",
        learning_outcomes=["Learn"],
    )


def make_filter(rng, unit_codes):
    fields = {}
    if rng.random() < 0.4:
        fields["category"] = rng.choice(list(Category))
    if rng.random() < 0.4:
        fields["curriculum_stage"] = rng.choice(list(CurriculumStage))
    if rng.random() < 0.4:
        fields["difficulty"] = rng.choice(list(Difficulty))
    if rng.random() < 0.4:
        fields["household_items_only"] = rng.random() < 0.5
    if rng.random() < 0.4:
        fields["max_duration"] = rng.randint(0, 70)
    if rng.random() < 0.4:
        fields["search_query"] = rng.choice(WORDS + ["earth", "LAB", "zzz"]).swapcase()
    if rng.random() < 0.3:
        fields["curriculum_unit_id"] = rng.choice(unit_codes + ["no-such-unit"])
    return ExperimentFilter(**fields)


def satisfies(exp, f, members):
    """Independent restatement of every filter predicate"""
    checks = []
    if f.curriculum_unit_id:
        checks.append(exp.id in members.get(f.curriculum_unit_id, set()))
    if f.category:
        checks.append(exp.category == f.category)
    if f.curriculum_stage:
        checks.append(exp.curriculum_stage == f.curriculum_stage)
    if f.difficulty:
        checks.append(exp.difficulty == f.difficulty)
    if f.household_items_only:
        checks.append(exp.household_items_only)
    if f.max_duration is not None:
        checks.append(exp.duration <= f.max_duration)
    if f.search_query:
        q = f.search_query.lower()
        checks.append(q in exp.title.lower() or q in exp.description.lower() or q in exp.category.lower())
    return all(checks)


def test_no_filter_returns_catalog_in_order():
    rng = random.Random(1)
    experiments = [make_experiment(rng, i) for i in range(1, 21)]
    assert filter_experiments(experiments) == experiments
    assert filter_experiments(experiments, ExperimentFilter()) == experiments


@pytest.mark.parametrize("seed", range(5))
def test_result_is_exactly_the_conjunction_of_set_filters(seed):
    rng = random.Random(seed)
    experiments = [make_experiment(rng, i) for i in range(1, 41)]
    members = {
        "unit-a": {e.id for e in experiments if rng.random() < 0.3},
        "unit-b": {e.id for e in experiments if rng.random() < 0.3},
        "unit-empty": set(),
    }
    for _ in range(100):
        f = make_filter(rng, list(members))
        result = filter_experiments(experiments, f, members.get(f.curriculum_unit_id))
        expected = [e for e in experiments if satisfies(e, f, members)]
        assert result == expected


def test_unknown_unit_yields_nothing():
    rng = random.Random(7)
    experiments = [make_experiment(rng, i) for i in range(1, 6)]
    assert filter_experiments(experiments, ExperimentFilter(curriculum_unit_id="missing"), None) == []


def test_household_false_applies_no_filter():
    rng = random.Random(3)
    experiments = [make_experiment(rng, i) for i in range(1, 11)]
    assert filter_experiments(experiments, ExperimentFilter(household_items_only=False)) == experiments


def test_seeded_store_filters(storage):
    def ids(items):
        return [e.id for e in items]

    assert ids(storage.get_all_experiments(ExperimentFilter(search_query="RAINBOW"))) == [4, 5]
    assert ids(storage.get_all_experiments(ExperimentFilter(search_query="earth"))) == [7, 8]
    assert ids(storage.get_all_experiments(ExperimentFilter(curriculum_unit_id="s1-t3"))) == [7, 8]
    assert ids(storage.get_all_experiments(
        ExperimentFilter(curriculum_unit_id="s1-t3", curriculum_stage="K-6")
    )) == [7]
    assert ids(storage.get_all_experiments(ExperimentFilter(category="Physics", max_duration=10))) == [5]
    assert storage.get_all_experiments(ExperimentFilter(curriculum_unit_id="nope")) == []


def test_existing_unit_without_experiments_yields_nothing():
    store = MemStorage()
    store.create_curriculum_unit(
        CurriculumUnitCreate(
            unit_id="lonely", stage="Stage 2", term=1, name="Lonely", description="No experiments", outcomes=[]
        )
    )
    assert store.get_all_experiments(ExperimentFilter(curriculum_unit_id="lonely")) == []
