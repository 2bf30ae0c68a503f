# backend/storage.py
import logging
from abc import ABC, abstractmethod
from datetime import datetime
from typing import Any, Dict, List, Optional, Tuple

from sqlalchemy import func, or_

import models
from catalog import filter_experiments
from database import Base, make_engine, make_session_factory
from schemas import (
    CurriculumUnitCreate,
    CurriculumUnitResponse,
    ExperimentCreate,
    ExperimentFilter,
    ExperimentResponse,
    ProgressResponse,
    ProgressUpsert,
    QuizAttemptResponse,
    QuizCreate,
    QuizQuestionCreate,
    QuizQuestionResponse,
    QuizResponse,
    UserRecord,
)
from seed import seed_storage

logger = logging.getLogger(__name__)

FEATURED_COUNT = 6

# Signed 64-bit range of an SQL INTEGER column
SQL_INT_MIN = -(2 ** 63)
SQL_INT_MAX = 2 ** 63 - 1


def _storable(*ids: int) -> bool:
    return all(SQL_INT_MIN <= i <= SQL_INT_MAX for i in ids)


class Storage(ABC):
    """Everything the API needs from a backend"""

    # ---------- experiments ----------

    @abstractmethod
    def get_all_experiments(self, filters: Optional[ExperimentFilter] = None) -> List[ExperimentResponse]:
        ...

    @abstractmethod
    def get_experiment(self, experiment_id: int) -> Optional[ExperimentResponse]:
        ...

    @abstractmethod
    def get_featured_experiments(self, limit: int = FEATURED_COUNT) -> List[ExperimentResponse]:
        ...

    @abstractmethod
    def create_experiment(self, data: ExperimentCreate) -> ExperimentResponse:
        ...

    @abstractmethod
    def set_related_experiments(self, experiment_id: int, related_ids: List[int]) -> None:
        ...

    def get_related_experiments(self, experiment_id: int) -> List[ExperimentResponse]:
        experiment = self.get_experiment(experiment_id)
        if experiment is None or not experiment.related_experiments:
            return []
        related = (self.get_experiment(i) for i in experiment.related_experiments)
        return [exp for exp in related if exp is not None]

    # ---------- users ----------

    @abstractmethod
    def get_user(self, user_id: int) -> Optional[UserRecord]:
        ...

    @abstractmethod
    def get_user_by_email(self, email: str) -> Optional[UserRecord]:
        ...

    @abstractmethod
    def create_user(self, email: str, full_name: str, hashed_password: str, role: str = "student") -> UserRecord:
        ...

    # ---------- progress ----------

    @abstractmethod
    def get_progress(self, user_id: int, experiment_id: int) -> Optional[ProgressResponse]:
        ...

    @abstractmethod
    def get_all_progress(self, user_id: int) -> List[ProgressResponse]:
        ...

    @abstractmethod
    def _save_progress(self, user_id: int, experiment_id: int, changes: Dict[str, Any]) -> ProgressResponse:
        """Create or update the (user, experiment) record with exactly `changes`"""

    def upsert_progress(self, user_id: int, data: ProgressUpsert) -> ProgressResponse:
        """Only the fields present in the request are written"""
        changes = data.model_dump(include={"completed", "notes", "completed_at"}, exclude_unset=True)
        if "completed" in changes and "completed_at" not in changes:
            changes["completed_at"] = datetime.utcnow() if changes["completed"] else None
        return self._save_progress(user_id, data.experiment_id, changes)

    def update_progress_notes(self, user_id: int, experiment_id: int, notes: str) -> ProgressResponse:
        return self._save_progress(user_id, experiment_id, {"notes": notes})

    def mark_experiment_complete(self, user_id: int, experiment_id: int, completed: bool) -> ProgressResponse:
        return self._save_progress(
            user_id,
            experiment_id,
            {"completed": completed, "completed_at": datetime.utcnow() if completed else None},
        )

    # ---------- quizzes ----------

    @abstractmethod
    def get_quiz(self, quiz_id: int) -> Optional[QuizResponse]:
        ...

    @abstractmethod
    def get_quiz_by_experiment(self, experiment_id: int) -> Optional[QuizResponse]:
        ...

    @abstractmethod
    def get_quiz_questions(self, quiz_id: int) -> List[QuizQuestionResponse]:
        """Questions ordered by order_index"""

    @abstractmethod
    def create_quiz(self, data: QuizCreate) -> QuizResponse:
        ...

    @abstractmethod
    def create_quiz_question(self, data: QuizQuestionCreate) -> QuizQuestionResponse:
        ...

    @abstractmethod
    def create_quiz_attempt(
        self, user_id: int, quiz_id: int, score: int, answers: List[int], passed: bool
    ) -> QuizAttemptResponse:
        ...

    @abstractmethod
    def get_quiz_attempts(self, user_id: int, quiz_id: int) -> List[QuizAttemptResponse]:
        """Newest first"""

    # ---------- curriculum ----------

    @abstractmethod
    def get_all_curriculum_units(self) -> List[CurriculumUnitResponse]:
        ...

    @abstractmethod
    def get_curriculum_units_by_stage(self, stage: str) -> List[CurriculumUnitResponse]:
        ...

    @abstractmethod
    def get_curriculum_unit(self, unit_id: str) -> Optional[CurriculumUnitResponse]:
        ...

    @abstractmethod
    def create_curriculum_unit(self, data: CurriculumUnitCreate) -> CurriculumUnitResponse:
        ...

    @abstractmethod
    def link_experiment_to_unit(self, experiment_id: int, unit_id: str) -> None:
        ...

    @abstractmethod
    def get_experiment_curriculum_units(self, experiment_id: int) -> List[CurriculumUnitResponse]:
        ...

    def is_empty(self) -> bool:
        return not self.get_featured_experiments(limit=1)


def _unit_sort_key(unit: CurriculumUnitResponse) -> Tuple[str, int, int]:
    return (unit.stage, unit.term, unit.id)


class MemStorage(Storage):
    """Process-lifetime storage kept in dicts; reset on restart"""

    def __init__(self):
        self.experiments: Dict[int, ExperimentResponse] = {}
        self.users: Dict[int, UserRecord] = {}
        self.progress: Dict[Tuple[int, int], ProgressResponse] = {}
        self.quizzes: Dict[int, QuizResponse] = {}
        self.questions: Dict[int, QuizQuestionResponse] = {}
        self.attempts: List[QuizAttemptResponse] = []
        self.units: Dict[str, CurriculumUnitResponse] = {}
        self.unit_experiments: Dict[str, set] = {}  # unit code -> experiment ids
        self._ids: Dict[str, int] = {}

    def _next_id(self, kind: str) -> int:
        self._ids[kind] = self._ids.get(kind, 0) + 1
        return self._ids[kind]

    # ---------- experiments ----------

    def get_all_experiments(self, filters=None):
        unit_members = None
        if filters is not None and filters.curriculum_unit_id:
            unit_members = self.unit_experiments.get(filters.curriculum_unit_id)
        return filter_experiments(self.experiments.values(), filters, unit_members)

    def get_experiment(self, experiment_id):
        return self.experiments.get(experiment_id)

    def get_featured_experiments(self, limit=FEATURED_COUNT):
        return list(self.experiments.values())[:limit]

    def create_experiment(self, data):
        experiment = ExperimentResponse(id=self._next_id("experiment"), **data.model_dump())
        self.experiments[experiment.id] = experiment
        return experiment

    def set_related_experiments(self, experiment_id, related_ids):
        experiment = self.experiments[experiment_id]
        self.experiments[experiment_id] = experiment.model_copy(update={"related_experiments": list(related_ids)})

    # ---------- users ----------

    def get_user(self, user_id):
        return self.users.get(user_id)

    def get_user_by_email(self, email):
        return next((u for u in self.users.values() if u.email == email), None)

    def create_user(self, email, full_name, hashed_password, role="student"):
        user = UserRecord(
            id=self._next_id("user"),
            email=email,
            full_name=full_name,
            hashed_password=hashed_password,
            role=role,
            created_at=datetime.utcnow(),
        )
        self.users[user.id] = user
        return user

    # ---------- progress ----------

    def get_progress(self, user_id, experiment_id):
        return self.progress.get((user_id, experiment_id))

    def get_all_progress(self, user_id):
        return [p for (owner, _), p in self.progress.items() if owner == user_id]

    def _save_progress(self, user_id, experiment_id, changes):
        key = (user_id, experiment_id)
        now = datetime.utcnow()
        existing = self.progress.get(key)
        if existing is None:
            existing = ProgressResponse(
                id=self._next_id("progress"),
                user_id=user_id,
                experiment_id=experiment_id,
                completed=False,
                created_at=now,
            )
        record = existing.model_copy(update={**changes, "updated_at": now})
        self.progress[key] = record
        return record

    # ---------- quizzes ----------

    def get_quiz(self, quiz_id):
        return self.quizzes.get(quiz_id)

    def get_quiz_by_experiment(self, experiment_id):
        return next((q for q in self.quizzes.values() if q.experiment_id == experiment_id), None)

    def get_quiz_questions(self, quiz_id):
        questions = [q for q in self.questions.values() if q.quiz_id == quiz_id]
        return sorted(questions, key=lambda q: q.order_index)

    def create_quiz(self, data):
        now = datetime.utcnow()
        quiz = QuizResponse(id=self._next_id("quiz"), created_at=now, updated_at=now, **data.model_dump())
        self.quizzes[quiz.id] = quiz
        return quiz

    def create_quiz_question(self, data):
        question = QuizQuestionResponse(id=self._next_id("question"), **data.model_dump())
        self.questions[question.id] = question
        return question

    def create_quiz_attempt(self, user_id, quiz_id, score, answers, passed):
        attempt = QuizAttemptResponse(
            id=self._next_id("attempt"),
            user_id=user_id,
            quiz_id=quiz_id,
            score=score,
            answers=list(answers),
            passed=passed,
            completed_at=datetime.utcnow(),
        )
        self.attempts.append(attempt)
        return attempt

    def get_quiz_attempts(self, user_id, quiz_id):
        mine = [a for a in self.attempts if a.user_id == user_id and a.quiz_id == quiz_id]
        return sorted(mine, key=lambda a: (a.completed_at, a.id), reverse=True)

    # ---------- curriculum ----------

    def get_all_curriculum_units(self):
        return sorted(self.units.values(), key=_unit_sort_key)

    def get_curriculum_units_by_stage(self, stage):
        return sorted((u for u in self.units.values() if u.stage == stage), key=lambda u: (u.term, u.id))

    def get_curriculum_unit(self, unit_id):
        return self.units.get(unit_id)

    def create_curriculum_unit(self, data):
        unit = CurriculumUnitResponse(id=self._next_id("unit"), created_at=datetime.utcnow(), **data.model_dump())
        self.units[unit.unit_id] = unit
        self.unit_experiments.setdefault(unit.unit_id, set())
        return unit

    def link_experiment_to_unit(self, experiment_id, unit_id):
        if unit_id not in self.units:
            raise KeyError(f"Unknown curriculum unit: {unit_id}")
        self.unit_experiments[unit_id].add(experiment_id)

    def get_experiment_curriculum_units(self, experiment_id):
        units = [self.units[code] for code, members in self.unit_experiments.items() if experiment_id in members]
        return sorted(units, key=_unit_sort_key)


class DBStorage(Storage):
    """Relational storage through SQLAlchemy; one session per operation"""

    def __init__(self, database_url: str, engine=None):
        self.engine = engine or make_engine(database_url)
        self.SessionLocal = make_session_factory(self.engine)

    def create_tables(self):
        Base.metadata.create_all(bind=self.engine)

    # ---------- experiments ----------

    def get_all_experiments(self, filters=None):
        with self.SessionLocal() as db:
            query = db.query(models.Experiment)
            if filters is not None:
                if filters.curriculum_unit_id:
                    unit = (
                        db.query(models.CurriculumUnit)
                        .filter(models.CurriculumUnit.unit_id == filters.curriculum_unit_id)
                        .first()
                    )
                    if unit is None:
                        return []
                    query = query.join(
                        models.ExperimentCurriculumUnit,
                        models.ExperimentCurriculumUnit.experiment_id == models.Experiment.id,
                    ).filter(models.ExperimentCurriculumUnit.curriculum_unit_id == unit.id)
                if filters.category:
                    query = query.filter(models.Experiment.category == filters.category)
                if filters.curriculum_stage:
                    query = query.filter(models.Experiment.curriculum_stage == filters.curriculum_stage)
                if filters.difficulty:
                    query = query.filter(models.Experiment.difficulty == filters.difficulty)
                if filters.household_items_only:
                    query = query.filter(models.Experiment.household_items_only.is_(True))
                if filters.max_duration is not None:
                    query = query.filter(models.Experiment.duration <= min(filters.max_duration, SQL_INT_MAX))
                if filters.search_query:
                    needle = filters.search_query.lower()
                    query = query.filter(
                        or_(
                            func.lower(models.Experiment.title).contains(needle, autoescape=True),
                            func.lower(models.Experiment.description).contains(needle, autoescape=True),
                            func.lower(models.Experiment.category).contains(needle, autoescape=True),
                        )
                    )
            rows = query.order_by(models.Experiment.id).all()
            return [ExperimentResponse.model_validate(row) for row in rows]

    def get_experiment(self, experiment_id):
        if not _storable(experiment_id):
            return None
        with self.SessionLocal() as db:
            row = db.get(models.Experiment, experiment_id)
            return ExperimentResponse.model_validate(row) if row else None

    def get_featured_experiments(self, limit=FEATURED_COUNT):
        with self.SessionLocal() as db:
            rows = db.query(models.Experiment).order_by(models.Experiment.id).limit(limit).all()
            return [ExperimentResponse.model_validate(row) for row in rows]

    def create_experiment(self, data):
        with self.SessionLocal() as db:
            row = models.Experiment(**data.model_dump())
            db.add(row)
            db.commit()
            db.refresh(row)
            return ExperimentResponse.model_validate(row)

    def set_related_experiments(self, experiment_id, related_ids):
        with self.SessionLocal() as db:
            row = db.get(models.Experiment, experiment_id)
            if row is None:
                raise KeyError(f"Unknown experiment: {experiment_id}")
            row.related_experiments = list(related_ids)
            db.commit()

    # ---------- users ----------

    def get_user(self, user_id):
        if not _storable(user_id):
            return None
        with self.SessionLocal() as db:
            row = db.get(models.User, user_id)
            return UserRecord.model_validate(row) if row else None

    def get_user_by_email(self, email):
        with self.SessionLocal() as db:
            row = db.query(models.User).filter(models.User.email == email).first()
            return UserRecord.model_validate(row) if row else None

    def create_user(self, email, full_name, hashed_password, role="student"):
        with self.SessionLocal() as db:
            row = models.User(email=email, full_name=full_name, hashed_password=hashed_password, role=role)
            db.add(row)
            db.commit()
            db.refresh(row)
            return UserRecord.model_validate(row)

    # ---------- progress ----------

    def _progress_query(self, db, user_id, experiment_id):
        return db.query(models.ExperimentProgress).filter(
            models.ExperimentProgress.user_id == user_id,
            models.ExperimentProgress.experiment_id == experiment_id,
        )

    def get_progress(self, user_id, experiment_id):
        if not _storable(user_id, experiment_id):
            return None
        with self.SessionLocal() as db:
            row = self._progress_query(db, user_id, experiment_id).first()
            return ProgressResponse.model_validate(row) if row else None

    def get_all_progress(self, user_id):
        if not _storable(user_id):
            return []
        with self.SessionLocal() as db:
            rows = (
                db.query(models.ExperimentProgress)
                .filter(models.ExperimentProgress.user_id == user_id)
                .order_by(models.ExperimentProgress.id)
                .all()
            )
            return [ProgressResponse.model_validate(row) for row in rows]

    def _save_progress(self, user_id, experiment_id, changes):
        with self.SessionLocal() as db:
            row = self._progress_query(db, user_id, experiment_id).first()
            if row is None:
                row = models.ExperimentProgress(user_id=user_id, experiment_id=experiment_id, completed=False)
                db.add(row)
            for name, value in changes.items():
                setattr(row, name, value)
            row.updated_at = datetime.utcnow()
            db.commit()
            db.refresh(row)
            return ProgressResponse.model_validate(row)

    # ---------- quizzes ----------

    def get_quiz(self, quiz_id):
        if not _storable(quiz_id):
            return None
        with self.SessionLocal() as db:
            row = db.get(models.Quiz, quiz_id)
            return QuizResponse.model_validate(row) if row else None

    def get_quiz_by_experiment(self, experiment_id):
        if not _storable(experiment_id):
            return None
        with self.SessionLocal() as db:
            row = (
                db.query(models.Quiz)
                .filter(models.Quiz.experiment_id == experiment_id)
                .order_by(models.Quiz.id)
                .first()
            )
            return QuizResponse.model_validate(row) if row else None

    def get_quiz_questions(self, quiz_id):
        if not _storable(quiz_id):
            return []
        with self.SessionLocal() as db:
            rows = (
                db.query(models.QuizQuestion)
                .filter(models.QuizQuestion.quiz_id == quiz_id)
                .order_by(models.QuizQuestion.order_index, models.QuizQuestion.id)
                .all()
            )
            return [QuizQuestionResponse.model_validate(row) for row in rows]

    def create_quiz(self, data):
        with self.SessionLocal() as db:
            row = models.Quiz(**data.model_dump())
            db.add(row)
            db.commit()
            db.refresh(row)
            return QuizResponse.model_validate(row)

    def create_quiz_question(self, data):
        with self.SessionLocal() as db:
            row = models.QuizQuestion(**data.model_dump())
            db.add(row)
            db.commit()
            db.refresh(row)
            return QuizQuestionResponse.model_validate(row)

    def create_quiz_attempt(self, user_id, quiz_id, score, answers, passed):
        with self.SessionLocal() as db:
            row = models.QuizAttempt(
                user_id=user_id,
                quiz_id=quiz_id,
                score=score,
                answers=list(answers),
                passed=passed,
                completed_at=datetime.utcnow(),
            )
            db.add(row)
            db.commit()
            db.refresh(row)
            return QuizAttemptResponse.model_validate(row)

    def get_quiz_attempts(self, user_id, quiz_id):
        if not _storable(user_id, quiz_id):
            return []
        with self.SessionLocal() as db:
            rows = (
                db.query(models.QuizAttempt)
                .filter(models.QuizAttempt.user_id == user_id, models.QuizAttempt.quiz_id == quiz_id)
                .order_by(models.QuizAttempt.completed_at.desc(), models.QuizAttempt.id.desc())
                .all()
            )
            return [QuizAttemptResponse.model_validate(row) for row in rows]

    # ---------- curriculum ----------

    def get_all_curriculum_units(self):
        with self.SessionLocal() as db:
            rows = db.query(models.CurriculumUnit).order_by(
                models.CurriculumUnit.stage, models.CurriculumUnit.term, models.CurriculumUnit.id
            ).all()
            return [CurriculumUnitResponse.model_validate(row) for row in rows]

    def get_curriculum_units_by_stage(self, stage):
        with self.SessionLocal() as db:
            rows = (
                db.query(models.CurriculumUnit)
                .filter(models.CurriculumUnit.stage == stage)
                .order_by(models.CurriculumUnit.term, models.CurriculumUnit.id)
                .all()
            )
            return [CurriculumUnitResponse.model_validate(row) for row in rows]

    def get_curriculum_unit(self, unit_id):
        with self.SessionLocal() as db:
            row = db.query(models.CurriculumUnit).filter(models.CurriculumUnit.unit_id == unit_id).first()
            return CurriculumUnitResponse.model_validate(row) if row else None

    def create_curriculum_unit(self, data):
        with self.SessionLocal() as db:
            row = models.CurriculumUnit(**data.model_dump())
            db.add(row)
            db.commit()
            db.refresh(row)
            return CurriculumUnitResponse.model_validate(row)

    def link_experiment_to_unit(self, experiment_id, unit_id):
        with self.SessionLocal() as db:
            unit = db.query(models.CurriculumUnit).filter(models.CurriculumUnit.unit_id == unit_id).first()
            if unit is None:
                raise KeyError(f"Unknown curriculum unit: {unit_id}")
            db.add(models.ExperimentCurriculumUnit(experiment_id=experiment_id, curriculum_unit_id=unit.id))
            db.commit()

    def get_experiment_curriculum_units(self, experiment_id):
        if not _storable(experiment_id):
            return []
        with self.SessionLocal() as db:
            rows = (
                db.query(models.CurriculumUnit)
                .join(
                    models.ExperimentCurriculumUnit,
                    models.ExperimentCurriculumUnit.curriculum_unit_id == models.CurriculumUnit.id,
                )
                .filter(models.ExperimentCurriculumUnit.experiment_id == experiment_id)
                .order_by(models.CurriculumUnit.stage, models.CurriculumUnit.term, models.CurriculumUnit.id)
                .all()
            )
            return [CurriculumUnitResponse.model_validate(row) for row in rows]


def build_storage(settings) -> Storage:
    """DBStorage when DATABASE_URL is configured, MemStorage otherwise"""
    if settings.database_url:
        logger.info("Using database storage")
        storage = DBStorage(settings.database_url)
        storage.create_tables()
    else:
        logger.info("DATABASE_URL not set - using in-memory storage")
        storage = MemStorage()

    if settings.seed_data and storage.is_empty():
        seed_storage(storage)
    return storage
