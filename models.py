# backend/models.py
from sqlalchemy import Column, Integer, String, Text, Boolean, ForeignKey, DateTime, JSON, Index, UniqueConstraint
from sqlalchemy.orm import relationship
from datetime import datetime
from database import Base

class User(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    email = Column(String, unique=True, index=True, nullable=False)
    full_name = Column(String)
    hashed_password = Column(String, nullable=False)
    role = Column(String(20), nullable=False, default="student")  # student, teacher
    created_at = Column(DateTime, default=datetime.utcnow)

    # Relations
    progress = relationship("ExperimentProgress", back_populates="user", cascade="all, delete-orphan")
    attempts = relationship("QuizAttempt", back_populates="user", cascade="all, delete-orphan")

class Experiment(Base):
    __tablename__ = "experiments"

    id = Column(Integer, primary_key=True, index=True)
    title = Column(String(255), nullable=False)
    description = Column(Text, nullable=False)
    category = Column(String(50), nullable=False)  # Biology, Chemistry, Physics, Earth Science
    curriculum_stage = Column(String(50), nullable=False)
    difficulty = Column(String(20), nullable=False)  # beginner, intermediate, advanced
    duration = Column(Integer, nullable=False)  # minutes
    materials_needed = Column(JSON, nullable=False)
    household_items_only = Column(Boolean, nullable=False, default=False)
    thumbnail_url = Column(String(500), nullable=False, default="")
    steps = Column(JSON, nullable=False)
    science_explained = Column(Text, nullable=False)
    learning_outcomes = Column(JSON, nullable=False)
    safety_notes = Column(JSON)
    related_experiments = Column(JSON)  # list of experiment ids
    video_url = Column(String(500))

    # Relations
    quizzes = relationship("Quiz", back_populates="experiment", cascade="all, delete-orphan")
    curriculum_units = relationship(
        "CurriculumUnit", secondary="experiment_curriculum_units", back_populates="experiments", viewonly=True
    )

class ExperimentProgress(Base):
    __tablename__ = "experiment_progress"
    __table_args__ = (
        UniqueConstraint("user_id", "experiment_id", name="uq_progress_user_experiment"),
    )

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    experiment_id = Column(Integer, ForeignKey("experiments.id", ondelete="CASCADE"), nullable=False)
    completed = Column(Boolean, nullable=False, default=False)
    notes = Column(Text)
    completed_at = Column(DateTime)
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    user = relationship("User", back_populates="progress")

class Quiz(Base):
    __tablename__ = "quizzes"

    id = Column(Integer, primary_key=True, index=True)
    experiment_id = Column(Integer, ForeignKey("experiments.id", ondelete="CASCADE"), nullable=False, index=True)
    title = Column(String(255), nullable=False)
    description = Column(Text)
    passing_score = Column(Integer, nullable=False, default=70)  # percentage
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    experiment = relationship("Experiment", back_populates="quizzes")
    questions = relationship(
        "QuizQuestion", back_populates="quiz", cascade="all, delete-orphan", order_by="QuizQuestion.order_index"
    )

class QuizQuestion(Base):
    __tablename__ = "quiz_questions"

    id = Column(Integer, primary_key=True, index=True)
    quiz_id = Column(Integer, ForeignKey("quizzes.id", ondelete="CASCADE"), nullable=False, index=True)
    question_text = Column(Text, nullable=False)
    options = Column(JSON, nullable=False)
    correct_answer_index = Column(Integer, nullable=False)
    explanation = Column(Text)
    order_index = Column(Integer, nullable=False)
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    quiz = relationship("Quiz", back_populates="questions")

class QuizAttempt(Base):
    __tablename__ = "quiz_attempts"
    __table_args__ = (
        Index("idx_attempt_user_quiz", "user_id", "quiz_id"),
    )

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    quiz_id = Column(Integer, ForeignKey("quizzes.id", ondelete="CASCADE"), nullable=False)
    score = Column(Integer, nullable=False)  # percentage 0-100
    answers = Column(JSON, nullable=False)  # selected indices in question order
    passed = Column(Boolean, nullable=False)
    completed_at = Column(DateTime, default=datetime.utcnow)

    user = relationship("User", back_populates="attempts")

class CurriculumUnit(Base):
    __tablename__ = "curriculum_units"

    id = Column(Integer, primary_key=True, index=True)
    unit_id = Column(String(50), unique=True, nullable=False, index=True)  # e.g. "s1-t1"
    stage = Column(String(50), nullable=False, index=True)
    component = Column(String(50))  # Life Skills only
    term = Column(Integer, nullable=False)
    name = Column(String(500), nullable=False)
    description = Column(Text, nullable=False)
    outcomes = Column(JSON, nullable=False)
    weeks = Column(Integer, nullable=False, default=8)
    created_at = Column(DateTime, default=datetime.utcnow)

    experiments = relationship(
        "Experiment", secondary="experiment_curriculum_units", back_populates="curriculum_units", viewonly=True
    )

class ExperimentCurriculumUnit(Base):
    __tablename__ = "experiment_curriculum_units"
    __table_args__ = (
        UniqueConstraint("experiment_id", "curriculum_unit_id", name="uq_experiment_unit"),
    )

    id = Column(Integer, primary_key=True, index=True)
    experiment_id = Column(Integer, ForeignKey("experiments.id", ondelete="CASCADE"), nullable=False, index=True)
    curriculum_unit_id = Column(Integer, ForeignKey("curriculum_units.id", ondelete="CASCADE"), nullable=False, index=True)
    created_at = Column(DateTime, default=datetime.utcnow)
