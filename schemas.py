# backend/schemas.py
from datetime import datetime
from enum import Enum
from typing import Any, List, Optional

from pydantic import BaseModel, EmailStr, Field, StrictBool, StrictStr, field_validator
from pydantic.alias_generators import to_camel

# ==================== ENUMS ====================

class Category(str, Enum):
    BIOLOGY = "Biology"
    CHEMISTRY = "Chemistry"
    PHYSICS = "Physics"
    EARTH_SCIENCE = "Earth Science"

class CurriculumStage(str, Enum):
    K_6 = "K-6"
    LIFE_SKILLS_7_10 = "7-10 Life Skills"
    LIFE_SKILLS_11_12 = "11-12 Science Life Skills"

class Difficulty(str, Enum):
    BEGINNER = "beginner"
    INTERMEDIATE = "intermediate"
    ADVANCED = "advanced"

class ApiModel(BaseModel):
    """camelCase on the wire, snake_case in Python"""

    class Config:
        alias_generator = to_camel
        populate_by_name = True
        from_attributes = True
        use_enum_values = True

# ==================== USERS ====================

class UserCreate(BaseModel):
    email: EmailStr
    password: str = Field(min_length=6)
    full_name: str
    role: str = "student"

class UserResponse(ApiModel):
    id: int
    email: str
    full_name: Optional[str] = None
    role: str
    created_at: Optional[datetime] = None

class UserRecord(UserResponse):
    hashed_password: str

class Token(BaseModel):
    access_token: str
    token_type: str

# ==================== EXPERIMENTS ====================

class ExperimentStep(ApiModel):
    step_number: int
    title: str
    description: str
    image_url: Optional[str] = None
    safety_warning: Optional[str] = None

class ExperimentCreate(ApiModel):
    title: str
    description: str
    category: Category
    curriculum_stage: CurriculumStage
    difficulty: Difficulty
    duration: int = Field(gt=0)  # minutes
    materials_needed: List[str]
    household_items_only: bool = False
    thumbnail_url: str = ""
    steps: List[ExperimentStep]
    science_explained: str
    learning_outcomes: List[str]
    safety_notes: Optional[List[str]] = None
    related_experiments: Optional[List[int]] = None
    video_url: Optional[str] = None

    @field_validator("steps")
    @classmethod
    def steps_numbered_from_one(cls, steps: List[ExperimentStep]) -> List[ExperimentStep]:
        numbers = [step.step_number for step in steps]
        if numbers != list(range(1, len(steps) + 1)):
            raise ValueError("steps must be numbered contiguously from 1")
        return steps

class ExperimentResponse(ExperimentCreate):
    id: int

class ExperimentFilter(ApiModel):
    category: Optional[Category] = None
    curriculum_stage: Optional[CurriculumStage] = None
    curriculum_unit_id: Optional[str] = None
    difficulty: Optional[Difficulty] = None
    household_items_only: Optional[bool] = None
    max_duration: Optional[int] = Field(default=None, ge=0)
    search_query: Optional[str] = None

# ==================== PROGRESS ====================

class ProgressUpsert(ApiModel):
    experiment_id: int = Field(gt=0)
    completed: StrictBool = False
    notes: Optional[StrictStr] = None
    completed_at: Optional[datetime] = None

class NotesUpdate(BaseModel):
    notes: StrictStr

class CompletionUpdate(BaseModel):
    completed: StrictBool

class ProgressResponse(ApiModel):
    id: int
    user_id: int
    experiment_id: int
    completed: bool
    notes: Optional[str] = None
    completed_at: Optional[datetime] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

# ==================== QUIZZES ====================

class QuizCreate(ApiModel):
    experiment_id: int
    title: str
    description: Optional[str] = None
    passing_score: int = Field(default=70, ge=0, le=100)

class QuizResponse(QuizCreate):
    id: int
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

class QuizQuestionCreate(ApiModel):
    quiz_id: int
    question_text: str
    options: List[str] = Field(min_length=1)
    correct_answer_index: int
    explanation: Optional[str] = None
    order_index: int

    @field_validator("correct_answer_index")
    @classmethod
    def answer_index_in_range(cls, value: int, info) -> int:
        options = info.data.get("options")
        if options is not None and not 0 <= value < len(options):
            raise ValueError("correct_answer_index must index into options")
        return value

class QuizQuestionResponse(QuizQuestionCreate):
    id: int

class PublicQuizQuestion(ApiModel):
    """A question as shown before submission; carries no answer key"""

    id: int
    question_text: str
    options: List[str]
    order_index: int

class QuizAttemptResponse(ApiModel):
    id: int
    user_id: int
    quiz_id: int
    score: int
    answers: List[int]
    passed: bool
    completed_at: Optional[datetime] = None

class QuizSubmission(BaseModel):
    # Entries are checked one by one by the grader
    answers: List[Any]

class QuestionResult(ApiModel):
    question_id: int
    question_text: str
    options: List[str]
    user_answer: int
    correct_answer: int
    is_correct: bool
    explanation: Optional[str] = None

class QuizSubmissionResponse(ApiModel):
    attempt: QuizAttemptResponse
    results: List[QuestionResult]
    total_questions: int
    correct_answers: int
    passing_score: int

# ==================== CURRICULUM ====================

class CurriculumUnitCreate(ApiModel):
    unit_id: str
    stage: str
    component: Optional[str] = None
    term: int
    name: str
    description: str
    outcomes: List[str]
    weeks: int = 8

class CurriculumUnitResponse(CurriculumUnitCreate):
    id: int
    created_at: Optional[datetime] = None
