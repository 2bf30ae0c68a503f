# backend/main.py
import logging
from contextlib import asynccontextmanager
from typing import List, Optional

from fastapi import FastAPI, Depends, HTTPException, Query, Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.security import OAuth2PasswordRequestForm
from pydantic import ValidationError

from auth import (
    create_access_token,
    get_current_user,
    get_optional_user,
    get_password_hash,
    get_storage,
    verify_password,
)
from config import get_settings
from errors import AppError, InvalidInput, NotFound, Unauthorized
from grading import grade_submission, strip_answer_key
from schemas import (
    CompletionUpdate,
    CurriculumUnitResponse,
    ExperimentFilter,
    ExperimentResponse,
    NotesUpdate,
    ProgressResponse,
    ProgressUpsert,
    PublicQuizQuestion,
    QuizAttemptResponse,
    QuizResponse,
    QuizSubmission,
    QuizSubmissionResponse,
    Token,
    UserCreate,
    UserRecord,
    UserResponse,
)
from storage import Storage, build_storage

settings = get_settings()

# Configure logging
logging.basicConfig(level=settings.log_level)
logger = logging.getLogger(__name__)

@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info("Starting Science Lab API...")
    app.state.storage = build_storage(settings)
    yield
    logger.info("Shutting down...")

# FastAPI app
app = FastAPI(title="Science Lab API", version="1.0.0", lifespan=lifespan)

# CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# ==================== ERROR HANDLERS ====================

@app.exception_handler(AppError)
async def app_error_handler(request: Request, exc: AppError):
    headers = {"WWW-Authenticate": "Bearer"} if isinstance(exc, Unauthorized) else None
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.message}, headers=headers)

@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError):
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"detail": "Invalid request parameters", "errors": jsonable_encoder(exc.errors())},
    )

@app.exception_handler(Exception)
async def unhandled_error_handler(request: Request, exc: Exception):
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return JSONResponse(status_code=500, content={"detail": "Internal server error"})

# ==================== HELPERS ====================

def _parse_flag(value: Optional[str]) -> Optional[str]:
    # "false" or an empty value leaves the household filter off
    if value is None or value == "" or value.lower() == "false":
        return None
    return value

def require_experiment(storage: Storage, experiment_id: int) -> ExperimentResponse:
    experiment = storage.get_experiment(experiment_id)
    if experiment is None:
        raise NotFound("Experiment not found")
    return experiment

# ==================== ROUTES: AUTH ====================

@app.post("/auth/register", response_model=UserResponse)
def register(user: UserCreate, storage: Storage = Depends(get_storage)):
    """Register a new user"""
    if storage.get_user_by_email(user.email):
        raise HTTPException(status_code=400, detail="Email already registered")

    return storage.create_user(
        email=user.email,
        full_name=user.full_name,
        hashed_password=get_password_hash(user.password),
        role=user.role,
    )

@app.post("/auth/login", response_model=Token)
def login(form_data: OAuth2PasswordRequestForm = Depends(), storage: Storage = Depends(get_storage)):
    """Exchange email and password for a bearer token"""
    user = storage.get_user_by_email(form_data.username)
    if not user or not verify_password(form_data.password, user.hashed_password):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Incorrect email or password",
            headers={"WWW-Authenticate": "Bearer"},
        )

    access_token = create_access_token(data={"sub": str(user.id)})
    return {"access_token": access_token, "token_type": "bearer"}

@app.get("/auth/me", response_model=UserResponse)
def get_me(current_user: UserRecord = Depends(get_current_user)):
    return current_user

@app.get("/api/auth/user", response_model=Optional[UserResponse])
def get_auth_user(current_user: Optional[UserRecord] = Depends(get_optional_user)):
    """Current user, or null for anonymous callers"""
    return current_user

# ==================== ROUTES: EXPERIMENTS ====================

@app.get("/api/experiments", response_model=List[ExperimentResponse])
def get_experiments(
    category: Optional[str] = None,
    curriculum_stage: Optional[str] = Query(None, alias="curriculumStage"),
    curriculum_unit_id: Optional[str] = Query(None, alias="curriculumUnitId"),
    difficulty: Optional[str] = None,
    household_items_only: Optional[str] = Query(None, alias="householdItemsOnly"),
    max_duration: Optional[str] = Query(None, alias="maxDuration"),
    search_query: Optional[str] = Query(None, alias="searchQuery"),
    storage: Storage = Depends(get_storage),
):
    """List experiments, narrowed by any combination of filters"""
    raw = {
        "category": category,
        "curriculum_stage": curriculum_stage,
        "curriculum_unit_id": curriculum_unit_id,
        "difficulty": difficulty,
        "household_items_only": _parse_flag(household_items_only),
        "max_duration": max_duration,
        "search_query": search_query,
    }
    try:
        filters = ExperimentFilter(**{key: value for key, value in raw.items() if value not in (None, "")})
    except ValidationError as e:
        logger.info("Rejected experiment filters: %s", e.errors())
        raise InvalidInput("Invalid filter parameters")

    return storage.get_all_experiments(filters)

@app.get("/api/experiments/featured", response_model=List[ExperimentResponse])
def get_featured_experiments(storage: Storage = Depends(get_storage)):
    return storage.get_featured_experiments()

@app.get("/api/experiments/related/{experiment_id}", response_model=List[ExperimentResponse])
def get_related_experiments(experiment_id: int, storage: Storage = Depends(get_storage)):
    return storage.get_related_experiments(experiment_id)

@app.get("/api/experiments/{experiment_id}", response_model=ExperimentResponse)
def get_experiment(experiment_id: int, storage: Storage = Depends(get_storage)):
    return require_experiment(storage, experiment_id)

@app.get("/api/experiments/{experiment_id}/curriculum", response_model=List[CurriculumUnitResponse])
def get_experiment_curriculum(experiment_id: int, storage: Storage = Depends(get_storage)):
    """Curriculum units an experiment is tagged against"""
    return storage.get_experiment_curriculum_units(experiment_id)

# ==================== ROUTES: PROGRESS ====================

@app.get("/api/progress", response_model=List[ProgressResponse])
def get_my_progress(
    current_user: UserRecord = Depends(get_current_user),
    storage: Storage = Depends(get_storage),
):
    return storage.get_all_progress(current_user.id)

@app.get("/api/progress/{experiment_id}", response_model=Optional[ProgressResponse])
def get_experiment_progress(
    experiment_id: int,
    current_user: UserRecord = Depends(get_current_user),
    storage: Storage = Depends(get_storage),
):
    """Progress for one experiment, or null if the user has not started it"""
    return storage.get_progress(current_user.id, experiment_id)

@app.post("/api/progress", response_model=ProgressResponse)
def upsert_progress(
    progress: ProgressUpsert,
    current_user: UserRecord = Depends(get_current_user),
    storage: Storage = Depends(get_storage),
):
    """Create or update progress for an experiment"""
    require_experiment(storage, progress.experiment_id)
    return storage.upsert_progress(current_user.id, progress)

@app.patch("/api/progress/{experiment_id}/notes", response_model=ProgressResponse)
def update_notes(
    experiment_id: int,
    body: NotesUpdate,
    current_user: UserRecord = Depends(get_current_user),
    storage: Storage = Depends(get_storage),
):
    """Replace notes; an empty string clears them"""
    require_experiment(storage, experiment_id)
    return storage.update_progress_notes(current_user.id, experiment_id, body.notes)

@app.patch("/api/progress/{experiment_id}/complete", response_model=ProgressResponse)
def update_completion(
    experiment_id: int,
    body: CompletionUpdate,
    current_user: UserRecord = Depends(get_current_user),
    storage: Storage = Depends(get_storage),
):
    require_experiment(storage, experiment_id)
    return storage.mark_experiment_complete(current_user.id, experiment_id, body.completed)

# ==================== ROUTES: QUIZZES ====================

@app.get("/api/quizzes/experiment/{experiment_id}", response_model=Optional[QuizResponse])
def get_experiment_quiz(experiment_id: int, storage: Storage = Depends(get_storage)):
    """Quiz for an experiment, or null if it has none"""
    return storage.get_quiz_by_experiment(experiment_id)

@app.get("/api/quizzes/{quiz_id}/questions", response_model=List[PublicQuizQuestion])
def get_quiz_questions(quiz_id: int, storage: Storage = Depends(get_storage)):
    """Questions without the answer key"""
    return strip_answer_key(storage.get_quiz_questions(quiz_id))

@app.post("/api/quizzes/{quiz_id}/submit", response_model=QuizSubmissionResponse)
def submit_quiz(
    quiz_id: int,
    submission: QuizSubmission,
    current_user: UserRecord = Depends(get_current_user),
    storage: Storage = Depends(get_storage),
):
    """Grade a submission and record it as a new attempt"""
    quiz = storage.get_quiz(quiz_id)
    questions = storage.get_quiz_questions(quiz_id) if quiz else []

    graded = grade_submission(quiz, questions, submission.answers)

    attempt = storage.create_quiz_attempt(
        user_id=current_user.id,
        quiz_id=quiz_id,
        score=graded.score,
        answers=graded.answers,
        passed=graded.passed,
    )
    logger.info(
        "User %s scored %d%% on quiz %d (%s)",
        current_user.id, graded.score, quiz_id, "passed" if graded.passed else "failed",
    )

    return QuizSubmissionResponse(
        attempt=attempt,
        results=graded.results,
        total_questions=graded.total_questions,
        correct_answers=graded.correct_count,
        passing_score=graded.passing_score,
    )

@app.get("/api/quizzes/{quiz_id}/attempts", response_model=List[QuizAttemptResponse])
def get_quiz_attempts(
    quiz_id: int,
    current_user: UserRecord = Depends(get_current_user),
    storage: Storage = Depends(get_storage),
):
    """The caller's attempts, newest first"""
    return storage.get_quiz_attempts(current_user.id, quiz_id)

# ==================== ROUTES: CURRICULUM ====================

@app.get("/api/curriculum", response_model=List[CurriculumUnitResponse])
def get_curriculum(storage: Storage = Depends(get_storage)):
    return storage.get_all_curriculum_units()

@app.get("/api/curriculum/stage/{stage}", response_model=List[CurriculumUnitResponse])
def get_curriculum_by_stage(stage: str, storage: Storage = Depends(get_storage)):
    return storage.get_curriculum_units_by_stage(stage)

@app.get("/api/curriculum/{unit_id}", response_model=CurriculumUnitResponse)
def get_curriculum_unit(unit_id: str, storage: Storage = Depends(get_storage)):
    unit = storage.get_curriculum_unit(unit_id)
    if unit is None:
        raise NotFound("Curriculum unit not found")
    return unit

# ==================== ROOT ====================

@app.get("/")
def root():
    return {
        "message": "Science Lab API",
        "version": "1.0.0",
        "docs": "/docs"
    }

@app.get("/health")
def health_check():
    return {"status": "healthy"}

if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8000)
