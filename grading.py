# backend/grading.py
"""
Quiz submission checking and scoring.

A submission must answer every question of the quiz exactly once. Nothing
is persisted here; the caller stores the attempt only after
`grade_submission` returns.
"""
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Sequence

from errors import InvalidInput, NotFound
from schemas import PublicQuizQuestion, QuestionResult, QuizQuestionResponse, QuizResponse


@dataclass
class GradedSubmission:
    score: int
    passed: bool
    answers: List[int]  # selected options in question order
    correct_count: int
    total_questions: int
    passing_score: int
    results: List[QuestionResult] = field(default_factory=list)


def _is_int(value: Any) -> bool:
    # bool is an int subclass but never a valid id or option
    return isinstance(value, int) and not isinstance(value, bool)


def percentage(correct: int, total: int) -> int:
    """Whole-number percentage, rounding halves up (2 of 3 -> 67)"""
    if total <= 0:
        return 0
    return (200 * correct + total) // (2 * total)


def strip_answer_key(questions: Sequence[QuizQuestionResponse]) -> List[PublicQuizQuestion]:
    return [
        PublicQuizQuestion(
            id=q.id,
            question_text=q.question_text,
            options=list(q.options),
            order_index=q.order_index,
        )
        for q in questions
    ]


def validate_answers(questions: Sequence[QuizQuestionResponse], answers: Any) -> Dict[int, int]:
    """Check the submission against the quiz; returns question id -> selected option"""
    if not isinstance(answers, list):
        raise InvalidInput("answers must be an array")

    if len(answers) != len(questions):
        raise InvalidInput(
            f"Number of answers ({len(answers)}) must match number of questions ({len(questions)})"
        )

    by_id = {q.id: q for q in questions}
    selected: Dict[int, int] = {}

    for i, answer in enumerate(answers):
        if not isinstance(answer, dict):
            raise InvalidInput(f"Answer at index {i} must be an object with questionId and selectedOption")

        question_id = answer.get("questionId")
        if not _is_int(question_id):
            raise InvalidInput(f"Answer at index {i}: questionId must be an integer")

        question = by_id.get(question_id)
        if question is None:
            raise InvalidInput(f"Answer at index {i}: questionId {question_id} does not belong to this quiz")

        if question_id in selected:
            raise InvalidInput(f"Duplicate answer for questionId {question_id}")

        option = answer.get("selectedOption")
        if not _is_int(option) or not 0 <= option < len(question.options):
            raise InvalidInput(
                f"Answer for question {question_id}: selectedOption must be between 0 and {len(question.options) - 1}"
            )
        selected[question_id] = option

    for q in questions:
        if q.id not in selected:
            raise InvalidInput(f"Missing answer for questionId {q.id}")

    return selected


def grade_submission(
    quiz: Optional[QuizResponse],
    questions: Sequence[QuizQuestionResponse],
    answers: Any,
) -> GradedSubmission:
    """
    Validate and score a submission.

    Raises NotFound when the quiz is missing or has no questions, and
    InvalidInput when the answers do not cover the questions one to one.
    """
    if quiz is None:
        raise NotFound("Quiz not found")
    if not questions:
        raise NotFound("No questions found for this quiz")

    selected = validate_answers(questions, answers)

    results = []
    for q in questions:
        choice = selected[q.id]
        results.append(
            QuestionResult(
                question_id=q.id,
                question_text=q.question_text,
                options=list(q.options),
                user_answer=choice,
                correct_answer=q.correct_answer_index,
                is_correct=choice == q.correct_answer_index,
                explanation=q.explanation,
            )
        )

    correct_count = sum(1 for r in results if r.is_correct)
    score = percentage(correct_count, len(questions))

    return GradedSubmission(
        score=score,
        passed=score >= quiz.passing_score,
        answers=[selected[q.id] for q in questions],
        correct_count=correct_count,
        total_questions=len(questions),
        passing_score=quiz.passing_score,
        results=results,
    )
