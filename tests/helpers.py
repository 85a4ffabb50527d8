"""Question builders shared across test modules."""
from survey_engine.models.base import QuestionType
from survey_engine.schemas.survey import QuestionCreate


def multiple_choice(question: str = "Favourite colour?", options=("A", "B", "C"), **kwargs) -> QuestionCreate:
    return QuestionCreate(
        question=question,
        question_type=QuestionType.MULTIPLE_CHOICE,
        options=list(options),
        **kwargs,
    )


def rating_scale(question: str = "How satisfied are you?", min_scale: int = 1, max_scale: int = 5, **kwargs) -> QuestionCreate:
    return QuestionCreate(
        question=question,
        question_type=QuestionType.RATING_SCALE,
        min_scale=min_scale,
        max_scale=max_scale,
        **kwargs,
    )


def open_text(question: str = "Anything else?", **kwargs) -> QuestionCreate:
    return QuestionCreate(question=question, question_type=QuestionType.OPEN_TEXT, **kwargs)
