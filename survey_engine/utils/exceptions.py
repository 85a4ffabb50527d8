"""Domain exceptions for the survey engine."""


class SurveyEngineException(Exception):
    """Base exception for survey engine errors."""
    pass


class SurveyNotFoundError(SurveyEngineException):
    """Raised when a survey identity does not resolve."""
    pass


class QuestionNotFoundError(SurveyEngineException):
    """Raised when a question does not exist or belongs to another survey."""
    pass


class ResponseNotFoundError(SurveyEngineException):
    """Raised when a survey response identity does not resolve."""
    pass


class InvalidStateTransitionError(SurveyEngineException):
    """Raised when a lifecycle transition is not allowed from the current status."""

    def __init__(self, survey_id, current_status: str, target_status: str):
        self.survey_id = survey_id
        self.current_status = current_status
        self.target_status = target_status
        super().__init__(
            f"Survey {survey_id} cannot move from {current_status} to {target_status}"
        )


class MissingRequiredAnswerError(SurveyEngineException):
    """Raised when a one-shot submission omits answers to required questions."""

    def __init__(self, question_ids):
        self.question_ids = list(question_ids)
        super().__init__(f"Missing answers for required questions: {self.question_ids}")
