"""Failures the quiz endpoint knows how to report.

Each error carries the HTTP status and the message sent back to the caller.
Provider details stay in the server log.
"""


class QuizError(Exception):
    status_code = 500
    message = "Failed to generate quiz"

    def __init__(self, detail: str | None = None):
        super().__init__(detail or self.message)
        self.detail = detail or self.message


class TopicValidationError(QuizError):
    status_code = 400
    message = "No topic provided"


class ExternalApiError(QuizError):
    """The provider call failed, timed out or was rejected."""
    message = "Failed to generate quiz"


class EmptyResponseError(QuizError):
    """The provider answered but returned no text."""
    message = "No text returned from API"


class MalformedQuizError(QuizError):
    message = "Failed to parse quiz JSON"

    def __init__(self, text: str, detail: str | None = None):
        super().__init__(detail)
        self.text = text
