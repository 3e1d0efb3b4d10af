from fastapi import HTTPException

from quizmaster.application.errors import QuizServiceError


def to_http_exception(exc: QuizServiceError) -> HTTPException:
    return HTTPException(status_code=exc.status_code, detail=exc.message)
