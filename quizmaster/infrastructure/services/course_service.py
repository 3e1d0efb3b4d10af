import logging
from typing import Optional

import requests
from tenacity import Retrying, retry_if_exception_type, stop_after_attempt, wait_exponential

from quizmaster.application.errors import CourseServiceUnavailableError

logger = logging.getLogger(__name__)


class TransientCourseServiceError(Exception):
    """The course API could not give an answer this time."""


class CourseCompletionClient:
    """
    Asks the external course API whether a student finished a course.

    GET {base_url}/courses/{course_id}/students/{student_id}/completion
        200 -> {"completed": bool, ...}
        404 -> not enrolled / not completed

    Anything else is treated as transient and retried with exponential
    backoff before giving up with CourseServiceUnavailableError.
    """

    def __init__(
        self,
        base_url: str,
        *,
        timeout: float = 5.0,
        max_attempts: int = 3,
        backoff: float = 0.5,
        session: Optional[requests.Session] = None,
    ):
        self._base_url = base_url.rstrip("/")
        self._timeout = timeout
        self._session = session or requests.Session()
        self._retrying = Retrying(
            stop=stop_after_attempt(max_attempts),
            wait=wait_exponential(multiplier=backoff, max=10),
            retry=retry_if_exception_type(TransientCourseServiceError),
            reraise=True,
        )

    def is_course_completed(self, student_id: int, course_id: str) -> bool:
        try:
            return self._retrying(self._fetch_completion, student_id, course_id)
        except TransientCourseServiceError as e:
            logger.error(
                f"Course API unavailable for student {student_id}, course {course_id}: {e}"
            )
            raise CourseServiceUnavailableError("Failed to verify course completion") from e

    def _fetch_completion(self, student_id: int, course_id: str) -> bool:
        url = f"{self._base_url}/courses/{course_id}/students/{student_id}/completion"
        logger.debug(f"Checking course completion: {url}")

        try:
            response = self._session.get(url, timeout=self._timeout)
        except requests.RequestException as e:
            logger.warning(f"Course API call failed: {e}")
            raise TransientCourseServiceError(f"failed to call course API: {e}") from e

        if response.status_code == 404:
            return False
        if response.status_code != 200:
            logger.warning(f"Course API returned status {response.status_code}")
            raise TransientCourseServiceError(f"course API returned status {response.status_code}")

        try:
            payload = response.json()
        except ValueError as e:
            raise TransientCourseServiceError(f"failed to parse response: {e}") from e

        if not isinstance(payload, dict):
            logger.warning(f"Course API returned unexpected body: {payload!r}")
            raise TransientCourseServiceError("unexpected response body")

        return payload.get("completed") is True
