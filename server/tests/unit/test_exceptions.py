"""Unit tests for problem-details exceptions."""

from fleet_booking.core.exceptions import InvalidTransitionError, InvalidUserError, NotFoundError


class TestProblemDetailsException:
    def test_detail_is_the_message(self):
        error = InvalidUserError("u1", reason="user not found")

        assert isinstance(error.detail, str)
        assert "user not found" in error.detail
        assert error.problem_details["detail"] == error.detail

    def test_problem_body(self):
        error = NotFoundError("booking", "b1")

        assert error.status_code == 404
        assert error.problem_details["code"] == error.code
        assert error.problem_details["retryable"] is False
        assert "b1" in error.detail

    def test_detail_override(self):
        error = InvalidTransitionError("b1", "completed", "completed", detail="can no longer be changed")

        assert error.detail == "can no longer be changed"
        assert error.problem_details["detail"] == "can no longer be changed"
