import pytest

from gemini_service import ModelCallError
from retry_policy import backoff_delay_ms, is_transient_error, retry_with_backoff


class Script:
    def __init__(self, *outcomes):
        self.outcomes = list(outcomes)
        self.calls = 0

    def __call__(self):
        self.calls += 1
        outcome = self.outcomes.pop(0)
        if isinstance(outcome, BaseException):
            raise outcome
        return outcome


def test_returns_first_success_without_sleeping():
    sleeps = []
    op = Script("ok")
    assert retry_with_backoff(op, sleep=sleeps.append) == "ok"
    assert op.calls == 1
    assert sleeps == []


def test_transient_errors_are_retried_until_success():
    sleeps = []
    op = Script(ModelCallError("overloaded", transient=True), ModelCallError("503", transient=True), "done")
    assert retry_with_backoff(op, max_attempts=3, base_delay_ms=100, sleep=sleeps.append) == "done"
    assert op.calls == 3
    assert len(sleeps) == 2
    # base * 2^attempt plus at most one second of jitter
    assert 0.1 <= sleeps[0] <= 1.1
    assert 0.2 <= sleeps[1] <= 1.2


def test_gives_up_after_max_attempts_with_last_error():
    op = Script(ModelCallError("first", transient=True), ModelCallError("second", transient=True))
    with pytest.raises(ModelCallError, match="second"):
        retry_with_backoff(op, max_attempts=2, base_delay_ms=0, sleep=lambda s: None)
    assert op.calls == 2


def test_fatal_error_is_not_retried():
    op = Script(ModelCallError("bad api key", transient=False), "never")
    with pytest.raises(ModelCallError):
        retry_with_backoff(op, max_attempts=3, sleep=lambda s: None)
    assert op.calls == 1


def test_deadline_stops_retrying_before_sleeping():
    sleeps = []
    op = Script(ModelCallError("429", transient=True), "late")
    with pytest.raises(ModelCallError):
        retry_with_backoff(op, max_attempts=3, base_delay_ms=1000, sleep=sleeps.append,
                           deadline=100.5, clock=lambda: 100.0)
    assert op.calls == 1
    assert sleeps == []


def test_max_attempts_must_be_positive():
    with pytest.raises(ValueError):
        retry_with_backoff(lambda: "x", max_attempts=0)


def test_backoff_delay_doubles_per_attempt():
    assert backoff_delay_ms(0, 1000, jitter_ms=0) == 1000
    assert backoff_delay_ms(1, 1000, jitter_ms=0) == 2000
    assert backoff_delay_ms(2, 1000, jitter_ms=250) == 4250


@pytest.mark.parametrize("error, expected", [
    (ModelCallError("anything", transient=True), True),
    (ModelCallError("503 overloaded", transient=False), False),
    (RuntimeError("The model is overloaded"), True),
    (RuntimeError("429 RESOURCE_EXHAUSTED"), True),
    (RuntimeError("400 INVALID_ARGUMENT"), False),
])
def test_is_transient_error(error, expected):
    assert is_transient_error(error) is expected
