import pytest

from story_automation.application.retry import with_retry
from story_automation.domain.errors import ErrorCategory, GenerationError, category_for_status


class Flaky:
    def __init__(self, errors, result="ok"):
        self.errors = list(errors)
        self.result = result
        self.calls = 0

    def __call__(self):
        self.calls += 1
        if self.errors:
            raise self.errors.pop(0)
        return self.result


@pytest.mark.parametrize("category", [
    ErrorCategory.RATE_LIMITED,
    ErrorCategory.SERVER,
    ErrorCategory.TRANSPORT,
])
def test_transient_errors_are_retried_with_doubling_delay(category, sleeps):
    fn = Flaky([GenerationError("boom", category), GenerationError("boom", category)])
    assert with_retry(fn, retries=3, delay=2.0, sleep=sleeps.append) == "ok"
    assert fn.calls == 3
    assert sleeps == [2.0, 4.0]


def test_retries_exhausted_raises_last_error(sleeps):
    errors = [GenerationError(f"503 #{i}", ErrorCategory.SERVER) for i in range(4)]
    fn = Flaky(errors)
    with pytest.raises(GenerationError, match="503 #3"):
        with_retry(fn, retries=3, delay=1.0, sleep=sleeps.append)
    assert fn.calls == 4
    assert sleeps == [1.0, 2.0, 4.0]


@pytest.mark.parametrize("category", [
    ErrorCategory.MALFORMED,
    ErrorCategory.CLIENT,
    ErrorCategory.UNAVAILABLE,
])
def test_fatal_errors_are_not_retried(category, sleeps):
    fn = Flaky([GenerationError("nope", category)])
    with pytest.raises(GenerationError):
        with_retry(fn, retries=3, sleep=sleeps.append)
    assert fn.calls == 1
    assert sleeps == []


def test_unrelated_exceptions_propagate(sleeps):
    fn = Flaky([KeyError("bug")])
    with pytest.raises(KeyError):
        with_retry(fn, sleep=sleeps.append)
    assert sleeps == []


@pytest.mark.parametrize("status, category", [
    (429, ErrorCategory.RATE_LIMITED),
    (500, ErrorCategory.SERVER),
    (503, ErrorCategory.SERVER),
    (400, ErrorCategory.CLIENT),
    (403, ErrorCategory.CLIENT),
])
def test_status_classification(status, category):
    assert category_for_status(status) is category
