import pytest

from attendance_insights.common.cancellation import CancellationToken
from attendance_insights.core.exceptions import Cancelled


def test_fresh_token_is_not_cancelled():
    token = CancellationToken()

    assert not token.is_cancelled
    token.raise_if_cancelled()


def test_cancel_trips_token():
    token = CancellationToken()
    token.cancel()

    with pytest.raises(Cancelled):
        token.raise_if_cancelled()


def test_deadline():
    assert CancellationToken.with_timeout(0).is_cancelled
    assert not CancellationToken.with_timeout(3600).is_cancelled
