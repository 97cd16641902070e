import pytest
from shared.cancellation import CancellationToken, cancellation_scope, current_token
from shared.errors import InfrastructureError, OperationCancelledError


class TestCancellationToken:
    def test_fresh_token_is_not_cancelled(self):
        token = CancellationToken(timeout=30)
        assert not token.cancelled
        token.raise_if_cancelled()

    def test_cancel(self):
        token = CancellationToken()
        token.cancel("user gave up")
        assert token.cancelled
        with pytest.raises(OperationCancelledError, match="user gave up"):
            token.raise_if_cancelled()

    def test_elapsed_deadline_cancels(self):
        token = CancellationToken(timeout=0)
        assert token.cancelled
        assert token.reason == "deadline exceeded"

    def test_cancellation_is_a_retryable_infrastructure_error(self):
        token = CancellationToken()
        token.cancel()
        with pytest.raises(InfrastructureError) as exc:
            token.raise_if_cancelled()
        assert exc.value.retryable


class TestCancellationScope:
    def test_scope_sets_and_restores_current_token(self):
        assert current_token() is None
        token = CancellationToken()
        with cancellation_scope(token):
            assert current_token() is token
        assert current_token() is None

    def test_nested_scopes(self):
        outer, inner = CancellationToken(), CancellationToken()
        with cancellation_scope(outer):
            with cancellation_scope(inner):
                assert current_token() is inner
            assert current_token() is outer
