import pytest
from unittest.mock import AsyncMock, patch
from typing import List

from agenttime.agent_core.base import Completion, ModelProvider
from agenttime.agent_core.exceptions import ModelProviderError
from agenttime.agent_core.messages import ConversationTurn, TextSegment
from agenttime.agent_core.tools.models import ToolSpec


# Mock implementation for testing ModelProvider base logic
class MockProvider(ModelProvider[str]):
    def __init__(self, max_retries: int = 3, base_retry_delay: float = 0.1):
        super().__init__(max_retries=max_retries, base_retry_delay=base_retry_delay)
        self.complete_impl_mock = AsyncMock()

    async def _complete_impl(
        self, system_directive: str, tools: List[ToolSpec], history: List[ConversationTurn]
    ) -> Completion[str]:
        return await self.complete_impl_mock(system_directive, tools, history)


def done(text: str = "Success") -> Completion[str]:
    return Completion(segments=[TextSegment(text=text)], stop_reason="end_turn", raw="raw")


@pytest.mark.asyncio
async def test_initialization():
    """Test initialization of ModelProvider."""
    provider = MockProvider(max_retries=5, base_retry_delay=2.0)
    assert provider.max_retries == 5
    assert provider.base_retry_delay == 2.0


@pytest.mark.asyncio
async def test_complete_happy_path():
    """Test that complete works correctly on the first attempt."""
    provider = MockProvider()
    expected_result = done()
    provider.complete_impl_mock.return_value = expected_result

    history = [ConversationTurn.user_text("hello")]
    result = await provider.complete("system", [], history)
    assert result == expected_result
    provider.complete_impl_mock.assert_awaited_once_with("system", [], history)


@pytest.mark.asyncio
async def test_complete_retry_success():
    """Test that complete retries and eventually succeeds."""
    provider = MockProvider(max_retries=3, base_retry_delay=0.01)
    expected_result = done()

    # Fail twice, then succeed
    provider.complete_impl_mock.side_effect = [Exception("Fail 1"), Exception("Fail 2"), expected_result]

    result = await provider.complete("system", [], [])
    assert result == expected_result
    assert provider.complete_impl_mock.call_count == 3


@pytest.mark.asyncio
async def test_complete_failure_is_wrapped():
    """Test that the last exception is surfaced as ModelProviderError after max retries."""
    provider = MockProvider(max_retries=2, base_retry_delay=0.01)

    # Always fail
    provider.complete_impl_mock.side_effect = Exception("Persistent Failure")

    with pytest.raises(ModelProviderError) as excinfo:
        await provider.complete("system", [], [])

    assert str(excinfo.value) == "Persistent Failure"
    assert isinstance(excinfo.value.__cause__, Exception)
    # Initial call + 2 retries = 3 calls
    assert provider.complete_impl_mock.call_count == 3


@pytest.mark.asyncio
async def test_model_provider_error_is_not_retried():
    """Malformed responses are raised immediately."""
    provider = MockProvider(max_retries=3, base_retry_delay=0.01)
    provider.complete_impl_mock.side_effect = ModelProviderError("no choices")

    with pytest.raises(ModelProviderError, match="no choices"):
        await provider.complete("system", [], [])

    assert provider.complete_impl_mock.call_count == 1


@pytest.mark.asyncio
async def test_backoff_is_exponential():
    """Test the delays between attempts double."""
    provider = MockProvider(max_retries=3, base_retry_delay=1.0)
    provider.complete_impl_mock.side_effect = [Exception("a"), Exception("b"), Exception("c"), done()]

    with patch("agenttime.agent_core.base.base.asyncio.sleep", new_callable=AsyncMock) as sleep:
        await provider.complete("system", [], [])

    assert [call.args[0] for call in sleep.await_args_list] == [1.0, 2.0, 4.0]


@pytest.mark.asyncio
async def test_exception_without_message_uses_type_name():
    provider = MockProvider(max_retries=0)
    provider.complete_impl_mock.side_effect = TimeoutError()

    with pytest.raises(ModelProviderError, match="TimeoutError"):
        await provider.complete("system", [], [])
