from __future__ import annotations

import pytest

from relay.llm import ChatRequest, MockClient, ModelClient, ResponseModel


@pytest.mark.asyncio
async def test_mock_echoes_last_user_text() -> None:
    client = MockClient(model="mock-model")
    assert isinstance(client, ModelClient)
    response = await client.create_chat_completion(
        ChatRequest(
            messages=[
                {"role": "system", "content": "sys"},
                {"role": "user", "content": [{"type": "text", "text": "Where is the menu?"}]},
            ]
        )
    )
    assert response.content == "Mock reply from mock-model: Where is the menu?"
    assert response.finish_reason == "end_turn"
    assert response.usage.total_tokens == response.usage.prompt_tokens + 8
    assert client.last_body["system"] == "sys"


@pytest.mark.asyncio
async def test_mock_is_deterministic() -> None:
    request = ChatRequest(messages=[{"role": "user", "content": "same"}])
    first = await MockClient().create_chat_completion(request)
    second = await MockClient().create_chat_completion(request)
    assert first.id == second.id


@pytest.mark.asyncio
async def test_mock_structured_reply() -> None:
    response = await MockClient().create_chat_completion(
        ChatRequest(messages=[{"role": "user", "content": "x"}], response_model=ResponseModel(schema={}))
    )
    assert response.data == {"elements": []}
    assert response.tool_calls[0].name == "structured_output"


@pytest.mark.asyncio
async def test_mock_canned_content_goes_through_translation() -> None:
    client = MockClient(
        content=[{"type": "tool_use", "id": "toolu_9", "name": "act", "input": {"elements": [{"elementId": "3-4"}]}}]
    )
    response = await client.create_chat_completion(
        ChatRequest(messages=[{"role": "user", "content": "x"}], response_model=ResponseModel(schema={}, name="act"))
    )
    assert response.data == {"elements": [{"elementId": "0-4"}]}
