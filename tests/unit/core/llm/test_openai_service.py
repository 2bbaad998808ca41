"""
Unit tests for the OpenAI chat service.

Tests verify:
- Prompts are sent as system + user messages with the configured model
- Empty or malformed completions raise ValueError
- Transient API errors are retried
"""
import pytest
from unittest.mock import MagicMock, patch

import httpx
import openai

from core.llm.openai_service import OpenAIService


def _completion(content):
    response = MagicMock()
    response.choices = [MagicMock()]
    response.choices[0].message.content = content
    return response


@pytest.fixture
def service():
    with patch("core.llm.openai_service.OpenAI") as client_cls:
        svc = OpenAIService(api_key="test-key", model="gpt-test", temperature=0.1)
        svc.client = client_cls.return_value
        yield svc


class TestGenerateText:

    def test_sends_system_and_user_messages(self, service):
        service.client.chat.completions.create.return_value = _completion('{"score": 4}')

        assert service.generate_text("system", "user") == '{"score": 4}'

        kwargs = service.client.chat.completions.create.call_args.kwargs
        assert kwargs["model"] == "gpt-test"
        assert kwargs["temperature"] == 0.1
        assert kwargs["messages"] == [
            {"role": "system", "content": "system"},
            {"role": "user", "content": "user"},
        ]

    def test_empty_content_raises(self, service):
        service.client.chat.completions.create.return_value = _completion("")
        with pytest.raises(ValueError):
            service.generate_text("system", "user")

    def test_missing_choices_raises(self, service):
        response = MagicMock()
        response.choices = []
        service.client.chat.completions.create.return_value = response
        with pytest.raises(ValueError):
            service.generate_text("system", "user")

    def test_transient_error_is_retried(self, service):
        request = httpx.Request("POST", "https://api.openai.com/v1/chat/completions")
        service.client.chat.completions.create.side_effect = [
            openai.APIConnectionError(request=request),
            _completion("ok"),
        ]
        with patch("time.sleep"):
            assert service.generate_text("system", "user") == "ok"
        assert service.client.chat.completions.create.call_count == 2


class TestClientConstruction:

    def test_passes_credentials_and_timeout(self):
        with patch("core.llm.openai_service.OpenAI") as client_cls:
            OpenAIService(api_key="k", base_url="http://llm:8080/v1", timeout_seconds=5)
        client_cls.assert_called_once_with(timeout=5, api_key="k", base_url="http://llm:8080/v1")
