from unittest.mock import MagicMock

import pytest
import requests

from careerprep.models.settings import LLMSettings
from careerprep.services.gateway import AIGateway


def completion(text, status=200):
    resp = MagicMock()
    resp.status_code = status
    resp.json.return_value = {"choices": [{"message": {"content": text}}]}
    return resp


def make_gateway(*responses, **settings):
    session = MagicMock()
    session.post.side_effect = list(responses)
    config = LLMSettings(api_key="test-key", model="primary", fallback_model="backup", **settings)
    return AIGateway(config, session=session), session


class TestInvoke:
    """Typed failures and the single fallback attempt"""

    def test_success(self):
        gateway, session = make_gateway(completion("  hello  "))
        result = gateway.invoke("prompt", temperature=0.1, max_tokens=50)
        assert result.ok
        assert result.text == "hello"
        assert result.model == "primary"
        body = session.post.call_args.kwargs["json"]
        assert body["model"] == "primary"
        assert body["temperature"] == 0.1
        assert body["max_tokens"] == 50
        assert session.post.call_args.kwargs["headers"]["Authorization"] == "Bearer test-key"

    def test_fallback_once(self):
        gateway, session = make_gateway(requests.Timeout("slow"), completion("from backup"))
        result = gateway.invoke("prompt")
        assert result.ok
        assert result.used_fallback
        assert result.model == "backup"
        assert session.post.call_count == 2

    @pytest.mark.parametrize("response,kind", [
        (requests.Timeout("slow"), "timeout"),
        (requests.ConnectionError("down"), "network"),
        (completion("", status=429), "rate_limit"),
        (completion("", status=500), "http"),
        (completion("   "), "empty"),
    ])
    def test_failure_kinds(self, response, kind):
        gateway, session = make_gateway(response, response)
        result = gateway.invoke("prompt")
        assert not result.ok
        assert result.error.kind == kind
        assert session.post.call_count == 2

    def test_malformed_envelope(self):
        bad = MagicMock(status_code=200)
        bad.json.return_value = {"unexpected": True}
        gateway, _ = make_gateway(bad, bad)
        assert gateway.invoke("prompt").error.kind == "malformed"

    def test_missing_key_does_not_retry(self):
        session = MagicMock()
        gateway = AIGateway(LLMSettings(api_key=None, fallback_model="backup"), session=session)
        result = gateway.invoke("prompt")
        assert result.error.kind == "not_configured"
        session.post.assert_not_called()

    def test_rate_limit_status_code(self):
        gateway, _ = make_gateway(completion("", status=429), completion("", status=429))
        assert gateway.invoke("prompt").error.status_code == 429

    async def test_ainvoke(self):
        gateway, _ = make_gateway(completion("async hello"))
        result = await gateway.ainvoke("prompt")
        assert result.text == "async hello"
