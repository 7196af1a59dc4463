"""
Chat-completion gateway.

Every model call in the pipeline goes through ``AIGateway``. Failures never
escape as exceptions: they come back as a ``GatewayResult`` carrying a typed
``GatewayFailure`` so callers branch to their rule-based fallback explicitly.
"""
import asyncio
from functools import lru_cache, partial
from typing import Literal, Optional

import requests
from pydantic import BaseModel

from careerprep.models.settings import LLMSettings, get_settings
from careerprep.utils.exceptions import AIGatewayError
from careerprep.utils.logging_config import get_logger

logger = get_logger(__name__)

FailureKind = Literal["timeout", "network", "rate_limit", "http", "malformed", "empty", "not_configured"]

SYSTEM_MESSAGE = "You are an expert technical recruiter and interviewer. Follow the output format exactly."


class GatewayFailure(BaseModel):
    kind: FailureKind
    message: str = ""
    model: Optional[str] = None
    status_code: Optional[int] = None


class GatewayResult(BaseModel):
    text: Optional[str] = None
    model: Optional[str] = None
    error: Optional[GatewayFailure] = None
    used_fallback: bool = False

    @property
    def ok(self) -> bool:
        return self.error is None and bool(self.text)


class AIGateway:
    """OpenAI-compatible chat-completion client, one instance per process."""

    def __init__(self, settings: LLMSettings, session: Optional[requests.Session] = None):
        self.settings = settings
        self.session = session or requests.Session()

    def _post(self, prompt: str, model_name: str, temperature: float, max_tokens: int) -> str:
        if not self.settings.api_key:
            raise AIGatewayError("LLM_API_KEY is not configured", kind="not_configured", model_name=model_name)

        url = f"{self.settings.base_url}/chat/completions"
        payload = {
            "model": model_name,
            "messages": [
                {"role": "system", "content": SYSTEM_MESSAGE},
                {"role": "user", "content": prompt},
            ],
            "temperature": temperature,
            "max_tokens": max_tokens,
        }
        try:
            resp = self.session.post(
                url,
                json=payload,
                headers={"Authorization": f"Bearer {self.settings.api_key}"},
                timeout=self.settings.timeout,
            )
        except requests.Timeout as e:
            raise AIGatewayError(f"Model call timed out after {self.settings.timeout}s",
                                 kind="timeout", model_name=model_name, cause=e)
        except requests.RequestException as e:
            raise AIGatewayError(f"Model call failed: {e}", kind="network", model_name=model_name, cause=e)

        if resp.status_code == 429:
            raise AIGatewayError("Model provider rate limit reached", kind="rate_limit",
                                 model_name=model_name, status_code=429)
        if resp.status_code >= 400:
            raise AIGatewayError(f"Model provider returned HTTP {resp.status_code}", kind="http",
                                 model_name=model_name, status_code=resp.status_code)

        try:
            content = resp.json()["choices"][0]["message"]["content"]
        except (ValueError, KeyError, IndexError, TypeError) as e:
            raise AIGatewayError("Unexpected completion envelope", kind="malformed",
                                 model_name=model_name, cause=e)

        if not isinstance(content, str) or not content.strip():
            raise AIGatewayError("Model returned an empty completion", kind="empty", model_name=model_name)
        return content.strip()

    def _attempt(self, prompt: str, model_name: str, temperature: float, max_tokens: int) -> GatewayResult:
        try:
            text = self._post(prompt, model_name, temperature, max_tokens)
            return GatewayResult(text=text, model=model_name)
        except AIGatewayError as e:
            logger.warning(f"Model call failed ({e.kind}) on {model_name}: {e.message}")
            return GatewayResult(
                model=model_name,
                error=GatewayFailure(
                    kind=e.kind,
                    message=e.message,
                    model=model_name,
                    status_code=e.details.get("status_code"),
                ),
            )

    def invoke(self, prompt: str, temperature: Optional[float] = None, max_tokens: Optional[int] = None) -> GatewayResult:
        """Send one prompt; on failure try the fallback model exactly once."""
        temperature = self.settings.temperature if temperature is None else temperature
        max_tokens = max_tokens or self.settings.max_tokens

        result = self._attempt(prompt, self.settings.model, temperature, max_tokens)
        if result.ok:
            return result

        fallback = self.settings.fallback_model
        # a missing key fails the same way on every model
        if not fallback or fallback == self.settings.model or result.error.kind == "not_configured":
            return result

        logger.info(f"Retrying with fallback model {fallback}")
        retry = self._attempt(prompt, fallback, temperature, max_tokens)
        retry.used_fallback = True
        return retry if retry.ok else GatewayResult(
            model=fallback, error=retry.error or result.error, used_fallback=True
        )

    async def ainvoke(self, prompt: str, temperature: Optional[float] = None,
                      max_tokens: Optional[int] = None) -> GatewayResult:
        """Run ``invoke`` in the default executor so the event loop stays free."""
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(None, partial(self.invoke, prompt, temperature, max_tokens))


@lru_cache(maxsize=1)
def get_gateway() -> AIGateway:
    return AIGateway(get_settings().llm)
