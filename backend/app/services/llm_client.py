from typing import Any, Dict, Optional
import logging

import requests

from app.core.config import Settings, settings as default_settings
from app.core.exceptions import ConfigurationError, UpstreamError

logger = logging.getLogger(__name__)


class LLMClient:
    """Text-generation client for Gemini (REST), OpenAI and Anthropic (LangChain)"""

    def __init__(self, settings: Optional[Settings] = None):
        self.settings = settings or default_settings
        self.provider = self.settings.LLM_PROVIDER.lower()
        self.timeout = self.settings.LLM_TIMEOUT_SECONDS

        if self.provider == "gemini":
            if not self.settings.GEMINI_API_KEY:
                raise ConfigurationError("GEMINI_API_KEY")
            self.model = self.settings.GEMINI_MODEL
            self.client = None
        elif self.provider == "openai":
            if not self.settings.OPENAI_API_KEY:
                raise ConfigurationError("OPENAI_API_KEY")
            from langchain_openai import ChatOpenAI

            self.model = self.settings.MODEL_NAME
            self.client = ChatOpenAI(
                model=self.model,
                temperature=0,
                api_key=self.settings.OPENAI_API_KEY,
                timeout=self.timeout,
                max_retries=0,
            )
        elif self.provider == "anthropic":
            if not self.settings.ANTHROPIC_API_KEY:
                raise ConfigurationError("ANTHROPIC_API_KEY")
            from langchain_anthropic import ChatAnthropic

            self.model = self.settings.MODEL_NAME
            self.client = ChatAnthropic(
                model=self.model,
                temperature=0,
                max_tokens=1024,
                anthropic_api_key=self.settings.ANTHROPIC_API_KEY,
                timeout=self.timeout,
                max_retries=0,
            )
        else:
            raise ValueError(f"Unsupported LLM provider: {self.provider}")

    @property
    def gemini_url(self) -> str:
        base = self.settings.GEMINI_BASE_URL.rstrip("/")
        return f"{base}/models/{self.model}:generateContent"

    @staticmethod
    def gemini_request_body(prompt: str) -> Dict[str, Any]:
        return {
            "contents": [{"role": "user", "parts": [{"text": prompt}]}],
            "generationConfig": {"temperature": 0},
        }

    @staticmethod
    def gemini_output_text(payload: Dict[str, Any]) -> str:
        """Join the text parts of the first candidate"""
        candidates = payload.get("candidates") or []
        if not candidates:
            return ""
        parts = (candidates[0].get("content") or {}).get("parts") or []
        return "".join(str(part.get("text") or "") for part in parts).strip()

    def _generate_gemini(self, prompt: str) -> str:
        try:
            response = requests.post(
                self.gemini_url,
                params={"key": self.settings.GEMINI_API_KEY},
                json=self.gemini_request_body(prompt),
                headers={"Content-Type": "application/json"},
                timeout=self.timeout,
            )
        except requests.RequestException as e:
            logger.error(f"Gemini request failed: {e}")
            raise UpstreamError(f"Gemini API request failed: {e}")

        if not response.ok:
            logger.error(f"Gemini API returned {response.status_code}")
            raise UpstreamError(
                f"Gemini API error: {response.status_code} {response.text}".strip(),
                upstream_status=response.status_code,
            )

        try:
            payload = response.json()
        except ValueError:
            raise UpstreamError("Gemini API returned a non-JSON body", upstream_status=response.status_code)
        return self.gemini_output_text(payload)

    def _generate_langchain(self, prompt: str) -> str:
        from langchain_core.messages import HumanMessage

        try:
            response = self.client.invoke([HumanMessage(content=prompt)])
        except Exception as e:
            logger.error(f"{self.provider} request failed: {e}", exc_info=True)
            raise UpstreamError(f"{self.provider} API error: {e}")

        content = response.content
        if isinstance(content, list):
            content = "".join(
                block.get("text", "") if isinstance(block, dict) else str(block) for block in content
            )
        return str(content or "").strip()

    def generate(self, prompt: str) -> str:
        """
        Send a single user message and return the model's text output.

        Raises:
            UpstreamError: transport failure, non-success status or empty output
        """
        if self.provider == "gemini":
            text = self._generate_gemini(prompt)
        else:
            text = self._generate_langchain(prompt)

        if not text:
            raise UpstreamError(f"{self.provider} returned an empty response")
        return text


def get_llm_client() -> LLMClient:
    """Dependency building a client from the current settings"""
    return LLMClient()
