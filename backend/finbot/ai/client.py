import base64
import io
import logging
import os
from contextlib import contextmanager
from typing import Optional, Dict, Any, List

import litellm

from finbot.config import settings

logger = logging.getLogger(__name__)

litellm.drop_params = True


class AIClient:

    def __init__(self):
        self.provider = settings.ai_provider
        self.model = self._get_model_string(settings.ai_model)
        self.vision_model = self._get_model_string(settings.ai_vision_model)
        self.transcription_model = settings.ai_transcription_model
        self.timeout = settings.ai_timeout_seconds
        self._configure_provider()

    def _get_model_string(self, model: str) -> str:
        if self.provider == "openrouter":
            if not model.startswith("openrouter/"):
                return f"openrouter/{model}"
            return model
        elif self.provider == "ollama":
            if not model.startswith("ollama/"):
                return f"ollama/{model}"
            return model
        else:
            return model

    def _configure_provider(self):
        if self.provider == "openrouter":
            litellm.api_key = settings.openrouter_api_key
            litellm.api_base = "https://openrouter.ai/api/v1"
        elif self.provider == "ollama":
            litellm.api_base = settings.ai_base_url or "http://localhost:11434"
        elif self.provider == "anthropic":
            litellm.api_key = settings.anthropic_api_key
        elif self.provider == "openai":
            litellm.api_key = settings.openai_api_key

    @contextmanager
    def _provider_env(self):
        """Expose the provider key to litellm for the duration of one call."""
        env_name = None
        if self.provider == "openrouter" and settings.openrouter_api_key:
            env_name = "OPENROUTER_API_KEY"
            os.environ[env_name] = settings.openrouter_api_key
        elif self.provider == "anthropic" and settings.anthropic_api_key:
            env_name = "ANTHROPIC_API_KEY"
            os.environ[env_name] = settings.anthropic_api_key
        elif self.provider == "openai" and settings.openai_api_key:
            env_name = "OPENAI_API_KEY"
            os.environ[env_name] = settings.openai_api_key
        try:
            yield
        finally:
            if env_name:
                os.environ.pop(env_name, None)

    async def _chat(self, model: str, messages: List[Dict[str, Any]], temperature: float, max_tokens: int) -> str:
        kwargs: Dict[str, Any] = {
            "model": model,
            "messages": messages,
            "temperature": temperature,
            "max_tokens": max_tokens,
            "timeout": self.timeout,
        }

        try:
            with self._provider_env():
                response = await litellm.acompletion(**kwargs)
            return response.choices[0].message.content or ""
        except Exception as e:
            logger.error(f"AI completion error: {e}")
            raise

    async def complete(
        self,
        system_prompt: str,
        user_prompt: str,
        temperature: float = 0.1,
        max_tokens: int = 200
    ) -> str:
        messages = [
            {"role": "system", "content": system_prompt},
            {"role": "user", "content": user_prompt}
        ]
        return await self._chat(self.model, messages, temperature, max_tokens)

    async def complete_vision(
        self,
        system_prompt: str,
        user_prompt: str,
        image_bytes: bytes,
        mime_type: str = "image/jpeg",
        temperature: float = 0.1,
        max_tokens: int = 500
    ) -> str:
        image_b64 = base64.b64encode(image_bytes).decode("ascii")
        messages = [
            {"role": "system", "content": system_prompt},
            {
                "role": "user",
                "content": [
                    {
                        "type": "image_url",
                        "image_url": {"url": f"data:{mime_type};base64,{image_b64}", "detail": "high"},
                    },
                    {"type": "text", "text": user_prompt},
                ],
            },
        ]
        return await self._chat(self.vision_model, messages, temperature, max_tokens)

    async def transcribe(self, audio_bytes: bytes, filename: str = "voice.ogg", language: str = "pt") -> str:
        audio_file = io.BytesIO(audio_bytes)
        audio_file.name = filename

        try:
            with self._provider_env():
                response = await litellm.atranscription(
                    model=self.transcription_model,
                    file=audio_file,
                    language=language,
                    timeout=self.timeout,
                )
            return response.text or ""
        except Exception as e:
            logger.error(f"AI transcription error: {e}")
            raise


def strip_code_fences(content: str) -> str:
    cleaned = content.strip()
    if cleaned.startswith("```json"):
        cleaned = cleaned[7:]
    if cleaned.startswith("```"):
        cleaned = cleaned[3:]
    if cleaned.endswith("```"):
        cleaned = cleaned[:-3]
    return cleaned.strip()


_ai_client: Optional[AIClient] = None

def get_ai_client() -> AIClient:
    global _ai_client
    if _ai_client is None:
        _ai_client = AIClient()
    return _ai_client
