"""
LLM provider clients.

All providers expose the same coroutine, complete_json(), which returns the
model's raw text reply. Parsing that text is the caller's job
(see response_extractor).

Providers:
  - openai: OpenAI, or any OpenAI-compatible endpoint via OPENAI_BASE_URL
  - azure:  Azure OpenAI deployment
  - gemini: Google Gemini
"""
from typing import Optional

from openai import AsyncOpenAI, AsyncAzureOpenAI

from careermate.config import Settings, get_settings
from careermate.services.gateway import ServiceGateway, get_gateway
from careermate.utils.logger import get_logger

logger = get_logger("llm")


class LLMConfigurationError(ValueError):
    """Provider settings are missing or inconsistent."""


class LLMServiceError(Exception):
    """An LLM call failed."""


def describe_provider_error(error: Exception) -> str:
    """Most specific human-readable message available on a provider error"""
    body = getattr(error, "body", None)
    if isinstance(body, dict):
        nested = body.get("error")
        if isinstance(nested, dict) and nested.get("message"):
            return nested["message"]
        if body.get("message"):
            return body["message"]
    message = getattr(error, "message", None)
    if isinstance(message, str) and message:
        return message
    return str(error) or "Unknown error"


class LLMClient:
    """Base class; subclasses implement _complete()."""

    provider = "base"

    def __init__(self, model: str, gateway: Optional[ServiceGateway] = None):
        self.model = model
        self.gateway = gateway or get_gateway()

    async def complete_json(
        self,
        system: str,
        user: str,
        temperature: float = 0.4,
        max_tokens: int = 2000,
        top_p: Optional[float] = None,
    ) -> str:
        """Ask the model for a JSON-only reply and return its raw text."""
        logger.debug(f"Sending prompt to {self.provider}: {user[:200]}")
        text = await self.gateway.execute(
            self.provider,
            self._complete,
            system,
            user,
            temperature,
            max_tokens,
            top_p,
        )
        if text is None:
            raise LLMServiceError(f"{self.provider} returned an empty response")
        return text

    async def _complete(self, system, user, temperature, max_tokens, top_p) -> Optional[str]:
        raise NotImplementedError


class OpenAIChatClient(LLMClient):
    """Chat completions against OpenAI, Azure OpenAI or an OpenAI-compatible API"""

    provider = "openai"

    def __init__(self, client, model: str, provider: str = "openai", gateway: Optional[ServiceGateway] = None):
        super().__init__(model, gateway)
        self.client = client
        self.provider = provider

    async def _complete(self, system, user, temperature, max_tokens, top_p) -> Optional[str]:
        params = {
            "model": self.model,
            "messages": [
                {"role": "system", "content": system},
                {"role": "user", "content": user},
            ],
            "response_format": {"type": "json_object"},
            "temperature": temperature,
            "max_tokens": max_tokens,
        }
        if top_p is not None:
            params["top_p"] = top_p

        response = await self.client.chat.completions.create(**params)
        return response.choices[0].message.content


class GeminiClient(LLMClient):
    """Google Gemini via google-generativeai"""

    provider = "gemini"

    def __init__(self, api_key: str, model: str, gateway: Optional[ServiceGateway] = None):
        super().__init__(model, gateway)
        try:
            import google.generativeai as genai
        except ImportError as exc:
            raise LLMConfigurationError(
                "google-generativeai package is required for the gemini provider. Install it via pip."
            ) from exc
        self.genai = genai
        self.genai.configure(api_key=api_key)

    async def _complete(self, system, user, temperature, max_tokens, top_p) -> Optional[str]:
        model = self.genai.GenerativeModel(self.model, system_instruction=system)
        generation_config = {
            "response_mime_type": "application/json",
            "temperature": temperature,
            "max_output_tokens": max_tokens,
        }
        if top_p is not None:
            generation_config["top_p"] = top_p

        response = await model.generate_content_async(
            [{"role": "user", "parts": [user]}],
            generation_config=generation_config,
        )
        return response.text


def build_llm_client(settings: Optional[Settings] = None) -> LLMClient:
    """Construct the provider client described by the settings."""
    settings = settings or get_settings()
    provider = settings.provider

    if provider == "gemini":
        if not settings.google_api_key:
            raise LLMConfigurationError("GOOGLE_API_KEY is required when PROVIDER=gemini")
        return GeminiClient(settings.google_api_key, settings.gemini_model)

    if provider == "azure":
        endpoint = (settings.azure_openai_endpoint or "").rstrip("/")
        deployment = settings.azure_openai_deployment
        api_key = settings.azure_openai_api_key
        if not endpoint or not deployment or not api_key:
            raise LLMConfigurationError(
                "Azure OpenAI configuration missing. Set AZURE_OPENAI_ENDPOINT, "
                "AZURE_OPENAI_DEPLOYMENT, AZURE_OPENAI_API_KEY"
            )
        client = AsyncAzureOpenAI(
            azure_endpoint=endpoint,
            azure_deployment=deployment,
            api_version=settings.azure_openai_api_version,
            api_key=api_key,
        )
        return OpenAIChatClient(client, deployment, provider="azure")

    if provider == "openai":
        if not settings.openai_api_key:
            raise LLMConfigurationError(
                "OPENAI_API_KEY not found. Set it in the environment, "
                "or set TEST_MODE=true to use canned responses."
            )
        client = AsyncOpenAI(
            api_key=settings.openai_api_key,
            base_url=settings.openai_base_url.rstrip("/") if settings.openai_base_url else None,
        )
        return OpenAIChatClient(client, settings.openai_model)

    raise LLMConfigurationError(f"Unknown PROVIDER: {provider}")
