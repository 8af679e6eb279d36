# llm_client.py
"""
Thin wrapper around the remote chat model.

The estimator only ever sees `call_model(system_instruction, user_prompt) -> str`,
so tests can swap in a stub that returns canned text or raises.
"""
import logging
from typing import Optional, Protocol

import httpx
import ollama

from exceptions import RemoteServiceError

logger = logging.getLogger(__name__)


class ModelCaller(Protocol):
    def call_model(self, system_instruction: str, user_prompt: str) -> str:
        ...


class OllamaModelCaller:
    """Sends one chat request to an Ollama-compatible endpoint and returns the reply text."""

    def __init__(
        self,
        host: str,
        model_name: str,
        api_key: Optional[str] = None,
        temperature: float = 0.3,
        max_tokens: int = 2000,
        timeout: Optional[float] = None,
        client: Optional[ollama.Client] = None,
    ):
        self.model_name = model_name
        self.temperature = temperature
        self.max_tokens = max_tokens

        if client is None:
            client_kwargs = {'host': host, 'timeout': timeout}
            if api_key:
                client_kwargs['headers'] = {"Authorization": f"Bearer {api_key}"}
            client = ollama.Client(**client_kwargs)
        self.client = client

    @classmethod
    def from_settings(cls, settings) -> "OllamaModelCaller":
        return cls(
            host=settings.LLM_HOST,
            model_name=settings.LLM_MODEL_NAME,
            api_key=settings.LLM_API_KEY or None,
            temperature=settings.LLM_TEMPERATURE,
            max_tokens=settings.LLM_MAX_TOKENS,
            timeout=settings.LLM_TIMEOUT_SECONDS,
        )

    def call_model(self, system_instruction: str, user_prompt: str) -> str:
        logger.debug("Calling model %s", self.model_name)
        try:
            response = self.client.chat(
                model=self.model_name,
                messages=[
                    {'role': 'system', 'content': system_instruction},
                    {'role': 'user', 'content': user_prompt},
                ],
                format='json',
                options={'temperature': self.temperature, 'num_predict': self.max_tokens},
            )
        except ollama.ResponseError as e:
            raise RemoteServiceError(f"Model service returned {e.status_code}: {e.error}") from e
        except (httpx.HTTPError, ConnectionError) as e:
            raise RemoteServiceError(f"Could not reach model service: {e}") from e
        except ValueError as e:
            # Non-JSON or wrongly shaped 200 body (JSONDecodeError, pydantic ValidationError)
            raise RemoteServiceError(f"Model service sent an unreadable response: {e}") from e

        try:
            content = response['message']['content']
        except (KeyError, TypeError) as e:
            raise RemoteServiceError(f"Model service response has no message content: {e}") from e
        if not content:
            raise RemoteServiceError("Model service returned an empty reply")
        return content
