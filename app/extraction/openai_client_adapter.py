from collections.abc import Sequence
from typing import Any

import httpx
import openai

from app.extraction.client_base import BaseCompletionClient, ImageInput
from app.extraction.exceptions import ExternalServiceError, ExternalServiceNetworkError


class OpenAIClientAdapter(BaseCompletionClient):
    """Completion client built on the OpenAI-compatible chat API.

    Images are sent as ``image_url`` content parts carrying base64 data URIs.
    """

    def __init__(
        self,
        *,
        api_key: str,
        timeout_seconds: int,
        base_url: str | None = None,
    ) -> None:
        self._client = openai.OpenAI(
            api_key=api_key,
            timeout=timeout_seconds,
            base_url=base_url,
        )

    def create_chat_completion(
        self,
        *,
        model: str,
        temperature: float,
        system_prompt: str,
        user_prompt: str,
        images: Sequence[ImageInput] = (),
    ) -> str:
        try:
            response = self._client.chat.completions.create(
                model=model,
                temperature=temperature,
                response_format={"type": "json_object"},
                messages=[
                    {"role": "system", "content": system_prompt},
                    {"role": "user", "content": self._user_content(user_prompt, images)},
                ],
            )
        except (openai.APIConnectionError, httpx.ConnectError, httpx.TimeoutException) as exc:
            raise ExternalServiceNetworkError(
                f"AI provider network error: {exc}"
            ) from exc
        except openai.APIError as exc:
            raise ExternalServiceNetworkError(
                f"AI provider API error: {exc}"
            ) from exc

        if not response.choices:
            raise ExternalServiceError("AI returned no choices")
        content = response.choices[0].message.content
        if content is None or not content.strip():
            raise ExternalServiceError("AI returned empty response")
        return content

    @staticmethod
    def _user_content(user_prompt: str, images: Sequence[ImageInput]) -> Any:
        if not images:
            return user_prompt
        parts: list[dict[str, Any]] = [{"type": "text", "text": user_prompt}]
        for image in images:
            parts.append(
                {
                    "type": "image_url",
                    "image_url": {"url": image.to_data_uri(), "detail": "high"},
                }
            )
        return parts
