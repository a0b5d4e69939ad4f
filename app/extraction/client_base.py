import base64
from abc import ABC, abstractmethod
from collections.abc import Sequence
from dataclasses import dataclass, field


@dataclass(frozen=True)
class ImageInput:
    """Binary image payload attached to a vision completion request."""

    data: bytes = field(repr=False)
    mime_type: str = "image/png"

    def to_data_uri(self) -> str:
        encoded = base64.b64encode(self.data).decode("ascii")
        return f"data:{self.mime_type};base64,{encoded}"


class BaseCompletionClient(ABC):
    """Contract for provider-specific text and vision completion clients."""

    @abstractmethod
    def create_chat_completion(
        self,
        *,
        model: str,
        temperature: float,
        system_prompt: str,
        user_prompt: str,
        images: Sequence[ImageInput] = (),
    ) -> str:
        """Return the provider response as plain text, requesting a JSON object.

        Raises:
            ExternalServiceNetworkError: on transport or provider API failure.
            ExternalServiceError: when the provider returns no content.
        """
