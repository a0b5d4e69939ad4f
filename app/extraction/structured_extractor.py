"""Structured-data extraction from clean document text."""

from app.analysis.fields import PERSONAL_FIELDS, VEHICLE_FIELDS, build_fields
from app.analysis.models import ExtractedFields
from app.extraction.client_base import BaseCompletionClient
from app.extraction.json_payload import parse_json_object
from app.extraction.prompt_loader import load_prompt_template
from app.extraction.retry import RetryPolicy
from app.logging.logger import Log


class StructuredDataExtractor:
    """Asks a text-completion model for the personal and vehicle fields.

    Used only when the text layer or OCR produced trustworthy text, so the
    full document is available as context and no evidence is requested.
    """

    def __init__(
        self,
        *,
        client: BaseCompletionClient,
        model: str,
        temperature: float = 0.0,
        retry_policy: RetryPolicy | None = None,
    ) -> None:
        self._client = client
        self._model = model
        self._temperature = temperature
        self._retry = retry_policy or RetryPolicy(name="text extraction")
        self._system_prompt = load_prompt_template("text_system.txt")
        self._user_template = load_prompt_template("text_user.txt")

    def extract_from_text(self, text: str, file_name: str) -> ExtractedFields:
        """Extract fields from document text.

        Raises:
            ExternalServiceError: on empty, invalid or non-object responses.
        """
        prompt = self._user_template.format(
            file_name=file_name,
            document_text=text or "(empty - image-only document)",
        )
        Log.debug(f"Text extraction prompt:\n{prompt}")

        parsed = self._retry.call(lambda: parse_json_object(self._call_ai(prompt)))
        fields = ExtractedFields(
            personal_fields=build_fields(parsed.get("personalData"), PERSONAL_FIELDS),
            vehicle_fields=build_fields(parsed.get("vehicleData"), VEHICLE_FIELDS),
        )
        found = sum(
            value is not None
            for value in (*fields.personal_fields.values(), *fields.vehicle_fields.values())
        )
        Log.info(f"Text extraction complete: {found} fields found", file=file_name)
        return fields

    def _call_ai(self, prompt: str) -> str:
        raw = self._client.create_chat_completion(
            model=self._model,
            temperature=self._temperature,
            system_prompt=self._system_prompt,
            user_prompt=prompt,
        )
        Log.debug(f"AI raw response:\n{raw}")
        return raw
