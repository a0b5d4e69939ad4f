"""Per-page field extraction with a vision-capable model."""

from app.analysis.fields import PERSONAL_FIELDS, VEHICLE_FIELDS, FieldName, build_fields
from app.analysis.models import PageExtraction
from app.extraction.client_base import BaseCompletionClient, ImageInput
from app.extraction.json_payload import parse_json_object
from app.extraction.prompt_loader import load_prompt_template
from app.extraction.retry import RetryPolicy
from app.logging.logger import Log


class VisionExtractor:
    """Queries a vision model for one page image at a time.

    Every field comes back with an evidence snippet, the verbatim text the
    model claims to have read. The merger later discards values whose
    evidence is missing or fails the field's rule.
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
        self._retry = retry_policy or RetryPolicy(name="vision extraction", max_attempts=2)
        self._system_prompt = load_prompt_template("vision_system.txt")
        self._user_template = load_prompt_template("vision_user.txt")

    def extract_from_image(
        self,
        image_bytes: bytes,
        file_name: str,
        page_number: int,
        mime_type: str = "image/png",
    ) -> PageExtraction:
        """Extract fields and evidence from one page image.

        Empty or unusable responses are retried according to the retry policy.

        Raises:
            ExternalServiceError: when every attempt failed.
        """
        image = ImageInput(data=image_bytes, mime_type=mime_type)
        prompt = self._user_template.format(file_name=file_name, page_number=page_number)

        def attempt() -> dict[str, object]:
            raw = self._client.create_chat_completion(
                model=self._model,
                temperature=self._temperature,
                system_prompt=self._system_prompt,
                user_prompt=prompt,
                images=[image],
            )
            Log.debug(f"Vision raw response (page {page_number}):\n{raw}")
            return parse_json_object(raw)

        parsed = self._retry.call(attempt)
        return self._build_page(parsed, page_number)

    @staticmethod
    def _build_page(parsed: dict[str, object], page_number: int) -> PageExtraction:
        raw_evidence = parsed.get("evidence")
        evidence: dict[FieldName, str] = {}
        if isinstance(raw_evidence, dict):
            for name in (*PERSONAL_FIELDS, *VEHICLE_FIELDS):
                snippet = raw_evidence.get(name.value)
                if snippet is not None:
                    evidence[name] = str(snippet)
        raw_text = parsed.get("rawText")
        return PageExtraction(
            page_number=page_number,
            personal_fields=build_fields(parsed.get("personalData"), PERSONAL_FIELDS),
            vehicle_fields=build_fields(parsed.get("vehicleData"), VEHICLE_FIELDS),
            evidence=evidence,
            raw_text=raw_text if isinstance(raw_text, str) else "",
        )
