"""Cross-document divergency detection for one batch.

Only records that carry at least one field take part. A divergency needs two
or more of them holding non-null values for the same field that differ; a
value against a null, or null against null, is never reported.
"""

import json
import re
from abc import ABC, abstractmethod
from collections.abc import Sequence

from app.analysis.fields import PERSONAL_FIELDS, VEHICLE_FIELDS, FieldName
from app.analysis.models import Divergency, DivergencyKind, Record
from app.config.settings import Settings
from app.extraction.client_base import BaseCompletionClient
from app.extraction.factory import CompletionClientFactory
from app.extraction.json_payload import parse_json_object
from app.extraction.prompt_loader import load_prompt_template
from app.extraction.retry import RetryPolicy
from app.logging.logger import Log

IDENTIFIER_FIELDS = frozenset(
    {FieldName.CPF, FieldName.CHASSI, FieldName.PLACA, FieldName.TELEFONE}
)

_NON_ALNUM_RE = re.compile(r"[^0-9a-z]")


def comparison_key(name: FieldName, value: str) -> str:
    """Normalize a value so formatting differences do not count as conflicts."""
    folded = value.casefold()
    if name in IDENTIFIER_FIELDS:
        return _NON_ALNUM_RE.sub("", folded)
    return " ".join(folded.split())


def field_values(records: Sequence[Record], name: FieldName) -> dict[str, str]:
    """Non-null values of a field keyed by file name, in record order."""
    values: dict[str, str] = {}
    for record in records:
        value = record.value_of(name)
        if value is not None and value.strip():
            values[record.file_name] = value
    return values


def is_conflicting(name: FieldName, values: dict[str, str]) -> bool:
    return len({comparison_key(name, value) for value in values.values()}) >= 2


class BaseDivergencyComparator(ABC):
    """Contract for comparison collaborators."""

    @abstractmethod
    def compare(self, records: Sequence[Record]) -> list[Divergency]:
        """Report divergencies among records that all carry data."""


class RuleBasedComparator(BaseDivergencyComparator):
    """Deterministic field-by-field comparison."""

    def compare(self, records: Sequence[Record]) -> list[Divergency]:
        divergencies: list[Divergency] = []
        for name in (*PERSONAL_FIELDS, *VEHICLE_FIELDS):
            values = field_values(records, name)
            if not is_conflicting(name, values):
                continue
            divergencies.append(
                Divergency(
                    kind=DivergencyKind.INCONSISTENT_DATA,
                    field=name,
                    files=tuple(values),
                    values_by_file=values,
                    description=(
                        f"Field '{name.value}' has {len(set(values.values()))} "
                        f"different values across {len(values)} documents"
                    ),
                )
            )
        return divergencies


class LlmDivergencyComparator(BaseDivergencyComparator):
    """Delegates the comparison to a text-completion model."""

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
        self._retry = retry_policy or RetryPolicy(name="divergency comparison")
        self._system_prompt = load_prompt_template("divergency_system.txt")
        self._user_template = load_prompt_template("divergency_user.txt")

    def compare(self, records: Sequence[Record]) -> list[Divergency]:
        documents = "\n\n".join(
            f"Document {index} ({record.file_name}):\n"
            + json.dumps(
                {
                    "personalData": {k.value: v for k, v in record.personal_fields.items()},
                    "vehicleData": {k.value: v for k, v in record.vehicle_fields.items()},
                },
                indent=2,
                ensure_ascii=False,
            )
            for index, record in enumerate(records, start=1)
        )
        prompt = self._user_template.format(documents=documents)

        def attempt() -> dict[str, object]:
            return parse_json_object(
                self._client.create_chat_completion(
                    model=self._model,
                    temperature=self._temperature,
                    system_prompt=self._system_prompt,
                    user_prompt=prompt,
                )
            )

        parsed = self._retry.call(attempt)
        items = parsed.get("divergencies")
        if not isinstance(items, list):
            return []
        return [d for d in (self._build(item) for item in items) if d is not None]

    @staticmethod
    def _build(item: object) -> Divergency | None:
        if not isinstance(item, dict):
            return None
        try:
            name = FieldName(str(item.get("field", "")).strip().lower())
        except ValueError:
            Log.warning(f"Comparator reported unknown field: {item.get('field')!r}")
            return None
        try:
            kind = DivergencyKind(item.get("type"))
        except ValueError:
            kind = DivergencyKind.ANOMALY
        raw_values = item.get("values")
        values = (
            {str(k): str(v) for k, v in raw_values.items() if v is not None}
            if isinstance(raw_values, dict)
            else {}
        )
        raw_files = item.get("files")
        files = tuple(str(f) for f in raw_files) if isinstance(raw_files, list) else tuple(values)
        return Divergency(
            kind=kind,
            field=name,
            files=files,
            values_by_file=values,
            description=str(item.get("description") or ""),
        )


class DivergencyDetector:
    """Filters a batch and confirms every reported divergency against the records."""

    def __init__(self, comparator: BaseDivergencyComparator) -> None:
        self._comparator = comparator

    def compare(self, records: Sequence[Record]) -> list[Divergency]:
        if len(records) < 2:
            return []
        with_data = [record for record in records if record.has_data]
        Log.info(f"Divergency filter: {len(records)} -> {len(with_data)} documents with data")
        if len(with_data) < 2:
            return []

        confirmed: list[Divergency] = []
        seen: set[tuple[DivergencyKind, FieldName]] = set()
        for divergency in self._comparator.compare(with_data):
            values = field_values(with_data, divergency.field)
            if not is_conflicting(divergency.field, values):
                Log.warning(
                    f"Dropping unsupported divergency on '{divergency.field.value}': "
                    "records do not hold differing non-null values"
                )
                continue
            key = (divergency.kind, divergency.field)
            if key in seen:
                continue
            seen.add(key)
            confirmed.append(
                Divergency(
                    kind=divergency.kind,
                    field=divergency.field,
                    files=tuple(values),
                    values_by_file=values,
                    description=divergency.description,
                )
            )
        return confirmed


class DivergencyComparatorFactory:
    """Creates the configured comparison collaborator."""

    @classmethod
    def create(
        cls,
        settings: Settings,
        client: BaseCompletionClient,
    ) -> BaseDivergencyComparator:
        engine = settings.divergency_engine.lower()
        if engine == "rules":
            return RuleBasedComparator()
        if engine == "llm":
            return LlmDivergencyComparator(
                client=client,
                model=settings.extraction_model_name,
                temperature=settings.extraction_temperature,
                retry_policy=CompletionClientFactory.retry_policy(
                    "divergency comparison", settings.comparison_max_attempts, settings
                ),
            )
        raise ValueError(
            f"Unknown divergency engine '{engine}'. Choose from: ['llm', 'rules']"
        )
