from collections.abc import Sequence

from app.analysis.evidence import EvidenceRuleRegistry
from app.analysis.fields import PERSONAL_FIELDS, VEHICLE_FIELDS, FieldName, FieldValues
from app.analysis.models import ExtractedFields, PageExtraction
from app.logging.logger import Log


class EvidenceMerger:
    """Merges per-page vision results into one set of fields for a document.

    1. Cross-page merge: pages are visited in page order and a field takes the
       first value backed by a non-blank evidence string. A filled field is
       never overwritten by a later page.
    2. Validation: the chosen value is checked against the evidence from the
       same page with the field's rule and nulled on failure.
    """

    def __init__(self, rules: EvidenceRuleRegistry | None = None) -> None:
        self._rules = rules or EvidenceRuleRegistry()

    def merge(self, pages: Sequence[PageExtraction]) -> ExtractedFields:
        ordered = sorted(pages, key=lambda page: page.page_number)
        chosen: dict[FieldName, tuple[str, str]] = {}
        for page in ordered:
            for name in (*PERSONAL_FIELDS, *VEHICLE_FIELDS):
                if name in chosen:
                    continue
                value = page.value_of(name)
                evidence = page.evidence_for(name)
                if value and evidence.strip():
                    chosen[name] = (value, evidence)

        personal = self._validated(PERSONAL_FIELDS, chosen)
        vehicle = self._validated(VEHICLE_FIELDS, chosen)
        return ExtractedFields(personal_fields=personal, vehicle_fields=vehicle)

    def _validated(
        self,
        names: tuple[FieldName, ...],
        chosen: dict[FieldName, tuple[str, str]],
    ) -> FieldValues:
        fields: FieldValues = {}
        for name in names:
            if name not in chosen:
                fields[name] = None
                continue
            value, evidence = chosen[name]
            validated = self._rules.validate(name, value, evidence)
            if validated is None:
                Log.info(f"Field '{name.value}' rejected: evidence fails its rule")
            fields[name] = validated
        return fields
