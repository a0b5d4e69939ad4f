"""Example completion client adapter.

Use this module as a reference when implementing new provider adapters.
Implement BaseCompletionClient and register the provider in CompletionClientFactory.
"""

import json
from collections.abc import Sequence
from typing import ClassVar

from app.analysis.fields import PERSONAL_FIELDS, VEHICLE_FIELDS
from app.extraction.client_base import BaseCompletionClient, ImageInput


class ExampleClientAdapter(BaseCompletionClient):
    """Example adapter that answers every request with an all-null payload.

    No network calls. The payload satisfies the text, vision and comparison
    response shapes at once, so the whole pipeline runs offline.
    """

    DEFAULT_RESPONSE: ClassVar[dict[str, object]] = {
        "rawText": "",
        "personalData": {name.value: None for name in PERSONAL_FIELDS},
        "vehicleData": {name.value: None for name in VEHICLE_FIELDS},
        "evidence": {name.value: "" for name in (*PERSONAL_FIELDS, *VEHICLE_FIELDS)},
        "divergencies": [],
    }

    def create_chat_completion(
        self,
        *,
        model: str,
        temperature: float,
        system_prompt: str,
        user_prompt: str,
        images: Sequence[ImageInput] = (),
    ) -> str:
        _ = model, temperature, system_prompt, user_prompt, images
        return json.dumps(self.DEFAULT_RESPONSE)
