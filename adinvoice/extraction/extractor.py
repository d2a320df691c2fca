"""Two-tier invoice field extraction: AI provider first, regex patterns second."""

import json
from pathlib import Path

from adinvoice.classification.platform import Platform
from adinvoice.extraction.base import BaseFieldExtractor
from adinvoice.extraction.client_base import BaseExtractionClient, CompletionRequest
from adinvoice.extraction.exceptions import ExtractionError, ExtractionResponseError
from adinvoice.extraction.fallback import extract_campaign_rows, extract_with_patterns
from adinvoice.extraction.models import InvoiceData
from adinvoice.extraction.prompt_loader import (
    load_json_schema,
    load_system_prompts,
    load_user_prompt_template,
)
from adinvoice.extraction.reconcile import reconcile
from adinvoice.extraction.validator import validate_and_build
from adinvoice.logging.logger import Log


class FieldExtractor(BaseFieldExtractor):
    """Extracts invoice fields with an AI provider, falling back to regex patterns."""

    def __init__(
        self,
        *,
        client: BaseExtractionClient,
        model: str,
        temperature: float = 0.1,
        prompt_dir: Path | None = None,
    ) -> None:
        self._client = client
        self._model = model
        self._temperature = max(0.0, min(0.2, temperature))
        self._system_prompts = load_system_prompts(prompt_dir)
        self._user_prompt_template = load_user_prompt_template(prompt_dir)
        self._json_schema = load_json_schema(
            prompt_dir / "invoice_schema.json" if prompt_dir else None
        )

    def extract(self, text: str, platform: Platform) -> InvoiceData:
        try:
            data = self._extract_with_ai(text, platform)
            Log.info(f"AI extraction succeeded for {platform.value} invoice")
        except ExtractionError as exc:
            Log.warning(f"AI extraction failed, using pattern fallback: {exc}")
            data = extract_with_patterns(text, platform)

        if platform == Platform.GOOGLE_ADS and not data.campaigns:
            data.campaigns = extract_campaign_rows(text)

        return reconcile(data)

    def _extract_with_ai(self, text: str, platform: Platform) -> InvoiceData:
        prompt = self._user_prompt_template.format(
            platform=platform.value,
            invoice_text=text,
        )
        Log.debug(f"Extraction prompt:\n{prompt}")

        raw_response = self._client.complete(
            CompletionRequest(
                model=self._model,
                temperature=self._temperature,
                system_prompt=self._system_prompts[platform],
                user_prompt=prompt,
                json_schema=self._json_schema,
            )
        )
        Log.debug(f"AI raw response:\n{raw_response}")

        data = validate_and_build(self._parse_json(raw_response), platform)
        if _is_empty(data):
            raise ExtractionResponseError("AI response contains no invoice fields")
        return data

    @staticmethod
    def _parse_json(raw: str) -> dict[str, object]:
        cleaned = raw.strip()
        if cleaned.startswith("```"):
            lines = cleaned.splitlines()
            if lines and lines[0].startswith("```"):
                lines = lines[1:]
            if lines and lines[-1].strip() == "```":
                lines = lines[:-1]
            cleaned = "\n".join(lines)

        try:
            parsed = json.loads(cleaned)
        except json.JSONDecodeError as exc:
            raise ExtractionResponseError(f"Invalid JSON response: {exc}") from exc

        if not isinstance(parsed, dict):
            raise ExtractionResponseError("JSON response must be an object")
        return parsed


def _is_empty(data: InvoiceData) -> bool:
    return (
        data.invoice_number is None
        and data.total_amount is None
        and data.subtotal is None
        and not data.campaigns
    )
