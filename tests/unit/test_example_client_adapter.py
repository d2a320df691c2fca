"""Tests for ExampleClientAdapter (offline adapter)."""

import json

from adinvoice.extraction.client_base import CompletionRequest
from adinvoice.extraction.example_client_adapter import ExampleClientAdapter
from adinvoice.extraction.prompt_loader import load_json_schema


def _request(json_schema: dict[str, object]) -> CompletionRequest:
    return CompletionRequest(
        model="any",
        temperature=0.0,
        system_prompt="sys",
        user_prompt="user",
        json_schema=json_schema,
    )


class TestExampleClientAdapter:
    def test_answers_every_invoice_field_with_empty_value(self) -> None:
        schema = load_json_schema()
        data = json.loads(ExampleClientAdapter().complete(_request(schema)))

        assert set(data) == set(schema["properties"])  # type: ignore[arg-type]
        assert data["invoiceNumber"] is None
        assert data["totalAmount"] is None
        assert data["campaigns"] == []
        assert data["payments"] == []

    def test_schema_without_properties_gives_empty_object(self) -> None:
        assert ExampleClientAdapter().complete(_request({"type": "object"})) == "{}"

    def test_ignores_prompts(self) -> None:
        schema = {"properties": {"a": {"type": "string"}, "b": {"type": "array"}}}
        r1 = ExampleClientAdapter().complete(_request(schema))
        r2 = ExampleClientAdapter().complete(
            CompletionRequest(
                model="b", temperature=1.0, system_prompt="s2", user_prompt="u2", json_schema=schema
            )
        )
        assert r1 == r2
        assert json.loads(r1) == {"a": None, "b": []}
