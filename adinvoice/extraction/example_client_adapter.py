"""Offline extraction client.

Answers with an all-null invoice so the pattern tier and reconciliation fill
in what they can. Useful for local runs without an API key and for tests.
"""

import json

from adinvoice.extraction.client_base import BaseExtractionClient, CompletionRequest


class ExampleClientAdapter(BaseExtractionClient):
    """Client that answers every request with the empty value of each schema field."""

    def complete(self, request: CompletionRequest) -> str:
        properties = request.json_schema.get("properties", {})
        if not isinstance(properties, dict):
            properties = {}
        return json.dumps({name: _empty_value(spec) for name, spec in properties.items()})


def _empty_value(spec: object) -> object:
    # Arrays stay arrays so the answer remains schema-valid.
    if isinstance(spec, dict) and spec.get("type") == "array":
        return []
    return None
