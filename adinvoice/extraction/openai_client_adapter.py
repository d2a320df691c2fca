import json

import httpx
import openai

from adinvoice.extraction.client_base import BaseExtractionClient, CompletionRequest
from adinvoice.extraction.exceptions import ExtractionResponseError, ExtractionServiceError
from adinvoice.logging.logger import Log


class OpenAIClientAdapter(BaseExtractionClient):
    """Client for OpenAI and every provider that speaks its chat completions API.

    With structured_output the schema is enforced by the provider
    (``json_schema`` response format). Providers without that feature get
    ``json_object`` mode and the schema is appended to the system prompt.
    """

    def __init__(
        self,
        *,
        api_key: str,
        timeout_seconds: int,
        base_url: str | None = None,
        structured_output: bool = True,
        max_output_tokens: int = 2000,
    ) -> None:
        self._client = openai.OpenAI(
            api_key=api_key,
            timeout=timeout_seconds,
            base_url=base_url,
            max_retries=1,
        )
        self._structured_output = structured_output
        self._max_output_tokens = max_output_tokens

    def complete(self, request: CompletionRequest) -> str:
        system_prompt = request.system_prompt
        if self._structured_output:
            response_format: dict[str, object] = {
                "type": "json_schema",
                "json_schema": {
                    "name": "invoice_data",
                    "strict": True,
                    "schema": request.json_schema,
                },
            }
        else:
            response_format = {"type": "json_object"}
            system_prompt += (
                "\n\nRespond with one JSON object matching this schema:\n"
                + json.dumps(request.json_schema)
            )

        try:
            response = self._client.chat.completions.create(
                model=request.model,
                temperature=request.temperature,
                max_tokens=self._max_output_tokens,
                response_format=response_format,  # type: ignore[arg-type]
                messages=[
                    {"role": "system", "content": system_prompt},
                    {"role": "user", "content": request.user_prompt},
                ],
            )
        except (openai.APIConnectionError, httpx.ConnectError, httpx.TimeoutException) as exc:
            raise ExtractionServiceError(f"AI provider network error: {exc}") from exc
        except openai.RateLimitError as exc:
            raise ExtractionServiceError(f"AI provider rate limit reached: {exc}") from exc
        except openai.APIError as exc:
            raise ExtractionServiceError(f"AI provider API error: {exc}") from exc

        if response.usage is not None:
            Log.debug(
                f"AI usage: {response.usage.prompt_tokens} prompt / "
                f"{response.usage.completion_tokens} completion tokens"
            )
        if not response.choices:
            raise ExtractionResponseError("AI returned no choices")
        choice = response.choices[0]
        if choice.finish_reason == "length":
            raise ExtractionResponseError(
                f"AI response truncated at {self._max_output_tokens} tokens"
            )
        if not choice.message.content:
            raise ExtractionResponseError("AI returned empty response")
        return choice.message.content
