from abc import ABC, abstractmethod
from dataclasses import dataclass, field


@dataclass(frozen=True, slots=True)
class CompletionRequest:
    """One structured-output call: prompts plus the JSON schema the answer must follow."""

    model: str
    temperature: float
    system_prompt: str
    user_prompt: str
    json_schema: dict[str, object] = field(default_factory=dict)


class BaseExtractionClient(ABC):
    """Contract for provider-specific generative extraction clients."""

    @abstractmethod
    def complete(self, request: CompletionRequest) -> str:
        """Return the raw text of the provider's answer.

        Raises:
            ExtractionServiceError: on network, quota, timeout or API errors.
            ExtractionResponseError: when the provider returns no usable content.
        """
