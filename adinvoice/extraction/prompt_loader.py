import json
from pathlib import Path

from adinvoice.classification.platform import Platform
from adinvoice.extraction.exceptions import ExtractionError

_DEFAULT_PROMPT_DIR = Path(__file__).parent / "prompts"

_SYSTEM_PROMPT_FILES: dict[Platform, str] = {
    Platform.GOOGLE_ADS: "google_ads.txt",
    Platform.META_ADS: "meta_ads.txt",
}


def load_system_prompts(prompt_dir: Path | None = None) -> dict[Platform, str]:
    """Load the system prompt for every platform.

    Platforms without a dedicated file share default.txt.

    Raises:
        ExtractionError: if a prompt file cannot be read.
    """
    prompt_dir = prompt_dir or _DEFAULT_PROMPT_DIR
    default = _read(prompt_dir / "default.txt")
    return {
        platform: (
            _read(prompt_dir / _SYSTEM_PROMPT_FILES[platform])
            if platform in _SYSTEM_PROMPT_FILES
            else default
        )
        for platform in Platform
    }


def load_user_prompt_template(prompt_dir: Path | None = None) -> str:
    """Load the user prompt template with {platform} and {invoice_text} placeholders."""
    return _read((prompt_dir or _DEFAULT_PROMPT_DIR) / "user_prompt.txt")


def load_json_schema(path: Path | None = None) -> dict[str, object]:
    """Load the invoice JSON schema sent with every request.

    Raises:
        ExtractionError: if the file cannot be read or is not a JSON object.
    """
    raw = _read(path or _DEFAULT_PROMPT_DIR / "invoice_schema.json")
    try:
        schema = json.loads(raw)
    except json.JSONDecodeError as exc:
        raise ExtractionError(f"Invalid JSON schema: {exc}") from exc
    if not isinstance(schema, dict):
        raise ExtractionError("JSON schema must be an object")
    return schema


def _read(path: Path) -> str:
    try:
        return path.read_text(encoding="utf-8")
    except OSError as exc:
        raise ExtractionError(f"Failed to load prompt file {path.name}: {exc}") from exc
