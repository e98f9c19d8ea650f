from pathlib import Path

from app.quality.exceptions import QualityError

_DEFAULT_PROMPT_DIR = Path(__file__).parent / "prompts"


def load_prompt_template(path: Path | None = None) -> str:
    """Load the quality prompt template from a file.

    Args:
        path: Path to the prompt template file.
              Defaults to the bundled quality_prompt.txt.

    Raises:
        QualityError: if the file cannot be read.
    """
    if path is None:
        path = _DEFAULT_PROMPT_DIR / "quality_prompt.txt"
    try:
        return path.read_text(encoding="utf-8")
    except OSError as exc:
        raise QualityError(f"Failed to load prompt template: {exc}") from exc


def load_json_schema(path: Path | None = None) -> str:
    """Load the quality report JSON schema from a file.

    Raises:
        QualityError: if the file cannot be read.
    """
    if path is None:
        path = _DEFAULT_PROMPT_DIR / "quality_schema.json"
    try:
        return path.read_text(encoding="utf-8")
    except OSError as exc:
        raise QualityError(f"Failed to load JSON schema: {exc}") from exc
