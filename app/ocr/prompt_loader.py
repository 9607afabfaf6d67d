from pathlib import Path

from app.ocr.exceptions import OcrError

_DEFAULT_PROMPT_DIR = Path(__file__).parent / "prompts"


def load_prompt(path: Path | None = None) -> str:
    """Load the OCR extraction prompt from a file.

    Args:
        path: Path to the prompt file.
              Defaults to the bundled petition_prompt.txt.

    Returns:
        The prompt text, stripped of surrounding whitespace.

    Raises:
        OcrError: if the file cannot be read.
    """
    if path is None:
        path = _DEFAULT_PROMPT_DIR / "petition_prompt.txt"
    try:
        return path.read_text(encoding="utf-8").strip()
    except OSError as exc:
        raise OcrError(f"Failed to load OCR prompt: {exc}") from exc
