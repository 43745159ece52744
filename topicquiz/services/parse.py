import json, re
from pydantic import ValidationError
from ..errors import MalformedQuizError
from ..schemas import QuizQuestion

# any fence; a language tag (e.g. ```json) only counts when it ends the line
_FENCE = re.compile(r"```(?:[\w+-]*\n)?")

def sanitize(raw: str) -> str:
    """Strip markdown code fences the model sometimes wraps around its JSON.

    Best-effort: fences are removed by pattern, balance is never checked.
    """
    text = (raw or "").strip()
    if text.startswith("```"):
        text = _FENCE.sub("", text).strip()
    return text

def parse_quiz(s: str) -> list[QuizQuestion]:
    try:
        data = json.loads(s)
    except (TypeError, ValueError) as e:
        raise MalformedQuizError(s, f"invalid JSON: {e}") from e

    if isinstance(data, dict) and isinstance(data.get("questions"), list):
        data = data["questions"]
    if not isinstance(data, list):
        raise MalformedQuizError(s, f"expected a JSON array, got {type(data).__name__}")

    try:
        return [QuizQuestion.model_validate(item) for item in data]
    except ValidationError as e:
        raise MalformedQuizError(s, f"unexpected question shape: {e.error_count()} error(s)") from e
