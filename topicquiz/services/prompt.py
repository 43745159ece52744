QUESTION_COUNT = 5

QUIZ_PROMPT_TEMPLATE = (
    'Create {count} multiple-choice quiz questions about "{topic}".\n'
    "Format as JSON array with no markdown formatting, just raw JSON.\n"
    "Please include the letters A, B, C, and D with a colon and space at the beginning "
    "of each answer respectively:\n"
    '[{{ "question": "string", "options": ["A","B","C","D"], "answer": "A" }}]'
)

def build_prompt(topic: str) -> str:
    if not topic:
        raise ValueError("topic must be non-empty")
    return QUIZ_PROMPT_TEMPLATE.format(count=QUESTION_COUNT, topic=topic)
