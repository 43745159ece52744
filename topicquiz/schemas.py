from typing import Any, List, Optional
from pydantic import BaseModel, ConfigDict

class QuizQuestion(BaseModel):
    # provider output is relayed as-is: values are not type-checked, missing keys stay missing
    model_config = ConfigDict(extra="allow")

    question: Any = None
    options: Any = None
    answer: Any = None

class QuizRequest(BaseModel):
    topic: Optional[str] = None

class QuizResponse(BaseModel):
    questions: List[QuizQuestion]

class ErrorResponse(BaseModel):
    error: str
