import asyncio

from fastapi import APIRouter, Body, Depends, Request
from fastapi.responses import JSONResponse, Response
from loguru import logger

from ..errors import QuizError, TopicValidationError, ExternalApiError, MalformedQuizError
from ..schemas import QuizRequest, QuizResponse, ErrorResponse
from ..services.llm import QuizLLM, get_llm
from ..services.parse import sanitize, parse_quiz
from ..services.prompt import build_prompt
from ..settings import settings

router = APIRouter()

# nginx convention for "client closed request"
CLIENT_CLOSED_REQUEST = 499

class ClientDisconnected(Exception):
    pass

async def _generate_while_connected(request: Request, llm: QuizLLM, prompt: str) -> str:
    """Run the provider call, cancelling it if the caller goes away first."""
    task = asyncio.create_task(llm.generate(prompt))
    try:
        while True:
            done, _ = await asyncio.wait({task}, timeout=settings.DISCONNECT_POLL_INTERVAL)
            if done:
                return task.result()
            if await request.is_disconnected():
                raise ClientDisconnected()
    finally:
        if not task.done():
            task.cancel()

def _error(exc: QuizError) -> JSONResponse:
    return JSONResponse(ErrorResponse(error=exc.message).model_dump(), status_code=exc.status_code)

@router.post(
    "/quiz",
    response_model=QuizResponse,
    response_model_exclude_unset=True,
    responses={400: {"model": ErrorResponse}, 500: {"model": ErrorResponse}},
)
async def quiz(
    request: Request,
    payload: QuizRequest | None = Body(default=None),
    llm: QuizLLM = Depends(get_llm),
):
    topic = payload.topic if payload else None
    # whitespace counts as empty, but the prompt gets the topic as sent
    if not topic or not topic.strip():
        logger.warning("[quiz] rejected request without topic")
        return _error(TopicValidationError())

    prompt = build_prompt(topic)
    logger.info(f"[quiz] topic={topic!r} model={llm.model_name}")

    try:
        raw = await _generate_while_connected(request, llm, prompt)
    except ClientDisconnected:
        logger.warning(f"[quiz] client disconnected, cancelled generation for topic={topic!r}")
        return Response(status_code=CLIENT_CLOSED_REQUEST)
    except QuizError as e:
        logger.error(f"[quiz] API error: {e.detail}")
        return _error(e)
    except Exception as e:
        logger.exception(f"[quiz] API error: {e}")
        return _error(ExternalApiError(str(e)))

    cleaned = sanitize(raw)
    try:
        questions = parse_quiz(cleaned)
    except MalformedQuizError as e:
        logger.error(f"[quiz] Failed to parse quiz JSON ({e.detail}): {e.text}")
        return _error(e)

    logger.info(f"[quiz] generated {len(questions)} questions for topic={topic!r}")
    return QuizResponse(questions=questions)
