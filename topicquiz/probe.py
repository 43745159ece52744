"""Check that a Gemini API key works and find a model that answers.

Lists the models visible to the key, then tries a short generation with the
configured probe model, falling back through ``PROBE_FALLBACK_MODELS`` in
order until one succeeds. Run with ``python -m topicquiz.probe``.
"""
from __future__ import annotations

import asyncio
import sys
from typing import Callable, Iterable

import httpx
from loguru import logger

from .errors import QuizError
from .log import setup_logging
from .services.llm import GeminiClient, QuizLLM
from .settings import settings

MODELS_URL = "https://generativelanguage.googleapis.com/v1beta/models"

ClientFactory = Callable[[str, str], QuizLLM]

def mask_key(key: str) -> str:
    return f"{key[:10]}...{key[-4:]}"

def _gemini(api_key: str, model_name: str) -> QuizLLM:
    return GeminiClient(api_key=api_key, model_name=model_name, timeout=settings.GENERATION_TIMEOUT)

async def list_models(http: httpx.AsyncClient, api_key: str) -> list[str]:
    r = await http.get(MODELS_URL, params={"key": api_key})
    r.raise_for_status()
    data = r.json()  # ValueError on a non-JSON body
    models = (data.get("models") or []) if isinstance(data, dict) else None
    if not isinstance(models, list):
        raise ValueError(f"unexpected models payload: {r.text[:200]}")
    return [m.get("name", "?") if isinstance(m, dict) else str(m) for m in models]

async def first_working_model(
    api_key: str, candidates: Iterable[str], make_client: ClientFactory = _gemini
) -> str | None:
    for name in candidates:
        logger.info(f"[probe]   Testing: {name}...")
        try:
            await make_client(api_key, name).generate("Hi")
        except QuizError as e:
            logger.info(f"[probe]   {name} failed ({e.detail})")
            continue
        logger.info(f"[probe]   {name} works!")
        return name
    return None

async def probe(
    api_key: str | None,
    *,
    http: httpx.AsyncClient | None = None,
    primary: str | None = None,
    fallbacks: Iterable[str] | None = None,
    make_client: ClientFactory = _gemini,
) -> int:
    """Run the checks and return a process exit code."""
    logger.info("[probe] === Testing Google Gemini API Key ===")
    if not api_key:
        logger.error("[probe] GOOGLE_API_KEY not found in environment or .env")
        return 1
    logger.info(f"[probe] API Key loaded: {mask_key(api_key)}")

    # 1) models visible to this key
    logger.info("[probe] Fetching available models...")
    own_http = http is None
    http = http or httpx.AsyncClient(timeout=30)
    try:
        models = await list_models(http, api_key)
    except httpx.HTTPStatusError as e:
        logger.error(f"[probe] API Request Failed: {e.response.status_code} {e.response.reason_phrase}")
        logger.error(f"[probe] Error details: {e.response.text}")
        return 1
    except (httpx.HTTPError, ValueError) as e:
        logger.error(f"[probe] Error fetching models: {e}")
        return 1
    finally:
        if own_http:
            await http.aclose()

    if models:
        logger.info(f"[probe] Found {len(models)} available models:")
        for name in models:
            logger.info(f"[probe]   - {name}")
    else:
        logger.warning("[probe] No models found")

    # 2) generation with the default probe model
    primary = primary or settings.PROBE_MODEL
    logger.info(f"[probe] Testing content generation with {primary}...")
    try:
        text = await make_client(api_key, primary).generate("Say hello in 3 words")
        logger.info(f'[probe] Content generation successful! Response: "{text.strip()}"')
        return 0
    except QuizError as e:
        logger.error(f"[probe] Content generation failed: {e.detail}")

    # 3) ordered fallback over alternative identifiers
    logger.info("[probe] Trying alternative model names...")
    candidates = list(fallbacks) if fallbacks is not None else settings.PROBE_FALLBACK_MODELS
    found = await first_working_model(api_key, candidates, make_client)
    if found is None:
        logger.error("[probe] No candidate model worked")
        return 1
    return 0

def main() -> None:
    setup_logging(settings.LOG_LEVEL)
    sys.exit(asyncio.run(probe(settings.GOOGLE_API_KEY)))

if __name__ == "__main__":
    main()
