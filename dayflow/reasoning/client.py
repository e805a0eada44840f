"""
DAYFLOW Planner API - Reasoning Client

The planner's only view of the language model: propose() takes a system
instruction, a user prompt and a JSON schema, and returns either a dict
that the model produced for that schema or None. Every failure mode
(disabled, timeout, API error, free text, unparseable arguments) collapses
to None. Callers must still validate the dict.
"""

import json
import logging
from abc import ABC, abstractmethod
from typing import Any, Dict, Optional

from openai import AsyncOpenAI

from dayflow.config import settings

logger = logging.getLogger(__name__)


class ReasoningClientInterface(ABC):
    """Structured-output capability backed by an external reasoning service."""

    @abstractmethod
    async def propose(
        self,
        system_prompt: str,
        user_prompt: str,
        schema: Dict[str, Any],
        name: str,
    ) -> Optional[Dict[str, Any]]:
        """Return a payload shaped by schema, or None when nothing usable came back."""
        pass


class DisabledReasoningClient(ReasoningClientInterface):
    """Used when no model is configured; every proposal is absent."""

    async def propose(
        self,
        system_prompt: str,
        user_prompt: str,
        schema: Dict[str, Any],
        name: str,
    ) -> Optional[Dict[str, Any]]:
        return None


class OpenAIReasoningClient(ReasoningClientInterface):
    """
    OpenAI chat-completions client using a forced function call, so the
    model must answer with arguments for the given schema.
    """

    def __init__(self, client: AsyncOpenAI):
        self._openai_client = client

    async def propose(
        self,
        system_prompt: str,
        user_prompt: str,
        schema: Dict[str, Any],
        name: str,
    ) -> Optional[Dict[str, Any]]:
        try:
            logger.debug(f"Sending '{name}' request to OpenAI (model: {settings.MODEL_NAME})")

            response = await self._openai_client.chat.completions.create(
                model=settings.MODEL_NAME,
                messages=[
                    {"role": "system", "content": system_prompt},
                    {"role": "user", "content": user_prompt},
                ],
                tools=[
                    {
                        "type": "function",
                        "function": {
                            "name": name,
                            "description": f"Return the {name.replace('_', ' ')} result",
                            "parameters": schema,
                        },
                    }
                ],
                tool_choice={"type": "function", "function": {"name": name}},
                temperature=settings.LLM_TEMPERATURE,
                max_tokens=settings.LLM_MAX_TOKENS,
                timeout=settings.LLM_TIMEOUT,
            )
        except Exception as e:
            logger.error(f"Error calling OpenAI API for '{name}': {e}", exc_info=True)
            return None

        message = response.choices[0].message if response.choices else None
        tool_calls = getattr(message, "tool_calls", None) or []
        if not tool_calls:
            logger.warning(f"OpenAI returned no '{name}' function call")
            return None

        try:
            payload = json.loads(tool_calls[0].function.arguments)
        except (TypeError, ValueError) as e:
            logger.warning(f"Could not parse '{name}' arguments from OpenAI: {e}")
            return None

        if not isinstance(payload, dict):
            logger.warning(f"OpenAI '{name}' arguments were not an object")
            return None
        return payload


def build_reasoning_client() -> ReasoningClientInterface:
    """Create the configured client; disabled unless USE_LLM and an API key are set."""
    if settings.USE_LLM and settings.OPENAI_API_KEY:
        logger.info("OpenAI reasoning client initialized")
        return OpenAIReasoningClient(AsyncOpenAI(api_key=settings.OPENAI_API_KEY))
    logger.info("Reasoning service disabled, planners will use fallbacks")
    return DisabledReasoningClient()


_reasoning_client: Optional[ReasoningClientInterface] = None


def get_reasoning_client() -> ReasoningClientInterface:
    """Dependency returning the process-wide reasoning client."""
    global _reasoning_client
    if _reasoning_client is None:
        _reasoning_client = build_reasoning_client()
    return _reasoning_client
