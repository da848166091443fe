"""OpenAI SDK wrapper for non-streaming calls"""

import logging
from typing import Optional

from openai import AsyncOpenAI

from ideapage_api.core.prompts import IDEA_SYSTEM_PROMPT, IDEA_USER_PROMPT
from ideapage_api.models.errors import ApplicationError, ErrorCode

logger = logging.getLogger(__name__)


class OpenAIClient:
    """
    Wrapper for the OpenAI API client.

    Used for the one-shot idea suggestion; landing page generation streams
    through core.streaming instead.
    """

    def __init__(
        self,
        api_key: str,
        base_url: str = "https://api.openai.com/v1",
        model: str = "gpt-4",
        temperature: float = 0.9,
        client: Optional[AsyncOpenAI] = None,
    ):
        if not api_key and client is None:
            logger.warning("OPENAI_API_KEY not set - idea suggestions are disabled")
        self.model = model
        self.temperature = temperature
        self.client = client or (AsyncOpenAI(api_key=api_key, base_url=base_url) if api_key else None)

    async def suggest_idea(self) -> str:
        """
        Ask the model for a one or two sentence business idea.

        Raises:
            ApplicationError: If API key not configured or API call fails
        """
        if self.client is None:
            raise ApplicationError(
                code=ErrorCode.CONFIGURATION_ERROR,
                message="OpenAI API key not configured. Please set OPENAI_API_KEY in .env file.",
            )

        try:
            logger.info(f"[OpenAI] Requesting idea from {self.model}")
            response = await self.client.chat.completions.create(
                model=self.model,
                messages=[
                    {"role": "system", "content": IDEA_SYSTEM_PROMPT},
                    {"role": "user", "content": IDEA_USER_PROMPT},
                ],
                temperature=self.temperature,
            )
        except Exception as e:
            raise ApplicationError(
                code=ErrorCode.UPSTREAM_ERROR,
                message=f"OpenAI API call failed: {str(e)}",
                retryable=True,
            ) from e

        idea = (response.choices[0].message.content or "").strip()
        if not idea:
            raise ApplicationError(
                code=ErrorCode.UPSTREAM_ERROR,
                message="OpenAI returned an empty idea",
                retryable=True,
            )
        logger.info(f"[OpenAI] ✓ Idea received ({len(idea)} chars)")
        return idea

    async def close(self) -> None:
        if self.client is not None:
            await self.client.close()
