from __future__ import annotations
from typing import Optional
from google import genai
from google.genai.errors import ClientError


class LLMRateLimitError(Exception):
    pass


class GeminiChatLLM:
    def __init__(self, api_key: Optional[str], model: str = "gemini-2.0-flash"):
        if not api_key:
            raise RuntimeError("GEMINI_API_KEY is not set")
        self.client = genai.Client(api_key=api_key)
        self.model = model

    async def generate(self, prompt: str) -> Optional[str]:
        try:
            res = await self.client.aio.models.generate_content(model=self.model, contents=prompt)
        except ClientError as e:
            # 429 quota/rate-limit
            if getattr(e, "code", None) == 429:
                raise LLMRateLimitError(str(e)) from e
            raise
        return res.text
