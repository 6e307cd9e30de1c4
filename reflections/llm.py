"""
Text generation client.

A thin wrapper around the OpenAI Responses API: prompt in, text out. One
client is built per process and handed to the code that needs it, so tests
can pass a fake with the same `generate()` method.
"""
from functools import lru_cache
from typing import Optional

from django.conf import settings
from openai import OpenAI

import logging
logger = logging.getLogger(__name__)


class TextGenerator:
    """Prompt-in, text-out access to the language model."""

    def __init__(self, client: OpenAI, model: str):
        self.client = client
        self.model = model

    def generate(self, prompt: str) -> str:
        """
        Run one generation.

        Errors from the API propagate unchanged; there is no retry.
        """
        logger.debug(f"Generating text with {self.model} ({len(prompt)} prompt chars)")
        response = self.client.responses.create(model=self.model, input=prompt)
        return response.output_text


@lru_cache(maxsize=1)
def get_text_generator(model: Optional[str] = None) -> TextGenerator:
    client = OpenAI(api_key=settings.OPENAI_API_KEY, timeout=settings.OPENAI_TIMEOUT)
    return TextGenerator(client, model or settings.OPENAI_MODEL)
