import os
import logging
import openai
from typing import Any, Dict, List

from bitlings.llm.llm_connector import LLMConnector
from bitlings.models.message import Message

logger = logging.getLogger(__name__)


class OpenAIConnector(LLMConnector):
    """
    Reference : https://platform.openai.com/docs/guides/vision
    """

    def __init__(self):
        self.base_url = os.environ.get("OPENAI_API_BASE_URL") or None
        self.api_key = os.environ.get("OPENAI_API_KEY")
        self.model = os.environ.get("OPENAI_API_MODEL", "gpt-4o")
        self.image_model = os.environ.get("OPENAI_IMAGE_MODEL", "dall-e-3")
        if not self.api_key:
            logger.error("OPENAI_API_KEY environment variable not set.")
            raise ValueError("OPENAI_API_KEY environment variable not set.")
        # Failures go straight back to the caller
        self.client = openai.OpenAI(base_url=self.base_url, api_key=self.api_key, max_retries=0)

    def _convert_chat_history_to_messages(
        self, chat_history: List[Message]
    ) -> List[Dict[str, Any]]:
        messages = []
        for msg in chat_history:
            # Images ride along as content parts on the same message
            if msg.image_url:
                parts: List[Dict[str, Any]] = []
                if msg.content:
                    parts.append({"type": "text", "text": msg.content})
                parts.append({"type": "image_url", "image_url": {"url": msg.image_url}})
                messages.append({"role": msg.role, "content": parts})
            else:
                messages.append({"role": msg.role, "content": msg.content or ""})
        return messages

    def get_json_response(
        self,
        system_prompt: str,
        chat_history: List[Message],
        temperature: float = 0.7,
    ) -> str:
        messages = [{"role": "system", "content": system_prompt}]
        messages.extend(self._convert_chat_history_to_messages(chat_history))

        resp = self.client.chat.completions.create(
            model=self.model,
            messages=messages,
            temperature=temperature,
            response_format={"type": "json_object"},
        )
        content = resp.choices[0].message.content if resp.choices else None
        if not content:
            logger.warning("OpenAI returned an empty completion.")
            return "{}"
        return content

    def generate_image(self, prompt: str) -> str:
        response = self.client.images.generate(
            model=self.image_model,
            prompt=prompt,
            n=1,
            size="1024x1024",
            quality="standard",
        )
        if response.data:
            image = response.data[0]
            if image.url:
                return image.url
            if image.b64_json:
                return f"data:image/png;base64,{image.b64_json}"
        raise ValueError("Failed to generate image - no URL returned")
