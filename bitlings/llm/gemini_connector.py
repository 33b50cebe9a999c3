import base64
import os
import logging
from google import genai
from google.genai import types

from typing import List
from bitlings.llm.llm_connector import LLMConnector
from bitlings.models.message import Message

logger = logging.getLogger(__name__)


def _guess_mime_type(url: str) -> str:
    lowered = url.lower().split("?", 1)[0]
    if lowered.endswith((".jpg", ".jpeg")):
        return "image/jpeg"
    if lowered.endswith(".webp"):
        return "image/webp"
    if lowered.endswith(".gif"):
        return "image/gif"
    return "image/png"


class GeminiConnector(LLMConnector):
    def __init__(self):
        api_key = os.environ.get("GEMINI_API_KEY")
        if not api_key:
            raise ValueError("GEMINI_API_KEY environment variable not set.")

        self.model_name = os.environ.get("GEMINI_API_MODEL") or "gemini-flash-latest"
        self.image_model = os.environ.get("GEMINI_IMAGE_MODEL") or "imagen-3.0-generate-002"
        self.client = genai.Client(api_key=api_key)
        self.default_max_tokens = 8192

    def _image_part(self, image_url: str) -> types.Part:
        # data: URLs are inlined, anything else is passed by reference
        if image_url.startswith("data:"):
            header, _, payload = image_url.partition(",")
            mime_type = header[len("data:"):].split(";", 1)[0] or "image/png"
            return types.Part.from_bytes(data=base64.b64decode(payload), mime_type=mime_type)
        return types.Part.from_uri(file_uri=image_url, mime_type=_guess_mime_type(image_url))

    def _convert_chat_history_to_contents(
        self, chat_history: List[Message]
    ) -> List[types.Content]:
        contents = []
        for msg in chat_history:
            if msg.role == "system":
                continue  # System prompt is handled separately in config

            parts = []
            if msg.content:
                parts.append(types.Part.from_text(text=msg.content))
            if msg.image_url:
                parts.append(self._image_part(msg.image_url))
            if parts:
                role = "model" if msg.role == "assistant" else "user"
                contents.append(types.Content(role=role, parts=parts))
        return contents

    def get_json_response(
        self,
        system_prompt: str,
        chat_history: List[Message],
        temperature: float = 0.7,
    ) -> str:
        contents = self._convert_chat_history_to_contents(chat_history)
        if not contents:
            contents.append(types.Content(role="user", parts=[types.Part.from_text(text="Please proceed.")]))

        generation_config = types.GenerateContentConfig(
            response_mime_type="application/json",
            system_instruction=[types.Part.from_text(text=system_prompt)],
            temperature=temperature,
            max_output_tokens=self.default_max_tokens,
        )
        response = self.client.models.generate_content(
            model=self.model_name, contents=contents, config=generation_config
        )
        if not response.text:
            logger.warning("Gemini returned an empty response (blocked or error).")
            return "{}"
        return response.text

    def generate_image(self, prompt: str) -> str:
        response = self.client.models.generate_images(
            model=self.image_model,
            prompt=prompt,
            config=types.GenerateImagesConfig(number_of_images=1),
        )
        if response.generated_images:
            image = response.generated_images[0].image
            if image and image.image_bytes:
                mime_type = image.mime_type or "image/png"
                encoded = base64.b64encode(image.image_bytes).decode("ascii")
                return f"data:{mime_type};base64,{encoded}"
        raise ValueError("Gemini returned no image.")
