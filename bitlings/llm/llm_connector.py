from abc import ABC, abstractmethod
from typing import List
from bitlings.models.message import Message


class LLMConnector(ABC):
    """
    Seam between the game core and a hosted multimodal model.
    Implementations raise whatever their SDK raises; callers translate.
    """

    @abstractmethod
    def get_json_response(
        self,
        system_prompt: str,
        chat_history: List[Message],
        temperature: float = 0.7,
    ) -> str:
        """Returns the raw text of a JSON-object response. The text is not validated here."""
        pass

    @abstractmethod
    def generate_image(self, prompt: str) -> str:
        """Returns a reference to the generated image (URL or data: URL)."""
        pass
