import logging
from typing import Optional

from bitlings.errors import ExternalServiceError, ValidationError
from bitlings.llm.llm_connector import LLMConnector
from bitlings.llm.schemas import GeneratedBundle
from bitlings.models.creature_type import CreatureType
from bitlings.models.message import Message
from bitlings.utils.bundle_validator import repair_bundle

logger = logging.getLogger(__name__)

TYPE_LIST = ", ".join(t.value for t in CreatureType)

SYSTEM_PROMPT = f"""You are a game designer specializing in creating fantasy creature stats and abilities for a creature-collection game called Bitlings. Generate balanced stats and thematically appropriate abilities based on the creature's appearance and description.

Available types: {TYPE_LIST}.

Each Bitling must have:
1. A PRIMARY type and optionally a SECONDARY type
2. Level-appropriate base stats for a level 1 creature
3. A set of moves learned at different levels (at least 6 moves)

For moves, specify:
- Name
- Type (matching one of the Bitling's types when possible)
- Power (0 for status moves, 40-120 for damage moves)
- Accuracy (0-100 percentage)
- PP (5-30 points)
- Max PP (same as PP)
- Description
- Category ("physical", "special", or "status")
- Level learned (from level 1 to 36)"""

USER_PROMPT_TEMPLATE = """Create detailed stats and abilities for a Bitling named "{name}" with this description: "{description}".

Analyze the image carefully and return the data in this JSON format:
{{
  "types": ["primary_type", "secondary_type"],
  "stats": {{"hp": 30-50, "attack": 30-50, "defense": 30-50, "speed": 30-50}},
  "description": "A brief description based on appearance (1-2 sentences)",
  "behavior": "How the Bitling behaves in its natural habitat",
  "moves": [
    {{
      "name": "Move Name",
      "type": "one of the available types",
      "power": 0-120,
      "accuracy": 0-100,
      "pp": 5-30,
      "maxPp": "same as pp",
      "description": "Brief description of the move",
      "category": "physical/special/status",
      "levelLearned": "level at which this move is learned"
    }}
  ]
}}

Choose types from: {types}.
Ensure moves are learned at increasing levels (1, 5, 10, 15, 20, 25, etc.)"""

IMAGE_PROMPT_TEMPLATE = (
    "A cute fantasy creature character design: {prompt}. "
    "Pixel art style, game sprite, vibrant colors, white background, centered composition."
)


class StatsGenerator:
    """
    Turns a creature's name, description and image into a repaired
    `GeneratedBundle` by way of an LLMConnector.

    Transport failures surface as ExternalServiceError. Malformed but
    readable output is repaired, never raised.
    """

    def __init__(self, llm: Optional[LLMConnector]):
        self.llm = llm

    def _require_llm(self) -> LLMConnector:
        if self.llm is None:
            raise ExternalServiceError("No generative backend is configured")
        return self.llm

    def generate(self, name: str, description: str, image_url: str) -> GeneratedBundle:
        if not name or not name.strip():
            raise ValidationError("Name is required")
        if not description or not description.strip():
            raise ValidationError("Description is required")
        if not image_url or not image_url.strip():
            raise ValidationError("Image URL is required")

        llm = self._require_llm()
        prompt = USER_PROMPT_TEMPLATE.format(
            name=name.strip(), description=description.strip(), types=TYPE_LIST
        )
        logger.info(f"Generating stats for '{name}'")
        try:
            raw = llm.get_json_response(
                system_prompt=SYSTEM_PROMPT,
                chat_history=[Message(role="user", content=prompt, image_url=image_url)],
            )
        except Exception as e:
            logger.error(f"Stats generation failed for '{name}': {e}", exc_info=True)
            raise ExternalServiceError(f"Failed to generate stats: {e}") from e

        bundle = repair_bundle(raw)
        logger.debug(f"Generated bundle for '{name}': {bundle.model_dump_json()}")
        return bundle

    def generate_image(self, prompt: str) -> str:
        if not prompt or not prompt.strip():
            raise ValidationError("Prompt is required")

        llm = self._require_llm()
        try:
            url = llm.generate_image(IMAGE_PROMPT_TEMPLATE.format(prompt=prompt.strip()))
        except Exception as e:
            logger.error(f"Image generation failed: {e}", exc_info=True)
            raise ExternalServiceError(f"Failed to generate image: {e}") from e
        if not url:
            raise ExternalServiceError("Failed to generate image - no URL returned")
        return url
