from bitlings.llm.llm_connector import LLMConnector
from bitlings.llm.factory import build_connector

__all__ = ["LLMConnector", "build_connector"]
