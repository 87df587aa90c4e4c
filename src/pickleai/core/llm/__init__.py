"""Language model collaborator built on LangChain chat models."""

from .client import ChatModelClient, LanguageModelClient, to_langchain_messages
from .deps import get_llm

__all__ = [
    "ChatModelClient",
    "LanguageModelClient",
    "get_llm",
    "to_langchain_messages",
]
