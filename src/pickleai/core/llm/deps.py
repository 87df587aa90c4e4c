"""LLM factory functions."""

from typing import Annotated

from fastapi import Depends
from langchain_openai import ChatOpenAI

from pickleai.configs.config import get_llm_config
from pickleai.configs.system import LLMConfig


def get_llm(
    config: Annotated[LLMConfig, Depends(get_llm_config)],
) -> ChatOpenAI:
    """Create and return a ChatOpenAI instance for an OpenAI-compatible endpoint."""
    return ChatOpenAI(
        base_url=config.endpoint,
        api_key=config.api_key,
        model=config.model_name,
        temperature=config.temperature,
        max_tokens=config.max_tokens,
        timeout=config.model_timeout.total_seconds(),
        max_retries=config.max_retries,
    )
