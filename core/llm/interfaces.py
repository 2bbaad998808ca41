"""
LLM Provider Interface - Abstract base for text-generation providers.

The generative problem scorer only needs plain text back; parsing happens
in the scorer so any chat-completion backend can sit behind this.
"""
from abc import ABC, abstractmethod


class LLMProvider(ABC):
    """
    Abstract Interface for AI Service Providers (OpenAI, Ollama, Gemini via OpenAI-compatible gateways, etc.).
    """

    @abstractmethod
    def generate_text(self, system_prompt: str, user_message: str) -> str:
        """
        Return the model's raw text reply for one system + user exchange.

        Raises on transport or API failure after the provider's own retries.
        """
        pass
