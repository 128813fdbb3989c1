"""Groq API client for learning-path generation."""
import os
from pathlib import Path
import httpx
from typing import Optional
from dotenv import load_dotenv

# Load .env so GROQ_API_KEY is available
_env_path = Path(__file__).resolve().parent.parent / ".env"
load_dotenv(dotenv_path=_env_path)

DEFAULT_MODEL = "llama-3.3-70b-versatile"


class GroqClient:
    """Client for Groq API (fast LLM inference)."""

    def __init__(self, api_key: Optional[str] = None, model: Optional[str] = None):
        self.api_key = api_key or os.getenv("GROQ_API_KEY")
        if not self.api_key:
            raise ValueError("GROQ_API_KEY environment variable not set")

        self.base_url = "https://api.groq.com/openai/v1"
        self.model = model or os.getenv("GROQ_MODEL") or DEFAULT_MODEL

    async def chat(
        self,
        system_prompt: str,
        user_prompt: str,
        temperature: float = 0.7,
        max_tokens: int = 1000,
    ) -> str | None:
        """
        Send one system + user prompt pair and return the model's reply.

        Args:
            system_prompt: Role instructions for the model
            user_prompt: The request itself (e.g. the learning-path brief)
            temperature: Sampling temperature
            max_tokens: Upper bound on the reply length

        Returns:
            The reply text, or None if anything fails (missing network,
            HTTP error status, timeout, unexpected payload) so the path
            generator can fall back to the static starter path.
        """
        try:
            async with httpx.AsyncClient(timeout=30.0) as client:
                response = await client.post(
                    f"{self.base_url}/chat/completions",
                    headers={
                        "Authorization": f"Bearer {self.api_key}",
                        "Content-Type": "application/json",
                    },
                    json={
                        "model": self.model,
                        "messages": [
                            {"role": "system", "content": system_prompt},
                            {"role": "user", "content": user_prompt},
                        ],
                        "temperature": temperature,
                        "max_tokens": max_tokens,
                    },
                )
                response.raise_for_status()
                result = response.json()
                return result["choices"][0]["message"]["content"].strip()
        except Exception as exc:
            print(f"[GroqClient.chat] LLM call failed: {exc}")
            return None


# Singleton instance
_groq_client: Optional[GroqClient] = None


def get_groq_client() -> GroqClient:
    """Get or create the Groq client singleton.

    Raises ValueError when no API key is configured.
    """
    global _groq_client
    if _groq_client is None:
        _groq_client = GroqClient()
    return _groq_client
