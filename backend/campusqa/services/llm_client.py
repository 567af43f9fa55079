from typing import Optional
from campusqa.core.config import settings
from campusqa.services.prompts import (
    CLEAN_FACT_PROMPT,
    CLEAN_QA_PROMPT,
    SYNTHESIS_PROMPT,
    SYNTHESIS_SYSTEM_PROMPT,
)
from langchain_core.messages import SystemMessage, HumanMessage
from langchain_openai import ChatOpenAI
from langchain_anthropic import ChatAnthropic
from langchain_ollama import ChatOllama

CLEANING_TEMPERATURE = 0.2
SYNTHESIS_TEMPERATURE = 0.4


class LLMClient:
    """Unified LLM client that supports OpenAI, Anthropic, and Ollama"""

    def __init__(self):
        self.provider = settings.LLM_PROVIDER.lower()
        self.model = settings.MODEL_NAME
        self.cleaning_client = self._build_client(CLEANING_TEMPERATURE, max_tokens=300)
        self.synthesis_client = self._build_client(SYNTHESIS_TEMPERATURE, max_tokens=400)

    def _build_client(self, temperature: float, max_tokens: int):
        if self.provider == "openai":
            if not settings.OPENAI_API_KEY:
                raise ValueError("OPENAI_API_KEY not set in environment")

            kwargs = {
                "model": self.model,
                "temperature": temperature,
                "api_key": settings.OPENAI_API_KEY,
                "max_tokens": max_tokens,
            }
            if settings.OPENAI_BASE_URL:
                kwargs["base_url"] = settings.OPENAI_BASE_URL
            return ChatOpenAI(**kwargs)
        elif self.provider == "anthropic":
            if not settings.ANTHROPIC_API_KEY:
                raise ValueError("ANTHROPIC_API_KEY not set in environment")
            return ChatAnthropic(
                model=self.model,
                temperature=temperature,
                max_tokens=max_tokens,
                anthropic_api_key=settings.ANTHROPIC_API_KEY
            )
        elif self.provider == "ollama":
            kwargs = {
                "base_url": settings.OLLAMA_BASE_URL,
                "model": settings.OLLAMA_MODEL,
                "temperature": temperature,
                "num_predict": max_tokens,
            }
            if settings.OLLAMA_API_KEY:
                kwargs["headers"] = {"Authorization": f"Bearer {settings.OLLAMA_API_KEY}"}
            return ChatOllama(**kwargs)
        else:
            raise ValueError(f"Unsupported LLM provider: {self.provider}")

    async def invoke(self, prompt: str, system_prompt: Optional[str] = None, client=None) -> str:
        """Invoke the LLM with a prompt"""
        messages = []
        if system_prompt:
            messages.append(SystemMessage(content=system_prompt))
        messages.append(HumanMessage(content=prompt))

        response = await (client or self.cleaning_client).ainvoke(messages)
        return response.content.strip()

    async def clean(
        self,
        question: Optional[str] = None,
        answer: Optional[str] = None,
        content: Optional[str] = None
    ) -> str:
        """
        Rewrite raw forum text into a retrieval-friendly knowledge chunk.

        Pass ``question`` and ``answer`` for an approved Q&A pair, or
        ``content`` for a standalone fact.
        """
        if question is not None and answer is not None:
            prompt = CLEAN_QA_PROMPT.format(question=question, answer=answer)
        elif content is not None:
            prompt = CLEAN_FACT_PROMPT.format(content=content)
        else:
            raise ValueError("clean() needs either question and answer, or content")
        return await self.invoke(prompt, client=self.cleaning_client)

    async def synthesize(self, query: str, context: str) -> str:
        """Answer ``query`` using only ``context``"""
        prompt = SYNTHESIS_PROMPT.format(query=query, context=context)
        return await self.invoke(prompt, system_prompt=SYNTHESIS_SYSTEM_PROMPT, client=self.synthesis_client)


# Global LLM client instance
_llm_client: Optional[LLMClient] = None


def get_llm_client() -> LLMClient:
    """Get or create LLM client singleton"""
    global _llm_client
    if _llm_client is None:
        _llm_client = LLMClient()
    return _llm_client
