"""LLM transport used by the judge, opponent and hint agents."""
from wordduel.llm.client import LLMClient, LLMClientError, LLMResponseMeta, StructuredLLM
from wordduel.llm.stub import SequentialStubClient

__all__ = [
    "LLMClient",
    "LLMClientError",
    "LLMResponseMeta",
    "SequentialStubClient",
    "StructuredLLM",
]
