"""LLM relevance filtering of retrieved candidates."""

from .agent import RelevanceAgent
from .llm_client import LLMClient
from .parsing import AgentResponsePayload, decode_agent_json, parse_agent_response, reconcile
from .prompts import build_prompt, combined_score

__all__ = [
    "AgentResponsePayload",
    "LLMClient",
    "RelevanceAgent",
    "build_prompt",
    "combined_score",
    "decode_agent_json",
    "parse_agent_response",
    "reconcile",
]
