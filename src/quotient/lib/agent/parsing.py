"""Decoding and reconciliation of the language model's verdicts.

Decoding tries two strategies in order:

1. The whole reply as JSON.
2. The first ``{`` through the last ``}`` of the reply, for answers wrapped
   in prose or code fences.

The decoded object is validated with :class:`AgentResponsePayload`.
Reconciliation then keeps only candidates the model vouched for, so
usernames the model made up never reach the caller.
"""

import json
import logging
import re
from typing import Any

from pydantic import Field, ValidationError, field_validator

from ...errors import AgentParseError
from ...models import (
    ProcessedAccountMatch,
    ProcessedCastMatch,
    ProcessedResult,
    RelevanceVerdict,
    ResultSet,
    WireModel,
)

logger = logging.getLogger(__name__)

_EMBEDDED_OBJECT = re.compile(r"\{.*\}", re.DOTALL)


class AgentResponsePayload(WireModel):
    """The JSON object the model is asked to return."""

    summary: str = ""
    key_takeaways: list[str] = Field(default_factory=list)
    processed_results: list[Any] = Field(default_factory=list)

    @field_validator("summary", mode="before")
    @classmethod
    def _summary_text(cls, value):
        return value if isinstance(value, str) else ""

    @field_validator("key_takeaways", mode="before")
    @classmethod
    def _string_takeaways(cls, value):
        if isinstance(value, str):
            return [value] if value.strip() else []
        if not isinstance(value, list):
            return []
        return [item for item in value if isinstance(item, str)]

    @field_validator("processed_results", mode="before")
    @classmethod
    def _null_results(cls, value):
        return [] if value is None else value


def decode_agent_json(text: str) -> dict:
    """Decode *text* into a JSON object, falling back to the embedded ``{...}`` span."""
    try:
        decoded = json.loads(text)
    except json.JSONDecodeError:
        match = _EMBEDDED_OBJECT.search(text)
        if match is None:
            raise AgentParseError("Agent response contains no JSON object")
        logger.warning("Agent response was not pure JSON; extracting embedded object")
        try:
            decoded = json.loads(match.group(0))
        except json.JSONDecodeError as exc:
            raise AgentParseError(f"Agent response JSON could not be decoded: {exc}") from exc

    if not isinstance(decoded, dict):
        raise AgentParseError("Agent response JSON is not an object")
    return decoded


def parse_agent_response(text: str) -> tuple[AgentResponsePayload, list[RelevanceVerdict]]:
    """Decode and validate a model reply.

    Returns the payload and its well-formed verdicts.  Verdict entries that
    fail validation are logged and skipped.
    """
    decoded = decode_agent_json(text)
    try:
        payload = AgentResponsePayload.model_validate(decoded)
    except ValidationError as exc:
        raise AgentParseError(f"Agent response has an unexpected shape: {exc}") from exc

    verdicts: list[RelevanceVerdict] = []
    for entry in payload.processed_results:
        try:
            verdicts.append(RelevanceVerdict.model_validate(entry))
        except ValidationError:
            logger.warning("Skipping malformed verdict: %r", entry)
    return payload, verdicts


def _is_kept(verdict: RelevanceVerdict, treat_missing_as_relevant: bool) -> bool:
    if not (verdict.relevance_context or "").strip():
        return False
    if verdict.is_relevant is None:
        return treat_missing_as_relevant
    return verdict.is_relevant


def reconcile(
    result_set: ResultSet,
    verdicts: list[RelevanceVerdict],
    treat_missing_as_relevant: bool = True,
) -> list[ProcessedResult]:
    """Merge verdicts back onto the original candidates.

    A candidate is kept only if a verdict with exactly its username exists,
    that verdict carries non-empty context, and it is not marked irrelevant.
    The first verdict per username wins.
    """
    by_username: dict[str, RelevanceVerdict] = {}
    for verdict in verdicts:
        by_username.setdefault(verdict.username, verdict)

    processed: list[ProcessedResult] = []
    for account in result_set.accounts:
        verdict = by_username.get(account.username)
        if verdict is not None and _is_kept(verdict, treat_missing_as_relevant):
            processed.append(
                ProcessedAccountMatch(
                    **account.model_dump(), relevance_context=verdict.relevance_context
                )
            )
    for cast in result_set.casts:
        verdict = by_username.get(cast.username)
        if verdict is not None and _is_kept(verdict, treat_missing_as_relevant):
            processed.append(
                ProcessedCastMatch(**cast.model_dump(), relevance_context=verdict.relevance_context)
            )

    total = len(result_set.accounts) + len(result_set.casts)
    if total > len(processed):
        logger.info("Reconciliation dropped %d of %d candidates", total - len(processed), total)
    return processed
