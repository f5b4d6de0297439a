import logging

from ...models import AgentReport, Query, ResultSet
from .llm_client import LLMClient
from .parsing import parse_agent_response, reconcile
from .prompts import SYSTEM_PROMPT, build_prompt

logger = logging.getLogger(__name__)


class RelevanceAgent:
    """Asks the language model which candidates matter and why.

    Pipeline:
        candidates → prompt → model reply → verdicts → reconciled report
    """

    def __init__(self, llm: LLMClient, treat_missing_as_relevant: bool = True):
        self.llm = llm
        self.treat_missing_as_relevant = treat_missing_as_relevant

    async def analyze(self, query: Query, result_set: ResultSet) -> AgentReport:
        logger.info(
            "Analyzing %d accounts and %d casts for %r",
            len(result_set.accounts),
            len(result_set.casts),
            query.original,
        )
        prompt = build_prompt(query.original, result_set)
        reply = await self.llm.complete_json(prompt, system=SYSTEM_PROMPT)

        payload, verdicts = parse_agent_response(reply)
        processed = reconcile(result_set, verdicts, self.treat_missing_as_relevant)

        logger.info("Agent kept %d relevant results", len(processed))
        return AgentReport(
            summary=payload.summary,
            key_takeaways=payload.key_takeaways,
            processed_results=processed,
        )
