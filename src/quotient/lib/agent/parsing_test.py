"""Tests for agent response decoding and reconciliation."""

import json

import pytest

from ...errors import AgentParseError
from ...models import AccountMatch, CastMatch, RelevanceVerdict, ResultSet, ResultStats
from .parsing import decode_agent_json, parse_agent_response, reconcile

RESULT_SET = ResultSet(
    accounts=[
        AccountMatch(username="alice", bio="frames on base", match_score=6.0),
        AccountMatch(username="bob", bio="defi", match_score=4.0),
    ],
    casts=[
        CastMatch(username="carol", cast_text="built a frame today", match_score=0.9),
        CastMatch(username="alice", cast_text="base is home", match_score=0.8),
    ],
    stats=ResultStats(total=4, account_count=2, cast_count=2),
)


def verdict(username, context="relevant because of X", is_relevant=None) -> RelevanceVerdict:
    return RelevanceVerdict(username=username, relevance_context=context, is_relevant=is_relevant)


class TestDecodeAgentJson:
    def test_plain_json(self):
        assert decode_agent_json('{"summary": "ok"}') == {"summary": "ok"}

    def test_extracts_embedded_object(self):
        text = 'Sure! Here is the report:\n```json\n{"summary": "ok", "processedResults": []}\n```\nThanks.'
        assert decode_agent_json(text) == {"summary": "ok", "processedResults": []}

    def test_no_object_raises(self):
        with pytest.raises(AgentParseError, match="no JSON object"):
            decode_agent_json("I could not find anything relevant.")

    def test_undecodable_embedded_object_raises(self):
        with pytest.raises(AgentParseError):
            decode_agent_json("prefix {summary: unquoted} suffix")

    def test_non_object_json_raises(self):
        with pytest.raises(AgentParseError, match="not an object"):
            decode_agent_json("[1, 2, 3]")


class TestParseAgentResponse:
    def test_reads_camel_case_fields(self):
        text = json.dumps({
            "summary": "Two frame builders.",
            "keyTakeaways": ["alice ships frames"],
            "processedResults": [
                {"username": "alice", "relevanceContext": "bio: frames on base", "isRelevant": True},
                {"username": "bob", "relevanceContext": "defi only", "isRelevant": False},
            ],
        })
        payload, verdicts = parse_agent_response(text)

        assert payload.summary == "Two frame builders."
        assert payload.key_takeaways == ["alice ships frames"]
        assert [(v.username, v.is_relevant) for v in verdicts] == [("alice", True), ("bob", False)]
        assert verdicts[0].relevance_context == "bio: frames on base"

    def test_missing_optional_fields_default(self):
        payload, verdicts = parse_agent_response('{"summary": "nothing"}')
        assert payload.key_takeaways == []
        assert verdicts == []

    def test_skips_malformed_verdicts(self):
        text = json.dumps({
            "summary": "s",
            "processedResults": [
                {"relevanceContext": "no username"},
                "just a string",
                {"username": "alice", "relevanceContext": "ok"},
            ],
        })
        _, verdicts = parse_agent_response(text)
        assert [v.username for v in verdicts] == ["alice"]

    @pytest.mark.parametrize(
        "extra, summary, takeaways",
        [
            ({"summary": None}, "", []),
            ({"keyTakeaways": None}, "", []),
            ({"keyTakeaways": "one"}, "", ["one"]),
            ({"summary": 3, "keyTakeaways": ["kept", 7, None, {"x": 1}]}, "", ["kept"]),
        ],
    )
    def test_loose_optional_fields_keep_verdicts(self, extra, summary, takeaways):
        text = json.dumps({
            **extra,
            "processedResults": [
                {"username": "alice", "relevanceContext": "bio says frames", "isRelevant": True}
            ],
        })
        payload, verdicts = parse_agent_response(text)
        assert payload.summary == summary
        assert payload.key_takeaways == takeaways
        assert [v.username for v in verdicts] == ["alice"]

    def test_null_processed_results_is_empty(self):
        _, verdicts = parse_agent_response('{"summary": "nothing", "processedResults": null}')
        assert verdicts == []

    def test_wrong_top_level_shape_raises(self):
        with pytest.raises(AgentParseError, match="unexpected shape"):
            parse_agent_response('{"summary": "s", "processedResults": "alice"}')


class TestReconcile:
    def test_keeps_only_vouched_candidates(self):
        processed = reconcile(RESULT_SET, [verdict("alice", is_relevant=True)])
        assert [(p.match_type, p.username) for p in processed] == [("account", "alice"), ("cast", "alice")]
        assert all(p.relevance_context == "relevant because of X" for p in processed)

    def test_candidate_without_verdict_is_dropped(self):
        processed = reconcile(RESULT_SET, [verdict("carol")])
        assert [p.username for p in processed] == ["carol"]

    def test_hallucinated_usernames_never_appear(self):
        processed = reconcile(RESULT_SET, [verdict("mallory"), verdict("alice")])
        input_usernames = {a.username for a in RESULT_SET.accounts} | {c.username for c in RESULT_SET.casts}
        assert {p.username for p in processed} <= input_usernames
        assert "mallory" not in {p.username for p in processed}

    def test_explicitly_irrelevant_is_dropped(self):
        assert reconcile(RESULT_SET, [verdict("bob", is_relevant=False)]) == []

    @pytest.mark.parametrize("context", [None, "", "   "])
    def test_empty_context_is_dropped(self, context):
        assert reconcile(RESULT_SET, [verdict("bob", context=context, is_relevant=True)]) == []

    def test_missing_is_relevant_counts_as_relevant_by_default(self):
        processed = reconcile(RESULT_SET, [verdict("bob")])
        assert [p.username for p in processed] == ["bob"]

    def test_missing_is_relevant_can_be_made_strict(self):
        processed = reconcile(
            RESULT_SET,
            [verdict("bob"), verdict("carol", is_relevant=True)],
            treat_missing_as_relevant=False,
        )
        assert [p.username for p in processed] == ["carol"]

    def test_username_match_is_case_sensitive(self):
        assert reconcile(RESULT_SET, [verdict("Alice")]) == []

    def test_first_verdict_per_username_wins(self):
        processed = reconcile(
            RESULT_SET, [verdict("bob", "first"), verdict("bob", "second", is_relevant=False)]
        )
        assert [p.relevance_context for p in processed] == ["first"]

    def test_merged_record_keeps_candidate_fields(self):
        [account] = reconcile(RESULT_SET, [verdict("bob", "defi expert")])
        data = account.model_dump(by_alias=True)
        assert data["bio"] == "defi"
        assert data["matchScore"] == 4.0
        assert data["matchType"] == "account"
        assert data["relevanceContext"] == "defi expert"
