"""Tests for profile linking in generated reports."""

from ..models import AccountMatch, AgentReport, CastMatch, ResultSet
from .report_links import extract_usernames, link_profiles, link_report

RESULT_SET = ResultSet(
    accounts=[AccountMatch(username="alice", match_score=5.0)],
    casts=[
        CastMatch(username="bob", cast_text="gm", match_score=0.9, mentioned_users=["carol", "alice"]),
    ],
)


def test_extract_usernames_dedupes_in_order():
    assert extract_usernames(RESULT_SET) == ["alice", "bob", "carol"]


class TestLinkProfiles:
    def test_links_mentions_and_known_names(self):
        text = "alice ships frames with @dave"
        assert link_profiles(text, ["alice"]) == (
            "[alice](https://warpcast.com/alice) ships frames with "
            "[@dave](https://warpcast.com/dave)"
        )

    def test_uses_canonical_case(self):
        assert link_profiles("Alice is great", ["alice"]) == "[alice](https://warpcast.com/alice) is great"

    def test_leaves_existing_links_alone(self):
        text = "see [alice](https://warpcast.com/alice) and [@bob](https://warpcast.com/bob)"
        assert link_profiles(text, ["alice", "bob"]) == text

    def test_leaves_code_alone(self):
        text = "```\nalice @bob\n```\n    alice indented\nalice"
        assert link_profiles(text, ["alice"]) == (
            "```\nalice @bob\n```\n    alice indented\n[alice](https://warpcast.com/alice)"
        )

    def test_only_whole_words(self):
        assert link_profiles("alicemarie and malice", ["alice"]) == "alicemarie and malice"

    def test_skips_urls_and_emails(self):
        text = "https://example.com/alice or mail me@alice.xyz"
        assert link_profiles(text, ["alice"]) == text

    def test_mentions_inside_bare_urls_are_untouched(self):
        text = "see https://warpcast.com/~/@alice for more, or ask @alice"
        assert link_profiles(text, ["alice"]) == (
            "see https://warpcast.com/~/@alice for more, or ask "
            "[@alice](https://warpcast.com/alice)"
        )

    def test_mention_after_slash_is_not_linked(self):
        assert link_profiles("warpcast.com/@bob", []) == "warpcast.com/@bob"

    def test_short_names_only_linked_as_mentions(self):
        assert link_profiles("ab and @ab", ["ab"]) == "ab and [@ab](https://warpcast.com/ab)"

    def test_empty_text(self):
        assert link_profiles("", ["alice"]) == ""


def test_link_report_touches_summary_and_takeaways_only():
    report = AgentReport(summary="bob and alice build frames", key_takeaways=["carol is early"])

    linked = link_report(report, RESULT_SET)

    assert linked.summary == (
        "[bob](https://warpcast.com/bob) and [alice](https://warpcast.com/alice) build frames"
    )
    assert linked.key_takeaways == ["[carol](https://warpcast.com/carol) is early"]
    assert report.summary == "bob and alice build frames"
