"""Profile-link validation for generated reports.

Reports from the language model often mention builders without linking
them.  ``link_profiles`` rewrites bare ``@handle`` mentions and bare known
usernames into markdown profile links, leaving existing links, bare URLs
and code untouched.
"""

import re

from ..models import AgentReport, ResultSet
from .agent.prompts import profile_url

MIN_USERNAME_LENGTH = 3

_PROTECTED = re.compile(r"(\[[^\]]*\]\([^)]*\)|https?://\S+)")
_MENTION = r"(?<![\w\[/])@(?P<mention>[A-Za-z0-9_]+)"


def extract_usernames(result_set: ResultSet) -> list[str]:
    """Account usernames, cast authors and mentioned users, de-duplicated in order."""
    seen: dict[str, None] = {}
    for account in result_set.accounts:
        if account.username:
            seen.setdefault(account.username)
    for cast in result_set.casts:
        if cast.username:
            seen.setdefault(cast.username)
        for user in cast.mentioned_users:
            if isinstance(user, str) and user:
                seen.setdefault(user)
    return list(seen)


def _build_pattern(usernames: list[str]) -> tuple[re.Pattern, dict[str, str]]:
    canonical = {}
    for name in usernames:
        if name and len(name) >= MIN_USERNAME_LENGTH:
            canonical.setdefault(name.lower(), name)

    alternatives = [_MENTION]
    if canonical:
        names = sorted(canonical.values(), key=len, reverse=True)
        alternatives.append(
            r"(?<![\w@/])(?P<name>" + "|".join(re.escape(n) for n in names) + r")(?![\w])"
        )
    return re.compile("|".join(alternatives), re.IGNORECASE), canonical


def link_profiles(text: str, usernames: list[str]) -> str:
    """Link ``@handle`` mentions and known usernames in *text*."""
    if not text:
        return text

    pattern, canonical = _build_pattern(usernames)

    def _replace(match: re.Match) -> str:
        if match.group("mention"):
            handle = match.group("mention")
            return f"[@{handle}]({profile_url(handle)})"
        name = canonical[match.group("name").lower()]
        return f"[{name}]({profile_url(name)})"

    lines = text.split("\n")
    in_code_block = False
    for i, line in enumerate(lines):
        if line.startswith("```"):
            in_code_block = not in_code_block
            continue
        if in_code_block or line.startswith("    "):
            continue
        # Odd indices of the split are existing links and bare URLs.
        parts = _PROTECTED.split(line)
        for j in range(0, len(parts), 2):
            parts[j] = pattern.sub(_replace, parts[j])
        lines[i] = "".join(parts)
    return "\n".join(lines)


def link_report(report: AgentReport, result_set: ResultSet) -> AgentReport:
    """Return a copy of *report* with profile links in its summary and takeaways."""
    usernames = extract_usernames(result_set)
    return report.model_copy(
        update={
            "summary": link_profiles(report.summary, usernames),
            "key_takeaways": [link_profiles(t, usernames) for t in report.key_takeaways],
        }
    )
