"""Prompt construction for the relevance agent.

Candidates are serialized as JSON inside the prompt.  Accounts are ordered by
a combined score that nudges lesser-known, high-cred builders upward; the
model is told the score is only a hint.
"""

import json

from ...models import AccountMatch, CastMatch, ResultSet

PROFILE_URL_BASE = "https://warpcast.com"

SYSTEM_PROMPT = (
    "You are an analyst that reviews search results about builders on Farcaster "
    "and decides which of them are relevant to the user's question. "
    "You always answer with a single JSON object and nothing else."
)

RESPONSE_SHAPE = """{
  "summary": "2-3 sentence executive summary answering the query",
  "keyTakeaways": ["short finding", "..."],
  "processedResults": [
    {
      "username": "exact username copied from the data",
      "relevanceContext": "why this builder matters, quoting their bio or cast",
      "isRelevant": true
    }
  ]
}"""


def profile_url(username: str) -> str:
    return f"{PROFILE_URL_BASE}/{username}"


def combined_score(relevance: float, cred: float, follower_count: int) -> float:
    """Blend relevance, cred score and inverse follower count."""
    inverse_followers = 1.0 / follower_count if follower_count > 0 else 1.0
    return 0.5 * relevance + 0.3 * cred + 0.2 * inverse_followers


def _account_entry(account: AccountMatch) -> dict:
    return {
        "username": account.username,
        "bio": account.bio or "",
        "followerCount": account.follower_count,
        "credScore": account.cred_score,
        "location": account.location.model_dump(exclude_none=True),
        "relevanceScore": account.match_score,
        "combinedScore": combined_score(
            account.match_score, account.cred_score, account.follower_count
        ),
        "profileUrl": profile_url(account.username),
    }


def _cast_entry(cast: CastMatch) -> dict:
    return {
        "username": cast.username,
        "castContent": cast.cast_text,
        "likesCount": cast.likes_count,
        "timestamp": cast.timestamp or "",
        "mentionedChannels": cast.mentioned_channels,
        "mentionedUsers": cast.mentioned_users,
        "relevanceScore": cast.match_score,
        "castUrl": cast.cast_url or "",
        "authorProfileUrl": profile_url(cast.username),
    }


def build_prompt(query: str, result_set: ResultSet) -> str:
    """Render the user prompt for *query* over every candidate in *result_set*."""
    accounts = sorted(
        (_account_entry(a) for a in result_set.accounts),
        key=lambda a: a["combinedScore"],
        reverse=True,
    )
    casts = [_cast_entry(c) for c in result_set.casts]

    return f"""# MISSION
You are an intelligence analyst processing Farcaster network data for
prospecting, recruiting, market research and technical research.

# CONTEXT
The user searched for: "{query}"

The data below holds Farcaster profiles (accounts) and posts (casts). Decide,
for every username, whether it is relevant to the query, and why.

# RULES
- Base every judgment on the provided data. Quote the bio or cast text that
  supports it in relevanceContext.
- Do not stretch or make leaps of logic. When in doubt, mark isRelevant false.
- Copy usernames exactly as they appear in the data. Never invent usernames.
- Scores are a reference point only; use your judgment.
- If the query asks about a specific person, only keep casts by or clearly
  about that person.
- If nothing is relevant, say so in the summary and return an empty
  processedResults list.

# RESPONSE FORMAT
Return only a JSON object with this shape:
{RESPONSE_SHAPE}

## ACCOUNTS DATA ({len(accounts)} PROFILES)
```json
{json.dumps(accounts, indent=2, ensure_ascii=False)}
```

## CASTS DATA ({len(casts)} POSTS)
```json
{json.dumps(casts, indent=2, ensure_ascii=False)}
```
"""
