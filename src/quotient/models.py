from typing import Any, Literal, Union

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class WireModel(BaseModel):
    """Base for models exchanged as JSON: snake_case in Python, camelCase on the wire."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class Query(WireModel):
    """A user query: the raw text and its full-text search form."""

    model_config = ConfigDict(frozen=True)

    original: str = Field(..., description="The trimmed query as typed by the user")
    normalized: str = Field(
        ..., description="Lowercased, stopword-stripped form used for full-text search"
    )


class Location(WireModel):
    state: str | None = None
    city: str | None = None
    country: str | None = None


class AccountMatch(WireModel):
    """An account returned by the full-text path."""

    username: str
    bio: str | None = None
    follower_count: int = 0
    cred_score: float = 0.0
    location: Location = Field(default_factory=Location)
    avatar_url: str | None = None
    match_score: float = Field(
        ..., ge=0, description="Full-text relevance; only comparable with other accounts"
    )
    match_type: Literal["account"] = "account"


class CastMatch(WireModel):
    """A post (cast) returned by the vector path."""

    username: str
    cast_text: str
    cast_url: str | None = None
    timestamp: str | None = None
    likes_count: int = 0
    mentioned_channels: list[str] = Field(default_factory=list)
    mentioned_users: list[str] = Field(default_factory=list)
    match_score: float = Field(
        ..., ge=0, description="Cosine similarity; only comparable with other casts"
    )
    match_type: Literal["cast"] = "cast"


CandidateRecord = Union[AccountMatch, CastMatch]


class ResultStats(WireModel):
    total: int = 0
    account_count: int = 0
    cast_count: int = 0


class ResultSet(WireModel):
    """Retrieved candidates partitioned by match type."""

    model_config = ConfigDict(frozen=True)

    accounts: list[AccountMatch] = Field(default_factory=list)
    casts: list[CastMatch] = Field(default_factory=list)
    stats: ResultStats = Field(default_factory=ResultStats)


class RelevanceVerdict(WireModel):
    """The language model's judgment on one candidate."""

    username: str
    relevance_context: str | None = None
    is_relevant: bool | None = None


class ProcessedAccountMatch(AccountMatch):
    relevance_context: str


class ProcessedCastMatch(CastMatch):
    relevance_context: str


ProcessedResult = Union[ProcessedAccountMatch, ProcessedCastMatch]


class AgentReport(WireModel):
    summary: str = ""
    key_takeaways: list[str] = Field(default_factory=list)
    processed_results: list[ProcessedResult] = Field(default_factory=list)


class Snapshot(WireModel):
    """A stored query, its results and its report, addressable by ``id``."""

    id: str
    query: str
    timestamp: str | None = None
    results: Any = None
    agent_report: Any = None
