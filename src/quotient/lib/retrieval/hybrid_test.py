"""Tests for the hybrid retriever."""

import asyncio

import pytest
from elastic_transport import ConnectionTimeout

from ...errors import RetrievalError, UpstreamTimeoutError
from ...models import AccountMatch, CastMatch
from ...settings import Settings
from .accounts import AccountSearchPath
from .base import RetrievalPath
from .casts import CastSearchPath
from .hybrid import HybridRetriever


class StaticPath(RetrievalPath):
    def __init__(self, name: str, records):
        self._name = name
        self.records = records
        self.calls: list[tuple] = []

    @property
    def name(self) -> str:
        return self._name

    async def search(self, es, normalized, vector):
        self.calls.append((es, normalized, vector))
        return list(self.records)


class FailingPath(StaticPath):
    def __init__(self, name: str, exc: Exception):
        super().__init__(name, [])
        self.exc = exc

    async def search(self, es, normalized, vector):
        raise self.exc


class TwoIndexFakeEs:
    """Routes searches by index, like the real store would."""

    def __init__(self):
        self.calls: list[dict] = []

    async def search(self, *, index=None, query=None, size=None, _source=None, **kwargs):
        self.calls.append({"index": index, "query": query})
        if index == "accounts":
            return {
                "hits": {
                    "hits": [
                        {"_score": 6.0, "_source": {"username": "alice", "bio": "frames"}},
                        {"_score": 2.0, "_source": {"username": "low"}},
                    ]
                }
            }
        return {
            "hits": {
                "hits": [
                    {"_score": 0.95, "_source": {"username": "bob", "text": "frames on base"}},
                    {"_score": 0.6, "_source": {"username": "far", "text": "unrelated"}},
                ]
            }
        }


ACCOUNT = AccountMatch(username="alice", match_score=9.0)
CAST = CastMatch(username="bob", cast_text="gm", match_score=0.9)


class TestHybridRetriever:
    @pytest.mark.asyncio
    async def test_concatenates_accounts_then_casts(self):
        accounts = StaticPath("accounts", [ACCOUNT])
        casts = StaticPath("casts", [CAST])
        retriever = HybridRetriever("es", paths=[accounts, casts])

        records = await retriever.retrieve("frame developers base", [0.1, 0.2])

        assert records == [ACCOUNT, CAST]
        assert accounts.calls == [("es", "frame developers base", [0.1, 0.2])]
        assert casts.calls == [("es", "frame developers base", [0.1, 0.2])]

    @pytest.mark.asyncio
    async def test_paths_run_concurrently(self):
        started = asyncio.Event()

        class WaitsForOther(StaticPath):
            async def search(self, es, normalized, vector):
                await started.wait()
                return [ACCOUNT]

        class SignalsOther(StaticPath):
            async def search(self, es, normalized, vector):
                started.set()
                return [CAST]

        retriever = HybridRetriever(
            None, paths=[WaitsForOther("accounts", []), SignalsOther("casts", [])], timeout=1.0
        )
        assert await retriever.retrieve("q", [0.1]) == [ACCOUNT, CAST]

    @pytest.mark.asyncio
    async def test_failure_in_either_path_aborts(self):
        retriever = HybridRetriever(
            None,
            paths=[StaticPath("accounts", [ACCOUNT]), FailingPath("casts", RuntimeError("shard down"))],
        )
        with pytest.raises(RetrievalError, match="casts search failed: shard down") as excinfo:
            await retriever.retrieve("q", [0.1])
        assert isinstance(excinfo.value.__cause__, RuntimeError)

    @pytest.mark.asyncio
    async def test_store_timeout_is_distinct(self):
        retriever = HybridRetriever(
            None, paths=[FailingPath("accounts", ConnectionTimeout("timed out"))], timeout=3.0
        )
        with pytest.raises(UpstreamTimeoutError) as excinfo:
            await retriever.retrieve("q", [0.1])
        assert excinfo.value.timeout is None
        assert excinfo.value.details == "search store timed out"

    @pytest.mark.asyncio
    async def test_deadline_exceeded(self):
        class SlowPath(StaticPath):
            async def search(self, es, normalized, vector):
                await asyncio.sleep(5)
                return []

        retriever = HybridRetriever(None, paths=[SlowPath("casts", [])], timeout=0.05)
        with pytest.raises(UpstreamTimeoutError) as excinfo:
            await retriever.retrieve("q", [0.1])
        assert excinfo.value.service == "search store"
        assert excinfo.value.timeout == 0.05

    @pytest.mark.asyncio
    async def test_end_to_end_against_fake_store(self):
        es = TwoIndexFakeEs()
        retriever = HybridRetriever(es)

        records = await retriever.retrieve("frame developers base", [0.3, 0.4])

        assert [(r.match_type, r.username) for r in records] == [("account", "alice"), ("cast", "bob")]
        by_index = {call["index"]: call["query"] for call in es.calls}
        assert by_index["accounts"]["multi_match"]["query"] == "frame developers base"
        assert by_index["casts"]["bool"]["must"]["knn"]["query_vector"] == [0.3, 0.4]

    def test_from_settings(self):
        settings = Settings(
            accounts_index="acc",
            casts_index="cst",
            account_score_threshold=4.0,
            account_limit=3,
            cast_similarity_threshold=0.8,
            cast_neighbours=50,
            retrieval_timeout=7.0,
        )
        retriever = HybridRetriever.from_settings("es", settings)

        accounts, casts = retriever.paths
        assert isinstance(accounts, AccountSearchPath)
        assert (accounts.index, accounts.threshold, accounts.limit) == ("acc", 4.0, 3)
        assert isinstance(casts, CastSearchPath)
        assert (casts.index, casts.threshold, casts.k) == ("cst", 0.8, 50)
        assert retriever.timeout == 7.0
