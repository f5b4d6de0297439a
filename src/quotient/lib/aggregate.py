from ..models import AccountMatch, CandidateRecord, CastMatch, ResultSet, ResultStats


def aggregate(records: list[CandidateRecord]) -> ResultSet:
    """Partition retrieved records by match type and count them.

    Order within each partition is preserved.
    """
    accounts: list[AccountMatch] = []
    casts: list[CastMatch] = []
    for record in records:
        if record.match_type == "account":
            accounts.append(record)
        else:
            casts.append(record)

    return ResultSet(
        accounts=accounts,
        casts=casts,
        stats=ResultStats(
            total=len(accounts) + len(casts),
            account_count=len(accounts),
            cast_count=len(casts),
        ),
    )
