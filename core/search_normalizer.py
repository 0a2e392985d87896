"""Search normalization: raw SuperSearch response → SearchResultSet."""

from __future__ import annotations

from collections.abc import Sequence

from core.models import (
    FacetBucket,
    RawCrashHit,
    RawSearchResponse,
    SearchFacet,
    SearchResultSet,
    SearchRow,
)


def _row(hit: RawCrashHit) -> SearchRow:
    return SearchRow(
        crash_id=hit.uuid,
        date=hit.date,
        signature=hit.signature,
        product=hit.product,
        version=hit.version,
        platform=hit.platform,
        platform_version=hit.platform_version,
        build_id=hit.build_id,
        release_channel=hit.release_channel,
    )


def normalize_search(
    raw: RawSearchResponse,
    requested_limit: int,
    facet_fields: Sequence[str],
    facets_size: int | None = None,
) -> SearchResultSet:
    """Keep the first ``requested_limit`` hits and the requested facets.

    Hits and buckets stay in upstream order; sorting is a request parameter.
    A requested facet missing from the response gets an empty bucket tuple.
    ``total`` is the upstream match count, independent of any truncation.
    """
    limit = max(requested_limit, 0)
    bucket_limit = max(facets_size, 0) if facets_size is not None else None

    facets = []
    for field in facet_fields:
        buckets = raw.facets.get(field, [])
        if bucket_limit is not None:
            buckets = buckets[:bucket_limit]
        facets.append(
            SearchFacet(
                field=field,
                buckets=tuple(FacetBucket(term=b.term, count=b.count) for b in buckets),
            )
        )

    return SearchResultSet(
        total=raw.total,
        rows=tuple(_row(hit) for hit in raw.hits[:limit]),
        facets=tuple(facets),
    )
