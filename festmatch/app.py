from __future__ import annotations

from fastapi import FastAPI, HTTPException, Request

from .catalog.models import Festival
from .catalog.store import get_catalog
from .recommendations.config import weight_profile
from .recommendations.filtering import filter_catalog, filter_options
from .recommendations.models import (
    Criteria,
    FilterConstraints,
    FilterResponse,
    RecommendationRequest,
    RecommendationResponse,
    RecommendOptions,
)
from .recommendations.retrieval import cluster, rank_catalog

app = FastAPI(title="Festival Recommendation API", version="1.0.0")


# ── Public endpoints ─────────────────────────────────────────────────────


@app.get("/health")
def health() -> dict[str, str]:
    return {"status": "ok"}


@app.get("/metadata")
def metadata() -> dict:
    return filter_options(get_catalog())


# ── Browse endpoints ─────────────────────────────────────────────────────


@app.get("/festivals", response_model=FilterResponse)
def festivals(request: Request) -> FilterResponse:
    constraints = FilterConstraints.from_query(dict(request.query_params))
    result = filter_catalog(get_catalog(), constraints)
    return FilterResponse(
        festivals=result.items,
        total_count=result.total_count,
        query=constraints.to_query(),
    )


@app.get("/festivals/{festival_id}", response_model=Festival)
def festival_detail(festival_id: str) -> Festival:
    festival = get_catalog().get(festival_id)
    if festival is None:
        raise HTTPException(status_code=404, detail="Festival not found")
    return festival


# ── Quiz endpoints ───────────────────────────────────────────────────────


@app.post("/recommendations", response_model=RecommendationResponse)
def recommendations(body: RecommendationRequest) -> RecommendationResponse:
    results, total_candidates = rank_catalog(
        get_catalog(),
        Criteria.from_answers(body.answers),
        RecommendOptions(
            prefilter=body.prefilter,
            include_below_threshold=body.include_below_threshold,
            limit=body.limit,
        ),
        config=weight_profile(body.weight_profile),
    )

    return RecommendationResponse(
        recommendations=results,
        total_candidates=total_candidates,
        tiers={
            tier: [r.festival.id for r in group]
            for tier, group in cluster(results).items()
        },
    )
