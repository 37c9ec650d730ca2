"""Templated per-dimension scoring agents.

Each agent maps venture intake fields to a level, confidence and canned
guidance. They are deterministic rules, not inference; anything with the
same signature can be registered in SCORERS instead.
"""

from typing import Any, Callable

from readiness_engine.agents.scoring_types import (
    AgentOutput,
    RecommendationItem,
    ScoringContext,
)
from readiness_engine.core.dimensions import MAX_LEVEL, MIN_LEVEL, Dimension
from readiness_engine.core.logging import get_logger

logger = get_logger(__name__)

Scorer = Callable[[ScoringContext], AgentOutput]

MAX_EVIDENCE_CHUNKS = 5
EVIDENCE_PREVIEW_CHARS = 500


def clamp(value: int, low: int = MIN_LEVEL, high: int = MAX_LEVEL) -> int:
    return max(low, min(high, value))


def stage_base_level(stage: str | None, series_a: int = 6, seed: int = 5, default: int = 3) -> int:
    """Starting level before any field-specific adjustment."""
    if stage == "series_a":
        return series_a
    if stage == "seed":
        return seed
    return default


def _num(venture: dict[str, Any], key: str) -> float:
    value = venture.get(key)
    if value is None or isinstance(value, bool):
        return 0
    try:
        return float(value)
    except (TypeError, ValueError):
        return 0


def _int(venture: dict[str, Any], key: str) -> int:
    return int(_num(venture, key))


def _list(venture: dict[str, Any], key: str) -> list[str]:
    value = venture.get(key)
    if not value:
        return []
    if isinstance(value, str):
        return [value]
    return [str(v) for v in value]


def _money(amount: float) -> str:
    if float(amount).is_integer():
        return f"{int(amount):,}"
    return f"{amount:,.2f}"


def _rec(action: str, impact: str, eta_weeks: int | None = None) -> RecommendationItem:
    return RecommendationItem(action=action, impact=impact, eta_weeks=eta_weeks)


def document_evidence(chunks: list[dict[str, Any]]) -> list[str]:
    """
    Summarize retrieved chunks as one evidence line per source file.

    Args:
        chunks: Chunk rows with content and source_ref ("<path>#chunk_<n>")

    Returns:
        Lines like "Document: deck.pdf - <text>", in first-seen file order
    """
    by_source: dict[str, list[str]] = {}
    for chunk in chunks[:MAX_EVIDENCE_CHUNKS]:
        source = (chunk.get("source_ref") or "").split("#")[0]
        by_source.setdefault(source, []).append(chunk.get("content") or "")

    evidence = []
    for source, contents in by_source.items():
        file_name = source.rsplit("/", 1)[-1] or source
        content = " ".join(contents)
        if len(content) > EVIDENCE_PREVIEW_CHARS:
            content = content[:EVIDENCE_PREVIEW_CHARS] + "..."
        evidence.append(f"Document: {file_name} - {content}")
    return evidence


def _evidence(ctx: ScoringContext, dimension: str, template: list[str]) -> list[str]:
    chunks = ctx.chunks_for(dimension)
    if chunks:
        return document_evidence(chunks)
    return template


# =============================================================================
# Agents
# =============================================================================


def score_technology(ctx: ScoringContext) -> AgentOutput:
    v = ctx.venture
    trl = _int(v, "technology_readiness_level")
    patent_count = _int(v, "patent_count")
    has_patents = bool(v.get("has_patents")) and patent_count > 0
    certification = v.get("certification_status")
    regulatory = _list(v, "regulatory_requirements")

    base = stage_base_level(ctx.stage)
    if trl:
        base = max(base, trl // 2)
    if v.get("has_prototype"):
        base += 1
    if has_patents:
        base += min(2, patent_count // 2)
    if certification == "completed":
        base += 2
    elif certification == "in_progress":
        base += 1

    justification = "Technology assessment based on available information."
    if trl:
        maturity = "advanced" if trl >= 7 else "developing"
        justification += f" TRL {trl} indicates {maturity} technology readiness."
    if v.get("has_prototype"):
        justification += " Prototype development shows progress toward commercialization."
    if has_patents:
        justification += f" {patent_count} patent(s) demonstrate intellectual property protection."

    evidence = _evidence(
        ctx,
        Dimension.TECHNOLOGY.value,
        [
            "Technology readiness assessment completed",
            "Prototype development confirmed" if v.get("has_prototype") else "No prototype identified",
            "Patent portfolio identified" if v.get("has_patents") else "No patents filed",
            f"Regulatory requirements identified: {', '.join(regulatory)}"
            if regulatory
            else "No regulatory requirements specified",
        ],
    )

    next_steps = [
        "Complete technology validation testing",
        "Finalize regulatory compliance requirements",
        "Develop manufacturing specifications",
    ]
    if certification != "completed":
        next_steps.append("Complete certification process")

    recommendations = [
        _rec("Complete TRL validation testing", "high", 6),
        _rec("File additional patents if applicable", "medium", 4),
    ]
    if regulatory:
        recommendations.append(_rec(f"Complete {', '.join(regulatory)} compliance", "high", 8))

    return AgentOutput(
        dimension=Dimension.TECHNOLOGY.value,
        level=clamp(base),
        confidence=0.8 if trl else 0.6,
        justification=justification,
        evidence=evidence,
        next_steps=next_steps,
        recommendations=recommendations,
    )


def score_market(ctx: ScoringContext) -> AgentOutput:
    v = ctx.venture
    lois = _int(v, "letters_of_intent")
    pilots = _int(v, "pilot_customers")
    market_size = _num(v, "market_size_estimate")
    target_market = v.get("target_market")
    segments = _list(v, "customer_segments")
    validation = v.get("customer_validation_method")

    base = stage_base_level(ctx.stage)
    if lois > 0:
        base += min(3, lois)
    if pilots > 0:
        base += min(2, pilots)
    if market_size > 1:
        base += 1
    if validation == "pilots":
        base += 2
    elif validation == "interviews":
        base += 1

    justification = "Market assessment based on available information."
    if target_market:
        justification += f" Target market: {target_market}."
    if lois > 0:
        justification += f" {lois} letter(s) of intent demonstrate market interest."
    if pilots > 0:
        justification += f" {pilots} pilot customer(s) show market validation."
    if market_size > 0:
        justification += f" Market size estimated at ${market_size:g}B."

    evidence = _evidence(
        ctx,
        Dimension.CUSTOMER_MARKET.value,
        [
            f"Target market identified: {target_market}" if target_market else "No target market specified",
            f"Customer segments: {', '.join(segments)}" if segments else "No customer segments specified",
            f"{lois} letters of intent received" if lois > 0 else "No letters of intent",
            "Competitive advantage defined"
            if v.get("competitive_advantage")
            else "No competitive advantage specified",
        ],
    )

    next_steps = [
        "Complete customer discovery interviews",
        "Validate market assumptions",
        "Develop go-to-market strategy",
    ]
    if not lois:
        next_steps.append("Secure letters of intent from target customers")

    recommendations = [
        _rec("Conduct comprehensive customer interviews", "high", 4),
        _rec("Validate pricing through customer research", "medium", 3),
    ]
    if not lois:
        recommendations.append(_rec("Secure 3+ letters of intent from target segments", "high", 6))
    if 0 < market_size < 1:
        recommendations.append(_rec("Validate market size assumptions", "medium", 4))

    return AgentOutput(
        dimension=Dimension.CUSTOMER_MARKET.value,
        level=clamp(base),
        confidence=0.8 if (lois or pilots) else 0.6,
        justification=justification,
        evidence=evidence,
        next_steps=next_steps,
        recommendations=recommendations,
    )


def score_business_model(ctx: ScoringContext) -> AgentOutput:
    v = ctx.venture
    revenue = _num(v, "current_revenue")
    paying = bool(v.get("has_paying_customers"))
    customers = _int(v, "customer_count")
    raised = _num(v, "funding_raised")
    runway = _num(v, "months_to_runway")
    business_model = v.get("business_model")
    revenue_model = v.get("revenue_model")

    base = stage_base_level(ctx.stage)
    if revenue > 1_000_000:
        base += 3
    elif revenue > 100_000:
        base += 2
    elif revenue > 0:
        base += 1
    if paying:
        base += 2
    if customers > 100:
        base += 2
    elif customers > 10:
        base += 1
    if raised > 5_000_000:
        base += 2
    elif raised > 1_000_000:
        base += 1
    if runway > 12:
        base += 1
    elif 0 < runway < 6:
        base -= 1

    justification = "Business model assessment based on available information."
    if business_model:
        justification += f" Business model: {business_model}."
    if revenue > 0:
        justification += f" Current revenue: ${_money(revenue)}."
    if paying:
        justification += " Paying customers demonstrate market validation."
    if customers > 0:
        justification += f" {customers} customer(s) show market traction."

    evidence = _evidence(
        ctx,
        Dimension.BUSINESS_MODEL.value,
        [
            f"Business model: {business_model}" if business_model else "No business model specified",
            f"Revenue model: {revenue_model}" if revenue_model else "No revenue model specified",
            f"Current revenue: ${_money(revenue)}" if revenue > 0 else "No revenue reported",
            "Paying customers confirmed" if paying else "No paying customers",
        ],
    )

    next_steps = [
        "Validate pricing model with customers",
        "Refine unit economics",
        "Develop go-to-market strategy",
    ]
    if not paying:
        next_steps.append("Convert prospects to paying customers")

    recommendations = [
        _rec("Validate pricing through customer research", "high", 4),
        _rec("Develop customer acquisition strategy", "medium", 6),
    ]
    if not paying:
        recommendations.append(_rec("Convert 3+ prospects to paying customers", "high", 8))
    if 0 < runway < 12:
        recommendations.append(_rec("Extend runway through revenue or funding", "high", 4))

    return AgentOutput(
        dimension=Dimension.BUSINESS_MODEL.value,
        level=clamp(base),
        confidence=0.8 if (revenue or paying) else 0.6,
        justification=justification,
        evidence=evidence,
        next_steps=next_steps,
        recommendations=recommendations,
    )


def score_team(ctx: ScoringContext) -> AgentOutput:
    v = ctx.venture
    team_size = _int(v, "team_size")
    technical = bool(v.get("has_technical_cofounder"))
    business = bool(v.get("has_business_cofounder"))
    experience = _num(v, "team_experience_years")
    prior_startups = _int(v, "previous_startups")
    industry = v.get("industry_experience")

    base = stage_base_level(ctx.stage)
    if team_size > 10:
        base += 2
    elif team_size > 5:
        base += 1
    if technical:
        base += 1
    if business:
        base += 1
    if experience > 10:
        base += 2
    elif experience > 5:
        base += 1
    if prior_startups > 0:
        base += min(2, prior_startups)
    if industry in ("space", "aerospace"):
        base += 2
    elif industry in ("defense", "tech"):
        base += 1

    justification = "Team assessment based on available information."
    if team_size > 0:
        justification += f" Team size: {team_size} members."
    if technical and business:
        justification += " Both technical and business cofounders present."
    elif technical or business:
        justification += " Technical or business cofounder present."
    if industry:
        justification += f" Industry experience: {industry}."
    if prior_startups > 0:
        justification += f" {prior_startups} previous startup(s) experience."

    evidence = _evidence(
        ctx,
        Dimension.TEAM.value,
        [
            f"Team size: {team_size} members" if team_size > 0 else "No team size specified",
            "Technical cofounder present" if technical else "No technical cofounder",
            "Business cofounder present" if business else "No business cofounder",
            f"Industry experience: {industry}" if industry else "No industry experience specified",
            "Key team members identified"
            if v.get("key_team_members")
            else "No key team members specified",
        ],
    )

    next_steps = [
        "Complete team hiring plan",
        "Define role responsibilities",
        "Establish team performance metrics",
    ]
    if not technical and not business:
        next_steps.append("Identify and recruit cofounders")

    recommendations = [
        _rec("Develop comprehensive hiring plan", "high", 6),
        _rec("Establish team performance metrics", "medium", 4),
    ]
    if not technical:
        recommendations.append(_rec("Recruit technical cofounder or CTO", "high", 12))
    if not business:
        recommendations.append(_rec("Recruit business cofounder or CEO", "high", 12))
    if 0 < team_size < 5:
        recommendations.append(_rec("Expand team to 5+ members", "medium", 8))

    return AgentOutput(
        dimension=Dimension.TEAM.value,
        level=clamp(base),
        confidence=0.8 if team_size > 0 else 0.6,
        justification=justification,
        evidence=evidence,
        next_steps=next_steps,
        recommendations=recommendations,
    )


def score_ip(ctx: ScoringContext) -> AgentOutput:
    v = ctx.venture
    has_patents = bool(v.get("has_patents"))
    patent_count = _int(v, "patent_count")
    product_type = v.get("product_type")
    trl = _int(v, "technology_readiness_level")

    base = stage_base_level(ctx.stage, series_a=4, seed=3, default=2)
    if has_patents and patent_count > 0:
        base += min(3, patent_count)
    if product_type in ("hardware", "satellite"):
        base += 1
    if trl > 6:
        base += 1

    justification = "IP assessment based on available information."
    if has_patents and patent_count > 0:
        justification += f" {patent_count} patent(s) filed demonstrate IP protection."
    else:
        justification += " No patents filed yet."
    if product_type:
        justification += f" Product type: {product_type}."

    evidence = _evidence(
        ctx,
        Dimension.IP.value,
        [
            f"{patent_count} patent(s) filed" if has_patents and patent_count > 0 else "No patents filed",
            f"Product type: {product_type}" if product_type else "No product type specified",
            "IP strategy assessment completed",
        ],
    )

    next_steps = [
        "Complete freedom to operate analysis",
        "Develop IP protection strategy",
        "File additional patents if applicable",
    ]
    if not has_patents:
        next_steps.append("File provisional patents")

    recommendations = [
        _rec("Complete freedom to operate analysis", "high", 4),
        _rec("Develop comprehensive IP strategy", "medium", 6),
    ]
    if not has_patents:
        recommendations.append(_rec("File provisional patents for key innovations", "high", 4))

    return AgentOutput(
        dimension=Dimension.IP.value,
        level=clamp(base),
        confidence=0.8 if has_patents else 0.5,
        justification=justification,
        evidence=evidence,
        next_steps=next_steps,
        recommendations=recommendations,
    )


def score_funding(ctx: ScoringContext) -> AgentOutput:
    v = ctx.venture
    raised = _num(v, "funding_raised")
    rounds = _int(v, "funding_rounds")
    runway = _num(v, "months_to_runway")
    revenue = _num(v, "current_revenue")

    base = stage_base_level(ctx.stage)
    if raised > 10_000_000:
        base += 3
    elif raised > 5_000_000:
        base += 2
    elif raised > 1_000_000:
        base += 1
    if rounds > 0:
        base += min(2, rounds)
    if runway > 18:
        base += 2
    elif runway > 12:
        base += 1
    elif 0 < runway < 6:
        base -= 2
    if revenue > 0:
        base += 1

    justification = "Funding assessment based on available information."
    if raised > 0:
        justification += f" ${_money(raised)} raised demonstrates investor confidence."
    else:
        justification += " No funding raised yet."
    if runway > 0:
        justification += f" Runway: {runway:g} months."
    if revenue > 0:
        justification += f" Revenue: ${_money(revenue)} reduces funding dependency."

    evidence = _evidence(
        ctx,
        Dimension.FUNDING.value,
        [
            f"${_money(raised)} raised" if raised > 0 else "No funding raised",
            f"{rounds} funding round(s) completed" if rounds > 0 else "No funding rounds completed",
            f"{runway:g} months runway" if runway > 0 else "No runway information",
            f"${_money(revenue)} revenue" if revenue > 0 else "No revenue reported",
        ],
    )

    next_steps = [
        "Prepare investor materials",
        "Build investor pipeline",
        "Complete due diligence package",
    ]
    if 0 < runway < 12:
        next_steps.append("Secure additional funding")

    recommendations = [
        _rec("Develop comprehensive investor materials", "high", 4),
        _rec("Build strategic investor relationships", "medium", 8),
    ]
    if not raised:
        recommendations.append(_rec("Raise initial funding round", "high", 12))
    if 0 < runway < 12:
        recommendations.append(_rec("Extend runway through funding or revenue", "high", 6))

    return AgentOutput(
        dimension=Dimension.FUNDING.value,
        level=clamp(base),
        confidence=0.8 if raised > 0 else 0.6,
        justification=justification,
        evidence=evidence,
        next_steps=next_steps,
        recommendations=recommendations,
    )


def score_sustainability(ctx: ScoringContext) -> AgentOutput:
    v = ctx.venture
    product_type = v.get("product_type")
    age_months = _int(v, "company_age_months")

    base = stage_base_level(ctx.stage)
    if age_months > 24:
        base += 1
    if product_type in ("satellite", "hardware"):
        base += 1

    justification = "Sustainability assessment based on available information."
    if product_type:
        justification += f" Product type: {product_type}."
    if age_months > 0:
        justification += f" Company age: {age_months // 12} years."

    evidence = _evidence(
        ctx,
        Dimension.SUSTAINABILITY.value,
        [
            "ESG framework assessment completed",
            f"Product type: {product_type}" if product_type else "No product type specified",
            f"Company age: {age_months // 12} years" if age_months > 0 else "No company age specified",
        ],
    )

    recommendations = [
        _rec("Develop comprehensive ESG framework", "medium", 6),
        _rec("Implement sustainability metrics tracking", "medium", 4),
    ]
    if product_type == "satellite":
        recommendations.append(_rec("Develop space debris mitigation strategy", "medium", 8))

    return AgentOutput(
        dimension=Dimension.SUSTAINABILITY.value,
        level=clamp(base),
        confidence=0.6,
        justification=justification,
        evidence=evidence,
        next_steps=[
            "Implement ESG tracking system",
            "Set sustainability targets",
            "Develop reporting framework",
        ],
        recommendations=recommendations,
    )


def score_system_integration(ctx: ScoringContext) -> AgentOutput:
    v = ctx.venture
    partnerships = v.get("key_partnerships")
    product_type = v.get("product_type")
    trl = _int(v, "technology_readiness_level")

    base = stage_base_level(ctx.stage, series_a=4, seed=3, default=2)
    if partnerships:
        base += 2
    if product_type in ("software", "ground_system"):
        base += 1
    if trl > 6:
        base += 1

    justification = "Integration assessment based on available information."
    if partnerships:
        justification += " Key partnerships identified."
    else:
        justification += " No key partnerships specified."
    if product_type:
        justification += f" Product type: {product_type}."

    evidence = _evidence(
        ctx,
        Dimension.SYSTEM_INTEGRATION.value,
        [
            "Key partnerships identified" if partnerships else "No partnerships specified",
            f"Product type: {product_type}" if product_type else "No product type specified",
            "Integration requirements assessment completed",
        ],
    )

    next_steps = [
        "Execute partner integration tests",
        "Validate interface compatibility",
        "Document integration procedures",
    ]
    if not partnerships:
        next_steps.append("Develop key partnerships")

    recommendations = [
        _rec("Develop integration testing framework", "high", 6),
        _rec("Document integration procedures", "medium", 4),
    ]
    if not partnerships:
        recommendations.append(_rec("Establish key strategic partnerships", "high", 12))

    return AgentOutput(
        dimension=Dimension.SYSTEM_INTEGRATION.value,
        level=clamp(base),
        confidence=0.7 if partnerships else 0.5,
        justification=justification,
        evidence=evidence,
        next_steps=next_steps,
        recommendations=recommendations,
    )


# =============================================================================
# Registry
# =============================================================================

SCORERS: dict[str, Scorer] = {
    Dimension.TECHNOLOGY.value: score_technology,
    Dimension.CUSTOMER_MARKET.value: score_market,
    Dimension.BUSINESS_MODEL.value: score_business_model,
    Dimension.TEAM.value: score_team,
    Dimension.IP.value: score_ip,
    Dimension.FUNDING.value: score_funding,
    Dimension.SUSTAINABILITY.value: score_sustainability,
    Dimension.SYSTEM_INTEGRATION.value: score_system_integration,
}


def score_dimension(dimension: str, context: ScoringContext) -> AgentOutput:
    """
    Score one dimension for a venture.

    Args:
        dimension: One of the eight dimension names
        context: Venture, latest submission and retrieved document chunks

    Returns:
        AgentOutput for the dimension

    Raises:
        ValueError: If no scorer is registered for the dimension
    """
    scorer = SCORERS.get(dimension)
    if scorer is None:
        raise ValueError(f"No scorer registered for dimension: {dimension}")

    output = scorer(context)
    logger.debug(
        f"Scored {dimension}: level={output.level} confidence={output.confidence}",
        extra={"venture_id": context.venture_id},
    )
    return output
