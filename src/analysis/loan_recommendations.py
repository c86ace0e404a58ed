"""
Financing Recommendation Module

Rule-based selection of financing products for a retrofit project. Each rule
looks at the average project cost, the average simple payback and the
selected measures, and either contributes one recommendation or nothing.
Rules are independent and evaluated in declaration order; the output keeps
that order.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, List, Mapping, Optional, Sequence

from loguru import logger

from src.modeling.analysis_schema import FinancialSummary, LoanRecommendation, Suitability
from src.modeling.ranges import midpoint
from src.modeling.reference_data import ReferenceData, default_reference_data


@dataclass(frozen=True)
class ProjectProfile:
    """Facts the financing rules condition on."""
    average_cost: float
    average_payback: float
    has_electrification: bool
    has_solar: bool


def _reasons(*candidates: Optional[str]) -> tuple:
    """Drop empty conditional reasons, keep order."""
    return tuple(reason for reason in candidates if reason)


def _pace_financing(profile: ProjectProfile, params: Mapping) -> Optional[LoanRecommendation]:
    if profile.average_cost <= params['pace_min_project_cost']:
        return None

    return LoanRecommendation(
        loan_type='C-PACE Financing',
        description=(
            'Commercial Property Assessed Clean Energy financing allows you to finance '
            'energy improvements through a property tax assessment.'
        ),
        typical_terms='15-25 year terms, fixed rates typically 5-8%, transfers with property sale',
        suitability=Suitability.EXCELLENT if profile.has_electrification else Suitability.GOOD,
        reasons=_reasons(
            'Long repayment terms match the life of improvements',
            'Payments may be passed through to tenants',
            'No upfront capital required',
            'Clean energy projects often qualify for favorable rates'
            if profile.has_electrification else 'Energy efficiency projects qualify',
        ),
    )


def _green_loan(profile: ProjectProfile, params: Mapping) -> Optional[LoanRecommendation]:
    strong_payback = profile.average_payback <= params['green_loan_excellent_max_payback_years']

    return LoanRecommendation(
        loan_type='Spring Bank Green Loan',
        description=(
            'A dedicated financing product for building energy improvements and LL97 '
            'compliance projects.'
        ),
        typical_terms='5-15 year terms, competitive fixed rates, flexible payment structures',
        suitability=Suitability.EXCELLENT if strong_payback else Suitability.GOOD,
        reasons=_reasons(
            'Designed specifically for building retrofits',
            'Competitive rates for qualifying projects',
            'Strong payback period supports favorable terms'
            if strong_payback else 'Project savings support debt service',
            'Local lender with expertise in NYC building regulations',
        ),
    )


def _solar_financing(profile: ProjectProfile, params: Mapping) -> Optional[LoanRecommendation]:
    if not profile.has_solar:
        return None

    return LoanRecommendation(
        loan_type='Solar Financing / PPA',
        description=(
            'Specialized solar financing including Power Purchase Agreements (PPA) or solar loans.'
        ),
        typical_terms='PPAs: 15-25 years, no upfront cost; Loans: 5-15 years, rates vary',
        suitability=Suitability.EXCELLENT,
        reasons=_reasons(
            'Solar-specific financing may offer better terms',
            'Federal ITC and state incentives can reduce net cost',
            'PPAs transfer performance risk to installer',
            'May qualify for additional green building incentives',
        ),
    )


def _state_programs(profile: ProjectProfile, params: Mapping) -> Optional[LoanRecommendation]:
    return LoanRecommendation(
        loan_type='NYSERDA Financing Programs',
        description=(
            'New York State Energy Research and Development Authority offers various '
            'financing and incentive programs.'
        ),
        typical_terms='Varies by program; may include low-interest loans, on-bill financing, or incentives',
        suitability=Suitability.EXCELLENT if profile.has_electrification else Suitability.GOOD,
        reasons=_reasons(
            'State-backed programs often offer below-market rates',
            'May be combined with other financing',
            'Electrification projects may qualify for additional incentives'
            if profile.has_electrification else 'Energy efficiency incentives available',
            'Technical assistance often included',
        ),
    )


def _construction_loan(profile: ProjectProfile, params: Mapping) -> Optional[LoanRecommendation]:
    if profile.average_cost <= params['construction_min_project_cost']:
        return None

    return LoanRecommendation(
        loan_type='Construction / Renovation Loan',
        description=(
            'For comprehensive retrofit projects, a construction loan can provide staged '
            'financing during the improvement phase.'
        ),
        typical_terms='12-36 month construction period, then converts to permanent financing',
        suitability=Suitability.GOOD,
        reasons=_reasons(
            'Appropriate for large-scale comprehensive retrofits',
            'Draw schedule matches project milestones',
            'Can refinance into permanent loan upon completion',
            'May incorporate energy savings into underwriting',
        ),
    )


RecommendationRule = Callable[[ProjectProfile, Mapping], Optional[LoanRecommendation]]

RECOMMENDATION_RULES: List[RecommendationRule] = [
    _pace_financing,
    _green_loan,
    _solar_financing,
    _state_programs,
    _construction_loan,
]


def build_project_profile(
    financial_summary: FinancialSummary,
    selected_retrofit_ids: Sequence[str],
    params: Mapping,
) -> ProjectProfile:
    selected = frozenset(selected_retrofit_ids)
    return ProjectProfile(
        average_cost=midpoint(financial_summary.total_retrofit_cost),
        average_payback=midpoint(financial_summary.simple_payback),
        has_electrification=bool(selected & params['clean_energy_measures']),
        has_solar=bool(selected & params['solar_measures']),
    )


def generate_loan_recommendations(
    financial_summary: FinancialSummary,
    selected_retrofit_ids: Sequence[str],
    reference: Optional[ReferenceData] = None,
) -> List[LoanRecommendation]:
    """
    Propose financing products for the project.

    Args:
        financial_summary: Project-level financial summary
        selected_retrofit_ids: Catalogue ids of the selected measures

    Returns:
        Recommendations in rule order (not sorted by suitability)
    """
    reference = reference or default_reference_data()
    params = reference.financing
    profile = build_project_profile(financial_summary, selected_retrofit_ids, params)

    recommendations = []
    for rule in RECOMMENDATION_RULES:
        recommendation = rule(profile, params)
        if recommendation is not None:
            recommendations.append(recommendation)

    logger.info(
        f"Generated {len(recommendations)} financing recommendations "
        f"(average cost ${profile.average_cost:,.0f}, average payback {profile.average_payback:.1f} yrs)"
    )
    return recommendations
