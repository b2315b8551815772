"""
Financial Document detector: statements, budgets, audits and annual financial reports.
"""

from __future__ import annotations

import re
from typing import Optional

from ..detector import EvidenceCap, ProfileDetector, Verdict
from ..models import FINANCIAL, DocumentConfidenceScore, EvidenceTier, ScoringProfile
from ..rules import (
    DensityRule,
    DetectionContext,
    MetadataRule,
    PatternRule,
    SectionRule,
    contains_any,
    count_whole_words,
)

FINANCIAL_STATEMENT = re.compile(
    r"(?:Income\s+Statement|Balance\s+Sheet|Cash\s+Flow"
    r"|Statement\s+of\s+(?:Operations|Financial\s+Position|Changes|Earnings))",
    re.IGNORECASE,
)
CURRENCY = re.compile(
    r"\$[\d,]+(?:\.\d{2})?(?:\s*(?:million|billion|thousand|M|K|B))?\b"
    r"|\b\d{1,3}(?:,\d{3})+(?:\.\d{2})?\s*(?:dollars?|CAD|USD)",
    re.IGNORECASE,
)
FISCAL_YEAR = re.compile(
    r"(?:FY|Fiscal\s+Year|Financial\s+Year)\s*\d{2,4}(?:[-/]\d{2,4})?"
    r"|\b20\d{2}[-/]20\d{2}\s*(?:fiscal|financial|budget)",
    re.IGNORECASE,
)
LINE_ITEM = re.compile(
    r"^\s*(?:[A-Z][A-Za-z\s&]+)\s+[$(]?[\d,]+(?:\.\d{2})?\)?\s+[$(]?[\d,]+(?:\.\d{2})?\)?",
    re.MULTILINE,
)
BUDGET_COMPARISON = re.compile(
    r"(?:Budget(?:ed)?|Actual|Variance|Over|Under)\s*:?\s*\$?[\d,]+(?:\.\d{2})?", re.IGNORECASE
)
TOTAL_LINE = re.compile(r"(?:Total|Subtotal|Grand\s+Total|Net|Gross)\s*:?\s*\$?[\d,]+(?:\.\d{2})?", re.IGNORECASE)
PERCENTAGE = re.compile(r"\b\d+(?:\.\d+)?%|\b\d+(?:\.\d+)?\s*percent", re.IGNORECASE)
QUARTER = re.compile(r"(?:Q[1-4]|Quarter\s+[1-4]|First|Second|Third|Fourth)\s+Quarter(?:\s+20\d{2})?", re.IGNORECASE)

FINANCIAL_SECTIONS = (
    "Executive Summary",
    "Financial Highlights",
    "Revenue",
    "Revenues",
    "Expenses",
    "Expenditures",
    "Assets",
    "Liabilities",
    "Equity",
    "Budget Summary",
    "Budget Overview",
    "Financial Performance",
    "Operating Results",
    "Financial Position",
    "Cash Position",
    "Investments",
    "Debt",
    "Reserves",
    "Fund Balance",
    "Notes to Financial Statements",
    "Auditor's Report",
    "Management Discussion and Analysis",
    "MD&A",
)

FINANCIAL_TERMS = (
    "revenue", "expense", "income", "cost", "budget", "actual", "variance",
    "surplus", "deficit", "asset", "liability", "equity", "cash", "investment",
    "debt", "loan", "interest", "principal", "amortization", "depreciation",
    "accrual", "receivable", "payable", "fiscal", "financial", "audit", "audited",
    "unaudited", "quarter", "annual", "year-to-date", "ytd", "forecast",
    "allocation", "appropriation", "disbursement", "expenditure", "grant",
    "funding", "contribution", "donation", "subsidy",
)  # fmt: skip

NON_FINANCIAL_INDICATORS = ("motion", "seconded", "carried", "api", "endpoint", "function", "shall", "must", "prohibited")
MAX_NON_FINANCIAL_MATCHES = 10

MIN_CURRENCY_VALUES = 10
HEAVY_CURRENCY_VALUES = 20
SHORT_CIRCUIT_CAP = 95.0


def non_financial_vocabulary(ctx: DetectionContext) -> Optional[str]:
    matches = count_whole_words(ctx.content, NON_FINANCIAL_INDICATORS)
    if matches > MAX_NON_FINANCIAL_MATCHES:
        return f"Vocabulary of another document type ({matches} matches)"
    return None


def strong_financial_indicators(ctx: DetectionContext, score: DocumentConfidenceScore) -> Optional[Verdict]:
    """Three strong indicators, or two alongside dense currency figures, are conclusive."""
    indicators = len(score.evidence)
    if indicators >= 3:
        return Verdict(confidence=min(SHORT_CIRCUIT_CAP, score.definitive_score))
    if indicators >= 2 and sum(1 for _ in CURRENCY.finditer(ctx.content)) >= HEAVY_CURRENCY_VALUES:
        return Verdict(confidence=min(SHORT_CIRCUIT_CAP, score.definitive_score))
    return None


def financial_file_name(name: str) -> bool:
    return (
        any(term in name for term in ("budget", "financial", "audit", "expense", "revenue", "aerr", "aer"))
        or ("annual" in name and "report" in name)
    )


PROFILE = ScoringProfile(
    document_type=FINANCIAL,
    priority=25,
    max_possible_score=200.0,
)


def financial_detector(evidence_cap: float = 40.0) -> ProfileDetector:
    return ProfileDetector(
        PROFILE,
        negative_filters=(non_financial_vocabulary,),
        marker_rules=(
            PatternRule("Financial Statement", FINANCIAL_STATEMENT, EvidenceTier.DEFINITIVE, 40.0),
            PatternRule(
                "Multiple Currency Values", CURRENCY, EvidenceTier.DEFINITIVE, 35.0, min_count=MIN_CURRENCY_VALUES
            ),
            PatternRule("Fiscal Year References", FISCAL_YEAR, EvidenceTier.DEFINITIVE, 30.0, min_count=2),
            PatternRule("Financial Line Items", LINE_ITEM, EvidenceTier.DEFINITIVE, 35.0, min_count=5),
            MetadataRule(
                "Financial Title",
                contains_any("financial", "budget", "annual report", "audit", "revenue", "expense", "fiscal"),
                EvidenceTier.DEFINITIVE,
                30.0,
            ),
        ),
        short_circuit=strong_financial_indicators,
        rules=(
            PatternRule("Budget Comparisons", BUDGET_COMPARISON, EvidenceTier.STRUCTURAL, 25.0, min_count=3),
            PatternRule("Total Lines", TOTAL_LINE, EvidenceTier.STRUCTURAL, 20.0, min_count=3),
            PatternRule("Percentage Values", PERCENTAGE, EvidenceTier.STRUCTURAL, 15.0, min_count=5),
            PatternRule("Quarterly References", QUARTER, EvidenceTier.STRUCTURAL, 15.0, min_count=2),
            SectionRule(
                "Financial Sections",
                FINANCIAL_SECTIONS,
                template=r"(?:^|\n)\s*{name}\s*[:.\n]",
                min_count=3,
                per_section=7.0,
                cap=30.0,
                max_sections=6,
            ),
            DensityRule("Financial Term Density", FINANCIAL_TERMS, threshold=1.5, multiplier=8.0, cap=25.0),
            MetadataRule("Financial Filename", financial_file_name, EvidenceTier.STRUCTURAL, 20.0, target="file_name"),
        ),
        adjustments=(EvidenceCap(cap=evidence_cap),),
    )
