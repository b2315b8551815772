"""
Report detector: annual, progress, status and assessment reports.
"""

from __future__ import annotations

import re
from typing import Optional

from ..detector import EvidenceCap, ProfileDetector, Verdict
from ..models import REPORT, DocumentConfidenceScore, EvidenceTier, ScoringProfile
from ..rules import (
    CoOccurrenceRule,
    DensityRule,
    DetectionContext,
    MetadataRule,
    PatternRule,
    SectionRule,
    count_whole_words,
)

REPORT_TITLE = re.compile(
    r"(?:Annual|Quarterly|Monthly|Weekly|Progress|Status|Assessment|Evaluation|Performance|Activity|Summary)\s+Report",
    re.IGNORECASE,
)
EXECUTIVE_SUMMARY = re.compile(
    r"(?:Executive\s+Summary|Management\s+Summary|Summary\s+of\s+Findings|Report\s+Summary|Overview)", re.IGNORECASE
)
FINDINGS = re.compile(r"(?:Key\s+)?(?:Findings|Observations|Results|Outcomes|Conclusions|Discoveries)\s*:?", re.IGNORECASE)
RECOMMENDATIONS = re.compile(
    r"(?:Recommendations|Suggested\s+Actions|Next\s+Steps|Action\s+Items|Proposed\s+Solutions)", re.IGNORECASE
)
REPORT_PERIOD = re.compile(
    r"(?:Report(?:ing)?\s+Period|Period\s+(?:Covered|Ending)|For\s+the\s+(?:Year|Quarter|Month|Week)\s+(?:Ended|Ending))",
    re.IGNORECASE,
)
METHODOLOGY = re.compile(r"(?:Methodology|Methods|Approach|Process|Procedures\s+Used|Data\s+Collection)", re.IGNORECASE)
METRICS = re.compile(
    r"(?:Performance\s+)?(?:Metrics|Indicators|KPIs|Measures|Statistics|Data\s+Analysis)", re.IGNORECASE
)
ACHIEVEMENTS = re.compile(
    r"(?:Key\s+)?(?:Achievements|Accomplishments|Successes|Milestones|Goals\s+(?:Met|Achieved))", re.IGNORECASE
)
CHALLENGES = re.compile(
    r"(?:Challenges|Issues|Problems|Obstacles|Barriers|Risks|Concerns)\s*(?:Identified|Encountered)?", re.IGNORECASE
)

REPORT_SECTIONS = (
    "Executive Summary",
    "Introduction",
    "Background",
    "Objectives",
    "Scope",
    "Methodology",
    "Findings",
    "Results",
    "Analysis",
    "Discussion",
    "Conclusions",
    "Recommendations",
    "Next Steps",
    "Performance Overview",
    "Key Achievements",
    "Challenges",
    "Lessons Learned",
    "Best Practices",
    "Risk Assessment",
    "Impact Assessment",
    "Evaluation",
    "Outcomes",
    "Deliverables",
    "Timeline",
    "Progress Update",
    "Status Update",
    "Appendices",
    "Data Analysis",
    "Statistical Summary",
    "Trends",
    "Benchmarks",
)

REPORT_TERMS = (
    "report", "summary", "analysis", "assessment", "evaluation", "review",
    "findings", "conclusions", "recommendations", "outcomes", "results",
    "performance", "progress", "status", "update", "metrics", "indicators",
    "data", "statistics", "trends", "achievements", "challenges", "objectives",
    "goals", "targets", "milestone", "deliverables", "timeline", "benchmark", "baseline",
)  # fmt: skip

SPECIALIZED_INDICATORS = (
    "financial", "budget", "fiscal", "revenue", "expense", "audit",
    "motion", "carried", "minutes", "trustees",
    "api", "endpoint", "technical specification",
    "shall", "must", "prohibited", "compliance",
)  # fmt: skip

SPECIALIZED_RATIO = 1.5
MIN_SPECIALIZED_MATCHES = 15
SHORT_CIRCUIT_CAP = 92.0


def specialized_vocabulary(ctx: DetectionContext) -> Optional[str]:
    specialized = count_whole_words(ctx.content, SPECIALIZED_INDICATORS)
    general = count_whole_words(ctx.content, REPORT_TERMS)
    if specialized > general * SPECIALIZED_RATIO and specialized > MIN_SPECIALIZED_MATCHES:
        return f"Specialized report vocabulary ({specialized} specialized vs {general} general terms)"
    return None


def specialized_file_name(ctx: DetectionContext) -> Optional[str]:
    name = ctx.metadata.file_name.lower()
    for term in ("financial", "budget", "minutes", "technical"):
        if term in name:
            return f"File name suggests a specialized report ({term})"
    return None


def strong_report_indicators(ctx: DetectionContext, score: DocumentConfidenceScore) -> Optional[Verdict]:
    """Three report indicators, or two carrying at least 60 points, are conclusive."""
    indicators = len(score.evidence)
    if indicators >= 3 or (indicators >= 2 and score.definitive_score >= 60):
        return Verdict(confidence=min(SHORT_CIRCUIT_CAP, score.definitive_score))
    return None


def report_title(title: str) -> bool:
    return ("report" in title and "financial" not in title) or any(
        term in title for term in ("assessment", "evaluation", "analysis", "review")
    )


def report_file_name(name: str) -> bool:
    return any(term in name for term in ("report", "assessment", "evaluation", "analysis", "review", "summary")) and not any(
        term in name for term in ("financial", "board", "technical", "audit")
    )


PROFILE = ScoringProfile(
    document_type=REPORT,
    priority=40,
    max_possible_score=200.0,
)


def report_detector(evidence_cap: float = 40.0) -> ProfileDetector:
    return ProfileDetector(
        PROFILE,
        negative_filters=(specialized_vocabulary, specialized_file_name),
        marker_rules=(
            PatternRule("Report Title Pattern", REPORT_TITLE, EvidenceTier.DEFINITIVE, 35.0),
            PatternRule("Executive Summary", EXECUTIVE_SUMMARY, EvidenceTier.DEFINITIVE, 30.0),
            CoOccurrenceRule(
                "Findings and Recommendations",
                (FINDINGS, RECOMMENDATIONS),
                EvidenceTier.DEFINITIVE,
                40.0,
                partial_feature="Findings or Recommendations",
                partial_weight=25.0,
            ),
            PatternRule("Report Period", REPORT_PERIOD, EvidenceTier.DEFINITIVE, 25.0),
            MetadataRule("Report Document Title", report_title, EvidenceTier.DEFINITIVE, 30.0),
        ),
        short_circuit=strong_report_indicators,
        rules=(
            PatternRule("Methodology", METHODOLOGY, EvidenceTier.STRUCTURAL, 20.0),
            PatternRule("Metrics/KPIs", METRICS, EvidenceTier.STRUCTURAL, 20.0),
            PatternRule("Achievements", ACHIEVEMENTS, EvidenceTier.STRUCTURAL, 15.0),
            PatternRule("Challenges", CHALLENGES, EvidenceTier.STRUCTURAL, 15.0),
            SectionRule(
                "Report Sections",
                REPORT_SECTIONS,
                template=r"(?:^|\n)\s*{name}\s*[:.\n]",
                min_count=4,
                per_section=7.0,
                cap=35.0,
                max_sections=7,
            ),
            DensityRule("Report Term Density", REPORT_TERMS, threshold=1.5, multiplier=8.0, cap=25.0),
            MetadataRule("Report Filename", report_file_name, EvidenceTier.STRUCTURAL, 20.0, target="file_name"),
        ),
        adjustments=(EvidenceCap(cap=evidence_cap),),
    )
