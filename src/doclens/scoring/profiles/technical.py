"""
Technical Documentation detector: API references, developer guides, specifications.
"""

from __future__ import annotations

import re
from typing import Optional

from ..detector import EvidenceCap, ProfileDetector, Verdict
from ..models import TECHNICAL, DocumentConfidenceScore, EvidenceTier, ScoringEvidence, ScoringProfile
from ..rules import DensityRule, DetectionContext, MetadataRule, PatternRule, SectionRule

CODE_BLOCK = re.compile(r"```\w*\n[\s\S]*?```|<code>[\s\S]*?</code>|<pre>[\s\S]*?</pre>", re.MULTILINE)
API_ENDPOINT = re.compile(
    r"(?:GET|POST|PUT|DELETE|PATCH|HEAD|OPTIONS)\s+(?:/[\w/{}:\-.]+)|(?:https?://[\w./]+/api/[\w/]+)",
    re.IGNORECASE,
)
JSON_CONFIG = re.compile(r"""\{\s*["']\w+["']\s*:\s*(?:["'][\w\s]*["']|[\d.]+|true|false|null|\{|\[)""")
COMMAND_LINE = re.compile(
    r"^\s*[$#>]\s*[\w\-]+(?:\s+[\w\-./=]+)*|npm\s+(?:install|run)|pip\s+install|dotnet\s+(?:run|build)|git\s+\w+",
    re.MULTILINE | re.IGNORECASE,
)
VERSION = re.compile(r"(?:v|version\s*)[0-9]+(?:\.[0-9]+)*(?:[-\w.]*)?", re.IGNORECASE)
TECHNICAL_ACRONYM = re.compile(r"\b(?:SDK|API|CLI|GUI|REST|SOAP|JSON|XML|SQL|NoSQL|OAuth|JWT|CORS|HTTPS?|FTP|SSH|TCP|UDP|IP)\b")

TECHNICAL_SECTIONS = (
    "Installation",
    "Setup",
    "Configuration",
    "API Reference",
    "API Documentation",
    "Getting Started",
    "Quick Start",
    "Prerequisites",
    "Requirements",
    "Usage",
    "Examples",
    "Code Examples",
    "Sample Code",
    "Implementation",
    "Parameters",
    "Arguments",
    "Options",
    "Environment Variables",
    "Endpoints",
    "Routes",
    "Methods",
    "Functions",
    "Classes",
    "Error Codes",
    "Status Codes",
    "Troubleshooting",
    "Debugging",
    "Authentication",
    "Authorization",
    "Security",
    "Permissions",
    "Database Schema",
    "Data Model",
    "Architecture",
    "System Design",
    "Dependencies",
    "Package Management",
    "Build Instructions",
    "Deployment",
)

TECHNICAL_TERMS = (
    "api", "endpoint", "request", "response", "payload", "header", "token",
    "authentication", "authorization", "oauth", "jwt", "bearer",
    "database", "query", "schema", "table", "index", "migration",
    "server", "client", "backend", "frontend", "middleware",
    "deployment", "docker", "kubernetes", "container", "microservice",
    "repository", "branch", "commit", "merge",
    "configuration", "environment", "variable", "parameter", "setting",
    "debug", "error", "exception", "log", "logging",
    "async", "await", "promise", "callback", "event", "listener",
    "class", "object", "method", "function", "interface", "module",
    "package", "library", "framework", "dependency", "version",
)  # fmt: skip

DENSITY_SEPARATORS = re.compile(r"[ \n\r\t.,;:()\[\]{}]+")

MIN_CODE_BLOCKS = 3
MIN_API_ENDPOINTS = 2
SHORT_CIRCUIT_CAP = 95.0


def technical_file_name(name: str) -> bool:
    return (
        ("api" in name and ("doc" in name or "reference" in name))
        or ("technical" in name and "spec" in name)
        or ("developer" in name and "guide" in name)
        or name.endswith((".yaml", ".yml"))
        or (name.endswith(".json") and "config" in name)
    )


def technical_title(title: str) -> bool:
    return (
        any(term in title for term in ("api", "technical", "developer", "documentation"))
        or ("guide" in title and ("system" in title or "integration" in title))
    )


def strong_technical_indicators(ctx: DetectionContext, score: DocumentConfidenceScore) -> Optional[Verdict]:
    """Code plus endpoints, an OpenAPI document, or a technical file name with code is conclusive."""
    code_blocks = sum(1 for _ in CODE_BLOCK.finditer(ctx.content))
    endpoints = sum(1 for _ in API_ENDPOINT.finditer(ctx.content))

    if code_blocks >= MIN_CODE_BLOCKS and endpoints >= MIN_API_ENDPOINTS:
        evidence = ScoringEvidence.flat("API Endpoints", str(endpoints), EvidenceTier.DEFINITIVE, 35.0)
        return Verdict(confidence=SHORT_CIRCUIT_CAP, evidence=(evidence,))

    lowered = ctx.content.lower()
    if "openapi:" in lowered or "swagger:" in lowered:
        evidence = ScoringEvidence.flat("OpenAPI/Swagger Specification", "Present", EvidenceTier.DEFINITIVE, 50.0)
        return Verdict(confidence=min(SHORT_CIRCUIT_CAP, 98.0), evidence=(evidence,))

    if technical_file_name(ctx.metadata.file_name.lower()) and (code_blocks > 0 or endpoints > 0):
        evidence = ScoringEvidence.flat(
            "Technical Filename Pattern", ctx.metadata.file_name, EvidenceTier.DEFINITIVE, 30.0
        )
        return Verdict(confidence=min(SHORT_CIRCUIT_CAP, 75.0), evidence=(evidence,))
    return None


PROFILE = ScoringProfile(
    document_type=TECHNICAL,
    priority=20,
    max_possible_score=180.0,
)


def technical_detector(evidence_cap: float = 40.0) -> ProfileDetector:
    # Marker and weighted rules share feature names, so code blocks and
    # endpoints only count once per document.
    return ProfileDetector(
        PROFILE,
        marker_rules=(
            PatternRule("Code Blocks", CODE_BLOCK, EvidenceTier.DEFINITIVE, 85.0, min_count=MIN_CODE_BLOCKS),
        ),
        short_circuit=strong_technical_indicators,
        rules=(
            PatternRule("Code Blocks", CODE_BLOCK, EvidenceTier.STRUCTURAL, per_match=10.0, cap=30.0),
            PatternRule("API Endpoints", API_ENDPOINT, EvidenceTier.STRUCTURAL, per_match=5.0, cap=25.0),
            PatternRule("Configuration Examples", JSON_CONFIG, EvidenceTier.STRUCTURAL, 15.0, min_count=3),
            PatternRule("Command Line Examples", COMMAND_LINE, EvidenceTier.STRUCTURAL, 20.0, min_count=2),
            SectionRule(
                "Technical Sections",
                TECHNICAL_SECTIONS,
                template=r"(?:^|\n)\s*#*\s*{name}\s*[:.\n#]",
                min_count=3,
                per_section=8.0,
                cap=30.0,
            ),
            DensityRule(
                "Technical Term Density",
                TECHNICAL_TERMS,
                threshold=2.0,
                multiplier=5.0,
                cap=25.0,
                separators=DENSITY_SEPARATORS,
            ),
            PatternRule("Version Numbers", VERSION, EvidenceTier.LEXICAL, 10.0, min_count=3),
            PatternRule("Technical Acronyms", TECHNICAL_ACRONYM, EvidenceTier.LEXICAL, 15.0, min_count=5),
            MetadataRule("Technical Document Title", technical_title, EvidenceTier.STRUCTURAL, 20.0),
            MetadataRule(
                "Technical Filename Pattern", technical_file_name, EvidenceTier.DEFINITIVE, 75.0, target="file_name"
            ),
        ),
        adjustments=(EvidenceCap(cap=evidence_cap),),
    )
