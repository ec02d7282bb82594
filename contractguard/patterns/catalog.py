"""Built-in risk pattern catalog and loader for site-specific additions."""

import json
from pathlib import Path
from typing import Any

from contractguard.analysis.models import Severity
from contractguard.patterns.exceptions import PatternCatalogError
from contractguard.patterns.models import PatternCatalog, RiskPattern

_REQUIRED_FIELDS = ("name", "pattern", "severity", "category", "explanation")

DEFAULT_CATALOG = PatternCatalog(
    (
        # High risk: construction specific
        RiskPattern.build(
            name="Pay-When-Paid Clause",
            rule=(
                r"pay[\s-]*when[\s-]*paid|paid\s+if\s+paid|contingent\s+upon\s+payment"
                r"|payment\s+subject\s+to\s+receipt|conditioned\s+upon\s+payment"
            ),
            severity=Severity.HIGH,
            category="PAYMENT_TERMS",
            explanation=(
                "Pay-when-paid clauses mean you only get paid if the general contractor "
                "receives payment from the owner. If the owner goes bankrupt or refuses to "
                "pay, you might never receive payment for your work."
            ),
        ),
        RiskPattern.build(
            name="Unlimited Liability",
            rule=(
                r"unlimited\s+liability|unlimited\s+damages|no\s+limit.*liability"
                r"|without\s+limitation|indemnify.*without.*limit"
                r"|hold.*harmless.*without.*limitation"
            ),
            severity=Severity.HIGH,
            category="LIABILITY",
            explanation=(
                "Contract contains clauses that may expose you to unlimited financial "
                "liability, potentially exceeding the contract value by millions of dollars."
            ),
        ),
        RiskPattern.build(
            name="Personal Guarantee",
            rule=(
                r"personal\s+guarantee|personally\s+liable|individual\s+guarantee"
                r"|personal\s+responsibility"
            ),
            severity=Severity.HIGH,
            category="LIABILITY",
            explanation=(
                "Personal guarantee clauses make you personally responsible for business "
                "obligations."
            ),
        ),
        RiskPattern.build(
            name="Broad Indemnification",
            rule=r"indemnify.*harmless|defend.*indemnify|hold\s+harmless.*indemnify",
            severity=Severity.HIGH,
            category="INDEMNIFICATION",
            explanation=(
                "Broad indemnification clauses may require you to cover extensive legal "
                "costs and damages."
            ),
        ),
        RiskPattern.build(
            name="Exclusive Rights",
            rule=r"exclusive\s+rights|\bsole\b.*\brights\b|exclusive.*license|exclusive.*\buse\b",
            severity=Severity.HIGH,
            category="INTELLECTUAL_PROPERTY",
            explanation=(
                "Exclusive rights clauses may limit your ability to use or license your "
                "work elsewhere."
            ),
        ),
        RiskPattern.build(
            name="Work for Hire",
            rule=r"work\s+for\s+hire|work\s+made\s+for\s+hire|employee.*work\s+product",
            severity=Severity.HIGH,
            category="INTELLECTUAL_PROPERTY",
            explanation=(
                "Work for hire clauses transfer ownership of your creative work to the client."
            ),
        ),
        # Medium risk: construction specific
        RiskPattern.build(
            name="Short Notice Requirements",
            rule=(
                r"within\s+24\s+hours|within\s+48\s+hours|2\s+days?\s+notice"
                r"|notice.*within.*(?:24|48)\s+hours|immediate.*notice|same\s+day\s+notice"
            ),
            severity=Severity.MEDIUM,
            category="NOTICE_REQUIREMENTS",
            explanation=(
                "Short notice requirements (24-48 hours) may not provide sufficient time to "
                "respond to contract obligations, potentially resulting in default or "
                "penalties."
            ),
        ),
        RiskPattern.build(
            name="No Compensation for Delays",
            rule=(
                r"no\s+compensation\s+for\s+delay|time\s+extension\s+only"
                r"|no\s+payment.*delay|delay.*without.*compensation|no\s+damages.*delay"
            ),
            severity=Severity.MEDIUM,
            category="DELAY_TERMS",
            explanation=(
                "Clauses denying compensation for delays mean you bear the cost of project "
                "delays even when they are not your fault, potentially causing significant "
                "financial loss."
            ),
        ),
        RiskPattern.build(
            name="Termination for Convenience",
            rule=(
                r"(?:contractor|owner|client|company).*may\s+terminat(?:e|ion)"
                r"|right\s+to\s+terminat(?:e|ion)\s+for\s+convenience"
                r"|terminat(?:e|ion)\s+for\s+convenience\s+at\s+any\s+time"
                r"|terminat(?:e|ion)\s+without\s+cause\s+upon"
                r"|reserves?\s+the\s+right\s+to\s+terminat(?:e|ion)"
                r"|can\s+terminat(?:e|ion).*convenience"
            ),
            severity=Severity.MEDIUM,
            category="TERMINATION",
            explanation=(
                "Termination for convenience allows the other party to end the contract "
                "without cause, potentially leaving you without compensation for "
                "mobilization costs and lost profits."
            ),
        ),
        RiskPattern.build(
            name="Late Payment Penalties",
            rule=r"late.*payment.*penalty|overdue.*interest|penalty.*\blate\b",
            severity=Severity.MEDIUM,
            category="PAYMENT",
            explanation="Contract includes penalties for late payments that could increase costs.",
        ),
        RiskPattern.build(
            name="Non-Compete Clause",
            rule=r"non-compete|not\s+compete|covenant\s+not\s+to\s+compete|restraint.*\btrade\b",
            severity=Severity.MEDIUM,
            category="RESTRICTIVE_COVENANT",
            explanation=(
                "Non-compete clauses may restrict your ability to work with similar clients "
                "or in the same industry."
            ),
        ),
        RiskPattern.build(
            name="Automatic Renewal",
            rule=r"automatic.*renewal|auto.*renew|automatically.*extend",
            severity=Severity.MEDIUM,
            category="TERMINATION",
            explanation=(
                "Automatic renewal clauses may lock you into contract extensions without "
                "explicit consent."
            ),
        ),
        RiskPattern.build(
            name="Limited Termination Rights",
            rule=r"may\s+not.*terminate|cannot.*terminate|no\s+right.*terminate",
            severity=Severity.MEDIUM,
            category="TERMINATION",
            explanation=(
                "Limited termination rights may make it difficult to exit the contract if "
                "needed."
            ),
        ),
        RiskPattern.build(
            name="Confidentiality Obligations",
            rule=r"confidential.*information|non-disclosure|proprietary.*information",
            severity=Severity.MEDIUM,
            category="CONFIDENTIALITY",
            explanation=(
                "Broad confidentiality obligations may restrict your ability to discuss or "
                "use information."
            ),
        ),
        RiskPattern.build(
            name="Assignment Restrictions",
            rule=r"may\s+not.*assign|cannot.*assign|no.*assignment.*without.*consent",
            severity=Severity.MEDIUM,
            category="ASSIGNMENT",
            explanation=(
                "Assignment restrictions may limit your ability to transfer contract rights "
                "or delegate work."
            ),
        ),
        # Low risk
        RiskPattern.build(
            name="Governing Law",
            rule=r"governed\s+by.*\blaws?\b|governing\s+law|laws\s+of.*shall\s+apply",
            severity=Severity.LOW,
            category="JURISDICTION",
            explanation="Contract specifies which jurisdiction's laws will govern the agreement.",
        ),
        RiskPattern.build(
            name="Force Majeure",
            rule=r"force\s+majeure|act\s+of\s+god|unforeseeable.*circumstances",
            severity=Severity.LOW,
            category="FORCE_MAJEURE",
            explanation=(
                "Force majeure clauses provide protection for unforeseeable events beyond "
                "your control."
            ),
        ),
        RiskPattern.build(
            name="Notice Requirements",
            rule=(
                r"notices?\s+shall\s+be\s+deemed|shall\s+(?:promptly\s+)?notify"
                r"|notices?\s+(?:is\s+|are\s+)?required\s+under"
            ),
            severity=Severity.LOW,
            category="NOTICE",
            explanation=(
                "Contract specifies requirements for providing notice in various situations."
            ),
        ),
        RiskPattern.build(
            name="Dispute Resolution",
            rule=r"dispute\s+resolution|arbitration|mediation.*dispute",
            severity=Severity.LOW,
            category="DISPUTE_RESOLUTION",
            explanation="Contract includes mechanisms for resolving disputes outside of court.",
        ),
        RiskPattern.build(
            name="Severability",
            rule=r"severability|severable|invalid.*provision.*remain",
            severity=Severity.LOW,
            category="SEVERABILITY",
            explanation=(
                "Severability clauses ensure that invalid provisions don't void the entire "
                "contract."
            ),
        ),
    )
)


def load_catalog(
    path: Path | None = None,
    base: PatternCatalog = DEFAULT_CATALOG,
) -> PatternCatalog:
    """Build the catalog used by the matcher.

    Args:
        path: Optional JSON file holding a list of extra pattern definitions
              (``name``, ``pattern``, ``severity``, ``category``, ``explanation``).
              The entries are appended after the built-in patterns.
        base: Catalog to extend. Defaults to the built-in catalog.

    Returns:
        ``base`` itself when no path is given, otherwise a new catalog.

    Raises:
        PatternCatalogError: if the file cannot be read or a definition is invalid.
    """
    if path is None:
        return base
    try:
        raw = json.loads(path.read_text(encoding="utf-8"))
    except OSError as exc:
        raise PatternCatalogError(f"Failed to load pattern catalog: {exc}") from exc
    except json.JSONDecodeError as exc:
        raise PatternCatalogError(f"Invalid pattern catalog JSON: {exc}") from exc

    if not isinstance(raw, list):
        raise PatternCatalogError("Pattern catalog file must contain a JSON list")
    return base.with_patterns(*(_build_pattern(item, i) for i, item in enumerate(raw)))


def _build_pattern(raw: Any, index: int) -> RiskPattern:
    if not isinstance(raw, dict):
        raise PatternCatalogError(f"Pattern at index {index} must be an object")
    for field in _REQUIRED_FIELDS:
        value = raw.get(field)
        if not value or not isinstance(value, str):
            raise PatternCatalogError(
                f"Pattern at index {index}: '{field}' must be a non-empty string"
            )
    return RiskPattern.build(
        name=raw["name"],
        rule=raw["pattern"],
        severity=raw["severity"],
        category=raw["category"],
        explanation=raw["explanation"],
    )
