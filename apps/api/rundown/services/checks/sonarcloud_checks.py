"""
SonarCloud traffic-light checks.

Each check compares one stored fact against a threshold. The defaults come from
settings; a System entity can override threshold and operator per check with
the annotations `tech-insights.io/sonarcloud-<metric>-threshold` and
`tech-insights.io/sonarcloud-<metric>-operator`. Components inherit the values
of the system they belong to.
"""
from __future__ import annotations

import operator
from dataclasses import dataclass, replace
from typing import Any, Callable, Dict, List, Mapping, Optional

import httpx
from loguru import logger

from rundown.schemas.catalog import CompoundEntityRef
from rundown.services.catalog.client import CatalogAPIError, CatalogClient

NUMERIC_OPERATORS: Dict[str, Callable[[Any, Any], bool]] = {
    "lessThan": operator.lt,
    "lessThanInclusive": operator.le,
    "greaterThan": operator.gt,
    "greaterThanInclusive": operator.ge,
}
EQUALITY_OPERATORS: Dict[str, Callable[[Any, Any], bool]] = {
    "equal": operator.eq,
    "notEqual": operator.ne,
}
OPERATORS = {**NUMERIC_OPERATORS, **EQUALITY_OPERATORS}

ANNOTATION_PREFIX = "tech-insights.io/sonarcloud"


@dataclass(frozen=True)
class FactCheck:
    id: str
    name: str
    description: str
    fact: str
    operator: str
    value: Any
    annotation_key_threshold: str = ""
    annotation_key_operator: str = ""


@dataclass
class CheckResult:
    id: str
    name: str
    fact: str
    operator: str
    threshold: Any
    value: Any
    passed: bool


@dataclass(frozen=True)
class SonarThresholds:
    max_bugs: int = 0
    max_code_smells: int = 10
    max_vulnerabilities: int = 0
    min_coverage: float = 80.0


def _check(check_id: str, name: str, description: str, fact: str, op: str, value: Any, slug: str) -> FactCheck:
    return FactCheck(
        id=check_id,
        name=name,
        description=description,
        fact=fact,
        operator=op,
        value=value,
        annotation_key_threshold=f"{ANNOTATION_PREFIX}-{slug}-threshold",
        annotation_key_operator=f"{ANNOTATION_PREFIX}-{slug}-operator",
    )


def build_sonarcloud_checks(thresholds: SonarThresholds) -> List[FactCheck]:
    return [
        _check("noHighBugsCheck", "Bugs", "Bugs reported by SonarCloud", "bugs",
               "lessThanInclusive", thresholds.max_bugs, "bugs"),
        _check("noHighCodeSmellsCheck", "Code smells", "Code smells reported by SonarCloud", "code_smells",
               "lessThanInclusive", thresholds.max_code_smells, "code-smells"),
        _check("vulnerabilitiesCheck", "Vulnerabilities", "Vulnerabilities reported by SonarCloud",
               "vulnerabilities", "lessThanInclusive", thresholds.max_vulnerabilities, "vulnerabilities"),
        _check("codeCoverageCheck", "Code coverage", "Line coverage percentage", "code_coverage",
               "greaterThanInclusive", thresholds.min_coverage, "code-coverage"),
        _check("qualityGateCheck", "Quality gate", "SonarCloud quality gate status", "quality_gate",
               "equal", "OK", "quality-gate"),
    ]


def parse_threshold(raw: str) -> Any:
    """Numeric annotation values compare as numbers, anything else as a string."""
    try:
        return float(raw)
    except ValueError:
        return raw


def apply_system_overrides(checks: List[FactCheck], annotations: Optional[Mapping[str, Any]]) -> List[FactCheck]:
    if not annotations:
        return list(checks)

    resolved: List[FactCheck] = []
    for check in checks:
        raw_threshold = annotations.get(check.annotation_key_threshold)
        raw_operator = annotations.get(check.annotation_key_operator)
        if isinstance(raw_threshold, str) and raw_threshold.strip():
            check = replace(check, value=parse_threshold(raw_threshold.strip()))
        if isinstance(raw_operator, str) and raw_operator.strip():
            check = replace(check, operator=raw_operator.strip())
        resolved.append(check)
    return resolved


def _is_number(v: Any) -> bool:
    return isinstance(v, (int, float)) and not isinstance(v, bool)


def run_check(check: FactCheck, facts: Mapping[str, Any]) -> CheckResult:
    value = facts.get(check.fact)
    threshold = check.value

    if check.operator in NUMERIC_OPERATORS:
        passed = _is_number(value) and _is_number(threshold) and NUMERIC_OPERATORS[check.operator](value, threshold)
    elif check.operator in EQUALITY_OPERATORS:
        passed = (_is_number(value) or isinstance(value, str)) and EQUALITY_OPERATORS[check.operator](value, threshold)
    else:
        logger.warning("Unknown operator {} for check {}", check.operator, check.id)
        passed = False

    return CheckResult(
        id=check.id,
        name=check.name,
        fact=check.fact,
        operator=check.operator,
        threshold=threshold,
        value=value,
        passed=bool(passed),
    )


def evaluate_checks(checks: List[FactCheck], facts: Optional[Mapping[str, Any]]) -> List[CheckResult]:
    if not facts:
        return []
    return [run_check(c, facts) for c in checks]


def traffic_light(results: List[CheckResult]) -> str:
    if not results:
        return "gray"
    return "green" if all(r.passed for r in results) else "red"


async def load_system_annotations(catalog: CatalogClient, ref: CompoundEntityRef) -> Optional[Dict[str, Any]]:
    """
    Annotations of the System the entity belongs to, or None when the entity,
    its system tag or the System entity cannot be found.
    """
    try:
        entity = await catalog.get_entity_by_ref(ref.kind, ref.namespace, ref.name)
        if entity is None or entity.system is None:
            logger.debug("No system for {}, using default thresholds", ref.ref_string())
            return None
        system = await catalog.get_entity_by_ref("System", ref.namespace, entity.system)
    except (CatalogAPIError, httpx.HTTPError) as e:
        logger.warning("Could not resolve system thresholds for {}: {}", ref.ref_string(), e)
        return None

    if system is None:
        logger.warning("System entity {} not found in catalog", entity.system)
        return None
    return dict(system.metadata.annotations)
