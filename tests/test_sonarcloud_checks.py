from fakes import FakeCatalog, component
from rundown.schemas.catalog import CompoundEntityRef
from rundown.services.catalog.client import CatalogAPIError
from rundown.services.checks.sonarcloud_checks import (
    SonarThresholds,
    apply_system_overrides,
    build_sonarcloud_checks,
    evaluate_checks,
    load_system_annotations,
    parse_threshold,
    traffic_light,
)

CHECKS = build_sonarcloud_checks(SonarThresholds(max_bugs=0, max_code_smells=10, max_vulnerabilities=0, min_coverage=80))


def test_all_checks_pass_gives_green():
    facts = {"bugs": 0, "code_smells": 10, "vulnerabilities": 0, "code_coverage": 80.0, "quality_gate": "OK"}
    results = evaluate_checks(CHECKS, facts)
    assert all(r.passed for r in results)
    assert traffic_light(results) == "green"


def test_any_failing_check_gives_red():
    facts = {"bugs": 2, "code_smells": 1, "vulnerabilities": 0, "code_coverage": 95.0, "quality_gate": "OK"}
    results = evaluate_checks(CHECKS, facts)
    failed = [r.id for r in results if not r.passed]
    assert failed == ["noHighBugsCheck"]
    assert traffic_light(results) == "red"


def test_quality_gate_and_coverage_checks():
    facts = {"bugs": 0, "code_smells": 0, "vulnerabilities": 0, "code_coverage": 42.0, "quality_gate": "ERROR"}
    failed = {r.id for r in evaluate_checks(CHECKS, facts) if not r.passed}
    assert failed == {"codeCoverageCheck", "qualityGateCheck"}


def test_missing_fact_fails_check():
    results = evaluate_checks(CHECKS, {"bugs": 0})
    assert [r.id for r in results if r.passed] == ["noHighBugsCheck"]


def test_no_facts_gives_gray():
    assert evaluate_checks(CHECKS, None) == []
    assert traffic_light([]) == "gray"


def test_system_annotations_override_defaults():
    checks = apply_system_overrides(
        CHECKS,
        {
            "tech-insights.io/sonarcloud-bugs-threshold": "3",
            "tech-insights.io/sonarcloud-bugs-operator": "lessThan",
            "tech-insights.io/sonarcloud-quality-gate-threshold": "WARN",
            "tech-insights.io/sonarcloud-quality-gate-operator": "notEqual",
        },
    )
    by_id = {c.id: c for c in checks}

    assert (by_id["noHighBugsCheck"].operator, by_id["noHighBugsCheck"].value) == ("lessThan", 3.0)
    assert (by_id["qualityGateCheck"].operator, by_id["qualityGateCheck"].value) == ("notEqual", "WARN")
    assert by_id["codeCoverageCheck"].value == 80

    facts = {"bugs": 2, "code_smells": 0, "vulnerabilities": 0, "code_coverage": 90.0, "quality_gate": "ERROR"}
    assert traffic_light(evaluate_checks(checks, facts)) == "green"


def test_non_numeric_threshold_fails_numeric_check():
    checks = apply_system_overrides(CHECKS, {"tech-insights.io/sonarcloud-bugs-threshold": "few"})
    results = {r.id: r for r in evaluate_checks(checks, {"bugs": 0})}
    assert results["noHighBugsCheck"].threshold == "few"
    assert results["noHighBugsCheck"].passed is False


def test_unknown_operator_fails_check():
    checks = apply_system_overrides(CHECKS, {"tech-insights.io/sonarcloud-bugs-operator": "roughly"})
    results = {r.id: r for r in evaluate_checks(checks, {"bugs": 0})}
    assert results["noHighBugsCheck"].passed is False


def test_boolean_fact_is_not_a_number():
    results = {r.id: r for r in evaluate_checks(CHECKS, {"bugs": False})}
    assert results["noHighBugsCheck"].passed is False


def test_parse_threshold():
    assert parse_threshold("80") == 80.0
    assert parse_threshold("OK") == "OK"


REF = CompoundEntityRef(kind="Component", name="checkout")
SYSTEM = {"kind": "System", "metadata": {"name": "payments", "annotations": {"a": "1"}}}


async def test_system_annotations_are_loaded_from_catalog():
    catalog = FakeCatalog(components=[component("checkout", system="payments")], systems=[SYSTEM])

    assert await load_system_annotations(catalog, REF) == {"a": "1"}
    assert catalog.calls == ["component:default/checkout", "system:default/payments"]


async def test_no_annotations_without_system():
    assert await load_system_annotations(FakeCatalog(components=[component("checkout")]), REF) is None
    assert await load_system_annotations(FakeCatalog(components=[component("checkout", system="gone")]), REF) is None
    assert await load_system_annotations(FakeCatalog(error=CatalogAPIError("down")), REF) is None
