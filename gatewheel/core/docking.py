# gatewheel/core/docking.py
"""
Docking verification for knowledge-system mapping documents.

A mapping document attaches external content to wheel addresses:

    {"systemName": "...", "version": "1.0", "completeness": "full",
     "mappings": [{"gateNumber": 10, "lineNumber": 1, ...}, ...]}

`verify_mapping` checks the document shape, every entry's address and that
each entry resolves to a wheel position under the given configuration.
The content of the mappings is opaque here.

Tallies count one test per check that can pass or fail. A missing
`version` is only a warning and is not counted, so it never fails the
report. An entry whose address is invalid fails once and is not docked.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from gatewheel.core.angles import wheel_position
from gatewheel.core.constants import LINES_PER_GATE, TOTAL_GATES
from gatewheel.core.errors import ErrorSet
from gatewheel.core.wheel import ValidatedConfiguration

__all__ = ["DockingReport", "verify_mapping"]


@dataclass
class DockingReport:
    system_name: Optional[str] = None
    version: Optional[str] = None
    total_tests: int = 0
    passed_tests: int = 0
    failed_tests: int = 0
    errors: List[Dict[str, Any]] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)
    docked: List[Dict[str, Any]] = field(default_factory=list)

    @property
    def passed(self) -> bool:
        return self.failed_tests == 0

    def ok(self) -> None:
        self.total_tests += 1
        self.passed_tests += 1

    def fail(self, loc: List[Any], msg: str, typ: str = "value_error") -> None:
        self.total_tests += 1
        self.failed_tests += 1
        self.errors.append({"loc": loc, "msg": msg, "type": typ})

    def as_dict(self) -> Dict[str, Any]:
        return {
            "systemName": self.system_name,
            "version": self.version,
            "passed": self.passed,
            "total_tests": self.total_tests,
            "passed_tests": self.passed_tests,
            "failed_tests": self.failed_tests,
            "errors": list(self.errors),
            "warnings": list(self.warnings),
        }


def _gate_ok(v: Any) -> bool:
    return isinstance(v, int) and not isinstance(v, bool) and 1 <= v <= TOTAL_GATES


def _line_ok(v: Any) -> bool:
    return isinstance(v, int) and not isinstance(v, bool) and 1 <= v <= LINES_PER_GATE


def verify_mapping(config: ValidatedConfiguration, document: Any) -> DockingReport:
    report = DockingReport()
    if not isinstance(document, dict):
        report.fail([], "mapping document must be an object", "type_error")
        return report

    # 1. structure
    name = document.get("systemName")
    if isinstance(name, str) and name:
        report.system_name = name
        report.ok()
    else:
        report.fail(["systemName"], "missing or invalid systemName")

    version = document.get("version")
    if version:
        report.version = str(version)
    else:
        report.warnings.append("missing version number")

    mappings = document.get("mappings")
    if mappings is None:
        report.fail(["mappings"], "missing mappings array", "value_error.missing")
        return report
    if not isinstance(mappings, list):
        report.fail(["mappings"], "mappings must be an array", "type_error.list")
        return report
    report.ok()

    # 2. addresses, 3. docking
    for i, m in enumerate(mappings):
        if not isinstance(m, dict):
            report.fail(["mappings", i], "mapping entry must be an object", "type_error")
            continue
        gate = m.get("gateNumber")
        line = m.get("lineNumber")
        if not _gate_ok(gate):
            report.fail(["mappings", i, "gateNumber"], f"invalid gate number {gate!r} (must be 1-{TOTAL_GATES})")
            continue
        if line is not None and not _line_ok(line):
            report.fail(["mappings", i, "lineNumber"], f"invalid line number {line!r} (must be 1-{LINES_PER_GATE})")
            continue
        report.ok()
        try:
            pos = wheel_position(config, gate, line or 1)
        except ErrorSet as e:
            report.fail(["mappings", i], f"cannot dock: {e}", "value_error.docking")
            continue
        report.ok()
        report.docked.append({"index": i, **pos.as_dict()})

    # 4. completeness
    if document.get("completeness") == "full":
        covered = {m["gateNumber"] for m in mappings if isinstance(m, dict) and _gate_ok(m.get("gateNumber"))}
        missing = [g for g in range(1, TOTAL_GATES + 1) if g not in covered]
        if missing:
            report.fail(["mappings"], f"missing gates: {', '.join(str(g) for g in missing)}", "value_error.incomplete")
        else:
            report.ok()

    return report
