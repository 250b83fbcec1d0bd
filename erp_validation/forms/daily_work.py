"""Daily work entry rules.

Cross-field and business rules of the construction daily work form: work
type / road type compatibility, planned time plausibility, RFI number
uniqueness, safety checklists and traffic management on through roads.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping, Sequence
from typing import Any

from ..const import HOURS_PER_WORK_DAY
from ..domain.entities.rule_violation import RuleViolation
from ..domain.helpers.values import is_empty
from ..domain.value_objects.severity import Category
from ..validation.business_rule import LEVEL_WARNING, BusinessRule
from ..validation.cross_field_validation import CrossFieldRule
from ..validation.rule_registry import register_business_rule_type, register_cross_field_type
from .predicates import parse_planned_hours

_LOGGER = logging.getLogger(__name__)


@register_cross_field_type("work_type_road_type")
class WorkTypeRoadTypeValidation(CrossFieldRule):
    """Flag unusual work type / road type combinations.

    YAML configuration:
        type: work_type_road_type
        work_type: type
        road_type: side
        level: warning
        approval_on_through_roads: [Structure]
        approval_error: "Structural work on through roads requires supervisor approval"
        through_roads_only: [Pavement]
        through_roads_error: "{work_type} work is typically performed on through roads"
    """

    rule_type = "work_type_road_type"
    default_category = Category.SAFETY
    default_level = LEVEL_WARNING

    def _configured_fields(self, config: dict[str, Any]) -> tuple[str, ...]:
        self.work_type_field: str = config.get("work_type", "type")
        self.road_type_field: str = config.get("road_type", "side")
        return (self.work_type_field, self.road_type_field)

    def find_problems(self, record: Mapping[str, Any]) -> list[str]:
        """Check the combination against the configured guidance."""
        work_type = str(record[self.work_type_field]).strip()
        road_type = str(record[self.road_type_field]).strip().upper()
        through_prefix = self.config.get("through_road_prefix", "TR")
        service_prefix = self.config.get("service_road_prefix", "SR")

        problems = []
        if road_type.startswith(through_prefix) and work_type in self.config.get(
            "approval_on_through_roads", ()
        ):
            problems.append(
                self.render(
                    self.config.get(
                        "approval_error", "{work_type} work on through roads requires approval"
                    ),
                    work_type=work_type,
                    road_type=road_type,
                )
            )
        if road_type.startswith(service_prefix) and work_type in self.config.get(
            "through_roads_only", ()
        ):
            problems.append(
                self.render(
                    self.config.get(
                        "through_roads_error",
                        "{work_type} work is typically performed on through roads",
                    ),
                    work_type=work_type,
                    road_type=road_type,
                )
            )
        return problems


@register_cross_field_type("planned_time_work_type")
class PlannedTimeWorkTypeValidation(CrossFieldRule):
    """Flag planned times that are unusually short or long for the work type.

    YAML configuration:
        type: planned_time_work_type
        planned_time: planned_time
        work_type: type
        level: warning
        min_hours: {Structure: 4, Embankment: 2, Pavement: 6}
        max_hours: {Structure: 80, Embankment: 40, Pavement: 120}
    """

    rule_type = "planned_time_work_type"
    default_level = LEVEL_WARNING

    def _configured_fields(self, config: dict[str, Any]) -> tuple[str, ...]:
        self.planned_time_field: str = config.get("planned_time", "planned_time")
        self.work_type_field: str = config.get("work_type", "type")
        return (self.planned_time_field, self.work_type_field)

    def find_problems(self, record: Mapping[str, Any]) -> list[str]:
        """Compare planned hours with the work type's bounds."""
        work_type = str(record[self.work_type_field]).strip()
        hours = parse_planned_hours(
            record[self.planned_time_field],
            self.config.get("hours_per_day", HOURS_PER_WORK_DAY),
        )
        if hours is None:
            return []

        problems = []
        min_hours = (self.config.get("min_hours") or {}).get(work_type)
        max_hours = (self.config.get("max_hours") or {}).get(work_type)
        if min_hours is not None and hours < min_hours:
            problems.append(
                self.render(
                    self.config.get(
                        "too_short_error", "{work_type} work typically requires at least {min_hours} hours"
                    ),
                    work_type=work_type,
                    min_hours=min_hours,
                )
            )
        if max_hours is not None and hours > max_hours:
            problems.append(
                self.render(
                    self.config.get(
                        "too_long_error", "{work_type} work exceeding {max_hours} hours may need approval"
                    ),
                    work_type=work_type,
                    max_hours=max_hours,
                )
            )
        return problems


@register_business_rule_type("rfi_uniqueness")
class RfiUniquenessRule(BusinessRule):
    """RFI numbers are unique across existing daily work records.

    Comparison is case-insensitive; the record being edited (same id) is
    excluded.

    YAML configuration:
        type: rfi_uniqueness
        field: number
        error: "RFI number already exists"
    """

    rule_type = "rfi_uniqueness"
    default_field = "number"
    default_category = Category.UNIQUENESS

    def evaluate(
        self, record: Mapping[str, Any], external_records: Sequence[Mapping[str, Any]]
    ) -> list[RuleViolation]:
        """Look for another record with the same RFI number."""
        number = record.get(self.field)
        if is_empty(number):
            return []

        id_field = self.config.get("id_field", "id")
        own_id = record.get(id_field)
        needle = str(number).strip().casefold()

        for other in external_records or ():
            if own_id is not None and other.get(id_field) == own_id:
                continue
            if str(other.get(self.field, "")).strip().casefold() == needle:
                return [self.violation(number=number)]
        return []


@register_business_rule_type("safety_checklist")
class SafetyChecklistRule(BusinessRule):
    """Every safety item of the work type's checklist is confirmed.

    YAML configuration:
        type: safety_checklist
        field: safety_requirements
        work_type: type
        checklists:
          Structure: [structural_safety, material_compliance]
        error: "Required safety measures must be confirmed for {work_type} work: {missing}"
    """

    rule_type = "safety_checklist"
    default_field = "safety_requirements"
    default_category = Category.SAFETY

    def evaluate(
        self, record: Mapping[str, Any], external_records: Sequence[Mapping[str, Any]]
    ) -> list[RuleViolation]:
        """Compare confirmed items with the checklist."""
        work_type = record.get(self.config.get("work_type", "type"))
        checklist = (self.config.get("checklists") or {}).get(work_type)
        if not checklist:
            return []

        confirmed = set(record.get(self.field) or ())
        missing = [item for item in checklist if item not in confirmed]
        if not missing:
            return []
        return [self.violation(work_type=work_type, missing=", ".join(missing))]


@register_business_rule_type("traffic_management")
class TrafficManagementRule(BusinessRule):
    """Work on high traffic impact roads needs a confirmed traffic plan.

    YAML configuration:
        type: traffic_management
        field: traffic_management_plan
        road_type: side
        high_impact_roads: [TR-R, TR-L]
        approvals_field: safety_approvals
        requirements:
          TR-R: [traffic_management_plan, safety_barriers, signage]
        error: "Traffic management plan must be confirmed for through road work"
        approvals_error: "All safety requirements must be approved"
    """

    rule_type = "traffic_management"
    default_field = "traffic_management_plan"
    default_category = Category.SAFETY

    def evaluate(
        self, record: Mapping[str, Any], external_records: Sequence[Mapping[str, Any]]
    ) -> list[RuleViolation]:
        """Check plan confirmation and safety approvals."""
        road_type = str(record.get(self.config.get("road_type", "side")) or "").strip().upper()
        if road_type not in self.config.get("high_impact_roads", ()):
            return []

        violations = []
        if record.get(self.field) is not True:
            violations.append(self.violation(road_type=road_type))

        approvals_field = self.config.get("approvals_field")
        requirements = (self.config.get("requirements") or {}).get(road_type, ())
        if approvals_field and requirements:
            approved = set(record.get(approvals_field) or ())
            missing = [item for item in requirements if item not in approved]
            if missing:
                violations.append(
                    self.violation(
                        self.config.get(
                            "approvals_error", "All safety requirements must be approved"
                        ),
                        field=approvals_field,
                        road_type=road_type,
                        missing=", ".join(missing),
                    )
                )

        if violations:
            _LOGGER.debug(
                "Traffic management incomplete for %s: %d issue(s)", road_type, len(violations)
            )
        return violations
