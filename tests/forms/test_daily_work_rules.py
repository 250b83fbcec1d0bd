"""Tests for daily work cross-field and business rules."""

from erp_validation.domain.value_objects.severity import Category
from erp_validation.forms.daily_work import (
    PlannedTimeWorkTypeValidation,
    RfiUniquenessRule,
    SafetyChecklistRule,
    TrafficManagementRule,
    WorkTypeRoadTypeValidation,
)


class TestWorkTypeRoadTypeValidation:
    """Test work type / road type guidance."""

    def _rule(self, **overrides):
        config = {
            "type": "work_type_road_type",
            "approval_on_through_roads": ["Structure"],
            "approval_error": "Structural work on through roads requires supervisor approval",
            "through_roads_only": ["Pavement"],
            "through_roads_error": "{work_type} work is typically performed on through roads",
        }
        config.update(overrides)
        return WorkTypeRoadTypeValidation(config)

    def test_structure_on_through_road(self):
        """Test structural work on a through road is flagged as a warning."""
        violations = self._rule().evaluate({"type": "Structure", "side": "TR-L"})

        assert [v.message for v in violations] == [
            "Structural work on through roads requires supervisor approval"
        ]
        assert violations[0].is_warning
        assert violations[0].field == "side"

    def test_pavement_on_service_road(self):
        """Test pavement work on a service road is flagged."""
        violations = self._rule().evaluate({"type": "Pavement", "side": "SR-R"})

        assert violations[0].message == "Pavement work is typically performed on through roads"

    def test_level_is_configurable(self):
        """Test the same finding can be made blocking."""
        violations = self._rule(level="error").evaluate({"type": "Structure", "side": "TR-R"})

        assert not violations[0].is_warning

    def test_usual_combination(self):
        """Test usual combinations and incomplete records pass."""
        assert self._rule().evaluate({"type": "Embankment", "side": "SR-L"}) == []
        assert self._rule().evaluate({"type": "Structure", "side": ""}) == []
        assert self._rule().category is Category.SAFETY


class TestPlannedTimeWorkTypeValidation:
    """Test planned time plausibility per work type."""

    def _rule(self):
        return PlannedTimeWorkTypeValidation(
            {
                "type": "planned_time_work_type",
                "min_hours": {"Structure": 4},
                "max_hours": {"Structure": 80},
            }
        )

    def test_too_short(self):
        """Test planned time under the minimum."""
        violations = self._rule().evaluate({"type": "Structure", "planned_time": "2 hours"})

        assert violations[0].message == "Structure work typically requires at least 4 hours"
        assert violations[0].is_warning
        assert violations[0].field == "type"

    def test_too_long(self):
        """Test planned time over the maximum (days are 8 hours)."""
        violations = self._rule().evaluate({"type": "Structure", "planned_time": "11 days"})

        assert violations[0].message == "Structure work exceeding 80 hours may need approval"

    def test_within_bounds_and_unparseable(self):
        """Test plausible and unparseable values pass."""
        assert self._rule().evaluate({"type": "Structure", "planned_time": "4:30"}) == []
        assert self._rule().evaluate({"type": "Structure", "planned_time": "soon"}) == []


class TestRfiUniquenessRule:
    """Test RFI number uniqueness against existing records."""

    def test_duplicate_number(self):
        """Test case-insensitive duplicates are rejected."""
        rule = RfiUniquenessRule({"error": "RFI number already exists"})
        existing = [{"id": 1, "number": "rfi-2024-0001"}]

        violations = rule.evaluate({"number": "RFI-2024-0001"}, existing)

        assert violations[0].field == "number"
        assert violations[0].message == "RFI number already exists"
        assert rule.category is Category.UNIQUENESS

    def test_own_record_excluded(self):
        """Test editing a record does not collide with itself."""
        rule = RfiUniquenessRule({})

        assert rule.evaluate({"id": 1, "number": "RFI-2024-0001"}, [{"id": 1, "number": "RFI-2024-0001"}]) == []
        assert rule.evaluate({"number": ""}, [{"number": ""}]) == []


class TestSafetyChecklistRule:
    """Test safety checklist confirmation."""

    def test_missing_items(self):
        """Test unconfirmed checklist items are listed."""
        rule = SafetyChecklistRule(
            {
                "checklists": {"Structure": ["structural_safety", "material_compliance"]},
                "error": "Required safety measures must be confirmed for {work_type} work: {missing}",
            }
        )

        violations = rule.evaluate(
            {"type": "Structure", "safety_requirements": ["structural_safety"]}, []
        )

        assert violations[0].message == (
            "Required safety measures must be confirmed for Structure work: material_compliance"
        )
        assert violations[0].field == "safety_requirements"

    def test_complete_or_unknown_type(self):
        """Test complete checklists and types without a checklist pass."""
        rule = SafetyChecklistRule({"checklists": {"Pavement": ["surface_prep"]}})

        assert rule.evaluate({"type": "Pavement", "safety_requirements": ["surface_prep"]}, []) == []
        assert rule.evaluate({"type": "Structure"}, []) == []


class TestTrafficManagementRule:
    """Test traffic management on through roads."""

    def _rule(self):
        return TrafficManagementRule(
            {
                "high_impact_roads": ["TR-R", "TR-L"],
                "approvals_field": "safety_approvals",
                "requirements": {"TR-R": ["traffic_management_plan", "signage"]},
                "error": "Traffic management plan must be confirmed for through road work",
                "approvals_error": "All safety requirements must be approved: {missing}",
            }
        )

    def test_plan_and_approvals_missing(self):
        """Test both the plan and the approvals are reported."""
        violations = self._rule().evaluate(
            {"side": "TR-R", "safety_approvals": ["signage"]}, []
        )

        assert [(v.field, v.message) for v in violations] == [
            ("traffic_management_plan", "Traffic management plan must be confirmed for through road work"),
            ("safety_approvals", "All safety requirements must be approved: traffic_management_plan"),
        ]

    def test_confirmed_plan(self):
        """Test a confirmed plan with all approvals passes."""
        record = {
            "side": "TR-R",
            "traffic_management_plan": True,
            "safety_approvals": ["traffic_management_plan", "signage"],
        }

        assert self._rule().evaluate(record, []) == []

    def test_service_roads_not_checked(self):
        """Test low impact roads are not checked."""
        assert self._rule().evaluate({"side": "SR-L"}, []) == []
