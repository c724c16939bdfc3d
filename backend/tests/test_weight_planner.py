import pytest

from clinical_engine.core.exceptions import InvalidGoal, InvalidInput
from clinical_engine.core.policy import COMMON_EXERCISE, HEALTHY_BMI_WARNING, TARGET_MILESTONE_LABEL
from clinical_engine.models.patient import Comorbidity, Gender, PatientBaseline
from clinical_engine.models.weight_plan import ActivityLevel, LossRatePolicy
from clinical_engine.services.safety_adjuster import safety_adjuster
from clinical_engine.services.weight_planner import WeightPlanner, first_match


class TestReferencePlan:
    """Male, 100 kg, 180 cm, 40 y, moderately active, losing to 80 kg at 0.5 kg/week."""

    def setup_method(self):
        self.planner = WeightPlanner()
        self.baseline = PatientBaseline(weight_kg=100, height_cm=180, age_years=40, gender=Gender.MALE)
        self.plan = self.planner.plan_weight_loss(
            self.baseline,
            target_weight_kg=80,
            activity_level=ActivityLevel.MODERATE,
            loss_rate=LossRatePolicy.MODERATE,
        )

    def test_bmi_figures(self):
        assert self.plan.current_bmi == pytest.approx(30.9)
        assert self.plan.target_bmi == pytest.approx(24.7)
        assert self.plan.ideal_weight == pytest.approx(71.3)
        assert self.plan.bmi_category == "Obese I"

    def test_energy_figures(self):
        assert self.plan.bmr == 1930
        assert self.plan.tdee == 2992
        assert self.plan.daily_deficit == 550
        assert self.plan.target_calories == 2442
        assert self.plan.calorie_floor_applied is False

    def test_timeline(self):
        assert self.plan.weight_to_lose_kg == pytest.approx(20)
        assert self.plan.weekly_rate_kg == 0.5
        assert self.plan.weeks_needed == 40
        assert self.plan.months_needed == 9

    def test_protein_follows_target_weight(self):
        assert self.plan.protein_target_grams == 144

    def test_milestones(self):
        thresholds = [m.weight_threshold for m in self.plan.milestones]
        assert thresholds == [95, 90, 85, 80]
        assert self.plan.milestones[-1].is_target
        assert self.plan.milestones[-1].achievement_label == TARGET_MILESTONE_LABEL
        assert not any(m.is_target for m in self.plan.milestones[:-1])

    def test_obese_exercise_tier(self):
        recs = self.plan.exercise_recommendations
        assert recs[0] == "Walking: 30-45 minutes, 5 days/week"
        assert recs[-2:] == COMMON_EXERCISE

    def test_no_advisories_without_comorbidities(self):
        assert self.plan.medical_considerations == ()
        assert self.plan.warnings == ()

    def test_dietary_suggestions_grouped(self):
        diet = self.plan.dietary_suggestions
        assert diet.to_eat and diet.to_limit and diet.meal_timing

    def test_baseline_untouched(self):
        assert self.baseline.weight_kg == 100
        assert self.baseline.active_comorbidities == frozenset()

    def test_adjusting_again_changes_nothing(self):
        assert safety_adjuster.adjust_weight_plan(self.plan, ()) == self.plan


class TestPlanGuards:
    def setup_method(self):
        self.planner = WeightPlanner()
        self.baseline = PatientBaseline(weight_kg=100, height_cm=180, age_years=40, gender=Gender.MALE)

    @pytest.mark.parametrize("target", [100, 110])
    def test_target_not_below_current(self, target):
        with pytest.raises(InvalidGoal) as exc:
            self.planner.plan_weight_loss(self.baseline, target, ActivityLevel.SEDENTARY, LossRatePolicy.SLOW)
        assert exc.value.field == "target_weight_kg"
        assert exc.value.to_dict()["error"] == "invalid_goal"

    def test_current_weight_override(self):
        plan = self.planner.plan_weight_loss(
            self.baseline, 80, ActivityLevel.SEDENTARY, LossRatePolicy.SLOW, current_weight_kg=90
        )
        assert plan.current_weight_kg == 90
        assert plan.weight_to_lose_kg == pytest.approx(10)
        assert plan.weeks_needed == 40

    def test_bad_height(self):
        baseline = PatientBaseline(weight_kg=100, height_cm=0, age_years=40, gender=Gender.MALE)
        with pytest.raises(InvalidInput):
            self.planner.plan_weight_loss(baseline, 80, ActivityLevel.SEDENTARY, LossRatePolicy.SLOW)

    def test_small_goal_rounds_weeks_up(self):
        plan = self.planner.plan_weight_loss(self.baseline, 99.9, ActivityLevel.SEDENTARY, LossRatePolicy.SLOW)
        assert plan.weeks_needed == 1

    def test_weight_to_lose_rounds_half_up(self):
        baseline = PatientBaseline(weight_kg=100.0625, height_cm=180, age_years=40, gender=Gender.MALE)
        plan = self.planner.plan_weight_loss(baseline, 100, ActivityLevel.SEDENTARY, LossRatePolicy.SLOW)
        assert plan.weight_to_lose_kg == 0.063


class TestCalorieFloor:
    def test_female_floor_applied(self):
        baseline = PatientBaseline(weight_kg=60, height_cm=160, age_years=30, gender=Gender.FEMALE)
        plan = WeightPlanner().plan_weight_loss(baseline, 55, ActivityLevel.SEDENTARY, LossRatePolicy.AGGRESSIVE)
        assert plan.target_calories == 1200
        assert plan.calorie_floor_applied is True
        assert any("safety floor" in w for w in plan.warnings)

    def test_healthy_bmi_warning(self):
        baseline = PatientBaseline(weight_kg=60, height_cm=160, age_years=30, gender=Gender.FEMALE)
        plan = WeightPlanner().plan_weight_loss(baseline, 55, ActivityLevel.LIGHT, LossRatePolicy.SLOW)
        assert HEALTHY_BMI_WARNING in plan.warnings


class TestBmiTiers:
    def setup_method(self):
        self.planner = WeightPlanner()

    def _plan(self, weight, height):
        baseline = PatientBaseline(weight_kg=weight, height_cm=height, age_years=45, gender=Gender.MALE)
        return self.planner.plan_weight_loss(baseline, weight - 10, ActivityLevel.LIGHT, LossRatePolicy.MODERATE)

    def test_class_three_only(self):
        plan = self._plan(120, 171)
        considerations = plan.medical_considerations
        assert "Class III Obesity - Consider bariatric surgery evaluation" in considerations
        assert not any(c.startswith("Class II Obesity") for c in considerations)

    def test_class_two(self):
        plan = self._plan(105, 171)
        assert "Class II Obesity - Medical supervision recommended" in plan.medical_considerations
        assert not any(c.startswith("Class III") for c in plan.medical_considerations)

    def test_bmi_exactly_forty_uses_low_impact_tier(self):
        plan = self._plan(90, 150)
        assert plan.current_bmi == 40.0
        assert plan.exercise_recommendations[0].startswith("Start with low-impact")

    def test_overweight_general_tier(self):
        plan = self._plan(85, 180)
        assert not plan.exercise_recommendations[0].startswith("Start with low-impact")
        assert plan.exercise_recommendations[0] != "Walking: 30-45 minutes, 5 days/week"

    def test_first_match(self):
        brackets = ((40.0, "III"), (35.0, "II"))
        assert first_match(brackets, 45) == "III"
        assert first_match(brackets, 35) == "II"
        assert first_match(brackets, 30) is None


class TestMilestones:
    def setup_method(self):
        self.planner = WeightPlanner()

    def test_percentage_milestones_below_target_dropped(self):
        thresholds = [m.weight_threshold for m in self.planner.milestones(100, 92)]
        assert thresholds == [95, 92]

    def test_target_equal_to_milestone_kept_last(self):
        milestones = self.planner.milestones(100, 90)
        assert [m.weight_threshold for m in milestones] == [95, 90, 90]
        assert milestones[-1].is_target


class TestDiabeticAggressivePlan:
    """Female, 95 kg, 165 cm, 50 y, diabetic, aggressive loss to 70 kg."""

    def setup_method(self):
        baseline = PatientBaseline(
            weight_kg=95,
            height_cm=165,
            age_years=50,
            gender=Gender.FEMALE,
            active_comorbidities={Comorbidity.DIABETES},
        )
        self.plan = WeightPlanner().plan_weight_loss(
            baseline, 70, ActivityLevel.SEDENTARY, LossRatePolicy.AGGRESSIVE
        )

    def test_considerations(self):
        considerations = self.plan.medical_considerations
        assert "Diabetes: Adjust medications as weight decreases. Monitor glucose closely." in considerations
        assert "Aggressive deficit - Regular medical monitoring advised" in considerations

    def test_warnings(self):
        assert any("ceiling for diabetic patients" in w for w in self.plan.warnings)
        assert any("safety floor" in w for w in self.plan.warnings)

    def test_numbers_not_capped(self):
        assert self.plan.daily_deficit == 1100
        assert self.plan.target_calories == 1200
        assert self.plan.protein_target_grams == 126
