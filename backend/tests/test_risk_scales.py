import pytest

from clinical_engine.core.exceptions import InvalidInput, OutOfRangeSubscore
from clinical_engine.core.policy import RISK_BANDS, SUBSCORE_RANGES
from clinical_engine.models.patient import Gender
from clinical_engine.models.risk import (
    BradenInput,
    BradenRisk,
    HealingTrend,
    NortonInput,
    NortonRisk,
    PushInput,
    RiskScale,
    WaterlowInput,
    WaterlowRisk,
)
from clinical_engine.services.risk_scales import (
    RiskScaleScorer,
    push_area_subscore,
    waterlow_age_subscore,
    waterlow_build_subscore,
    waterlow_sex_subscore,
)

INPUT_TYPES = {
    RiskScale.BRADEN: BradenInput,
    RiskScale.WATERLOW: WaterlowInput,
    RiskScale.NORTON: NortonInput,
    RiskScale.PUSH: PushInput,
}


def inputs_with_total(scale, total):
    """Fill items from their minimums upwards until the requested total is reached."""
    ranges = SUBSCORE_RANGES[scale]
    items = {name: low for name, (low, _) in ranges.items()}
    remaining = total - sum(items.values())
    for name, (low, high) in ranges.items():
        step = min(remaining, high - low)
        items[name] += step
        remaining -= step
    assert remaining == 0, f"total {total} unreachable for {scale.value}"
    return INPUT_TYPES[scale](**items)


class TestBradenScale:
    def setup_method(self):
        self.scorer = RiskScaleScorer()

    @pytest.mark.parametrize(
        "total,level",
        [
            (6, BradenRisk.VERY_HIGH), (9, BradenRisk.VERY_HIGH),
            (10, BradenRisk.HIGH), (12, BradenRisk.HIGH),
            (13, BradenRisk.MODERATE), (14, BradenRisk.MODERATE),
            (15, BradenRisk.MILD), (18, BradenRisk.MILD),
            (19, BradenRisk.NO_RISK), (23, BradenRisk.NO_RISK),
        ],
    )
    def test_cut_points_both_sides(self, total, level):
        result = self.scorer.score_braden(inputs_with_total(RiskScale.BRADEN, total))
        assert result.total_score == total
        assert result.risk_level == level

    def test_every_total_maps_to_exactly_one_band(self):
        for total in range(6, 24):
            matches = [b for b in RISK_BANDS[RiskScale.BRADEN] if b.min_score <= total <= b.max_score]
            assert len(matches) == 1
            result = self.scorer.score_braden(inputs_with_total(RiskScale.BRADEN, total))
            assert result.risk_level == matches[0].level

    def test_total_is_sum_of_subscores(self):
        inputs = BradenInput(
            sensory_perception=3, moisture=2, activity=4, mobility=1, nutrition=2, friction_shear=3
        )
        result = self.scorer.score_braden(inputs)
        assert result.total_score == 15
        assert result.total_score == sum(dict(result.subscores).values())

    def test_friction_shear_limited_to_three(self):
        inputs = BradenInput(
            sensory_perception=4, moisture=4, activity=4, mobility=4, nutrition=4, friction_shear=4
        )
        with pytest.raises(OutOfRangeSubscore) as exc:
            self.scorer.score_braden(inputs)
        assert exc.value.field == "friction_shear"
        assert exc.value.bound == "max"
        assert exc.value.to_dict()["bound"] == "max"

    def test_below_minimum_rejected(self):
        inputs = BradenInput(
            sensory_perception=0, moisture=4, activity=4, mobility=4, nutrition=4, friction_shear=3
        )
        with pytest.raises(OutOfRangeSubscore) as exc:
            self.scorer.score_braden(inputs)
        assert exc.value.field == "sensory_perception"
        assert exc.value.bound == "min"

    def test_fractional_item_rejected(self):
        inputs = BradenInput(
            sensory_perception=2.5, moisture=4, activity=4, mobility=4, nutrition=4, friction_shear=3
        )
        with pytest.raises(OutOfRangeSubscore) as exc:
            self.scorer.score_braden(inputs)
        assert exc.value.bound == "integer"

    def test_non_numeric_item_rejected(self):
        inputs = BradenInput(
            sensory_perception="high", moisture=4, activity=4, mobility=4, nutrition=4, friction_shear=3
        )
        with pytest.raises(InvalidInput):
            self.scorer.score_braden(inputs)

    def test_lowest_subscores_named(self):
        inputs = BradenInput(
            sensory_perception=3, moisture=2, activity=4, mobility=3, nutrition=1, friction_shear=3
        )
        result = self.scorer.score_braden(inputs)
        assert result.lowest_subscores == ("Moisture", "Nutrition")

    def test_very_high_risk_care_plan(self):
        result = self.scorer.score_braden(inputs_with_total(RiskScale.BRADEN, 8))
        assert "1-2h" in result.interpretation
        assert result.turning_schedule == "Every 1-2 hours (q1-2h)"
        assert "alternating pressure mattress" in result.support_surface
        assert len(result.interventions) > 0
        assert result.severity_rank == 4

    def test_no_comorbidities_means_no_advisories(self):
        result = self.scorer.score_braden(inputs_with_total(RiskScale.BRADEN, 10))
        assert result.advisories == ()


class TestWaterlowScale:
    def setup_method(self):
        self.scorer = RiskScaleScorer()

    @pytest.mark.parametrize(
        "total,level",
        [
            (2, WaterlowRisk.NOT_AT_RISK), (9, WaterlowRisk.NOT_AT_RISK),
            (10, WaterlowRisk.AT_RISK), (14, WaterlowRisk.AT_RISK),
            (15, WaterlowRisk.HIGH_RISK), (19, WaterlowRisk.HIGH_RISK),
            (20, WaterlowRisk.VERY_HIGH_RISK), (49, WaterlowRisk.VERY_HIGH_RISK),
        ],
    )
    def test_cut_points(self, total, level):
        result = self.scorer.score_waterlow(inputs_with_total(RiskScale.WATERLOW, total))
        assert result.total_score == total
        assert result.risk_level == level
        assert result.interpretation

    def test_sex_item_range(self):
        inputs = WaterlowInput(build_bmi=0, skin_type=0, sex=3, age=1, continence=0, mobility=0, appetite=0)
        with pytest.raises(OutOfRangeSubscore) as exc:
            self.scorer.score_waterlow(inputs)
        assert exc.value.field == "sex"

    @pytest.mark.parametrize("bmi,score", [(19.9, 3), (20.0, 0), (24.9, 0), (25.0, 1), (29.9, 1), (30.0, 2)])
    def test_build_subscore(self, bmi, score):
        assert waterlow_build_subscore(bmi) == score

    @pytest.mark.parametrize("age,score", [(14, 1), (49, 1), (50, 2), (64, 2), (65, 3), (74, 3), (75, 4), (80, 4), (81, 5)])
    def test_age_subscore(self, age, score):
        assert waterlow_age_subscore(age) == score

    def test_age_subscore_below_scale(self):
        with pytest.raises(InvalidInput):
            waterlow_age_subscore(10)

    def test_sex_subscore(self):
        assert waterlow_sex_subscore(Gender.MALE) == 1
        assert waterlow_sex_subscore(Gender.FEMALE) == 2


class TestNortonScale:
    def setup_method(self):
        self.scorer = RiskScaleScorer()

    @pytest.mark.parametrize(
        "total,level",
        [
            (5, NortonRisk.VERY_HIGH), (10, NortonRisk.VERY_HIGH),
            (11, NortonRisk.HIGH), (14, NortonRisk.HIGH),
            (15, NortonRisk.MODERATE), (18, NortonRisk.MODERATE),
            (19, NortonRisk.LOW), (20, NortonRisk.LOW),
        ],
    )
    def test_cut_points(self, total, level):
        result = self.scorer.score_norton(inputs_with_total(RiskScale.NORTON, total))
        assert result.risk_level == level

    def test_item_out_of_range(self):
        inputs = NortonInput(physical_condition=5, mental_condition=4, activity=4, mobility=4, incontinence=4)
        with pytest.raises(OutOfRangeSubscore) as exc:
            self.scorer.score_norton(inputs)
        assert exc.value.field == "physical_condition"


class TestPushScore:
    def setup_method(self):
        self.scorer = RiskScaleScorer()

    def test_total_range(self):
        assert self.scorer.score_push(PushInput(0, 0, 0)).total_score == 0
        assert self.scorer.score_push(PushInput(10, 3, 4)).total_score == 17

    def test_lower_than_prior_is_healing(self):
        result = self.scorer.score_push(PushInput(5, 1, 2), prior_score=10)
        assert result.total_score == 8
        assert result.healing_trend == HealingTrend.HEALING

    def test_equal_to_prior_is_stable(self):
        result = self.scorer.score_push(PushInput(5, 1, 2), prior_score=8)
        assert result.healing_trend == HealingTrend.STABLE

    def test_higher_than_prior_is_deteriorating(self):
        result = self.scorer.score_push(PushInput(5, 1, 2), prior_score=6)
        assert result.healing_trend == HealingTrend.DETERIORATING

    def test_no_prior_has_no_trend(self):
        result = self.scorer.score_push(PushInput(5, 1, 2))
        assert result.healing_trend is None
        assert "Baseline" in result.interpretation

    def test_prior_out_of_range(self):
        with pytest.raises(InvalidInput) as exc:
            self.scorer.score_push(PushInput(5, 1, 2), prior_score=18)
        assert exc.value.field == "prior_score"

    def test_surface_type_out_of_range(self):
        with pytest.raises(OutOfRangeSubscore):
            self.scorer.score_push(PushInput(5, 1, 5))

    @pytest.mark.parametrize(
        "area,score",
        [(0, 0), (0.04, 1), (0.2, 1), (0.3, 2), (0.6, 2), (0.7, 3), (1.0, 3), (2.0, 4),
         (3.0, 5), (4.0, 6), (8.0, 7), (12.0, 8), (24.0, 9), (24.1, 10), (60.0, 10)],
    )
    def test_area_subscore(self, area, score):
        assert push_area_subscore(area) == score

    def test_negative_area(self):
        with pytest.raises(InvalidInput):
            push_area_subscore(-1)
