"""Tests for scoring configuration validation, presets and loading."""

import json

import pytest

from agent_ranker.errors import ConfigurationError
from agent_ranker.scoring.config import (
    ORIGINAL_CONFIG,
    PRESETS,
    REFINED_CONFIG,
    WEIGHT_TOLERANCE,
    Dimension,
    ScoringConfig,
    get_preset,
    load_config,
)


def _weights(config):
    return {d.name: d.weight for d in config.dimensions}


class TestWeightValidation:

    @pytest.mark.parametrize("preset", sorted(PRESETS))
    def test_presets_sum_to_one(self, preset):
        config = get_preset(preset)
        assert abs(sum(_weights(config).values()) - 1.0) <= WEIGHT_TOLERANCE

    def test_weights_not_summing_to_one_rejected(self):
        with pytest.raises(ConfigurationError, match="sum to 1.0"):
            ScoringConfig.from_dict({"weights": {"rating": 0.5,
                                                 "trip_volume": 0.4}})

    def test_tiny_drift_beyond_tolerance_rejected(self):
        with pytest.raises(ConfigurationError):
            ScoringConfig.from_dict({"weights": {"rating": 0.5,
                                                 "trip_volume": 0.5 + 1e-6}})

    def test_negative_weight_rejected(self):
        with pytest.raises(ConfigurationError, match="negative"):
            ScoringConfig.from_dict({"weights": {"rating": 1.5,
                                                 "trip_volume": -0.5}})

    def test_empty_dimension_set_rejected(self):
        with pytest.raises(ConfigurationError):
            ScoringConfig(name="empty", dimensions=())

    def test_unknown_signal_rejected(self):
        with pytest.raises(ConfigurationError, match="unknown signal"):
            ScoringConfig.from_dict({"weights": {"rating": 0.8,
                                                 "department": 0.2}})

    def test_same_signal_weighted_twice_rejected(self):
        with pytest.raises(ConfigurationError, match="weighted by both"):
            ScoringConfig(
                name="double",
                dimensions=(
                    Dimension("rating", 0.6),
                    Dimension("category", 0.4, signal="rating"),
                ),
            )

    def test_duplicate_dimension_name_rejected(self):
        with pytest.raises(ConfigurationError, match="listed twice"):
            ScoringConfig(
                name="dup",
                dimensions=(
                    Dimension("quality", 0.5, signal="rating"),
                    Dimension("quality", 0.5, signal="trip_volume"),
                ),
            )

    def test_baseline_outside_rating_scale_rejected(self):
        with pytest.raises(ConfigurationError):
            ScoringConfig.from_dict({"weights": {"rating": 1.0},
                                     "baseline_rating": 0.0})

    def test_unknown_trip_volume_mode_rejected(self):
        with pytest.raises(ConfigurationError):
            ScoringConfig.from_dict({"weights": {"rating": 1.0},
                                     "trip_volume_mode": "adaptive"})

    def test_degenerate_domain_rejected(self):
        with pytest.raises(ConfigurationError):
            ScoringConfig.from_dict({"weights": {"rating": 1.0},
                                     "service_years_domain": [3, 3]})


class TestPresets:

    def test_refined_has_no_tenure_weight(self):
        assert "service_years" not in _weights(REFINED_CONFIG)

    def test_original_keeps_tenure_weight(self):
        assert _weights(ORIGINAL_CONFIG)["service_years"] == pytest.approx(0.15)

    def test_presets_use_documented_defaults(self):
        assert REFINED_CONFIG.baseline_rating == 3.0
        assert REFINED_CONFIG.service_years_domain.as_list() == [2.0, 18.0]
        assert REFINED_CONFIG.trip_volume_mode == "observed"

    def test_no_preset_weights_department(self):
        for config in PRESETS.values():
            assert all("department" not in d.signal for d in config.dimensions)

    def test_unknown_preset(self):
        with pytest.raises(ConfigurationError):
            get_preset("experimental")


class TestFromDict:

    def test_dimensions_form_with_explicit_signals(self):
        config = ScoringConfig.from_dict({
            "name": "renamed",
            "dimensions": [
                {"name": "experience", "weight": 0.4, "signal": "service_years"},
                {"name": "quality", "weight": 0.6, "signal": "rating"},
            ],
        })
        assert config.name == "renamed"
        assert _weights(config) == {"experience": 0.4, "quality": 0.6}

    def test_round_trip_through_to_dict(self):
        again = ScoringConfig.from_dict(ORIGINAL_CONFIG.to_dict())
        assert again == ORIGINAL_CONFIG

    def test_missing_weights(self):
        with pytest.raises(ConfigurationError):
            ScoringConfig.from_dict({"baseline_rating": 3.0})


class TestLoadConfig:

    def test_load_from_file(self, tmp_path):
        path = tmp_path / "post_review.json"
        path.write_text(json.dumps({
            "weights": {"rating": 0.5, "destination_rating": 0.5},
            "baseline_rating": 2.5,
        }))
        config = load_config(path)
        assert config.name == "post_review"
        assert config.baseline_rating == 2.5

    def test_invalid_json(self, tmp_path):
        path = tmp_path / "broken.json"
        path.write_text("{not json")
        with pytest.raises(ConfigurationError):
            load_config(path)

    def test_missing_file(self, tmp_path):
        with pytest.raises(ConfigurationError):
            load_config(tmp_path / "nope.json")

    def test_non_object_json(self, tmp_path):
        path = tmp_path / "list.json"
        path.write_text("[1, 2]")
        with pytest.raises(ConfigurationError):
            load_config(path)
