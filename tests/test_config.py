import json

import pytest

from styllo.config import Config


def test_defaults_are_valid():
    config = Config()
    assert config.validate()
    assert config.MIN_SKIN_PIXELS == 50
    assert config.KMEANS_CLUSTERS == 3
    assert config.VARIANCE_NORMALIZER == 5000


@pytest.mark.parametrize("overrides", [
    {"BRIGHTNESS_MIN": 240},
    {"KMEANS_CLUSTERS": 0},
    {"VARIANCE_WEIGHT": 0.6},
    {"TARGET_SAMPLE_SIZE": 0},
    {"SAMPLE_RADIUS_MIN": 0},
])
def test_invalid_values_fail_validation(overrides):
    assert not Config(**overrides).validate()


def test_save_and_load_round_trip(tmp_path):
    path = tmp_path / "config.json"
    original = Config(KMEANS_MAX_ITER=30, RANDOM_SEED=7)
    assert original.save(str(path))

    loaded = Config.load(str(path))
    assert loaded == original


def test_missing_file_gives_defaults(tmp_path):
    assert Config.load(str(tmp_path / "nope.json")) == Config()


def test_invalid_file_gives_defaults(tmp_path):
    bad_json = tmp_path / "bad.json"
    bad_json.write_text("{not json")
    assert Config.load(str(bad_json)) == Config()

    unknown_key = tmp_path / "unknown.json"
    unknown_key.write_text(json.dumps({"NOT_A_SETTING": 1}))
    assert Config.load(str(unknown_key)) == Config()

    invalid = tmp_path / "invalid.json"
    invalid.write_text(json.dumps({"MIN_SKIN_PIXELS": -1}))
    assert Config.load(str(invalid)) == Config()
