import pytest

from autoscaler.domain.errors import ServiceConfigError
from autoscaler.domain.serviceConfig import parse_service_config
from autoscaler.domain.thresholdPolicy import LabelKeys

LABELS = {
    "swarm.autoscaler": "true",
    "swarm.autoscaler.minimum": "2",
    "swarm.autoscaler.maximum": "10",
    "swarm.cpu.upper_limit": "70",
    "swarm.cpu.lower_limit": "20",
}


def test_full_label_set():
    cfg = parse_service_config("web", LABELS, 4)

    assert cfg.autoscale_enabled
    assert cfg.current_replicas == 4
    assert (cfg.min_replicas, cfg.max_replicas) == (2, 10)
    assert (cfg.upper_threshold, cfg.lower_threshold) == (70.0, 20.0)


@pytest.mark.parametrize("value", ["True", "TRUE", "yes", "1", "", None])
def test_only_literal_true_enables_autoscaling(value):
    labels = dict(LABELS, **{"swarm.autoscaler": value})
    assert not parse_service_config("web", labels, 4).autoscale_enabled


@pytest.mark.parametrize("raw, expected", [
    ("3", 3),
    (" 3 ", 3),
    ("3.7", 3),
    ("07", 7),
    ("three", None),
    ("", None),
    (None, None),
])
def test_replica_bounds_parse_like_integers(raw, expected):
    labels = {"swarm.autoscaler": "true", "swarm.autoscaler.minimum": raw}
    assert parse_service_config("web", labels, 4).min_replicas == expected


@pytest.mark.parametrize("raw", ["abc", "0", "-5", "nan", "inf", None])
def test_unusable_thresholds_fall_back_to_defaults(raw):
    labels = dict(LABELS, **{"swarm.cpu.upper_limit": raw})
    assert parse_service_config("web", labels, 4).upper_threshold is None


def test_missing_labels_are_not_an_error():
    cfg = parse_service_config("web", None, 1)

    assert not cfg.autoscale_enabled
    assert cfg.min_replicas is None and cfg.max_replicas is None


@pytest.mark.parametrize("labels, replicas", [
    (dict(LABELS, **{"swarm.autoscaler.minimum": "12"}), 4),
    (dict(LABELS, **{"swarm.autoscaler.minimum": "-1"}), 4),
    (dict(LABELS, **{"swarm.autoscaler.maximum": "-3", "swarm.autoscaler.minimum": "-9"}), 4),
    (LABELS, None),
    (LABELS, -1),
    (LABELS, "4"),
])
def test_contradictory_or_missing_values_raise(labels, replicas):
    with pytest.raises(ServiceConfigError) as exc:
        parse_service_config("web", labels, replicas)
    assert exc.value.service_id == "web"


def test_custom_label_keys():
    keys = LabelKeys(enabled="autoscaler/enabled", minimum="autoscaler/min", maximum="autoscaler/max")
    labels = {"autoscaler/enabled": "true", "autoscaler/min": "1", "autoscaler/max": "3"}

    cfg = parse_service_config("api", labels, 2, keys)

    assert cfg.autoscale_enabled
    assert (cfg.min_replicas, cfg.max_replicas) == (1, 3)
