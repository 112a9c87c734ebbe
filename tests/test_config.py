import pytest

from lbp_texture.config import ClassificationConfig
from lbp_texture.errors import ConfigurationError


def test_defaults_match_reference_run():
    config = ClassificationConfig()
    assert (config.points, config.radius, config.num_classes, config.stride) == (8, 1.0, 10, 3)
    assert config.n_bins == 256
    assert config.margin == 1


@pytest.mark.parametrize(
    "kwargs",
    [
        dict(points=0),
        dict(points=-3),
        dict(points=2.5),
        dict(radius=0),
        dict(radius=-1.0),
        dict(radius=float("nan")),
        dict(num_classes=0),
        dict(stride=0),
        dict(degenerate="ignore"),
    ],
)
def test_invalid_parameters_are_rejected(kwargs):
    with pytest.raises(ConfigurationError):
        ClassificationConfig(**kwargs)


def test_configuration_error_is_a_value_error():
    with pytest.raises(ValueError):
        ClassificationConfig(points=0)


def test_config_is_immutable():
    config = ClassificationConfig()
    with pytest.raises(AttributeError):
        config.points = 4


def test_margin_is_ceil_of_radius():
    assert ClassificationConfig(radius=1.5).margin == 2
    assert ClassificationConfig(radius=2).margin == 2
    assert ClassificationConfig(radius=0.3).margin == 1
