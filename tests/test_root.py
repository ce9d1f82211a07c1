import sellke
from sellke import models


def test_models():
    """Test the predefined scenarios"""
    assert models.tutorial.initial == (990, 10, 0)
    assert (models.tutorial.beta, models.tutorial.c, models.tutorial.gamma) == (0.05, 10.0, 0.25)
    assert models.tutorial.basic_reproduction_number > 1
    assert models.subcritical.basic_reproduction_number < 1
    assert models.immune.N == 1000


def test_immune():
    """Test a population with recovered individuals at the start"""
    model = models.immune
    realization = model.realize(11)
    df = realization.trajectory
    assert df["R"].iloc[0] == 200
    assert df["R"].min() == 200
    assert df["I"].iloc[-1] + df["R"].iloc[-1] - 200 == realization.final_size
    assert realization.final_size <= 800


def test_subcritical():
    """Test the epidemic usually stays small below the threshold"""
    sizes = sellke.final_size_distribution(models.subcritical, 100, seed=0)
    assert sizes.median() < 100
