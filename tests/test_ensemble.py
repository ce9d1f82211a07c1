import builtins

import sellke
from sellke import ensemble

import numpy as np
import pandas as pd


def test_final_size_distribution():
    """Test the sampling of final sizes"""
    model = sellke.SellkeSIR((190, 10, 0), (0.05, 10.0, 0.25))
    sizes = sellke.final_size_distribution(model, 30, seed=5)

    assert isinstance(sizes, pd.Series)
    assert sizes.name == "final_size"
    assert list(sizes.index) == list(range(30))
    assert sizes.between(10, 200).all()

    # Same seed, same sample
    pd.testing.assert_series_equal(sizes, sellke.final_size_distribution(model, 30, seed=5))

    # Each run matches the full simulation with its own stream
    streams = np.random.SeedSequence(5).spawn(30)
    for run in [0, 7, 29]:
        realization = model.realize(np.random.default_rng(streams[run]))
        assert realization.final_size == sizes[run]


def test_sample_trajectories():
    """Test the simulation of an ensemble on a time mesh"""
    initial = (190, 10, 0)
    model = sellke.SellkeSIR(initial, (0.05, 10.0, 0.25))
    t = np.linspace(0, 50, 11)
    samples = sellke.sample_trajectories(model, 8, t, seed=3)

    assert samples.index.names == ["run", "time"]
    assert list(samples.columns) == ["S", "I", "R"]
    assert len(samples) == 8 * 11
    assert np.all(samples.sum(axis=1) == 200)
    assert np.all(samples.xs(0.0, level="time").values == initial)

    pd.testing.assert_frame_equal(samples, sellke.sample_trajectories(model, 8, t, seed=3))

    summary = sellke.summarize(samples, quantiles=[0.5])
    assert list(summary.index) == list(t)
    assert set(summary.columns) == {(state, stat) for state in "SIR" for stat in ["mean", 0.5]}
    assert np.allclose(summary[("S", "mean")] + summary[("I", "mean")] + summary[("R", "mean")], 200)
    assert np.allclose(summary[("I", "mean")].values, samples["I"].groupby(level="time").mean().values)


def test_empty_ensemble():
    """Test an ensemble with no realizations"""
    model = sellke.SellkeSIR((190, 10, 0), (0.05, 10.0, 0.25))

    samples = sellke.sample_trajectories(model, 0, [0, 1])
    assert samples.empty
    assert samples.index.names == ["run", "time"]
    assert list(samples.columns) == ["S", "I", "R"]

    assert sellke.final_size_distribution(model, 0).empty


def test_is_notebook(monkeypatch):
    """Test the detection of Jupyter kernels"""
    assert not ensemble._is_notebook()

    kernel = type("ZMQInteractiveShell", (), {"__module__": "ipykernel.zmqshell"})()
    monkeypatch.setattr(builtins, "get_ipython", lambda: kernel, raising=False)
    assert ensemble._is_notebook()

    terminal = type("TerminalInteractiveShell", (), {"__module__": "IPython.terminal.interactiveshell"})()
    monkeypatch.setattr(builtins, "get_ipython", lambda: terminal, raising=False)
    assert not ensemble._is_notebook()
