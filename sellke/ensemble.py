import logging

import numpy as np
import pandas as pd

from .base import final_size, trajectory_on_grid


def _is_notebook():
    """Whether the code runs in a Jupyter kernel, where the widget progress bar is used"""
    try:
        shell = get_ipython().__module__
    except NameError:
        return False
    return shell in ("ipykernel.zmqshell", "google.colab._shell")


if not _is_notebook():
    from tqdm import tqdm
else:
    from tqdm.notebook import tqdm

logger = logging.getLogger(__name__)


def _iter_generators(n, seed=None):
    """Yield n generators with independent streams derived from a seed"""
    for child in np.random.SeedSequence(seed).spawn(n):
        yield np.random.default_rng(child)


def final_size_distribution(model, n, seed=None, progress=False):
    """
    Sample the final size of independent realizations of a model.

    Only the draws are generated for each realization, since the final size does not need the trajectory.

    Args:
        model (SellkeSIR): The model to sample.
        n (int): Number of realizations.
        seed (int or numpy.random.SeedSequence): Seed from which the stream of each realization is spawned.
        progress (bool): Whether to display a progress bar.

    Returns:
        pd.Series: The final size of each realization, indexed by run.

    """
    sizes = [final_size(*model.draw(rng), model.pressure)
             for rng in tqdm(_iter_generators(n, seed), total=n, disable=not progress)]
    logger.debug("Sampled %d final sizes", n)
    return pd.Series(sizes, index=pd.RangeIndex(n, name="run"), name="final_size", dtype=np.int64)


def _iter_trajectories(model, n, t, seed=None):
    for run, rng in enumerate(_iter_generators(n, seed)):
        df = trajectory_on_grid(model.solve(rng), t).reset_index()
        df.insert(0, "run", run)
        yield df


def sample_trajectories(model, n, t, seed=None, progress=False):
    """
    Simulate independent realizations of a model on a time mesh.

    Args:
        model (SellkeSIR): The model to simulate.
        n (int): Number of realizations.
        t (list of float): Mesh of non-negative time values.
        seed (int or numpy.random.SeedSequence): Seed from which the stream of each realization is spawned.
        progress (bool): Whether to display a progress bar.

    Returns:
        pd.DataFrame: A dataframe indexed by run and time with the S, I and R columns.

    """
    if n == 0:
        index = pd.MultiIndex.from_arrays([[], []], names=["run", "time"])
        return pd.DataFrame({"S": [], "I": [], "R": []}, index=index, dtype=np.int64)
    return pd.concat(
        tqdm(
            _iter_trajectories(model, n, t, seed=seed),
            total=n,
            disable=not progress,
        ),
        ignore_index=True
    ).set_index(["run", "time"])


def summarize(samples, quantiles=(0.025, 0.5, 0.975)):
    """
    Get the mean and some quantiles of a set of trajectories at each time.

    Args:
        samples (pd.DataFrame): Trajectories as returned by sample_trajectories.
        quantiles (list of float): Quantiles to compute.

    Returns:
        pd.DataFrame: A dataframe indexed by time with a column for each state and statistic (e.g., ("I", "mean") or
                      ("I", 0.5)).

    """
    grouped = samples.groupby(level="time")
    parts = {"mean": grouped.mean()}
    for q in quantiles:
        parts[q] = grouped.quantile(q)
    return pd.concat(parts, axis=1).swaplevel(axis=1)
