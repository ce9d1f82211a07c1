import heapq
import logging
import warnings
from collections import namedtuple

import numpy as np
import pandas as pd
from scipy import integrate, optimize

logger = logging.getLogger(__name__)

_columns = ["time", "S", "I", "R"]

Draws = namedtuple("Draws", ["thresholds", "periods", "initial_periods"])
Realization = namedtuple("Realization", ["final_size", "trajectory", "draws"])


def _check_population(initial):
    """Validate a (S, I, R) population, returning it as a tuple of ints"""
    try:
        values = tuple(initial)
    except TypeError:
        raise ValueError("The population must be a (S, I, R) triple")
    if len(values) != 3:
        raise ValueError("The population must be a (S, I, R) triple, got %d values" % len(values))
    for state, value in zip("SIR", values):
        if not isinstance(value, (int, float, np.number)) or isinstance(value, (bool, np.bool_)) or \
                not np.isfinite(value) or value < 0 or int(value) != value:
            raise ValueError("Invalid %s population: %s. Must be a non-negative integer." % (state, value))
    return tuple(int(value) for value in values)


def _check_parameters(parameters):
    """Validate the (beta, c, gamma) parameters, returning them as floats"""
    try:
        values = tuple(float(x) for x in parameters)
    except TypeError:
        raise ValueError("The parameters must be a (beta, c, gamma) triple")
    if len(values) != 3:
        raise ValueError("The parameters must be a (beta, c, gamma) triple, got %d values" % len(values))
    beta, c, gamma = values
    for name, value in (("beta", beta), ("c", c)):
        if not np.isfinite(value) or value < 0:
            raise ValueError("Invalid %s: %s. Must be a finite non-negative number." % (name, value))
    # A null recovery rate never empties the infectious pool
    if not np.isfinite(gamma) or gamma <= 0:
        raise ValueError("Invalid gamma: %s. Must be a finite positive number." % gamma)
    return beta, c, gamma


def draw_thresholds(n, rng):
    """
    Draw the resistance thresholds of the susceptible population.

    Each susceptible is infected once the infection pressure it has absorbed exceeds its threshold. The thresholds are
    sorted, so the i-th value belongs to the i-th susceptible to become infected.

    Args:
        n (int): Number of susceptibles.
        rng (numpy.random.Generator): Source of randomness.

    Returns:
        numpy.ndarray: Ascending array of n unit-rate exponential samples.

    """
    return np.sort(rng.exponential(1.0, n))


def draw_infectious_periods(n_infected, n_susceptible, gamma, rng):
    """
    Draw the infectious periods of the initial infectives and of the susceptibles.

    The periods of the susceptibles are assigned by infection rank and drawn for all of them, whether they end up infected
    or not.

    Args:
        n_infected (int): Number of initial infectives.
        n_susceptible (int): Number of susceptibles.
        gamma (float): Recovery rate.
        rng (numpy.random.Generator): Source of randomness.

    Returns:
        tuple of numpy.ndarray: The periods of the initial infectives and those of the susceptibles.

    """
    initial_periods = rng.exponential(1 / gamma, n_infected)
    periods = rng.exponential(1 / gamma, n_susceptible)
    return initial_periods, periods


def _check_draws(thresholds, periods, initial_periods, pressure):
    """Cast the draws to arrays, checking they are consistent"""
    thresholds = np.asarray(thresholds, dtype=float)
    periods = np.asarray(periods, dtype=float)
    initial_periods = np.asarray(initial_periods, dtype=float)
    if len(thresholds) != len(periods):
        raise ValueError("There must be a period for each threshold (%d thresholds, %d periods)" %
                         (len(thresholds), len(periods)))
    if pressure < 0:
        raise ValueError("Invalid infection pressure: %s" % pressure)
    return thresholds, periods, initial_periods


def final_size(thresholds, periods, initial_periods, pressure):
    """
    Get the number of individuals ever infected without simulating the epidemic.

    The k-th susceptible escapes the epidemic when its threshold exceeds the pressure produced by the initial infectives
    and the k - 1 susceptibles infected before it.

    Args:
        thresholds (list of float): Sorted thresholds of the susceptibles.
        periods (list of float): Infectious periods of the susceptibles, by infection rank.
        initial_periods (list of float): Infectious periods of the initial infectives.
        pressure (float): Pairwise infection pressure (beta c / N).

    Returns:
        int: The final size, including the initial infectives.

    """
    thresholds, periods, initial_periods = _check_draws(thresholds, periods, initial_periods, pressure)
    n_initial = len(initial_periods)
    if len(thresholds) == 0:
        return n_initial

    initial_time = np.sum(initial_periods)
    # Infectious time accumulated before the k-th infection
    cumulative = np.concatenate([[initial_time], initial_time + np.cumsum(periods[:-1])])
    escaped = thresholds > pressure * cumulative
    if not escaped.any():
        return n_initial + len(thresholds)
    return n_initial + int(np.argmax(escaped))


class _RecoveryQueue:
    """Binary min-heap with the recovery times of the infectious individuals"""

    def __init__(self, times=()):
        self._heap = [float(x) for x in times]
        heapq.heapify(self._heap)

    def __len__(self):
        return len(self._heap)

    def push(self, time):
        heapq.heappush(self._heap, time)

    def peek(self):
        assert self._heap, "No recovery pending while infectives remain"
        return self._heap[0]

    def pop(self):
        assert self._heap, "No recovery pending while infectives remain"
        return heapq.heappop(self._heap)


def simulate_events(thresholds, periods, initial_periods, pressure):
    """
    Reconstruct the event history of the epidemic from the given draws.

    Infections happen when the accumulated pressure reaches the next threshold, with times interpolated exactly since
    the pressure grows linearly between events. Recoveries happen at the infection time plus the infectious period.

    The first rows of the output introduce the initial infectives one at a time at t=0, the last of them being the
    initial state. Rows after the returned count are unused.

    Args:
        thresholds (list of float): Sorted thresholds of the susceptibles.
        periods (list of float): Infectious periods of the susceptibles, by infection rank.
        initial_periods (list of float): Infectious periods of the initial infectives.
        pressure (float): Pairwise infection pressure (beta c / N).

    Returns:
        tuple: Arrays with the times, susceptibles and infectives, the index of the initial state and the number of
               rows used.

    """
    thresholds, periods, initial_periods = _check_draws(thresholds, periods, initial_periods, pressure)
    n_susceptible = len(thresholds)
    n_infected = len(initial_periods)

    # Seed rows, then at most one infection per susceptible and one recovery per infective
    size = 2 * n_infected + 2 * n_susceptible + 1
    t = np.zeros(size)
    s = np.zeros(size, dtype=np.int64)
    i = np.zeros(size, dtype=np.int64)
    i[:n_infected + 1] = np.arange(n_infected + 1)
    s[:n_infected + 1] = n_susceptible + n_infected - np.arange(n_infected + 1)

    queue = _RecoveryQueue(initial_periods)
    current_time = 0.0
    hazard = 0.0
    j = 0
    k = n_infected + 1

    while i[k - 1] > 0:
        infected = i[k - 1]
        next_recovery = queue.peek()
        dt = next_recovery - current_time
        proposed_hazard = hazard + pressure * infected * dt
        if j >= n_susceptible or thresholds[j] > proposed_hazard:
            # Recovery
            queue.pop()
            current_time = next_recovery
            hazard = proposed_hazard
            i[k] = infected - 1
            s[k] = s[k - 1]
        else:
            # Infection
            assert infected > 0, "Interpolating an infection with no infectives"
            if proposed_hazard > hazard:
                current_time += dt * (thresholds[j] - hazard) / (proposed_hazard - hazard)
            hazard = thresholds[j]
            i[k] = infected + 1
            s[k] = s[k - 1] - 1
            queue.push(current_time + periods[j])
            j += 1
        t[k] = current_time
        k += 1

    return t, s, i, n_infected, k


def assemble_trajectory(t, s, i, n_total, start=0, stop=None):
    """
    Build a table with the trajectory of an epidemic.

    Args:
        t (list of float): Event times.
        s (list of int): Susceptibles after each event.
        i (list of int): Infectives after each event.
        n_total (int): Total population.
        start (int): First row to keep.
        stop (int): Row where to stop (excluded). Defaults to the end of the arrays.

    Returns:
        pd.DataFrame: A dataframe with columns time, S, I and R.

    """
    t = np.asarray(t[start:stop], dtype=float)
    s = np.asarray(s[start:stop], dtype=np.int64)
    i = np.asarray(i[start:stop], dtype=np.int64)
    return pd.DataFrame({"time": t, "S": s, "I": i, "R": n_total - s - i}, columns=_columns)


def trajectory_on_grid(trajectory, t):
    """
    Sample a trajectory on a time mesh.

    The value at each time is the state after the last event at or before it.

    Args:
        trajectory (pd.DataFrame): A trajectory as returned by SellkeSIR.solve.
        t (list of float): Mesh of non-negative time values.

    Returns:
        pd.DataFrame: A dataframe indexed by time with the S, I and R columns.

    """
    t = np.asarray(t, dtype=float)
    if np.any(t < 0):
        raise ValueError("Time values must be non-negative")
    rows = np.searchsorted(trajectory["time"].values, t, side="right") - 1
    values = trajectory[["S", "I", "R"]].iloc[rows]
    values.index = pd.Index(t, name="time")
    return values


class SellkeSIR:
    """A stochastic SIR model simulated exactly with the Sellke construction"""

    states = ["S", "I", "R"]
    parameters = ["beta", "c", "gamma"]

    def __init__(self, initial, parameters):
        """

        Args:
            initial (list of int): Initial population of the S, I and R states.
            parameters (list of float): Values for the parameters, those being:
                                        - beta: Probability of infection per contact.
                                        - c: Contact rate.
                                        - gamma: Recovery rate.

        """
        self.initial = _check_population(initial)
        self.beta, self.c, self.gamma = _check_parameters(parameters)
        if self.initial[1] == 0:
            warnings.warn("No initial infectives: the epidemic ends at t=0")

    def __repr__(self):
        return "SellkeSIR(%s, %s)" % (list(self.initial), [self.beta, self.c, self.gamma])

    @property
    def N(self):
        """Total population"""
        return sum(self.initial)

    @property
    def pressure(self):
        """Infection pressure that each infective exerts on each susceptible per unit time"""
        if self.N == 0:
            return 0.0
        return self.beta * self.c / self.N

    @property
    def basic_reproduction_number(self):
        return self.beta * self.c / self.gamma

    def draw(self, seed=None):
        """
        Draw the random values defining a realization.

        Args:
            seed (int, numpy.random.SeedSequence or numpy.random.Generator): Seed for the random number generator.

        Returns:
            Draws: The thresholds, the infectious periods of the susceptibles and those of the initial infectives.

        """
        rng = np.random.default_rng(seed)
        S, I, _ = self.initial
        thresholds = draw_thresholds(S, rng)
        initial_periods, periods = draw_infectious_periods(I, S, self.gamma, rng)
        return Draws(thresholds, periods, initial_periods)

    def final_size(self, seed=None):
        """
        Get the number of individuals ever infected in a realization, without building its trajectory.

        Args:
            seed (int, numpy.random.SeedSequence or numpy.random.Generator): Seed for the random number generator.
                                                                            The same seed used in solve produces the
                                                                            same realization.

        Returns:
            int: The final size, including the initial infectives.

        """
        return final_size(*self.draw(seed), self.pressure)

    def _trajectory(self, draws):
        t, s, i, start, stop = simulate_events(*draws, self.pressure)
        return assemble_trajectory(t, s, i, self.N, start, stop)

    def solve(self, seed=None):
        """
        Simulate a realization of the epidemic.

        Args:
            seed (int, numpy.random.SeedSequence or numpy.random.Generator): Seed for the random number generator.

        Returns:
            pd.DataFrame: A dataframe with columns time, S, I and R. The first row is the initial state and each of the
                          rest is an infection or a recovery, ending when no infectives remain.

        """
        return self.realize(seed).trajectory

    def realize(self, seed=None):
        """
        Simulate a realization, keeping its draws and final size.

        Args:
            seed (int, numpy.random.SeedSequence or numpy.random.Generator): Seed for the random number generator.

        Returns:
            Realization: The final size, the trajectory and the draws.

        """
        draws = self.draw(seed)
        size = final_size(*draws, self.pressure)
        trajectory = self._trajectory(draws)
        last = trajectory.iloc[-1]
        logger.debug("Epidemic extinct at t=%g after %d events with final size %d", last["time"],
                     len(trajectory) - 1, size)
        return Realization(size, trajectory, draws)

    def _mean_field(self, t, y):
        S, I, R = y
        infections = self.pressure * S * I
        recoveries = self.gamma * I
        return [-infections, infections - recoveries, recoveries]

    def solve_mean_field(self, t, **kwargs):
        """
        Solve the deterministic SIR model with the same parameters.

        The solution is found using scipy.integrate.solve_ivp, which uses by default an Explicit Runge-Kutta method of
        order 5(4).

        Args:
            t (list of float): Mesh of time values for which the solution is found.
            kwargs: Additional arguments passed to solve_ivp.

        Returns:
            numpy.ndarray: Values of each component (first coordinate) at the t mesh (second).

        """
        return integrate.solve_ivp(self._mean_field, (t[0], t[-1]), self.initial, t_eval=t, **kwargs).y

    def expected_final_size(self):
        """
        Get the final size of the deterministic SIR model with the same parameters.

        Returns:
            float: The number of individuals ever infected, including the initial infectives.

        """
        S, I, R = self.initial
        ratio = self.pressure / self.gamma

        def residual(s):
            return s - S * np.exp(-ratio * (self.N - s - R))

        if S == 0 or residual(S) <= 0:
            return float(I)
        return I + S - optimize.brentq(residual, 0.0, S)
