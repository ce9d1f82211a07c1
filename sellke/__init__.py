"""sellke - Exact stochastic SIR simulation with the Sellke construction"""

__version__ = '0.1.0'
__author__ = 'Dih5 <dihedralfive@gmail.com>'

from .base import (SellkeSIR, Draws, Realization, draw_thresholds, draw_infectious_periods, final_size,
                   simulate_events, assemble_trajectory, trajectory_on_grid)
from .ensemble import final_size_distribution, sample_trajectories, summarize
