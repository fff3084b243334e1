"""Civic education simulations.

Interactive, scored decision scenarios about civic life: a step engine over a
static table of simulations, results aggregation, resumable progress storage,
and the web and terminal front ends built on top of them.
"""

__version__ = "0.1.0"
