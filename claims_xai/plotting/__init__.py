"""Plotting subpackage exports."""

from ._plots import plot_breakdown, plot_importance, plot_interaction, plot_profiles

__all__ = ["plot_breakdown", "plot_importance", "plot_interaction", "plot_profiles"]
