"""Generic extremum search over sampled quality functions."""
