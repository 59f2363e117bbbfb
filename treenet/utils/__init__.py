"""
Utilities Package

Benchmarking helpers and plotting functions for experiment results.
"""
