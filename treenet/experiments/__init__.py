"""
Experiments Package

Runnable comparison scripts, e.g. ``python -m treenet.experiments.compare_models``.
"""
