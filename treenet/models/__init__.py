"""
Models Package

Submodules:

- base: estimator base class, capability flags and input checks
- tree_components: decision trees and the random forest
- neural_net: layers, optimizers and the feed forward network
- mlp: MultilayerPerceptron and Adaline
"""
