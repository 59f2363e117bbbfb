"""
Network Snapshot

A snapshot keeps copies of every parameter of a network so that the best
performing weights can be put back after training.
"""

from typing import Dict, List

from ...exceptions import ConfigurationError
from .layers import Parametric
from .parameter import Parameter


class Snapshot:
    """ネットワークのパラメータのコピー"""

    def __init__(self, layers: List[Parametric], parameters: List[Dict[str, Parameter]]):
        if len(layers) != len(parameters):
            raise ConfigurationError("Number of layers and parameter groups must be equal.")

        self.layers = layers
        self.parameters = parameters

    @classmethod
    def take(cls, network) -> 'Snapshot':
        """
        ネットワークのパラメータをコピー

        Parameters:
        -----------
        network : FeedForward
            対象のネットワーク

        Returns:
        --------
        snapshot : Snapshot
            スナップショット
        """
        layers = []
        parameters = []

        for layer in network.parametric():
            layers.append(layer)
            parameters.append({key: param.copy() for key, param in layer.parameters().items()})

        return cls(layers, parameters)

    def restore(self) -> None:
        """コピーしたパラメータをネットワークに戻す（何度でも復元できる）"""
        for layer, params in zip(self.layers, self.parameters):
            layer.restore({key: param.copy() for key, param in params.items()})
