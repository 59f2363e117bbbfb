"""
Deferred Computation

A Deferred holds a function together with its bound arguments and only
evaluates it when forced. Layers return Deferred gradients so the layer
below decides when the gradient is actually computed.
"""

from typing import Any, Callable


class Deferred:
    """遅延評価される計算"""

    def __init__(self, fn: Callable[..., Any], *args: Any):
        self.fn = fn
        self.args = args

    def force(self) -> Any:
        """計算を実行"""
        return self.fn(*self.args)

    def __call__(self) -> Any:
        return self.force()

    def __repr__(self) -> str:
        return f"Deferred({getattr(self.fn, '__qualname__', self.fn)})"
