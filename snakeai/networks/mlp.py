"""
Fixed-topology Multi-Layer Perceptron used as the snake's decision model.

The network has no trainable state besides its weight matrices. Every
layer receives its input with a constant bias value of 1 appended, so a
layer with ``n`` neurons fed by ``m`` values holds an ``n x (m + 1)``
matrix whose last column is the bias weight of each neuron.

Hidden layers use the hyperbolic tangent (output in (-1, 1)) and the
output layer uses the logistic function (output in (0, 1)).

Weights are exchanged with the outside world only as flat vectors
(``get_weights_vector`` / ``set_weights``), ordered layer by layer and
row-major inside each layer. This flat vector is the chromosome evolved
by ``snakeai.evolution.GeneticAlgorithm``.
"""
from typing import List, Optional, Sequence, TextIO, Tuple, Union

import torch
import torch.nn as nn

from ..serialization import TokenReader, as_reader

DTYPE = torch.float64


class MLP(nn.Module):
    """
    Multi-Layer Perceptron with bias-augmented layer inputs.

    Attributes:
        input_size: Length of the external input vector.
        layer_sizes: Neuron count of each layer, from the first (non-input)
            layer to the output layer.
        weights_count: Total number of weights, bias weights included.

    Example:
        mlp = MLP(input_size=5, layer_sizes=[5, 5, 3])
        output = mlp.get_output([1.0, 2.0, 3.0, 0.0, -4.0])  # 3 values in (0, 1)

        chromosome = mlp.get_weights_vector()
        mlp.set_weights(chromosome)  # no-op
    """

    def __init__(
        self,
        input_size: int,
        layer_sizes: Sequence[int],
        generator: Optional[torch.Generator] = None,
    ):
        """
        Create the network with random weights in [-1, 1].

        Args:
            input_size: Length of the input vector.
            layer_sizes: Neuron count per layer. May be empty, in which case
                the network passes its (bias-augmented) input through.
            generator: Optional torch generator for weight initialization.

        Raises:
            ValueError: If any size is not positive.
        """
        super().__init__()
        self.generator = generator
        self._default_config = self._validate_config(input_size, layer_sizes)
        self.input_size, self.layer_sizes = self._default_config
        self.layers = nn.ParameterList()
        self.weights_count = 0
        self._init_weights()

    @staticmethod
    def _validate_config(
        input_size: int,
        layer_sizes: Sequence[int],
    ) -> Tuple[int, Tuple[int, ...]]:
        input_size = int(input_size)
        layer_sizes = tuple(int(size) for size in layer_sizes)
        if input_size < 1:
            raise ValueError(f"MLP input size must be positive, got {input_size}")
        for i, size in enumerate(layer_sizes):
            if size < 1:
                raise ValueError(f"MLP layer {i} size must be positive, got {size}")
        return input_size, layer_sizes

    def _init_weights(self) -> None:
        """Clear the current weights and draw new ones uniformly from [-1, 1]."""
        self.layers = nn.ParameterList()
        self.weights_count = 0

        num_cols = self.input_size + 1
        for size in self.layer_sizes:
            weights = torch.rand(size, num_cols, generator=self.generator, dtype=DTYPE) * 2 - 1
            self.layers.append(nn.Parameter(weights, requires_grad=False))
            self.weights_count += size * num_cols
            num_cols = size + 1

    def reinitialize(self) -> None:
        """Re-randomize all weights, keeping the current topology."""
        self._init_weights()

    def reset(self) -> None:
        """Restore the topology the network was created with and re-randomize it."""
        self.input_size, self.layer_sizes = self._default_config
        self._init_weights()

    @property
    def output_size(self) -> int:
        """Length of the vector returned by ``forward``."""
        if not self.layer_sizes:
            return self.input_size + 1
        return self.layer_sizes[-1]

    def _as_input(self, x: Union[torch.Tensor, Sequence[float]]) -> torch.Tensor:
        x = torch.as_tensor(x, dtype=DTYPE).reshape(-1)
        if x.numel() != self.input_size:
            raise ValueError(
                f"Input vector size ({x.numel()}) doesn't match "
                f"number of MLP inputs ({self.input_size})"
            )
        return x

    def layer_outputs(self, x: Union[torch.Tensor, Sequence[float]]) -> List[torch.Tensor]:
        """
        Return the activations of every layer, first to last.

        Hidden activations (tanh) lie in (-1, 1), the last one (logistic)
        in (0, 1). Bias values are not included.

        Raises:
            ValueError: If the input length doesn't match ``input_size``.
        """
        bias = torch.ones(1, dtype=DTYPE)
        output = torch.cat([self._as_input(x), bias])

        activations = []
        layers = list(self.layers)
        with torch.no_grad():
            for i, weights in enumerate(layers):
                if i < len(layers) - 1:
                    activation = torch.tanh(weights @ output)
                    output = torch.cat([activation, bias])
                else:
                    activation = torch.sigmoid(weights @ output)
                activations.append(activation)

        return activations

    def forward(self, x: Union[torch.Tensor, Sequence[float]]) -> torch.Tensor:
        """
        Process an input vector and return the output vector.

        Args:
            x: Input of length ``input_size``.

        Returns:
            Output tensor of length ``layer_sizes[-1]`` with values in (0, 1).
            With no layers, the input with a trailing bias value of 1.

        Raises:
            ValueError: If the input length doesn't match ``input_size``.
        """
        if not self.layer_sizes:
            return torch.cat([self._as_input(x), torch.ones(1, dtype=DTYPE)])
        return self.layer_outputs(x)[-1]

    def get_output(self, x: Union[torch.Tensor, Sequence[float]]) -> torch.Tensor:
        """Alias of ``forward`` that reads better at call sites outside torch."""
        return self.forward(x)

    def get_weights_vector(self) -> torch.Tensor:
        """
        Return all weights as one flat vector.

        Returns:
            A new float64 tensor of length ``weights_count``, layers in order,
            each layer flattened row-major.
        """
        if len(self.layers) == 0:
            return torch.zeros(0, dtype=DTYPE)
        return torch.cat([weights.detach().reshape(-1) for weights in self.layers]).clone()

    def set_weights(self, weights: Union[torch.Tensor, Sequence[float]]) -> None:
        """
        Overwrite every layer from a flat weight vector.

        Args:
            weights: Vector of length ``weights_count`` in the order
                produced by ``get_weights_vector``.

        Raises:
            ValueError: If the vector length doesn't match ``weights_count``.
        """
        weights = torch.as_tensor(weights, dtype=DTYPE).reshape(-1)
        if weights.numel() != self.weights_count:
            raise ValueError(
                f"Weights vector size ({weights.numel()}) doesn't match "
                f"number of MLP weights ({self.weights_count})"
            )

        start = 0
        with torch.no_grad():
            for layer in self.layers:
                count = layer.numel()
                layer.copy_(weights[start:start + count].reshape(layer.shape))
                start += count

    def store_config(self, stream: TextIO) -> None:
        """
        Write input size, layer count and layer sizes to a text stream.

        Weights are not stored; a loaded network is re-randomized.
        """
        stream.write(f'{self.input_size}\n')
        stream.write(f'{len(self.layer_sizes)}\n')
        stream.write(' '.join(str(size) for size in self.layer_sizes) + '\n')

    @classmethod
    def read_config(
        cls,
        stream: Union[TextIO, TokenReader],
    ) -> Tuple[int, Tuple[int, ...]]:
        """
        Parse and validate a topology written by ``store_config``.

        Returns:
            ``(input_size, layer_sizes)``.

        Raises:
            ValueError: If a field is missing, not an integer or not positive.
        """
        reader = as_reader(stream)
        input_size = reader.read_int('mlp.input_size')
        layer_count = reader.read_int('mlp.layer_count')
        if layer_count < 0:
            raise ValueError(f"MLP layer count must not be negative, got {layer_count}")
        layer_sizes: List[int] = [
            reader.read_int(f'mlp.layer_sizes[{i}]') for i in range(layer_count)
        ]
        return cls._validate_config(input_size, layer_sizes)

    def set_topology(self, input_size: int, layer_sizes: Sequence[int]) -> None:
        """
        Replace the topology and re-randomize all weights.

        Raises:
            ValueError: If any size is not positive (the network is unchanged).
        """
        self.input_size, self.layer_sizes = self._validate_config(input_size, layer_sizes)
        self._init_weights()

    def load_config(self, stream: Union[TextIO, TokenReader]) -> None:
        """
        Read the topology written by ``store_config`` and re-randomize weights.

        The network is left untouched when the config is invalid.

        Args:
            stream: Text stream or a TokenReader positioned at the config.

        Raises:
            ValueError: If a field is missing, not an integer or not positive.
        """
        self.set_topology(*self.read_config(stream))

    def get_config(self) -> dict:
        """Return the topology as an architecture dictionary."""
        return {
            'input_size': self.input_size,
            'layer_sizes': list(self.layer_sizes),
        }

    def extra_repr(self) -> str:
        return f'input_size={self.input_size}, layer_sizes={list(self.layer_sizes)}'
