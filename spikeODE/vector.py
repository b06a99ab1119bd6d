import torch
from numbers import Real
from typing import Iterable, List, Union


class MembraneState:
    r"""Fixed-size vector of the evolving variables of a membrane model.

    The values live in a 1-D ``float64`` tensor. Index 0 always holds the membrane
    potential $V$; higher indices are model specific (e.g. the adaptation current $w$
    of AdExpIF or the recovery variable $u$ of Izhikevich).

    The vector has value semantics: arithmetic never mutates its operands, and the
    solver hands out independent copies at every sub-step. Only `set` / `__setitem__`
    mutate in place.

    Attributes:
        size (int): Number of evolving variables, fixed at construction.
    """

    __slots__ = ("_data",)

    def __init__(self, data: Union[int, Iterable[float], torch.Tensor]) -> None:
        r"""Creates a zero-filled vector of the given length, or a copy of the given values.

        Args:
            data: Either the number of variables (all initialized to zero), a sequence of
                floats, or a 1-D tensor (copied).

        Raises:
            ValueError: If the resulting vector would be empty or is not one-dimensional.
            TypeError: If the length is given as a bool.
        """
        if isinstance(data, bool):
            raise TypeError("MembraneState length must be an int, got bool")
        if isinstance(data, int):
            if data < 1:
                raise ValueError(f"MembraneState length must be >= 1, got {data}")
            tensor = torch.zeros(data, dtype=torch.float64)
        elif isinstance(data, torch.Tensor):
            tensor = data.detach().to(dtype=torch.float64).clone()
        else:
            tensor = torch.tensor([float(x) for x in data], dtype=torch.float64)
        if tensor.dim() != 1 or tensor.numel() < 1:
            raise ValueError(
                f"MembraneState expects a non-empty 1-D vector, got shape {tuple(tensor.shape)}"
            )
        self._data = tensor

    @classmethod
    def _wrap(cls, tensor: torch.Tensor) -> "MembraneState":
        # Takes ownership of a freshly computed tensor without copying it again.
        state = cls.__new__(cls)
        state._data = tensor
        return state

    @property
    def size(self) -> int:
        return self._data.numel()

    @property
    def data(self) -> torch.Tensor:
        """A copy of the underlying tensor."""
        return self._data.clone()

    def __len__(self) -> int:
        return self.size

    def _check_index(self, i: int) -> None:
        if not 0 <= i < self.size:
            raise IndexError(
                f"Index {i} is out of range for MembraneState of size {self.size}"
            )

    def get(self, i: int) -> float:
        self._check_index(i)
        return self._data[i].item()

    def set(self, i: int, value: float) -> None:
        self._check_index(i)
        self._data[i] = float(value)

    __getitem__ = get
    __setitem__ = set

    def fill(self, value: float = 0.0) -> None:
        self._data.fill_(float(value))

    def clone(self) -> "MembraneState":
        return MembraneState._wrap(self._data.clone())

    def to_list(self) -> List[float]:
        return self._data.tolist()

    def _other_tensor(self, other: "MembraneState") -> torch.Tensor:
        if not isinstance(other, MembraneState):
            raise TypeError(
                f"Expected MembraneState operand, got {type(other).__name__}"
            )
        if other.size != self.size:
            raise ValueError(
                f"Size mismatch: {self.size} vs {other.size} evolving variables"
            )
        return other._data

    def scaled_add(self, other: "MembraneState", alpha: float) -> "MembraneState":
        r"""Returns $self + \alpha \cdot other$ as a new vector."""
        return MembraneState._wrap(
            torch.add(self._data, self._other_tensor(other), alpha=float(alpha))
        )

    def __add__(self, other: "MembraneState") -> "MembraneState":
        return MembraneState._wrap(self._data + self._other_tensor(other))

    def __sub__(self, other: "MembraneState") -> "MembraneState":
        return MembraneState._wrap(self._data - self._other_tensor(other))

    def __mul__(self, scalar: Real) -> "MembraneState":
        if not isinstance(scalar, Real):
            return NotImplemented
        return MembraneState._wrap(self._data * float(scalar))

    __rmul__ = __mul__

    def __truediv__(self, scalar: Real) -> "MembraneState":
        if not isinstance(scalar, Real):
            return NotImplemented
        return MembraneState._wrap(self._data / float(scalar))

    def __neg__(self) -> "MembraneState":
        return MembraneState._wrap(-self._data)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, MembraneState):
            return NotImplemented
        return self.size == other.size and bool(torch.equal(self._data, other._data))

    __hash__ = None

    def __repr__(self) -> str:
        return f"MembraneState({self.to_list()})"
