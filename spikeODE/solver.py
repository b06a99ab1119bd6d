import math
import warnings
from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Dict, Generator, Optional, Type, Union

from .vector import MembraneState


DEFAULT_COMP_SUB_STEPS = 10

ODEEquations = Callable[[float, MembraneState], MembraneState]
r"""Right-hand side $f(t, v)$ of $\frac{dv}{dt} = f(t, v)$."""


class SolverMethod(Enum):
    """Tag of a single-step integration method."""

    EULER = "euler"
    RK4 = "rk4"


@dataclass(frozen=True)
class Estimation:
    r"""
    Solution estimate at the end of one solver sub-step.

    Attributes:
        t: Time reached by the sub-step.
        v: Estimated evolving variables at time `t` (an independent copy).
    """

    t: float
    v: MembraneState


class ODEMethod(ABC):
    r"""
    Abstract Base Class for single-step ODE integration methods.

    A method advances the state by one sub-step of size $h$:

    $$v_{n+1} = \Phi(f, t_n, v_n, h)$$

    Subclasses only define $\Phi$; sub-step scheduling and the early-exit
    policy live in `solve_gradually`.
    """

    @property
    @abstractmethod
    def order(self) -> int:
        """Global order of accuracy of the method."""
        pass

    @abstractmethod
    def sub_step(
        self, eqs: ODEEquations, t: float, v: MembraneState, h: float
    ) -> MembraneState:
        r"""
        Computes $v(t + h)$ from $v(t)$.

        Args:
            eqs: Function `f(t, v)` returning $dv/dt$.
            t: Time at the start of the sub-step.
            v: State at time `t`. Must not be mutated.
            h: Sub-step size.

        Returns:
            A new `MembraneState` estimating the state at `t + h`.
        """
        pass


class EulerMethod(ODEMethod):
    r"""
    Explicit (forward) Euler method.

    $$v_{n+1} = v_n + h \cdot f(t_n, v_n)$$

    First order, one evaluation of $f$ per sub-step.
    """

    @property
    def order(self) -> int:
        return 1

    def sub_step(
        self, eqs: ODEEquations, t: float, v: MembraneState, h: float
    ) -> MembraneState:
        return v.scaled_add(eqs(t, v), h)


class RungeKutta4Method(ODEMethod):
    r"""
    Classical fourth-order Runge-Kutta method.

    $$
    \begin{aligned}
    k_1 &= h f(t_n, v_n) \\
    k_2 &= h f(t_n + h/2, v_n + k_1/2) \\
    k_3 &= h f(t_n + h/2, v_n + k_2/2) \\
    k_4 &= h f(t_n + h, v_n + k_3) \\
    v_{n+1} &= v_n + (k_1 + 2k_2 + 2k_3 + k_4)/6
    \end{aligned}
    $$
    """

    @property
    def order(self) -> int:
        return 4

    def sub_step(
        self, eqs: ODEEquations, t: float, v: MembraneState, h: float
    ) -> MembraneState:
        k1 = h * eqs(t, v)
        k2 = h * eqs(t + h / 2.0, v.scaled_add(k1, 0.5))
        k3 = h * eqs(t + h / 2.0, v.scaled_add(k2, 0.5))
        k4 = h * eqs(t + h, v + k3)
        return v + (k1 + 2.0 * k2 + 2.0 * k3 + k4) / 6.0


SOLVERS: Dict[SolverMethod, Type[ODEMethod]] = {
    SolverMethod.EULER: EulerMethod,
    SolverMethod.RK4: RungeKutta4Method,
}


def _as_solver_method(method: Union[SolverMethod, str]) -> SolverMethod:
    if isinstance(method, SolverMethod):
        return method
    try:
        return SolverMethod(str(method).lower())
    except ValueError:
        raise ValueError(
            f"Unknown method: {method}. Choose from {[m.value for m in SolverMethod]}"
        ) from None


def get_method(method: Union[SolverMethod, str]) -> ODEMethod:
    """
    Factory function to retrieve an integration method instance.

    Args:
        method: A `SolverMethod` or its string value (`'euler'`, `'rk4'`).

    Returns:
        ODEMethod: A fresh method instance.

    Raises:
        ValueError: If the method is unknown.
    """
    return SOLVERS[_as_solver_method(method)]()


def _check_interval(t0: float, t: float, sub_steps: int) -> None:
    if isinstance(sub_steps, bool) or not isinstance(sub_steps, int):
        raise ValueError(f"sub_steps must be an int, got {type(sub_steps).__name__}")
    if sub_steps < 1:
        raise ValueError(f"sub_steps must be >= 1, got {sub_steps}")
    if not (math.isfinite(t0) and math.isfinite(t)):
        raise ValueError(f"Integration bounds must be finite, got t0={t0}, t={t}")
    if t <= t0:
        raise ValueError(
            f"Target time t ({t}) must be greater than start time t0 ({t0})"
        )


def solve_gradually(
    eqs: ODEEquations,
    t0: float,
    v0: MembraneState,
    t: float,
    sub_steps: int = DEFAULT_COMP_SUB_STEPS,
    method: Union[SolverMethod, str] = SolverMethod.EULER,
) -> Generator[Estimation, Optional[MembraneState], None]:
    r"""
    Integrates $\frac{dv}{dt} = f(t, v)$ from `t0` to `t`, yielding every sub-step.

    The interval is split into `sub_steps` equal sub-steps of size
    $h = (t - t_0) / \text{sub\_steps}$. After each one an `Estimation` is
    yielded, so the caller may stop consuming as soon as a condition is met
    (gradual / early-exit policy). The generator is single-pass.

    A caller correcting an estimate (e.g. pinning a variable to a bound) may
    `send` the corrected `MembraneState` back; the next sub-step then starts from
    it instead of the raw estimate. Sending `None` is the same as `next`.

    Args:
        eqs: Function `f(t, v)` returning $dv/dt$ as a `MembraneState`.
        t0: Start time.
        v0: Known state at `t0`. It is never mutated.
        t: Target time.
        sub_steps: Number of sub-steps within `[t0, t]`.
        method: Integration method tag.

    Yields:
        `Estimation(t_k, v_k)` for k = 1..sub_steps. Each `v_k` is an independent copy.

    Raises:
        ValueError: If `sub_steps < 1`, `t <= t0` or the method is unknown.
            Raised eagerly, before the first sub-step is requested.
    """
    _check_interval(t0, t, sub_steps)
    ode_method = get_method(method)
    return _iterate(eqs, t0, v0.clone(), t, sub_steps, ode_method)


def _iterate(
    eqs: ODEEquations,
    t0: float,
    v: MembraneState,
    t: float,
    sub_steps: int,
    ode_method: ODEMethod,
) -> Generator[Estimation, Optional[MembraneState], None]:
    h = (t - t0) / sub_steps
    curr_t = t0
    for _ in range(sub_steps):
        v = ode_method.sub_step(eqs, curr_t, v, h)
        curr_t += h
        corrected = yield Estimation(curr_t, v.clone())
        if corrected is not None:
            v = corrected.clone()


def solve(
    eqs: ODEEquations,
    t0: float,
    v0: MembraneState,
    t: float,
    sub_steps: int = DEFAULT_COMP_SUB_STEPS,
    method: Union[SolverMethod, str] = SolverMethod.EULER,
) -> MembraneState:
    r"""
    Integrates $\frac{dv}{dt} = f(t, v)$ from `t0` to `t`, always running all sub-steps.

    Exhaustive counterpart of `solve_gradually`.

    Returns:
        The estimate of the state at time `t`.

    Raises:
        ValueError: If `sub_steps < 1`, `t <= t0` or the method is unknown.
    """
    _check_interval(t0, t, sub_steps)
    ode_method = get_method(method)
    h = (t - t0) / sub_steps
    curr_t = t0
    v = v0.clone()
    for _ in range(sub_steps):
        v = ode_method.sub_step(eqs, curr_t, v, h)
        curr_t += h
    return v


@dataclass(frozen=True)
class SolverConfig:
    r"""
    Integration options of an ODE-driven membrane.

    Immutable, so one instance can be shared by several membranes. Use
    `dataclasses.replace` to derive a modified copy.

    Attributes:
        method: Integration method (`SolverMethod` or its string value).
        sub_steps: Number of solver sub-steps per computation step.
        step_duration: Duration of one computation step, in ms.
    """

    method: Union[SolverMethod, str] = SolverMethod.EULER
    sub_steps: int = 2
    step_duration: float = 1.0

    def __post_init__(self):
        object.__setattr__(self, "method", _as_solver_method(self.method))
        if isinstance(self.sub_steps, bool) or not isinstance(self.sub_steps, int):
            raise ValueError(
                f"sub_steps must be an int, got {type(self.sub_steps).__name__}"
            )
        if self.sub_steps < 1:
            raise ValueError(f"sub_steps must be >= 1, got {self.sub_steps}")
        if not (math.isfinite(self.step_duration) and self.step_duration > 0):
            raise ValueError(
                f"step_duration must be a positive finite number of ms, got {self.step_duration}"
            )

    @property
    def sub_step_duration(self) -> float:
        """Duration of a single sub-step, in ms."""
        return self.step_duration / self.sub_steps

    def check_stability(self, time_scale: float, name: str = "time_scale") -> None:
        r"""
        Warns when an Euler sub-step is not smaller than a model time constant.

        Explicit Euler on $\dot v = -v/\tau$ oscillates or diverges once $h \geq \tau$.

        Args:
            time_scale: Time constant in ms.
            name: Parameter name used in the warning message.
        """
        if self.method is SolverMethod.EULER and self.sub_step_duration >= time_scale:
            warnings.warn(
                f"Euler sub-step of {self.sub_step_duration:g} ms is not smaller than "
                f"{name}={time_scale:g} ms; integration may be unstable. "
                f"Increase sub_steps or use method='rk4'.",
                UserWarning,
            )
