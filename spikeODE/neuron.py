import logging
import math
import warnings
from abc import ABC, abstractmethod
from enum import Enum
from typing import Any, Dict, Optional, Type, Union

from .interval import Interval
from .solver import SolverConfig, solve_gradually
from .units import (
    MILLIVOLT_COEFF,
    NANOAMPERE_COEFF,
    MetricPrefix,
    megaohms,
    milliseconds,
    millivolts,
    to_base,
)
from .utils import bound, clip
from .vector import MembraneState


logger = logging.getLogger(__name__)

# Index of the membrane potential within the evolving variables
MEMBRANE_V_IDX = 0

SPIKE = 1.0
NO_SPIKE = 0.0

# Bound of the exponential spike-generating term exponent
EXPONENT_LIMIT = 20.0


class MembraneKind(Enum):
    """Kinds of spiking membrane models."""

    SIMPLE_IF = "simple_if"
    LEAKY_IF = "leaky_if"
    EXP_IF = "exp_if"
    ADEXP_IF = "adexp_if"
    IZHIKEVICH_IF = "izhikevich_if"


class SpikingMembrane(ABC):
    r"""Base class of stateful spiking activation functions.

    Owns the membrane parameters, the evolving variables, the refractory state machine
    and the firing protocol. One call of `compute` is one discrete time tick:

    1. A potential left at (or above) the firing threshold by the previous tick is reset
       to $V_{\text{reset}}$; if `refractory_periods > 0` the membrane turns refractory.
    2. While refractory, the counter is incremented. Once it exceeds `refractory_periods`
       the membrane leaves the refractory mode, otherwise the input is ignored.
    3. The input is scaled by the current coefficient.
    4. The evolving variables are advanced by `_compute_evolving_vars` (subclass hook),
       which reports whether the firing threshold was reached and leaves the potential
       pinned at exactly $V_{\text{th}}$ when it was.
    5. On a spike, `on_firing` is triggered and `1.0` is returned, otherwise `0.0`.

    Potentials are kept internally in the model's own units (SI base units for the
    physical models); `internal_state` reports them multiplied by the membrane potential
    coefficient.

    Subclasses must implement `_compute_evolving_vars`.

    Attributes:
        kind (MembraneKind): Model kind, set by each concrete class.
    """

    kind: MembraneKind

    def __init__(
        self,
        rest_v: float,
        reset_v: float,
        firing_threshold_v: float,
        refractory_periods: int,
        num_of_evolving_vars: int,
        input_current_coeff: float = 1.0,
        membrane_potential_coeff: float = 1.0,
        initial_v_ratio: float = 0.0,
    ) -> None:
        r"""Initializes the membrane.

        Args:
            rest_v: Membrane rest potential.
            reset_v: Membrane potential right after a spike.
            firing_threshold_v: Potential at which the membrane fires.
            refractory_periods: Number of ticks after a spike during which the input is ignored.
            num_of_evolving_vars: Length of the evolving variables vector.
            input_current_coeff: Multiplier converting the input into the model's current unit.
            membrane_potential_coeff: Multiplier converting the potential into the reported unit.
            initial_v_ratio: Initial potential as a ratio in `[0, 1)` between
                $\min(V_{\text{reset}}, V_{\text{rest}})$ and $V_{\text{th}}$.

        Raises:
            ValueError: If the potentials are inconsistent or the refractory count is negative.
        """
        if isinstance(refractory_periods, bool) or not isinstance(refractory_periods, int):
            raise ValueError(
                f"refractory_periods must be an int, got {type(refractory_periods).__name__}"
            )
        if refractory_periods < 0:
            raise ValueError(f"refractory_periods must be >= 0, got {refractory_periods}")
        if reset_v >= firing_threshold_v:
            raise ValueError(
                f"reset_v ({reset_v}) must be below firing_threshold_v ({firing_threshold_v})"
            )
        if rest_v >= firing_threshold_v:
            raise ValueError(
                f"rest_v ({rest_v}) must be below firing_threshold_v ({firing_threshold_v})"
            )
        self._rest_v = rest_v
        self._reset_v = reset_v
        self._min_v = min(reset_v, rest_v)
        self._firing_threshold_v = firing_threshold_v
        self._refractory_periods = refractory_periods
        self._current_coeff = input_current_coeff
        self._potential_coeff = membrane_potential_coeff
        self._internal_state_range = Interval(
            *sorted(
                (
                    membrane_potential_coeff * self._min_v,
                    membrane_potential_coeff * firing_threshold_v,
                )
            )
        )
        self._output_range = Interval(NO_SPIKE, SPIKE)
        self._initial_v = self._initial_v_from_ratio(initial_v_ratio)

        self._evolving_vars = MembraneState(num_of_evolving_vars)
        self._evolving_vars[MEMBRANE_V_IDX] = self._initial_v
        self._in_refractory = False
        self._refractory_period = 0
        self._last_spiked = False
        self._stimuli = 0.0
        self._params: Dict[str, Any] = {
            "refractory_periods": refractory_periods,
            "initial_v_ratio": initial_v_ratio,
        }

    def _initial_v_from_ratio(self, ratio: float) -> float:
        if not 0.0 <= ratio < 1.0:
            raise ValueError(f"Initial potential ratio must be in [0, 1), got {ratio}")
        return self._min_v + ratio * (self._firing_threshold_v - self._min_v)

    @property
    def output_range(self) -> Interval:
        return self._output_range

    @property
    def internal_state_range(self) -> Interval:
        """Typical range of `internal_state`."""
        return self._internal_state_range

    @property
    def internal_state(self) -> float:
        """Current membrane potential multiplied by the membrane potential coefficient."""
        return self._potential_coeff * self._evolving_vars[MEMBRANE_V_IDX]

    @property
    def normalized_internal_state(self) -> float:
        """`internal_state` rescaled from `internal_state_range` into `[0, 1]`."""
        return self._output_range.rescale(self.internal_state, self._internal_state_range)

    @property
    def evolving_vars(self) -> MembraneState:
        """Copy of all evolving variables, in the model's internal units."""
        return self._evolving_vars.clone()

    @property
    def supports_derivative(self) -> bool:
        return False

    @property
    def stateless(self) -> bool:
        return False

    @property
    def in_refractory(self) -> bool:
        return self._in_refractory

    @property
    def last_spiked(self) -> bool:
        """Whether the last `compute` call produced a spike."""
        return self._last_spiked

    @property
    def params(self) -> Dict[str, Any]:
        """Construction parameters, in the units they were given."""
        return dict(self._params)

    def reset(self) -> None:
        """Restores the initial conditions."""
        self._evolving_vars[MEMBRANE_V_IDX] = self._initial_v
        self._in_refractory = False
        self._refractory_period = 0
        self._last_spiked = False
        self._stimuli = 0.0

    def set_initial_internal_state(self, ratio: float) -> None:
        r"""Sets the initial potential and resets the membrane.

        The initial potential becomes $V_{min} + r \cdot (V_{\text{th}} - V_{min})$
        with $V_{min} = \min(V_{\text{reset}}, V_{\text{rest}})$.

        Args:
            ratio: Value in `[0, 1)`.

        Raises:
            ValueError: If `ratio` is outside `[0, 1)`.
        """
        self._initial_v = self._initial_v_from_ratio(ratio)
        self._params["initial_v_ratio"] = ratio
        self.reset()

    def compute(self, x: float) -> float:
        r"""Advances the membrane by one tick.

        Args:
            x: Input stimulus (interpreted as an electric current).

        Returns:
            `1.0` when the membrane fires during this tick, `0.0` otherwise.
        """
        if self._evolving_vars[MEMBRANE_V_IDX] >= self._firing_threshold_v:
            self._evolving_vars[MEMBRANE_V_IDX] = self._reset_v
            if self._refractory_periods > 0:
                self._refractory_period = 0
                self._in_refractory = True
        if self._in_refractory:
            self._refractory_period += 1
            if self._refractory_period > self._refractory_periods:
                self._refractory_period = 0
                self._in_refractory = False
            else:
                x = 0.0

        self._stimuli = bound(x * self._current_coeff)
        self._last_spiked = self._compute_evolving_vars()
        if self._last_spiked:
            self.on_firing()
            return SPIKE
        return NO_SPIKE

    @abstractmethod
    def _compute_evolving_vars(self) -> bool:
        """Advances the evolving variables over one tick using `self._stimuli`.

        Returns:
            Whether the firing threshold was reached. In that case the potential must be
            left at exactly the firing threshold.
        """
        pass

    def on_firing(self) -> None:
        """Triggered after the membrane fired. Does nothing by default."""
        pass

    def compute_derivative(self, c: float = math.nan, x: float = math.nan) -> float:
        """Spiking membranes are not differentiable.

        Raises:
            NotImplementedError: Always.
        """
        raise NotImplementedError(
            f"compute_derivative is unsupported for the spiking activation {type(self).__name__}"
        )

    def print_config(self):
        """Print configuration summary to stdout."""
        print(f"\n[{type(self).__name__} ({self.kind.value})]")
        for name, value in self._params.items():
            print(f"  {name}: {value}")
        print(
            f"  internal state range: [{self._internal_state_range.min:g}, "
            f"{self._internal_state_range.max:g}]"
        )


class SimpleIFNeuron(SpikingMembrane):
    r"""Simple discrete-time Integrate-and-Fire membrane (no ODE).

    The potential decays toward the rest potential $V_{\text{rest}} = 0$ and integrates
    the input:

    $$V_{n+1} = V_{\text{rest}} + (V_n - V_{\text{rest}})(1 - \delta) + R \cdot x_n$$

    where $\delta$ is the decay rate. Reset potential and firing threshold are taken
    as magnitudes.
    """

    kind = MembraneKind.SIMPLE_IF

    def __init__(
        self,
        resistance: float = 20.0,
        decay_rate: float = 0.05,
        reset_v: float = 5.0,
        firing_threshold_v: float = 20.0,
        refractory_periods: int = 1,
        initial_v_ratio: float = 0.0,
    ) -> None:
        r"""Initializes the SimpleIF membrane.

        Args:
            resistance: Membrane resistance $R$ (input gain).
            decay_rate: Fraction $\delta \in [0, 1]$ of the potential lost per tick.
            reset_v: Reset potential magnitude.
            firing_threshold_v: Firing threshold magnitude.
            refractory_periods: Ticks of ignored input after a spike.
            initial_v_ratio: Initial potential ratio in `[0, 1)`.
        """
        if not 0.0 <= decay_rate <= 1.0:
            raise ValueError(f"decay_rate must be in [0, 1], got {decay_rate}")
        if resistance <= 0:
            raise ValueError(f"resistance must be positive, got {resistance}")
        super(SimpleIFNeuron, self).__init__(
            0.0,
            abs(reset_v),
            abs(firing_threshold_v),
            refractory_periods,
            1,
            initial_v_ratio=initial_v_ratio,
        )
        self._resistance = resistance
        self._decay_rate = decay_rate
        self._params.update(
            resistance=resistance,
            decay_rate=decay_rate,
            reset_v=reset_v,
            firing_threshold_v=firing_threshold_v,
        )

    def _compute_evolving_vars(self) -> bool:
        v = self._evolving_vars[MEMBRANE_V_IDX]
        v = self._rest_v + (v - self._rest_v) * (1.0 - self._decay_rate)
        v += self._resistance * self._stimuli
        if v >= self._firing_threshold_v:
            self._evolving_vars[MEMBRANE_V_IDX] = self._firing_threshold_v
            return True
        self._evolving_vars[MEMBRANE_V_IDX] = v
        return False


class ODESpikingMembrane(SpikingMembrane):
    r"""Spiking membrane whose evolving variables are driven by ODE(s).

    Each tick integrates

    $$\frac{d\mathbf{v}}{dt} = f(t, \mathbf{v})$$

    over one computation step with the configured method and number of sub-steps,
    using the gradual (early-exit) policy: integration stops at the first sub-step
    where the potential reaches the firing threshold, pinning it at exactly
    $V_{\text{th}}$. A potential undershooting $\min(V_{\text{reset}}, V_{\text{rest}})$
    is pinned at that minimum.

    Subclasses must implement `membrane_diff_eq` and may override `on_firing`.
    """

    def __init__(
        self,
        rest_v: float,
        reset_v: float,
        firing_threshold_v: float,
        refractory_periods: int,
        solver: SolverConfig,
        step_time_scale: float,
        num_of_evolving_vars: int,
        input_current_coeff: float = 1.0,
        membrane_potential_coeff: float = 1.0,
        initial_v_ratio: float = 0.0,
    ) -> None:
        r"""Initializes the ODE-driven membrane.

        Args:
            rest_v: Membrane rest potential.
            reset_v: Membrane reset potential.
            firing_threshold_v: Firing threshold.
            refractory_periods: Ticks of ignored input after a spike.
            solver: Integration method and number of sub-steps.
            step_time_scale: Duration of one computation step in the time unit of
                `membrane_diff_eq`.
            num_of_evolving_vars: Length of the evolving variables vector.
            input_current_coeff: Multiplier of the input current.
            membrane_potential_coeff: Multiplier of the reported potential.
            initial_v_ratio: Initial potential ratio in `[0, 1)`.
        """
        if not (math.isfinite(step_time_scale) and step_time_scale > 0):
            raise ValueError(
                f"step_time_scale must be positive and finite, got {step_time_scale}"
            )
        super(ODESpikingMembrane, self).__init__(
            rest_v,
            reset_v,
            firing_threshold_v,
            refractory_periods,
            num_of_evolving_vars,
            input_current_coeff,
            membrane_potential_coeff,
            initial_v_ratio,
        )
        self._solver = solver
        self._step_time_scale = step_time_scale
        self._params.update(
            solver_method=solver.method.value,
            sub_steps=solver.sub_steps,
            step_duration=solver.step_duration,
        )

    @property
    def solver(self) -> SolverConfig:
        return self._solver

    @abstractmethod
    def membrane_diff_eq(self, t: float, v: MembraneState) -> MembraneState:
        r"""Right-hand side of the membrane ODE(s).

        Args:
            t: Time within the current step (unused by autonomous models).
            v: Evolving variables.

        Returns:
            $d\mathbf{v}/dt$ as a new `MembraneState`.
        """
        pass

    def _compute_evolving_vars(self) -> bool:
        estimations = solve_gradually(
            self.membrane_diff_eq,
            0.0,
            self._evolving_vars,
            self._step_time_scale,
            self._solver.sub_steps,
            self._solver.method,
        )
        try:
            estimation = next(estimations)
            while True:
                self._evolving_vars = estimation.v
                if self._evolving_vars[MEMBRANE_V_IDX] >= self._firing_threshold_v:
                    self._evolving_vars[MEMBRANE_V_IDX] = self._firing_threshold_v
                    return True
                elif self._evolving_vars[MEMBRANE_V_IDX] < self._min_v:
                    self._evolving_vars[MEMBRANE_V_IDX] = self._min_v
                # Next sub-step continues from the pinned state
                estimation = estimations.send(self._evolving_vars)
        except StopIteration:
            return False


def _check_positive(**values: float) -> None:
    for name, value in values.items():
        if not (math.isfinite(value) and value > 0):
            raise ValueError(f"{name} must be positive and finite, got {value}")


def _warn_rheobase(rheobase_v: float, firing_threshold_v: float) -> None:
    if rheobase_v >= firing_threshold_v:
        warnings.warn(
            f"rheobase_v ({rheobase_v:g} mV) is not below firing_threshold_v "
            f"({firing_threshold_v:g} mV); the exponential term will barely act before firing.",
            UserWarning,
        )


def _exp_term(v: float, rheobase_v: float, sharpness_delta_t: float) -> float:
    # Exponent bounded for numerical stability
    exponent = clip((v - rheobase_v) / sharpness_delta_t, -EXPONENT_LIMIT, EXPONENT_LIMIT)
    return sharpness_delta_t * math.exp(exponent)


class LeakyIFNeuron(ODESpikingMembrane):
    r"""Leaky Integrate-and-Fire membrane.

    $$\tau_m \frac{dV}{dt} = -(V - V_{\text{rest}}) + R \cdot I(t)$$

    Parameters are given in mV, ms and MΩ; the input current is read in nA.
    `internal_state` is reported in mV.
    """

    kind = MembraneKind.LEAKY_IF

    def __init__(
        self,
        time_scale: float = 8.0,
        resistance: float = 20.0,
        rest_v: float = -70.0,
        reset_v: float = -65.0,
        firing_threshold_v: float = -50.0,
        refractory_periods: int = 1,
        solver: Optional[SolverConfig] = None,
        initial_v_ratio: float = 0.0,
    ) -> None:
        r"""Initializes the Leaky IF membrane.

        Args:
            time_scale: Membrane time constant $\tau_m$ (ms).
            resistance: Membrane resistance $R$ (MΩ).
            rest_v: Rest potential (mV).
            reset_v: Reset potential (mV).
            firing_threshold_v: Firing threshold (mV).
            refractory_periods: Ticks of ignored input after a spike.
            solver: Integration options. Defaults to Euler, 2 sub-steps, 1 ms step.
            initial_v_ratio: Initial potential ratio in `[0, 1)`.
        """
        solver = solver if solver is not None else SolverConfig()
        _check_positive(time_scale=time_scale, resistance=resistance)
        super(LeakyIFNeuron, self).__init__(
            millivolts(rest_v),
            millivolts(reset_v),
            millivolts(firing_threshold_v),
            refractory_periods,
            solver,
            milliseconds(solver.step_duration),
            1,
            NANOAMPERE_COEFF,
            MILLIVOLT_COEFF,
            initial_v_ratio,
        )
        self._time_scale = milliseconds(time_scale)
        self._resistance = megaohms(resistance)
        solver.check_stability(time_scale)
        self._params.update(
            time_scale=time_scale,
            resistance=resistance,
            rest_v=rest_v,
            reset_v=reset_v,
            firing_threshold_v=firing_threshold_v,
        )

    def membrane_diff_eq(self, t: float, v: MembraneState) -> MembraneState:
        dvdt = MembraneState(1)
        dvdt[MEMBRANE_V_IDX] = (
            -(v[MEMBRANE_V_IDX] - self._rest_v) + self._resistance * self._stimuli
        ) / self._time_scale
        return dvdt


class ExpIFNeuron(ODESpikingMembrane):
    r"""Exponential Integrate-and-Fire membrane.

    $$
    \tau_m \frac{dV}{dt} = -(V - V_{\text{rest}})
        + \Delta_T \exp\left(\frac{V - V_{\text{rh}}}{\Delta_T}\right) + R \cdot I(t)
    $$

    The exponent is bounded to $[-20, 20]$ to avoid overflow before the threshold is
    crossed. Parameters are given in mV, ms and MΩ; the input current is read in nA.
    """

    kind = MembraneKind.EXP_IF

    def __init__(
        self,
        time_scale: float = 12.0,
        resistance: float = 20.0,
        rest_v: float = -65.0,
        reset_v: float = -60.0,
        rheobase_v: float = -55.0,
        firing_threshold_v: float = -30.0,
        sharpness_delta_t: float = 2.0,
        refractory_periods: int = 1,
        solver: Optional[SolverConfig] = None,
        initial_v_ratio: float = 0.0,
    ) -> None:
        r"""Initializes the ExpIF membrane.

        Args:
            time_scale: Membrane time constant $\tau_m$ (ms).
            resistance: Membrane resistance $R$ (MΩ).
            rest_v: Rest potential (mV).
            reset_v: Reset potential (mV).
            rheobase_v: Rheobase threshold $V_{\text{rh}}$ (mV).
            firing_threshold_v: Firing threshold (mV).
            sharpness_delta_t: Sharpness $\Delta_T$ (mV).
            refractory_periods: Ticks of ignored input after a spike.
            solver: Integration options. Defaults to Euler, 2 sub-steps, 1 ms step.
            initial_v_ratio: Initial potential ratio in `[0, 1)`.
        """
        solver = solver if solver is not None else SolverConfig()
        _check_positive(
            time_scale=time_scale,
            resistance=resistance,
            sharpness_delta_t=sharpness_delta_t,
        )
        super(ExpIFNeuron, self).__init__(
            millivolts(rest_v),
            millivolts(reset_v),
            millivolts(firing_threshold_v),
            refractory_periods,
            solver,
            milliseconds(solver.step_duration),
            1,
            NANOAMPERE_COEFF,
            MILLIVOLT_COEFF,
            initial_v_ratio,
        )
        self._time_scale = milliseconds(time_scale)
        self._resistance = megaohms(resistance)
        self._rheobase_v = millivolts(rheobase_v)
        self._sharpness_delta_t = millivolts(sharpness_delta_t)
        solver.check_stability(time_scale)
        _warn_rheobase(rheobase_v, firing_threshold_v)
        self._params.update(
            time_scale=time_scale,
            resistance=resistance,
            rest_v=rest_v,
            reset_v=reset_v,
            rheobase_v=rheobase_v,
            firing_threshold_v=firing_threshold_v,
            sharpness_delta_t=sharpness_delta_t,
        )

    def membrane_diff_eq(self, t: float, v: MembraneState) -> MembraneState:
        membrane_v = v[MEMBRANE_V_IDX]
        dvdt = MembraneState(1)
        dvdt[MEMBRANE_V_IDX] = (
            -(membrane_v - self._rest_v)
            + _exp_term(membrane_v, self._rheobase_v, self._sharpness_delta_t)
            + self._resistance * self._stimuli
        ) / self._time_scale
        return dvdt


class AdExpIFNeuron(ODESpikingMembrane):
    r"""Adaptive Exponential Integrate-and-Fire membrane.

    Two evolving variables, the potential $V$ and the adaptation current $w$:

    $$
    \begin{aligned}
    \tau_m \frac{dV}{dt} &= -(V - V_{\text{rest}})
        + \Delta_T \exp\left(\frac{V - V_{\text{rh}}}{\Delta_T}\right) - R w + R I(t) \\
    \tau_w \frac{dw}{dt} &= a (V - V_{\text{rest}}) - w
    \end{aligned}
    $$

    Every spike increments $w$ by $b$. Parameters are given in mV, ms, MΩ, nS and pA;
    the input current is read in nA.
    """

    kind = MembraneKind.ADEXP_IF

    ADAPTATION_IDX = 1

    def __init__(
        self,
        time_scale: float = 5.0,
        resistance: float = 500.0,
        rest_v: float = -70.0,
        reset_v: float = -51.0,
        rheobase_v: float = -50.0,
        firing_threshold_v: float = -30.0,
        sharpness_delta_t: float = 2.0,
        adaptation_voltage_coupling: float = 0.5,
        adaptation_time_constant: float = 100.0,
        adaptation_spike_triggered_increment: float = 7.0,
        refractory_periods: int = 0,
        solver: Optional[SolverConfig] = None,
        initial_v_ratio: float = 0.0,
    ) -> None:
        r"""Initializes the AdExpIF membrane.

        Args:
            time_scale: Membrane time constant $\tau_m$ (ms).
            resistance: Membrane resistance $R$ (MΩ).
            rest_v: Rest potential (mV).
            reset_v: Reset potential (mV).
            rheobase_v: Rheobase threshold $V_{\text{rh}}$ (mV).
            firing_threshold_v: Firing threshold (mV).
            sharpness_delta_t: Sharpness $\Delta_T$ (mV).
            adaptation_voltage_coupling: Coupling $a$ (nS).
            adaptation_time_constant: Adaptation time constant $\tau_w$ (ms).
            adaptation_spike_triggered_increment: Spike-triggered increment $b$ (pA).
            refractory_periods: Ticks of ignored input after a spike.
            solver: Integration options. Defaults to Euler, 2 sub-steps, 1 ms step.
            initial_v_ratio: Initial potential ratio in `[0, 1)`.
        """
        solver = solver if solver is not None else SolverConfig()
        _check_positive(
            time_scale=time_scale,
            resistance=resistance,
            sharpness_delta_t=sharpness_delta_t,
            adaptation_time_constant=adaptation_time_constant,
        )
        super(AdExpIFNeuron, self).__init__(
            millivolts(rest_v),
            millivolts(reset_v),
            millivolts(firing_threshold_v),
            refractory_periods,
            solver,
            milliseconds(solver.step_duration),
            2,
            NANOAMPERE_COEFF,
            MILLIVOLT_COEFF,
            initial_v_ratio,
        )
        self._time_scale = milliseconds(time_scale)
        self._resistance = megaohms(resistance)
        self._rheobase_v = millivolts(rheobase_v)
        self._sharpness_delta_t = millivolts(sharpness_delta_t)
        self._adaptation_voltage_coupling = to_base(
            adaptation_voltage_coupling, MetricPrefix.NANO
        )
        self._adaptation_time_constant = milliseconds(adaptation_time_constant)
        self._spike_triggered_adaptation_increment = to_base(
            adaptation_spike_triggered_increment, MetricPrefix.PICO
        )
        solver.check_stability(time_scale)
        solver.check_stability(adaptation_time_constant, "adaptation_time_constant")
        _warn_rheobase(rheobase_v, firing_threshold_v)
        self._params.update(
            time_scale=time_scale,
            resistance=resistance,
            rest_v=rest_v,
            reset_v=reset_v,
            rheobase_v=rheobase_v,
            firing_threshold_v=firing_threshold_v,
            sharpness_delta_t=sharpness_delta_t,
            adaptation_voltage_coupling=adaptation_voltage_coupling,
            adaptation_time_constant=adaptation_time_constant,
            adaptation_spike_triggered_increment=adaptation_spike_triggered_increment,
        )
        self._evolving_vars[self.ADAPTATION_IDX] = 0.0

    @property
    def adaptation(self) -> float:
        """Current adaptation $w$ (A)."""
        return self._evolving_vars[self.ADAPTATION_IDX]

    def reset(self) -> None:
        super(AdExpIFNeuron, self).reset()
        self._evolving_vars[self.ADAPTATION_IDX] = 0.0

    def membrane_diff_eq(self, t: float, v: MembraneState) -> MembraneState:
        membrane_v = v[MEMBRANE_V_IDX]
        adaptation = v[self.ADAPTATION_IDX]
        dvdt = MembraneState(2)
        dvdt[MEMBRANE_V_IDX] = (
            -(membrane_v - self._rest_v)
            + _exp_term(membrane_v, self._rheobase_v, self._sharpness_delta_t)
            - self._resistance * adaptation
            + self._resistance * self._stimuli
        ) / self._time_scale
        dvdt[self.ADAPTATION_IDX] = (
            self._adaptation_voltage_coupling * (membrane_v - self._rest_v) - adaptation
        ) / self._adaptation_time_constant
        return dvdt

    def on_firing(self) -> None:
        self._evolving_vars[self.ADAPTATION_IDX] = (
            self._evolving_vars[self.ADAPTATION_IDX]
            + self._spike_triggered_adaptation_increment
        )


class IzhikevichIFNeuron(ODESpikingMembrane):
    r"""Izhikevich Integrate-and-Fire membrane.

    Classical dimensionless formulation (potentials in mV, time in ms):

    $$
    \begin{aligned}
    \frac{dv}{dt} &= 0.04 v^2 + 5 v + 140 - u + I(t) \\
    \frac{du}{dt} &= a (b v - u)
    \end{aligned}
    $$

    On firing, $v$ is reset to $c$ = `reset_v` (on the next tick) and $u$ is
    incremented by $d$ = `recovery_reset`. The input is multiplied by 100.

    Reference: Izhikevich, E.M. (2003). Simple model of spiking neurons.
    IEEE Transactions on Neural Networks, 14(6), 1569-1572.
    """

    kind = MembraneKind.IZHIKEVICH_IF

    RECOVERY_IDX = 1
    INPUT_CURRENT_COEFF = 100.0

    def __init__(
        self,
        recovery_time_scale: float = 0.02,
        recovery_sensitivity: float = 0.2,
        recovery_reset: float = 2.0,
        rest_v: float = -70.0,
        reset_v: float = -65.0,
        firing_threshold_v: float = 30.0,
        refractory_periods: int = 1,
        solver: Optional[SolverConfig] = None,
        initial_v_ratio: float = 0.0,
    ) -> None:
        r"""Initializes the Izhikevich membrane.

        Args:
            recovery_time_scale: Time scale $a$ of the recovery variable.
            recovery_sensitivity: Sensitivity $b$ of the recovery to the potential.
            recovery_reset: After-spike increment $d$ of the recovery variable.
            rest_v: Rest potential (mV).
            reset_v: After-spike reset potential $c$ (mV).
            firing_threshold_v: Spike cutoff (mV).
            refractory_periods: Ticks of ignored input after a spike.
            solver: Integration options. Defaults to Euler, 2 sub-steps, 1 ms step.
            initial_v_ratio: Initial potential ratio in `[0, 1)`.
        """
        solver = solver if solver is not None else SolverConfig()
        _check_positive(recovery_time_scale=recovery_time_scale)
        super(IzhikevichIFNeuron, self).__init__(
            rest_v,
            reset_v,
            firing_threshold_v,
            refractory_periods,
            solver,
            solver.step_duration,
            2,
            self.INPUT_CURRENT_COEFF,
            1.0,
            initial_v_ratio,
        )
        self._recovery_time_scale = recovery_time_scale
        self._recovery_sensitivity = recovery_sensitivity
        self._recovery_reset = recovery_reset
        self._params.update(
            recovery_time_scale=recovery_time_scale,
            recovery_sensitivity=recovery_sensitivity,
            recovery_reset=recovery_reset,
            rest_v=rest_v,
            reset_v=reset_v,
            firing_threshold_v=firing_threshold_v,
        )
        self._evolving_vars[self.RECOVERY_IDX] = (
            recovery_sensitivity * self._evolving_vars[MEMBRANE_V_IDX]
        )

    @property
    def recovery(self) -> float:
        return self._evolving_vars[self.RECOVERY_IDX]

    def reset(self) -> None:
        super(IzhikevichIFNeuron, self).reset()
        self._evolving_vars[self.RECOVERY_IDX] = (
            self._recovery_sensitivity * self._evolving_vars[MEMBRANE_V_IDX]
        )

    def membrane_diff_eq(self, t: float, v: MembraneState) -> MembraneState:
        membrane_v = v[MEMBRANE_V_IDX]
        recovery = v[self.RECOVERY_IDX]
        dvdt = MembraneState(2)
        dvdt[MEMBRANE_V_IDX] = (
            0.04 * membrane_v ** 2 + 5.0 * membrane_v + 140.0 - recovery + self._stimuli
        )
        dvdt[self.RECOVERY_IDX] = self._recovery_time_scale * (
            self._recovery_sensitivity * membrane_v - recovery
        )
        return dvdt

    def on_firing(self) -> None:
        self._evolving_vars[self.RECOVERY_IDX] = (
            self._evolving_vars[self.RECOVERY_IDX] + self._recovery_reset
        )


MEMBRANE_MODELS: Dict[MembraneKind, Type[SpikingMembrane]] = {
    MembraneKind.SIMPLE_IF: SimpleIFNeuron,
    MembraneKind.LEAKY_IF: LeakyIFNeuron,
    MembraneKind.EXP_IF: ExpIFNeuron,
    MembraneKind.ADEXP_IF: AdExpIFNeuron,
    MembraneKind.IZHIKEVICH_IF: IzhikevichIFNeuron,
}


def create_membrane(kind: Union[MembraneKind, str], **params: Any) -> SpikingMembrane:
    """
    Factory function creating a spiking membrane of the given kind.

    Args:
        kind: A `MembraneKind` or its string value (e.g. `'leaky_if'`).
        **params: Keyword arguments of the model constructor.

    Returns:
        SpikingMembrane: The new membrane.

    Raises:
        ValueError: If the kind is unknown.
    """
    if not isinstance(kind, MembraneKind):
        try:
            kind = MembraneKind(str(kind).lower())
        except ValueError:
            raise ValueError(
                f"Unknown membrane kind: {kind}. Choose from {[k.value for k in MembraneKind]}"
            ) from None
    membrane = MEMBRANE_MODELS[kind](**params)
    logger.debug("Created %s membrane with %s", kind.value, membrane.params)
    return membrane
