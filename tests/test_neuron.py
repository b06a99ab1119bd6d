"""
Tests for spiking membrane models.

This module tests:
    - SpikingMembrane: refractory state machine, deferred reset, initial state
    - SimpleIFNeuron: discrete-time IF (hand-computed trajectory)
    - LeakyIFNeuron / ExpIFNeuron / AdExpIFNeuron / IzhikevichIFNeuron
    - create_membrane: Factory function

Run with: pytest tests/test_neuron.py -v
"""

import dataclasses
import logging
import math
import warnings

import pytest

from spikeODE import (
    MEMBRANE_MODELS,
    AdExpIFNeuron,
    ExpIFNeuron,
    Interval,
    IzhikevichIFNeuron,
    LeakyIFNeuron,
    MembraneKind,
    SimpleIFNeuron,
    SolverConfig,
    SolverMethod,
    create_membrane,
)
from spikeODE.units import millivolts


def spike_ticks(outputs):
    return [i for i, out in enumerate(outputs) if out == 1.0]


# =============================================================================
# BASE MEMBRANE
# =============================================================================


class TestSpikingMembrane:

    def test_outputs_are_binary(self, any_membrane, run_membrane):
        outputs = run_membrane(any_membrane, [0.0, 0.5, 3.0, -1.0, 100.0] * 10)
        assert set(outputs) <= {0.0, 1.0}

    def test_ranges(self, any_membrane):
        assert any_membrane.output_range == Interval(0.0, 1.0)
        assert any_membrane.internal_state_range.min < any_membrane.internal_state_range.max

    def test_derivative_unsupported(self, any_membrane):
        assert any_membrane.supports_derivative is False
        assert any_membrane.stateless is False
        with pytest.raises(NotImplementedError):
            any_membrane.compute_derivative(0.0, 0.0)

    def test_initial_state_is_min_potential(self, any_membrane):
        assert any_membrane.internal_state == pytest.approx(any_membrane.internal_state_range.min)
        assert any_membrane.normalized_internal_state == pytest.approx(0.0, abs=1e-12)
        assert not any_membrane.last_spiked
        assert not any_membrane.in_refractory

    def test_set_initial_internal_state(self, lif):
        lif.set_initial_internal_state(0.5)
        assert lif.internal_state == pytest.approx(-60.0)
        assert lif.normalized_internal_state == pytest.approx(0.5)
        assert lif.params["initial_v_ratio"] == 0.5
        lif.compute(0.0)
        lif.reset()
        assert lif.internal_state == pytest.approx(-60.0)

    @pytest.mark.parametrize("ratio", [-0.1, 1.0, 1.5])
    def test_set_initial_internal_state_out_of_range(self, lif, ratio):
        with pytest.raises(ValueError):
            lif.set_initial_internal_state(ratio)

    def test_evolving_vars_is_a_copy(self, lif):
        dump = lif.evolving_vars
        dump[0] = 1.0
        assert lif.internal_state == pytest.approx(-70.0)

    def test_print_config(self, lif, capsys):
        lif.print_config()
        out = capsys.readouterr().out
        assert "LeakyIFNeuron" in out
        assert "time_scale: 8.0" in out
        assert "refractory_periods: 1" in out

    @pytest.mark.parametrize(
        "kwargs",
        [
            {"refractory_periods": -1},
            {"refractory_periods": 1.5},
            {"reset_v": -50.0},
            {"reset_v": -40.0},
            {"rest_v": -45.0},
            {"time_scale": 0.0},
            {"resistance": -1.0},
            {"initial_v_ratio": 1.0},
        ],
    )
    def test_invalid_parameters(self, kwargs):
        with pytest.raises(ValueError):
            LeakyIFNeuron(**kwargs)


# =============================================================================
# SIMPLE IF
# =============================================================================


class TestSimpleIFNeuron:

    def test_trajectory(self, simple_if, run_membrane):
        # V <- 0.95 V + 20 x with x = 0.5: 10, 19.5, 28.525 -> spike,
        # reset to 5 and one refractory tick (4.75), then 14.5125, 23.79 -> spike
        outputs = run_membrane(simple_if, [0.5] * 6)
        assert outputs == [0.0, 0.0, 1.0, 0.0, 0.0, 1.0]

    def test_refractory_tick_ignores_input(self, simple_if):
        simple_if.compute(10.0)
        assert simple_if.last_spiked
        simple_if.compute(10.0)
        assert simple_if.in_refractory
        assert simple_if.internal_state == pytest.approx(4.75)

    def test_magnitudes(self):
        membrane = SimpleIFNeuron(reset_v=-5.0, firing_threshold_v=-20.0)
        assert membrane.internal_state_range == Interval(0.0, 20.0)

    def test_invalid_decay(self):
        with pytest.raises(ValueError):
            SimpleIFNeuron(decay_rate=1.5)


# =============================================================================
# LEAKY IF
# =============================================================================


class TestLeakyIFNeuron:

    def test_units(self, lif):
        assert lif.kind is MembraneKind.LEAKY_IF
        assert lif.internal_state == pytest.approx(-70.0)
        assert lif.internal_state_range.min == pytest.approx(-70.0)
        assert lif.internal_state_range.max == pytest.approx(-50.0)
        assert lif.evolving_vars[0] == pytest.approx(-0.07)

    def test_sub_threshold_response(self, fine_solver):
        # 1 nA through 10 MOhm relaxes toward -60 mV with tau = 8 ms
        lif = LeakyIFNeuron(resistance=10.0, solver=fine_solver)
        lif.compute(1.0)
        expected = -70.0 + 10.0 * (1.0 - math.exp(-1.0 / 8.0))
        assert lif.internal_state == pytest.approx(expected, abs=1e-6)

    def test_no_refractory_fires_every_tick(self, run_membrane):
        lif = LeakyIFNeuron(refractory_periods=0)
        assert run_membrane(lif, [1000.0] * 10) == [1.0] * 10
        assert not lif.in_refractory

    def test_negative_stimulus_pinned_at_min(self, lif):
        assert lif.compute(-100.0) == 0.0
        assert lif.internal_state == lif.internal_state_range.min

    def test_infinite_stimulus(self, lif):
        assert lif.compute(math.inf) == 1.0
        assert lif.internal_state == lif.internal_state_range.max
        lif.reset()
        assert lif.compute(-math.inf) == 0.0
        assert lif.internal_state == lif.internal_state_range.min

    def test_solver_config(self):
        lif = LeakyIFNeuron(solver=SolverConfig(method="rk4", sub_steps=5))
        assert lif.solver.method is SolverMethod.RK4
        assert lif.params["solver_method"] == "rk4"
        assert lif.params["sub_steps"] == 5

    def test_shared_solver_config_cannot_drift(self, default_solver):
        first = LeakyIFNeuron(resistance=10.0, solver=default_solver)
        second = LeakyIFNeuron(resistance=10.0, solver=default_solver)
        with pytest.raises(dataclasses.FrozenInstanceError):
            default_solver.sub_steps = 0
        first.compute(1.0)
        second.compute(1.0)
        assert first.params["sub_steps"] == 2
        assert first.internal_state == second.internal_state
        assert first.internal_state == pytest.approx(-68.7890625)

    def test_undershoot_continues_from_minimum(self):
        seen = []

        class RecordingLeakyIF(LeakyIFNeuron):
            def membrane_diff_eq(self, t, v):
                seen.append(v[0])
                return super(RecordingLeakyIF, self).membrane_diff_eq(t, v)

        lif = RecordingLeakyIF(solver=SolverConfig(sub_steps=4))
        assert lif.compute(-100.0) == 0.0
        # every sub-step after the first starts from the pinned potential
        assert len(seen) == 4
        assert all(v == millivolts(-70.0) for v in seen)
        assert lif.internal_state == lif.internal_state_range.min

    def test_stability_warning(self):
        with pytest.warns(UserWarning, match="time_scale"):
            LeakyIFNeuron(time_scale=0.4)


# =============================================================================
# EXP IF
# =============================================================================


class TestExpIFNeuron:

    def test_spikes_under_strong_input(self, exp_if, run_membrane):
        outputs = run_membrane(exp_if, [2.0] * 50)
        assert sum(outputs) > 0
        assert exp_if.kind is MembraneKind.EXP_IF

    def test_rheobase_warning(self):
        with pytest.warns(UserWarning, match="rheobase_v"):
            ExpIFNeuron(rheobase_v=-20.0)

    def test_invalid_sharpness(self):
        with pytest.raises(ValueError):
            ExpIFNeuron(sharpness_delta_t=0.0)


# =============================================================================
# ADEXP IF
# =============================================================================


class TestAdExpIFNeuron:

    def test_two_evolving_vars(self, adexp_if):
        assert adexp_if.evolving_vars.size == 2
        assert adexp_if.adaptation == 0.0
        assert adexp_if.kind is MembraneKind.ADEXP_IF

    def test_firing_increments_adaptation(self, adexp_if):
        while adexp_if.compute(0.1) == 0.0:
            pass
        # one spike adds b = 7 pA on top of the sub-threshold adaptation
        assert adexp_if.adaptation > 7e-12

    def test_reset_clears_adaptation(self, adexp_if, run_membrane):
        run_membrane(adexp_if, [0.1] * 50)
        assert adexp_if.adaptation != 0.0
        adexp_if.reset()
        assert adexp_if.evolving_vars.to_list() == [pytest.approx(-0.07), 0.0]

    def test_adaptation_time_constant_warning(self):
        with pytest.warns(UserWarning, match="adaptation_time_constant"):
            AdExpIFNeuron(adaptation_time_constant=0.2)


# =============================================================================
# IZHIKEVICH
# =============================================================================


class TestIzhikevichIFNeuron:

    def test_unconverted_units(self, izhikevich):
        assert izhikevich.kind is MembraneKind.IZHIKEVICH_IF
        assert izhikevich.internal_state == -70.0
        assert izhikevich.internal_state_range == Interval(-70.0, 30.0)

    def test_recovery_initialized_from_potential(self, izhikevich, run_membrane):
        assert izhikevich.recovery == pytest.approx(-14.0)
        run_membrane(izhikevich, [0.1] * 30)
        izhikevich.reset()
        assert izhikevich.recovery == pytest.approx(-14.0)

    def test_tonic_spiking(self, izhikevich, run_membrane):
        outputs = run_membrane(izhikevich, [0.1] * 200)
        ticks = spike_ticks(outputs)
        assert len(ticks) >= 2
        assert all(b - a >= 2 for a, b in zip(ticks, ticks[1:]))

    def test_spike_pinned_at_cutoff(self, izhikevich):
        while izhikevich.compute(0.1) == 0.0:
            pass
        assert izhikevich.internal_state == 30.0


# =============================================================================
# FACTORY
# =============================================================================


class TestCreateMembrane:

    @pytest.mark.parametrize("kind", list(MembraneKind))
    def test_all_kinds(self, kind):
        membrane = create_membrane(kind)
        assert isinstance(membrane, MEMBRANE_MODELS[kind])
        assert membrane.kind is kind

    def test_string_kind(self):
        assert isinstance(create_membrane("leaky_if"), LeakyIFNeuron)
        assert isinstance(create_membrane("ADEXP_IF"), AdExpIFNeuron)
        assert isinstance(create_membrane("izhikevich_if"), IzhikevichIFNeuron)

    def test_params_forwarded(self):
        membrane = create_membrane("leaky_if", resistance=10.0, refractory_periods=3)
        assert membrane.params["resistance"] == 10.0
        assert membrane.params["refractory_periods"] == 3

    def test_unknown_kind(self):
        with pytest.raises(ValueError, match="Unknown membrane kind"):
            create_membrane("hodgkin_huxley")

    def test_typical_parameters_raise_no_warning(self):
        with warnings.catch_warnings():
            warnings.simplefilter("error")
            for kind in MembraneKind:
                create_membrane(kind)

    def test_logs_creation(self, caplog):
        with caplog.at_level(logging.DEBUG, logger="spikeODE.neuron"):
            create_membrane("exp_if")
        assert "exp_if" in caplog.text
