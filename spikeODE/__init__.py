from .vector import MembraneState
from .interval import Interval, IntervalType
from .units import MetricPrefix, SIUnit, PhysicalValue, to_base, from_base
from .solver import (
    SolverMethod,
    SolverConfig,
    Estimation,
    ODEMethod,
    EulerMethod,
    RungeKutta4Method,
    SOLVERS,
    get_method,
    solve,
    solve_gradually,
)
from .neuron import (
    MembraneKind,
    SpikingMembrane,
    ODESpikingMembrane,
    SimpleIFNeuron,
    LeakyIFNeuron,
    ExpIFNeuron,
    AdExpIFNeuron,
    IzhikevichIFNeuron,
    MEMBRANE_MODELS,
    create_membrane,
)
