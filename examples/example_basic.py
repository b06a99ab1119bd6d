import logging

from spikeODE import SolverConfig, create_membrane

logging.basicConfig(level=logging.DEBUG)


# 1. Integration options shared by the ODE models
solver = SolverConfig(method='rk4', sub_steps=4, step_duration=1.0)

# 2. Create one membrane of each kind
membranes = {
    'simple_if': create_membrane('simple_if'),
    'leaky_if': create_membrane('leaky_if', resistance=10.0, solver=solver),
    'exp_if': create_membrane('exp_if', solver=solver),
    'adexp_if': create_membrane('adexp_if', solver=solver),
    'izhikevich_if': create_membrane('izhikevich_if', solver=solver),
}

# 3. Stimulus per model (nA for the physical models)
stimuli = {
    'simple_if': 0.5,
    'leaky_if': 5.0,
    'exp_if': 1.0,
    'adexp_if': 0.1,
    'izhikevich_if': 0.1,
}

# 4. Simulate 100 ticks of constant input
for name, membrane in membranes.items():
    membrane.print_config()
    spikes = [membrane.compute(stimuli[name]) for _ in range(100)]
    train = ''.join('|' if s else '.' for s in spikes)
    print(f"  spikes: {int(sum(spikes))}")
    print(f"  {train}")
    print(f"  final state: {membrane.internal_state:.3f} (normalized {membrane.normalized_internal_state:.3f})")
