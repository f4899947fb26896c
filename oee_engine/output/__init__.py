from .output_circuit import CircuitState, OutputCircuit
from .output_writer import OutputWriter, values_equal

__all__ = ["CircuitState", "OutputCircuit", "OutputWriter", "values_equal"]
