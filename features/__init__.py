"""Framework-free calculators shared by the dashboard tabs."""

from .collectives import (
    COLLECTIVE_OPERATIONS,
    EXAMPLE_MATRICES,
    CollectiveError,
    CollectiveKind,
    CollectiveOperation,
    CollectiveResult,
    FlowStep,
    as_kind,
    describe_operation,
    example_buffers,
    flow_steps,
    reduce_ops,
    simulate_collective,
)
from .errors import FlopsMasterError, InvalidDeviceError, ShapeError
from .execution_time import (
    ExecutionTimeEstimate,
    adjusted_throughput,
    estimate_time,
    format_count,
    format_duration,
    precision_comparison_dataframe,
)
from .flops import FlopsResult, MatrixShape, compute_flops
from .parallelism import (
    COMPARISON_TRAITS,
    PARALLELISM_STRATEGIES,
    PIPELINE_STATES,
    ParallelismStrategy,
    comparison_table,
    gpu_layout,
    lookup_strategy,
    pipeline_schedule,
)

__all__ = [
    "COLLECTIVE_OPERATIONS",
    "COMPARISON_TRAITS",
    "EXAMPLE_MATRICES",
    "PARALLELISM_STRATEGIES",
    "PIPELINE_STATES",
    "CollectiveError",
    "CollectiveKind",
    "CollectiveOperation",
    "CollectiveResult",
    "ExecutionTimeEstimate",
    "FlopsMasterError",
    "FlopsResult",
    "FlowStep",
    "InvalidDeviceError",
    "MatrixShape",
    "ParallelismStrategy",
    "ShapeError",
    "adjusted_throughput",
    "as_kind",
    "comparison_table",
    "compute_flops",
    "describe_operation",
    "estimate_time",
    "example_buffers",
    "flow_steps",
    "format_count",
    "format_duration",
    "gpu_layout",
    "lookup_strategy",
    "pipeline_schedule",
    "precision_comparison_dataframe",
    "reduce_ops",
    "simulate_collective",
]
