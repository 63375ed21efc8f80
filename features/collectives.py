"""Collective communication primitives executed over small numpy buffers.

The Distributed Operations tab uses these to show what every rank holds
after a broadcast, scatter, gather, all-gather, reduce or all-reduce.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from enum import Enum
from typing import Callable, Dict, List, Optional, Sequence, Tuple

import numpy as np


class CollectiveError(ValueError):
    """Invalid arguments for a collective simulation."""


class CollectiveKind(str, Enum):
    BROADCAST = "broadcast"
    SCATTER = "scatter"
    GATHER = "gather"
    ALL_GATHER = "all_gather"
    REDUCE = "reduce"
    ALL_REDUCE = "all_reduce"

    @property
    def is_rooted(self) -> bool:
        return self not in (CollectiveKind.ALL_GATHER, CollectiveKind.ALL_REDUCE)


def as_kind(value: "CollectiveKind | str") -> CollectiveKind:
    """Coerce a raw string to :class:`CollectiveKind`."""

    try:
        return CollectiveKind(value)
    except ValueError:
        valid_values = ", ".join(item.value for item in CollectiveKind)
        raise CollectiveError(f"Unknown collective '{value}'. Expected one of: {valid_values}.") from None


@dataclass(frozen=True)
class CollectiveOperation:
    """Static teaching material for one primitive."""

    kind: CollectiveKind
    name: str
    description: str
    use_case: str
    operation_label: str
    formula: str
    when_to_use: Tuple[str, ...]

    def with_reduction(self, op: str) -> "CollectiveOperation":
        """Relabel reduce and all-reduce for a reduction other than sum."""

        if op == "sum" or self.kind not in (CollectiveKind.REDUCE, CollectiveKind.ALL_REDUCE):
            return self
        operands, _, target = self.formula[len("Σ("):].partition(") → ")
        return replace(
            self,
            operation_label=op.upper(),
            formula=f"{op}({operands.replace(' + ', ', ')}) → {target}",
        )


@dataclass(frozen=True)
class FlowStep:
    source: str
    target: str
    label: str
    operation: Optional[str] = None


@dataclass
class CollectiveResult:
    """Per-rank buffers after the collective completes.

    ``outputs[i]`` is ``None`` for ranks that receive nothing (non-root ranks
    of gather and reduce).
    """

    kind: CollectiveKind
    root: int
    inputs: List[Optional[np.ndarray]]
    outputs: List[Optional[np.ndarray]]

    @property
    def world_size(self) -> int:
        return len(self.inputs)

    def receivers(self) -> List[int]:
        return [rank for rank, out in enumerate(self.outputs) if out is not None]


EXAMPLE_MATRICES: Dict[str, np.ndarray] = {
    "A": np.array([[1, 2, 3], [4, 5, 6], [7, 8, 9]]),
    "B": np.array([[9, 8, 7], [6, 5, 4], [3, 2, 1]]),
    "C": np.array([[2, 3, 4], [5, 6, 7], [8, 9, 10]]),
    "D": np.array([[1, 1, 1], [2, 2, 2], [3, 3, 3]]),
}


def example_buffers(kind: CollectiveKind | str) -> List[Optional[np.ndarray]]:
    """Four-rank inputs used by the worked examples.

    Broadcast and scatter only need the root's buffer. Scatter extends A
    with a fourth row so each rank receives one row.
    """

    kind = as_kind(kind)
    if kind is CollectiveKind.BROADCAST:
        return [EXAMPLE_MATRICES["A"].copy(), None, None, None]
    if kind is CollectiveKind.SCATTER:
        return [np.arange(1, 13).reshape(4, 3), None, None, None]
    return [matrix.copy() for matrix in EXAMPLE_MATRICES.values()]


_REDUCE_OPS: Dict[str, Callable[..., np.ndarray]] = {
    "sum": np.sum,
    "max": np.max,
    "min": np.min,
    "mean": np.mean,
}


def reduce_ops() -> Tuple[str, ...]:
    return tuple(_REDUCE_OPS)


def _require_all(buffers: Sequence[Optional[np.ndarray]], kind: CollectiveKind) -> List[np.ndarray]:
    arrays = []
    for rank, buf in enumerate(buffers):
        if buf is None:
            raise CollectiveError(f"{kind.value} needs a buffer on every rank; rank {rank} has none")
        arrays.append(np.asarray(buf))
    shapes = {arr.shape for arr in arrays}
    if len(shapes) > 1:
        raise CollectiveError(f"{kind.value} needs equally shaped buffers, got {sorted(shapes)}")
    return arrays


def simulate_collective(
    kind: CollectiveKind | str,
    buffers: Sequence[Optional[np.ndarray]],
    *,
    root: int = 0,
    op: str = "sum",
) -> CollectiveResult:
    """Run ``kind`` over one buffer per rank and return what each rank holds."""

    kind = as_kind(kind)
    world_size = len(buffers)
    if world_size == 0:
        raise CollectiveError("At least one rank is required")
    if not 0 <= root < world_size:
        raise CollectiveError(f"root {root} is outside 0..{world_size - 1}")
    if op not in _REDUCE_OPS:
        raise CollectiveError(f"Unknown reduction '{op}'. Expected one of: {', '.join(_REDUCE_OPS)}")

    inputs = [None if buf is None else np.asarray(buf).copy() for buf in buffers]
    outputs: List[Optional[np.ndarray]] = [None] * world_size

    if kind in (CollectiveKind.BROADCAST, CollectiveKind.SCATTER):
        source = inputs[root]
        if source is None:
            raise CollectiveError(f"{kind.value} needs a buffer on root rank {root}")
        if kind is CollectiveKind.BROADCAST:
            outputs = [source.copy() for _ in range(world_size)]
        else:
            if source.ndim == 0 or source.shape[0] < world_size:
                raise CollectiveError(
                    f"Cannot scatter {source.shape[0] if source.ndim else 0} rows over {world_size} ranks"
                )
            outputs = [chunk.copy() for chunk in np.array_split(source, world_size, axis=0)]
    elif kind in (CollectiveKind.GATHER, CollectiveKind.ALL_GATHER):
        stacked = np.stack(_require_all(inputs, kind))
        if kind is CollectiveKind.GATHER:
            outputs[root] = stacked
        else:
            outputs = [stacked.copy() for _ in range(world_size)]
    else:
        reduced = _REDUCE_OPS[op](np.stack(_require_all(inputs, kind)), axis=0)
        if kind is CollectiveKind.REDUCE:
            outputs[root] = reduced
        else:
            outputs = [reduced.copy() for _ in range(world_size)]

    return CollectiveResult(kind=kind, root=root, inputs=inputs, outputs=outputs)


def _others(rank: int, world_size: int) -> str:
    ranks = [str(r) for r in range(world_size) if r != rank]
    return "GPU " + ",".join(ranks)


def _reduction_label(op: str, symbol: str) -> str:
    return f"Σ{symbol}" if op == "sum" else f"{op}({symbol})"


def flow_steps(
    kind: CollectiveKind | str, world_size: int = 4, root: int = 0, op: str = "sum"
) -> Tuple[FlowStep, ...]:
    """Sender/receiver steps drawn in the flow diagram.

    The final step of reduce and all-reduce is labelled with ``op``.
    """

    kind = as_kind(kind)
    if world_size < 1:
        raise CollectiveError("world_size must be at least 1")
    if not 0 <= root < world_size:
        raise CollectiveError(f"root {root} is outside 0..{world_size - 1}")
    if op not in _REDUCE_OPS:
        raise CollectiveError(f"Unknown reduction '{op}'. Expected one of: {', '.join(_REDUCE_OPS)}")
    root_name = f"GPU {root}"
    peers = [r for r in range(world_size) if r != root]

    if kind is CollectiveKind.ALL_REDUCE:
        steps = [FlowStep(f"GPU {r}", "Center", f"∇L{r}") for r in range(world_size)]
        steps.append(FlowStep("Center", "All GPUs", _reduction_label(op, "∇L"), op.upper()))
        return tuple(steps)
    if kind is CollectiveKind.ALL_GATHER:
        return tuple(
            FlowStep(f"GPU {r}", _others(r, world_size), f"A{r}×B") for r in range(world_size)
        )
    if kind is CollectiveKind.GATHER:
        return tuple(FlowStep(f"GPU {r}", root_name, f"A{r}×B") for r in peers)
    if kind is CollectiveKind.SCATTER:
        return tuple(
            FlowStep(f"{root_name} (Root)", f"GPU {r}", f"A{r}") for r in range(world_size)
        )
    if kind is CollectiveKind.BROADCAST:
        return tuple(FlowStep(f"{root_name} (Root)", f"GPU {r}", "W") for r in peers)
    steps = [FlowStep(f"GPU {r}", root_name, f"L{r}") for r in peers]
    steps.append(FlowStep(root_name, root_name, _reduction_label(op, "L"), op.upper()))
    return tuple(steps)


COLLECTIVE_OPERATIONS: Tuple[CollectiveOperation, ...] = (
    CollectiveOperation(
        kind=CollectiveKind.ALL_REDUCE,
        name="All-Reduce",
        description=(
            "Combines data from all processes using a reduction operation (sum, max, min, etc.) "
            "and distributes the result back to all processes."
        ),
        use_case=(
            "Used in gradient synchronization during distributed training, where gradients from "
            "all GPUs are summed and distributed back."
        ),
        operation_label="SUM",
        formula="Σ(∇L₀ + ∇L₁ + ∇L₂ + ∇L₃) → All GPUs",
        when_to_use=(
            "Synchronizing gradients in distributed training (PyTorch DDP, Horovod)",
            "Averaging model parameters across all workers",
            "Aggregating metrics such as global accuracy or loss from all processes",
            "Modern implementations use ring or tree algorithms to cut communication cost",
        ),
    ),
    CollectiveOperation(
        kind=CollectiveKind.ALL_GATHER,
        name="All-Gather",
        description=(
            "Each process sends its data to all other processes, resulting in all processes "
            "having a concatenated copy of all data."
        ),
        use_case=(
            "Useful when all processes need access to data from all other processes, such as "
            "collecting embeddings from all GPUs."
        ),
        operation_label="CONCATENATE",
        formula="[A₀×B, A₁×B, A₂×B, A₃×B] → All GPUs",
        when_to_use=(
            "Collecting embeddings from all GPUs for attention",
            "Reconstructing a full tensor from sharded partial results",
            "Distributed inference where every node needs the full output",
        ),
    ),
    CollectiveOperation(
        kind=CollectiveKind.GATHER,
        name="Gather",
        description=(
            "All processes send their data to a root process, which collects all the data. "
            "Only the root process receives the complete data."
        ),
        use_case=(
            "Used when only one process (typically rank 0) needs to collect results from all "
            "other processes for logging or checkpointing."
        ),
        operation_label="COLLECT",
        formula="[A₀×B, A₁×B, A₂×B, A₃×B] → GPU 0 only",
        when_to_use=(
            "Collecting results on rank 0 for logging and checkpointing",
            "Saving outputs of distributed inference to one location",
            "Cheaper than All-Gather when only the root needs the data",
        ),
    ),
    CollectiveOperation(
        kind=CollectiveKind.SCATTER,
        name="Scatter",
        description=(
            "Root process distributes different chunks of data to each process. Each process "
            "receives a unique portion of the data."
        ),
        use_case=(
            "Common in data parallelism where the root process splits a dataset and distributes "
            "chunks to different GPUs."
        ),
        operation_label="SPLIT",
        formula="A → [A₀→GPU0, A₁→GPU1, A₂→GPU2, A₃→GPU3]",
        when_to_use=(
            "Splitting a dataset or batch across GPUs",
            "Initial data distribution at the start of training",
            "Custom data loaders that shard large inputs",
        ),
    ),
    CollectiveOperation(
        kind=CollectiveKind.BROADCAST,
        name="Broadcast",
        description=(
            "Root process sends the same data to all other processes. All processes end up with "
            "identical copies of the data."
        ),
        use_case=(
            "Used to distribute model weights, hyperparameters, or initial data to all processes "
            "at the start of training."
        ),
        operation_label="COPY",
        formula="W → [W→GPU0, W→GPU1, W→GPU2, W→GPU3]",
        when_to_use=(
            "Distributing initial model weights from rank 0",
            "Sharing hyperparameters and configuration with all workers",
            "Re-synchronizing replicas after loading a checkpoint",
        ),
    ),
    CollectiveOperation(
        kind=CollectiveKind.REDUCE,
        name="Reduce",
        description=(
            "All processes send their data to a root process, which applies a reduction operation "
            "(sum, max, min, etc.). Only root receives the result."
        ),
        use_case=(
            "Similar to gather but with a reduction operation applied. Used when only the root "
            "needs the aggregated result."
        ),
        operation_label="SUM",
        formula="Σ(L₀ + L₁ + L₂ + L₃) → GPU 0 only",
        when_to_use=(
            "Aggregating loss values on the root for logging",
            "Computing global metrics for early-stopping decisions",
            "Cheaper than All-Reduce when only the root needs the result",
        ),
    ),
)

_OPERATIONS_BY_KIND: Dict[CollectiveKind, CollectiveOperation] = {
    op.kind: op for op in COLLECTIVE_OPERATIONS
}


def describe_operation(kind: CollectiveKind | str) -> CollectiveOperation:
    return _OPERATIONS_BY_KIND[as_kind(kind)]


__all__ = [
    "COLLECTIVE_OPERATIONS",
    "CollectiveError",
    "CollectiveKind",
    "CollectiveOperation",
    "CollectiveResult",
    "EXAMPLE_MATRICES",
    "as_kind",
    "FlowStep",
    "describe_operation",
    "example_buffers",
    "flow_steps",
    "reduce_ops",
    "simulate_collective",
]
