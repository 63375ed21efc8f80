"""Parallelism strategies used in distributed training."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, List, Tuple

import pandas as pd


@dataclass(frozen=True)
class ParallelismStrategy:
    """Teaching material plus comparison traits for one strategy."""

    id: str
    name: str
    short_name: str
    description: str
    pros: Tuple[str, ...]
    cons: Tuple[str, ...]
    use_cases: Tuple[str, ...]
    frameworks: Tuple[str, ...]
    communication_frequency: str
    memory_per_gpu: str
    gpu_utilization: str
    scalability: str
    best_for: str


PARALLELISM_STRATEGIES: Tuple[ParallelismStrategy, ...] = (
    ParallelismStrategy(
        id="data",
        name="Data Parallelism",
        short_name="DP",
        description=(
            "Each GPU holds a complete copy of the model and processes different batches of data. "
            "Gradients are synchronized across GPUs after each backward pass."
        ),
        pros=(
            "Simple to implement and widely supported",
            "No model modifications required",
            "Scales well with batch size",
            "Efficient for large datasets",
            "Works with any model architecture",
        ),
        cons=(
            "Requires gradient synchronization (communication overhead)",
            "Memory usage scales with model size (each GPU holds full model)",
            "Limited by single GPU memory for very large models",
            "Communication bottleneck with many GPUs",
        ),
        use_cases=(
            "Training large models that fit in single GPU memory",
            "Distributed training with PyTorch DDP or TensorFlow MirroredStrategy",
            "When you have more data than can fit in one GPU",
            "Fine-tuning pre-trained models across multiple GPUs",
        ),
        frameworks=("PyTorch DDP", "TensorFlow MirroredStrategy", "Horovod", "DeepSpeed ZeRO-1"),
        communication_frequency="Every iteration",
        memory_per_gpu="Full model",
        gpu_utilization="High",
        scalability="Limited by model size",
        best_for="Small-medium models",
    ),
    ParallelismStrategy(
        id="model",
        name="Model Parallelism",
        short_name="MP",
        description=(
            "The model is split across multiple GPUs, with each GPU holding a portion of the model "
            "layers. Data flows sequentially through the GPUs."
        ),
        pros=(
            "Enables training models larger than single GPU memory",
            "No gradient synchronization needed",
            "Each GPU processes full batch sequentially",
        ),
        cons=(
            "Sequential processing creates pipeline bubbles",
            "Complex to implement and debug",
            "Lower GPU utilization (GPUs wait for each other)",
            "Communication overhead between layers",
        ),
        use_cases=(
            "Training models too large for single GPU",
            "When model layers can be cleanly partitioned",
            "Legacy approach before pipeline parallelism",
        ),
        frameworks=("PyTorch RPC", "TensorFlow Model Parallelism", "Megatron-LM (legacy)"),
        communication_frequency="Every layer",
        memory_per_gpu="Model/N",
        gpu_utilization="Low",
        scalability="Limited by layers",
        best_for="Large models (legacy)",
    ),
    ParallelismStrategy(
        id="pipeline",
        name="Pipeline Parallelism",
        short_name="PP",
        description=(
            "Model layers are split across GPUs, and different micro-batches are processed in "
            "parallel. Uses gradient accumulation to maintain correctness."
        ),
        pros=(
            "Enables training very large models",
            "Better GPU utilization than model parallelism",
            "Overlaps computation and communication",
            "Scales to hundreds of GPUs",
        ),
        cons=(
            "Pipeline bubbles reduce efficiency",
            "Requires careful micro-batch scheduling",
            "Complex gradient accumulation logic",
            "Memory overhead for activations",
        ),
        use_cases=(
            "Training transformer models with billions of parameters",
            "GPT-3, GPT-4, PaLM scale training",
            "When model is too large for data parallelism",
            "Combined with data parallelism for maximum scale",
        ),
        frameworks=("DeepSpeed Pipeline", "FairScale Pipeline", "GPipe", "Megatron-LM"),
        communication_frequency="Every micro-batch",
        memory_per_gpu="Model/N",
        gpu_utilization="Medium-High",
        scalability="Very high",
        best_for="Very large models",
    ),
    ParallelismStrategy(
        id="tensor",
        name="Tensor Parallelism",
        short_name="TP",
        description=(
            "Individual matrix operations (like attention or MLP layers) are split across GPUs. "
            "Each GPU computes part of the matrix multiplication."
        ),
        pros=(
            "Very efficient for transformer attention layers",
            "Low communication overhead (only within layers)",
            "Enables training extremely large models",
            "Works well with data parallelism",
        ),
        cons=(
            "Requires model architecture modifications",
            "Communication within each forward/backward pass",
            "Complex to implement correctly",
            "Limited by attention head size",
        ),
        use_cases=(
            "Large transformer models (GPT, BERT, T5)",
            "Attention mechanism parallelization",
            "MLP layer parallelization",
            "Combined with pipeline parallelism for maximum scale",
        ),
        frameworks=("Megatron-LM", "DeepSpeed", "Colossal-AI", "FairScale"),
        communication_frequency="Every layer",
        memory_per_gpu="Model/N",
        gpu_utilization="High",
        scalability="High",
        best_for="Transformer layers",
    ),
    ParallelismStrategy(
        id="sequence",
        name="Sequence Parallelism",
        short_name="SP",
        description=(
            "The sequence dimension (sequence length) is split across GPUs. Each GPU processes a "
            "chunk of the sequence tokens."
        ),
        pros=(
            "Reduces activation memory per GPU",
            "Enables longer sequences",
            "Works well with tensor parallelism",
            "Reduces memory for attention matrices",
        ),
        cons=(
            "Requires communication for attention computation",
            "More complex attention implementation",
            "Limited by sequence chunk size",
        ),
        use_cases=(
            "Training with very long sequences",
            "Reducing activation memory in transformers",
            "Combined with tensor parallelism",
            "Long context language models",
        ),
        frameworks=("DeepSpeed", "Megatron-LM", "Colossal-AI"),
        communication_frequency="Every layer",
        memory_per_gpu="Model/N",
        gpu_utilization="High",
        scalability="High",
        best_for="Long sequences",
    ),
    ParallelismStrategy(
        id="expert",
        name="Expert Parallelism",
        short_name="EP",
        description=(
            "Used in Mixture-of-Experts (MoE) models. Different experts are placed on different "
            "GPUs, and tokens are routed to appropriate experts."
        ),
        pros=(
            "Enables training models with trillions of parameters",
            "Only active experts consume compute",
            "Scales model size without proportional compute increase",
            "Efficient for sparse activation patterns",
        ),
        cons=(
            "Requires MoE architecture",
            "Load balancing challenges",
            "Communication overhead for token routing",
            "Complex routing logic",
        ),
        use_cases=(
            "Mixture-of-Experts models (Switch Transformer, GShard)",
            "Training models with 1T+ parameters",
            "Sparse activation patterns",
            "Google PaLM, Switch Transformer scale",
        ),
        frameworks=("GShard", "Switch Transformer", "DeepSpeed MoE", "FairScale MoE"),
        communication_frequency="Per token",
        memory_per_gpu="Experts/N",
        gpu_utilization="Variable",
        scalability="Very high",
        best_for="MoE models",
    ),
)

_STRATEGIES_BY_ID: Dict[str, ParallelismStrategy] = {s.id: s for s in PARALLELISM_STRATEGIES}

COMPARISON_TRAITS: Tuple[Tuple[str, str], ...] = (
    ("Communication Frequency", "communication_frequency"),
    ("Memory per GPU", "memory_per_gpu"),
    ("GPU Utilization", "gpu_utilization"),
    ("Scalability", "scalability"),
    ("Best For", "best_for"),
)

PIPELINE_STATES = ("Processing", "Waiting", "Done")


def lookup_strategy(strategy_id: str) -> ParallelismStrategy:
    try:
        return _STRATEGIES_BY_ID[strategy_id]
    except KeyError:
        raise KeyError(f"Unknown parallelism strategy '{strategy_id}'") from None


def comparison_table() -> pd.DataFrame:
    """Traits as rows, strategy short names as columns."""

    data = {
        s.short_name: [getattr(s, attr) for _, attr in COMPARISON_TRAITS]
        for s in PARALLELISM_STRATEGIES
    }
    return pd.DataFrame(data, index=[label for label, _ in COMPARISON_TRAITS])


def gpu_layout(strategy_id: str, num_gpus: int = 4) -> List[str]:
    """What each GPU holds or processes under ``strategy_id``."""

    if num_gpus < 1:
        raise ValueError("num_gpus must be at least 1")
    strategy = lookup_strategy(strategy_id)
    share = 100.0 / num_gpus
    layout: List[str] = []
    for idx in range(num_gpus):
        if strategy.id == "data":
            layout.append(f"Full model · Batch {idx + 1}")
        elif strategy.id in ("model", "pipeline"):
            layout.append(f"Layers {idx * share:g}%-{(idx + 1) * share:g}%")
        elif strategy.id == "tensor":
            layout.append(f"Weight shard {idx + 1}/{num_gpus}")
        elif strategy.id == "sequence":
            layout.append(f"Tokens {idx * 8 + 1}-{(idx + 1) * 8}")
        else:
            layout.append(f"Experts {idx * 2 + 1}, {idx * 2 + 2}")
    return layout


def pipeline_schedule(num_gpus: int = 4, num_micro_batches: int = 3) -> pd.DataFrame:
    """Stage of every (micro-batch, GPU) pair in the pipeline snapshot."""

    if num_gpus < 1 or num_micro_batches < 1:
        raise ValueError("num_gpus and num_micro_batches must be at least 1")
    rows = {
        f"Micro-batch {batch + 1}": [
            PIPELINE_STATES[(batch + gpu) % len(PIPELINE_STATES)] for gpu in range(num_gpus)
        ]
        for batch in range(num_micro_batches)
    }
    return pd.DataFrame.from_dict(
        rows, orient="index", columns=[f"GPU {gpu}" for gpu in range(num_gpus)]
    )


__all__ = [
    "COMPARISON_TRAITS",
    "PARALLELISM_STRATEGIES",
    "PIPELINE_STATES",
    "ParallelismStrategy",
    "comparison_table",
    "gpu_layout",
    "lookup_strategy",
    "pipeline_schedule",
]
