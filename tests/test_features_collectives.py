from __future__ import annotations

import pathlib
import sys

import pytest

sys.path.insert(0, str(pathlib.Path(__file__).resolve().parents[1]))

np = pytest.importorskip("numpy")
pytest.importorskip("pandas")

from features import (
    COLLECTIVE_OPERATIONS,
    EXAMPLE_MATRICES,
    CollectiveError,
    CollectiveKind,
    describe_operation,
    example_buffers,
    flow_steps,
    simulate_collective,
)

_SUM = np.array([[13, 14, 15], [17, 18, 19], [21, 22, 23]])


def test_all_reduce_sums_the_worked_example_on_every_rank():
    result = simulate_collective("all_reduce", example_buffers("all_reduce"))
    assert result.receivers() == [0, 1, 2, 3]
    for out in result.outputs:
        np.testing.assert_array_equal(out, _SUM)


def test_reduce_only_root_receives():
    result = simulate_collective(CollectiveKind.REDUCE, example_buffers("reduce"), root=2)
    assert result.receivers() == [2]
    np.testing.assert_array_equal(result.outputs[2], _SUM)


@pytest.mark.parametrize(
    "op, expected",
    [
        ("max", np.array([[9, 8, 7], [6, 6, 7], [8, 9, 10]])),
        ("min", np.array([[1, 1, 1], [2, 2, 2], [3, 2, 1]])),
    ],
)
def test_reduce_supports_other_operations(op, expected):
    result = simulate_collective("all_reduce", example_buffers("all_reduce"), op=op)
    np.testing.assert_array_equal(result.outputs[0], expected)


def test_mean_reduction():
    result = simulate_collective("reduce", example_buffers("reduce"), op="mean")
    np.testing.assert_allclose(result.outputs[0], _SUM / 4)


def test_broadcast_copies_root_buffer_everywhere():
    result = simulate_collective("broadcast", example_buffers("broadcast"))
    for out in result.outputs:
        np.testing.assert_array_equal(out, EXAMPLE_MATRICES["A"])
    result.outputs[1][0, 0] = 100
    assert result.outputs[0][0, 0] == 1


def test_scatter_gives_each_rank_one_row():
    result = simulate_collective("scatter", example_buffers("scatter"))
    assert [out.tolist() for out in result.outputs] == [[[1, 2, 3]], [[4, 5, 6]], [[7, 8, 9]], [[10, 11, 12]]]


def test_scatter_needs_enough_rows():
    with pytest.raises(CollectiveError):
        simulate_collective("scatter", [EXAMPLE_MATRICES["A"], None, None, None])


def test_gather_stacks_on_root_only():
    result = simulate_collective("gather", example_buffers("gather"))
    assert result.receivers() == [0]
    assert result.outputs[0].shape == (4, 3, 3)
    np.testing.assert_array_equal(result.outputs[0][1], EXAMPLE_MATRICES["B"])


def test_all_gather_stacks_everywhere():
    result = simulate_collective("all_gather", example_buffers("all_gather"))
    assert result.receivers() == [0, 1, 2, 3]
    for out in result.outputs:
        np.testing.assert_array_equal(out[3], EXAMPLE_MATRICES["D"])


def test_inputs_are_not_mutated():
    buffers = example_buffers("all_reduce")
    snapshot = [b.copy() for b in buffers]
    simulate_collective("all_reduce", buffers)
    for before, after in zip(snapshot, buffers):
        np.testing.assert_array_equal(before, after)


@pytest.mark.parametrize(
    "kind, buffers, kwargs",
    [
        ("all_reduce", [], {}),
        ("reduce", [np.ones((2, 2))] * 2, {"root": 2}),
        ("broadcast", [None, np.ones(2)], {"root": 0}),
        ("gather", [np.ones((2, 2)), None], {}),
        ("all_gather", [np.ones((2, 2)), np.ones((3, 2))], {}),
        ("reduce", [np.ones(2)] * 2, {"op": "product"}),
        ("alltoall", [np.ones(2)] * 2, {}),
    ],
)
def test_invalid_arguments_raise_collective_error(kind, buffers, kwargs):
    with pytest.raises(CollectiveError):
        simulate_collective(kind, buffers, **kwargs)


def test_flow_steps_for_four_gpus():
    assert len(flow_steps("all_reduce")) == 5
    assert flow_steps("all_reduce")[-1].operation == "SUM"
    assert [s.source for s in flow_steps("gather")] == ["GPU 1", "GPU 2", "GPU 3"]
    assert {s.target for s in flow_steps("gather")} == {"GPU 0"}
    assert [s.target for s in flow_steps("broadcast")] == ["GPU 1", "GPU 2", "GPU 3"]
    assert len(flow_steps("scatter")) == 4
    assert flow_steps("all_gather")[0].target == "GPU 1,2,3"
    assert flow_steps("reduce")[-1].label == "ΣL"


def test_flow_steps_follow_root():
    steps = flow_steps("gather", 4, root=3)
    assert [s.source for s in steps] == ["GPU 0", "GPU 1", "GPU 2"]
    with pytest.raises(CollectiveError):
        flow_steps("gather", 4, root=4)


def test_every_kind_has_a_description():
    assert {op.kind for op in COLLECTIVE_OPERATIONS} == set(CollectiveKind)
    assert describe_operation("broadcast").operation_label == "COPY"
    assert not CollectiveKind.ALL_REDUCE.is_rooted
    assert CollectiveKind.SCATTER.is_rooted


@pytest.mark.parametrize("kind", ["all_reduce", "reduce"])
@pytest.mark.parametrize("op", ["sum", "max", "min", "mean"])
def test_final_flow_step_names_the_selected_reduction(kind, op):
    final = flow_steps(kind, op=op)[-1]
    assert final.operation == op.upper()
    assert describe_operation(kind).with_reduction(op).operation_label == op.upper()


def test_max_reduction_labels_match_results():
    result = simulate_collective("all_reduce", example_buffers("all_reduce"), op="max")
    final = flow_steps("all_reduce", op="max")[-1]
    assert result.outputs[0].max() == 10
    assert final.operation == "MAX"
    assert final.label == "max(∇L)"
    assert describe_operation("all_reduce").with_reduction("max").formula == (
        "max(∇L₀, ∇L₁, ∇L₂, ∇L₃) → All GPUs"
    )


def test_with_reduction_leaves_sum_and_non_reducing_kinds_alone():
    all_reduce = describe_operation("all_reduce")
    gather = describe_operation("gather")
    assert all_reduce.with_reduction("sum") is all_reduce
    assert gather.with_reduction("max") is gather


def test_flow_steps_reject_unknown_reduction():
    with pytest.raises(CollectiveError):
        flow_steps("reduce", op="product")
