import numpy as np
import pytest

from digitnet.core.activations import sigmoid, sigmoid_deriv
from digitnet.core.errors import ContractViolation
from digitnet.core.layer import INIT_RANGE, Layer
from digitnet.core.network import Network
from digitnet.core.vectors import FeatureVector, LabeledVector


def test_sigmoid_and_derivative():
    x = np.array([-2.0, 0.0, 3.0])
    y = sigmoid(x)
    assert np.allclose(y, 1.0 / (1.0 + np.exp(-x)))
    assert y[1] == 0.5
    assert np.allclose(sigmoid_deriv(y), y * (1.0 - y))


@pytest.mark.parametrize("n_in,n_out", [(1, 1), (2, 3), (64, 65), (65, 10)])
def test_feed_forward_shape_and_range(n_in, n_out):
    rng = np.random.default_rng(n_in * 100 + n_out)
    layer = Layer(n_in, n_out, rng)
    trace = layer.feed_forward(rng.uniform(-3.0, 3.0, size=n_in))
    assert trace.outputs.shape == (n_out,)
    assert np.all(trace.outputs > 0.0)
    assert np.all(trace.outputs < 1.0)


def test_initial_weights_within_range():
    layer = Layer(10, 7, np.random.default_rng(0))
    assert layer.weights.shape == (7, 11)
    assert np.all(np.abs(layer.weights) <= INIT_RANGE)


def test_same_seed_same_weights():
    first = Layer(4, 3, np.random.default_rng(42))
    second = Layer(4, 3, np.random.default_rng(42))
    assert np.array_equal(first.weights, second.weights)


def test_identical_weights_give_identical_outputs():
    weights = np.random.default_rng(3).uniform(-1.0, 1.0, size=(5, 4))
    first = Layer.from_weights(weights)
    second = Layer.from_weights(weights)
    x = np.array([0.1, 0.7, -0.3])
    assert first.feed_forward(x).outputs.tobytes() == second.feed_forward(x).outputs.tobytes()


def test_bias_is_weight_of_constant_input():
    layer = Layer.from_weights([[0.0, 0.0, 2.0]])
    trace = layer.feed_forward([5.0, -5.0])
    assert trace.outputs[0] == pytest.approx(1.0 / (1.0 + np.exp(-2.0)))


def test_back_propagate_values():
    weights = np.array([[0.5, -0.25, 0.1], [0.2, 0.4, -0.3]])
    layer = Layer.from_weights(weights)
    trace = layer.feed_forward([1.0, 2.0])
    errors = np.array([0.3, -0.6])
    grad = layer.back_propagate(trace, errors)

    y = trace.outputs
    expected_deltas = errors * y * (1.0 - y)
    assert np.allclose(grad.deltas, expected_deltas)
    assert np.allclose(grad.input_errors, weights[:, :2].T @ expected_deltas)


def test_update_weights_rule():
    weights = np.array([[0.5, -0.25, 0.1]])
    layer = Layer.from_weights(weights)
    trace = layer.feed_forward([1.0, 2.0])
    grad = layer.back_propagate(trace, [0.4])
    layer.update_weights(grad, 0.1)

    delta = grad.deltas[0]
    expected = weights - 0.1 * delta * np.array([[1.0, 2.0, 1.0]])
    assert np.allclose(layer.weights, expected)


def test_single_neuron_step_moves_towards_target():
    layer = Layer.from_weights([[0.2, -0.1, 0.05]])
    x = np.array([1.0, 0.5])
    target = 1.0
    before = layer.feed_forward(x)
    grad = layer.back_propagate(before, before.outputs - target)
    layer.update_weights(grad, 0.5)
    after = layer.feed_forward(x)
    assert abs(after.outputs[0] - target) < abs(before.outputs[0] - target)


def test_input_length_mismatch_is_contract_violation():
    layer = Layer(3, 2, np.random.default_rng(0))
    with pytest.raises(ContractViolation):
        layer.feed_forward([1.0, 2.0])


def test_output_error_length_mismatch_is_contract_violation():
    layer = Layer(3, 2, np.random.default_rng(0))
    trace = layer.feed_forward([1.0, 2.0, 3.0])
    with pytest.raises(ContractViolation):
        layer.back_propagate(trace, [0.1, 0.2, 0.3])


def test_trace_from_another_layer_is_rejected():
    rng = np.random.default_rng(0)
    first = Layer(2, 2, rng)
    second = Layer(2, 2, rng)
    trace = first.feed_forward([1.0, 0.0])
    with pytest.raises(ContractViolation):
        second.back_propagate(trace, [0.1, 0.1])


def test_stale_trace_is_rejected_after_update():
    layer = Layer(2, 1, np.random.default_rng(0))
    trace = layer.feed_forward([1.0, 0.0])
    grad = layer.back_propagate(trace, [0.5])
    layer.update_weights(grad, 0.1)
    with pytest.raises(ContractViolation):
        layer.update_weights(grad, 0.1)
    with pytest.raises(ContractViolation):
        layer.back_propagate(trace, [0.5])


def test_layer_sizes_must_be_positive():
    with pytest.raises(ValueError):
        Layer(0, 3)


def test_network_wiring():
    net = Network(64, 65, 10, 0.1, rng=np.random.default_rng(0))
    assert net.sizes == (64, 65, 10)
    assert net.hidden.n_out == net.output.n_in
    assert net.parameter_count() == 65 * 65 + 10 * 66


def test_network_from_layers_checks_sizes():
    with pytest.raises(ContractViolation):
        Network.from_layers(Layer(2, 3), Layer(4, 2), 0.1)


def test_network_rejects_non_positive_epsilon():
    with pytest.raises(ValueError):
        Network(2, 2, 2, 0.0)


def test_think_composes_layers():
    hidden = Layer.from_weights([[1.0, -1.0, 0.0], [0.5, 0.5, 0.1]])
    output = Layer.from_weights([[0.3, -0.2, 0.05]])
    net = Network.from_layers(hidden, output, 0.1)
    item = FeatureVector([0.2, 0.4])
    h = sigmoid(np.array([[1.0, -1.0], [0.5, 0.5]]) @ item.x + np.array([0.0, 0.1]))
    expected = sigmoid(np.array([0.3, -0.2]) @ h + 0.05)
    assert np.allclose(net.think(item), [expected])


def test_classify_ties_pick_first_maximum():
    hidden = Layer.from_weights([[0.0, 0.0, 0.0]])
    output = Layer.from_weights([[0.0, 0.0], [1.0, 0.0], [1.0, 0.0]])
    net = Network.from_layers(hidden, output, 0.1)
    assert net.classify(FeatureVector([3.0, -1.0])) == 1


def test_classify_in_range():
    rng = np.random.default_rng(5)
    net = Network(4, 3, 5, 0.1, rng=rng)
    for _ in range(50):
        assert 0 <= net.classify(FeatureVector(rng.normal(size=4))) < 5


def test_error_is_unaveraged_sum_and_does_not_train():
    net = Network(2, 3, 2, 0.5, rng=np.random.default_rng(1))
    items = [LabeledVector.from_label([1.0, 0.0], 0, 2), LabeledVector.from_label([0.0, 1.0], 1, 2)]
    before = [net.hidden.weights.copy(), net.output.weights.copy()]
    total = net.error(items)
    assert total == pytest.approx(sum(item.error(net.think(item)) for item in items))
    assert net.error(items + items) == pytest.approx(2 * total)
    assert np.array_equal(before[0], net.hidden.weights)
    assert np.array_equal(before[1], net.output.weights)


def test_train_returns_error_before_update():
    net = Network(2, 3, 2, 0.5, rng=np.random.default_rng(2))
    item = LabeledVector.from_label([1.0, 0.0], 0, 2)
    expected = item.error(net.think(item))
    assert net.train(item) == pytest.approx(expected)
    assert item.error(net.think(item)) < expected
