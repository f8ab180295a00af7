import unittest

import numpy as np

from dagtensor.domain._errors import ShapeMismatchError
from dagtensor.infrastructure import Tensor
from dagtensor.infrastructure.autograd import run_backward
from dagtensor.infrastructure.tensor import TensorStorage


def var(data, requires_grad: bool = True) -> Tensor:
    return Tensor(data, requires_grad=requires_grad)


class TestGradientLaws(unittest.TestCase):
    def test_add(self):
        a, b = var(10.0), var(20.0)
        (a + b).backward()
        self.assertEqual(a.grad.item(), 1.0)
        self.assertEqual(b.grad.item(), 1.0)

    def test_add_tensor_grads_are_ones_like(self):
        a = var([[1.0, 2.0], [3.0, 4.0]])
        b = var([[0.5, 0.5], [0.5, 0.5]])
        (a + b).backward()
        np.testing.assert_array_equal(a.grad.to_numpy(), np.ones((2, 2)))
        np.testing.assert_array_equal(b.grad.to_numpy(), np.ones((2, 2)))

    def test_mul(self):
        x, y = var(3.0), var(4.0)
        (x * y).backward()
        self.assertEqual(x.grad.item(), 4.0)
        self.assertEqual(y.grad.item(), 3.0)

    def test_chain_rule(self):
        x, y, b = var(2.0), var(3.0), var(5.0)
        z = (x * y) + b
        self.assertEqual(z.item(), 11.0)
        z.backward()
        self.assertEqual(x.grad.item(), 3.0)
        self.assertEqual(y.grad.item(), 2.0)
        self.assertEqual(b.grad.item(), 1.0)

    def test_node_reuse_diamond(self):
        x = var(5.0)
        y = x * x
        self.assertEqual(y.item(), 25.0)
        y.backward()
        self.assertEqual(x.grad.item(), 10.0)

    def test_wide_diamond(self):
        # f(x) = (x + x) * (x - 1) -> f'(x) = 2(x - 1) + 2x = 4x - 2
        x = var(3.0)
        f = (x + x) * (x - 1)
        f.backward()
        self.assertEqual(x.grad.item(), 10.0)

    def test_matmul_transpose_rule(self):
        a = var([[1.0, 2.0], [3.0, 4.0]])
        b = var([[5.0, 6.0], [7.0, 8.0]])
        c = a.matmul(b)
        np.testing.assert_allclose(c.to_numpy(), [[19, 22], [43, 50]])
        c.backward(Tensor.ones((2, 2)))
        np.testing.assert_allclose(a.grad.to_numpy(), [[11, 15], [11, 15]])
        np.testing.assert_allclose(b.grad.to_numpy(), [[4, 4], [6, 6]])

    def test_division_quotient_rule(self):
        x, y = var(10.0), var(2.0)
        z = x / y
        self.assertEqual(z.item(), 5.0)
        z.backward()
        self.assertAlmostEqual(x.grad.item(), 0.5, places=6)
        self.assertAlmostEqual(y.grad.item(), -2.5, places=6)

    def test_sub_and_neg(self):
        a, b = var(1.0), var(2.0)
        (-(a - b)).backward()
        self.assertEqual(a.grad.item(), -1.0)
        self.assertEqual(b.grad.item(), 1.0)

    def test_sum_and_mean(self):
        x = var([[1.0, 2.0], [3.0, 4.0]])
        x.sum().backward()
        np.testing.assert_allclose(x.grad.to_numpy(), np.ones((2, 2)))
        y = var([1.0, 2.0, 3.0, 4.0])
        y.mean().backward()
        np.testing.assert_allclose(y.grad.to_numpy(), [0.25] * 4)

    def test_relu_and_sigmoid(self):
        x = var([-1.0, 2.0])
        x.relu().sum().backward()
        np.testing.assert_allclose(x.grad.to_numpy(), [0.0, 1.0])
        z = var(0.0)
        z.sigmoid().backward()
        self.assertAlmostEqual(z.grad.item(), 0.25, places=6)

    def test_reshape_and_transpose_route_back(self):
        x = var([[1.0, 2.0, 3.0], [4.0, 5.0, 6.0]])
        w = var([[1.0], [2.0], [3.0], [4.0], [5.0], [6.0]], requires_grad=False)
        (x.reshape(1, 6) @ w).backward()
        np.testing.assert_allclose(x.grad.to_numpy(), [[1, 2, 3], [4, 5, 6]])

        t = var([[1.0, 2.0]])
        (t.T * Tensor([[3.0], [4.0]])).sum().backward()
        np.testing.assert_allclose(t.grad.to_numpy(), [[3.0, 4.0]])


class TestEngineBehaviour(unittest.TestCase):
    def test_root_without_grad_is_noop(self):
        a, b = var(1.0, False), var(2.0, False)
        c = a + b
        c.backward()
        self.assertIsNone(a.grad)
        self.assertIsNone(c.grad)

    def test_non_grad_inputs_receive_nothing(self):
        a, b = var(3.0), var(4.0, requires_grad=False)
        (a * b).backward()
        self.assertEqual(a.grad.item(), 4.0)
        self.assertIsNone(b.grad)

    def test_scalar_operands_are_constants(self):
        x = var(2.0)
        y = 3 * x + 1 - x / 2
        self.assertEqual(y.item(), 6.0)
        y.backward()
        self.assertAlmostEqual(x.grad.item(), 2.5, places=6)
        z = var(4.0)
        (8 / z).backward()
        self.assertAlmostEqual(z.grad.item(), -0.5, places=6)

    def test_tiny_divisor_backward_stays_finite(self):
        # b * b underflows to 0 in float32 although b itself is nonzero
        x, y = var(1e-30), var(1e-23)
        z = x / y
        z.backward()
        np.testing.assert_allclose(x.grad.item(), 1e23, rtol=1e-5)
        np.testing.assert_allclose(y.grad.item(), -1e16, rtol=1e-5)
        self.assertTrue(np.isfinite(y.grad.item()))

    def test_leaves_accumulate_across_calls(self):
        x, y = var(3.0), var(4.0)
        z = x * y
        z.backward()
        z.backward()
        self.assertEqual(x.grad.item(), 8.0)
        self.assertEqual(y.grad.item(), 6.0)

    def test_intermediate_gradient_is_readable_and_reset(self):
        x, y, b = var(2.0), var(3.0), var(5.0)
        xy = x * y
        z = xy + b
        z.backward()
        self.assertEqual(xy.grad.item(), 1.0)
        z.backward()
        self.assertEqual(xy.grad.item(), 1.0)
        self.assertEqual(x.grad.item(), 6.0)

    def test_custom_seed(self):
        x = var([1.0, 2.0])
        y = x * 3
        y.backward([1.0, 10.0])
        np.testing.assert_allclose(x.grad.to_numpy(), [3.0, 30.0])

    def test_seed_shape_mismatch(self):
        x = var([1.0, 2.0])
        with self.assertRaises(ShapeMismatchError):
            (x * 2).backward([1.0, 1.0, 1.0])

    def test_backward_on_leaf(self):
        x = var([1.0, 2.0])
        x.backward()
        np.testing.assert_allclose(x.grad.to_numpy(), [1.0, 1.0])

    def test_duplicate_construction_builds_independent_graphs(self):
        x = var(2.0)
        a = x * x
        b = x * x
        self.assertIsNot(a.node, b.node)
        a.backward()
        b.backward()
        self.assertEqual(x.grad.item(), 8.0)

    def test_deep_chain(self):
        x = var(1.0)
        y = x
        for _ in range(3000):
            y = y + 1
        y.backward()
        self.assertEqual(x.grad.item(), 1.0)

    def test_run_backward_directly(self):
        x = var([1.0, 2.0])
        y = x * x
        run_backward(y.node, TensorStorage.ones((2,)))
        np.testing.assert_allclose(x.grad.to_numpy(), [2.0, 4.0])


if __name__ == "__main__":
    unittest.main()
