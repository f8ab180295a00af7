import unittest

import numpy as np

from dagtensor.infrastructure import Parameter, SGD, Tensor
from dagtensor.infrastructure.optimizers import Optimizer


def param_from_np(arr) -> Parameter:
    return Parameter.from_numpy(np.asarray(arr, dtype=np.float32))


class TestSGD(unittest.TestCase):
    def test_step_scalar(self):
        p = param_from_np([10.0])
        p.grad = [2.0]
        opt = SGD([p], lr=0.1)
        opt.step()
        np.testing.assert_allclose(p.to_numpy(), [9.8], rtol=1e-6)

    def test_step_from_backward(self):
        p = param_from_np([1.0, 2.0, 3.0])
        (p * p).sum().backward()  # grad = 2p
        SGD([p], lr=0.5).step()
        np.testing.assert_allclose(p.to_numpy(), [0.0, 0.0, 0.0], atol=1e-7)

    def test_update_is_in_place(self):
        p = param_from_np([1.0, 1.0])
        storage = p.value
        buf = storage.buffer
        p.grad = [1.0, 1.0]
        SGD([p], lr=0.25).step()
        self.assertIs(p.value, storage)
        self.assertIs(p.value.buffer, buf)
        self.assertTrue(p.is_leaf)

    def test_frozen_parameters_are_never_modified(self):
        p = param_from_np([10.0])
        p.grad = [2.0]
        p.requires_grad = False
        SGD([p], lr=0.1).step()
        np.testing.assert_array_equal(p.to_numpy(), [10.0])

    def test_step_skips_missing_grad(self):
        p = param_from_np([1.0, 2.0])
        SGD([p], lr=0.1).step()
        np.testing.assert_array_equal(p.to_numpy(), [1.0, 2.0])

    def test_zero_grad_gives_zeros(self):
        p = param_from_np([[1.0, 2.0]])
        p.grad = [[3.0, 4.0]]
        buf = p.grad.value.buffer
        opt = SGD([p], lr=0.1)
        opt.zero_grad()
        np.testing.assert_array_equal(p.grad.to_numpy(), [[0.0, 0.0]])
        self.assertIs(p.grad.value.buffer, buf)

        q = param_from_np([5.0])
        SGD([q], lr=0.1).zero_grad()
        np.testing.assert_array_equal(q.grad.to_numpy(), [0.0])

    def test_weight_decay(self):
        p0 = np.array([1.0, -2.0], dtype=np.float32)
        g0 = np.array([0.5, 0.25], dtype=np.float32)
        p = param_from_np(p0)
        p.grad = g0
        lr, wd = 0.1, 0.01
        SGD([p], lr=lr, weight_decay=wd).step()
        expected = p0 - lr * (g0 + wd * p0)
        np.testing.assert_allclose(p.to_numpy(), expected, rtol=1e-6, atol=1e-7)
        # the stored gradient is not touched by weight decay
        np.testing.assert_allclose(p.grad.to_numpy(), g0)

    def test_learning_rate_accessors(self):
        opt = SGD([param_from_np([1.0])], lr=0.1)
        self.assertEqual(opt.get_learning_rate(), 0.1)
        opt.set_learning_rate(0.5)
        self.assertEqual(opt.get_learning_rate(), 0.5)
        self.assertEqual(opt.lr, 0.5)
        with self.assertRaises(ValueError):
            opt.set_learning_rate(0.0)

    def test_add_parameter(self):
        a, b = param_from_np([1.0]), param_from_np([2.0])
        opt = SGD([a], lr=1.0)
        opt.add_parameter(b)
        self.assertEqual(len(opt.params), 2)
        b.grad = [1.0]
        opt.step()
        self.assertEqual(b.item(), 1.0)
        with self.assertRaises(TypeError):
            opt.add_parameter([1.0])

    def test_invalid_hyperparams_raise(self):
        p = param_from_np([1.0])
        with self.assertRaises(ValueError):
            SGD([p], lr=0.0)
        with self.assertRaises(ValueError):
            SGD([p], lr=-1.0)
        with self.assertRaises(ValueError):
            SGD([p], lr=0.1, weight_decay=-1.0)

    def test_plain_tensors_with_grad_are_accepted(self):
        t = Tensor([4.0], requires_grad=True)
        (t * 1).backward()
        SGD([t], lr=1.0).step()
        self.assertEqual(t.item(), 3.0)

    def test_optimizer_is_abstract(self):
        with self.assertRaises(TypeError):
            Optimizer([], lr=0.1)


class TestOptimizerPackageImports(unittest.TestCase):
    def test_top_level_package_exposes_optimizers(self):
        import dagtensor
        from dagtensor.infrastructure.optimizers import _base, _sgd

        self.assertIs(dagtensor.SGD, SGD)
        self.assertIs(dagtensor.Optimizer, Optimizer)
        self.assertIs(_base.Tensor, Tensor)
        self.assertIs(_sgd.Tensor, Tensor)


if __name__ == "__main__":
    unittest.main()
