import unittest

import numpy as np

from dagtensor.domain._errors import UnsupportedOperationError
from dagtensor.domain.device import as_device
from dagtensor.infrastructure.ops import NumpyKernelBackend, get_backend


class TestNumpyKernelBackend(unittest.TestCase):
    def setUp(self):
        self.k = NumpyKernelBackend()

    def test_allocate_and_from_host(self):
        buf = self.k.allocate(4, np.float32)
        self.assertEqual(buf.shape, (4,))
        self.assertEqual(buf.dtype, np.float32)
        host = [[1, 2], [3, 4]]
        np.testing.assert_array_equal(self.k.from_host(host, np.int32), [1, 2, 3, 4])

    def test_binary_kernels_keep_left_dtype(self):
        a = np.array([1.0, 2.0], dtype=np.float32)
        b = np.array([3.0, 4.0], dtype=np.float64)
        for name in ("add", "sub", "mul", "div"):
            with self.subTest(kernel=name):
                self.assertEqual(getattr(self.k, name)(a, b).dtype, np.float32)

    def test_matmul_and_transpose(self):
        a = np.array([1, 2, 3, 4, 5, 6], dtype=np.float32)  # (2, 3)
        b = np.array([1, 0, 0, 1, 1, 1], dtype=np.float32)  # (3, 2)
        np.testing.assert_allclose(self.k.matmul(a, b, 2, 3, 2), [4, 5, 10, 11])
        np.testing.assert_allclose(self.k.transpose2d(a, 2, 3), [1, 4, 2, 5, 3, 6])

    def test_axpy_in_place(self):
        y = np.array([1.0, 1.0], dtype=np.float32)
        self.k.axpy(2.0, np.array([1.0, -1.0], dtype=np.float32), y)
        np.testing.assert_allclose(y, [3.0, -1.0])

    def test_any_zero(self):
        self.assertTrue(self.k.any_zero(np.array([1.0, 0.0])))
        self.assertFalse(self.k.any_zero(np.array([1.0, -2.0])))

    def test_get_set(self):
        buf = np.zeros(3, dtype=np.float32)
        self.k.set(buf, 1, 2.5)
        self.assertEqual(self.k.get(buf, 1), 2.5)
        self.assertIsInstance(self.k.get(buf, 1), float)


class TestGetBackend(unittest.TestCase):
    def test_cpu_backend(self):
        self.assertIs(get_backend("cpu"), get_backend(as_device("cpu")))
        self.assertEqual(get_backend("cpu").name, "numpy")

    def test_cuda_is_unsupported(self):
        with self.assertRaises(UnsupportedOperationError) as cm:
            get_backend("cuda:0")
        self.assertEqual(cm.exception.device, "cuda:0")


if __name__ == "__main__":
    unittest.main()
