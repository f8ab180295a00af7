import unittest

from dagtensor.infrastructure.autograd import Add, Mul, Neg, apply, topological_order
from dagtensor.infrastructure.autograd._functional import leaf
from dagtensor.infrastructure.tensor import TensorStorage


def node(value: float = 1.0, requires_grad: bool = True):
    return leaf(TensorStorage.scalar(value), requires_grad)


def position(order, n) -> int:
    for i, m in enumerate(order):
        if m is n:
            return i
    raise AssertionError(f"{n!r} not in order")


class TestTopologicalOrder(unittest.TestCase):
    def assertBefore(self, order, first, second):
        self.assertLess(position(order, first), position(order, second))

    def test_single_node(self):
        a = node()
        order = topological_order(a)
        self.assertEqual(len(order), 1)
        self.assertIs(order[0], a)

    def test_linear_chain(self):
        a = node()
        b = apply(Neg(), a)
        c = apply(Neg(), b)
        order = topological_order(c)
        self.assertEqual([id(n) for n in order], [id(a), id(b), id(c)])

    def test_diamond_visits_shared_node_once(self):
        x = node()
        left = apply(Neg(), x)
        right = apply(Neg(), x)
        root = apply(Add(), left, right)
        order = topological_order(root)
        self.assertEqual(len(order), 4)
        self.assertIs(order[-1], root)
        self.assertBefore(order, x, left)
        self.assertBefore(order, x, right)

    def test_shared_dependency(self):
        a = node(2.0)
        b = node(3.0)
        ab = apply(Mul(a.value, b.value), a, b)
        root = apply(Add(), ab, a)
        order = topological_order(root)
        self.assertEqual(len(order), 4)
        self.assertBefore(order, a, ab)
        self.assertBefore(order, b, ab)
        self.assertBefore(order, ab, root)

    def test_same_input_twice(self):
        x = node(5.0)
        y = apply(Mul(x.value, x.value), x, x)
        order = topological_order(y)
        self.assertEqual(len(order), 2)
        self.assertIs(order[0], x)

    def test_repeated_calls_are_independent(self):
        a = node()
        b = apply(Neg(), a)
        first = topological_order(b)
        second = topological_order(b)
        self.assertEqual([id(n) for n in first], [id(n) for n in second])
        self.assertIsNot(first, second)

    def test_unary_binary_mix(self):
        a = node()
        b = node()
        na = apply(Neg(), a)
        s = apply(Add(), na, b)
        root = apply(Neg(), s)
        order = topological_order(root)
        self.assertEqual(len(order), 5)
        self.assertBefore(order, a, na)
        self.assertBefore(order, na, s)
        self.assertBefore(order, b, s)
        self.assertIs(order[-1], root)

    def test_deep_chain_does_not_recurse(self):
        n = node()
        for _ in range(5000):
            n = apply(Neg(), n)
        self.assertEqual(len(topological_order(n)), 5001)


if __name__ == "__main__":
    unittest.main()
