import logging
import unittest

from dagtensor.infrastructure import LinearRegression, SGD, Parameter, Tensor
from dagtensor.infrastructure._logging import (
    LOG_FORMAT,
    ROOT_LOGGER_NAME,
    configure_logging,
)


def _installed_handlers(logger: logging.Logger):
    return [h for h in logger.handlers if getattr(h, "_dagtensor_handler", False)]


class TestConfigureLogging(unittest.TestCase):
    def setUp(self):
        self.root = logging.getLogger(ROOT_LOGGER_NAME)
        self._level = self.root.level

    def tearDown(self):
        for h in _installed_handlers(self.root):
            self.root.removeHandler(h)
        self.root.setLevel(self._level)

    def test_installs_single_stream_handler(self):
        logger = configure_logging("DEBUG")
        configure_logging("INFO")
        self.assertIs(logger, self.root)
        handlers = _installed_handlers(self.root)
        self.assertEqual(len(handlers), 1)
        self.assertIsInstance(handlers[0], logging.StreamHandler)
        self.assertEqual(handlers[0].formatter._fmt, LOG_FORMAT)
        self.assertEqual(self.root.level, logging.INFO)

    def test_defaults_to_configured_level(self):
        configure_logging()
        self.assertEqual(self.root.level, logging.WARNING)

    def test_package_has_null_handler(self):
        import dagtensor  # noqa: F401

        self.assertTrue(
            any(isinstance(h, logging.NullHandler) for h in self.root.handlers)
        )


class TestLibraryLogs(unittest.TestCase):
    def test_engine_logs_traversal_at_debug(self):
        x = Tensor(2.0, requires_grad=True)
        with self.assertLogs("dagtensor.infrastructure.autograd._engine", "DEBUG") as cm:
            (x * x).backward()
        self.assertTrue(any("node(s) reachable" in line for line in cm.output))

    def test_engine_logs_noop_backward(self):
        with self.assertLogs("dagtensor.infrastructure.autograd._engine", "DEBUG") as cm:
            (Tensor(1.0) + 1).backward()
        self.assertTrue(any("no-op" in line for line in cm.output))

    def test_sgd_logs_skipped_parameter(self):
        opt = SGD([Parameter([1.0])], lr=0.1)
        with self.assertLogs("dagtensor.infrastructure.optimizers", "DEBUG") as cm:
            opt.step()
            opt.set_learning_rate(0.2)
        self.assertTrue(any("skipping" in line for line in cm.output))
        self.assertTrue(any("learning rate" in line for line in cm.output))

    def test_fit_logs_epoch_loss_at_info(self):
        model = LinearRegression(1)
        with self.assertLogs("dagtensor.infrastructure.models", "INFO") as cm:
            model.fit([[1.0]], [[1.0]], epochs=2)
        self.assertEqual(len(cm.output), 2)
        self.assertIn("epoch 1/2", cm.output[0])


if __name__ == "__main__":
    unittest.main()
