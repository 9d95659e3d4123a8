import io
import unittest
from unittest import mock

from bindings_partition.progress import ProgressController


class ProgressControllerTests(unittest.TestCase):
    def test_disabled_controller_counts_units(self) -> None:
        with ProgressController(total_units=5, description="pages", enabled=False) as progress:
            progress.advance(2)
            progress.advance(0)
            progress.advance(-3)
            progress.advance()
        self.assertEqual(progress.completed_units, 3)

    def test_enabled_controller_renders(self) -> None:
        stream = io.StringIO()
        with mock.patch("sys.stderr", stream):
            with ProgressController(total_units=4, description="bound-join") as progress:
                progress.advance(4)
        self.assertEqual(progress.completed_units, 4)
        self.assertIn("bound-join", stream.getvalue())

    def test_start_and_close_are_idempotent(self) -> None:
        progress = ProgressController(total_units=0, enabled=False)
        progress.start()
        progress.start()
        progress.close()
        progress.close()
        self.assertEqual(progress.description, "Progress")
        self.assertEqual(progress.total_units, 0)


if __name__ == "__main__":  # pragma: no cover
    unittest.main()
