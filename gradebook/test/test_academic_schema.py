from django.test import SimpleTestCase

from gradebook.academic import schema as ops
from gradebook.academic.types import ModuleSchema
from gradebook.test.utils.builders import module, schema


class SchemaEditingTests(SimpleTestCase):
    def test_add_module_defaults(self):
        s = ops.add_module(ModuleSchema())
        m = s.modules[0]
        self.assertTrue(m.module_id.startswith("MOD-"))
        self.assertEqual(m.name, "Module 1")
        self.assertEqual(m.evaluation_count, 1)
        self.assertEqual(m.evaluation_weights, (100.0,))
        self.assertEqual(m.weight, 0.0)
        self.assertEqual(m.class_dates, ())

    def test_evaluation_count_keeps_weights_in_step(self):
        s = ops.set_evaluation_count(schema(module("A", 1)), "A", 3)
        self.assertEqual(s.get("A").evaluation_weights, (33.3, 33.3, 33.4))
        self.assertTrue(s.get("A").has_valid_weights())

    def test_evaluation_count_is_clamped(self):
        s = ops.set_evaluation_count(schema(module("A", 1)), "A", 9)
        self.assertEqual(s.get("A").evaluation_count, 6)
        self.assertEqual(len(s.get("A").evaluation_weights), 6)
        s = ops.update_module(s, "A", "evaluation_count", "x")
        self.assertEqual(s.get("A").evaluation_count, 0)
        self.assertEqual(s.get("A").evaluation_weights, ())

    def test_set_evaluation_weights_pads_to_count(self):
        s = ops.set_evaluation_weights(schema(module("A", 3)), "A", [60, "40"])
        self.assertEqual(s.get("A").evaluation_weights, (60.0, 40.0, 0.0))

    def test_update_rejects_unknown_field(self):
        with self.assertRaises(ValueError):
            ops.update_module(schema(module("A", 1)), "A", "module_id", "B")

    def test_move_and_remove(self):
        s = schema(module("A", 1), module("B", 1), module("C", 1))
        self.assertEqual(ops.move_module(s, "C", 0).module_ids(), ["C", "A", "B"])
        self.assertEqual(ops.move_module(s, "A", 99).module_ids(), ["B", "C", "A"])
        self.assertEqual(ops.remove_module(s, "B").module_ids(), ["A", "C"])
        with self.assertRaises(KeyError):
            ops.remove_module(s, "Z")

    def test_class_dates_sorted_and_unique(self):
        s = schema(module("A", 1))
        s = ops.add_class_date(s, "A", "2024-05-10")
        s = ops.add_class_date(s, "A", "2024-05-03")
        s = ops.add_class_date(s, "A", "2024-05-10")
        self.assertEqual(s.get("A").class_dates, ("2024-05-03", "2024-05-10"))
        s = ops.remove_class_date(s, "A", "2024-05-03")
        self.assertEqual(s.get("A").class_dates, ("2024-05-10",))

    def test_config_round_trip_keeps_identity(self):
        s = schema(module("A", 2, weights=[40, 60], weight=30, class_dates=["2024-03-01"]))
        self.assertEqual(ModuleSchema.from_config(s.to_config()), s)

    def test_weight_warnings(self):
        s = schema(module("A", 2, weights=[40, 50], weight=30), module("B", 1, weight=30))
        warnings = ops.weight_warnings(s)
        self.assertIn("A: evaluation weights sum to 90.0%", warnings)
        self.assertIn("Module weights sum to 60.0%", warnings)
        self.assertEqual(ops.weight_warnings(schema(module("A", 1))), [])
