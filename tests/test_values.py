#!/usr/bin/env python3

"""
Tests for the ssbh_data_py value view.
"""

# Standard Library
import enum
import os
import sys
import types
import unittest

REPO_ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
if REPO_ROOT not in sys.path:
	sys.path.insert(0, REPO_ROOT)

# tests helpers
TESTS_DIR = os.path.abspath(os.path.dirname(__file__))
if TESTS_DIR not in sys.path:
	sys.path.insert(0, TESTS_DIR)
from anim_fixtures import build_container
from anim_fixtures import legacy_container

# local repo modules
from animsplicelib.codec import values
from animsplicelib.core.container import GroupType
from animsplicelib.core.container import Transform
from animsplicelib.core.errors import DecodeError

#============================================

class FakeGroupType(enum.Enum):
	Transform = 1
	Visibility = 2
	Material = 4
	Camera = 5
	Unknown = 9

#============================================

def fake_transform(x: float):
	return types.SimpleNamespace(
		scale=[1.0, 1.0, 1.0],
		rotation=[0.0, 0.0, 0.0, 1.0],
		translation=[x, 2.0, 3.0],
	)

#============================================

def fake_anim_data(groups: list):
	"""
	Build an object shaped like ssbh_data_py AnimData.

	Args:
		groups: list of (FakeGroupType, [(node name, [(track name, values)])]).
	"""
	raw_groups = []
	for group_type, nodes in groups:
		raw_nodes = []
		for node_name, tracks in nodes:
			raw_tracks = [types.SimpleNamespace(name=name, values=track_values)
				for name, track_values in tracks]
			raw_nodes.append(types.SimpleNamespace(name=node_name, tracks=raw_tracks))
		raw_groups.append(types.SimpleNamespace(group_type=group_type, nodes=raw_nodes))
	return types.SimpleNamespace(groups=raw_groups, final_frame_index=9.0)

#============================================

class ValueViewTest(unittest.TestCase):
	#============================================
	def test_transform_samples_become_records(self) -> None:
		track_values = values.convert_track_values([fake_transform(1.0), fake_transform(2.0)])
		self.assertIs(track_values.kind, GroupType.TRANSFORM)
		self.assertEqual(track_values.samples[1], Transform(
			translation=(2.0, 2.0, 3.0),
			rotation=(0.0, 0.0, 0.0, 1.0),
			scale=(1.0, 1.0, 1.0),
		))

	#============================================
	def test_sample_kinds(self) -> None:
		self.assertIs(values.convert_track_values([True, False]).kind, GroupType.VISIBILITY)
		material = values.convert_track_values([[1.0, 0.5, 0.0, 1.0]])
		self.assertIs(material.kind, GroupType.MATERIAL)
		self.assertEqual(material.samples[0], (1.0, 0.5, 0.0, 1.0))
		self.assertIsNone(values.convert_track_values([]).kind)

	#============================================
	def test_value_table_and_attach(self) -> None:
		anim_data = fake_anim_data([
			(FakeGroupType.Transform, [("Hip", [("Transform", [fake_transform(0.0)])])]),
			(FakeGroupType.Visibility, [("Eye", [("Visibility", [True, True])])]),
		])
		table = values.build_value_table(anim_data)
		self.assertIn((GroupType.TRANSFORM, "Hip", "Transform"), table)
		container = build_container({
			GroupType.TRANSFORM: [("Hip", b"hip"), ("Unknown", b"u")],
			GroupType.VISIBILITY: [("Eye", b"\x01")],
		})
		attached = values.attach_values(container, table)
		self.assertEqual(attached, container)
		transform_group = attached.find_group(GroupType.TRANSFORM)
		self.assertEqual(len(transform_group.nodes[0].tracks[0].values), 1)
		self.assertTrue(transform_group.nodes[1].tracks[0].values.is_empty)
		eye_values = attached.find_group(GroupType.VISIBILITY).nodes[0].tracks[0].values
		self.assertEqual(eye_values.samples, (True, True))

	#============================================
	def test_unsupported_group_type(self) -> None:
		anim_data = fake_anim_data([(FakeGroupType.Unknown, [])])
		with self.assertRaises(DecodeError):
			values.build_value_table(anim_data)

	#============================================
	def test_legacy_container_is_returned_as_is(self) -> None:
		container = legacy_container()
		self.assertIs(values.attach_values(container, {}), container)

#============================================

def main() -> None:
	"""Run the unit tests."""
	unittest.main()

#============================================

if __name__ == "__main__":
	main()
