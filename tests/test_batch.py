#!/usr/bin/env python3

"""
Tests for the single-pair and batch drivers.
"""

# Standard Library
import contextlib
import io
import os
import sys
import tempfile
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
from anim_fixtures import payloads_by_node
from anim_fixtures import transform_values

# local repo modules
from animsplicelib.codec import nuanmb
from animsplicelib.core import batch
from animsplicelib.core import utils
from animsplicelib.core.config import DriverConfig
from animsplicelib.core.container import GroupType
from animsplicelib.core.errors import ConfigError
from animsplicelib.core.errors import DecodeError
from animsplicelib.core.errors import UnsupportedVersionError

TRANSFORM = GroupType.TRANSFORM
VISIBILITY = GroupType.VISIBILITY

#============================================

def write_anim(folder: str, filename: str, container) -> str:
	path = os.path.join(folder, filename)
	nuanmb.write_container(container, path)
	return path

#============================================

def table_reader(tables: dict):
	"""
	Return a value reader that serves value tables keyed by file path.
	"""
	def read(path: str) -> dict:
		if path not in tables:
			raise DecodeError("no value table", path=path)
		return tables[path]
	return read

#============================================

def bone_table(bone_values: dict) -> dict:
	table = {}
	for name, track_values in bone_values.items():
		table[(TRANSFORM, name, TRANSFORM.label)] = track_values
	return table

#============================================

class SpliceDriverTest(unittest.TestCase):
	#============================================
	def setUp(self) -> None:
		utils.set_quiet_mode(True)
		self.reference = build_container({
			TRANSFORM: [("Hip", b"hip-ref"), ("Arm", b"arm-ref")],
			VISIBILITY: [("Eye", b"\x01")],
		})
		self.modified = build_container({
			TRANSFORM: [("Hip", b"hip-mod"), ("Tail", b"tail-new")],
			VISIBILITY: [("Eye", b"\x00\x00")],
		})

	#============================================
	def tearDown(self) -> None:
		utils.set_quiet_mode(False)

	#============================================
	def test_splice_files(self) -> None:
		with tempfile.TemporaryDirectory() as temp_dir:
			reference_path = write_anim(temp_dir, "ref.nuanmb", self.reference)
			modified_path = write_anim(temp_dir, "mod.nuanmb", self.modified)
			output_path = os.path.join(temp_dir, "out.nuanmb")
			batch.splice_files(reference_path, modified_path, output_path)
			result = nuanmb.read_container(output_path)
			self.assertEqual(payloads_by_node(result, TRANSFORM), [
				("Hip", [b"hip-ref"]), ("Arm", [b"arm-ref"]), ("Tail", [b"tail-new"]),
			])
			self.assertEqual(payloads_by_node(result, VISIBILITY), [("Eye", [b"\x00\x00"])])

	#============================================
	def test_splice_files_rejects_legacy(self) -> None:
		with tempfile.TemporaryDirectory() as temp_dir:
			reference_path = write_anim(temp_dir, "ref.nuanmb", legacy_container())
			modified_path = write_anim(temp_dir, "mod.nuanmb", self.modified)
			output_path = os.path.join(temp_dir, "out.nuanmb")
			with self.assertRaises(UnsupportedVersionError):
				batch.splice_files(reference_path, modified_path, output_path)
			self.assertFalse(os.path.exists(output_path))

	#============================================
	def test_splice_folders(self) -> None:
		with tempfile.TemporaryDirectory() as temp_dir:
			reference_dir = os.path.join(temp_dir, "vanilla")
			modified_dir = os.path.join(temp_dir, "modded")
			output_dir = os.path.join(temp_dir, "out")
			write_anim(reference_dir, "a001_wait.nuanmb", self.reference)
			write_anim(reference_dir, "a002_run.nuanmb", legacy_container())
			write_anim(modified_dir, "a001_wait.nuanmb", self.modified)
			write_anim(modified_dir, "a002_run.nuanmb", self.modified)
			write_anim(modified_dir, "a003_new.nuanmb", self.modified)
			with open(os.path.join(modified_dir, "notes.txt"), "w") as handle:
				handle.write("not an anim")
			summary = batch.splice_folders(reference_dir, modified_dir, output_dir)
			self.assertEqual(summary, batch.SpliceSummary(total=3, written=1, skipped=1, failed=1))
			self.assertEqual(os.listdir(output_dir), ["a001_wait.nuanmb"])

	#============================================
	def test_splice_failures_print_in_quiet_mode(self) -> None:
		with tempfile.TemporaryDirectory() as temp_dir:
			reference_dir = os.path.join(temp_dir, "vanilla")
			modified_dir = os.path.join(temp_dir, "modded")
			write_anim(reference_dir, "a002_run.nuanmb", legacy_container())
			write_anim(modified_dir, "a002_run.nuanmb", self.modified)
			write_anim(modified_dir, "a003_new.nuanmb", self.modified)
			output = io.StringIO()
			with contextlib.redirect_stdout(output):
				summary = batch.splice_folders(reference_dir, modified_dir,
					os.path.join(temp_dir, "out"))
		self.assertEqual(summary.failed, 1)
		self.assertIn("a002_run.nuanmb", output.getvalue())
		self.assertNotIn("a003_new.nuanmb", output.getvalue())

	#============================================
	def test_splice_folders_missing_folder(self) -> None:
		with tempfile.TemporaryDirectory() as temp_dir:
			with self.assertRaises(ConfigError):
				batch.splice_folders(os.path.join(temp_dir, "nope"), temp_dir,
					os.path.join(temp_dir, "out"))

#============================================

class ValidateDriverTest(unittest.TestCase):
	#============================================
	def setUp(self) -> None:
		utils.set_quiet_mode(True)
		self.reference = build_container({TRANSFORM: [("Hip", b"hip"), ("Arm", b"arm")]})

	#============================================
	def tearDown(self) -> None:
		utils.set_quiet_mode(False)

	#============================================
	def test_validate_files_reads_values(self) -> None:
		with tempfile.TemporaryDirectory() as temp_dir:
			reference_path = write_anim(temp_dir, "ref.nuanmb", self.reference)
			candidate_path = write_anim(temp_dir, "cand.nuanmb", self.reference)
			good = bone_table({"Hip": transform_values(3), "Arm": transform_values(3, 9.0)})
			changed = bone_table({"Hip": transform_values(3), "Arm": transform_values(3, 1.0)})
			reader = table_reader({reference_path: good, candidate_path: good})
			self.assertTrue(batch.validate_files(reference_path, candidate_path, reader).is_safe)
			reader = table_reader({reference_path: good, candidate_path: changed})
			rating = batch.validate_files(reference_path, candidate_path, reader)
			self.assertTrue(rating.is_unsafe)
			self.assertEqual(rating.bone, "Arm")

	#============================================
	def test_validate_files_unreadable_is_warning(self) -> None:
		with tempfile.TemporaryDirectory() as temp_dir:
			reference_path = write_anim(temp_dir, "ref.nuanmb", self.reference)
			candidate_path = os.path.join(temp_dir, "cand.nuanmb")
			with open(candidate_path, "wb") as handle:
				handle.write(b"garbage")
			reader = table_reader({})
			self.assertTrue(batch.validate_files(reference_path, candidate_path, reader).is_warning)
			write_anim(temp_dir, "cand.nuanmb", self.reference)
			# values that cannot be decoded are inconclusive too
			self.assertTrue(batch.validate_files(reference_path, candidate_path, reader).is_warning)

	#============================================
	def test_header_checks_run_before_values(self) -> None:
		with tempfile.TemporaryDirectory() as temp_dir:
			reference_path = write_anim(temp_dir, "ref.nuanmb", self.reference)
			longer = build_container({TRANSFORM: [("Hip", b"hip")]}, final_frame_index=20.0)
			candidate_path = write_anim(temp_dir, "cand.nuanmb", longer)
			rating = batch.validate_files(reference_path, candidate_path, table_reader({}))
			self.assertTrue(rating.is_unsafe)

	#============================================
	def test_validate_folders(self) -> None:
		with tempfile.TemporaryDirectory() as temp_dir:
			reference_dir = os.path.join(temp_dir, "vanilla")
			modified_dir = os.path.join(temp_dir, "modded")
			good = bone_table({"Hip": transform_values(2), "Arm": transform_values(2)})
			changed = bone_table({"Hip": transform_values(2, 4.0), "Arm": transform_values(2)})
			tables = {}
			for name in ("a_safe", "b_unsafe", "j02win"):
				tables[write_anim(reference_dir, name + ".nuanmb", self.reference)] = good
			tables[write_anim(modified_dir, "a_safe.nuanmb", self.reference)] = good
			tables[write_anim(modified_dir, "b_unsafe.nuanmb", self.reference)] = changed
			tables[write_anim(modified_dir, "j02win.nuanmb", self.reference)] = changed
			tables[write_anim(modified_dir, "c_orphan.nuanmb", self.reference)] = good
			summary = batch.validate_folders(reference_dir, modified_dir,
				value_reader=table_reader(tables))
			self.assertEqual(summary, batch.ValidationSummary(
				total=4, safe=1, unsafe=1, warning=1, skipped=1))
			lines = batch.summary_lines(summary)
			self.assertEqual(lines[0], "Total Modified Anims: 4")
			self.assertEqual(lines[1], "Unsafe Count: 1")

	#============================================
	def test_skip_prefixes_come_from_config(self) -> None:
		with tempfile.TemporaryDirectory() as temp_dir:
			reference_dir = os.path.join(temp_dir, "vanilla")
			modified_dir = os.path.join(temp_dir, "modded")
			write_anim(reference_dir, "j02win.nuanmb", self.reference)
			write_anim(modified_dir, "j02win.nuanmb", self.reference)
			config = DriverConfig(skip_prefixes=())
			summary = batch.validate_folders(reference_dir, modified_dir, config,
				value_reader=table_reader({}))
			self.assertEqual(summary.skipped, 0)
			self.assertEqual(summary.warning, 1)

	#============================================
	def test_same_folder_is_an_error(self) -> None:
		with tempfile.TemporaryDirectory() as temp_dir:
			with self.assertRaises(ConfigError):
				batch.validate_folders(temp_dir, os.path.join(temp_dir, "."))

#============================================

def main() -> None:
	"""Run the unit tests."""
	unittest.main()

#============================================

if __name__ == "__main__":
	main()
