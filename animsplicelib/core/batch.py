#!/usr/bin/env python3

"""
Drivers that run the splice and validation engines over files and folders.

Batch runs return a summary record instead of keeping global counters.
"""

import os
from dataclasses import dataclass
from tqdm import tqdm

from animsplicelib.codec import nuanmb
from animsplicelib.codec import values
from animsplicelib.core import utils
from animsplicelib.core.config import DriverConfig
from animsplicelib.core.errors import AnimSpliceError
from animsplicelib.core.errors import ConfigError
from animsplicelib.core.errors import DecodeError
from animsplicelib.core.splicer import splice
from animsplicelib.core.validator import AnimValidator
from animsplicelib.core.validator import SafetyRating
from animsplicelib.core.validator import Verdict

#============================================

@dataclass
class SpliceSummary:
	total: int = 0
	written: int = 0
	skipped: int = 0
	failed: int = 0

#============================================

@dataclass
class ValidationSummary:
	total: int = 0
	safe: int = 0
	unsafe: int = 0
	warning: int = 0
	skipped: int = 0

	def count(self, rating: SafetyRating) -> None:
		if rating.verdict is Verdict.SAFE:
			self.safe += 1
		elif rating.verdict is Verdict.UNSAFE:
			self.unsafe += 1
		else:
			self.warning += 1
		return

#============================================

def _list_folder(dirpath: str, extension: str) -> list:
	try:
		return utils.list_anim_files(dirpath, extension)
	except RuntimeError as exc:
		raise ConfigError(str(exc))

#============================================

def pair_by_name(reference_paths: list, modified_paths: list) -> list:
	"""
	Pair each modified file with the reference file of the same name.

	Returns:
		list: (modified_path, reference_path or None) in modified order.
	"""
	reference_by_name = {}
	for path in reference_paths:
		reference_by_name[os.path.basename(path)] = path
	pairs = []
	for modified_path in modified_paths:
		reference_path = reference_by_name.get(os.path.basename(modified_path))
		pairs.append((modified_path, reference_path))
	return pairs

#============================================

def _progress(pairs: list, description: str):
	return tqdm(pairs, desc=description, unit='anim', disable=utils.is_quiet_mode())

#============================================

def splice_files(reference_path: str, modified_path: str, output_path: str) -> None:
	"""
	Splice one pair of files and write the result.

	Raises:
		DecodeError, EncodeError, UnsupportedVersionError, MalformedSourceError
	"""
	reference = nuanmb.read_container(reference_path)
	modified = nuanmb.read_container(modified_path)
	new_anim = splice(reference, modified)
	nuanmb.write_container(new_anim, output_path)
	return

#============================================

def splice_folders(reference_dir: str, modified_dir: str, output_dir: str,
	config: DriverConfig = None) -> SpliceSummary:
	if config is None:
		config = DriverConfig()
	reference_paths = _list_folder(reference_dir, config.extension)
	modified_paths = _list_folder(modified_dir, config.extension)
	if not os.path.isdir(output_dir):
		os.makedirs(output_dir)
	summary = SpliceSummary(total=len(modified_paths))
	for modified_path, reference_path in _progress(pair_by_name(reference_paths, modified_paths), "splicing"):
		if reference_path is None:
			utils.note(f"Skipping modified file {modified_path}, no vanilla anim was found!")
			summary.skipped += 1
			continue
		output_path = os.path.join(output_dir, os.path.basename(modified_path))
		try:
			splice_files(reference_path, modified_path, output_path)
		except AnimSpliceError as exc:
			utils.error(f"An error `{exc}` happened splicing {modified_path} with "
				f"{reference_path}, so no spliced anim will be outputted.")
			summary.failed += 1
			continue
		summary.written += 1
	return summary

#============================================

def validate_files(reference_path: str, candidate_path: str,
	value_reader=values.read_values) -> SafetyRating:
	"""
	Validate one candidate file against its reference file.

	Decode failures on either side are reported as a WARNING rating.
	"""
	try:
		candidate = nuanmb.read_container(candidate_path)
	except DecodeError as exc:
		return SafetyRating.warning(
			f"Can't validate modified file, it could not be opened, error=`{exc}`")
	try:
		reference = nuanmb.read_container(reference_path)
	except DecodeError as exc:
		return SafetyRating.warning(
			f"Can't validate modified file, its matching reference anim could not be opened, error=`{exc}`")
	rating = AnimValidator(reference, candidate).check_header()
	if rating is not None:
		return rating
	try:
		reference = values.attach_values(reference, value_reader(reference_path))
	except DecodeError as exc:
		return SafetyRating.warning(
			f"Can't validate modified file, its matching reference anim values could not be read, error=`{exc}`")
	try:
		candidate = values.attach_values(candidate, value_reader(candidate_path))
	except DecodeError as exc:
		return SafetyRating.warning(
			f"Can't validate modified file, its values could not be read, error=`{exc}`")
	return AnimValidator(reference, candidate).validate()

#============================================

def validate_folders(reference_dir: str, modified_dir: str, config: DriverConfig = None,
	value_reader=values.read_values) -> ValidationSummary:
	if config is None:
		config = DriverConfig()
	if utils.same_folder(reference_dir, modified_dir):
		raise ConfigError("Specified 'Reference' and 'Modified' folders are the same folders!")
	reference_paths = _list_folder(reference_dir, config.extension)
	modified_paths = _list_folder(modified_dir, config.extension)
	summary = ValidationSummary(total=len(modified_paths))
	for modified_path, reference_path in _progress(pair_by_name(reference_paths, modified_paths), "validating"):
		filename = os.path.basename(modified_path)
		if config.should_skip(filename):
			utils.note(f"SKIPPED: Skipping {filename}, since its name starts with a skipped prefix.")
			summary.skipped += 1
			continue
		if reference_path is None:
			utils.note(f"WARNING: Can't validate modified file {filename}, no vanilla anim was found!")
			summary.warning += 1
			continue
		rating = validate_files(reference_path, modified_path, value_reader=value_reader)
		summary.count(rating)
		if rating.is_unsafe:
			utils.note(f"UNSAFE: Anim={filename}, reason=`{rating.reason}`")
		elif rating.is_warning:
			utils.note(f"WARNING: Anim={filename}, reason=`{rating.reason}`")
	return summary

#============================================

def summary_lines(summary: ValidationSummary) -> list:
	lines = []
	lines.append(f"Total Modified Anims: {summary.total}")
	lines.append(f"Unsafe Count: {summary.unsafe}")
	lines.append(f"Warning Count: {summary.warning}")
	lines.append(f"Skip Count: {summary.skipped}")
	return lines
