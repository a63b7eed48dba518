#!/usr/bin/env python3

import os
import time
from tqdm import tqdm

_QUIET_MODE = False

#============================================

def set_quiet_mode(quiet: bool) -> None:
	global _QUIET_MODE
	_QUIET_MODE = bool(quiet)
	return

#============================================

def is_quiet_mode() -> bool:
	return _QUIET_MODE

#============================================

def note(message: str) -> None:
	"""
	Print a console line unless quiet mode is on.

	Uses tqdm.write so lines do not break an active progress bar.
	"""
	if is_quiet_mode():
		return
	tqdm.write(message)
	return

#============================================

def error(message: str) -> None:
	"""Print a console line, even in quiet mode."""
	tqdm.write(message)
	return

#============================================

def ensure_dir_exists(dirpath: str) -> None:
	if not os.path.isdir(dirpath):
		raise RuntimeError(f"folder not found: {dirpath}")
	return

#============================================

def normalize_extension(extension: str) -> str:
	value = str(extension).strip().lower()
	if value == "":
		raise RuntimeError("extension must not be empty")
	if not value.startswith('.'):
		value = '.' + value
	return value

#============================================

def list_anim_files(dirpath: str, extension: str) -> list:
	"""
	List files in a folder with the given extension, sorted by name.

	Args:
		dirpath: Folder to scan, not recursive.
		extension: Extension such as '.nuanmb', compared case-insensitively.

	Returns:
		list: Full paths of the matching files.
	"""
	ensure_dir_exists(dirpath)
	wanted = normalize_extension(extension)
	paths = []
	for filename in sorted(os.listdir(dirpath)):
		fullpath = os.path.join(dirpath, filename)
		if not os.path.isfile(fullpath):
			continue
		_, ext = os.path.splitext(filename)
		if ext.lower() != wanted:
			continue
		paths.append(fullpath)
	return paths

#============================================

def same_folder(first: str, second: str) -> bool:
	if os.path.exists(first) and os.path.exists(second):
		return os.path.samefile(first, second)
	return os.path.realpath(first) == os.path.realpath(second)

#============================================

def align_up(value: int, alignment: int) -> int:
	"""Round up to next multiple of alignment."""
	return (value + alignment - 1) & ~(alignment - 1)

#============================================

def format_elapsed(start_time: float) -> str:
	elapsed = time.time() - start_time
	if elapsed < 1.0:
		return f"{elapsed * 1000.0:.1f}ms"
	return f"{elapsed:.3f}s"
