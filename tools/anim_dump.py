#!/usr/bin/env python3

"""
anim_dump.py

Print the header, groups, nodes and track descriptors of .nuanmb files.

Usage:
	python tools/anim_dump.py <file.nuanmb> [more.nuanmb ...]
"""

# Standard Library
import argparse
import os
import sys

REPO_ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
if REPO_ROOT not in sys.path:
	sys.path.insert(0, REPO_ROOT)

# local repo modules
from animsplicelib.codec import nuanmb
from animsplicelib.core.container import Container
from animsplicelib.core.errors import AnimSpliceError

#============================================

def describe_container(container: Container) -> list:
	"""
	Describe a container as printable lines.

	Args:
		container: Decoded container.

	Returns:
		list: Lines of text, one per header field, group, node and track.
	"""
	lines = []
	lines.append(f"version = {container.version.label}")
	if container.is_legacy:
		lines.append(f"legacy body = {len(container.legacy_body)} bytes (not parsed)")
		return lines
	metadata = container.metadata
	lines.append(f"name = {metadata.name!r}")
	lines.append(f"final_frame_index = {metadata.final_frame_index}")
	lines.append(f"unk1/unk2 = {metadata.unk1}/{metadata.unk2}")
	lines.append(f"buffer = {len(container.buffer)} bytes")
	for group in container.groups:
		lines.append(f"group {group.group_type.label}: {len(group.nodes)} nodes")
		for node in group.nodes:
			lines.append(f"  node {node.name!r}: {len(node.tracks)} tracks")
			for track in node.tracks:
				lines.append(
					f"    track {track.name!r}: type=0x{track.track_type:02X} "
					f"compression=0x{track.compression_type:02X} frames={track.frame_count} "
					f"transform_flags=0x{track.transform_flags:X} "
					f"offset=0x{track.data_offset:X} size={track.data_size}"
				)
	return lines

#============================================

def parse_args():
	"""
	Parse command-line arguments.
	"""
	parser = argparse.ArgumentParser(description="Dump the structure of .nuanmb files")
	parser.add_argument('anim_files', nargs='+', help='anim files to dump')
	args = parser.parse_args()
	return args

#============================================

def main():
	args = parse_args()
	status = 0
	for filepath in args.anim_files:
		print(f"=== {os.path.basename(filepath)}")
		try:
			container = nuanmb.read_container(filepath)
		except AnimSpliceError as exc:
			print(f"ERROR: {exc}")
			status = 1
			continue
		for line in describe_container(container):
			print(line)
	sys.exit(status)


if __name__ == '__main__':
	main()
