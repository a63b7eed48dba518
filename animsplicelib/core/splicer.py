#!/usr/bin/env python3

"""
Splice engine: layer the new content of a modified anim onto a reference.

Transform bones always come from the reference; bones only the modified
anim has are appended after them. Visibility and Material groups are taken
whole from the modified anim when it has them, else from the reference. Camera
groups are not carried.
All payloads are repacked into a fresh buffer.
"""

import dataclasses

from animsplicelib.core.container import Container
from animsplicelib.core.container import Group
from animsplicelib.core.container import GroupType
from animsplicelib.core.container import Node
from animsplicelib.core.container import Track
from animsplicelib.core.errors import MalformedSourceError

# groups that are swapped whole, in emission order
FALLBACK_GROUP_TYPES = (GroupType.VISIBILITY, GroupType.MATERIAL)

#============================================

class BufferPacker():
	"""
	Append-only payload buffer with a running write cursor.
	"""
	def __init__(self):
		self.buffer = bytearray()

	#============================
	@property
	def cursor(self) -> int:
		return len(self.buffer)

	#============================
	def append_track(self, track: Track, source: Container) -> Track:
		payload = source.track_payload(track)
		if len(payload) != track.data_size:
			raise MalformedSourceError(
				f"track `{track.name}` payload is {len(payload)} bytes, expected {track.data_size}"
			)
		new_track = dataclasses.replace(track, data_offset=self.cursor)
		self.buffer.extend(payload)
		return new_track

	#============================
	def append_node(self, node: Node, source: Container) -> Node:
		new_tracks = tuple(self.append_track(track, source) for track in node.tracks)
		return Node(name=node.name, tracks=new_tracks)

	#============================
	def getvalue(self) -> bytes:
		return bytes(self.buffer)

#============================================

class AnimSplicer():
	def __init__(self, reference: Container, modified: Container):
		self.reference = reference
		self.modified = modified
		self.packer = BufferPacker()

	#============================
	def splice(self) -> Container:
		self.reference.require_modern('reference')
		self.modified.require_modern('modified')
		self.reference.check_descriptors()
		self.modified.check_descriptors()
		new_groups = []
		transform_group = self._splice_transform_group()
		if transform_group is not None:
			new_groups.append(transform_group)
		for group_type in FALLBACK_GROUP_TYPES:
			new_group = self._copy_fallback_group(group_type)
			if new_group is not None:
				new_groups.append(new_group)
		return Container(
			version=self.reference.version,
			metadata=self.reference.metadata,
			groups=tuple(new_groups),
			buffer=self.packer.getvalue(),
		)

	#============================
	def _splice_transform_group(self) -> Group:
		reference_group = self.reference.find_group(GroupType.TRANSFORM)
		modified_group = self.modified.find_group(GroupType.TRANSFORM)
		if reference_group is None and modified_group is None:
			return None
		new_nodes = []
		reference_names = set()
		if reference_group is not None:
			for node in reference_group.nodes:
				reference_names.add(node.name)
				new_nodes.append(self.packer.append_node(node, self.reference))
		if modified_group is not None:
			added_names = set()
			for node in modified_group.nodes:
				# exact match, no case folding
				if node.name in reference_names or node.name in added_names:
					continue
				added_names.add(node.name)
				new_nodes.append(self.packer.append_node(node, self.modified))
		return Group(group_type=GroupType.TRANSFORM, nodes=tuple(new_nodes))

	#============================
	def _copy_fallback_group(self, group_type: GroupType) -> Group:
		source = self.modified
		group = self.modified.find_group(group_type)
		if group is None:
			source = self.reference
			group = self.reference.find_group(group_type)
		if group is None:
			return None
		new_nodes = tuple(self.packer.append_node(node, source) for node in group.nodes)
		return Group(group_type=group_type, nodes=new_nodes)

#============================================

def splice(reference: Container, modified: Container) -> Container:
	"""
	Merge a modified anim onto its reference.

	Args:
		reference: Baseline container; supplies metadata and all existing bones.
		modified: Edited container; supplies new bones and its
			Visibility/Material groups.

	Returns:
		Container: New container with a packed buffer.

	Raises:
		UnsupportedVersionError: either input is the legacy v1.2 variant.
		MalformedSourceError: a source track addresses bytes outside its buffer
			or overlaps another track.
	"""
	splicer = AnimSplicer(reference, modified)
	return splicer.splice()
