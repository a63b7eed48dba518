#!/usr/bin/env python3

"""
Helpers to build small synthetic anim containers for tests.
"""

# Standard Library
import os
import sys

REPO_ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
if REPO_ROOT not in sys.path:
	sys.path.insert(0, REPO_ROOT)

# local repo modules
from animsplicelib.codec.nuanmb import UnkData
from animsplicelib.core.container import AnimMetadata
from animsplicelib.core.container import AnimVersion
from animsplicelib.core.container import Container
from animsplicelib.core.container import Group
from animsplicelib.core.container import GroupType
from animsplicelib.core.container import Node
from animsplicelib.core.container import Track
from animsplicelib.core.container import TrackValues
from animsplicelib.core.container import Transform

# track flags: compression type in the high byte, track type in the low byte
TRACK_FLAGS = {
	GroupType.TRANSFORM: 0x0101,
	GroupType.VISIBILITY: 0x0108,
	GroupType.MATERIAL: 0x0109,
}

#============================================

def make_transform(x: float) -> Transform:
	return Transform(
		translation=(x, 0.0, 0.0),
		rotation=(0.0, 0.0, 0.0, 1.0),
		scale=(1.0, 1.0, 1.0),
	)

#============================================

def transform_values(count: int, start: float = 0.0) -> TrackValues:
	samples = tuple(make_transform(start + index) for index in range(count))
	return TrackValues(kind=GroupType.TRANSFORM, samples=samples)

#============================================

def build_container(groups: dict, version: AnimVersion = AnimVersion.V20,
	final_frame_index: float = 9.0, name: str = "test_anim", values: dict = None) -> Container:
	"""
	Build a container whose buffer packs the given payloads in order.

	Args:
		groups: GroupType -> list of (node name, payload bytes or list of payloads).
		version: Container version.
		final_frame_index: Header final frame index.
		name: Header name.
		values: Optional (GroupType, node name) -> TrackValues for the first track.

	Returns:
		Container: Packed container.
	"""
	if values is None:
		values = {}
	buffer = bytearray()
	new_groups = []
	for group_type, node_specs in groups.items():
		nodes = []
		for node_name, payloads in node_specs:
			if isinstance(payloads, bytes):
				payloads = [payloads]
			tracks = []
			for index, payload in enumerate(payloads):
				track_name = group_type.label if index == 0 else f"{group_type.label}{index}"
				track_values = None
				if index == 0:
					track_values = values.get((group_type, node_name))
				tracks.append(Track(
					name=track_name,
					flags=TRACK_FLAGS.get(group_type, 0x0103),
					frame_count=len(payload),
					transform_flags=0,
					data_offset=len(buffer),
					data_size=len(payload),
					values=track_values,
				))
				buffer.extend(payload)
			nodes.append(Node(name=node_name, tracks=tuple(tracks)))
		new_groups.append(Group(group_type=group_type, nodes=tuple(nodes)))
	unk_data = None
	if version is AnimVersion.V21:
		unk_data = UnkData()
	metadata = AnimMetadata(final_frame_index=final_frame_index, unk1=1, unk2=3,
		name=name, unk_data=unk_data)
	return Container(version=version, metadata=metadata, groups=tuple(new_groups),
		buffer=bytes(buffer))

#============================================

def legacy_container() -> Container:
	return Container(version=AnimVersion.V12, legacy_body=b'\x01\x02\x03\x04' * 4)

#============================================

def payloads_by_node(container: Container, group_type: GroupType) -> list:
	"""
	Return [(node name, [payload bytes per track])] for one group, in order.
	"""
	group = container.find_group(group_type)
	if group is None:
		return None
	result = []
	for node in group.nodes:
		result.append((node.name, [container.track_payload(track) for track in node.tracks]))
	return result
