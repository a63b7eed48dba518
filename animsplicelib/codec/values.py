#!/usr/bin/env python3

"""
Per-frame value view of anim tracks, decoded with ssbh_data_py.

The byte codec only knows where payloads live. Decompressing them into
frames is left to ssbh_data, and the result is attached to the matching
tracks of a decoded Container.
"""

import dataclasses

import ssbh_data_py

from animsplicelib.core.container import Container
from animsplicelib.core.container import Group
from animsplicelib.core.container import GroupType
from animsplicelib.core.container import Node
from animsplicelib.core.container import TrackValues
from animsplicelib.core.container import Transform
from animsplicelib.core.errors import DecodeError

GROUP_TYPE_NAMES = {
	'Transform': GroupType.TRANSFORM,
	'Visibility': GroupType.VISIBILITY,
	'Material': GroupType.MATERIAL,
	'Camera': GroupType.CAMERA,
}

#============================================

def _float_tuple(values) -> tuple:
	return tuple(float(value) for value in values)

#============================================

def _freeze(value):
	if isinstance(value, (bool, int, float, str)):
		return value
	try:
		return tuple(_freeze(item) for item in value)
	except TypeError:
		return value

#============================================

def convert_sample(value):
	"""
	Convert one ssbh_data_py sample to a comparable python value.

	Transform samples become Transform records of float tuples, booleans stay
	booleans, and everything else is frozen into tuples where it is a sequence.
	"""
	if hasattr(value, 'translation') and hasattr(value, 'rotation') and hasattr(value, 'scale'):
		return Transform(
			translation=_float_tuple(value.translation),
			rotation=_float_tuple(value.rotation),
			scale=_float_tuple(value.scale),
		)
	return _freeze(value)

#============================================

def classify_samples(samples: tuple):
	if len(samples) == 0:
		return None
	first = samples[0]
	if isinstance(first, Transform):
		return GroupType.TRANSFORM
	if isinstance(first, bool):
		return GroupType.VISIBILITY
	return GroupType.MATERIAL

#============================================

def convert_track_values(raw_values) -> TrackValues:
	samples = tuple(convert_sample(value) for value in raw_values)
	return TrackValues(kind=classify_samples(samples), samples=samples)

#============================================

def _group_type_of(raw_group) -> GroupType:
	raw_type = raw_group.group_type
	name = getattr(raw_type, 'name', None)
	if name is None:
		name = str(raw_type).split('.')[-1]
	group_type = GROUP_TYPE_NAMES.get(name)
	if group_type is None:
		raise DecodeError(f"unsupported group type {name}")
	return group_type

#============================================

def build_value_table(anim_data) -> dict:
	"""
	Flatten ssbh_data_py anim data into a lookup table.

	Returns:
		dict: (GroupType, node name, track name) -> TrackValues. The first
		track wins when names repeat.
	"""
	table = {}
	for raw_group in anim_data.groups:
		group_type = _group_type_of(raw_group)
		for raw_node in raw_group.nodes:
			for raw_track in raw_node.tracks:
				key = (group_type, raw_node.name, raw_track.name)
				if key in table:
					continue
				table[key] = convert_track_values(raw_track.values)
	return table

#============================================

def read_values(path: str) -> dict:
	try:
		anim_data = ssbh_data_py.anim_data.read_anim(path)
	except Exception as exc:
		# ssbh_data_py raises its own exception types for unreadable files
		raise DecodeError(f"track values could not be decoded: {exc}", path=path)
	try:
		return build_value_table(anim_data)
	except DecodeError as exc:
		raise DecodeError(str(exc), path=path)

#============================================

def attach_values(container: Container, table: dict) -> Container:
	"""
	Return a copy of container whose tracks carry decoded values.

	Tracks with no entry in the table get an empty TrackValues.
	"""
	if container.is_legacy:
		return container
	new_groups = []
	for group in container.groups:
		new_nodes = []
		for node in group.nodes:
			new_tracks = []
			for track in node.tracks:
				values = table.get((group.group_type, node.name, track.name))
				if values is None:
					values = TrackValues(kind=None)
				new_tracks.append(dataclasses.replace(track, values=values))
			new_nodes.append(Node(name=node.name, tracks=tuple(new_tracks)))
		new_groups.append(Group(group_type=group.group_type, nodes=tuple(new_nodes)))
	return dataclasses.replace(container, groups=tuple(new_groups))
