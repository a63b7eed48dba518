#!/usr/bin/env python3

"""
In-memory model of a decoded .nuanmb animation container.

A Container owns one payload buffer and a tree of groups, nodes and tracks.
Tracks never hold payload bytes; they describe a (data_offset, data_size)
window into the owning container's buffer.
"""

import enum
from dataclasses import dataclass
from dataclasses import field
from typing import Any, Optional, Tuple

from animsplicelib.core.errors import MalformedSourceError
from animsplicelib.core.errors import UnsupportedVersionError

#============================================

class AnimVersion(enum.Enum):
	V12 = (1, 2)
	V20 = (2, 0)
	V21 = (2, 1)

	@property
	def major(self) -> int:
		return self.value[0]

	@property
	def minor(self) -> int:
		return self.value[1]

	@property
	def is_legacy(self) -> bool:
		return self is AnimVersion.V12

	@property
	def label(self) -> str:
		return f"v{self.major}.{self.minor}"

	@classmethod
	def from_numbers(cls, major: int, minor: int) -> 'AnimVersion':
		for version in cls:
			if version.value == (major, minor):
				return version
		raise ValueError(f"unknown anim version {major}.{minor}")

#============================================

class GroupType(enum.IntEnum):
	TRANSFORM = 1
	VISIBILITY = 2
	MATERIAL = 4
	CAMERA = 5

	@property
	def label(self) -> str:
		return self.name.capitalize()

#============================================

@dataclass(frozen=True)
class Transform:
	"""Transform sample for a single frame."""
	translation: Tuple[float, float, float]
	rotation: Tuple[float, float, float, float]
	scale: Tuple[float, float, float]

	def __str__(self) -> str:
		def fmt(values):
			return "(" + ", ".join(repr(v) for v in values) + ")"
		return (f"translation={fmt(self.translation)} "
			f"rotation={fmt(self.rotation)} scale={fmt(self.scale)}")

#============================================

@dataclass(frozen=True)
class TrackValues:
	"""
	Decoded per-frame samples of one track.

	kind is the category whose sample variant the samples use, or None when
	the sequence is empty.
	"""
	kind: Optional[GroupType]
	samples: Tuple[Any, ...] = ()

	@property
	def is_empty(self) -> bool:
		return len(self.samples) == 0

	def __len__(self) -> int:
		return len(self.samples)

#============================================

@dataclass(frozen=True)
class Track:
	name: str
	flags: int
	frame_count: int
	transform_flags: int
	data_offset: int
	data_size: int
	values: Optional[TrackValues] = field(default=None, compare=False)

	@property
	def data_end(self) -> int:
		return self.data_offset + self.data_size

	@property
	def track_type(self) -> int:
		return self.flags & 0xFF

	@property
	def compression_type(self) -> int:
		return (self.flags >> 8) & 0xFF

#============================================

@dataclass(frozen=True)
class Node:
	name: str
	tracks: Tuple[Track, ...] = ()

#============================================

@dataclass(frozen=True)
class Group:
	group_type: GroupType
	nodes: Tuple[Node, ...] = ()

	def find_node(self, name: str) -> Optional[Node]:
		for node in self.nodes:
			if node.name == name:
				return node
		return None

	def node_names(self) -> list:
		return [node.name for node in self.nodes]

#============================================

@dataclass(frozen=True)
class AnimMetadata:
	"""Scalar header fields, carried through a splice unchanged."""
	final_frame_index: float
	unk1: int = 1
	unk2: int = 3
	name: Optional[str] = None
	unk_data: Any = None

#============================================

@dataclass(frozen=True)
class Container:
	version: AnimVersion
	metadata: Optional[AnimMetadata] = None
	groups: Tuple[Group, ...] = ()
	buffer: bytes = b''
	legacy_body: bytes = field(default=b'', repr=False)

	#============================
	@property
	def is_legacy(self) -> bool:
		return self.version.is_legacy

	#============================
	def require_modern(self, which: str) -> None:
		if self.version.is_legacy:
			raise UnsupportedVersionError(which, self.version)
		return

	#============================
	def find_group(self, group_type: GroupType) -> Optional[Group]:
		for group in self.groups:
			if group.group_type == group_type:
				return group
		return None

	#============================
	def iter_tracks(self):
		"""Yield (group, node, track) in emission order."""
		for group in self.groups:
			for node in group.nodes:
				for track in node.tracks:
					yield (group, node, track)

	#============================
	def track_payload(self, track: Track) -> bytes:
		if track.data_offset < 0 or track.data_size < 0:
			raise MalformedSourceError(
				f"track `{track.name}` has a negative offset or size"
			)
		if track.data_end > len(self.buffer):
			raise MalformedSourceError(
				f"track `{track.name}` addresses bytes {track.data_offset}..{track.data_end} "
				f"but the buffer holds only {len(self.buffer)} bytes"
			)
		return bytes(self.buffer[track.data_offset:track.data_end])

	#============================
	def check_descriptors(self) -> None:
		"""
		Verify every track descriptor is in range and none overlap.

		Raises:
			MalformedSourceError: on the first bad descriptor.
		"""
		spans = []
		for group, node, track in self.iter_tracks():
			self.track_payload(track)
			if track.data_size > 0:
				spans.append((track.data_offset, track.data_end, node.name, track.name))
		spans.sort()
		for previous, current in zip(spans, spans[1:]):
			if current[0] < previous[1]:
				raise MalformedSourceError(
					f"track `{current[3]}` of `{current[2]}` overlaps "
					f"track `{previous[3]}` of `{previous[2]}`"
				)
		return
