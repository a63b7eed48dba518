#!/usr/bin/env python3

"""
Byte codec for SSBH .nuanmb animation files.

Layout notes
  - 16 byte file header: b'HBSS', u32 0x40, 8 zero bytes.
  - b'MINA', u16 major, u16 minor, then the version body.
  - Pointers are u64 offsets relative to the pointer field itself, 0 = null.
  - Arrays are (pointer, u64 count). The byte buffer is (pointer, u64 size).
  - Strings are null terminated, 4 byte aligned.

Only the v2.0 and v2.1 bodies are parsed. A v1.2 body is kept as raw bytes so
the legacy file can be recognized and rejected by the engines.
"""

import collections
import os
import struct
from dataclasses import dataclass
from typing import Tuple

from animsplicelib.core import utils
from animsplicelib.core.container import AnimMetadata
from animsplicelib.core.container import AnimVersion
from animsplicelib.core.container import Container
from animsplicelib.core.container import Group
from animsplicelib.core.container import GroupType
from animsplicelib.core.container import Node
from animsplicelib.core.container import Track
from animsplicelib.core.errors import DecodeError
from animsplicelib.core.errors import EncodeError

FILE_MAGIC = b'HBSS'
FILE_HEADER_VALUE = 0x40
ANIM_MAGIC = b'MINA'
HEADER_SIZE = 0x10
BODY_OFFSET = 0x18

# struct sizes
ARRAY_SIZE = 16
GROUP_SIZE = 24
NODE_SIZE = 24
TRACK_SIZE = 32
UNK_ITEM1_SIZE = 24
UNK_SUB_ITEM_SIZE = 8
UNK_ITEM2_SIZE = 24
V20_BODY_SIZE = 0x30
V21_BODY_SIZE = 0x50

MAX_DATA_OFFSET = 0xFFFFFFFF

#============================================
# v2.1 trailing records, carried through opaque to the engines
#============================================

@dataclass(frozen=True)
class UnkSubItem:
	unk1: int = 0
	unk2: int = 0

@dataclass(frozen=True)
class UnkItem1:
	unk1: int = 0
	unk2: Tuple[UnkSubItem, ...] = ()

@dataclass(frozen=True)
class UnkItem2:
	unk1: str = None
	unk2: Tuple[UnkItem1, ...] = ()

@dataclass(frozen=True)
class UnkData:
	unk1: Tuple[UnkItem1, ...] = ()
	unk2: Tuple[UnkItem2, ...] = ()

#============================================

class SsbhReader():
	def __init__(self, data: bytes):
		self.data = data

	#============================
	def unpack(self, fmt: str, offset: int) -> tuple:
		try:
			return struct.unpack_from(fmt, self.data, offset)
		except struct.error:
			raise DecodeError(f"unexpected end of data at 0x{offset:X}")

	#============================
	def read(self, fmt: str, offset: int):
		return self.unpack(fmt, offset)[0]

	#============================
	def pointer(self, offset: int):
		relative = self.read('<Q', offset)
		if relative == 0:
			return None
		target = offset + relative
		if target >= len(self.data):
			raise DecodeError(f"pointer at 0x{offset:X} points past the end of the file")
		return target

	#============================
	def string(self, offset: int):
		target = self.pointer(offset)
		if target is None:
			return None
		end = self.data.find(b'\x00', target)
		if end < 0:
			raise DecodeError(f"unterminated string at 0x{target:X}")
		try:
			return self.data[target:end].decode('utf-8')
		except UnicodeDecodeError:
			raise DecodeError(f"string at 0x{target:X} is not valid utf-8")

	#============================
	def array(self, offset: int, element_size: int, read_element) -> tuple:
		count = self.read('<Q', offset + 8)
		if count == 0:
			return ()
		target = self.pointer(offset)
		if target is None:
			raise DecodeError(f"array at 0x{offset:X} has {count} elements but a null pointer")
		if target + count * element_size > len(self.data):
			raise DecodeError(f"array at 0x{offset:X} runs past the end of the file")
		return tuple(read_element(target + index * element_size) for index in range(count))

	#============================
	def byte_buffer(self, offset: int) -> bytes:
		size = self.read('<Q', offset + 8)
		if size == 0:
			return b''
		target = self.pointer(offset)
		if target is None or target + size > len(self.data):
			raise DecodeError(f"byte buffer at 0x{offset:X} runs past the end of the file")
		return bytes(self.data[target:target + size])

#============================================

class AnimDecoder():
	def __init__(self, data: bytes):
		self.reader = SsbhReader(data)
		self.data = data

	#============================
	def decode(self) -> Container:
		if len(self.data) < BODY_OFFSET:
			raise DecodeError("file is too short for an SSBH header")
		if self.data[0:4] != FILE_MAGIC:
			raise DecodeError(f"bad file magic {self.data[0:4]!r}, expected {FILE_MAGIC!r}")
		if self.data[HEADER_SIZE:HEADER_SIZE + 4] != ANIM_MAGIC:
			raise DecodeError(f"not an anim file, magic {self.data[HEADER_SIZE:HEADER_SIZE + 4]!r}")
		(major, minor) = self.reader.unpack('<HH', HEADER_SIZE + 4)
		try:
			version = AnimVersion.from_numbers(major, minor)
		except ValueError as exc:
			raise DecodeError(str(exc))
		if version.is_legacy:
			return Container(version=version, legacy_body=bytes(self.data[BODY_OFFSET:]))
		return self._decode_modern(version)

	#============================
	def _decode_modern(self, version: AnimVersion) -> Container:
		reader = self.reader
		base = BODY_OFFSET
		(final_frame_index, unk1, unk2) = reader.unpack('<fHH', base)
		name = reader.string(base + 0x08)
		groups = reader.array(base + 0x10, GROUP_SIZE, self._read_group)
		buffer = reader.byte_buffer(base + 0x20)
		unk_data = None
		if version is AnimVersion.V21:
			unk_data = self._read_unk_data(base + 0x30)
		metadata = AnimMetadata(
			final_frame_index=final_frame_index,
			unk1=unk1,
			unk2=unk2,
			name=name,
			unk_data=unk_data,
		)
		return Container(version=version, metadata=metadata, groups=groups, buffer=buffer)

	#============================
	def _read_group(self, offset: int) -> Group:
		raw_type = self.reader.read('<Q', offset)
		try:
			group_type = GroupType(raw_type)
		except ValueError:
			raise DecodeError(f"unsupported group type {raw_type} at 0x{offset:X}")
		nodes = self.reader.array(offset + 8, NODE_SIZE, self._read_node)
		return Group(group_type=group_type, nodes=nodes)

	#============================
	def _read_node(self, offset: int) -> Node:
		name = self.reader.string(offset)
		tracks = self.reader.array(offset + 8, TRACK_SIZE, self._read_track)
		return Node(name=name or "", tracks=tracks)

	#============================
	def _read_track(self, offset: int) -> Track:
		name = self.reader.string(offset)
		(flags, frame_count, transform_flags, data_offset, data_size) = \
			self.reader.unpack('<IIIIQ', offset + 8)
		return Track(
			name=name or "",
			flags=flags,
			frame_count=frame_count,
			transform_flags=transform_flags,
			data_offset=data_offset,
			data_size=data_size,
		)

	#============================
	def _read_unk_data(self, offset: int) -> UnkData:
		unk1 = self.reader.array(offset, UNK_ITEM1_SIZE, self._read_unk_item1)
		unk2 = self.reader.array(offset + ARRAY_SIZE, UNK_ITEM2_SIZE, self._read_unk_item2)
		return UnkData(unk1=unk1, unk2=unk2)

	#============================
	def _read_unk_item1(self, offset: int) -> UnkItem1:
		unk1 = self.reader.read('<Q', offset)
		unk2 = self.reader.array(offset + 8, UNK_SUB_ITEM_SIZE, self._read_unk_sub_item)
		return UnkItem1(unk1=unk1, unk2=unk2)

	#============================
	def _read_unk_sub_item(self, offset: int) -> UnkSubItem:
		(unk1, unk2) = self.reader.unpack('<II', offset)
		return UnkSubItem(unk1=unk1, unk2=unk2)

	#============================
	def _read_unk_item2(self, offset: int) -> UnkItem2:
		unk1 = self.reader.string(offset)
		unk2 = self.reader.array(offset + 8, UNK_ITEM1_SIZE, self._read_unk_item1)
		return UnkItem2(unk1=unk1, unk2=unk2)

#============================================

class SsbhWriter():
	"""
	Writes structs inline and the data they point to afterwards.

	Pointed-to data is queued and laid out breadth first once the struct
	that owns the pointer has been written.
	"""
	def __init__(self):
		self.data = bytearray()
		self.pending = collections.deque()

	#============================
	def reserve(self, size: int) -> int:
		position = len(self.data)
		self.data.extend(bytes(size))
		return position

	#============================
	def put(self, fmt: str, offset: int, *values) -> None:
		try:
			struct.pack_into(fmt, self.data, offset, *values)
		except struct.error as exc:
			raise EncodeError(f"value out of range at 0x{offset:X}: {exc}")
		return

	#============================
	def pad_to(self, alignment: int) -> None:
		self.reserve(utils.align_up(len(self.data), alignment) - len(self.data))
		return

	#============================
	def defer(self, pointer_offset: int, alignment: int, write_data) -> None:
		self.pending.append((pointer_offset, alignment, write_data))
		return

	#============================
	def flush(self) -> None:
		while len(self.pending) > 0:
			(pointer_offset, alignment, write_data) = self.pending.popleft()
			self.pad_to(alignment)
			self.put('<Q', pointer_offset, len(self.data) - pointer_offset)
			write_data()
		return

	#============================
	def string(self, offset: int, value) -> None:
		if value is None:
			return
		encoded = value.encode('utf-8') + b'\x00'
		def write_data():
			position = self.reserve(utils.align_up(len(encoded), 4))
			self.data[position:position + len(encoded)] = encoded
		self.defer(offset, 4, write_data)
		return

	#============================
	def array(self, offset: int, elements, element_size: int, write_element) -> None:
		elements = tuple(elements)
		self.put('<Q', offset + 8, len(elements))
		if len(elements) == 0:
			return
		def write_data():
			start = self.reserve(element_size * len(elements))
			for index, element in enumerate(elements):
				write_element(start + index * element_size, element)
		self.defer(offset, 8, write_data)
		return

	#============================
	def byte_buffer(self, offset: int, payload: bytes) -> None:
		self.put('<Q', offset + 8, len(payload))
		if len(payload) == 0:
			return
		def write_data():
			position = self.reserve(len(payload))
			self.data[position:position + len(payload)] = payload
		self.defer(offset, 16, write_data)
		return

#============================================

class AnimEncoder():
	def __init__(self, container: Container):
		self.container = container
		self.writer = SsbhWriter()

	#============================
	def encode(self) -> bytes:
		container = self.container
		writer = self.writer
		writer.reserve(HEADER_SIZE)
		writer.data[0:4] = FILE_MAGIC
		writer.put('<I', 4, FILE_HEADER_VALUE)
		writer.reserve(8)
		writer.data[HEADER_SIZE:HEADER_SIZE + 4] = ANIM_MAGIC
		writer.put('<HH', HEADER_SIZE + 4, container.version.major, container.version.minor)
		if container.version.is_legacy:
			writer.data.extend(container.legacy_body)
			return bytes(writer.data)
		if container.metadata is None:
			raise EncodeError(f"{container.version.label} anim has no header metadata")
		self._write_body()
		writer.flush()
		writer.pad_to(4)
		return bytes(writer.data)

	#============================
	def _write_body(self) -> None:
		container = self.container
		metadata = container.metadata
		writer = self.writer
		body_size = V20_BODY_SIZE
		if container.version is AnimVersion.V21:
			body_size = V21_BODY_SIZE
		base = writer.reserve(body_size)
		writer.put('<fHH', base, metadata.final_frame_index, metadata.unk1, metadata.unk2)
		writer.string(base + 0x08, metadata.name)
		writer.array(base + 0x10, container.groups, GROUP_SIZE, self._write_group)
		writer.byte_buffer(base + 0x20, container.buffer)
		if container.version is AnimVersion.V21:
			unk_data = metadata.unk_data
			if unk_data is None:
				unk_data = UnkData()
			self._write_unk_data(base + 0x30, unk_data)
		return

	#============================
	def _write_group(self, offset: int, group: Group) -> None:
		self.writer.put('<Q', offset, int(group.group_type))
		self.writer.array(offset + 8, group.nodes, NODE_SIZE, self._write_node)
		return

	#============================
	def _write_node(self, offset: int, node: Node) -> None:
		self.writer.string(offset, node.name)
		self.writer.array(offset + 8, node.tracks, TRACK_SIZE, self._write_track)
		return

	#============================
	def _write_track(self, offset: int, track: Track) -> None:
		if track.data_offset > MAX_DATA_OFFSET:
			raise EncodeError(
				f"track `{track.name}` data offset {track.data_offset} does not fit in 32 bits"
			)
		self.writer.string(offset, track.name)
		self.writer.put('<IIIIQ', offset + 8, track.flags, track.frame_count,
			track.transform_flags, track.data_offset, track.data_size)
		return

	#============================
	def _write_unk_data(self, offset: int, unk_data: UnkData) -> None:
		self.writer.array(offset, unk_data.unk1, UNK_ITEM1_SIZE, self._write_unk_item1)
		self.writer.array(offset + ARRAY_SIZE, unk_data.unk2, UNK_ITEM2_SIZE,
			self._write_unk_item2)
		return

	#============================
	def _write_unk_item1(self, offset: int, item: UnkItem1) -> None:
		self.writer.put('<Q', offset, item.unk1)
		self.writer.array(offset + 8, item.unk2, UNK_SUB_ITEM_SIZE, self._write_unk_sub_item)
		return

	#============================
	def _write_unk_sub_item(self, offset: int, item: UnkSubItem) -> None:
		self.writer.put('<II', offset, item.unk1, item.unk2)
		return

	#============================
	def _write_unk_item2(self, offset: int, item: UnkItem2) -> None:
		self.writer.string(offset, item.unk1)
		self.writer.array(offset + 8, item.unk2, UNK_ITEM1_SIZE, self._write_unk_item1)
		return

#============================================

def decode(data: bytes) -> Container:
	return AnimDecoder(data).decode()

#============================================

def encode(container: Container) -> bytes:
	return AnimEncoder(container).encode()

#============================================

def read_container(path: str) -> Container:
	"""
	Read and decode one .nuanmb file.

	Raises:
		DecodeError: the file is missing, unreadable or malformed, with the path attached.
	"""
	try:
		with open(path, 'rb') as anim_file:
			data = anim_file.read()
	except OSError as exc:
		raise DecodeError(exc.strerror or str(exc), path=path)
	try:
		return decode(data)
	except DecodeError as exc:
		raise DecodeError(str(exc), path=path)

#============================================

def write_container(container: Container, path: str) -> None:
	try:
		data = encode(container)
	except EncodeError as exc:
		raise EncodeError(str(exc), path=path)
	parent = os.path.dirname(os.path.abspath(path))
	try:
		if not os.path.isdir(parent):
			os.makedirs(parent)
		with open(path, 'wb') as anim_file:
			anim_file.write(data)
	except OSError as exc:
		raise EncodeError(exc.strerror or str(exc), path=path)
	return
