#!/usr/bin/env python3

"""
Validation engine: check that a candidate anim kept the reference's
Transform data exactly.

Only Transform groups are compared. Visibility and Material are editable.
"""

import enum
from dataclasses import dataclass
from typing import Any, Optional

from animsplicelib.core import utils
from animsplicelib.core.container import Container
from animsplicelib.core.container import GroupType
from animsplicelib.core.container import Node

#============================================

class Verdict(enum.Enum):
	SAFE = 'safe'
	WARNING = 'warning'
	UNSAFE = 'unsafe'

#============================================

@dataclass(frozen=True)
class SafetyRating:
	verdict: Verdict
	reason: Optional[str] = None
	bone: Optional[str] = None
	frame: Optional[int] = None
	expected: Any = None
	actual: Any = None

	@classmethod
	def safe(cls) -> 'SafetyRating':
		return cls(Verdict.SAFE)

	@classmethod
	def warning(cls, reason: str) -> 'SafetyRating':
		return cls(Verdict.WARNING, reason)

	@classmethod
	def unsafe(cls, reason: str, bone: str = None, frame: int = None,
		expected=None, actual=None) -> 'SafetyRating':
		return cls(Verdict.UNSAFE, reason, bone=bone, frame=frame,
			expected=expected, actual=actual)

	@property
	def is_safe(self) -> bool:
		return self.verdict is Verdict.SAFE

	@property
	def is_warning(self) -> bool:
		return self.verdict is Verdict.WARNING

	@property
	def is_unsafe(self) -> bool:
		return self.verdict is Verdict.UNSAFE

#============================================

class AnimValidator():
	def __init__(self, reference: Container, candidate: Container):
		self.reference = reference
		self.candidate = candidate
		self.skipped_bones = []

	#============================
	def validate(self) -> SafetyRating:
		rating = self.check_header()
		if rating is None:
			rating = self._check_transform_groups()
		if rating is None:
			rating = SafetyRating.safe()
		return rating

	#============================
	def check_header(self) -> SafetyRating:
		"""
		Run the checks that need no track values.

		Returns:
			SafetyRating: the first failing rating, or None when both pass.
		"""
		rating = self._check_versions()
		if rating is None:
			rating = self._check_final_frame_index()
		return rating

	#============================
	def _check_versions(self) -> SafetyRating:
		if self.candidate.is_legacy:
			return SafetyRating.warning(
				"Can't validate modified file, its version is "
				f"{self.candidate.version.label} and could not have been made with the anim splicer!"
			)
		if self.reference.is_legacy:
			return SafetyRating.unsafe(
				"The modified anim has a matching vanilla animation that is version "
				f"{self.reference.version.label}!"
			)
		return None

	#============================
	def _check_final_frame_index(self) -> SafetyRating:
		if self.reference.metadata is None or self.candidate.metadata is None:
			return SafetyRating.warning("Can't validate modified file, its header was not decoded")
		reference_index = self.reference.metadata.final_frame_index
		candidate_index = self.candidate.metadata.final_frame_index
		if reference_index != candidate_index:
			return SafetyRating.unsafe(
				f"The modified anim has a final_frame_index of `{candidate_index}`, while the "
				f"matching vanilla anim has a final_frame_index of `{reference_index}`"
			)
		return None

	#============================
	def _check_transform_groups(self) -> SafetyRating:
		reference_group = self.reference.find_group(GroupType.TRANSFORM)
		candidate_group = self.candidate.find_group(GroupType.TRANSFORM)
		if reference_group is None and candidate_group is None:
			return None
		if candidate_group is None:
			return SafetyRating.unsafe(
				"The modified anim has no transform group but the vanilla anim does!"
			)
		if reference_group is None:
			return SafetyRating.warning(
				"The modified anim has a transform group but the vanilla anim has none, "
				"review it manually"
			)
		for reference_node in reference_group.nodes:
			candidate_node = candidate_group.find_node(reference_node.name)
			if candidate_node is None:
				return SafetyRating.unsafe(
					f"The modified anim is missing the transform track for bone {reference_node.name}!",
					bone=reference_node.name
				)
			rating = self._compare_bone(reference_node, candidate_node)
			if rating is not None:
				return rating
		return None

	#============================
	def _compare_bone(self, reference_node: Node, candidate_node: Node) -> SafetyRating:
		bone = reference_node.name
		if len(reference_node.tracks) == 0:
			self._skip_bone(bone, "it has no tracks")
			return None
		reference_values = reference_node.tracks[0].values
		if reference_values is None:
			return SafetyRating.warning(
				f"Can't validate bone `{bone}`, the vanilla track values were not decoded"
			)
		if reference_values.is_empty:
			self._skip_bone(bone, "its track has no values")
			return None
		if reference_values.kind is not GroupType.TRANSFORM:
			self._skip_bone(bone, f"its track holds {reference_values.kind.label} values")
			return None

		if len(candidate_node.tracks) == 0:
			return SafetyRating.unsafe(
				f"The modified anim has no transform track for bone {bone}!", bone=bone
			)
		candidate_values = candidate_node.tracks[0].values
		if candidate_values is None:
			return SafetyRating.warning(
				f"Can't validate bone `{bone}`, the modified track values were not decoded"
			)
		if not candidate_values.is_empty and candidate_values.kind is not GroupType.TRANSFORM:
			return SafetyRating.unsafe(
				f"The modified anim has {candidate_values.kind.label} values in the "
				f"transform track for bone {bone}!", bone=bone
			)
		if len(candidate_values) != len(reference_values):
			return SafetyRating.unsafe(
				f"The modified anim has a transform track for bone {bone} with "
				f"{len(candidate_values)} values, but the reference has {len(reference_values)}!",
				bone=bone, expected=len(reference_values), actual=len(candidate_values)
			)
		pairs = zip(reference_values.samples, candidate_values.samples)
		for index, (reference_value, candidate_value) in enumerate(pairs):
			if reference_value != candidate_value:
				return SafetyRating.unsafe(
					f"The modified anim has different values than the vanilla for bone `{bone}` "
					f"at frame {index}: vanilla `{reference_value}`, modified `{candidate_value}`",
					bone=bone, frame=index, expected=reference_value, actual=candidate_value
				)
		return None

	#============================
	def _skip_bone(self, bone: str, why: str) -> None:
		self.skipped_bones.append(bone)
		utils.note(f"NOTE: Skipping bone `{bone}` of the vanilla anim, {why}.")
		return

#============================================

def validate(reference: Container, candidate: Container) -> SafetyRating:
	"""
	Rate whether candidate is equivalent to reference where it must be.

	Never raises for a well-formed pair of containers; anything that blocks
	a confident answer is a WARNING.
	"""
	validator = AnimValidator(reference, candidate)
	return validator.validate()
