#!/usr/bin/env python3

#============================================

class AnimSpliceError(RuntimeError):
	"""Base class for every failure raised by animsplicelib."""

#============================================

class UnsupportedVersionError(AnimSpliceError):
	def __init__(self, which: str, version=None):
		self.which = which
		self.version = version
		label = version.label if version is not None else "legacy"
		super().__init__(f"{label} {which} anim not supported!")

#============================================

class MalformedSourceError(AnimSpliceError):
	"""
	A decoded container violates an offset/size or type invariant.

	This points at bad upstream data, not at the merge logic.
	"""

#============================================

class DecodeError(AnimSpliceError):
	def __init__(self, message: str, path: str = None):
		self.path = path
		if path is not None:
			message = f"could not read anim `{path}`: {message}"
		super().__init__(message)

#============================================

class EncodeError(AnimSpliceError):
	def __init__(self, message: str, path: str = None):
		self.path = path
		if path is not None:
			message = f"could not output the new anim to `{path}`: {message}"
		super().__init__(message)

#============================================

class ConfigError(AnimSpliceError):
	"""Driver misconfiguration that stops a whole run."""
