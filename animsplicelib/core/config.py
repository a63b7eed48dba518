#!/usr/bin/env python3

import os
import yaml
from animsplicelib.core import utils
from animsplicelib.core.errors import ConfigError

DEFAULT_EXTENSION = '.nuanmb'
# j02 marks victory screen animations
DEFAULT_SKIP_PREFIXES = ('j02',)
KNOWN_KEYS = ('extension', 'skip_prefixes', 'quiet')

#============================================

class DriverConfig():
	def __init__(self, extension: str = DEFAULT_EXTENSION,
		skip_prefixes: tuple = DEFAULT_SKIP_PREFIXES, quiet: bool = False):
		self.extension = utils.normalize_extension(extension)
		self.skip_prefixes = tuple(skip_prefixes)
		self.quiet = quiet

	#============================
	def should_skip(self, filename: str) -> bool:
		for prefix in self.skip_prefixes:
			if filename.startswith(prefix):
				return True
		return False

#============================================

class ConfigLoader():
	def __init__(self, yaml_file: str = None):
		self.yaml_file = yaml_file

	#============================
	def load(self) -> DriverConfig:
		if self.yaml_file is None:
			return DriverConfig()
		data = self._load_yaml()
		self._validate_keys(data)
		extension = data.get('extension', DEFAULT_EXTENSION)
		if not isinstance(extension, str):
			raise ConfigError("extension must be a string")
		skip_prefixes = self._parse_skip_prefixes(data.get('skip_prefixes', DEFAULT_SKIP_PREFIXES))
		quiet = data.get('quiet', False)
		if not isinstance(quiet, bool):
			raise ConfigError("quiet must be true or false")
		try:
			return DriverConfig(extension=extension, skip_prefixes=skip_prefixes, quiet=quiet)
		except RuntimeError as exc:
			raise ConfigError(str(exc))

	#============================
	def _load_yaml(self) -> dict:
		if not os.path.isfile(self.yaml_file):
			raise ConfigError(f"config file not found: {self.yaml_file}")
		file_size = os.path.getsize(self.yaml_file)
		if file_size > 10 ** 6:
			raise ConfigError("config yaml file is larger than 1MB")
		with open(self.yaml_file, 'r') as data_file:
			try:
				data = yaml.safe_load(data_file)
			except yaml.YAMLError as exc:
				raise ConfigError(f"config yaml could not be parsed: {exc}")
		if data is None:
			return {}
		if not isinstance(data, dict):
			raise ConfigError("config yaml must be a mapping at the top level")
		return data

	#============================
	def _validate_keys(self, data: dict) -> None:
		for key in data:
			if key not in KNOWN_KEYS:
				raise ConfigError(f"unknown config key: {key}")

	#============================
	def _parse_skip_prefixes(self, raw_prefixes) -> tuple:
		if raw_prefixes is None:
			return ()
		if isinstance(raw_prefixes, str):
			return (raw_prefixes,)
		if not isinstance(raw_prefixes, (list, tuple)):
			raise ConfigError("skip_prefixes must be a list of strings")
		prefixes = []
		for prefix in raw_prefixes:
			if not isinstance(prefix, str) or prefix == "":
				raise ConfigError("skip_prefixes entries must be non-empty strings")
			prefixes.append(prefix)
		return tuple(prefixes)

#============================================

def load_config(yaml_file: str = None) -> DriverConfig:
	return ConfigLoader(yaml_file).load()
