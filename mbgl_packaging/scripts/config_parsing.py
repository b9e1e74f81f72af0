import configparser
from dataclasses import dataclass, fields, replace

import yaml
from loguru import logger

from mbgl_packaging.core.errors import ConfigError

INI_SECTION = 'packaging'
LOG_LEVELS = ('DEBUG', 'INFO', 'WARNING', 'ERROR')


@dataclass(frozen=True)
class PackagerConfig:
	manifest: str = 'package.json'
	lib_dir: str = './lib'
	output_dir: str = '.'
	binary_name: str = 'mbgl.node'
	abi_prefix: str = 'node-v'
	log_level: str = 'INFO'

	def merged(self, **overrides):
		# None means "not given on the command line"
		return replace(self, **{k: v for k, v in overrides.items() if v is not None})


class ConfigParser:
	def __init__(self, config_path):
		self.config_path = str(config_path)

	def parse(self):
		if self.config_path.endswith('.yaml') or self.config_path.endswith('.yml'):
			raw = self._parse_yaml()
		elif self.config_path.endswith('.ini'):
			raw = self._parse_ini()
		else:
			raise ConfigError(f"Unsupported config file type: {self.config_path}")
		known = {f.name for f in fields(PackagerConfig)}
		values = {}
		for key, value in raw.items():
			if key not in known:
				logger.warning(f"Ignoring unknown config key '{key}' in {self.config_path}")
				continue
			values[key] = str(value)
		if 'log_level' in values:
			level = values['log_level'].upper()
			if level not in LOG_LEVELS:
				raise ConfigError(
					f"Invalid log_level '{values['log_level']}' in {self.config_path}, expected one of {', '.join(LOG_LEVELS)}"
				)
			values['log_level'] = level
		return PackagerConfig(**values)

	def _parse_yaml(self):
		try:
			with open(self.config_path, 'r') as f:
				data = yaml.safe_load(f)
		except OSError as e:
			raise ConfigError(f"Cannot read config {self.config_path}: {e}")
		except yaml.YAMLError as e:
			raise ConfigError(f"Invalid YAML in {self.config_path}: {e}")
		if data is None:
			return {}
		if not isinstance(data, dict):
			raise ConfigError(f"Config {self.config_path} must be a mapping")
		return data

	def _parse_ini(self):
		parser = configparser.ConfigParser()
		try:
			read = parser.read(self.config_path)
		except configparser.Error as e:
			raise ConfigError(f"Invalid INI in {self.config_path}: {e}")
		if not read:
			raise ConfigError(f"Cannot read config {self.config_path}")
		if not parser.has_section(INI_SECTION):
			return {}
		return dict(parser.items(INI_SECTION))
