import json
from dataclasses import dataclass
from pathlib import Path

from mbgl_packaging.core.errors import ManifestError


@dataclass(frozen=True)
class PackageMetadata:
	name: str
	version: str


def read_manifest(manifest_path):
	path = Path(manifest_path)
	try:
		with open(path, 'r', encoding='utf-8') as f:
			data = json.load(f)
	except FileNotFoundError:
		raise ManifestError(f"Manifest not found: {path}")
	except json.JSONDecodeError as e:
		raise ManifestError(f"Manifest {path} is not valid JSON: {e}")
	if not isinstance(data, dict):
		raise ManifestError(f"Manifest {path} must contain a JSON object")
	fields = {}
	for key in ('name', 'version'):
		value = data.get(key)
		if not isinstance(value, str) or not value:
			raise ManifestError(f"Manifest {path} is missing a string '{key}' field")
		fields[key] = value
	return PackageMetadata(**fields)
