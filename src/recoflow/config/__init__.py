"""Configuration loading for recoflow jobs.

The configuration language is plain YAML extended with a few directives:

- `include`: one or more files (relative to the including file or found in
  one of the `RECOFLOW_CONFIG_PATH` directories) merged below the current one
- `override`: dot-path assignments applied after all includes are merged
- `remove`: dot-paths deleted after all includes are merged

The resulting dictionary is what the :class:`recoflow.Driver` consumes.
"""

from .errors import *
from .load import load_config, load_config_file, resolve_config_path
from .operations import deep_merge, parse_value, set_nested_value
