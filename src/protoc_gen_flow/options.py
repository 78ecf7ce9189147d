"""Plugin options carried in the request's parameter string.

protoc fills CodeGeneratorRequest.parameter from ``--flow_opt=...`` or the
``OPTS:`` part of ``--flow_out=OPTS:DIR``. The string is a comma-separated
list of ``key=value`` pairs:

  skip         prefix | well_known | requested   (default: prefix)
  skip_prefix  number of leading files dropped by skip=prefix (default: 3)
  unsupported  placeholder | warn | fail          (default: placeholder)
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict

from protoc_gen_flow.errors import OptionsError

SKIP_PREFIX = "prefix"
SKIP_WELL_KNOWN = "well_known"
SKIP_REQUESTED = "requested"
SKIP_MODES = (SKIP_PREFIX, SKIP_WELL_KNOWN, SKIP_REQUESTED)

UNSUPPORTED_PLACEHOLDER = "placeholder"
UNSUPPORTED_WARN = "warn"
UNSUPPORTED_FAIL = "fail"
UNSUPPORTED_POLICIES = (UNSUPPORTED_PLACEHOLDER, UNSUPPORTED_WARN, UNSUPPORTED_FAIL)

# protoc has historically placed the transitively imported well-known type
# files first in the request.
DEFAULT_SKIP_PREFIX = 3


@dataclass
class PluginOptions:
    skip: str = SKIP_PREFIX
    skip_prefix: int = DEFAULT_SKIP_PREFIX
    unsupported: str = UNSUPPORTED_PLACEHOLDER


def _split_parameter(parameter: str) -> Dict[str, str]:
    values: Dict[str, str] = {}
    for chunk in parameter.split(","):
        chunk = chunk.strip()
        if not chunk:
            continue
        key, sep, value = chunk.partition("=")
        key = key.strip()
        if not sep or not key:
            raise OptionsError(f"Malformed option '{chunk}', expected key=value")
        values[key] = value.strip()
    return values


def parse_options(parameter: str) -> PluginOptions:
    """Build PluginOptions from a raw parameter string.

    Raises OptionsError on unknown keys or values.
    """
    options = PluginOptions()
    for key, value in _split_parameter(parameter or "").items():
        if key == "skip":
            if value not in SKIP_MODES:
                raise OptionsError(
                    f"Unknown skip mode '{value}'. Expected one of: {', '.join(SKIP_MODES)}"
                )
            options.skip = value
        elif key == "skip_prefix":
            try:
                count = int(value)
            except ValueError:
                raise OptionsError(f"skip_prefix must be an integer, got '{value}'") from None
            if count < 0:
                raise OptionsError(f"skip_prefix must not be negative, got {count}")
            options.skip_prefix = count
        elif key == "unsupported":
            if value not in UNSUPPORTED_POLICIES:
                raise OptionsError(
                    f"Unknown unsupported policy '{value}'. "
                    f"Expected one of: {', '.join(UNSUPPORTED_POLICIES)}"
                )
            options.unsupported = value
        else:
            raise OptionsError(f"Unknown option '{key}'")
    return options
