"""User-facing settings - persisted to ~/.config/eventgraph/settings.json.

Covers the editor defaults (node size, cycle policy) and logging.

Hard-coded values that are plausible candidates to move here in the future:
  - Port size and wire tangent (PORT_SIZE, WIRE_TANGENT)
  - Canvas grid step (currently 40)
"""

import json
import logging
from pathlib import Path

log = logging.getLogger(__name__)

CONFIG_PATH = Path.home() / '.config' / 'eventgraph' / 'settings.json'

DEFAULTS = {
    'node_width': 150.0,     # used for kinds without their own default size
    'node_height': 60.0,
    'allow_cycles': True,    # False = refuse links that close a loop
    'log_level': 'INFO',
    'log_dir': '',           # empty string = console only
}


def _as_bool(value) -> bool:
    if isinstance(value, str):
        return value.strip().lower() in ('1', 'true', 'yes', 'on')
    return bool(value)


class Settings:
    def __init__(self, path=None):
        self.path = Path(path) if path else CONFIG_PATH
        self.node_width: float = DEFAULTS['node_width']
        self.node_height: float = DEFAULTS['node_height']
        self.allow_cycles: bool = DEFAULTS['allow_cycles']
        self.log_level: str = DEFAULTS['log_level']
        self.log_dir: str = DEFAULTS['log_dir']
        self._load()

    @property
    def node_size(self) -> tuple[float, float]:
        return self.node_width, self.node_height

    def _load(self):
        if not self.path.exists():
            return
        try:
            with open(self.path) as f:
                d = json.load(f)
        except (OSError, ValueError) as e:
            log.warning("Could not read settings %s: %s", self.path, e)
            return
        if not isinstance(d, dict):
            log.warning("Ignoring settings %s: not a JSON object", self.path)
            return

        for key, attr, conv in (
            ('node_width', 'node_width', float),
            ('node_height', 'node_height', float),
            ('allow_cycles', 'allow_cycles', _as_bool),
            ('log_level', 'log_level', lambda v: str(v).upper()),
            ('log_dir', 'log_dir', str),
        ):
            if key not in d:
                continue
            try:
                setattr(self, attr, conv(d[key]))
            except (TypeError, ValueError):
                log.warning("Bad value for %r in %s; keeping %r",
                            key, self.path, getattr(self, attr))

    def save(self):
        """Persist current settings to the user config file."""
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            with open(self.path, 'w') as f:
                json.dump({
                    'node_width': self.node_width,
                    'node_height': self.node_height,
                    'allow_cycles': self.allow_cycles,
                    'log_level': self.log_level,
                    'log_dir': self.log_dir,
                }, f, indent=2)
        except OSError as e:
            log.warning("Could not write settings %s: %s", self.path, e)  # non-fatal
