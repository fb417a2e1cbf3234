"""Page configuration files and loaders.

Labels, calendar and budget settings live in ``studio.json`` so they can be
changed without touching the pages.
"""

from .defaults import load_config, get_studio_config, get_config_value

__all__ = ['load_config', 'get_studio_config', 'get_config_value']
