"""Reserved names and literal values shared across oeuvre.

Every attribute and element the composition engine consumes lives under the
``oeuvre-`` prefix. Loaders and the renderer import their spellings from here.

Examples
--------
>>> from oeuvre import _constants
>>> _constants.SLOT_ELEMENT.startswith(_constants.RESERVED_PREFIX)
True
>>> _constants.DEFAULT_CONFIG_NAME
'site.toml'
"""

RESERVED_PREFIX = "oeuvre-"

# Root attributes
NAME_ATTR = "oeuvre-name"
TEMPLATE_ATTR = "oeuvre-template"
PATH_ATTR = "oeuvre-path"

# Attributes on page children and markers
SLOT_ATTR = "oeuvre-slot"
SNIPPET_ATTR = "oeuvre-snippet"

# Marker elements
INCLUDE_ELEMENT = "oeuvre-include"
SLOT_ELEMENT = "oeuvre-slot"
FRAGMENT_ELEMENT = "oeuvre-fragment"

DOCTYPE_HEADER = "<!DOCTYPE html>\r\n"
DEFAULT_CONFIG_NAME = "site.toml"
