"""Year-at-a-glance planner: grid layout, event stacking and PDF rendering."""

# Registers the VISUAL and LAYOUT log levels before any module logs with them.
import almanac.logger  # noqa: F401

__version__ = "0.1.0"
