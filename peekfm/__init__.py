"""peek-fm: a terminal file browser with inline document previews."""

__version__ = "0.1.0"
