"""
pew - dump source files or a whole directory into one markdown document.

This package walks a directory tree, drops paths matched by the built-in
ignore patterns or the project's ``.pewc`` rules file, skips binary content,
and renders a directory tree plus every remaining file as a fenced code block
ready to paste into a large language model.
"""

__version__ = "0.1.0"
__author__ = "pew contributors"
