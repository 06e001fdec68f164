"""
Kix: a small dynamically typed scripting language with first-class
functions, lexical closures and a statically resolved scope model.
"""

__version__ = "0.1.0"
