"""Content pipeline: turns a product requirements document into a fact-checked blog post."""

__version__ = "0.1.0"
