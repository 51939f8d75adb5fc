"""
Articles app for the Format Converter.

Provides the article content store, body rendering, and the article page
that carries the format toggle.
"""
