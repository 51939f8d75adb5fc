"""
Conversion app for the Format Converter.

Rewrites articles to AP style through a text-generation API and caches the
result per article.
"""
