"""
Localized sitemap and robots.txt generation service
"""

__version__ = "1.0.0"
