"""
Book Cricket - page-flip cricket scoring engine
"""
__version__ = "0.1.0"
