"""
Ad Wall Backend

A small REST service behind a classified-ads bulletin board: ads CRUD,
click counters, a form-configuration document and video uploads.
"""

__version__ = "1.0.0"
