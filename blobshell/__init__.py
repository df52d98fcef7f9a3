"""
blobshell - command line access to multi-provider blob storage.
"""

__version__ = "0.1.0"
