"""syncit — copy, mirror and sync directory trees, locally or over SFTP"""

__version__ = "0.1.0"
