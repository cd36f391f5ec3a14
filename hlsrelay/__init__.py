"""
hlsrelay: an HLS relay that resolves watch-page manifests and proxies
playlists and segments through itself.
"""

__version__ = "0.1.0"
