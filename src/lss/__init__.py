"""lss — local, offline secret scanner for file trees and git history."""

__version__ = "0.3.0"
