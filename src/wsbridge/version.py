from __future__ import annotations


__all__ = ["tag", "version"]


# When tagging a release, set `released = True`.
# After tagging a release, set `released = False` and increment `tag`.

released = False

tag = version = "0.3"
