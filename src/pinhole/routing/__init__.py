"""Routing — compiled route table with O(path-depth) matching.

Routes are registered during setup and compiled into an immutable
lookup structure when the app freezes. ``static_paths`` flattens the
table into the paths the image crawler can render without request data.
"""
