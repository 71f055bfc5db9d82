"""
ThoughtMap
==========
Interactive 2D mind map: thought nodes, their connections, and the
gestures that move them around.
"""
__version__ = "0.1.0"
