"""
Qt-free scene logic: reconciliation, placement and the camera.
Kept apart from the view so it can be exercised without a running QApplication.
"""
