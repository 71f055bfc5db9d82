"""Qt view layer: scene, sprites, view widget and main window."""
