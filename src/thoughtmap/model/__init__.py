"""
The MODEL layer contains the domain records and the observable view-model.
Nothing in here knows how thoughts are drawn; the scene only reads from it
and pushes position changes back through MindMapViewModel.
"""
