"""Domain layer – scenes, segmentation state, errors and the style catalog."""
