"""Application layer – storyboard pipeline and the segmentation core (cursor, reconciler, retry)."""
