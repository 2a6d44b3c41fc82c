"""fademerge — merge video clips with fade-to-black transitions.

Orders a batch of clips by their numeric name prefix, plans per-clip
fade-in/fade-out windows at every boundary, builds an ffmpeg filter graph
(fades feeding a single concat), and drives ffmpeg to produce one MP4.
"""
