"""Building blocks: the generator, the codec and their plumbing."""
