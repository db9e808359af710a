"""View state synchronizer for renderers."""
