"""Command implementations behind the `rewardtree` CLI."""
