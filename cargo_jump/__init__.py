"""cargo-jump: bump only the workspace packages that changed."""
