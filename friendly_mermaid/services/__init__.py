"""Long-running services around the compile pipeline."""
