"""Post-processing of rendered SVG output."""
