"""VTK writing and comparison."""
