"""Feature modules: library sources, query engine, random selection, payload resolution."""
