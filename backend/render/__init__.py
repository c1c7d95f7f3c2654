"""
Rendering adapter seam.

The engine talks to the map through `RenderAdapter`; `InMemoryMapRenderer` is the
headless implementation used by the HTTP shell and tests.
"""
