"""
Test suite for PyFastPix package.

This test suite covers:
- Import tests for all modules and submodules
- Unit tests for validation, geometry, the pool and both rasterizers
- Integration tests for complete workflows
- GPU/Taichi functionality tests

Run with: pytest
"""
