"""Core utilities and shared infrastructure.

- config: Configuration loading and validation
- constants: Service coordinates, error codes, retry timings
- exceptions: Accessor exception taxonomy
"""
