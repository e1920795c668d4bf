"""
Sweet Shop test suites package.

Kept importable so page objects and the framework can be reused from
`run_tests.py`, IDE navigation and CI module imports.

Targets the public demo site only; no secrets live here.
"""
