"""
Initializes the 'src' directory as a Python package.

This lets scripts in the project's root directory, such as 'main.py', import
the 'fontselect' package as `src.fontselect` without installing it.
"""
