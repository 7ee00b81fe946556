"""Test package for Prime Cards.

Engine tests drive the core modules with a fake clock and never touch
pygame. UI smoke tests run pygame with the dummy video and audio drivers so
no real window opens. Run ``pytest`` from the project root.
"""
