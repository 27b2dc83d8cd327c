"""
dealer-vision Test Suite

This package contains all automated tests for dealer-vision.

Structure:
- unit/: Fast, isolated unit tests (fake pages, no browser or network)
- integration/: Tests against a real browser
- e2e/: End-to-end tests (slow, expensive: live site + Gemini)
"""
