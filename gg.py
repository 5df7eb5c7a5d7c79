#!/usr/bin/env python3
"""
GitGud — a Git wrapper with AI-generated commit messages.
Entry point script.
"""
import sys
import os

# Add 'src' to sys.path so we can import the package
sys.path.insert(0, os.path.join(os.path.dirname(__file__), "src"))

from gitgud.main import main

if __name__ == "__main__":
    main()
