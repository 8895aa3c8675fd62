"""
Revdiff - Configuration Revision Diff Tool

Shows differences between two revisions of a unit's configuration data,
either as a line-numbered annotated view or as a git-style unified diff.

Quick Start:
    pip install -e .
    revdiff files old.yaml new.yaml -u
"""

from revdiff.cli.cli import main

if __name__ == "__main__":
    main()
