"""
Entry point for python -m git_tag_version

Allows running the package as a module:
    python -m git_tag_version
"""

from .cli import main

if __name__ == '__main__':
    main()
