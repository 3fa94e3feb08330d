"""
A customizable bash/zsh prompt

``loco-pilot`` renders a single-line shell prompt showing the current user,
host, and working directory along with the status of the current Git
repository, in one of several layouts and with user-configurable colors.

Features:

- Four prompt layouts: default, minimal, info (with a timestamp), and emoji
- Automatically shortens the current directory path if it gets too long
- Shows the current Git branch, whether the working tree is dirty, and how far
  the branch is ahead of or behind its upstream
- Colors for each part of the prompt can be set with ``loco-pilot config``
- Supports both Bash and zsh
"""

import logging

__version__ = "0.1.0"
__author__ = "Aasish Sudarsanan"
__license__ = "MIT"

logging.getLogger(__name__).addHandler(logging.NullHandler())
