"""
Test doubles for prakasa_env tests.

MockCommandExecutor replays canned outcomes instead of running wsl,
powershell or nvidia-smi; MockLogger records what was logged.
"""

from tests.fixtures.mock_executor import ExecutedCommand, MockCommandExecutor
from tests.fixtures.mock_logger import MockLogger

__all__ = [
    'ExecutedCommand',
    'MockCommandExecutor',
    'MockLogger',
]
