import unittest
import sys
import os

# Add the parent directory to the Python path so we can import the ai_cli package
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

# Import all test modules
from tests.test_scanner import TestCodeBlockScanner, TestTerminalRenderer
from tests.test_store import TestConversationStore
from tests.test_client import TestProviderClient
from tests.test_orchestrator import TestPromptHelpers, TestOrchestrator
from tests.test_cli import TestCLI

if __name__ == '__main__':
    # Create a test suite with all test cases
    test_suite = unittest.TestSuite()

    # Add test cases from each module
    for case in (
        TestCodeBlockScanner,
        TestTerminalRenderer,
        TestConversationStore,
        TestProviderClient,
        TestPromptHelpers,
        TestOrchestrator,
        TestCLI,
    ):
        test_suite.addTests(unittest.TestLoader().loadTestsFromTestCase(case))

    # Run the tests
    runner = unittest.TextTestRunner(verbosity=2)
    result = runner.run(test_suite)
    sys.exit(0 if result.wasSuccessful() else 1)
