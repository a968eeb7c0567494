"""
functest Test Suite

Test categories:
- test_actions.py - Action classification
- test_framework.py - Suite declaration and execution
- test_builders.py - Suite and case builders (series/parallel)
- test_request.py - Request pipeline and capture
- test_transport.py - aiohttp transport against a local server
- test_resource.py - Resource assertions
- test_orchestrator.py - File runs and stats aggregation
- test_loader.py, test_config.py, test_logs.py, test_cli.py
"""
